# routes/integrations.py
from typing import Optional

import requests
from fastapi import APIRouter, Depends, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse

import schemas
from api_service import ApiError, MarketplaceApi, handle_api_error
from config import settings
from crud import auth as crud_auth
from crud import marketplace as crud_marketplace
from dependencies import get_api, get_session, require_subscription
from services import marketplace_sync
from services.session import Session, flash
from templating import render
from utils import get_logger

logger = get_logger("integrations")

router = APIRouter(
    tags=["Integrations"],
    dependencies=[Depends(require_subscription)],
)

SYNC_FREQUENCIES = [
    ("manual", "Manual"),
    ("hourly", "A cada hora"),
    ("daily", "Diariamente"),
    ("weekly", "Semanalmente"),
]
ML_TOKEN_DEFAULT_EXPIRES_IN = 21600


def _redirect(request: Request, url: str, message: str, level: str = "success") -> RedirectResponse:
    response = RedirectResponse(url=url, status_code=303)
    flash(request, response, message, level)
    return response


def _fetch_ml_token(seller_id: str) -> dict:
    """Token data kept by the Mercado Livre OAuth relay for a seller."""
    url = f"{settings.ml_api_url.rstrip('/')}/auth/user/{seller_id}"
    response = requests.get(url, timeout=settings.request_timeout)
    response.raise_for_status()
    return response.json()


@router.get("/integrations", response_class=HTMLResponse)
def integrations_page(
    request: Request,
    connected: Optional[str] = None,
    api: MarketplaceApi = Depends(get_api),
    session: Session = Depends(get_session),
):
    integrations = crud_marketplace.get_integrations(api)
    try:
        ml_access = crud_auth.get_ml_access(api, session.email) if session.email else {}
    except ApiError as e:
        logger.warning("[integrations] ML access check failed for %s: %s", session.email, e)
        ml_access = {}
    context = {
        "title": "Integracoes",
        "integrations": integrations,
        "cards": marketplace_sync.build_marketplace_cards(integrations, ml_access),
        "connected": connected,
    }
    return render(request, "integrations/list.html", context)


@router.get("/integrations/new", response_class=HTMLResponse)
def new_integration_page(request: Request, marketplace: str = "mercadolivre"):
    return render(request, "integrations/form.html", {
        "title": "Nova Integracao",
        "marketplaces": marketplace_sync.MARKETPLACES,
        "sync_frequencies": SYNC_FREQUENCIES,
        "form": {"marketplace": marketplace, "sync_frequency": "hourly", "auto_sync_enabled": True},
    })


@router.post("/integrations/new")
def create_integration(
    request: Request,
    marketplace: str = Form(...),
    api_key: str = Form(...),
    marketplace_account_id: str = Form(""),
    api_secret: str = Form(""),
    access_token: str = Form(""),
    refresh_token: str = Form(""),
    sync_frequency: str = Form("hourly"),
    auto_sync_enabled: bool = Form(False),
    api: MarketplaceApi = Depends(get_api),
):
    credentials = {
        "api_key": api_key.strip(),
        "api_secret": api_secret or None,
        "access_token": access_token or None,
        "refresh_token": refresh_token or None,
    }
    payload = schemas.MarketplaceIntegrationCreate(
        marketplace=marketplace,
        marketplace_account_id=marketplace_account_id or None,
        api_credentials={k: v for k, v in credentials.items() if v},
        sync_frequency=sync_frequency or None,
        auto_sync_enabled=auto_sync_enabled,
    )
    errors = []
    if marketplace not in marketplace_sync.MARKETPLACES:
        errors.append("Marketplace e obrigatorio")
    if not api_key.strip():
        errors.append("API Key e obrigatoria")
    if not errors:
        try:
            integration = crud_marketplace.create_integration(api, payload)
            logger.info("[integrations] created %s integration %s", integration.marketplace, integration.id)
            return _redirect(request, "/integrations", "Integracao criada com sucesso!")
        except ApiError as e:
            errors.append(handle_api_error(e))

    return render(request, "integrations/form.html", {
        "title": "Nova Integracao",
        "marketplaces": marketplace_sync.MARKETPLACES,
        "sync_frequencies": SYNC_FREQUENCIES,
        "form": payload.model_dump(),
        "errors": errors,
    }, status_code=400)


@router.post("/integrations/{integration_id}/test")
def test_integration(request: Request, integration_id: int, api: MarketplaceApi = Depends(get_api)):
    try:
        crud_marketplace.test_connection(api, integration_id)
    except ApiError as e:
        return _redirect(request, "/integrations", handle_api_error(e), "error")
    return _redirect(request, "/integrations", "Conexao testada com sucesso!")


@router.post("/integrations/{integration_id}/delete")
def delete_integration(request: Request, integration_id: int, api: MarketplaceApi = Depends(get_api)):
    try:
        crud_marketplace.delete_integration(api, integration_id)
    except ApiError as e:
        return _redirect(request, "/integrations", handle_api_error(e), "error")
    logger.info("[integrations] deleted integration %s", integration_id)
    return _redirect(request, "/integrations", "Integracao excluida com sucesso!")


@router.post("/integrations/disconnect/{marketplace}")
def disconnect_marketplace(request: Request, marketplace: str, api: MarketplaceApi = Depends(get_api)):
    if marketplace not in marketplace_sync.MARKETPLACES:
        raise HTTPException(status_code=404, detail=f"Marketplace '{marketplace}' not found")
    integration = marketplace_sync.find_integration(crud_marketplace.get_integrations(api), marketplace)
    if integration is None:
        return _redirect(request, "/integrations", "Nenhuma integracao encontrada para este marketplace", "warning")
    return delete_integration(request, integration.id, api)


@router.get("/integrations/connect/{marketplace}")
def connect_marketplace(marketplace: str):
    if marketplace not in marketplace_sync.MARKETPLACES:
        raise HTTPException(status_code=404, detail=f"Marketplace '{marketplace}' not found")
    if marketplace == "mercadolivre":
        return RedirectResponse(url="/integrations/mercadolivre/authorize", status_code=303)
    return RedirectResponse(url=f"/integrations/new?marketplace={marketplace}", status_code=303)


@router.get("/integrations/mercadolivre/authorize")
def authorize_mercadolivre(
    request: Request,
    api: MarketplaceApi = Depends(get_api),
    session: Session = Depends(get_session),
):
    try:
        data = crud_marketplace.get_ml_auth_url(api, session.email)
    except ApiError as e:
        return _redirect(request, "/integrations", handle_api_error(e), "error")
    auth_url = data.get("auth_url") or data.get("url")
    if not auth_url:
        return _redirect(request, "/integrations", "URL de autorizacao nao retornada", "error")
    return RedirectResponse(url=auth_url, status_code=303)


@router.get("/ml-callback")
def ml_callback(
    request: Request,
    seller_id: Optional[str] = None,
    user_id: Optional[str] = None,
    api: MarketplaceApi = Depends(get_api),
):
    seller_id = seller_id or user_id
    if not seller_id:
        return _redirect(request, "/integrations", "Erro: Seller ID nao encontrado", "error")

    try:
        token_data = _fetch_ml_token(seller_id)
    except (requests.RequestException, ValueError) as e:
        logger.warning("[integrations] ML token relay failed for seller %s: %s", seller_id, e)
        return _redirect(request, "/integrations", "Erro ao buscar dados do token", "error")

    try:
        crud_marketplace.save_ml_integration(
            api,
            seller_id=str(token_data.get("seller_id") or seller_id),
            access_token=token_data.get("access_token") or "",
            refresh_token=token_data.get("refresh_token") or "",
            expires_in=int(token_data.get("expires_in") or ML_TOKEN_DEFAULT_EXPIRES_IN),
        )
    except ApiError as e:
        return _redirect(request, "/integrations", handle_api_error(e), "error")

    logger.info("[integrations] Mercado Livre seller %s connected", seller_id)
    return _redirect(request, "/integrations", f"Conta ML {seller_id} conectada!")
