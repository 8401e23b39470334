# routes/privacy.py
import json
from datetime import datetime

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from api_service import ApiError, MarketplaceApi, handle_api_error
from crud import privacy as crud_privacy
from dependencies import get_api
from services.session import flash
from templating import render
from utils import get_logger

logger = get_logger("privacy")

router = APIRouter(prefix="/privacy", tags=["Privacy"])


def _redirect(request: Request, message: str, level: str = "success") -> RedirectResponse:
    response = RedirectResponse(url="/privacy", status_code=303)
    flash(request, response, message, level)
    return response


@router.get("", response_class=HTMLResponse)
def privacy_page(request: Request, api: MarketplaceApi = Depends(get_api)):
    policy = crud_privacy.get_policy(api)
    activities = crud_privacy.get_processing_activities(api) or {}
    if isinstance(activities, list):
        activities = {"activities": activities}
    try:
        consent = crud_privacy.get_consent_status(api)
    except ApiError as e:
        logger.warning("[privacy] consent status unavailable: %s", e)
        consent = {}
    return render(request, "privacy.html", {
        "title": "Privacidade",
        "policy": policy,
        "activities": activities.get("activities") or [],
        "consent": consent,
    })


@router.get("/export")
def export_data(request: Request, api: MarketplaceApi = Depends(get_api)):
    try:
        data = crud_privacy.export_data(api)
    except ApiError as e:
        return _redirect(request, handle_api_error(e), "error")
    filename = f"meus-dados-{datetime.now().strftime('%Y-%m-%dT%H-%M-%S')}.json"
    return Response(
        content=json.dumps(data, indent=2, ensure_ascii=False, default=str),
        media_type="application/json",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.post("/data-request")
def request_data_export(request: Request, api: MarketplaceApi = Depends(get_api)):
    try:
        crud_privacy.request_data_export(api)
    except ApiError as e:
        return _redirect(request, handle_api_error(e), "error")
    return _redirect(request, "Solicitacao registrada. Voce recebera seus dados por email.", "info")


@router.post("/delete-account")
def request_account_deletion(request: Request, api: MarketplaceApi = Depends(get_api)):
    try:
        crud_privacy.request_account_deletion(api)
    except ApiError as e:
        return _redirect(request, handle_api_error(e), "error")
    logger.info("[privacy] account deletion requested by %s", getattr(request.state.session, "email", "?"))
    return _redirect(
        request,
        "Solicitacao de exclusao enviada. Sua conta sera excluida em ate 30 dias. "
        "Voce recebera uma confirmacao por email.",
    )
