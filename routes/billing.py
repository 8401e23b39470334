# routes/billing.py
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from api_service import ApiError, MarketplaceApi, handle_api_error
from config import settings
from crud import billing as crud_billing
from dependencies import get_api, get_session
from services import billing_state
from services.session import Session, flash
from templating import render
from utils import get_logger

logger = get_logger("billing")

router = APIRouter(prefix="/billing", tags=["Billing"])


def _redirect(request: Request, url: str, message: str, level: str = "success") -> RedirectResponse:
    response = RedirectResponse(url=url, status_code=303)
    flash(request, response, message, level)
    return response


def _my_subscriptions(api: MarketplaceApi):
    try:
        return crud_billing.get_my_subscriptions(api)
    except ApiError as e:
        if e.status_code != 404:
            logger.warning("[billing] could not load subscriptions: %s", e)
        return []


@router.get("/plans", response_class=HTMLResponse)
def plans_page(request: Request, api: MarketplaceApi = Depends(get_api)):
    plans = crud_billing.get_plans(api, active_only=True)
    current = billing_state.active_subscription(_my_subscriptions(api))
    return render(request, "billing/plans.html", {
        "title": "Planos",
        "plans": plans,
        "current": current,
        "interval_text": billing_state.interval_text,
    })


@router.get("/checkout", response_class=HTMLResponse)
def checkout_page(request: Request, plan: Optional[str] = None, api: MarketplaceApi = Depends(get_api)):
    if not plan:
        return _redirect(request, "/billing/plans", "Selecione um plano", "warning")
    selected = billing_state.find_plan(crud_billing.get_plans(api, active_only=True), plan)
    if selected is None:
        return _redirect(request, "/billing/plans", "Plano nao encontrado", "error")
    return render(request, "billing/checkout.html", {
        "title": "Checkout",
        "plan": selected,
        "interval_text": billing_state.interval_text,
        "iugu_account_id": settings.iugu_account_id,
        "iugu_test_mode": settings.iugu_test_mode,
    })


@router.post("/checkout")
def checkout(
    request: Request,
    plan: str = Form(...),
    payment_method: str = Form("credit_card"),
    card_token: Optional[str] = Form(None),
    api: MarketplaceApi = Depends(get_api),
    session: Session = Depends(get_session),
):
    selected = billing_state.find_plan(crud_billing.get_plans(api, active_only=True), plan)
    if selected is None:
        return _redirect(request, "/billing/plans", "Plano nao encontrado", "error")
    try:
        billing_state.checkout(api, session, selected, payment_method, card_token or None)
    except billing_state.CheckoutError as e:
        return _redirect(request, f"/billing/checkout?plan={plan}", str(e), "error")
    except ApiError as e:
        return _redirect(request, f"/billing/checkout?plan={plan}", handle_api_error(e) or "Erro ao processar pagamento", "error")

    if payment_method == "pix":
        return _redirect(request, "/billing/invoices", "Assinatura criada! Aguardando pagamento via PIX...", "info")
    return _redirect(request, "/billing/subscriptions", "Assinatura criada com sucesso!")


@router.get("/subscriptions", response_class=HTMLResponse)
def subscriptions_page(request: Request, api: MarketplaceApi = Depends(get_api)):
    subscriptions = crud_billing.get_my_subscriptions(api)
    plans = crud_billing.get_plans(api, active_only=True)
    return render(request, "billing/subscriptions.html", {
        "title": "Minhas Assinaturas",
        "subscriptions": [
            {
                "subscription": s,
                "badge": billing_state.subscription_badge(s),
                "plans": billing_state.available_plans(plans, s),
            }
            for s in subscriptions
        ],
        "interval_text": billing_state.interval_text,
    })


@router.post("/subscriptions/{subscription_id}/cancel")
def cancel_subscription(
    request: Request, subscription_id: int, reason: str = Form(""), api: MarketplaceApi = Depends(get_api)
):
    try:
        crud_billing.cancel_subscription(api, subscription_id, reason or None)
    except ApiError as e:
        return _redirect(request, "/billing/subscriptions", handle_api_error(e), "error")
    logger.info("[billing] subscription %s cancelled", subscription_id)
    return _redirect(request, "/billing/subscriptions", "Assinatura cancelada com sucesso")


@router.post("/subscriptions/{subscription_id}/suspend")
def suspend_subscription(request: Request, subscription_id: int, api: MarketplaceApi = Depends(get_api)):
    try:
        crud_billing.suspend_subscription(api, subscription_id)
    except ApiError as e:
        return _redirect(request, "/billing/subscriptions", handle_api_error(e) or "Erro ao suspender assinatura", "error")
    return _redirect(request, "/billing/subscriptions", "Assinatura suspensa")


@router.post("/subscriptions/{subscription_id}/activate")
def activate_subscription(request: Request, subscription_id: int, api: MarketplaceApi = Depends(get_api)):
    try:
        crud_billing.activate_subscription(api, subscription_id)
    except ApiError as e:
        return _redirect(request, "/billing/subscriptions", handle_api_error(e) or "Erro ao ativar assinatura", "error")
    return _redirect(request, "/billing/subscriptions", "Assinatura reativada")


@router.post("/subscriptions/{subscription_id}/change-plan")
def change_plan(
    request: Request, subscription_id: int, new_plan: str = Form(...), api: MarketplaceApi = Depends(get_api)
):
    try:
        crud_billing.change_plan(api, subscription_id, new_plan)
    except ApiError as e:
        return _redirect(request, "/billing/subscriptions", handle_api_error(e), "error")
    logger.info("[billing] subscription %s moved to %s", subscription_id, new_plan)
    return _redirect(request, "/billing/subscriptions", "Plano alterado com sucesso")


@router.get("/invoices", response_class=HTMLResponse)
def invoices_page(request: Request, page: int = 1, api: MarketplaceApi = Depends(get_api)):
    page = max(page, 1)
    limit = settings.default_page_size
    invoices = crud_billing.get_my_invoices(api, skip=(page - 1) * limit, limit=limit)
    return render(request, "billing/invoices.html", {
        "title": "Faturas",
        "invoices": invoices,
        "page": page,
        "has_next": invoices.has_next or invoices.total > page * limit,
    })


@router.get("/invoices/{invoice_id}", response_class=HTMLResponse)
def invoice_detail(request: Request, invoice_id: int, api: MarketplaceApi = Depends(get_api)):
    invoice = crud_billing.get_invoice(api, invoice_id)
    return render(request, "billing/invoice_detail.html", {"title": f"Fatura #{invoice.id}", "invoice": invoice})
