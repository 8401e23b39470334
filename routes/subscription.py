# routes/subscription.py
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from api_service import ApiError, MarketplaceApi, UnauthorizedError, handle_api_error
from crud import subscription as crud_subscription
from dependencies import get_api, get_session
from services import subscription_access
from services.session import Session, flash
from templating import render
from utils import get_logger, only_digits

logger = get_logger("subscription")

router = APIRouter(tags=["Subscription"])

TRIAL_STARTED = "Trial iniciado com sucesso! Voce tem 7 dias gratis."


def _redirect(request: Request, url: str, message: Optional[str] = None, level: str = "success") -> RedirectResponse:
    response = RedirectResponse(url=url, status_code=303)
    if message:
        flash(request, response, message, level)
    return response


def _current_subscription(request: Request, api: MarketplaceApi):
    if getattr(request.state, "session", None) is None:
        return None
    try:
        return crud_subscription.get_status(api)
    except UnauthorizedError:
        raise
    except ApiError as e:
        logger.warning("[billing] subscription status unavailable: %s", e)
        return None

# ---------- pricing (public) ----------

@router.get("/pricing", response_class=HTMLResponse)
def pricing_page(
    request: Request,
    plan: Optional[str] = None,
    trial: bool = False,
    api: MarketplaceApi = Depends(get_api),
):
    """
    Plan cards. `?plan=<plan>` or `?trial=1` opens the card form for the
    selected plan or for a trial with automatic billing.
    """
    pricing = crud_subscription.get_plans(api)
    subscription = _current_subscription(request, api)
    selected = next((p for p in pricing.plans if p.plan == plan), None)
    show_payment_form = request.state.session is not None and (selected is not None or trial)
    return render(request, "subscription/pricing.html", {
        "title": "Planos e Precos",
        "pricing": pricing,
        "subscription": subscription,
        "selected": selected,
        "show_payment_form": show_payment_form,
        "can_start_trial": subscription_access.can_start_trial(subscription),
    })


@router.post("/pricing/start-trial")
def start_trial(request: Request, api: MarketplaceApi = Depends(get_api)):
    if request.state.session is None:
        return _redirect(request, "/auth/register")
    if not subscription_access.can_start_trial(_current_subscription(request, api)):
        return _redirect(request, "/dashboard")
    try:
        crud_subscription.start_trial(api)
    except ApiError as e:
        return _redirect(request, "/pricing", handle_api_error(e) or "Erro ao iniciar trial", "error")
    logger.info("[billing] trial started for %s", request.state.session.email)
    return _redirect(request, "/dashboard", TRIAL_STARTED)


@router.post("/pricing/pay")
def submit_payment(
    request: Request,
    card_number: str = Form(...),
    card_holder_name: str = Form(...),
    expiration_month: str = Form(...),
    expiration_year: str = Form(...),
    cvv: str = Form(...),
    plan: str = Form(""),
    api: MarketplaceApi = Depends(get_api),
):
    """Tokenizes the card, then upgrades to `plan` or, without a plan, starts a trial with auto billing."""
    if request.state.session is None:
        return _redirect(request, "/auth/register")
    back = f"/pricing?plan={plan}" if plan else "/pricing?trial=1"
    try:
        token = crud_subscription.tokenize_card(
            api,
            card_number=only_digits(card_number),
            card_holder_name=card_holder_name.strip(),
            expiration_month=expiration_month,
            expiration_year=expiration_year,
            cvv=cvv,
        )
        if plan:
            crud_subscription.upgrade(api, plan, token.token)
            message = "Assinatura ativada com sucesso!"
        else:
            crud_subscription.start_trial(api, token.token)
            message = TRIAL_STARTED
    except ApiError as e:
        return _redirect(request, back, handle_api_error(e) or "Erro ao processar pagamento", "error")
    logger.info(
        "[billing] %s card ending %s registered for %s (plan=%s)",
        token.brand or "-", token.last_four or "-", request.state.session.email, plan or "trial",
    )
    return _redirect(request, "/dashboard", message)

# ---------- subscription status ----------

@router.get("/subscription", response_class=HTMLResponse)
def subscription_page(
    request: Request,
    api: MarketplaceApi = Depends(get_api),
    session: Session = Depends(get_session),
):
    subscription = crud_subscription.get_status(api)
    try:
        payments = crud_subscription.get_payment_history(api)
    except ApiError as e:
        logger.warning("[billing] payment history unavailable: %s", e)
        payments = []
    decision = subscription_access.evaluate_access(subscription)
    return render(request, "subscription/status.html", {
        "title": "Minha Assinatura",
        "subscription": subscription,
        "payments": payments,
        "decision": decision,
        "badge": subscription_access.status_badge(subscription.status),
        "actions": subscription_access.available_actions(subscription),
        "expires_at": subscription_access.expiration_date(subscription),
        "warning": subscription_access.trial_warning(subscription),
    })


@router.post("/subscription/cancel")
def cancel_subscription(
    request: Request,
    reason: str = Form(""),
    api: MarketplaceApi = Depends(get_api),
    session: Session = Depends(get_session),
):
    try:
        crud_subscription.cancel(api, reason or None)
    except ApiError as e:
        return _redirect(request, "/subscription", handle_api_error(e) or "Erro ao cancelar assinatura", "error")
    logger.info("[billing] %s cancelled the subscription", session.email)
    return _redirect(request, "/subscription", "Assinatura cancelada com sucesso")
