# services/billing_state.py
from typing import List, Optional

import schemas
from api_service import ApiError, MarketplaceApi
from crud import billing as crud_billing
from services.session import Session
from utils import get_logger

logger = get_logger("billing")

_INTERVAL_SINGLE = {"months": "por mês", "weeks": "por semana", "days": "por dia"}
_INTERVAL_PLURAL = {"months": "meses", "weeks": "semanas", "days": "dias"}


class CheckoutError(Exception):
    pass


def active_subscription(subscriptions: List[schemas.IuguSubscription]) -> Optional[schemas.IuguSubscription]:
    return next((s for s in subscriptions if s.active and not s.suspended), None)


def has_active_subscription(subscriptions: List[schemas.IuguSubscription]) -> bool:
    return active_subscription(subscriptions) is not None


def subscription_badge(subscription: schemas.IuguSubscription):
    if not subscription.active:
        return "Cancelada", "status-muted"
    if subscription.suspended:
        return "Suspensa", "status-pending"
    return "Ativa", "status-ok"


def available_plans(
    plans: List[schemas.IuguPlan], subscription: Optional[schemas.IuguSubscription]
) -> List[schemas.IuguPlan]:
    """Plans a subscription can be moved to."""
    if subscription is None:
        return list(plans)
    if subscription.plan is not None:
        return [p for p in plans if p.identifier != subscription.plan.identifier]
    return [p for p in plans if p.id != subscription.plan_id]


def interval_text(interval: int, interval_type: str) -> str:
    if interval == 1:
        return _INTERVAL_SINGLE.get(interval_type, "")
    unit = _INTERVAL_PLURAL.get(interval_type)
    return f"a cada {interval} {unit}" if unit else ""


def find_plan(plans: List[schemas.IuguPlan], identifier: str) -> Optional[schemas.IuguPlan]:
    return next((p for p in plans if p.identifier == identifier), None)


def ensure_customer(api: MarketplaceApi, user: Session) -> schemas.IuguCustomer:
    try:
        return crud_billing.get_my_customer(api)
    except ApiError as e:
        if e.status_code != 404:
            raise
    if not user.email or not user.name:
        raise CheckoutError("Dados do usuário incompletos")
    logger.info("[billing] creating customer for %s", user.email)
    return crud_billing.create_customer(api, {"email": user.email, "name": user.name})


def checkout(
    api: MarketplaceApi,
    user: Session,
    plan: schemas.IuguPlan,
    payment_method: str,
    card_token: Optional[str] = None,
) -> schemas.IuguSubscription:
    if payment_method == "credit_card" and not card_token:
        raise CheckoutError("Informe os dados do cartao")
    if payment_method not in crud_billing.PAYMENT_METHODS:
        raise CheckoutError("Forma de pagamento invalida")
    ensure_customer(api, user)
    subscription = crud_billing.create_subscription(
        api,
        plan.identifier,
        payment_method=payment_method,
        customer_payment_method_id=card_token if payment_method == "credit_card" else None,
    )
    logger.info("[billing] %s subscribed to %s via %s", user.email, plan.identifier, payment_method)
    return subscription
