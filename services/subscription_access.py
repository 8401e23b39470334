# services/subscription_access.py
"""
Decides whether a merchant's subscription lets them use the feature pages
(products, orders, integrations, sync logs, jobs) and which banner and
actions the subscription pages should offer.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

import schemas
from config import settings

PRICING_URL = "/pricing"

STATUS_BADGES = {
    "trial": ("Trial", "status-info"),
    "active": ("Ativo", "status-ok"),
    "cancelled": ("Cancelado", "status-muted"),
    "expired": ("Expirado", "status-error"),
    "pending_payment": ("Pagamento Pendente", "status-pending"),
    "no_subscription": ("Sem Assinatura", "status-muted"),
}

PLAN_LABELS = {
    "free_trial": "Trial Gratuito",
    "monthly": "Mensal",
    "yearly": "Anual",
}


@dataclass
class AccessDecision:
    allowed: bool
    status: str
    warning: Optional[str] = None
    redirect_to: Optional[str] = None
    expires_at: Optional[datetime] = None


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def expiration_date(subscription: Optional[schemas.Subscription]) -> Optional[datetime]:
    if subscription is None:
        return None
    if subscription.status == "trial" and subscription.trial_ends_at:
        return subscription.trial_ends_at
    return subscription.current_period_end


def trial_warning(subscription: schemas.Subscription) -> Optional[str]:
    if subscription.status != "trial" or subscription.days_remaining > settings.trial_warning_days:
        return None
    if subscription.has_payment_method:
        return "Seu trial esta acabando! Seu cartao sera cobrado automaticamente quando o trial expirar."
    return "Seu trial esta acabando! Adicione um metodo de pagamento para continuar usando apos o trial."


def evaluate_access(subscription: Optional[schemas.Subscription], now: Optional[datetime] = None) -> AccessDecision:
    now = _aware(now) or datetime.now(timezone.utc)
    if subscription is None:
        return AccessDecision(False, "no_subscription", redirect_to=PRICING_URL)

    status = subscription.status or "no_subscription"
    expires_at = _aware(expiration_date(subscription))

    if status == "active":
        return AccessDecision(True, status, expires_at=expires_at)

    if status == "trial":
        # only the trial end date can expire a trial
        trial_ends_at = _aware(subscription.trial_ends_at)
        if trial_ends_at is not None and trial_ends_at <= now:
            return AccessDecision(False, "expired", redirect_to=PRICING_URL, expires_at=expires_at)
        return AccessDecision(True, status, warning=trial_warning(subscription), expires_at=expires_at)

    if status == "pending_payment":
        return AccessDecision(
            True,
            status,
            warning="Pagamento pendente. Atualize seu metodo de pagamento para evitar a suspensao.",
            expires_at=expires_at,
        )

    if status == "cancelled":
        # access is kept until the end of the paid period
        if expires_at is not None and expires_at > now:
            return AccessDecision(True, status, warning="Sua assinatura foi cancelada.", expires_at=expires_at)
        return AccessDecision(False, status, redirect_to=PRICING_URL, expires_at=expires_at)

    return AccessDecision(False, status, redirect_to=PRICING_URL, expires_at=expires_at)


def available_actions(subscription: Optional[schemas.Subscription]) -> List[str]:
    if subscription is None or subscription.status not in ("trial", "active"):
        return ["subscribe"]
    actions = []
    if subscription.status == "trial" or subscription.plan == "monthly":
        actions.append("upgrade")
    actions.append("cancel")
    return actions


def status_badge(status: Optional[str]):
    return STATUS_BADGES.get(status or "", STATUS_BADGES["no_subscription"])


def plan_label(plan: Optional[str]) -> str:
    return PLAN_LABELS.get(plan or "", plan or "-")


def can_start_trial(subscription: Optional[schemas.Subscription]) -> bool:
    """Merchants already on a trial or paid plan go straight to the dashboard."""
    return subscription is None or subscription.status not in ("trial", "active")
