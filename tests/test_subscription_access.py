from datetime import datetime, timedelta, timezone

import schemas
from services.subscription_access import (
    available_actions,
    can_start_trial,
    evaluate_access,
    plan_label,
    status_badge,
    trial_warning,
)

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _sub(**kwargs):
    return schemas.Subscription(**kwargs)


def test_no_subscription_is_sent_to_pricing():
    decision = evaluate_access(None, NOW)
    assert not decision.allowed
    assert decision.redirect_to == "/pricing"
    assert not evaluate_access(_sub(), NOW).allowed


def test_active_subscription_is_allowed():
    decision = evaluate_access(_sub(status="active", plan="monthly"), NOW)
    assert decision.allowed
    assert decision.warning is None


def test_running_trial_is_allowed_with_warning_near_the_end():
    sub = _sub(status="trial", trial_ends_at=NOW + timedelta(days=2), days_remaining=2)
    decision = evaluate_access(sub, NOW)
    assert decision.allowed
    assert "Adicione um metodo de pagamento" in decision.warning

    sub.has_payment_method = True
    assert "cobrado automaticamente" in evaluate_access(sub, NOW).warning


def test_trial_without_warning_far_from_the_end():
    sub = _sub(status="trial", trial_ends_at=NOW + timedelta(days=6), days_remaining=6)
    assert evaluate_access(sub, NOW).warning is None
    assert trial_warning(sub) is None


def test_finished_trial_is_blocked():
    sub = _sub(status="trial", trial_ends_at=(NOW - timedelta(minutes=1)).replace(tzinfo=None))
    decision = evaluate_access(sub, NOW)
    assert not decision.allowed
    assert decision.status == "expired"


def test_trial_without_end_date_is_allowed():
    sub = _sub(status="trial", trial_ends_at=None, current_period_end=NOW - timedelta(days=1), days_remaining=5)
    decision = evaluate_access(sub, NOW)
    assert decision.allowed
    assert decision.status == "trial"


def test_null_fields_in_status_payload_get_defaults():
    sub = schemas.Subscription.model_validate({"status": None, "plan": "monthly", "days_remaining": None})
    assert sub.status == "no_subscription"
    assert sub.days_remaining == 0


def test_cancelled_keeps_access_until_period_end():
    sub = _sub(status="cancelled", current_period_end=NOW + timedelta(days=10))
    assert evaluate_access(sub, NOW).allowed
    sub.current_period_end = NOW - timedelta(days=1)
    assert not evaluate_access(sub, NOW).allowed


def test_pending_payment_is_allowed_with_warning():
    decision = evaluate_access(_sub(status="pending_payment"), NOW)
    assert decision.allowed
    assert decision.warning


def test_expired_is_blocked():
    assert not evaluate_access(_sub(status="expired"), NOW).allowed


def test_available_actions():
    assert available_actions(None) == ["subscribe"]
    assert available_actions(_sub(status="trial")) == ["upgrade", "cancel"]
    assert available_actions(_sub(status="active", plan="monthly")) == ["upgrade", "cancel"]
    assert available_actions(_sub(status="active", plan="yearly")) == ["cancel"]
    assert available_actions(_sub(status="expired")) == ["subscribe"]


def test_labels():
    assert status_badge("trial") == ("Trial", "status-info")
    assert status_badge(None) == ("Sem Assinatura", "status-muted")
    assert plan_label("yearly") == "Anual"
    assert plan_label("custom") == "custom"
    assert plan_label(None) == "-"


def test_can_start_trial():
    assert can_start_trial(None)
    assert can_start_trial(_sub(status="expired"))
    assert not can_start_trial(_sub(status="trial"))
    assert not can_start_trial(_sub(status="active"))
