import pytest

import schemas
from api_service import ApiError
from services import billing_state
from services.session import Session
from tests.conftest import FakeApi

PLAN = schemas.IuguPlan(id=1, identifier="pro_monthly", name="Pro", value_cents=9900)
USER = Session(token="t", user_id=1, name="Loja", email="loja@example.com")


def _subscription(**kwargs):
    return schemas.IuguSubscription(id=1, **kwargs)


def test_subscription_badge():
    assert billing_state.subscription_badge(_subscription(active=False)) == ("Cancelada", "status-muted")
    assert billing_state.subscription_badge(_subscription(active=True, suspended=True)) == ("Suspensa", "status-pending")
    assert billing_state.subscription_badge(_subscription(active=True)) == ("Ativa", "status-ok")


def test_active_subscription_ignores_suspended():
    subs = [_subscription(active=True, suspended=True), _subscription(active=False)]
    assert billing_state.active_subscription(subs) is None
    assert not billing_state.has_active_subscription(subs)
    subs.append(_subscription(active=True))
    assert billing_state.has_active_subscription(subs)


def test_available_plans_excludes_current():
    other = schemas.IuguPlan(id=2, identifier="pro_yearly", name="Pro anual")
    sub = _subscription(active=True, plan=PLAN)
    assert billing_state.available_plans([PLAN, other], sub) == [other]
    assert billing_state.available_plans([PLAN, other], _subscription(plan_id=2)) == [PLAN]
    assert billing_state.available_plans([PLAN], None) == [PLAN]


@pytest.mark.parametrize("interval, interval_type, expected", [
    (1, "months", "por mês"),
    (3, "months", "a cada 3 meses"),
    (2, "weeks", "a cada 2 semanas"),
    (1, "days", "por dia"),
    (2, "years", ""),
])
def test_interval_text(interval, interval_type, expected):
    assert billing_state.interval_text(interval, interval_type) == expected


def test_checkout_requires_card_token():
    with pytest.raises(billing_state.CheckoutError, match="cartao"):
        billing_state.checkout(FakeApi(), USER, PLAN, "credit_card")


def test_checkout_rejects_unknown_method():
    with pytest.raises(billing_state.CheckoutError):
        billing_state.checkout(FakeApi(), USER, PLAN, "bitcoin")


def test_checkout_creates_customer_when_missing():
    api = FakeApi({
        ("GET", "/billing/customers/me"): ApiError(404, "not found"),
        ("POST", "/billing/customers"): {"id": 9, "email": USER.email, "name": USER.name},
        ("POST", "/billing/subscriptions"): {"id": 5, "active": True},
    })
    subscription = billing_state.checkout(api, USER, PLAN, "credit_card", "tok_123")
    assert subscription.id == 5
    assert api.called("POST", "/billing/customers")[0][3] == {"email": USER.email, "name": USER.name}
    payload = api.called("POST", "/billing/subscriptions")[0][3]
    assert payload["plan_identifier"] == "pro_monthly"
    assert payload["customer_payment_method_id"] == "tok_123"


def test_pix_checkout_sends_no_card():
    api = FakeApi({
        ("GET", "/billing/customers/me"): {"id": 9, "email": USER.email, "name": USER.name},
        ("POST", "/billing/subscriptions"): {"id": 6},
    })
    billing_state.checkout(api, USER, PLAN, "pix", "ignored")
    assert not api.called("POST", "/billing/customers")
    assert "customer_payment_method_id" not in api.called("POST", "/billing/subscriptions")[0][3]


def test_ensure_customer_needs_name_and_email():
    api = FakeApi({("GET", "/billing/customers/me"): ApiError(404, "not found")})
    with pytest.raises(billing_state.CheckoutError, match="incompletos"):
        billing_state.ensure_customer(api, Session(token="t", email="x@example.com"))


def test_ensure_customer_propagates_other_errors():
    api = FakeApi({("GET", "/billing/customers/me"): ApiError(500, "down")})
    with pytest.raises(ApiError):
        billing_state.ensure_customer(api, USER)
