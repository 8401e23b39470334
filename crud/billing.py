# crud/billing.py

from typing import Any, Dict, List, Optional

import schemas
from api_service import MarketplaceApi, items_of

PAYMENT_METHODS = ("credit_card", "pix", "bank_slip")

# --- Customers ---

def create_customer(api: MarketplaceApi, data: Dict[str, Any]) -> schemas.IuguCustomer:
    return schemas.IuguCustomer.model_validate(api.post("/billing/customers", json=data))


def get_my_customer(api: MarketplaceApi) -> schemas.IuguCustomer:
    return schemas.IuguCustomer.model_validate(api.get("/billing/customers/me"))

# --- Plans ---

def get_plans(api: MarketplaceApi, skip: int = 0, limit: int = 100, active_only: bool = True) -> List[schemas.IuguPlan]:
    data = api.get("/billing/plans", params={"skip": skip, "limit": limit, "active_only": active_only})
    return [schemas.IuguPlan.model_validate(p) for p in items_of(data)]


def get_plan(api: MarketplaceApi, identifier: str) -> schemas.IuguPlan:
    return schemas.IuguPlan.model_validate(api.get(f"/billing/plans/{identifier}"))


def create_plan(api: MarketplaceApi, data: Dict[str, Any]) -> schemas.IuguPlan:
    return schemas.IuguPlan.model_validate(api.post("/billing/plans", json=data))

# --- Subscriptions ---

def get_my_subscriptions(api: MarketplaceApi) -> List[schemas.IuguSubscription]:
    return [schemas.IuguSubscription.model_validate(s) for s in items_of(api.get("/billing/subscriptions/me"))]


def create_subscription(
    api: MarketplaceApi,
    plan_identifier: str,
    payment_method: Optional[str] = None,
    customer_payment_method_id: Optional[str] = None,
) -> schemas.IuguSubscription:
    if payment_method and payment_method not in PAYMENT_METHODS:
        raise ValueError(f"Unsupported payment method '{payment_method}'")
    payload = {
        "plan_identifier": plan_identifier,
        "payment_method": payment_method,
        "customer_payment_method_id": customer_payment_method_id,
    }
    data = api.post("/billing/subscriptions", json={k: v for k, v in payload.items() if v is not None})
    return schemas.IuguSubscription.model_validate(data)


def suspend_subscription(api: MarketplaceApi, subscription_id: int) -> Dict[str, Any]:
    return api.post(f"/billing/subscriptions/{subscription_id}/suspend") or {}


def activate_subscription(api: MarketplaceApi, subscription_id: int) -> Dict[str, Any]:
    return api.post(f"/billing/subscriptions/{subscription_id}/activate") or {}


def change_plan(api: MarketplaceApi, subscription_id: int, new_plan_identifier: str) -> Dict[str, Any]:
    data = api.post(
        f"/billing/subscriptions/{subscription_id}/change-plan",
        json={"new_plan_identifier": new_plan_identifier},
    )
    return data or {}


def cancel_subscription(api: MarketplaceApi, subscription_id: int, reason: Optional[str] = None) -> Dict[str, Any]:
    return api.delete(f"/billing/subscriptions/{subscription_id}", json={"reason": reason}) or {}

# --- Invoices ---

def get_my_invoices(api: MarketplaceApi, skip: int = 0, limit: int = 20) -> schemas.Paginated[schemas.IuguInvoice]:
    data = api.get("/billing/invoices/me", params={"skip": skip, "limit": limit})
    if isinstance(data, list):
        data = {"items": data, "total": len(data), "skip": skip, "limit": limit}
    return schemas.Paginated[schemas.IuguInvoice].model_validate(data or {})


def get_invoice(api: MarketplaceApi, invoice_id: int) -> schemas.IuguInvoice:
    return schemas.IuguInvoice.model_validate(api.get(f"/billing/invoices/{invoice_id}"))


def create_invoice(api: MarketplaceApi, data: Dict[str, Any]) -> schemas.IuguInvoice:
    return schemas.IuguInvoice.model_validate(api.post("/billing/invoices", json=data))

# --- Admin dashboard ---

def get_dashboard(api: MarketplaceApi) -> schemas.BillingDashboard:
    return schemas.BillingDashboard.model_validate(api.get("/billing/dashboard") or {})
