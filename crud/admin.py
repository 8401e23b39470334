from typing import Any, Dict, List, Optional

import schemas
from api_service import MarketplaceApi, items_of

USER_ROLES = ("user", "admin")


def get_stats(api: MarketplaceApi) -> schemas.AdminStats:
    return schemas.AdminStats.model_validate(api.get("/admin/stats") or {})


def get_users(
    api: MarketplaceApi,
    skip: int = 0,
    limit: int = 20,
    role: Optional[str] = None,
    subscription_status: Optional[str] = None,
    search: Optional[str] = None,
) -> schemas.Paginated[schemas.UserListItem]:
    params = {
        "skip": skip,
        "limit": limit,
        "role": role or None,
        "subscription_status": subscription_status or None,
        "search": search or None,
    }
    data = api.get("/admin/users", params=params) or {}
    if isinstance(data, list):
        data = {"items": data, "total": len(data), "skip": skip, "limit": limit}
    return schemas.Paginated[schemas.UserListItem].model_validate(data)


def get_user_details(api: MarketplaceApi, user_id: int) -> Dict[str, Any]:
    return api.get(f"/admin/users/{user_id}") or {}


def update_user(api: MarketplaceApi, user_id: int, role: Optional[str] = None, is_active: Optional[bool] = None) -> Any:
    if role is not None and role not in USER_ROLES:
        raise ValueError(f"Unknown role '{role}'")
    payload = {k: v for k, v in {"role": role, "is_active": is_active}.items() if v is not None}
    return api.put(f"/admin/users/{user_id}", json=payload)


def update_user_subscription(api: MarketplaceApi, user_id: int, data: Dict[str, Any]) -> Any:
    payload = {k: v for k, v in data.items() if v not in (None, "")}
    return api.put(f"/admin/users/{user_id}/subscription", json=payload)


def get_payments(
    api: MarketplaceApi,
    skip: int = 0,
    limit: int = 50,
    status: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> List[Dict[str, Any]]:
    params = {"skip": skip, "limit": limit, "status": status, "start_date": start_date, "end_date": end_date}
    return items_of(api.get("/admin/payments", params=params))


def get_subscriptions(
    api: MarketplaceApi, skip: int = 0, limit: int = 50, status: Optional[str] = None, plan: Optional[str] = None
) -> List[Dict[str, Any]]:
    params = {"skip": skip, "limit": limit, "status": status, "plan": plan}
    return items_of(api.get("/admin/subscriptions", params=params))


def extend_trial(api: MarketplaceApi, user_id: int, days: int = 7) -> Any:
    return api.post(f"/admin/users/{user_id}/extend-trial", params={"days": days})
