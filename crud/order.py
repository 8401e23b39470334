# crud/order.py

from typing import Any, Dict, List, Optional

import schemas
from api_service import MarketplaceApi, items_of

ORDER_STATUSES = ["pending", "confirmed", "shipped", "delivered", "cancelled"]


def get_orders(
    api: MarketplaceApi,
    skip: int = 0,
    limit: int = 100,
    status: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> List[schemas.Order]:
    params = {"skip": skip, "limit": limit, "status": status, "start_date": start_date, "end_date": end_date}
    return [schemas.Order.model_validate(o) for o in items_of(api.get("/orders", params=params))]


def get_order(api: MarketplaceApi, order_id: int) -> schemas.Order:
    return schemas.Order.model_validate(api.get(f"/orders/{order_id}"))


def create_order(api: MarketplaceApi, order_data: Dict[str, Any]) -> schemas.Order:
    return schemas.Order.model_validate(api.post("/orders", json=order_data))


def update_order_status(api: MarketplaceApi, order_id: int, status: str) -> Any:
    if status not in ORDER_STATUSES:
        raise ValueError(f"Unknown order status '{status}'")
    return api.put(f"/orders/{order_id}/status", json={"status": status})


def get_order_stats(api: MarketplaceApi) -> schemas.OrderStats:
    return schemas.OrderStats.model_validate(api.get("/orders/stats") or {})


def process_order(api: MarketplaceApi, order_id: int) -> Dict[str, Any]:
    """Queues the order for background processing on the API side."""
    return api.post(f"/orders/{order_id}/process") or {}
