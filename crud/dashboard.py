# crud/dashboard.py

from typing import Any, Dict, List

import schemas
from api_service import MarketplaceApi, items_of


def get_overview(api: MarketplaceApi) -> schemas.DashboardStats:
    return schemas.DashboardStats.model_validate(api.get("/dashboard/overview") or {})


def get_product_stats(api: MarketplaceApi) -> Dict[str, Any]:
    return api.get("/dashboard/products/stats") or {}


def get_order_stats(api: MarketplaceApi, days: int = 30) -> Dict[str, Any]:
    return api.get("/dashboard/orders/stats", params={"days": days}) or {}


def get_revenue_timeline(api: MarketplaceApi, days: int = 30) -> Any:
    return api.get("/dashboard/revenue/timeline", params={"days": days})


def get_alerts(api: MarketplaceApi) -> List[Dict[str, Any]]:
    data = api.get("/dashboard/alerts")
    if isinstance(data, dict) and isinstance(data.get("alerts"), list):
        return data["alerts"]
    return items_of(data)


def check_health(api: MarketplaceApi) -> Dict[str, Any]:
    return api.get("/health") or {}
