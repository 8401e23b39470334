from typing import Any, Dict, List, Optional

import schemas
from api_service import MarketplaceApi, items_of


def get_sync_logs(
    api: MarketplaceApi,
    skip: int = 0,
    limit: int = 100,
    marketplace: Optional[str] = None,
    product_id: Optional[int] = None,
    status: Optional[str] = None,
    operation: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> List[schemas.SyncLog]:
    params = {
        "skip": skip,
        "limit": limit,
        "marketplace": marketplace,
        "product_id": product_id,
        "status": status,
        "operation": operation,
        "start_date": start_date,
        "end_date": end_date,
    }
    return [schemas.SyncLog.model_validate(l) for l in items_of(api.get("/sync-logs/", params=params))]


def get_sync_log(api: MarketplaceApi, log_id: int) -> schemas.SyncLog:
    return schemas.SyncLog.model_validate(api.get(f"/sync-logs/{log_id}"))


def delete_sync_log(api: MarketplaceApi, log_id: int) -> Any:
    return api.delete(f"/sync-logs/{log_id}")


def get_logs_by_product(api: MarketplaceApi, product_id: int) -> List[schemas.SyncLog]:
    data = api.get(f"/sync-logs/product/{product_id}/logs")
    return [schemas.SyncLog.model_validate(l) for l in items_of(data)]


def get_sync_log_stats(api: MarketplaceApi) -> Dict[str, Any]:
    return api.get("/sync-logs/stats/summary") or {}
