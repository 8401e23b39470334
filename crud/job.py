from typing import Any, Dict, List, Optional

import schemas
from api_service import MarketplaceApi, items_of


def get_jobs(api: MarketplaceApi, limit: Optional[int] = None, status: Optional[str] = None) -> List[schemas.BackgroundJob]:
    data = api.get("/jobs/", params={"limit": limit, "status": status})
    return [schemas.BackgroundJob.model_validate(j) for j in items_of(data)]


def get_job(api: MarketplaceApi, job_id: str) -> schemas.BackgroundJob:
    return schemas.BackgroundJob.model_validate(api.get(f"/jobs/{job_id}"))


def cancel_job(api: MarketplaceApi, job_id: str) -> Any:
    return api.delete(f"/jobs/{job_id}")


def retry_job(api: MarketplaceApi, job_id: str) -> Any:
    return api.post(f"/jobs/{job_id}/retry")


def sync_products(api: MarketplaceApi, marketplace: str) -> Dict[str, Any]:
    return api.post("/jobs/sync-products", params={"marketplace": marketplace}) or {}


def import_orders(api: MarketplaceApi, marketplace: str) -> Dict[str, Any]:
    return api.post("/jobs/import-orders", params={"marketplace": marketplace}) or {}


def run_inventory_analysis(api: MarketplaceApi) -> Dict[str, Any]:
    return api.post("/jobs/inventory-analysis") or {}


def run_stock_optimization(api: MarketplaceApi) -> Dict[str, Any]:
    return api.post("/jobs/stock-optimization") or {}


def send_weekly_summary(api: MarketplaceApi) -> Dict[str, Any]:
    return api.post("/jobs/send-weekly-summary") or {}


def get_job_stats(api: MarketplaceApi) -> Dict[str, Any]:
    return api.get("/jobs/stats/summary") or {}


def get_queue_stats(api: MarketplaceApi) -> Dict[str, Any]:
    return api.get("/jobs/stats/queues") or {}
