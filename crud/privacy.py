from typing import Any, Dict

from api_service import MarketplaceApi


def get_policy(api: MarketplaceApi) -> Dict[str, Any]:
    return api.get("/privacy/policy") or {}


def get_consent_status(api: MarketplaceApi) -> Dict[str, Any]:
    return api.get("/privacy/consent-status") or {}


def request_data_export(api: MarketplaceApi) -> Dict[str, Any]:
    return api.post("/privacy/data-request") or {}


def export_data(api: MarketplaceApi) -> Any:
    return api.get("/privacy/export-data")


def request_account_deletion(api: MarketplaceApi) -> Dict[str, Any]:
    return api.post("/privacy/delete-account") or {}


def rectify_data(api: MarketplaceApi, data: Dict[str, Any]) -> Dict[str, Any]:
    return api.post("/privacy/rectify-data", json=data) or {}


def get_processing_activities(api: MarketplaceApi) -> Any:
    return api.get("/privacy/processing-activities")
