# crud/marketplace.py

from typing import Any, Dict, List, Optional

import schemas
from api_service import MarketplaceApi, items_of

# --- Marketplace integrations ---

def get_integrations(api: MarketplaceApi) -> List[schemas.MarketplaceIntegration]:
    data = api.get("/marketplace-integrations/")
    return [schemas.MarketplaceIntegration.model_validate(i) for i in items_of(data)]


def get_integration(api: MarketplaceApi, integration_id: int) -> schemas.MarketplaceIntegration:
    return schemas.MarketplaceIntegration.model_validate(api.get(f"/marketplace-integrations/{integration_id}"))


def create_integration(api: MarketplaceApi, integration: schemas.MarketplaceIntegrationCreate) -> schemas.MarketplaceIntegration:
    data = api.post("/marketplace-integrations/", json=integration.model_dump(exclude_none=True))
    return schemas.MarketplaceIntegration.model_validate(data)


def update_integration(api: MarketplaceApi, integration_id: int, data: Dict[str, Any]) -> schemas.MarketplaceIntegration:
    return schemas.MarketplaceIntegration.model_validate(api.put(f"/marketplace-integrations/{integration_id}", json=data))


def delete_integration(api: MarketplaceApi, integration_id: int) -> Any:
    return api.delete(f"/marketplace-integrations/{integration_id}")


def test_connection(api: MarketplaceApi, integration_id: int) -> Dict[str, Any]:
    return api.post(f"/marketplace-integrations/{integration_id}/test-connection") or {}


def get_integration_stats(api: MarketplaceApi, integration_id: int) -> Dict[str, Any]:
    return api.get(f"/marketplace-integrations/{integration_id}/stats") or {}

# --- Mercado Livre OAuth integration ---

def get_ml_auth_url(api: MarketplaceApi, email: str) -> Dict[str, Any]:
    return api.get("/ml-integration/auth-url", params={"email": email}) or {}


def save_ml_integration(
    api: MarketplaceApi, seller_id: str, access_token: str, refresh_token: str = "", expires_in: int = 21600
) -> Dict[str, Any]:
    payload = {
        "seller_id": seller_id,
        "access_token": access_token,
        "refresh_token": refresh_token,
        "expires_in": expires_in,
    }
    return api.post("/ml-integration/save", json=payload) or {}


def list_connected_integrations(api: MarketplaceApi) -> List[Dict[str, Any]]:
    """Marketplace accounts connected through OAuth, as used by the product sync buttons."""
    data = api.get("/ml-integration/integrations")
    if isinstance(data, dict) and isinstance(data.get("integrations"), list):
        return data["integrations"]
    return items_of(data)

# --- Marketplace product listings ---

def sync_listing(api: MarketplaceApi, product_id: int) -> Dict[str, Any]:
    return api.post(f"/ml-products/{product_id}/sync") or {}


def unsync_listing(api: MarketplaceApi, product_id: int) -> Any:
    return api.delete(f"/ml-products/{product_id}")


def get_listing_sync_status(api: MarketplaceApi, product_id: int) -> Dict[str, Any]:
    return api.get(f"/ml-products/{product_id}/sync-status") or {}


def predict_category(api: MarketplaceApi, title: str) -> List[Dict[str, Any]]:
    data = api.get("/ml-products/categories/predict", params={"title": title}) or {}
    if isinstance(data, dict):
        return data.get("suggestions") or []
    return items_of(data)


def search_categories(api: MarketplaceApi, query: str) -> List[Dict[str, Any]]:
    data = api.get("/ml-products/categories/search", params={"q": query}) or {}
    if isinstance(data, dict):
        return data.get("categories") or []
    return items_of(data)


def get_category_attributes(api: MarketplaceApi, category_id: str) -> List[Dict[str, Any]]:
    return items_of(api.get(f"/ml-products/categories/{category_id}/attributes"))


def create_listing(api: MarketplaceApi, product_id: int, listing: Dict[str, Any]) -> Dict[str, Any]:
    return api.post(f"/ml-products/{product_id}/create", json=listing) or {}

# --- Marketplace links ---

def get_links(
    api: MarketplaceApi,
    skip: int = 0,
    limit: int = 100,
    marketplace: Optional[str] = None,
    sync_status: Optional[str] = None,
    product_id: Optional[int] = None,
) -> List[schemas.MarketplaceLink]:
    params = {"skip": skip, "limit": limit, "marketplace": marketplace, "sync_status": sync_status, "product_id": product_id}
    return [schemas.MarketplaceLink.model_validate(l) for l in items_of(api.get("/marketplace-links/", params=params))]


def get_link(api: MarketplaceApi, link_id: int) -> schemas.MarketplaceLink:
    return schemas.MarketplaceLink.model_validate(api.get(f"/marketplace-links/{link_id}"))


def create_link(api: MarketplaceApi, data: Dict[str, Any]) -> schemas.MarketplaceLink:
    return schemas.MarketplaceLink.model_validate(api.post("/marketplace-links/", json=data))


def update_link(api: MarketplaceApi, link_id: int, data: Dict[str, Any]) -> schemas.MarketplaceLink:
    return schemas.MarketplaceLink.model_validate(api.put(f"/marketplace-links/{link_id}", json=data))


def delete_link(api: MarketplaceApi, link_id: int) -> Any:
    return api.delete(f"/marketplace-links/{link_id}")


def trigger_link_sync(api: MarketplaceApi, link_id: int) -> Dict[str, Any]:
    return api.post(f"/marketplace-links/{link_id}/sync") or {}


def get_links_by_product(api: MarketplaceApi, product_id: int) -> List[schemas.MarketplaceLink]:
    data = api.get(f"/marketplace-links/product/{product_id}/links")
    return [schemas.MarketplaceLink.model_validate(l) for l in items_of(data)]


def get_link_stats(api: MarketplaceApi) -> Dict[str, Any]:
    return api.get("/marketplace-links/stats/summary") or {}
