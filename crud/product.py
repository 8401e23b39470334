# crud/product.py

from typing import Any, Dict, List, Optional

import schemas
from api_service import MarketplaceApi, items_of


def get_products(
    api: MarketplaceApi,
    skip: int = 0,
    limit: int = 100,
    category: Optional[str] = None,
    is_active: Optional[bool] = None,
) -> List[schemas.Product]:
    """
    Get a page of the merchant's products, optionally filtered by category or status.
    """
    data = api.get("/products", params={"skip": skip, "limit": limit, "category": category, "is_active": is_active})
    return [schemas.Product.model_validate(p) for p in items_of(data)]


def get_product(api: MarketplaceApi, product_id: int) -> schemas.Product:
    return schemas.Product.model_validate(api.get(f"/products/{product_id}"))


def create_product(api: MarketplaceApi, product: schemas.ProductCreate) -> schemas.Product:
    data = api.post("/products", json=product.model_dump(exclude_none=True))
    return schemas.Product.model_validate(data)


def update_product(api: MarketplaceApi, product_id: int, product: schemas.ProductUpdate) -> schemas.Product:
    data = api.put(f"/products/{product_id}", json=product.model_dump(exclude_unset=True))
    return schemas.Product.model_validate(data)


def delete_product(api: MarketplaceApi, product_id: int) -> Any:
    return api.delete(f"/products/{product_id}")


def get_product_stats(api: MarketplaceApi) -> schemas.ProductStats:
    return schemas.ProductStats.model_validate(api.get("/products/stats") or {})


def sync_to_marketplace(api: MarketplaceApi, product_id: int, marketplace: str) -> Dict[str, Any]:
    return api.post(f"/products/{product_id}/sync/{marketplace}") or {}


def get_sync_status(api: MarketplaceApi, product_id: int) -> Dict[str, Any]:
    return api.get(f"/products/{product_id}/sync-status") or {}
