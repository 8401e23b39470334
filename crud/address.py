from typing import Any, Dict, List

import schemas
from api_service import MarketplaceApi, items_of
from utils import only_digits


def get_addresses(api: MarketplaceApi) -> List[schemas.Address]:
    data = api.get("/addresses")
    if isinstance(data, dict) and isinstance(data.get("addresses"), list):
        data = data["addresses"]
    return [schemas.Address.model_validate(a) for a in items_of(data)]


def create_address(api: MarketplaceApi, data: Dict[str, Any]) -> schemas.Address:
    return schemas.Address.model_validate(api.post("/addresses", json=data))


def update_address(api: MarketplaceApi, address_id: int, data: Dict[str, Any]) -> schemas.Address:
    return schemas.Address.model_validate(api.put(f"/addresses/{address_id}", json=data))


def delete_address(api: MarketplaceApi, address_id: int) -> Any:
    return api.delete(f"/addresses/{address_id}")


def set_default_address(api: MarketplaceApi, address_id: int) -> Any:
    return api.post(f"/addresses/{address_id}/set-default")


def search_cep(api: MarketplaceApi, cep: str) -> Dict[str, Any]:
    """Looks up street, district, city and state for a Brazilian postal code."""
    cep = only_digits(cep)
    if len(cep) != 8:
        raise ValueError("CEP deve ter 8 dígitos")
    return api.get(f"/addresses/cep/{cep}") or {}
