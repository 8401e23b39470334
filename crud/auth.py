from typing import Any, Dict

import schemas
from api_service import MarketplaceApi


def login(api: MarketplaceApi, username: str, password: str) -> schemas.AuthToken:
    data = api.post("/auth/login", json={"username": username, "password": password})
    return schemas.AuthToken.model_validate(data)


def register(api: MarketplaceApi, email: str, name: str, password: str) -> schemas.User:
    data = api.post("/auth/register", json={"email": email, "name": name, "password": password})
    return schemas.User.model_validate(data)


def get_current_user(api: MarketplaceApi) -> schemas.User:
    return schemas.User.model_validate(api.get("/users/me"))


def get_ml_access(api: MarketplaceApi, email: str) -> Dict[str, Any]:
    return api.get(f"/users/ml-access/{email}") or {}
