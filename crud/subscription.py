from typing import Any, Dict, List, Optional

import schemas
from api_service import MarketplaceApi, items_of


def get_plans(api: MarketplaceApi) -> schemas.PricingResponse:
    return schemas.PricingResponse.model_validate(api.get("/subscription/plans") or {})


def get_status(api: MarketplaceApi) -> schemas.Subscription:
    return schemas.Subscription.model_validate(api.get("/subscription/status") or {})


def start_trial(api: MarketplaceApi, card_token: Optional[str] = None) -> schemas.StartTrialResponse:
    payload = {"card_token": card_token} if card_token else {}
    return schemas.StartTrialResponse.model_validate(api.post("/subscription/start-trial", json=payload) or {})


def upgrade(api: MarketplaceApi, plan: str, card_token: str) -> schemas.Subscription:
    data = api.post("/subscription/upgrade", json={"plan": plan, "card_token": card_token})
    return schemas.Subscription.model_validate(data or {})


def cancel(api: MarketplaceApi, reason: Optional[str] = None) -> Dict[str, Any]:
    """Returns the API message and the date until which access is kept."""
    return api.post("/subscription/cancel", json={"reason": reason}) or {}


def tokenize_card(
    api: MarketplaceApi,
    card_number: str,
    card_holder_name: str,
    expiration_month: str,
    expiration_year: str,
    cvv: str,
) -> schemas.CardTokenizeResponse:
    payload = {
        "card_number": card_number,
        "card_holder_name": card_holder_name,
        "expiration_month": expiration_month,
        "expiration_year": expiration_year,
        "cvv": cvv,
    }
    return schemas.CardTokenizeResponse.model_validate(api.post("/subscription/tokenize-card", json=payload))


def get_payment_history(api: MarketplaceApi, skip: int = 0, limit: int = 20) -> List[schemas.Payment]:
    data = api.get("/subscription/payments", params={"skip": skip, "limit": limit})
    return [schemas.Payment.model_validate(p) for p in items_of(data)]
