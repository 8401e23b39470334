import requests
from fastapi import Depends, Request
from pydantic import ValidationError

from api_service import MarketplaceApi, ApiError, UnauthorizedError
from crud import subscription as crud_subscription
from services.auth_guard import RedirectRequired
from services.session import Session
from services.subscription_access import AccessDecision, evaluate_access
from utils import get_logger

logger = get_logger("dependencies")

# one connection pool shared by every request
_http = requests.Session()


def get_api(request: Request) -> MarketplaceApi:
    """
    FastAPI dependency that provides a REST client authenticated as the
    merchant of the current session.
    """
    session = getattr(request.state, "session", None)
    return MarketplaceApi(token=session.token if session else None, session=_http)


def get_session(request: Request) -> Session:
    session = getattr(request.state, "session", None)
    if session is None:
        raise RedirectRequired("/auth/login")
    return session


def require_subscription(request: Request, api: MarketplaceApi = Depends(get_api)) -> AccessDecision:
    session = getattr(request.state, "session", None)
    if session is not None and session.is_admin:
        decision = AccessDecision(True, "admin")
        request.state.access = decision
        return decision
    try:
        subscription = crud_subscription.get_status(api)
    except UnauthorizedError:
        raise
    except (ApiError, ValidationError) as e:
        # billing outages must not lock merchants out of their catalog
        logger.warning("[billing] subscription status unavailable for %s: %s", request.url.path, e)
        decision = AccessDecision(True, "unknown")
        request.state.access = decision
        return decision

    decision = evaluate_access(subscription)
    if not decision.allowed:
        logger.info("[billing] %s blocked, subscription status=%s", request.url.path, decision.status)
        raise RedirectRequired(
            decision.redirect_to,
            "Sua assinatura nao esta ativa. Escolha um plano para continuar.",
            "warning",
        )
    request.state.access = decision
    return decision
