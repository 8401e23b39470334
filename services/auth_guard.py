# services/auth_guard.py
from typing import Optional
from urllib.parse import quote

from fastapi import Request
from fastapi.responses import RedirectResponse

from config import settings
from services.session import read_session, flash
from utils import get_logger

logger = get_logger("auth")

LOGIN_URL = "/auth/login"
PUBLIC_PATHS = ["/auth/", "/static/", "/pricing", "/health", "/favicon.ico"]


class RedirectRequired(Exception):
    """Raised from dependencies to send the browser elsewhere with a toast."""

    def __init__(self, url: str, message: Optional[str] = None, level: str = "error"):
        self.url = url
        self.message = message
        self.level = level
        super().__init__(url)


def is_public(path: str) -> bool:
    return any(path.startswith(p) for p in PUBLIC_PATHS)


def login_redirect(request: Request, message: Optional[str] = None) -> RedirectResponse:
    target = request.url.path
    if request.url.query:
        target = f"{target}?{request.url.query}"
    url = LOGIN_URL if target in ("/", LOGIN_URL) else f"{LOGIN_URL}?next={quote(target, safe='')}"
    response = RedirectResponse(url=url, status_code=303)
    if message:
        flash(request, response, message, "error")
    return response


async def login_middleware(request: Request, call_next):
    session = read_session(request)
    request.state.session = session
    if is_public(request.url.path):
        return await call_next(request)
    if session is None:
        had_cookie = settings.session_cookie_name in request.cookies
        response = login_redirect(request, "Sua sessao expirou. Entre novamente." if had_cookie else None)
        if had_cookie:
            response.delete_cookie(settings.session_cookie_name)
        return response
    return await call_next(request)


def require_admin(request: Request):
    session = getattr(request.state, "session", None)
    if session is None or not session.is_admin:
        logger.info("[auth] non-admin access to %s blocked", request.url.path)
        raise RedirectRequired("/dashboard", "Acesso restrito a administradores")
    return session


def safe_next(url: Optional[str]) -> str:
    """Only same-site relative paths are accepted as post-login targets."""
    if not url or not url.startswith("/") or url.startswith("//") or url.startswith(LOGIN_URL):
        return "/dashboard"
    return url
