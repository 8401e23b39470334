# services/session.py
from dataclasses import dataclass, asdict
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from fastapi import Request, Response
from jose import jwt, JOSEError

import schemas
from config import settings
from utils import get_logger

logger = get_logger("session")

ALGORITHM = "HS256"
FLASH_COOKIE = "flash"
FLASH_LEVELS = ("success", "error", "info", "warning")


@dataclass
class Session:
    token: str
    user_id: Optional[int] = None
    name: str = ""
    email: str = ""
    role: str = "user"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def _encode(payload: Dict) -> str:
    return jwt.encode(payload, settings.session_secret, algorithm=ALGORITHM)


def _decode(value: str) -> Dict:
    return jwt.decode(value, settings.session_secret, algorithms=[ALGORITHM])


def open_session(response: Response, token: schemas.AuthToken, user: Optional[schemas.User] = None) -> Session:
    session = Session(token=token.access_token)
    if user is not None:
        session.user_id, session.name, session.email, session.role = user.id, user.name, user.email, user.role
    max_age = max(int(token.expires_in or 0), 60)
    payload = {**asdict(session), "sub": session.email, "exp": datetime.now(timezone.utc) + timedelta(seconds=max_age)}
    response.set_cookie(
        key=settings.session_cookie_name,
        value=_encode(payload),
        httponly=True,
        samesite="lax",
        max_age=max_age,
        secure=settings.cookie_secure,
    )
    return session


def read_session(request: Request) -> Optional[Session]:
    """None when the cookie is missing, expired or was not signed by us."""
    raw = request.cookies.get(settings.session_cookie_name)
    if not raw:
        return None
    try:
        payload = _decode(raw)
    except JOSEError as e:
        logger.info("[auth] rejected session cookie: %s", e)
        return None
    if not payload.get("token"):
        return None
    return Session(
        token=payload["token"],
        user_id=payload.get("user_id"),
        name=payload.get("name") or "",
        email=payload.get("email") or "",
        role=payload.get("role") or "user",
    )


def close_session(response: Response) -> None:
    response.delete_cookie(settings.session_cookie_name)


# --- flash messages ---

def read_flashes(request: Request) -> List[Dict[str, str]]:
    raw = request.cookies.get(FLASH_COOKIE)
    if not raw:
        return []
    try:
        return list(_decode(raw).get("messages") or [])
    except JOSEError:
        return []


def flash(request: Request, response: Response, message: str, level: str = "success") -> None:
    """Queues a toast shown on the next rendered page."""
    if level not in FLASH_LEVELS:
        level = "info"
    pending = getattr(request.state, "flashes", None)
    if pending is None:
        pending = read_flashes(request)
    pending.append({"level": level, "message": message})
    request.state.flashes = pending
    payload = {"messages": pending, "exp": datetime.now(timezone.utc) + timedelta(minutes=5)}
    response.set_cookie(key=FLASH_COOKIE, value=_encode(payload), httponly=True, samesite="lax", max_age=300)


def clear_flashes(response: Response) -> None:
    response.delete_cookie(FLASH_COOKIE)
