from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.templating import Jinja2Templates

import utils
from services import marketplace_sync, subscription_access
from services.session import read_flashes, clear_flashes

ROOT_DIR = Path(__file__).resolve().parent

templates = Jinja2Templates(directory=str(ROOT_DIR / "templates"))

templates.env.filters.update(
    currency=utils.format_currency,
    cents=utils.format_cents,
    number=utils.format_number,
    datetime=utils.format_date,
    date=utils.format_date_short,
    truncate_text=utils.truncate_text,
    status_color=utils.status_color,
    status_text=utils.status_text,
    cep=utils.format_cep,
    card_number=utils.format_card_number,
    marketplace_name=marketplace_sync.marketplace_name,
    marketplace_emoji=marketplace_sync.marketplace_emoji,
    plan_label=subscription_access.plan_label,
)

NAVIGATION = [
    ("Dashboard", "/dashboard"),
    ("Produtos", "/products"),
    ("Pedidos", "/orders"),
    ("Integracoes", "/integrations"),
    ("Logs de Sync", "/sync-logs"),
    ("Jobs", "/jobs"),
    ("Privacidade", "/privacy"),
    ("Planos", "/billing/plans"),
    ("Assinaturas", "/billing/subscriptions"),
    ("Faturas", "/billing/invoices"),
    ("Perfil", "/profile"),
]
ADMIN_NAVIGATION = [("Admin", "/admin")]


def render(request: Request, name: str, context: Optional[Dict[str, Any]] = None, status_code: int = 200):
    session = getattr(request.state, "session", None)
    flashes = read_flashes(request)
    ctx = {
        "session": session,
        "flashes": flashes,
        "access": getattr(request.state, "access", None),
        "navigation": NAVIGATION,
        "admin_navigation": ADMIN_NAVIGATION if session is not None and session.is_admin else [],
        "current_path": request.url.path,
    }
    ctx.update(context or {})
    response = templates.TemplateResponse(request, name, ctx, status_code=status_code)
    if flashes:
        clear_flashes(response)
    return response
