# routes/admin.py
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from api_service import ApiError, MarketplaceApi, handle_api_error
from crud import admin as crud_admin
from crud import billing as crud_billing
from dependencies import get_api
from services import subscription_access
from services.auth_guard import require_admin, safe_next
from services.session import flash
from templating import render
from utils import get_logger

logger = get_logger("admin")

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    dependencies=[Depends(require_admin)],
)

PAGE_SIZE = 20
SUBSCRIPTION_FILTERS = [("", "Todos")] + [
    (status, label) for status, (label, _) in subscription_access.STATUS_BADGES.items()
]


def _back(request: Request, back: Optional[str], message: str, level: str = "success") -> RedirectResponse:
    url = safe_next(back) if back and back.startswith("/admin") else "/admin"
    response = RedirectResponse(url=url, status_code=303)
    flash(request, response, message, level)
    return response


@router.get("", response_class=HTMLResponse)
def admin_page(
    request: Request,
    q: Optional[str] = None,
    role: Optional[str] = None,
    subscription_status: Optional[str] = None,
    page: int = 1,
    api: MarketplaceApi = Depends(get_api),
):
    page = max(page, 1)
    stats = crud_admin.get_stats(api)
    users = crud_admin.get_users(
        api,
        skip=(page - 1) * PAGE_SIZE,
        limit=PAGE_SIZE,
        role=role,
        subscription_status=subscription_status,
        search=q,
    )
    total_pages = max(1, -(-users.total // PAGE_SIZE))
    return render(request, "admin/index.html", {
        "title": "Administracao",
        "stats": stats,
        "users": users,
        "filters": {"q": q or "", "role": role or "", "subscription_status": subscription_status or ""},
        "roles": crud_admin.USER_ROLES,
        "subscription_filters": SUBSCRIPTION_FILTERS,
        "status_badge": subscription_access.status_badge,
        "page": page,
        "total_pages": total_pages,
        "back": str(request.url.path) + (f"?{request.url.query}" if request.url.query else ""),
    })


@router.get("/users/{user_id}", response_class=HTMLResponse)
def user_detail(request: Request, user_id: int, api: MarketplaceApi = Depends(get_api)):
    details = crud_admin.get_user_details(api, user_id)
    return render(request, "admin/user.html", {
        "title": f"Usuario #{user_id}",
        "user_id": user_id,
        "details": details,
        "user": details.get("user") or details,
        "subscription": details.get("subscription") or {},
        "statuses": list(subscription_access.STATUS_BADGES),
        "plans": list(subscription_access.PLAN_LABELS),
    })


@router.post("/users/{user_id}/role")
def change_role(
    request: Request, user_id: int, role: str = Form(...), back: str = Form(""), api: MarketplaceApi = Depends(get_api)
):
    try:
        crud_admin.update_user(api, user_id, role=role)
    except ValueError:
        return _back(request, back, "Role invalida", "error")
    except ApiError as e:
        return _back(request, back, handle_api_error(e) or "Erro ao atualizar role", "error")
    logger.info("[admin] user %s role -> %s", user_id, role)
    return _back(request, back, "Role atualizada com sucesso!")


@router.post("/users/{user_id}/toggle-active")
def toggle_active(
    request: Request, user_id: int, is_active: bool = Form(...), back: str = Form(""), api: MarketplaceApi = Depends(get_api)
):
    try:
        crud_admin.update_user(api, user_id, is_active=not is_active)
    except ApiError as e:
        return _back(request, back, handle_api_error(e), "error")
    return _back(request, back, "Usuario desativado" if is_active else "Usuario ativado")


@router.post("/users/{user_id}/extend-trial")
def extend_trial(request: Request, user_id: int, back: str = Form(""), api: MarketplaceApi = Depends(get_api)):
    try:
        crud_admin.extend_trial(api, user_id, days=7)
    except ApiError as e:
        return _back(request, back, handle_api_error(e), "error")
    logger.info("[admin] trial of user %s extended by 7 days", user_id)
    return _back(request, back, "Trial estendido por 7 dias!")


@router.post("/users/{user_id}/subscription")
def update_subscription(
    request: Request,
    user_id: int,
    status: str = Form(""),
    plan: str = Form(""),
    trial_ends_at: str = Form(""),
    current_period_end: str = Form(""),
    api: MarketplaceApi = Depends(get_api),
):
    data = {"status": status, "plan": plan, "trial_ends_at": trial_ends_at, "current_period_end": current_period_end}
    back = f"/admin/users/{user_id}"
    try:
        crud_admin.update_user_subscription(api, user_id, data)
    except ApiError as e:
        return _back(request, back, handle_api_error(e), "error")
    return _back(request, back, "Assinatura atualizada!")


@router.get("/payments", response_class=HTMLResponse)
def payments_page(request: Request, status: Optional[str] = None, api: MarketplaceApi = Depends(get_api)):
    payments = crud_admin.get_payments(api, status=status or None)
    return render(request, "admin/payments.html", {"title": "Pagamentos", "payments": payments, "status": status or ""})


@router.get("/subscriptions", response_class=HTMLResponse)
def subscriptions_page(
    request: Request, status: Optional[str] = None, plan: Optional[str] = None, api: MarketplaceApi = Depends(get_api)
):
    subscriptions = crud_admin.get_subscriptions(api, status=status or None, plan=plan or None)
    return render(request, "admin/subscriptions.html", {
        "title": "Assinaturas",
        "subscriptions": subscriptions,
        "status": status or "",
        "plan": plan or "",
        "status_badge": subscription_access.status_badge,
    })


@router.get("/billing", response_class=HTMLResponse)
def billing_dashboard(request: Request, api: MarketplaceApi = Depends(get_api)):
    dashboard = crud_billing.get_dashboard(api)
    return render(request, "admin/billing.html", {"title": "Faturamento", "dashboard": dashboard})
