# routes/auth.py
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from api_service import ApiError, MarketplaceApi, handle_api_error
from crud import auth as crud_auth
from dependencies import get_api
from services.auth_guard import safe_next
from services.session import close_session, flash, open_session
from templating import render
from utils import get_logger

logger = get_logger("auth")

router = APIRouter(prefix="/auth", tags=["Auth"])


def _sign_in(api: MarketplaceApi, request: Request, email: str, password: str, next_url: Optional[str]) -> RedirectResponse:
    token = crud_auth.login(api, email, password)
    user = crud_auth.get_current_user(api.with_token(token.access_token))
    response = RedirectResponse(url=safe_next(next_url), status_code=303)
    open_session(response, token, user)
    logger.info("[auth] %s signed in", user.email)
    return response


@router.get("/login", response_class=HTMLResponse)
def login_page(request: Request, next: Optional[str] = None):
    if getattr(request.state, "session", None) is not None:
        return RedirectResponse(url=safe_next(next), status_code=303)
    return render(request, "auth/login.html", {"title": "Entrar", "next": next or ""})


@router.post("/login")
def login(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    next: Optional[str] = Form(None),
    api: MarketplaceApi = Depends(get_api),
):
    try:
        response = _sign_in(api, request, email.strip(), password, next)
    except ApiError as e:
        logger.info("[auth] failed login for %s: %s", email, e)
        return render(
            request,
            "auth/login.html",
            {"title": "Entrar", "next": next or "", "email": email, "error": handle_api_error(e)},
            status_code=400,
        )
    flash(request, response, "Login realizado com sucesso!", "success")
    return response


@router.get("/register", response_class=HTMLResponse)
def register_page(request: Request):
    return render(request, "auth/register.html", {"title": "Criar conta"})


@router.post("/register")
def register(
    request: Request,
    name: str = Form(...),
    email: str = Form(...),
    password: str = Form(...),
    confirm_password: str = Form(...),
    api: MarketplaceApi = Depends(get_api),
):
    context = {"title": "Criar conta", "name": name, "email": email}
    if password != confirm_password:
        context["error"] = "As senhas nao conferem"
        return render(request, "auth/register.html", context, status_code=400)
    if len(password) < 6:
        context["error"] = "A senha deve ter pelo menos 6 caracteres"
        return render(request, "auth/register.html", context, status_code=400)
    try:
        crud_auth.register(api, email.strip(), name.strip(), password)
        response = _sign_in(api, request, email.strip(), password, "/pricing")
    except ApiError as e:
        context["error"] = handle_api_error(e)
        return render(request, "auth/register.html", context, status_code=400)
    flash(request, response, "Conta criada com sucesso!", "success")
    return response


@router.get("/logout")
def logout(request: Request):
    response = RedirectResponse(url="/auth/login", status_code=303)
    close_session(response)
    flash(request, response, "Voce saiu da sua conta.", "info")
    return response
