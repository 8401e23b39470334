# main.py
import sys
from pathlib import Path
from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles
from fastapi.responses import RedirectResponse
from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parent
sys.path.append(str(ROOT_DIR))

load_dotenv()

from api_service import ApiError, UnauthorizedError, handle_api_error
from services.auth_guard import RedirectRequired, login_middleware, login_redirect
from services.session import close_session, flash
from templating import render
from utils import get_logger
from routes import (
    auth, dashboard, products, orders, integrations, sync_logs, jobs,
    privacy, profile, billing, subscription, admin,
)

logger = get_logger("main")

app = FastAPI(title="Marketplace Hub")

app.mount("/static", StaticFiles(directory=str(ROOT_DIR / "static")), name="static")


@app.middleware("http")
async def add_login_middleware(request: Request, call_next):
    return await login_middleware(request, call_next)


@app.exception_handler(RedirectRequired)
async def redirect_required_handler(request: Request, exc: RedirectRequired):
    response = RedirectResponse(url=exc.url, status_code=303)
    if exc.message:
        flash(request, response, exc.message, exc.level)
    return response


@app.exception_handler(UnauthorizedError)
async def unauthorized_handler(request: Request, exc: UnauthorizedError):
    logger.info("[auth] API rejected the session token on %s", request.url.path)
    response = login_redirect(request, "Sua sessao expirou. Entre novamente.")
    close_session(response)
    return response


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    logger.warning("[api] unhandled error on %s: %s", request.url.path, exc)
    status_code = exc.status_code if exc.status_code >= 400 else 502
    return render(
        request,
        "error.html",
        {"title": "Erro", "status_code": status_code, "message": handle_api_error(exc)},
        status_code=status_code,
    )


@app.get("/", response_class=RedirectResponse, include_in_schema=False)
async def read_root():
    return RedirectResponse(url="/dashboard")


@app.get("/health", include_in_schema=False)
async def health():
    return {"status": "ok"}

# Routers
app.include_router(auth.router)
app.include_router(dashboard.router)
app.include_router(products.router)
app.include_router(orders.router)
app.include_router(integrations.router)
app.include_router(sync_logs.router)
app.include_router(jobs.router)
app.include_router(privacy.router)
app.include_router(profile.router)
app.include_router(billing.router)
app.include_router(subscription.router)
app.include_router(admin.router)
