# routes/sync_logs.py
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from api_service import ApiError, MarketplaceApi, handle_api_error
from crud import sync_log as crud_sync_log
from dependencies import get_api, require_subscription
from services import marketplace_sync
from services.session import flash
from templating import render
from utils import filter_sync_logs

router = APIRouter(
    prefix="/sync-logs",
    tags=["Sync Logs"],
    dependencies=[Depends(require_subscription)],
)

STATUS_OPTIONS = [("", "Todos"), ("success", "Sucesso"), ("error", "Erro"), ("pending", "Pendente")]
OPERATION_OPTIONS = [
    ("", "Todas"),
    ("create", "Criar"),
    ("update", "Atualizar"),
    ("delete", "Deletar"),
    ("sync", "Sincronizar"),
]


@router.get("", response_class=HTMLResponse)
def sync_logs_page(
    request: Request,
    q: Optional[str] = None,
    status: Optional[str] = None,
    marketplace: Optional[str] = None,
    operation: Optional[str] = None,
    api: MarketplaceApi = Depends(get_api),
):
    logs = crud_sync_log.get_sync_logs(api, limit=100)
    marketplace_options = [("", "Todos")] + [(k, v["name"]) for k, v in marketplace_sync.MARKETPLACES.items()]
    return render(request, "sync_logs/list.html", {
        "title": "Logs de Sincronizacao",
        "logs": filter_sync_logs(logs, q, status, marketplace, operation),
        "total": len(logs),
        "filters": {"q": q or "", "status": status or "", "marketplace": marketplace or "", "operation": operation or ""},
        "status_options": STATUS_OPTIONS,
        "marketplace_options": marketplace_options,
        "operation_options": OPERATION_OPTIONS,
    })


@router.get("/{log_id}", response_class=HTMLResponse)
def sync_log_detail(request: Request, log_id: int, api: MarketplaceApi = Depends(get_api)):
    log = crud_sync_log.get_sync_log(api, log_id)
    return render(request, "sync_logs/detail.html", {"title": f"Log #{log.id}", "log": log})


@router.post("/{log_id}/delete")
def delete_sync_log(request: Request, log_id: int, api: MarketplaceApi = Depends(get_api)):
    response = RedirectResponse(url="/sync-logs", status_code=303)
    try:
        crud_sync_log.delete_sync_log(api, log_id)
    except ApiError as e:
        flash(request, response, handle_api_error(e), "error")
        return response
    flash(request, response, "Log excluido com sucesso!")
    return response
