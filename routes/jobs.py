# routes/jobs.py
from typing import Optional

from fastapi import APIRouter, Depends, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from api_service import ApiError, MarketplaceApi, handle_api_error
from crud import job as crud_job
from dependencies import get_api, require_subscription
from services import job_catalog, marketplace_sync
from services.session import flash
from templating import render
from utils import get_logger

logger = get_logger("jobs")

router = APIRouter(
    prefix="/jobs",
    tags=["Jobs"],
    dependencies=[Depends(require_subscription)],
)


def _redirect(request: Request, message: str, level: str = "success") -> RedirectResponse:
    response = RedirectResponse(url="/jobs", status_code=303)
    flash(request, response, message, level)
    return response


@router.get("", response_class=HTMLResponse)
def jobs_page(request: Request, status: Optional[str] = None, api: MarketplaceApi = Depends(get_api)):
    jobs = crud_job.get_jobs(api)
    try:
        stats = crud_job.get_job_stats(api)
    except ApiError as e:
        logger.warning("[jobs] stats unavailable: %s", e)
        stats = {}
    return render(request, "jobs.html", {
        "title": "Jobs",
        "jobs": job_catalog.filter_jobs(jobs, status),
        "status": status or "",
        "status_options": job_catalog.JOB_STATUSES,
        "job_kinds": job_catalog.JOB_KINDS,
        "marketplaces": marketplace_sync.MARKETPLACES,
        "stats": stats,
        "task_label": job_catalog.task_label,
        "can_retry": job_catalog.can_retry,
        "can_cancel": job_catalog.can_cancel,
    })


@router.post("/trigger/{kind}")
def trigger_job(
    request: Request,
    kind: str,
    marketplace: Optional[str] = Form(None),
    api: MarketplaceApi = Depends(get_api),
):
    if kind not in job_catalog.JOB_KINDS:
        raise HTTPException(status_code=404, detail=f"Unknown job kind '{kind}'")
    try:
        job_catalog.trigger_job(api, kind, marketplace or None)
    except ValueError:
        return _redirect(request, "Selecione um marketplace", "error")
    except ApiError as e:
        return _redirect(request, handle_api_error(e), "error")
    logger.info("[jobs] triggered %s (marketplace=%s)", kind, marketplace)
    return _redirect(request, "Job iniciado com sucesso!")


@router.post("/{job_id}/retry")
def retry_job(request: Request, job_id: str, api: MarketplaceApi = Depends(get_api)):
    try:
        crud_job.retry_job(api, job_id)
    except ApiError as e:
        return _redirect(request, handle_api_error(e), "error")
    return _redirect(request, "Job reenviado com sucesso!")


@router.post("/{job_id}/cancel")
def cancel_job(request: Request, job_id: str, api: MarketplaceApi = Depends(get_api)):
    try:
        crud_job.cancel_job(api, job_id)
    except ApiError as e:
        return _redirect(request, handle_api_error(e), "error")
    return _redirect(request, "Job cancelado com sucesso!")
