# services/job_catalog.py
from typing import Any, Dict, List, Optional

import schemas
from api_service import MarketplaceApi
from crud import job as crud_job

JOB_KINDS: Dict[str, Dict[str, Any]] = {
    "sync_products": {"label": "Sincronizar Produtos", "needs_marketplace": True},
    "import_orders": {"label": "Importar Pedidos", "needs_marketplace": True},
    "inventory_analysis": {"label": "Análise de Inventário", "needs_marketplace": False},
    "stock_optimization": {"label": "Otimização de Estoque", "needs_marketplace": False},
    "weekly_summary": {"label": "Resumo Semanal", "needs_marketplace": False},
}

JOB_STATUSES = [
    ("", "Todos"),
    ("pending", "Pendente"),
    ("in_progress", "Em Progresso"),
    ("completed", "Concluído"),
    ("failed", "Falhou"),
]


def trigger_job(api: MarketplaceApi, kind: str, marketplace: Optional[str] = None) -> Dict[str, Any]:
    if kind not in JOB_KINDS:
        raise ValueError(f"Unknown job kind '{kind}'")
    if JOB_KINDS[kind]["needs_marketplace"] and not marketplace:
        raise ValueError(f"Job '{kind}' requires a marketplace")

    if kind == "sync_products":
        return crud_job.sync_products(api, marketplace)
    if kind == "import_orders":
        return crud_job.import_orders(api, marketplace)
    if kind == "inventory_analysis":
        return crud_job.run_inventory_analysis(api)
    if kind == "stock_optimization":
        return crud_job.run_stock_optimization(api)
    return crud_job.send_weekly_summary(api)


def task_label(task_name: Optional[str]) -> str:
    kind = JOB_KINDS.get(task_name or "")
    return kind["label"] if kind else (task_name or "")


def filter_jobs(jobs: List[schemas.BackgroundJob], status: Optional[str] = None) -> List[schemas.BackgroundJob]:
    if not status:
        return list(jobs)
    return [j for j in jobs if j.status == status]


def can_retry(job: schemas.BackgroundJob) -> bool:
    return job.status == "failed"


def can_cancel(job: schemas.BackgroundJob) -> bool:
    return job.status in ("pending", "in_progress")
