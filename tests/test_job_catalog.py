import pytest

import schemas
from services import job_catalog
from tests.conftest import FakeApi


def _job(status):
    return schemas.BackgroundJob(job_id="j1", task_name="sync_products", status=status)


def test_trigger_job_routes_to_endpoint():
    api = FakeApi()
    job_catalog.trigger_job(api, "sync_products", "mercadolivre")
    job_catalog.trigger_job(api, "weekly_summary")
    assert api.called("POST", "/jobs/sync-products")[0][2] == {"marketplace": "mercadolivre"}
    assert api.called("POST", "/jobs/send-weekly-summary")


def test_trigger_job_validates_input():
    with pytest.raises(ValueError):
        job_catalog.trigger_job(FakeApi(), "rebuild_everything")
    with pytest.raises(ValueError):
        job_catalog.trigger_job(FakeApi(), "import_orders")


def test_job_helpers():
    assert job_catalog.task_label("import_orders") == "Importar Pedidos"
    assert job_catalog.task_label("custom_task") == "custom_task"
    assert job_catalog.can_retry(_job("failed"))
    assert not job_catalog.can_retry(_job("completed"))
    assert job_catalog.can_cancel(_job("pending"))
    assert job_catalog.can_cancel(_job("in_progress"))
    assert not job_catalog.can_cancel(_job("failed"))
    jobs = [_job("failed"), _job("completed")]
    assert job_catalog.filter_jobs(jobs, "failed") == [jobs[0]]
    assert job_catalog.filter_jobs(jobs, "") == jobs
