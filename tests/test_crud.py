import pytest

from crud import billing, dashboard, job, marketplace, order, privacy, sync_log
from tests.conftest import FakeApi

LINK = {"id": 4, "product_id": 1, "marketplace": "mercadolivre", "marketplace_product_id": "MLB9"}


def test_marketplace_links():
    api = FakeApi({
        ("GET", "/marketplace-links/"): {"items": [LINK]},
        ("GET", "/marketplace-links/4"): LINK,
        ("POST", "/marketplace-links/"): LINK,
        ("PUT", "/marketplace-links/4"): dict(LINK, sync_status="synced"),
        ("GET", "/marketplace-links/product/1/links"): [LINK],
        ("GET", "/marketplace-links/stats/summary"): {"total": 1},
    })
    links = marketplace.get_links(api, marketplace="mercadolivre")
    assert links[0].marketplace_product_id == "MLB9"
    assert api.calls[-1][2] == {"skip": 0, "limit": 100, "marketplace": "mercadolivre", "sync_status": None, "product_id": None}
    assert marketplace.get_link(api, 4).id == 4
    assert marketplace.create_link(api, {"product_id": 1}).product_id == 1
    assert marketplace.update_link(api, 4, {"auto_sync_enabled": True}).sync_status == "synced"
    marketplace.delete_link(api, 4)
    assert marketplace.trigger_link_sync(api, 4) == {}
    assert len(marketplace.get_links_by_product(api, 1)) == 1
    assert marketplace.get_link_stats(api) == {"total": 1}
    assert api.called("DELETE", "/marketplace-links/4")
    assert api.called("POST", "/marketplace-links/4/sync")


def test_marketplace_integrations():
    integration = {"id": 2, "marketplace": "shopee"}
    api = FakeApi({
        ("GET", "/marketplace-integrations/2"): integration,
        ("PUT", "/marketplace-integrations/2"): dict(integration, auto_sync_enabled=True),
    })
    assert marketplace.get_integration(api, 2).marketplace == "shopee"
    assert marketplace.update_integration(api, 2, {"auto_sync_enabled": True}).auto_sync_enabled
    assert marketplace.get_integration_stats(api, 2) == {}
    assert marketplace.get_listing_sync_status(api, 1) == {}
    assert api.called("GET", "/marketplace-integrations/2/stats")
    assert api.called("GET", "/ml-products/1/sync-status")


def test_billing_plans_and_invoices():
    plan = {"id": 1, "identifier": "pro", "name": "Pro"}
    api = FakeApi({
        ("GET", "/billing/plans/pro"): plan,
        ("POST", "/billing/plans"): plan,
        ("POST", "/billing/invoices"): {"id": 3, "status": "pending", "total_cents": 9900},
    })
    assert billing.get_plan(api, "pro").identifier == "pro"
    assert billing.create_plan(api, {"identifier": "pro"}).name == "Pro"
    assert billing.create_invoice(api, {"email": "a@b.com"}).total_cents == 9900


def test_create_subscription_rejects_unknown_method():
    with pytest.raises(ValueError):
        billing.create_subscription(FakeApi(), "pro", payment_method="cash")


def test_dashboard_helpers():
    api = FakeApi({
        ("GET", "/dashboard/alerts"): {"alerts": [{"type": "low_stock"}]},
        ("GET", "/health"): {"status": "healthy"},
    })
    dashboard.get_revenue_timeline(api, days=7)
    assert api.calls[-1][2] == {"days": 7}
    assert dashboard.get_alerts(api) == [{"type": "low_stock"}]
    assert dashboard.check_health(api) == {"status": "healthy"}


def test_jobs_and_queues():
    api = FakeApi({("GET", "/jobs/j1"): {"job_id": "j1", "task_name": "weekly_summary", "status": "completed"}})
    assert job.get_job(api, "j1").status == "completed"
    assert job.get_queue_stats(api) == {}
    assert api.called("GET", "/jobs/stats/queues")


def test_order_privacy_and_sync_log_endpoints():
    api = FakeApi({("POST", "/orders"): {"id": 1, "order_number": "PED-1"}})
    assert order.create_order(api, {"customer_name": "Maria"}).order_number == "PED-1"
    privacy.rectify_data(api, {"name": "Maria Silva"})
    assert api.called("POST", "/privacy/rectify-data")[0][3] == {"name": "Maria Silva"}
    assert sync_log.get_sync_log_stats(api) == {}
    assert api.called("GET", "/sync-logs/stats/summary")
