import io

import pandas as pd

from api_service import ApiError

PRODUCTS = [
    {"id": 1, "name": "Camiseta Azul", "sku": "CAMI-000001", "price": 49.9, "stock_quantity": 10},
    {"id": 2, "name": "Caneca Preta", "sku": "CANE-000002", "price": 25, "stock_quantity": 0},
]
ORDERS = [
    {
        "id": 10, "order_number": "PED-10", "customer_name": "João Silva", "customer_email": "joao@example.com",
        "status": "pending", "subtotal": 90, "shipping_cost": 10, "total_amount": 100,
        "order_date": "2024-05-01T10:00:00", "items": [{"id": 1, "quantity": 2, "unit_price": 45}],
    },
    {
        "id": 11, "order_number": "PED-11", "customer_name": "Maria", "status": "delivered",
        "subtotal": 30, "total_amount": 30,
    },
]


def test_products_page_filters_by_search(auth_client, fake_api):
    fake_api.responses[("GET", "/products")] = PRODUCTS
    response = auth_client.get("/products?q=camiseta")
    assert response.status_code == 200
    assert "Camiseta Azul" in response.text
    assert "Caneca Preta" not in response.text


def test_inactive_subscription_is_sent_to_pricing(auth_client, fake_api):
    fake_api.responses[("GET", "/subscription/status")] = {"status": "expired"}
    response = auth_client.get("/products", follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/pricing"
    assert not fake_api.called("GET", "/products")


def test_billing_outage_does_not_block_catalog(auth_client, fake_api):
    fake_api.responses[("GET", "/subscription/status")] = ApiError(503, "billing down")
    fake_api.responses[("GET", "/products")] = PRODUCTS
    assert auth_client.get("/products").status_code == 200


def test_null_days_remaining_does_not_break_gated_pages(auth_client, fake_api):
    fake_api.responses[("GET", "/subscription/status")] = {"status": "active", "plan": "monthly", "days_remaining": None}
    fake_api.responses[("GET", "/products")] = PRODUCTS
    assert auth_client.get("/products").status_code == 200


def test_malformed_status_payload_fails_open(auth_client, fake_api):
    fake_api.responses[("GET", "/subscription/status")] = {"status": "active", "trial_ends_at": "not a date"}
    fake_api.responses[("GET", "/products")] = PRODUCTS
    assert auth_client.get("/products").status_code == 200


def test_admin_skips_subscription_check(admin_client, fake_api):
    fake_api.responses[("GET", "/subscription/status")] = {"status": "expired"}
    assert admin_client.get("/products").status_code == 200
    assert not fake_api.called("GET", "/subscription/status")


def test_create_product_generates_sku(auth_client, fake_api):
    fake_api.responses[("POST", "/products")] = {"id": 3, "name": "Camiseta Azul", "sku": "CAMI-123456"}
    response = auth_client.post(
        "/products/new",
        data={"name": "Camiseta Azul", "price": "49.90", "stock_quantity": "5"},
        follow_redirects=False,
    )
    assert response.status_code == 303
    assert response.headers["location"] == "/products/3"
    payload = fake_api.called("POST", "/products")[0][3]
    assert payload["sku"].startswith("CAMI-")
    assert "gtin_ean" not in payload


def test_unknown_marketplace_is_404(auth_client):
    response = auth_client.post("/products/1/sync/olx", follow_redirects=False)
    assert response.status_code == 404


def test_sync_with_plain_text_answer(auth_client, fake_api):
    fake_api.responses[("POST", "/ml-products/1/sync")] = "ok"
    response = auth_client.post("/products/1/sync/mercadolivre", follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/products/1"


def test_new_listing_without_category_is_rejected(auth_client, fake_api):
    fake_api.responses[("GET", "/products/1")] = PRODUCTS[0]
    response = auth_client.post("/products/1/listing/mercadolivre", data={"title": "Camiseta Azul"})
    assert response.status_code == 400
    assert "Selecione uma categoria do Mercado Livre" in response.text
    assert not fake_api.called("POST", "/ml-products/1/create")


def test_listing_edit_pushes_product_data(auth_client, fake_api):
    fake_api.responses[("GET", "/products/1")] = PRODUCTS[0]
    fake_api.responses[("POST", "/ml-products/1/sync")] = {"message": "ok"}
    response = auth_client.post(
        "/products/1/listing/mercadolivre",
        data={"title": "Camiseta Azul", "is_edit": "true"},
        follow_redirects=False,
    )
    assert response.status_code == 303
    assert response.headers["location"] == "/products/1"
    assert fake_api.called("POST", "/ml-products/1/sync")
    assert not fake_api.called("POST", "/ml-products/1/create")


def test_listing_error_with_link(auth_client, fake_api):
    fake_api.responses[("GET", "/products/1")] = PRODUCTS[0]
    fake_api.responses[("POST", "/ml-products/1/create")] = ApiError(
        400, "Configure o envio da sua conta em https://www.mercadolivre.com.br/envios"
    )
    response = auth_client.post(
        "/products/1/listing/mercadolivre",
        data={"title": "Camiseta Azul", "category_id": "MLB1", "category_name": "Camisetas"},
    )
    assert response.status_code == 400
    assert "Configure o envio da sua conta em" in response.text
    assert 'href="https://www.mercadolivre.com.br/envios"' in response.text


def test_orders_export_builds_spreadsheet(auth_client, fake_api):
    fake_api.responses[("GET", "/orders")] = ORDERS
    response = auth_client.get("/orders/export?status=pending")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/vnd.openxmlformats")
    assert "pedidos.xlsx" in response.headers["content-disposition"]
    df = pd.read_excel(io.BytesIO(response.content))
    assert list(df["Pedido"]) == ["PED-10"]
    assert df.loc[0, "Status"] == "Pendente"
    assert df.loc[0, "Itens"] == 1
    assert df.loc[0, "Total"] == 100


def test_orders_export_without_orders_redirects(auth_client, fake_api):
    fake_api.responses[("GET", "/orders")] = []
    response = auth_client.get("/orders/export", follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/orders"


def test_order_status_update(auth_client, fake_api):
    response = auth_client.post("/orders/10/status", data={"status": "shipped"}, follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/orders/10"
    assert fake_api.called("PUT", "/orders/10/status")[0][3] == {"status": "shipped"}


def test_order_status_rejects_unknown_status(auth_client, fake_api):
    auth_client.post("/orders/10/status", data={"status": "lost"}, follow_redirects=False)
    assert not fake_api.called("PUT", "/orders/10/status")


def test_missing_order_renders_error_page(auth_client, fake_api):
    fake_api.responses[("GET", "/orders/99")] = ApiError(404, "Pedido nao encontrado")
    response = auth_client.get("/orders/99")
    assert response.status_code == 404
    assert "Pedido nao encontrado" in response.text


def test_trigger_job_needs_marketplace(auth_client, fake_api):
    response = auth_client.post("/jobs/trigger/sync_products", follow_redirects=False)
    assert response.status_code == 303
    assert not fake_api.called("POST", "/jobs/sync-products")
    assert auth_client.post("/jobs/trigger/nope", follow_redirects=False).status_code == 404


def test_jobs_page_renders(auth_client, fake_api):
    fake_api.responses[("GET", "/jobs/")] = [
        {"job_id": "abc", "task_name": "import_orders", "status": "failed", "error_message": "timeout"},
    ]
    response = auth_client.get("/jobs")
    assert response.status_code == 200
    assert "Importar Pedidos" in response.text
    assert "/jobs/abc/retry" in response.text
