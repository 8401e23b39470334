# routes/orders.py
import io
from typing import List, Optional

import pandas as pd
from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from api_service import ApiError, MarketplaceApi, handle_api_error
from crud import order as crud_order
from dependencies import get_api, require_subscription
from services.session import flash
from templating import render
from utils import filter_orders, format_date, get_logger, status_text

logger = get_logger("orders")

router = APIRouter(
    prefix="/orders",
    tags=["Orders"],
    dependencies=[Depends(require_subscription)],
)

NEXT_STATUS = {
    "pending": "confirmed",
    "confirmed": "shipped",
    "shipped": "delivered",
}

STATUS_ACTIONS = {
    "confirmed": "Confirmar Pedido",
    "shipped": "Marcar como Enviado",
    "delivered": "Marcar como Entregue",
    "cancelled": "Cancelar Pedido",
}


def next_statuses(status: str) -> List[str]:
    """Statuses an order can move to from its current one."""
    options = []
    if status in NEXT_STATUS:
        options.append(NEXT_STATUS[status])
    if status not in ("delivered", "cancelled"):
        options.append("cancelled")
    return options


def _redirect(request: Request, url: str, message: str, level: str = "success") -> RedirectResponse:
    response = RedirectResponse(url=url, status_code=303)
    flash(request, response, message, level)
    return response


@router.get("", response_class=HTMLResponse)
def orders_page(
    request: Request,
    q: Optional[str] = None,
    status: Optional[str] = None,
    api: MarketplaceApi = Depends(get_api),
):
    orders = crud_order.get_orders(api, limit=100)
    return render(request, "orders/list.html", {
        "title": "Pedidos",
        "orders": filter_orders(orders, q, status),
        "total": len(orders),
        "q": q or "",
        "status": status or "",
        "statuses": crud_order.ORDER_STATUSES,
    })


@router.get("/export")
def export_orders(
    request: Request,
    q: Optional[str] = None,
    status: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    api: MarketplaceApi = Depends(get_api),
):
    orders = crud_order.get_orders(api, limit=1000, start_date=start_date or None, end_date=end_date or None)
    orders = filter_orders(orders, q, status)
    if not orders:
        return _redirect(request, "/orders", "Nenhum pedido para exportar com os filtros selecionados.", "info")

    df = pd.DataFrame([
        {
            "Pedido": o.order_number,
            "Marketplace": o.marketplace or "",
            "Cliente": o.customer_name,
            "Email": o.customer_email or "",
            "Status": status_text(o.status),
            "Itens": len(o.items),
            "Subtotal": o.subtotal,
            "Frete": o.shipping_cost,
            "Total": o.total_amount,
            "Data": format_date(o.order_date or o.created_at),
        }
        for o in orders
    ])

    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name="Pedidos")
    output.seek(0)
    logger.info("[orders] exported %d orders", len(df))

    return Response(
        content=output.getvalue(),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": "attachment; filename=pedidos.xlsx"},
    )


@router.get("/{order_id}", response_class=HTMLResponse)
def order_detail(request: Request, order_id: int, api: MarketplaceApi = Depends(get_api)):
    order = crud_order.get_order(api, order_id)
    actions = [(s, STATUS_ACTIONS[s]) for s in next_statuses(order.status)]
    return render(request, "orders/detail.html", {
        "title": f"Pedido {order.order_number}",
        "order": order,
        "actions": actions,
    })


@router.post("/{order_id}/status")
def update_status(
    request: Request,
    order_id: int,
    status: str = Form(...),
    api: MarketplaceApi = Depends(get_api),
):
    try:
        crud_order.update_order_status(api, order_id, status)
    except ValueError:
        return _redirect(request, f"/orders/{order_id}", "Status invalido", "error")
    except ApiError as e:
        return _redirect(request, f"/orders/{order_id}", handle_api_error(e), "error")
    logger.info("[orders] order %s -> %s", order_id, status)
    return _redirect(request, f"/orders/{order_id}", "Status atualizado com sucesso!")


@router.post("/{order_id}/process")
def process_order(request: Request, order_id: int, api: MarketplaceApi = Depends(get_api)):
    try:
        crud_order.process_order(api, order_id)
    except ApiError as e:
        return _redirect(request, f"/orders/{order_id}", handle_api_error(e), "error")
    return _redirect(request, f"/orders/{order_id}", "Pedido enviado para processamento em segundo plano!", "info")
