# utils.py
from __future__ import annotations

import logging
import re
import time
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Iterable, List, Optional, Union

from unidecode import unidecode

from config import settings


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter("[%(asctime)s] %(levelname)s %(name)s: %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel(settings.log_level.upper())
    return logger


# ---------------------------------------------------------------------------
# Number / money formatting (pt-BR)
# ---------------------------------------------------------------------------

def _to_decimal(value: Any) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return Decimal("0")


def _swap_separators(text: str) -> str:
    # 1,234.56 -> 1.234,56
    return text.replace(",", "_").replace(".", ",").replace("_", ".")


def format_currency(value: Any) -> str:
    amount = _to_decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if amount < 0 else ""
    return f"{sign}R$ {_swap_separators(f'{abs(amount):,.2f}')}"


def format_cents(cents: Optional[int]) -> str:
    """Formats an integer amount of cents as BRL; missing or zero values render as '-'."""
    if not cents:
        return "-"
    return format_currency(Decimal(cents) / 100)


def format_number(value: Any) -> str:
    amount = _to_decimal(value)
    if amount == amount.to_integral_value():
        return _swap_separators(f"{int(amount):,}")
    return _swap_separators(f"{amount:,.2f}")


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

def parse_datetime(value: Union[str, datetime, date, None]) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def format_date(value: Union[str, datetime, date, None]) -> str:
    dt = parse_datetime(value)
    return dt.strftime("%d/%m/%Y %H:%M") if dt else "-"


def format_date_short(value: Union[str, datetime, date, None]) -> str:
    dt = parse_datetime(value)
    return dt.strftime("%d/%m/%Y") if dt else "-"


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------

def truncate_text(text: Optional[str], max_length: int) -> str:
    text = text or ""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


def only_digits(value: Optional[str]) -> str:
    return re.sub(r"\D", "", value or "")


def format_cep(value: Optional[str]) -> str:
    """Brazilian postal code mask: 12345678 -> 12345-678."""
    digits = only_digits(value)[:8]
    if len(digits) > 5:
        return f"{digits[:5]}-{digits[5:]}"
    return digits


def format_card_number(value: Optional[str]) -> str:
    digits = only_digits(value)
    return " ".join(digits[i:i + 4] for i in range(0, len(digits), 4))


def normalize_search(text: Optional[str]) -> str:
    return unidecode(text or "").lower().strip()


def generate_sku(product_name: str, now_ms: Optional[int] = None) -> str:
    """
    Builds a SKU from the first four A-Z/0-9 characters of the upper-cased
    product name and the last six digits of the current timestamp in
    milliseconds. Accented letters are dropped, not transliterated.

    "Camiseta Azul" -> "CAMI-123456", "Água" -> "GUAX-123456"
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    timestamp = str(now_ms)[-6:]
    prefix = re.sub(r"[^A-Z0-9]", "", (product_name or "").upper())[:4].ljust(4, "X")
    return f"{prefix}-{timestamp}"


# ---------------------------------------------------------------------------
# Status labels
# ---------------------------------------------------------------------------

STATUS_COLORS = {
    "pending": "status-pending",
    "confirmed": "status-info",
    "shipped": "status-progress",
    "delivered": "status-ok",
    "cancelled": "status-error",
    "completed": "status-ok",
    "failed": "status-error",
    "in_progress": "status-info",
    "active": "status-ok",
    "inactive": "status-muted",
    "success": "status-ok",
    "error": "status-error",
    "synced": "status-ok",
    "paid": "status-ok",
    "approved": "status-ok",
    "rejected": "status-error",
}

STATUS_TEXTS = {
    "pending": "Pendente",
    "confirmed": "Confirmado",
    "shipped": "Enviado",
    "delivered": "Entregue",
    "cancelled": "Cancelado",
    "completed": "Concluído",
    "failed": "Falhado",
    "in_progress": "Em Progresso",
    "active": "Ativo",
    "inactive": "Inativo",
    "success": "Sucesso",
    "error": "Erro",
    "synced": "Sincronizado",
    "paid": "Pago",
    "approved": "Aprovado",
    "rejected": "Rejeitado",
    "refunded": "Reembolsado",
    "expired": "Expirado",
    "canceled": "Cancelado",
}


def status_color(status: Optional[str]) -> str:
    return STATUS_COLORS.get(status or "", "status-muted")


def status_text(status: Optional[str]) -> str:
    return STATUS_TEXTS.get(status or "", status or "")


# ---------------------------------------------------------------------------
# List filters used by the list pages
# ---------------------------------------------------------------------------

def _get(item: Any, field: str) -> Any:
    if isinstance(item, dict):
        return item.get(field)
    return getattr(item, field, None)


def _matches(item: Any, term: str, fields: Iterable[str]) -> bool:
    return any(term in normalize_search(_get(item, f)) for f in fields if _get(item, f))


def filter_products(products: List[Any], term: Optional[str]) -> List[Any]:
    term = normalize_search(term)
    if not term:
        return list(products)
    return [p for p in products if _matches(p, term, ("name", "sku", "category"))]


def filter_orders(orders: List[Any], term: Optional[str] = None, status: Optional[str] = None) -> List[Any]:
    term = normalize_search(term)
    result = list(orders)
    if term:
        result = [o for o in result if _matches(o, term, ("order_number", "customer_name", "customer_email"))]
    if status:
        result = [o for o in result if _get(o, "status") == status]
    return result


def filter_sync_logs(
    logs: List[Any],
    term: Optional[str] = None,
    status: Optional[str] = None,
    marketplace: Optional[str] = None,
    operation: Optional[str] = None,
) -> List[Any]:
    term = normalize_search(term)
    result = list(logs)
    if term:
        result = [l for l in result if _matches(l, term, ("marketplace_product_id", "error_message"))]
    if status:
        result = [l for l in result if _get(l, "status") == status]
    if marketplace:
        result = [l for l in result if _get(l, "marketplace") == marketplace]
    if operation:
        result = [l for l in result if _get(l, "operation") == operation]
    return result


__all__ = [
    "get_logger",
    "format_currency",
    "format_cents",
    "format_number",
    "parse_datetime",
    "format_date",
    "format_date_short",
    "truncate_text",
    "only_digits",
    "format_cep",
    "format_card_number",
    "normalize_search",
    "generate_sku",
    "status_color",
    "status_text",
    "filter_products",
    "filter_orders",
    "filter_sync_logs",
]
