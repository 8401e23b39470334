# services/marketplace_sync.py
"""
Per-marketplace sync status for a product.

Merges the merchant's connected marketplace accounts with the product's
sync status so the product page can show one button per marketplace
(not synced / synced with a link to the listing), and holds the rules of
the listing form used to publish a product on Mercado Livre.
"""
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

import schemas
from api_service import ApiError, MarketplaceApi
from crud import marketplace as crud_marketplace
from crud import product as crud_product
from utils import get_logger

logger = get_logger("marketplace_sync")

TITLE_MAX_LENGTH = 60
CONDITIONS = ("new", "used", "reconditioned")
LISTING_TYPES = ("free", "gold_special", "gold_pro")
BUYING_MODES = ("buy_it_now", "auction", "classified")

MARKETPLACES: Dict[str, Dict[str, Any]] = {
    "mercadolivre": {
        "name": "Mercado Livre",
        "emoji": "🛒",
        "color": "#FFE600",
        "logo": "https://www.logosvg.com.br/logos/mercado-livre-88.svg",
        "base_url": "https://produto.mercadolivre.com.br",
    },
    "amazon": {
        "name": "Amazon",
        "emoji": "📦",
        "color": "#FF9900",
        "logo": "https://www.logosvg.com.br/logos/amazon-2.svg",
        "base_url": None,
    },
    "magalu": {
        "name": "Magazine Luiza",
        "emoji": "🛍️",
        "color": "#0086FF",
        "logo": "https://images.seeklogo.com/logo-png/45/1/magalu-logo-png_seeklogo-452237.png",
        "base_url": None,
    },
    "shopee": {
        "name": "Shopee",
        "emoji": "🧡",
        "color": "#EE4D2D",
        "logo": "https://images.seeklogo.com/logo-png/32/1/shopee-logo-png_seeklogo-326282.png",
        "base_url": None,
    },
}

_URL_RE = re.compile(r"(https?://[^\s]+)")


def marketplace_name(marketplace: Optional[str]) -> str:
    info = MARKETPLACES.get(marketplace or "")
    return info["name"] if info else (marketplace or "")


def marketplace_emoji(marketplace: Optional[str]) -> str:
    info = MARKETPLACES.get(marketplace or "")
    return info["emoji"] if info else "🏪"


@dataclass
class MarketplaceStatus:
    marketplace: str
    connected: bool = True
    synced: bool = False
    external_id: Optional[str] = None
    external_url: Optional[str] = None

    @property
    def name(self) -> str:
        return marketplace_name(self.marketplace)

    @property
    def url(self) -> Optional[str]:
        return listing_url(self)


def _marketplace_of(entry: Any) -> Optional[str]:
    if isinstance(entry, dict):
        return entry.get("marketplace")
    return getattr(entry, "marketplace", None)


def build_sync_statuses(integrations: Iterable[Any], sync_status: Optional[Dict[str, Any]]) -> List[MarketplaceStatus]:
    """
    One status per connected integration, in the order the integrations
    were returned. A marketplace missing from the product's sync status is
    reported as connected but not synced.
    """
    entries = (sync_status or {}).get("marketplaces") or []
    by_marketplace = {}
    for entry in entries:
        key = _marketplace_of(entry)
        if key and key not in by_marketplace:
            by_marketplace[key] = entry

    statuses = []
    for integration in integrations:
        marketplace = _marketplace_of(integration)
        if not marketplace:
            continue
        entry = by_marketplace.get(marketplace) or {}
        statuses.append(MarketplaceStatus(
            marketplace=marketplace,
            connected=True,
            synced=bool(entry.get("synced")),
            external_id=entry.get("external_id") or None,
            external_url=entry.get("external_url") or entry.get("permalink") or None,
        ))
    return statuses


def load_marketplace_status(api: MarketplaceApi, product_id: int) -> List[MarketplaceStatus]:
    try:
        integrations = crud_marketplace.list_connected_integrations(api)
        if not integrations:
            return []
        sync_status = crud_product.get_sync_status(api, product_id)
    except ApiError as e:
        logger.warning("[sync-status] product %s: could not load marketplace status: %s", product_id, e)
        return []
    return build_sync_statuses(integrations, sync_status)


def listing_url(status: MarketplaceStatus) -> Optional[str]:
    if status.external_url:
        return status.external_url
    base_url = (MARKETPLACES.get(status.marketplace) or {}).get("base_url")
    if base_url and status.external_id:
        return f"{base_url}/{status.external_id}"
    return None


def build_marketplace_cards(
    integrations: Iterable[schemas.MarketplaceIntegration], ml_access: Optional[Dict[str, Any]] = None
) -> List[Dict[str, Any]]:
    integrations = list(integrations)
    connected = {i.marketplace for i in integrations}
    cards = []
    for marketplace_id, info in MARKETPLACES.items():
        if marketplace_id == "mercadolivre":
            is_connected = bool((ml_access or {}).get("has_access"))
        else:
            is_connected = marketplace_id in connected
        cards.append({
            "marketplace_id": marketplace_id,
            "name": info["name"],
            "logo": info["logo"],
            "color": info["color"],
            "is_connected": is_connected,
            "integration": find_integration(integrations, marketplace_id),
        })
    return cards


def find_integration(
    integrations: Iterable[schemas.MarketplaceIntegration], marketplace: str
) -> Optional[schemas.MarketplaceIntegration]:
    return next((i for i in integrations if i.marketplace == marketplace), None)

# --- listing form ---

@dataclass
class ListingDraft:
    title: str
    price: float = 0
    quantity: int = 0
    description: str = ""
    category_id: str = ""
    category_name: str = ""
    condition: str = "new"
    listing_type: str = "gold_special"
    buying_mode: str = "buy_it_now"
    attributes: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_product(cls, product: schemas.Product) -> "ListingDraft":
        return cls(
            title=(product.name or "")[:TITLE_MAX_LENGTH],
            price=product.price,
            quantity=product.stock_quantity,
            description=product.description or "",
        )

    def payload(self) -> Dict[str, Any]:
        return {
            "category_id": self.category_id,
            "condition": self.condition,
            "listing_type": self.listing_type,
            "buying_mode": self.buying_mode,
            "attributes": {k: v for k, v in self.attributes.items() if v},
        }


def _is_required(attribute: Dict[str, Any]) -> bool:
    return bool((attribute.get("tags") or {}).get("required"))


def _is_read_only(attribute: Dict[str, Any]) -> bool:
    return bool((attribute.get("tags") or {}).get("read_only"))


def split_attributes(attributes: List[Dict[str, Any]]) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
    """Editable category attributes as (required, optional)."""
    editable = [a for a in attributes if not _is_read_only(a)]
    return [a for a in editable if _is_required(a)], [a for a in editable if not _is_required(a)]


def validate_listing(draft: ListingDraft, attributes: List[Dict[str, Any]], is_edit: bool = False) -> List[str]:
    errors = []
    if not draft.title.strip():
        errors.append("Informe o titulo do anuncio")
    elif len(draft.title) > TITLE_MAX_LENGTH:
        errors.append(f"O titulo deve ter no maximo {TITLE_MAX_LENGTH} caracteres")
    if is_edit:
        return errors
    if not draft.category_id:
        errors.append("Selecione uma categoria do Mercado Livre")
    missing = [a.get("name") or a.get("id") for a in attributes if _is_required(a) and not draft.attributes.get(a.get("id"))]
    if missing:
        errors.append(f"Preencha os campos obrigatorios: {', '.join(missing)}")
    return errors


def split_error_link(message: str) -> Tuple[str, Optional[str]]:
    match = _URL_RE.search(message or "")
    if not match:
        return message, None
    text = _URL_RE.sub("", message, count=1).strip()
    return text, match.group(1)
