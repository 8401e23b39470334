# routes/products.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse

import schemas
from api_service import ApiError, MarketplaceApi, handle_api_error
from crud import marketplace as crud_marketplace
from crud import product as crud_product
from crud import sync_log as crud_sync_log
from dependencies import get_api, require_subscription
from services import marketplace_sync
from services.session import flash
from templating import render
from utils import generate_sku, get_logger, filter_products

logger = get_logger("products")

router = APIRouter(
    prefix="/products",
    tags=["Products"],
    dependencies=[Depends(require_subscription)],
)

# ---------- helpers ----------

def _redirect(request: Request, url: str, message: Optional[str] = None, level: str = "success") -> RedirectResponse:
    response = RedirectResponse(url=url, status_code=303)
    if message:
        flash(request, response, message, level)
    return response


def _check_marketplace(marketplace: str) -> None:
    if marketplace not in marketplace_sync.MARKETPLACES:
        raise HTTPException(status_code=404, detail=f"Marketplace '{marketplace}' not found")


def _product_form_errors(name: str, price: float, stock_quantity: int) -> List[str]:
    errors = []
    if not name.strip():
        errors.append("Informe o nome do produto")
    if price < 0:
        errors.append("O preco nao pode ser negativo")
    if stock_quantity < 0:
        errors.append("O estoque nao pode ser negativo")
    return errors


def _listing_context(
    api: MarketplaceApi,
    product: schemas.Product,
    marketplace: str,
    draft: marketplace_sync.ListingDraft,
    is_edit: bool,
    query: Optional[str] = None,
) -> dict:
    suggestions, search_results, attributes = [], [], []
    try:
        if not is_edit and not draft.category_id:
            suggestions = crud_marketplace.predict_category(api, draft.title)[:3]
        if query:
            search_results = crud_marketplace.search_categories(api, query)
        if not is_edit and draft.category_id:
            attributes = crud_marketplace.get_category_attributes(api, draft.category_id)
    except ApiError as e:
        logger.warning("[listing] category lookup failed for product %s: %s", product.id, e)
    required, optional = marketplace_sync.split_attributes(attributes)
    return {
        "title": f"Anunciar {product.name}",
        "product": product,
        "marketplace": marketplace,
        "draft": draft,
        "is_edit": is_edit,
        "query": query or "",
        "suggestions": suggestions,
        "search_results": search_results,
        "attributes": attributes,
        "required_attributes": required,
        "optional_attributes": optional,
        "conditions": marketplace_sync.CONDITIONS,
        "listing_types": marketplace_sync.LISTING_TYPES,
        "buying_modes": marketplace_sync.BUYING_MODES,
        "title_max_length": marketplace_sync.TITLE_MAX_LENGTH,
    }


def _find_status(api: MarketplaceApi, product_id: int, marketplace: str) -> Optional[marketplace_sync.MarketplaceStatus]:
    statuses = marketplace_sync.load_marketplace_status(api, product_id)
    return next((s for s in statuses if s.marketplace == marketplace), None)

# ---------- catalog ----------

@router.get("", response_class=HTMLResponse)
def products_page(
    request: Request,
    q: Optional[str] = None,
    category: Optional[str] = None,
    api: MarketplaceApi = Depends(get_api),
):
    products = crud_product.get_products(api, limit=100, category=category or None)
    return render(request, "products/list.html", {
        "title": "Produtos",
        "products": filter_products(products, q),
        "total": len(products),
        "q": q or "",
        "category": category or "",
    })


@router.get("/new", response_class=HTMLResponse)
def new_product_page(request: Request):
    return render(request, "products/form.html", {"title": "Novo Produto", "product": None, "form": {}})


@router.post("/new")
def create_product(
    request: Request,
    name: str = Form(...),
    price: float = Form(...),
    stock_quantity: int = Form(0),
    sku: str = Form(""),
    description: str = Form(""),
    category: str = Form(""),
    image_url: str = Form(""),
    api: MarketplaceApi = Depends(get_api),
):
    form = {
        "name": name, "price": price, "stock_quantity": stock_quantity, "sku": sku, "description": description,
        "category": category, "image_url": image_url,
    }
    errors = _product_form_errors(name, price, stock_quantity)
    if errors:
        return render(request, "products/form.html", {"title": "Novo Produto", "product": None, "form": form, "errors": errors}, 400)

    payload = schemas.ProductCreate(
        name=name.strip(),
        price=price,
        stock_quantity=stock_quantity,
        sku=sku.strip() or generate_sku(name),
        description=description or None,
        category=category or None,
        image_url=image_url or None,
    )
    try:
        product = crud_product.create_product(api, payload)
    except ApiError as e:
        errors = [handle_api_error(e)]
        return render(request, "products/form.html", {"title": "Novo Produto", "product": None, "form": form, "errors": errors}, 400)
    logger.info("[products] created product %s (%s)", product.id, product.sku)
    return _redirect(request, f"/products/{product.id}", "Produto criado com sucesso!")


@router.get("/{product_id}", response_class=HTMLResponse)
def product_detail(request: Request, product_id: int, api: MarketplaceApi = Depends(get_api)):
    product = crud_product.get_product(api, product_id)
    statuses = marketplace_sync.load_marketplace_status(api, product_id)
    try:
        logs = crud_sync_log.get_logs_by_product(api, product_id)[:10]
    except ApiError as e:
        logger.warning("[products] sync logs unavailable for %s: %s", product_id, e)
        logs = []
    return render(request, "products/detail.html", {
        "title": product.name,
        "product": product,
        "statuses": statuses,
        "logs": logs,
    })


@router.get("/{product_id}/edit", response_class=HTMLResponse)
def edit_product_page(request: Request, product_id: int, api: MarketplaceApi = Depends(get_api)):
    product = crud_product.get_product(api, product_id)
    return render(request, "products/form.html", {
        "title": "Editar Produto", "product": product, "form": product.model_dump(),
    })


@router.post("/{product_id}/edit")
def update_product(
    request: Request,
    product_id: int,
    name: str = Form(...),
    price: float = Form(...),
    stock_quantity: int = Form(0),
    description: str = Form(""),
    category: str = Form(""),
    image_url: str = Form(""),
    is_active: bool = Form(False),
    api: MarketplaceApi = Depends(get_api),
):
    form = {
        "id": product_id, "name": name, "price": price, "stock_quantity": stock_quantity, "description": description,
        "category": category, "image_url": image_url, "is_active": is_active,
    }
    errors = _product_form_errors(name, price, stock_quantity)
    if not errors:
        payload = schemas.ProductUpdate(
            name=name.strip(),
            price=price,
            stock_quantity=stock_quantity,
            description=description or None,
            category=category or None,
            image_url=image_url or None,
            is_active=is_active,
        )
        try:
            crud_product.update_product(api, product_id, payload)
        except ApiError as e:
            errors = [handle_api_error(e)]
    if errors:
        return render(request, "products/form.html", {"title": "Editar Produto", "product": form, "form": form, "errors": errors}, 400)
    return _redirect(request, f"/products/{product_id}", "Produto atualizado com sucesso!")


@router.post("/{product_id}/delete")
def delete_product(request: Request, product_id: int, api: MarketplaceApi = Depends(get_api)):
    try:
        crud_product.delete_product(api, product_id)
    except ApiError as e:
        return _redirect(request, f"/products/{product_id}", handle_api_error(e), "error")
    logger.info("[products] deleted product %s", product_id)
    return _redirect(request, "/products", "Produto excluido com sucesso!")

# ---------- marketplace sync ----------

@router.post("/{product_id}/sync/{marketplace}")
def sync_product(request: Request, product_id: int, marketplace: str, api: MarketplaceApi = Depends(get_api)):
    """Pushes the current product data to an existing listing."""
    _check_marketplace(marketplace)
    try:
        if marketplace == "mercadolivre":
            result = crud_marketplace.sync_listing(api, product_id)
        else:
            result = crud_product.sync_to_marketplace(api, product_id, marketplace)
    except ApiError as e:
        return _redirect(request, f"/products/{product_id}", handle_api_error(e), "error")
    message = result.get("message") if isinstance(result, dict) else None
    return _redirect(request, f"/products/{product_id}", message or "Produto sincronizado!")


@router.post("/{product_id}/unsync/{marketplace}")
def unsync_product(request: Request, product_id: int, marketplace: str, api: MarketplaceApi = Depends(get_api)):
    _check_marketplace(marketplace)
    try:
        crud_marketplace.unsync_listing(api, product_id)
    except ApiError as e:
        return _redirect(request, f"/products/{product_id}", handle_api_error(e), "error")
    logger.info("[sync-status] product %s removed from %s", product_id, marketplace)
    return _redirect(request, f"/products/{product_id}", "Produto removido do marketplace!")


@router.get("/{product_id}/open/{marketplace}")
def open_listing(request: Request, product_id: int, marketplace: str, api: MarketplaceApi = Depends(get_api)):
    _check_marketplace(marketplace)
    status = _find_status(api, product_id, marketplace)
    url = marketplace_sync.listing_url(status) if status else None
    if not url:
        return _redirect(request, f"/products/{product_id}", "Anuncio nao encontrado no marketplace", "warning")
    return RedirectResponse(url=url, status_code=303)


@router.get("/{product_id}/listing/{marketplace}", response_class=HTMLResponse)
def listing_form(
    request: Request,
    product_id: int,
    marketplace: str,
    q: Optional[str] = None,
    category_id: Optional[str] = None,
    category_name: Optional[str] = None,
    api: MarketplaceApi = Depends(get_api),
):
    """
    Listing form for publishing a product. Without a category the top
    three predicted categories are offered; `q` searches categories by
    name; picking a category loads its attributes.
    """
    _check_marketplace(marketplace)
    product = crud_product.get_product(api, product_id)
    status = _find_status(api, product_id, marketplace)
    is_edit = bool(status and status.external_id)
    draft = marketplace_sync.ListingDraft.from_product(product)
    draft.category_id = category_id or ""
    draft.category_name = category_name or ""
    return render(request, "products/listing.html", _listing_context(api, product, marketplace, draft, is_edit, q))


@router.post("/{product_id}/listing/{marketplace}")
def submit_listing(
    request: Request,
    product_id: int,
    marketplace: str,
    title: str = Form(...),
    category_id: str = Form(""),
    category_name: str = Form(""),
    condition: str = Form("new"),
    listing_type: str = Form("gold_special"),
    buying_mode: str = Form("buy_it_now"),
    is_edit: bool = Form(False),
    attribute_ids: List[str] = Form([]),
    attribute_values: List[str] = Form([]),
    api: MarketplaceApi = Depends(get_api),
):
    _check_marketplace(marketplace)
    product = crud_product.get_product(api, product_id)
    draft = marketplace_sync.ListingDraft.from_product(product)
    draft.title = title
    draft.category_id = category_id
    draft.category_name = category_name
    draft.condition = condition if condition in marketplace_sync.CONDITIONS else "new"
    draft.listing_type = listing_type if listing_type in marketplace_sync.LISTING_TYPES else "gold_special"
    draft.buying_mode = buying_mode if buying_mode in marketplace_sync.BUYING_MODES else "buy_it_now"
    draft.attributes = {k: v.strip() for k, v in zip(attribute_ids, attribute_values)}

    attributes = []
    if not is_edit and category_id:
        try:
            attributes = crud_marketplace.get_category_attributes(api, category_id)
        except ApiError as e:
            logger.warning("[listing] attributes unavailable for %s: %s", category_id, e)

    errors = marketplace_sync.validate_listing(draft, attributes, is_edit)
    error_link = None
    if not errors:
        try:
            if is_edit:
                crud_marketplace.sync_listing(api, product_id)
                message = "Produto atualizado!"
            else:
                crud_marketplace.create_listing(api, product_id, draft.payload())
                message = f"Produto criado no {marketplace_sync.marketplace_name(marketplace)}!"
            logger.info("[listing] product %s published on %s (edit=%s)", product_id, marketplace, is_edit)
            return _redirect(request, f"/products/{product_id}", message)
        except ApiError as e:
            text, error_link = marketplace_sync.split_error_link(handle_api_error(e))
            errors = [text]

    context = _listing_context(api, product, marketplace, draft, is_edit)
    context.update(errors=errors, error_link=error_link)
    return render(request, "products/listing.html", context, status_code=400)
