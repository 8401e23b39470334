import schemas
from api_service import ApiError
from services import marketplace_sync
from services.marketplace_sync import (
    ListingDraft,
    MarketplaceStatus,
    build_marketplace_cards,
    build_sync_statuses,
    listing_url,
    load_marketplace_status,
    split_attributes,
    split_error_link,
    validate_listing,
)
from tests.conftest import FakeApi


def test_names_and_emojis():
    assert marketplace_sync.marketplace_name("mercadolivre") == "Mercado Livre"
    assert marketplace_sync.marketplace_name("olx") == "olx"
    assert marketplace_sync.marketplace_emoji("shopee") == "🧡"
    assert marketplace_sync.marketplace_emoji("olx") == "🏪"


def test_sync_statuses_follow_integration_order():
    integrations = [{"marketplace": "shopee"}, {"marketplace": "mercadolivre"}]
    sync_status = {"marketplaces": [
        {"marketplace": "mercadolivre", "synced": True, "external_id": "MLB123"},
    ]}
    statuses = build_sync_statuses(integrations, sync_status)
    assert [s.marketplace for s in statuses] == ["shopee", "mercadolivre"]
    assert not statuses[0].synced
    assert statuses[1].synced
    assert statuses[1].url == "https://produto.mercadolivre.com.br/MLB123"


def test_sync_statuses_without_sync_data():
    statuses = build_sync_statuses([{"marketplace": "amazon"}], None)
    assert statuses == [MarketplaceStatus(marketplace="amazon", connected=True, synced=False)]


def test_listing_url_prefers_external_url():
    status = MarketplaceStatus("mercadolivre", synced=True, external_id="MLB1", external_url="https://x/1")
    assert listing_url(status) == "https://x/1"
    assert listing_url(MarketplaceStatus("amazon", synced=True, external_id="B01")) is None


def test_load_marketplace_status_skips_sync_lookup_without_integrations():
    api = FakeApi({("GET", "/ml-integration/integrations"): []})
    assert load_marketplace_status(api, 7) == []
    assert not api.called("GET", "/products/7/sync-status")


def test_load_marketplace_status_swallows_api_errors():
    api = FakeApi({
        ("GET", "/ml-integration/integrations"): [{"marketplace": "mercadolivre"}],
        ("GET", "/products/7/sync-status"): ApiError(500, "boom"),
    })
    assert load_marketplace_status(api, 7) == []


def test_marketplace_cards_use_ml_access_for_mercado_livre():
    integrations = [schemas.MarketplaceIntegration(id=1, marketplace="shopee")]
    cards = {c["marketplace_id"]: c for c in build_marketplace_cards(integrations, {"has_access": True})}
    assert cards["mercadolivre"]["is_connected"]
    assert cards["shopee"]["is_connected"]
    assert cards["shopee"]["integration"].id == 1
    assert not cards["amazon"]["is_connected"]


def test_draft_from_product_truncates_title():
    product = schemas.Product(id=1, name="x" * 80, price=10, stock_quantity=3)
    draft = ListingDraft.from_product(product)
    assert len(draft.title) == 60
    assert draft.quantity == 3


def test_split_attributes_excludes_read_only():
    attributes = [
        {"id": "BRAND", "name": "Marca", "tags": {"required": True}},
        {"id": "COLOR", "name": "Cor", "tags": {}},
        {"id": "ITEM_CONDITION", "name": "Condicao", "tags": {"required": True, "read_only": True}},
    ]
    required, optional = split_attributes(attributes)
    assert [a["id"] for a in required] == ["BRAND"]
    assert [a["id"] for a in optional] == ["COLOR"]


def test_validate_listing():
    attributes = [{"id": "BRAND", "name": "Marca", "tags": {"required": True}}]
    draft = ListingDraft(title="Camiseta")
    assert validate_listing(draft, attributes) == [
        "Selecione uma categoria do Mercado Livre",
        "Preencha os campos obrigatorios: Marca",
    ]
    draft.category_id = "MLB1234"
    draft.attributes = {"BRAND": "Acme"}
    assert validate_listing(draft, attributes) == []
    assert validate_listing(ListingDraft(title=" "), attributes, is_edit=True) == ["Informe o titulo do anuncio"]
    assert validate_listing(ListingDraft(title="x" * 61), [], is_edit=True)


def test_payload_drops_empty_attributes():
    draft = ListingDraft(title="t", category_id="MLB1", attributes={"BRAND": "Acme", "COLOR": ""})
    assert draft.payload()["attributes"] == {"BRAND": "Acme"}


def test_split_error_link():
    text, link = split_error_link("Conecte sua conta em https://ml.example/connect para continuar")
    assert link == "https://ml.example/connect"
    assert "https" not in text
    assert split_error_link("sem link") == ("sem link", None)
