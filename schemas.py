# schemas.py
from __future__ import annotations

from typing import Optional, List, Dict, Any, Generic, TypeVar
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict, field_validator

T = TypeVar("T")

# =========================
# Base model configurations
# =========================

class APIBase(BaseModel):
    """Base for models mapped to Marketplace API payloads."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")


class Paginated(APIBase, Generic[T]):
    items: List[T] = Field(default_factory=list)
    total: int = 0
    skip: int = 0
    limit: int = 0
    has_next: bool = False
    has_previous: bool = False

# ======================================================
# Auth & users
# ======================================================

class AuthToken(APIBase):
    access_token: str
    token_type: str = "bearer"
    expires_in: int = 3600


class User(APIBase):
    id: int
    email: str
    name: str = ""
    role: str = "user"
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

# ======================================================
# Products
# ======================================================

class ProductBase(APIBase):
    name: str
    description: Optional[str] = None
    price: float = 0
    stock_quantity: int = 0
    sku: str = ""
    category: Optional[str] = None
    image_url: Optional[str] = None


class ProductCreate(ProductBase):
    pass


class ProductUpdate(APIBase):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    stock_quantity: Optional[int] = None
    category: Optional[str] = None
    image_url: Optional[str] = None
    is_active: Optional[bool] = None


class Product(ProductBase):
    id: int
    is_active: bool = True
    owner_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProductStats(APIBase):
    total_products: int = 0
    active_products: int = 0
    inactive_products: int = 0
    total_stock_value: float = 0
    total_stock_units: int = 0
    low_stock_products: int = 0
    out_of_stock_products: int = 0
    categories_count: int = 0

# ======================================================
# Orders
# ======================================================

class OrderItem(APIBase):
    id: int
    order_id: Optional[int] = None
    product_id: Optional[int] = None
    quantity: int = 0
    unit_price: float = 0
    product_sku: Optional[str] = None
    product_name: Optional[str] = None
    product_image_url: Optional[str] = None
    marketplace_item_id: Optional[str] = None
    total_price: float = 0
    status: Optional[str] = None


class Order(APIBase):
    id: int
    order_number: str
    marketplace: Optional[str] = None
    marketplace_order_id: Optional[str] = None
    marketplace_order_url: Optional[str] = None
    customer_name: str = ""
    customer_email: Optional[str] = None
    customer_document: Optional[str] = None
    shipping_address_line1: Optional[str] = None
    shipping_address_line2: Optional[str] = None
    shipping_city: Optional[str] = None
    shipping_state: Optional[str] = None
    shipping_zipcode: Optional[str] = None
    shipping_country: Optional[str] = None
    shipping_cost: float = 0
    tax_amount: float = 0
    discount_amount: float = 0
    marketplace_fee: float = 0
    payment_fee: float = 0
    shipping_method: Optional[str] = None
    tracking_code: Optional[str] = None
    shipping_carrier: Optional[str] = None
    subtotal: float = 0
    total_amount: float = 0
    net_amount: Optional[float] = None
    status: str = "pending"
    payment_status: Optional[str] = None
    fulfillment_status: Optional[str] = None
    notes: Optional[str] = None
    order_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: List[OrderItem] = Field(default_factory=list)


class OrderStats(APIBase):
    total_orders: int = 0
    pending_orders: int = 0
    confirmed_orders: int = 0
    shipped_orders: int = 0
    delivered_orders: int = 0
    cancelled_orders: int = 0
    total_revenue: float = 0
    net_revenue: float = 0
    average_order_value: float = 0

# ======================================================
# Jobs & sync logs
# ======================================================

class BackgroundJob(APIBase):
    id: Optional[int] = None
    job_id: str
    task_name: str
    status: str = "pending"
    result: Any = None
    error_message: Optional[str] = None
    created_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class SyncLog(APIBase):
    id: int
    product_id: Optional[int] = None
    marketplace: str
    operation: str
    status: str
    marketplace_product_id: Optional[str] = None
    error_message: Optional[str] = None
    request_data: Any = None
    response_data: Any = None
    duration_ms: Optional[int] = None
    created_at: Optional[datetime] = None

# ======================================================
# Marketplace integrations & links
# ======================================================

class MarketplaceIntegration(APIBase):
    id: int
    marketplace: str
    marketplace_account_id: Optional[str] = None
    is_active: bool = True
    is_connected: bool = False
    last_sync: Optional[datetime] = None
    sync_frequency: Optional[str] = None
    auto_sync_enabled: bool = False
    created_at: Optional[datetime] = None


class MarketplaceIntegrationCreate(APIBase):
    marketplace: str
    marketplace_account_id: Optional[str] = None
    api_credentials: Dict[str, Any] = Field(default_factory=dict)
    sync_frequency: Optional[str] = None
    auto_sync_enabled: bool = True


class MarketplaceLink(APIBase):
    id: int
    product_id: int
    marketplace: str
    marketplace_product_id: str
    marketplace_product_url: Optional[str] = None
    sync_status: str = "pending"
    last_sync: Optional[datetime] = None
    auto_sync_enabled: bool = False


class MarketplaceStats(APIBase):
    total_integrations: int = 0
    active_integrations: int = 0
    connected_integrations: int = 0
    total_linked_products: int = 0
    total_marketplace_orders: int = 0

# ======================================================
# Dashboard
# ======================================================

class RecentActivity(APIBase):
    recent_orders: List[Dict[str, Any]] = Field(default_factory=list)
    recent_products: List[Dict[str, Any]] = Field(default_factory=list)
    recent_syncs: List[Dict[str, Any]] = Field(default_factory=list)
    recent_audit_logs: List[Dict[str, Any]] = Field(default_factory=list)


class DashboardStats(APIBase):
    user_info: Dict[str, Any] = Field(default_factory=dict)
    products: ProductStats = Field(default_factory=ProductStats)
    orders: OrderStats = Field(default_factory=OrderStats)
    marketplaces: MarketplaceStats = Field(default_factory=MarketplaceStats)
    recent_activity: RecentActivity = Field(default_factory=RecentActivity)

# ======================================================
# Profile
# ======================================================

class Address(APIBase):
    id: int
    label: Optional[str] = None
    zip_code: str = ""
    street: str = ""
    number: str = ""
    complement: Optional[str] = None
    neighborhood: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = "BR"
    is_default: bool = False

# ======================================================
# Subscription (trial / monthly / yearly)
# ======================================================

class Subscription(APIBase):
    status: Optional[str] = "no_subscription"
    plan: Optional[str] = None
    trial_ends_at: Optional[datetime] = None
    current_period_end: Optional[datetime] = None
    days_remaining: Optional[int] = 0
    has_payment_method: Optional[bool] = False
    cancelled_at: Optional[datetime] = None

    @field_validator("status", mode="before")
    @classmethod
    def _default_status(cls, value):
        return value or "no_subscription"

    @field_validator("days_remaining", mode="before")
    @classmethod
    def _default_days(cls, value):
        return 0 if value is None else value

    @field_validator("has_payment_method", mode="before")
    @classmethod
    def _default_payment_method(cls, value):
        return bool(value)


class PlanPricing(APIBase):
    plan: str
    name: str
    price: float
    billing_period: str = "monthly"
    features: List[str] = Field(default_factory=list)
    discount_percent: Optional[float] = None


class PricingResponse(APIBase):
    plans: List[PlanPricing] = Field(default_factory=list)
    trial_days: int = 7
    currency: str = "BRL"


class Payment(APIBase):
    id: int
    amount: float = 0
    status: str = "pending"
    description: Optional[str] = None
    payment_method: Optional[str] = None
    created_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None


class CardTokenizeResponse(APIBase):
    token: str
    brand: Optional[str] = None
    last_four: Optional[str] = None


class StartTrialResponse(APIBase):
    message: Optional[str] = None
    subscription: Optional[Subscription] = None

# ======================================================
# Billing (iugu)
# ======================================================

class IuguCustomer(APIBase):
    id: int
    iugu_id: Optional[str] = None
    email: str
    name: str
    cpf_cnpj: Optional[str] = None
    phone: Optional[str] = None


class IuguPlan(APIBase):
    id: int
    identifier: str
    name: str
    description: Optional[str] = None
    value_cents: int = 0
    currency: str = "BRL"
    interval: int = 1
    interval_type: str = "months"
    payable_with_credit_card: bool = True
    payable_with_pix: bool = False
    payable_with_boleto: bool = False
    is_active: bool = True


class IuguSubscription(APIBase):
    id: int
    plan_id: Optional[int] = None
    iugu_id: Optional[str] = None
    active: bool = False
    suspended: bool = False
    expires_at: Optional[datetime] = None
    cycled_at: Optional[datetime] = None
    payment_method: Optional[str] = None
    recent_invoices_count: int = 0
    created_at: Optional[datetime] = None
    plan: Optional[IuguPlan] = None


class IuguInvoice(APIBase):
    id: int
    subscription_id: Optional[int] = None
    iugu_id: Optional[str] = None
    email: Optional[str] = None
    status: str = "pending"
    total_cents: int = 0
    total_paid_cents: int = 0
    due_date: Optional[str] = None
    paid_at: Optional[datetime] = None
    secure_url: Optional[str] = None
    pix_qrcode: Optional[str] = None
    pix_qrcode_text: Optional[str] = None
    bank_slip_pdf_url: Optional[str] = None
    bank_slip_digitable_line: Optional[str] = None
    created_at: Optional[datetime] = None


class BillingDashboard(APIBase):
    active_subscriptions: int = 0
    total_revenue_cents: int = 0
    pending_invoices: int = 0
    paid_invoices_this_month: int = 0
    mrr_cents: int = 0

# ======================================================
# Admin
# ======================================================

class AdminStats(APIBase):
    total_users: int = 0
    active_users: int = 0
    trial_users: int = 0
    paying_users: int = 0
    admin_users: int = 0
    total_revenue: float = 0
    monthly_revenue: float = 0


class UserListItem(APIBase):
    id: int
    email: str
    name: str = ""
    role: str = "user"
    is_active: bool = True
    email_verified: bool = False
    created_at: Optional[datetime] = None
    subscription_status: str = "no_subscription"
    subscription_plan: Optional[str] = None
    trial_ends_at: Optional[datetime] = None
    subscription_expires_at: Optional[datetime] = None

    @field_validator("subscription_status", mode="before")
    @classmethod
    def _default_status(cls, value):
        return value or "no_subscription"
