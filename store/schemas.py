"""
Shapes of the Zumbara API payloads.

Each model mirrors one backend resource and is validated at the API client
boundary, so views and templates never guess at field names. The backend
speaks camelCase; the models expose snake_case and accept either.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )

    def to_api(self, **kwargs):
        return self.model_dump(by_alias=True, exclude_none=True, mode="json", **kwargs)


class Role(str, Enum):
    CUSTOMER = "CUSTOMER"
    ADMIN = "ADMIN"
    ORDER_MANAGER = "ORDER_MANAGER"
    DELIVERY = "DELIVERY"


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    DELIVERING = "DELIVERING"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    DECLINED = "DECLINED"


class ProofReview(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    DECLINED = "DECLINED"


class PromotionStatus(str, Enum):
    UPCOMING = "upcoming"
    ACTIVE = "active"
    EXPIRED = "expired"


# ------------------------------
# CATALOG
# ------------------------------
class Category(ApiModel):
    id: str
    name: str
    slug: str = ""
    path: Optional[str] = None
    image: Optional[str] = Field(None, description="Image URL")
    parent_id: Optional[str] = None


class Variant(ApiModel):
    id: str
    name: str = ""
    price: Decimal = Decimal("0.00")
    image: Optional[str] = None
    stock: int = 0


class Product(ApiModel):
    id: str
    name: str
    description: Optional[str] = None
    image: Optional[str] = None
    price: Decimal = Decimal("0.00")
    stock: int = 0
    category_slug: Optional[str] = None
    rating: Optional[float] = None
    variants: List[Variant] = Field(default_factory=list)

    def variant(self, variant_id=None):
        if not self.variants:
            return None
        if variant_id:
            for v in self.variants:
                if v.id == variant_id:
                    return v
        return self.variants[0]

    def display_price(self, variant_id=None):
        v = self.variant(variant_id)
        return v.price if v else self.price

    def display_stock(self, variant_id=None):
        v = self.variant(variant_id)
        return v.stock if v else self.stock

    def in_stock(self, variant_id=None):
        return self.display_stock(variant_id) > 0


class Review(ApiModel):
    id: str
    rating: int = Field(0, ge=0, le=5)
    review_text: Optional[str] = None
    user_name: Optional[str] = None
    created_at: Optional[datetime] = None


# ------------------------------
# CART
# ------------------------------
class CartItem(ApiModel):
    id: str
    product_id: Optional[str] = None
    variant_id: Optional[str] = None
    product_name: Optional[str] = None
    variant_image: Optional[str] = None
    quantity: int = Field(1, ge=0)
    variant_price: Decimal = Decimal("0.00")
    total: Decimal = Decimal("0.00")

    @property
    def unit_price(self):
        return self.variant_price


class Cart(ApiModel):
    id: Optional[str] = None
    items: List[CartItem] = Field(default_factory=list)
    total: Decimal = Decimal("0.00")
    number_of_items: int = 0

    @property
    def is_empty(self):
        return not self.items

    def item(self, item_id):
        return next((i for i in self.items if i.id == item_id), None)


# ------------------------------
# ORDERS
# ------------------------------
class PaymentProof(ApiModel):
    id: str
    image_url: str
    note: Optional[str] = None
    approved: Optional[bool] = None
    reviewed_by_id: Optional[str] = None
    reviewed_at: Optional[datetime] = None

    @property
    def review(self):
        if self.approved is None:
            return ProofReview.PENDING
        return ProofReview.APPROVED if self.approved else ProofReview.DECLINED


class Delivery(ApiModel):
    id: Optional[str] = None
    delivery_user_id: Optional[str] = None
    assigned_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    customer_approved: Optional[bool] = None


class OrderItem(ApiModel):
    id: Optional[str] = None
    product_id: Optional[str] = None
    variant_id: Optional[str] = None
    product_name: Optional[str] = None
    quantity: int = 1
    price: Decimal = Decimal("0.00")

    @property
    def line_total(self):
        return self.price * self.quantity


class Order(ApiModel):
    id: str
    user_id: Optional[str] = None
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_method: Optional[str] = None
    total: Decimal = Decimal("0.00")
    items: List[OrderItem] = Field(default_factory=list)
    payment_proofs: List[PaymentProof] = Field(default_factory=list)
    delivery: Optional[Delivery] = None
    created_at: Optional[datetime] = None

    @field_validator("payment_status", mode="before")
    @classmethod
    def _paid_means_approved(cls, value):
        if isinstance(value, str) and value.lower() == "paid":
            return PaymentStatus.APPROVED
        return value.upper() if isinstance(value, str) else value

    @property
    def pending_proofs(self):
        return [p for p in self.payment_proofs if p.review is ProofReview.PENDING]


# ------------------------------
# PROMOTIONS / USERS
# ------------------------------
class Promotion(ApiModel):
    id: str
    title: str
    description: Optional[str] = None
    image: Optional[str] = None
    started_at: datetime
    expires_at: datetime

    @field_validator("started_at", "expires_at")
    @classmethod
    def _assume_utc(cls, value):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def status(self, now=None):
        now = now or datetime.now(timezone.utc)
        if now < self.started_at:
            return PromotionStatus.UPCOMING
        if now > self.expires_at:
            return PromotionStatus.EXPIRED
        return PromotionStatus.ACTIVE


class User(ApiModel):
    id: str
    first_name: str = ""
    last_name: str = ""
    phone: Optional[str] = None
    image: Optional[str] = None
    role: Role = Role.CUSTOMER
    otp_verified: bool = False

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()


# ------------------------------
# ANALYTICS
# ------------------------------
class DashboardSummary(ApiModel):
    total_orders: int = 0
    total_revenue: Decimal = Decimal("0.00")
    total_customers: int = 0
    pending_orders: int = 0
    delivered_orders: int = 0
    total_products: int = 0
    low_stock_products: int = 0
    average_order_value: Decimal = Decimal("0.00")
    conversion_rate: float = 0


class StatusCount(ApiModel):
    status: str
    count: int = 0


class SalesReport(ApiModel):
    total_sales: Decimal = Decimal("0.00")
    total_orders: int = 0
    average_order_value: Decimal = Decimal("0.00")
    payment_status_breakdown: List[StatusCount] = Field(default_factory=list)


class OrderTrend(ApiModel):
    date: str
    order_count: int = 0
    revenue: Decimal = Decimal("0.00")


class PaymentReport(ApiModel):
    total_payment_proofs: int = 0
    approved_payments: int = 0
    pending_payments: int = 0
    declined_payments: int = 0
    approval_rate: float = 0
    average_review_time_minutes: float = 0


class DeliveryPerson(ApiModel):
    id: str
    name: str = ""
    image: Optional[str] = None
    total_deliveries: int = 0
    completed_deliveries: int = 0


class DeliveryReport(ApiModel):
    total_deliveries: int = 0
    completed_deliveries: int = 0
    pending_deliveries: int = 0
    completion_rate: float = 0
    average_delivery_time_hours: float = 0
    top_delivery_persons: List[DeliveryPerson] = Field(default_factory=list)


# ------------------------------
# ENVELOPES
# ------------------------------
class Paginated(ApiModel):
    items: list = Field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 10

    @property
    def pages(self):
        if not self.limit:
            return 1
        return max(1, -(-self.total // self.limit))


class TokenPair(ApiModel):
    # /auth/refresh answers with either key
    access_token: str = Field(validation_alias=AliasChoices("accessToken", "access_token", "token"))
    refresh_token: Optional[str] = None
    user: Optional[User] = None


class PaymentInit(ApiModel):
    payment_url: str
    invoice_number: Optional[str] = None


class PaymentVerification(ApiModel):
    status: str = "pending"
