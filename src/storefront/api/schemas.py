"""Pydantic request/response schemas for the Storefront API.

These are external contracts (anti-corruption layer), separate from the
internal protean commands and aggregates.
"""

from decimal import Decimal

from pydantic import BaseModel, Field

from storefront.cart.reconciliation import MergeReport
from storefront.cart.summary import CartSummary
from storefront.order.order import Order, PaymentMethod
from storefront.order.queries import OrderPage


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class AddressSchema(BaseModel):
    name: str = Field(min_length=2)
    phone: str = Field(min_length=8)
    street: str = Field(min_length=5)
    city: str = Field(min_length=2)
    state: str | None = None
    country: str = Field(min_length=2)
    zip_code: str | None = None


# ---------------------------------------------------------------------------
# Cart Request Schemas
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=1, default=1)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_id": "prod-001",
                    "quantity": 2,
                }
            ]
        }
    }


class UpdateCartItemRequest(BaseModel):
    quantity: int = Field(ge=1)


class GuestCartLine(BaseModel):
    product_id: str
    quantity: int


class MergeGuestCartRequest(BaseModel):
    items: list[GuestCartLine] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    shipping_address: AddressSchema
    payment_method: PaymentMethod = PaymentMethod.CASH_ON_DELIVERY

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "shipping_address": {
                        "name": "Jane Doe",
                        "phone": "+15550100",
                        "street": "1 Market Street",
                        "city": "Springfield",
                        "country": "US",
                        "zip_code": "12345",
                    },
                    "payment_method": "cash_on_delivery",
                }
            ]
        }
    }


class AdvanceOrderStatusRequest(BaseModel):
    status: str


# ---------------------------------------------------------------------------
# Catalogue Request Schemas
# ---------------------------------------------------------------------------
class RegisterProductRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    price: float = Field(ge=0)
    stock: int = Field(ge=0, default=0)


class ChangePriceRequest(BaseModel):
    price: float = Field(ge=0)


class RestockRequest(BaseModel):
    quantity: int = Field(ge=1)


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class StatusResponse(BaseModel):
    status: str = "ok"


class IdResponse(BaseModel):
    id: str


class CartLineResponse(BaseModel):
    item_id: str
    product_id: str
    name: str
    unit_price: Decimal
    quantity: int
    line_total: Decimal
    available_stock: int


class CartResponse(BaseModel):
    cart_id: str | None
    owner_id: str
    item_count: int
    total_quantity: int
    subtotal: Decimal
    items: list[CartLineResponse]
    unavailable: list[str] = Field(default_factory=list)

    @classmethod
    def from_summary(cls, summary: CartSummary) -> "CartResponse":
        return cls(
            cart_id=summary.cart_id,
            owner_id=summary.owner_id,
            item_count=summary.item_count,
            total_quantity=summary.total_quantity,
            subtotal=summary.subtotal,
            items=[CartLineResponse(**line.__dict__) for line in summary.lines],
            unavailable=summary.unavailable,
        )


class ClearCartResponse(BaseModel):
    items_removed: int


class MergeFailureResponse(BaseModel):
    product_id: str
    quantity: int
    reason: str


class MergeReportResponse(BaseModel):
    merged: list[str]
    failed: list[MergeFailureResponse]

    @classmethod
    def from_report(cls, report: MergeReport) -> "MergeReportResponse":
        return cls(
            merged=report.merged,
            failed=[MergeFailureResponse(**failure.__dict__) for failure in report.failed],
        )


class OrderItemResponse(BaseModel):
    id: str
    product_id: str
    product_name: str | None
    quantity: int
    price: float


class OrderResponse(BaseModel):
    id: str
    user_id: str
    status: str
    total: float
    payment_method: str
    shipping_address: AddressSchema
    items: list[OrderItemResponse]
    created_at: str | None
    updated_at: str | None

    @classmethod
    def from_order(cls, order: Order) -> "OrderResponse":
        address = order.shipping_address
        return cls(
            id=str(order.id),
            user_id=str(order.user_id),
            status=order.status,
            total=order.total,
            payment_method=order.payment_method,
            shipping_address=AddressSchema(
                name=address.name,
                phone=address.phone,
                street=address.street,
                city=address.city,
                state=address.state,
                country=address.country,
                zip_code=address.zip_code,
            ),
            items=[
                OrderItemResponse(
                    id=str(item.id),
                    product_id=str(item.product_id),
                    product_name=item.product_name,
                    quantity=item.quantity,
                    price=item.price,
                )
                for item in order.items
            ],
            created_at=order.created_at.isoformat() if order.created_at else None,
            updated_at=order.updated_at.isoformat() if order.updated_at else None,
        )


class OrderPageResponse(BaseModel):
    orders: list[OrderResponse]
    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def from_page(cls, page: OrderPage) -> "OrderPageResponse":
        return cls(
            orders=[OrderResponse.from_order(order) for order in page.orders],
            page=page.page,
            limit=page.limit,
            total=page.total,
            total_pages=page.total_pages,
        )


class ProductResponse(BaseModel):
    id: str
    name: str
    price: float
    stock: int
