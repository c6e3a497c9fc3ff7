"""Order aggregate (CQRS): an immutable, stock-consistent record of a checkout.

Orders are created only by order placement, never deleted, and change
afterwards only through the status state machine below. Line prices and the
order total are captured at placement and never recomputed, whatever happens
to catalogue prices later.

State Machine:
    PENDING → PROCESSING → SHIPPED → DELIVERED
    PENDING → CANCELLED
    DELIVERED and CANCELLED are terminal.

Forward transitions are administrative; cancellation belongs to the owner
and is only possible while the order is still PENDING.
"""

import json
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    ValueObject,
)

from storefront.domain import storefront
from storefront.errors import EmptyCart, InvalidState, InvalidTransition
from storefront.order.events import OrderCancelled, OrderPlaced, OrderStatusAdvanced


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class PaymentMethod(Enum):
    CASH_ON_DELIVERY = "cash_on_delivery"
    CREDIT_CARD = "credit_card"
    PAYPAL = "paypal"


# Administrative fulfillment chain: each status maps to its only successor
_FULFILLMENT_SUCCESSOR = {
    OrderStatus.PENDING: OrderStatus.PROCESSING,
    OrderStatus.PROCESSING: OrderStatus.SHIPPED,
    OrderStatus.SHIPPED: OrderStatus.DELIVERED,
}

_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

TERMINAL_STATUSES = frozenset(status for status, targets in _VALID_TRANSITIONS.items() if not targets)

CENTS = Decimal("0.01")


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class ShippingAddress:
    """Where the order ships, captured at checkout and never edited."""

    name = String(required=True, min_length=2, max_length=100)
    phone = String(required=True, min_length=8, max_length=30)
    street = String(required=True, min_length=5, max_length=255)
    city = String(required=True, min_length=2, max_length=100)
    state = String(max_length=100)
    country = String(required=True, min_length=2, max_length=100)
    zip_code = String(max_length=20)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    """A purchased line: product reference, quantity and the unit price paid.

    ``price`` is a snapshot taken at placement, decoupled from the product's
    live price.
    """

    product_id = Identifier(required=True)
    product_name = String(max_length=255)
    quantity = Integer(required=True, min_value=1)
    price = Float(required=True, min_value=0.0)

    @property
    def line_total(self):
        return Decimal(str(self.price)) * self.quantity


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    user_id = Identifier(required=True)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    items = HasMany(OrderItem)
    total = Float(required=True, min_value=0.0)
    shipping_address = ValueObject(ShippingAddress, required=True)
    payment_method = String(choices=PaymentMethod, default=PaymentMethod.CASH_ON_DELIVERY.value)
    cancelled_at = DateTime()
    delivered_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, user_id, lines, shipping_address, payment_method=None):
        """Create a PENDING order from priced lines.

        Args:
            user_id: Owner of the order, fixed for its lifetime.
            lines: Dicts with product_id, product_name, quantity and price,
                the price being the live unit price read at checkout.
            shipping_address: Dict with the ShippingAddress fields.
            payment_method: A PaymentMethod value; cash on delivery if omitted.
        """
        if not lines:
            raise EmptyCart(user_id)

        items = [
            OrderItem(
                product_id=str(line["product_id"]),
                product_name=line.get("product_name"),
                quantity=line["quantity"],
                price=float(Decimal(str(line["price"])).quantize(CENTS)),
            )
            for line in lines
        ]
        total = sum((item.line_total for item in items), Decimal("0.00")).quantize(CENTS)

        now = datetime.now(UTC)
        order = cls(
            user_id=str(user_id),
            status=OrderStatus.PENDING.value,
            items=items,
            total=float(total),
            shipping_address=ShippingAddress(**shipping_address),
            payment_method=payment_method or PaymentMethod.CASH_ON_DELIVERY.value,
            created_at=now,
            updated_at=now,
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                user_id=str(user_id),
                items=json.dumps(
                    [
                        {
                            "product_id": str(item.product_id),
                            "quantity": item.quantity,
                            "price": item.price,
                        }
                        for item in order.items
                    ]
                ),
                total=order.total,
                payment_method=order.payment_method,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def is_owned_by(self, user_id):
        return str(self.user_id) == str(user_id)

    @property
    def is_terminal(self):
        return OrderStatus(self.status) in TERMINAL_STATUSES

    def stock_to_restore(self):
        """Quantities to hand back to the catalogue per product on cancellation."""
        restored = {}
        for item in self.items:
            restored[str(item.product_id)] = restored.get(str(item.product_id), 0) + item.quantity
        return restored

    # -------------------------------------------------------------------
    # State transitions
    # -------------------------------------------------------------------
    def advance_to(self, target_status):
        """Move one step along the fulfillment chain."""
        current = OrderStatus(self.status)
        target = OrderStatus(target_status)
        if _FULFILLMENT_SUCCESSOR.get(current) != target:
            raise InvalidTransition(current.value, target.value)

        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now
        if target == OrderStatus.DELIVERED:
            self.delivered_at = now

        self.raise_(
            OrderStatusAdvanced(
                order_id=str(self.id),
                previous_status=current.value,
                new_status=target.value,
                advanced_at=now,
            )
        )

    def cancel(self):
        current = OrderStatus(self.status)
        if OrderStatus.CANCELLED not in _VALID_TRANSITIONS[current]:
            raise InvalidState(f"Only pending orders can be cancelled; order is {current.value}")

        now = datetime.now(UTC)
        self.status = OrderStatus.CANCELLED.value
        self.cancelled_at = now
        self.updated_at = now

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                user_id=str(self.user_id),
                restored_stock=json.dumps(self.stock_to_restore()),
                cancelled_at=now,
            )
        )
