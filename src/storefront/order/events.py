"""Domain events for the Order aggregate.

Events are versioned, immutable facts raised inside the same unit of work as
the state change they describe, and dispatched only if it commits.
"""

from protean.fields import DateTime, Float, Identifier, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """A cart was checked out into a new PENDING order."""

    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of {product_id, quantity, price}
    total = Float(required=True)
    payment_method = String(required=True)
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderStatusAdvanced:
    """An administrator moved the order one step along fulfillment."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    advanced_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderCancelled:
    """The owner cancelled a PENDING order; its stock went back to the catalogue."""

    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    restored_stock = Text(required=True)  # JSON: product_id -> quantity
    cancelled_at = DateTime(required=True)
