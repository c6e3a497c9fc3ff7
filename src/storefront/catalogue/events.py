"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductRegistered:
    """A product became available for sale."""

    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True)
    price = Float(required=True)
    stock = Integer(required=True)
    registered_at = DateTime(required=True)


@storefront.event(part_of="Product")
class ProductPriceChanged:
    """The live price changed. Prices already captured on orders are unaffected."""

    __version__ = 1

    product_id = Identifier(required=True)
    previous_price = Float(required=True)
    new_price = Float(required=True)
    changed_at = DateTime(required=True)


@storefront.event(part_of="Product")
class StockAdjusted:
    """Stock on hand moved by ``delta`` (negative when withdrawn)."""

    __version__ = 1

    product_id = Identifier(required=True)
    delta = Integer(required=True)
    previous_stock = Integer(required=True)
    new_stock = Integer(required=True)
    reason = String(max_length=50)
    adjusted_at = DateTime(required=True)
