"""Product aggregate: the slice of the catalogue that orders depend on.

Carts and orders only hold weak references (``product_id``) to products. They
read the live ``price`` and ``name`` for pricing and snapshots, and adjust
``stock`` through :meth:`Product.adjust_stock`, the single conditional
mutation of the stock counter.

Concurrent writers are serialised by the aggregate version: a product saved
with a stale ``_version`` is rejected by the repository, so a decrement is
always conditioned on the stock value current at the time of the write.
"""

from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Float, Integer, String
from protean.utils.globals import current_domain

from storefront.catalogue.events import ProductPriceChanged, ProductRegistered, StockAdjusted
from storefront.domain import storefront
from storefront.errors import InsufficientStock, NotFound


@storefront.aggregate
class Product:
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    stock = Integer(default=0, min_value=0)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def register(cls, name, price, stock=0):
        now = datetime.now(UTC)
        product = cls(
            name=name,
            price=round(float(price), 2),
            stock=stock,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductRegistered(
                product_id=str(product.id),
                name=product.name,
                price=product.price,
                stock=product.stock,
                registered_at=now,
            )
        )
        return product

    def has_stock_for(self, quantity):
        """Optimistic, read-only availability check used while editing carts."""
        return quantity <= self.stock

    def adjust_stock(self, delta, expected_minimum=0, reason=None):
        """Move stock by ``delta``, refusing to end up below ``expected_minimum``."""
        previous = self.stock
        new_stock = previous + delta
        if new_stock < expected_minimum:
            raise InsufficientStock(
                self.id,
                product_name=self.name,
                requested=-delta if delta < 0 else delta,
                available=previous,
            )

        now = datetime.now(UTC)
        self.stock = new_stock
        self.updated_at = now

        self.raise_(
            StockAdjusted(
                product_id=str(self.id),
                delta=delta,
                previous_stock=previous,
                new_stock=new_stock,
                reason=reason,
                adjusted_at=now,
            )
        )

    def change_price(self, new_price):
        previous = self.price
        now = datetime.now(UTC)
        self.price = round(float(new_price), 2)
        self.updated_at = now

        self.raise_(
            ProductPriceChanged(
                product_id=str(self.id),
                previous_price=previous,
                new_price=self.price,
                changed_at=now,
            )
        )


def fetch_product(product_id):
    """Load a product, translating a miss into the domain's ``NotFound``."""
    try:
        return current_domain.repository_for(Product).get(product_id)
    except ObjectNotFoundError:
        raise NotFound("Product", product_id) from None
