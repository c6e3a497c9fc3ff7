"""Read-side view of a cart, priced with live catalogue prices.

Unlike an order, a cart never stores prices: every summary reflects the
catalogue as it is right now. Summaries are computed on demand and never
persisted.

A line whose product has left the catalogue cannot be priced. It is left out
of the totals and reported in ``unavailable`` so the client can tell the
shopper, and checkout refuses the cart until the line is removed.
"""

from dataclasses import dataclass, field
from decimal import Decimal

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.catalogue.product import Product

logger = structlog.get_logger(__name__)

CENTS = Decimal("0.01")


def to_money(value) -> Decimal:
    """Exact two-place decimal for a float price."""
    return Decimal(str(value)).quantize(CENTS)


@dataclass(frozen=True)
class CartLine:
    item_id: str
    product_id: str
    name: str
    unit_price: Decimal
    quantity: int
    line_total: Decimal
    available_stock: int


@dataclass(frozen=True)
class CartSummary:
    cart_id: str | None
    owner_id: str
    item_count: int
    total_quantity: int
    subtotal: Decimal
    lines: list[CartLine] = field(default_factory=list)
    unavailable: list[str] = field(default_factory=list)


def summarize(cart: ShoppingCart) -> CartSummary:
    products = current_domain.repository_for(Product)

    lines = []
    unavailable = []
    for item in cart.items:
        try:
            product = products.get(item.product_id)
        except ObjectNotFoundError:
            logger.warning(
                "Cart line references a missing product",
                cart_id=str(cart.id),
                product_id=str(item.product_id),
            )
            unavailable.append(str(item.product_id))
            continue

        unit_price = to_money(product.price)
        lines.append(
            CartLine(
                item_id=str(item.id),
                product_id=str(product.id),
                name=product.name,
                unit_price=unit_price,
                quantity=item.quantity,
                line_total=unit_price * item.quantity,
                available_stock=product.stock,
            )
        )

    return CartSummary(
        cart_id=str(cart.id),
        owner_id=str(cart.owner_id),
        item_count=len(lines),
        total_quantity=sum(line.quantity for line in lines),
        subtotal=sum((line.line_total for line in lines), Decimal("0.00")),
        lines=lines,
        unavailable=unavailable,
    )


def cart_summary_for(owner_id) -> CartSummary:
    """Summary of the owner's cart; an owner with no cart yet sees an empty one."""
    cart = current_domain.repository_for(ShoppingCart).find_by_owner(owner_id)
    if cart is None:
        return CartSummary(cart_id=None, owner_id=str(owner_id), item_count=0, total_quantity=0, subtotal=Decimal("0.00"))
    return summarize(cart)
