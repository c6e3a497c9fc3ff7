"""Order placement: converting the owner's cart into an order.

The handler runs inside a single unit of work. It re-validates every cart
line against live stock, snapshots live prices into the order, decrements
stock through :meth:`Product.adjust_stock` and empties the cart. Any
exception raised along the way rolls all of it back: either the order exists
with its stock taken and the cart cleared, or nothing changed at all.

The check made when the line entered the cart is advisory only. Stock may
have been bought by someone else since, so it is read and re-checked here.
"""

import json

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.catalogue.product import Product, fetch_product
from storefront.domain import storefront
from storefront.errors import EmptyCart, InsufficientStock
from storefront.order.order import Order, PaymentMethod

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class PlaceOrder:
    owner_id = Identifier(required=True)
    shipping_address = Text(required=True)  # JSON: address dict
    payment_method = String(
        choices=PaymentMethod,
        default=PaymentMethod.CASH_ON_DELIVERY.value,
    )


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        shipping_address = (
            json.loads(command.shipping_address)
            if isinstance(command.shipping_address, str)
            else command.shipping_address
        )

        cart_repo = current_domain.repository_for(ShoppingCart)
        cart = cart_repo.find_by_owner(command.owner_id)
        if cart is None or cart.is_empty:
            raise EmptyCart(command.owner_id)

        # Read live products once and re-validate every line before touching anything
        lines = []
        for item in cart.items:
            product = fetch_product(item.product_id)
            if not product.has_stock_for(item.quantity):
                raise InsufficientStock(
                    product.id,
                    product_name=product.name,
                    requested=item.quantity,
                    available=product.stock,
                )
            lines.append((product, item.quantity))

        order = Order.place(
            user_id=command.owner_id,
            lines=[
                {
                    "product_id": str(product.id),
                    "product_name": product.name,
                    "quantity": quantity,
                    "price": product.price,
                }
                for product, quantity in lines
            ],
            shipping_address=shipping_address,
            payment_method=command.payment_method,
        )
        current_domain.repository_for(Order).add(order)

        # Conditional decrement: re-checked on the aggregate, and the save is
        # rejected if the product changed since it was read
        product_repo = current_domain.repository_for(Product)
        for product, quantity in lines:
            product.adjust_stock(-quantity, reason="order")
            product_repo.add(product)

        cart.clear()
        cart_repo.add(cart)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            owner_id=str(command.owner_id),
            item_count=len(lines),
            total=order.total,
        )
        return str(order.id)
