"""Order cancellation: command and handler.

Only the owner may cancel, and only while the order is PENDING. Setting the
status and restoring every line's quantity to the catalogue happen in one
unit of work, so stock is returned exactly once.
"""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product, fetch_product
from storefront.domain import storefront
from storefront.errors import Forbidden
from storefront.order.order import Order
from storefront.order.repository import fetch_order

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    requester_id = Identifier(required=True)


@storefront.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        order = fetch_order(command.order_id)
        if not order.is_owned_by(command.requester_id):
            raise Forbidden("Only the owner can cancel this order")

        order.cancel()
        current_domain.repository_for(Order).add(order)

        product_repo = current_domain.repository_for(Product)
        for product_id, quantity in order.stock_to_restore().items():
            product = fetch_product(product_id)
            product.adjust_stock(quantity, reason="cancellation")
            product_repo.add(product)

        logger.info(
            "Order cancelled",
            order_id=str(order.id),
            owner_id=str(order.user_id),
        )
