"""Administrative fulfillment: moving an order forward one status at a time."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.access import Capability, require
from storefront.domain import storefront
from storefront.order.order import Order, OrderStatus
from storefront.order.repository import fetch_order

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class AdvanceOrderStatus:
    order_id = Identifier(required=True)
    new_status = String(required=True, choices=OrderStatus)
    requester_role = String(required=True, max_length=20)


@storefront.command_handler(part_of=Order)
class FulfillmentHandler:
    @handle(AdvanceOrderStatus)
    def advance_order_status(self, command):
        require(command.requester_role, Capability.ADVANCE_FULFILLMENT)

        order = fetch_order(command.order_id)
        previous = order.status
        order.advance_to(command.new_status)
        current_domain.repository_for(Order).add(order)

        logger.info(
            "Order status advanced",
            order_id=str(order.id),
            previous_status=previous,
            new_status=order.status,
        )
        return order.status
