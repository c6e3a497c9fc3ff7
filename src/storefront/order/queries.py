"""Read side of the order lifecycle: single-order lookup and paginated listings.

Visibility follows the requester's capabilities. Owners see their own
orders; requesters holding ``VIEW_ALL_ORDERS`` see everyone's.
"""

import math
from dataclasses import dataclass, field

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.access import Capability, Requester
from storefront.errors import Forbidden
from storefront.order.order import Order, OrderStatus
from storefront.order.repository import fetch_order

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class OrderPage:
    orders: list[Order] = field(default_factory=list)
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    total: int = 0

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def get_order(order_id, requester: Requester) -> Order:
    """The order with ``order_id`` if the requester owns it or may view all orders."""
    order = fetch_order(order_id)
    if not (order.is_owned_by(requester.user_id) or requester.can(Capability.VIEW_ALL_ORDERS)):
        raise Forbidden("Not authorized to view this order")
    return order


def _page_bounds(page, limit):
    page = 1 if page is None else int(page)
    limit = DEFAULT_PAGE_SIZE if limit is None else int(limit)

    errors = {}
    if page < 1:
        errors["page"] = ["Page must be at least 1"]
    if limit < 1:
        errors["limit"] = ["Limit must be at least 1"]
    if errors:
        raise ValidationError(errors)
    return page, min(limit, MAX_PAGE_SIZE)


def list_orders(requester: Requester, page=1, limit=DEFAULT_PAGE_SIZE, status=None, user_id=None) -> OrderPage:
    """Orders visible to ``requester``, newest first.

    Args:
        requester: The resolved identity making the request.
        page: 1-based page number.
        limit: Page size, capped at ``MAX_PAGE_SIZE``.
        status: Optional OrderStatus value to filter by.
        user_id: Restrict to one owner. Only honoured for requesters who may
            view all orders; everyone else is always restricted to themselves.
    """
    page, limit = _page_bounds(page, limit)

    filters = {}
    if requester.can(Capability.VIEW_ALL_ORDERS):
        if user_id:
            filters["user_id"] = str(user_id)
    else:
        filters["user_id"] = requester.user_id

    if status:
        try:
            filters["status"] = OrderStatus(status).value
        except ValueError:
            raise ValidationError({"status": [f"Unknown order status: {status}"]}) from None

    orders, total = current_domain.repository_for(Order).newest_first(
        offset=(page - 1) * limit,
        limit=limit,
        **filters,
    )
    return OrderPage(orders=orders, page=page, limit=limit, total=total)
