"""Repository for the Order aggregate."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.errors import NotFound
from storefront.order.order import Order


@storefront.repository(part_of=Order)
class OrderRepository:
    def newest_first(self, offset, limit, **filters) -> tuple[list[Order], int]:
        """One slice of matching orders, newest first, and the count of all matches."""
        query = self._dao.query
        if filters:
            query = query.filter(**filters)
        results = query.order_by("-created_at").offset(offset).limit(limit).all()
        return results.items, results.total


def fetch_order(order_id) -> Order:
    """Load an order, translating a miss into the domain's ``NotFound``."""
    try:
        return current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError:
        raise NotFound("Order", order_id) from None
