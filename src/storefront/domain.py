"""Storefront bounded context: catalogue stock, shopping carts and orders.

Carts and orders are standard CQRS aggregates persisted through protean
repositories. Every command handler runs inside its own unit of work, which
is the transaction boundary for order placement and cancellation.
"""

from protean.domain import Domain

from storefront.utils.logging import configure_logging

configure_logging()

storefront = Domain(name="storefront")
