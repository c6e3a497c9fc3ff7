"""Guest cart reconciliation: folding an anonymous cart into a user's cart at login.

The merge is best effort, not all-or-nothing. Each guest line is applied on
its own through :class:`AddToCart`, in its own unit of work, with the usual
merge-by-increment semantics. A line that fails (unknown product, not enough
stock, malformed quantity) is reported back and the remaining lines are still
merged. Login never fails because of the cart.

Guest lines are only ever the ones the client held before login (a cart kept
in browser storage). No server-held cart is read or emptied here, so a caller
can only ever write into their own cart.
"""

from dataclasses import dataclass, field

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from storefront.cart.items import AddToCart

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class MergeFailure:
    product_id: str
    quantity: int
    reason: str


@dataclass
class MergeReport:
    user_id: str
    merged: list[str] = field(default_factory=list)
    failed: list[MergeFailure] = field(default_factory=list)

    @property
    def fully_merged(self):
        return not self.failed


def _reason(exc):
    messages = getattr(exc, "messages", None)
    if isinstance(messages, dict):
        return "; ".join(str(msg) for msgs in messages.values() for msg in (msgs if isinstance(msgs, list) else [msgs]))
    return str(messages or exc)


def merge_guest_cart(user_id, guest_items=None) -> MergeReport:
    """Merge client-held guest lines into ``user_id``'s cart and report per-line outcomes.

    Args:
        user_id: The identity that just authenticated.
        guest_items: Client-held lines, a list of dicts with product_id and quantity.
    """
    report = MergeReport(user_id=str(user_id))

    for item in guest_items or []:
        product_id, quantity = str(item["product_id"]), item["quantity"]
        try:
            current_domain.process(
                AddToCart(owner_id=str(user_id), product_id=product_id, quantity=quantity),
                asynchronous=False,
            )
        except (ObjectNotFoundError, ValidationError) as exc:
            logger.info(
                "Guest cart line not merged",
                user_id=str(user_id),
                product_id=product_id,
                quantity=quantity,
                reason=_reason(exc),
            )
            report.failed.append(MergeFailure(product_id=product_id, quantity=quantity, reason=_reason(exc)))
        else:
            report.merged.append(product_id)

    logger.info(
        "Guest cart merged",
        user_id=str(user_id),
        merged_count=len(report.merged),
        failed_count=len(report.failed),
    )
    return report
