"""Bounded transactions around command processing.

Every command handler already runs inside its own unit of work, which rolls
back on any exception. This wrapper only changes how commit-time failures are
reported: a version conflict on a concurrently modified aggregate, or a
persistence failure while committing, becomes :class:`TransactionFailed`,
which callers may retry. Business errors pass through untouched.
"""

import structlog
from protean.exceptions import ExpectedVersionError, TransactionError
from protean.utils.globals import current_domain

from storefront.errors import TransactionFailed

logger = structlog.get_logger(__name__)


def run_atomically(command):
    """Process ``command`` synchronously and return the handler's result."""
    operation = command.__class__.__name__
    try:
        return current_domain.process(command, asynchronous=False)
    except ExpectedVersionError as exc:
        logger.warning("Concurrent update rejected", operation=operation, error=str(exc))
        raise TransactionFailed(operation, "concurrent modification, retry the request") from exc
    except TransactionError as exc:
        logger.error("Unit of work failed to commit", operation=operation, error=str(exc))
        raise TransactionFailed(operation, "the store could not commit the change") from exc
