"""Business error kinds raised by the storefront domain.

Each error carries a ``messages`` dict keyed by field name, the same shape
protean uses for its own ``ValidationError``, so the HTTP layer can render
all of them uniformly.
"""

from protean.exceptions import (
    InvalidOperationError,
    ObjectNotFoundError,
    ProteanException,
    ValidationError,
)


class NotFound(ObjectNotFoundError):
    """Entity is absent, or exists but belongs to someone else.

    The caller cannot tell the two cases apart.
    """

    def __init__(self, entity, identifier):
        self.entity = entity
        self.identifier = str(identifier)
        super().__init__({entity: [f"{entity} {identifier} not found"]})


class Forbidden(ProteanException):
    """Authenticated requester lacks the capability for an operation."""

    def __init__(self, reason):
        super().__init__({"requester": [reason]})


class EmptyCart(ValidationError):
    def __init__(self, owner_id):
        self.owner_id = str(owner_id)
        super().__init__({"cart": ["Cart is empty"]})


class InsufficientStock(ValidationError):
    """Requested quantity exceeds what the product has on hand."""

    def __init__(self, product_id, product_name=None, requested=None, available=None):
        self.product_id = str(product_id)
        self.product_name = product_name
        self.requested = requested
        self.available = available
        label = product_name or self.product_id
        super().__init__({"stock": [f"Insufficient stock for product: {label}"]})


class InvalidState(InvalidOperationError):
    """Operation not allowed in the aggregate's current state."""

    def __init__(self, message, field="status"):
        super().__init__({field: [message]})


class InvalidTransition(InvalidState):
    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(f"Cannot transition from {current} to {target}")


class TransactionFailed(ProteanException):
    """The unit of work could not commit; nothing was persisted.

    Unlike the business errors above this is infrastructural, and the
    caller may safely retry.
    """

    def __init__(self, operation, reason):
        self.operation = operation
        super().__init__({"transaction": [f"{operation} failed: {reason}"]})
