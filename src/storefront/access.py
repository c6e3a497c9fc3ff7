"""Role-based capability checks against the requester's resolved identity.

The Identity/Session Provider authenticates requests upstream; this module
only decides what an already-resolved ``(user_id, role)`` pair may do.
"""

from dataclasses import dataclass
from enum import Enum

from storefront.errors import Forbidden


class Role(Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class Capability(Enum):
    ADVANCE_FULFILLMENT = "advance_fulfillment"
    VIEW_ALL_ORDERS = "view_all_orders"
    MANAGE_CATALOGUE = "manage_catalogue"


_CAPABILITIES = {
    Role.USER: frozenset(),
    Role.ADMIN: frozenset(
        {
            Capability.ADVANCE_FULFILLMENT,
            Capability.VIEW_ALL_ORDERS,
            Capability.MANAGE_CATALOGUE,
        }
    ),
}


@dataclass(frozen=True)
class Requester:
    user_id: str
    role: Role = Role.USER

    @classmethod
    def resolve(cls, user_id, role=None):
        """Build a requester from raw identity values; unknown roles are plain users."""
        try:
            resolved = Role(str(role).upper()) if role else Role.USER
        except ValueError:
            resolved = Role.USER
        return cls(user_id=str(user_id), role=resolved)

    def can(self, capability: Capability) -> bool:
        return can(self.role, capability)


def can(role, capability: Capability) -> bool:
    if not isinstance(role, Role):
        try:
            role = Role(role)
        except ValueError:
            return False
    return capability in _CAPABILITIES[role]


def require(role, capability: Capability) -> None:
    if not can(role, capability):
        raise Forbidden(f"Role {getattr(role, 'value', role)} may not {capability.value.replace('_', ' ')}")
