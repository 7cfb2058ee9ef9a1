"""Actor roles.

The acting role is always passed explicitly into the core; nothing reads
it from a session or other ambient context.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from farmsales.domain.exceptions import ValidationError


class Role(Enum):
    SUPER_ADMIN = "Super Admin"
    ADMIN = "Admin"
    ORDER_MANAGER = "Order Manager"
    FINANCE_ADMIN = "Finance Admin"
    SALES_REP = "Sales Rep"
    SECURITY_GUARD = "Security Guard"

    @property
    def is_back_office(self) -> bool:
        return self in BACK_OFFICE_ROLES

    @staticmethod
    def parse(raw: str) -> Role:
        for role in Role:
            if raw.strip().lower() in (role.value.lower(), role.name.lower()):
                return role
        raise ValidationError(f"Unknown role: '{raw}'")


BACK_OFFICE_ROLES = frozenset(
    {Role.SUPER_ADMIN, Role.ADMIN, Role.ORDER_MANAGER, Role.FINANCE_ADMIN}
)

# Roles allowed to hand on-demand stock to a field agent or cancel a batch.
ASSIGNMENT_MANAGER_ROLES = frozenset({Role.SUPER_ADMIN, Role.ADMIN})


@dataclass(frozen=True)
class Actor:
    """Who is asking: a user id plus the role they act under."""

    user_id: str
    role: Role

    def __post_init__(self) -> None:
        if not self.user_id or not self.user_id.strip():
            raise ValidationError("Actor id is required")
