"""Security-check sub-state attached to every order.

The inspection outcome is a tagged variant instead of a loose JSON
document: ``IncompleteCheck`` or ``BypassedCheck`` (or no notes at all),
each validated when it is constructed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, time
from enum import Enum

from farmsales.domain.exceptions import InvalidTransitionError, ValidationError


class SecurityCheckStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    INCOMPLETE = "incomplete"
    BYPASSED = "bypassed"


class SecurityReason(Enum):
    MISSING_QUANTITY = "Missing Quantity"
    DAMAGED_PRODUCT = "Damaged Product"
    INCORRECT_LABELING = "Incorrect Labeling"
    UNAUTHORIZED_PRODUCT = "Unauthorized Product"
    DOCUMENTATION_MISMATCH = "Documentation Mismatch"
    EXPIRED_PRODUCT = "Expired Product"
    IMPROPERLY_LOADED = "Overloaded/Improperly Loaded"

    @staticmethod
    def parse(raw: str) -> SecurityReason:
        for reason in SecurityReason:
            if raw.strip().lower() in (reason.value.lower(), reason.name.lower()):
                return reason
        raise ValidationError(f"Unknown security check reason: '{raw}'")


BYPASS_REASON = "Bypassed due to off-hours operation"


@dataclass(frozen=True)
class WorkingHours:
    """Daily window in which a physical security check is mandatory."""

    start: time = time(6, 0)
    end: time = time(18, 0)

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise ValidationError(
                f"Working hours start {self.start} must be before end {self.end}"
            )

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment.time() < self.end

    def __str__(self) -> str:
        return f"{self.start:%H:%M} - {self.end:%H:%M}"


@dataclass(frozen=True)
class IncompleteCheck:
    """Failed inspection: which rules were broken, plus an optional note."""

    reasons: tuple[SecurityReason, ...] = ()
    note: str = ""

    def __post_init__(self) -> None:
        # Normalise to unique reasons in taxonomy order so that re-submitting
        # the same selection yields an equal value.
        unique = tuple(r for r in SecurityReason if r in set(self.reasons))
        object.__setattr__(self, "reasons", unique)
        object.__setattr__(self, "note", (self.note or "").strip())
        if not self.reasons and not self.note:
            raise ValidationError(
                "Select at least one reason or provide a note for an "
                "incomplete security check"
            )


@dataclass(frozen=True)
class BypassedCheck:
    """Record left behind when the check is skipped outside working hours."""

    actor: str
    timestamp: datetime
    note: str
    reason: str = BYPASS_REASON

    @staticmethod
    def create(actor: str, now: datetime, hours: WorkingHours) -> BypassedCheck:
        if hours.contains(now):
            raise InvalidTransitionError(
                f"Security check can only be bypassed outside working hours "
                f"({hours}); local time is {now:%H:%M}"
            )
        return BypassedCheck(
            actor=actor,
            timestamp=now,
            note=(
                "Security check was bypassed as it is outside regular "
                f"working hours ({hours})"
            ),
        )


SecurityNotes = IncompleteCheck | BypassedCheck | None


@dataclass
class SecurityCheck:
    status: SecurityCheckStatus = SecurityCheckStatus.PENDING
    notes: SecurityNotes = field(default=None)
