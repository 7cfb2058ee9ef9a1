"""Domain service: Security Inspection.

Pure state and validation over an order's ``SecurityCheck``; it never
touches the inventory ledger and never changes ``Order.status`` (the
state machine does that once the inspection step has succeeded).
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from farmsales.domain.model.order import Order
from farmsales.domain.model.security import (
    BypassedCheck,
    IncompleteCheck,
    SecurityCheck,
    SecurityCheckStatus,
    SecurityReason,
    WorkingHours,
)


class SecurityInspection:

    def __init__(self, working_hours: WorkingHours) -> None:
        self._working_hours = working_hours

    def mark_passed(self, order: Order) -> None:
        order.security = SecurityCheck(status=SecurityCheckStatus.COMPLETED)

    def mark_incomplete(
        self,
        order: Order,
        reasons: Iterable[SecurityReason | str] = (),
        note: str = "",
    ) -> IncompleteCheck:
        """Record a failed check. Replaces (never merges with) earlier notes."""
        parsed = tuple(
            r if isinstance(r, SecurityReason) else SecurityReason.parse(r)
            for r in reasons
        )
        check = IncompleteCheck(reasons=parsed, note=note)
        order.security = SecurityCheck(status=SecurityCheckStatus.INCOMPLETE, notes=check)
        return check

    def bypass(self, order: Order, actor: str, now: datetime) -> BypassedCheck:
        check = BypassedCheck.create(actor, now, self._working_hours)
        order.security = SecurityCheck(status=SecurityCheckStatus.BYPASSED, notes=check)
        return check

    def can_bypass(self, now: datetime) -> bool:
        return not self._working_hours.contains(now)

    @staticmethod
    def editor_defaults(order: Order) -> tuple[tuple[SecurityReason, ...], str]:
        """What the incomplete-check editor should be pre-filled with."""
        notes = order.security.notes
        if isinstance(notes, IncompleteCheck):
            return notes.reasons, notes.note
        return (), ""
