"""Unit tests for the security-check model and SecurityInspection service."""

from datetime import datetime, time
from decimal import Decimal

import pytest

from farmsales.domain.exceptions import InvalidTransitionError, ValidationError
from farmsales.domain.model.order import Order, OrderItem
from farmsales.domain.model.security import (
    BYPASS_REASON,
    BypassedCheck,
    IncompleteCheck,
    SecurityCheckStatus,
    SecurityReason,
    WorkingHours,
)
from farmsales.domain.model.value_objects import Money, Quantity
from farmsales.domain.service.security_inspection import SecurityInspection


def _order() -> Order:
    item = OrderItem(None, "1", "Carrots", Quantity(1), Money.of("10"))
    return Order.create("Green Grocers", [item], "admin-1", "rep-1", None, Decimal("0.18"))


class TestWorkingHours:

    def test_window_is_half_open(self):
        hours = WorkingHours()
        assert hours.contains(datetime(2026, 3, 2, 6, 0))
        assert hours.contains(datetime(2026, 3, 2, 17, 59))
        assert not hours.contains(datetime(2026, 3, 2, 18, 0))
        assert not hours.contains(datetime(2026, 3, 2, 5, 59))

    def test_start_must_precede_end(self):
        with pytest.raises(ValidationError, match="must be before end"):
            WorkingHours(start=time(18), end=time(6))

    def test_str(self):
        assert str(WorkingHours()) == "06:00 - 18:00"


class TestIncompleteCheck:

    def test_reasons_are_deduplicated_in_taxonomy_order(self):
        check = IncompleteCheck(
            reasons=(SecurityReason.EXPIRED_PRODUCT, SecurityReason.MISSING_QUANTITY,
                     SecurityReason.EXPIRED_PRODUCT),
        )
        assert check.reasons == (SecurityReason.MISSING_QUANTITY, SecurityReason.EXPIRED_PRODUCT)

    def test_note_alone_is_enough(self):
        assert IncompleteCheck(note=" crates unsealed ").note == "crates unsealed"

    def test_empty_rejected(self):
        with pytest.raises(ValidationError, match="at least one reason"):
            IncompleteCheck(reasons=(), note="   ")


class TestSecurityInspection:

    def test_mark_incomplete_parses_labels(self):
        order = _order()
        SecurityInspection(WorkingHours()).mark_incomplete(
            order, ["Damaged Product", "overloaded/improperly loaded"], "two crates"
        )
        assert order.security.status == SecurityCheckStatus.INCOMPLETE
        assert order.security.notes.reasons == (
            SecurityReason.DAMAGED_PRODUCT, SecurityReason.IMPROPERLY_LOADED,
        )

    def test_unknown_reason_rejected(self):
        with pytest.raises(ValidationError, match="Unknown security check reason"):
            SecurityInspection(WorkingHours()).mark_incomplete(_order(), ["Too Green"])

    def test_mark_incomplete_replaces_previous_notes(self):
        order = _order()
        inspection = SecurityInspection(WorkingHours())
        inspection.mark_incomplete(order, [SecurityReason.DAMAGED_PRODUCT])
        inspection.mark_incomplete(order, [], "only a note now")
        assert order.security.notes == IncompleteCheck(note="only a note now")

    def test_mark_passed_clears_notes(self):
        order = _order()
        inspection = SecurityInspection(WorkingHours())
        inspection.mark_incomplete(order, [SecurityReason.DAMAGED_PRODUCT])
        inspection.mark_passed(order)
        assert order.security.status == SecurityCheckStatus.COMPLETED
        assert order.security.notes is None

    def test_bypass_off_hours(self):
        order = _order()
        now = datetime(2026, 3, 2, 21, 30)
        check = SecurityInspection(WorkingHours()).bypass(order, "guard-1", now)

        assert isinstance(order.security.notes, BypassedCheck)
        assert order.security.status == SecurityCheckStatus.BYPASSED
        assert check.reason == BYPASS_REASON
        assert check.actor == "guard-1"
        assert check.timestamp == now
        assert "06:00 - 18:00" in check.note

    def test_bypass_inside_working_hours_rejected(self):
        order = _order()
        with pytest.raises(InvalidTransitionError, match="outside working hours"):
            SecurityInspection(WorkingHours()).bypass(order, "guard-1", datetime(2026, 3, 2, 10, 0))
        assert order.security.status == SecurityCheckStatus.PENDING

    def test_can_bypass(self):
        inspection = SecurityInspection(WorkingHours(start=time(9), end=time(17)))
        assert inspection.can_bypass(datetime(2026, 3, 2, 8, 0))
        assert not inspection.can_bypass(datetime(2026, 3, 2, 9, 0))

    def test_editor_defaults(self):
        order = _order()
        assert SecurityInspection.editor_defaults(order) == ((), "")
        SecurityInspection(WorkingHours()).mark_incomplete(
            order, [SecurityReason.DOCUMENTATION_MISMATCH], "PO missing"
        )
        assert SecurityInspection.editor_defaults(order) == (
            (SecurityReason.DOCUMENTATION_MISMATCH,), "PO missing",
        )
