"""Domain service: Order State Machine.

Every externally visible change to an order's status goes through
``OrderStateMachine.request_transition``. A request is checked in a fixed
order, and the first failing rule is reported:

1. ``AUTHORIZATION``: may this role ask for this target from this state?
   A sales rep may also only move orders assigned to them. Otherwise
   ForbiddenError.
2. ``TRANSITIONS``: is the target reachable from this state at all?
   Otherwise InvalidTransitionError.
3. Target-specific rules (security payload, off-hours bypass, payment
   amount), raised by the inspection / payment services.

Only when all three pass are the status and its side effects applied. The
calling handler commits them through a single unit of work.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from farmsales.domain.exceptions import (
    ForbiddenError,
    InvalidTransitionError,
    ValidationError,
)
from farmsales.domain.model.order import (
    Order,
    OrderStatus,
    PaymentMethod,
    PaymentTrigger,
    TransitionTarget,
)
from farmsales.domain.model.roles import BACK_OFFICE_ROLES, Actor, Role
from farmsales.domain.model.security import SecurityReason
from farmsales.domain.service.inventory_ledger import InventoryLedger
from farmsales.domain.service.payment_reconciliation import PaymentReconciliation
from farmsales.domain.service.security_inspection import SecurityInspection

logger = logging.getLogger(__name__)

S = OrderStatus
P = PaymentTrigger

# ---------------------------------------------------------------------------
# Structural graph: which targets exist from each state, whoever asks.
# Plain DELIVERED is reachable only through a payment trigger.
# ---------------------------------------------------------------------------
TRANSITIONS: dict[OrderStatus, frozenset[TransitionTarget]] = {
    S.PENDING: frozenset({S.ASSIGNED, S.CANCELLED}),
    S.ASSIGNED: frozenset({S.PENDING, S.PRODUCTS_LOADED, S.CANCELLED}),
    S.PRODUCTS_LOADED: frozenset({
        S.ASSIGNED, S.SECURITY_CHECKED, S.SECURITY_CHECK_INCOMPLETE,
        S.SECURITY_CHECK_BYPASSED, S.CANCELLED,
    }),
    S.PRODUCT_RELOADED: frozenset({
        S.PRODUCTS_LOADED, S.SECURITY_CHECKED, S.SECURITY_CHECK_INCOMPLETE,
        S.SECURITY_CHECK_BYPASSED, S.CANCELLED,
    }),
    S.SECURITY_CHECK_INCOMPLETE: frozenset({
        S.PRODUCT_RELOADED, S.SECURITY_CHECK_INCOMPLETE,
        S.SECURITY_CHECK_BYPASSED, S.CANCELLED,
    }),
    S.SECURITY_CHECKED: frozenset({S.DEPARTED_FARM, S.CANCELLED}),
    S.SECURITY_CHECK_BYPASSED: frozenset({S.DEPARTED_FARM, S.CANCELLED}),
    S.DEPARTED_FARM: frozenset({
        P.PAYMENT_COLLECTED, P.PAYMENT_PARTIALLY_COLLECTED, S.CANCELLED,
    }),
    S.DELIVERED: frozenset({S.COMPLETED}),
    S.COMPLETED: frozenset(),
    S.CANCELLED: frozenset(),
}

ALL_TARGETS: frozenset[TransitionTarget] = frozenset((*OrderStatus, *PaymentTrigger))

# Back office may ask for anything except the inspector-only bypass.
_BACK_OFFICE_VIEW = {state: ALL_TARGETS - {S.SECURITY_CHECK_BYPASSED} for state in OrderStatus}

# ---------------------------------------------------------------------------
# Authorization: (role, current state) -> targets that role may request.
# A (role, state) pair that is missing grants nothing.
# ---------------------------------------------------------------------------
AUTHORIZATION: dict[Role, dict[OrderStatus, frozenset[TransitionTarget]]] = {
    Role.SALES_REP: {
        S.ASSIGNED: frozenset({S.PRODUCTS_LOADED}),
        S.SECURITY_CHECK_INCOMPLETE: frozenset({S.PRODUCT_RELOADED}),
        S.SECURITY_CHECKED: frozenset({S.DEPARTED_FARM}),
        S.SECURITY_CHECK_BYPASSED: frozenset({S.DEPARTED_FARM}),
        S.DEPARTED_FARM: frozenset({P.PAYMENT_COLLECTED, P.PAYMENT_PARTIALLY_COLLECTED}),
    },
    Role.SECURITY_GUARD: {
        S.PRODUCTS_LOADED: frozenset({
            S.SECURITY_CHECKED, S.SECURITY_CHECK_INCOMPLETE, S.SECURITY_CHECK_BYPASSED,
        }),
        S.PRODUCT_RELOADED: frozenset({
            S.SECURITY_CHECKED, S.SECURITY_CHECK_INCOMPLETE, S.SECURITY_CHECK_BYPASSED,
        }),
        S.SECURITY_CHECK_INCOMPLETE: frozenset({
            S.SECURITY_CHECK_INCOMPLETE, S.SECURITY_CHECK_BYPASSED,
        }),
    },
    **{role: _BACK_OFFICE_VIEW for role in BACK_OFFICE_ROLES},
}


def is_authorized(role: Role, current: OrderStatus, target: TransitionTarget) -> bool:
    return target in AUTHORIZATION.get(role, {}).get(current, frozenset())


def allowed_targets(role: Role, current: OrderStatus) -> frozenset[TransitionTarget]:
    """Targets this role can actually request right now (for status pickers)."""
    granted = AUTHORIZATION.get(role, {}).get(current, frozenset())
    return granted & TRANSITIONS[current]


@dataclass(frozen=True)
class TransitionPayload:
    """Role-specific extras for a transition request."""

    reasons: tuple[SecurityReason | str, ...] = field(default_factory=tuple)
    note: str = ""
    payment_method: PaymentMethod | None = None
    collected_amount: Decimal | str | None = None


@dataclass(frozen=True)
class TransitionResult:
    order: Order
    previous_status: OrderStatus
    receipt_no: str | None = None


class OrderStateMachine:

    def __init__(
        self,
        ledger: InventoryLedger,
        inspection: SecurityInspection,
        payments: PaymentReconciliation,
    ) -> None:
        self._ledger = ledger
        self._inspection = inspection
        self._payments = payments

    def request_transition(
        self,
        order: Order,
        actor: Actor,
        target: TransitionTarget,
        payload: TransitionPayload | None = None,
        *,
        now: datetime,
    ) -> TransitionResult:
        """Check and apply one transition at ``now``, the farm's local time."""
        payload = payload or TransitionPayload()
        current = order.status

        if not is_authorized(actor.role, current, target):
            raise ForbiddenError(
                f"{actor.role.value} may not move order #{order.id} "
                f"from '{current.value}' to '{target.value}'"
            )
        if actor.role == Role.SALES_REP and order.assigned_to != actor.user_id:
            raise ForbiddenError(
                f"{actor.user_id} is not the sales rep of order #{order.id}"
            )
        if target not in TRANSITIONS[current]:
            raise InvalidTransitionError(
                f"Order #{order.id} cannot go from '{current.value}' to '{target.value}'"
            )

        receipt_no = self._apply(order, actor, target, payload, now)
        logger.debug(f"Order #{order.id}: {current.value} -> {order.status.value}")
        return TransitionResult(order=order, previous_status=current, receipt_no=receipt_no)

    # --- Side effects per target ----------------------------------------------

    def _apply(
        self,
        order: Order,
        actor: Actor,
        target: TransitionTarget,
        payload: TransitionPayload,
        now: datetime,
    ) -> str | None:
        if isinstance(target, PaymentTrigger):
            if payload.payment_method is None:
                raise ValidationError("A payment method (Cash or Net) is required")
            return self._payments.confirm_payment(
                order,
                payload.payment_method,
                target,
                payload.collected_amount,
                completed_by=actor.user_id,
                completed_at=now,
            )

        if target == S.SECURITY_CHECK_INCOMPLETE:
            self._inspection.mark_incomplete(order, payload.reasons, payload.note)
        elif target == S.SECURITY_CHECKED:
            self._inspection.mark_passed(order)
        elif target == S.SECURITY_CHECK_BYPASSED:
            self._inspection.bypass(order, actor.user_id, now)
        elif target == S.COMPLETED:
            order.mark_completed(actor.user_id, now)
            return None
        elif target == S.CANCELLED:
            self._ledger.restock_many(order.cancel())
            return None

        order.move_to(target)
        return None
