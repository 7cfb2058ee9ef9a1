"""Application service: Request Transition use case.

The single entry point for moving an order through its lifecycle. The
status change and every side effect of the transition (security notes,
payment, receipt number, restocking) are committed in one unit of work.
Receipt delivery happens after the commit and can never undo it.
"""

from __future__ import annotations

import logging

from farmsales.application.dto import OrderDTO, to_order_dto
from farmsales.application.services import build_state_machine
from farmsales.domain.exceptions import DomainException, EntityNotFoundError
from farmsales.domain.model.order import Order, TransitionTarget
from farmsales.domain.model.roles import Actor
from farmsales.domain.ports import Clock, ReceiptNotifier
from farmsales.domain.repository.unit_of_work import UnitOfWork
from farmsales.domain.service.order_state_machine import (
    TransitionPayload,
    TransitionResult,
)
from farmsales.domain.service.payment_reconciliation import PaymentReconciliation

logger = logging.getLogger(__name__)


class RequestTransitionHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        clock: Clock,
        notifier: ReceiptNotifier | None = None,
    ) -> None:
        self._uow = uow
        self._clock = clock
        self._notifier = notifier

    def handle(
        self,
        order_id: int,
        actor: Actor,
        target: TransitionTarget,
        payload: TransitionPayload | None = None,
    ) -> OrderDTO:
        return to_order_dto(self.transition(order_id, actor, target, payload).order)

    def transition(
        self,
        order_id: int,
        actor: Actor,
        target: TransitionTarget,
        payload: TransitionPayload | None = None,
    ) -> TransitionResult:
        now = self._clock.now()

        with self._uow as uow:
            order = uow.orders.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")

            machine = build_state_machine(uow, self._clock.working_hours)
            try:
                result = machine.request_transition(order, actor, target, payload, now=now)
            except DomainException as exc:
                logger.warning(
                    f"Rejected {actor.role.value} {actor.user_id}: order #{order_id} "
                    f"-> '{target.value}' [{exc.code}] {exc}"
                )
                raise

            uow.orders.save(order)
            uow.commit()

        logger.info(
            f"Order #{order_id}: {result.previous_status.value} -> {order.status.value} "
            f"by {actor.role.value} {actor.user_id}"
        )
        if result.receipt_no is not None:
            self._send_receipt(order)
        return result

    def _send_receipt(self, order: Order) -> None:
        if self._notifier is None:
            return
        try:
            receipt = PaymentReconciliation.build_receipt(order, self._clock.now())
            self._notifier.send_receipt(receipt)
        except Exception:
            logger.exception(
                f"Receipt {order.receipt_no} for order #{order.id} could not be delivered"
            )
