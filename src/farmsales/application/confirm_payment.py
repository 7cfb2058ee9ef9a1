"""Application service: Confirm Payment use case.

Settles a departed order on delivery. Without an amount the order is
treated as fully paid; with one it is a partial collection.
"""

from __future__ import annotations

from decimal import Decimal

from farmsales.application.dto import PaymentResultDTO
from farmsales.application.request_transition import RequestTransitionHandler
from farmsales.domain.model.order import PaymentMethod, PaymentTrigger
from farmsales.domain.model.roles import Actor
from farmsales.domain.service.order_state_machine import TransitionPayload


class ConfirmPaymentHandler:

    def __init__(self, transitions: RequestTransitionHandler) -> None:
        self._transitions = transitions

    def handle(
        self,
        order_id: int,
        actor: Actor,
        method: PaymentMethod,
        collected_amount: Decimal | str | None = None,
    ) -> PaymentResultDTO:
        trigger = (
            PaymentTrigger.PAYMENT_COLLECTED
            if collected_amount is None
            else PaymentTrigger.PAYMENT_PARTIALLY_COLLECTED
        )
        payload = TransitionPayload(payment_method=method, collected_amount=collected_amount)
        result = self._transitions.transition(order_id, actor, trigger, payload)

        order = result.order
        return PaymentResultDTO(
            order_id=order.id,  # type: ignore[arg-type]
            receipt_no=result.receipt_no,  # type: ignore[arg-type]
            payment_status=order.payment_status.value,
            collected=str(order.collected_amount),
            pending_balance=str(order.pending_balance),
        )
