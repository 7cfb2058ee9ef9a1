"""Application service: Process Return use case."""

from __future__ import annotations

import logging
from decimal import Decimal

from farmsales.application.services import build_return_processor
from farmsales.domain.exceptions import EntityNotFoundError, ForbiddenError
from farmsales.domain.model.order import Order, OrderReturn
from farmsales.domain.model.roles import Actor, Role
from farmsales.domain.ports import Clock
from farmsales.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class ProcessReturnHandler:

    def __init__(self, uow: UnitOfWork, clock: Clock) -> None:
        self._uow = uow
        self._clock = clock

    def handle(self, item_id: int, quantity: Decimal, reason: str, actor: Actor) -> OrderReturn:
        """Return part of an order line to stock.

        The return record, the line's returned counter and the restock are
        committed together.
        """
        with self._uow as uow:
            order = uow.orders.get_by_item_id(item_id)
            if order is None:
                raise EntityNotFoundError(f"Order item #{item_id} not found")
            self._authorize(order, actor)

            record = build_return_processor(uow).process_return(
                order, item_id, quantity, reason, actor.user_id, self._clock.now()
            )
            uow.orders.save(order)
            uow.commit()

        return record

    @staticmethod
    def _authorize(order: Order, actor: Actor) -> None:
        if actor.role.is_back_office:
            return
        if actor.role == Role.SALES_REP and order.assigned_to == actor.user_id:
            return
        raise ForbiddenError(
            f"{actor.role.value} {actor.user_id} may not process returns for order #{order.id}"
        )
