"""Application service: List Orders use case (query).

Orders come back in listing order: delivery date first (undated last),
then status priority, ties in insertion order.
"""

from __future__ import annotations

from dataclasses import replace

from farmsales.application.dto import OrderDTO, to_order_dto
from farmsales.domain.model.order import OrderStatus, sort_orders
from farmsales.domain.model.roles import Actor, Role
from farmsales.domain.repository.order_repository import OrderFilter
from farmsales.domain.repository.unit_of_work import UnitOfWork


class ListOrdersHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, actor: Actor, criteria: OrderFilter | None = None) -> list[OrderDTO]:
        criteria = criteria or OrderFilter()
        # Field agents only ever see their own orders.
        if actor.role == Role.SALES_REP:
            criteria = replace(criteria, assigned_to=actor.user_id)

        with self._uow as uow:
            orders = uow.orders.find(criteria)

        if actor.role == Role.SECURITY_GUARD:
            orders = [o for o in orders if o.status != OrderStatus.PRODUCT_RELOADED]

        return [to_order_dto(order) for order in sort_orders(orders)]
