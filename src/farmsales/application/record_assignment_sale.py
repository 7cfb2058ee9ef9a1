"""Application service: Record Assignment Sale use case.

A sales rep sells on-demand stock they carry to a walk-in customer. The
assignment's sold counter moves and an OnDemandSale with the next ``ODR-``
receipt number is kept on the assignment, both in one unit of work. The
stock itself left the inventory ledger at assignment time.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from farmsales.application.dto import OnDemandSaleDTO, to_sale_dto
from farmsales.application.services import build_assignment_ledger
from farmsales.domain.exceptions import EntityNotFoundError, ForbiddenError
from farmsales.domain.model.order import PaymentMethod
from farmsales.domain.model.roles import Actor, Role
from farmsales.domain.model.value_objects import Money, format_quantity
from farmsales.domain.ports import Clock
from farmsales.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class RecordAssignmentSaleHandler:

    def __init__(self, uow: UnitOfWork, clock: Clock, currency: str = "LKR") -> None:
        self._uow = uow
        self._clock = clock
        self._currency = currency

    def handle(
        self,
        actor: Actor,
        assignment_id: int,
        product_id: str,
        quantity: Decimal | int | str,
        unit_price: str,
        payment_method: str,
        customer_name: str,
        customer_phone: str | None = None,
    ) -> OnDemandSaleDTO:
        price = Money.of(unit_price, self._currency)
        method = PaymentMethod.parse(payment_method)

        with self._uow as uow:
            assignment = uow.assignments.get_by_id(assignment_id)
            if assignment is None:
                raise EntityNotFoundError(f"Assignment #{assignment_id} not found")
            if actor.role != Role.SALES_REP or actor.user_id != assignment.sales_rep_id:
                raise ForbiddenError(
                    f"Only the assigned sales rep can sell from assignment #{assignment_id}"
                )

            sale = build_assignment_ledger(uow).record_sale(
                assignment,
                product_id,
                quantity,
                price,
                method,
                customer_name=customer_name,
                sold_by=actor.user_id,
                sold_at=self._clock.now(),
                customer_phone=customer_phone,
            )
            uow.commit()

        item = assignment.find_item(product_id)
        logger.info(
            f"Assignment #{assignment_id}: {sale.receipt_no} committed, "
            f"{format_quantity(item.available_quantity)} x {item.product_name} left"
        )
        return to_sale_dto(assignment_id, sale)
