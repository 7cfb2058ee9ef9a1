"""Application service: Return Assignment Stock use case."""

from __future__ import annotations

from decimal import Decimal

from farmsales.application.dto import AssignmentDTO, to_assignment_dto
from farmsales.application.services import build_assignment_ledger
from farmsales.domain.exceptions import EntityNotFoundError, ForbiddenError
from farmsales.domain.model.roles import ASSIGNMENT_MANAGER_ROLES, Actor
from farmsales.domain.repository.unit_of_work import UnitOfWork


class ReturnAssignmentStockHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self, actor: Actor, assignment_id: int, product_id: str, quantity: Decimal
    ) -> AssignmentDTO:
        """Give unsold on-demand stock back; the ledger is restocked in the same commit."""
        with self._uow as uow:
            assignment = uow.assignments.get_by_id(assignment_id)
            if assignment is None:
                raise EntityNotFoundError(f"Assignment #{assignment_id} not found")
            if (
                actor.user_id != assignment.sales_rep_id
                and actor.role not in ASSIGNMENT_MANAGER_ROLES
            ):
                raise ForbiddenError(
                    f"{actor.role.value} {actor.user_id} may not return stock "
                    f"for assignment #{assignment_id}"
                )

            build_assignment_ledger(uow).return_stock(assignment, product_id, quantity)
            uow.commit()

        return to_assignment_dto(assignment)
