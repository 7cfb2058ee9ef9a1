"""Application service: Create Assignment use case.

Admins hand on-demand stock to a sales rep; a sales rep may also request
stock for themselves. Either way the stock leaves the inventory ledger in
the same commit that records the assignment.
"""

from __future__ import annotations

from decimal import Decimal

from farmsales.application.dto import AssignmentDTO, to_assignment_dto
from farmsales.application.services import build_assignment_ledger
from farmsales.domain.exceptions import EntityNotFoundError, ForbiddenError
from farmsales.domain.model.assignment import AssignmentType
from farmsales.domain.model.roles import ASSIGNMENT_MANAGER_ROLES, Actor, Role
from farmsales.domain.repository.unit_of_work import UnitOfWork


class CreateAssignmentHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        actor: Actor,
        sales_rep_id: str,
        items: dict[str, Decimal],
        vehicle_number: str | None = None,
        notes: str = "",
    ) -> AssignmentDTO:
        """Create an assignment from a ``{product name: quantity}`` mapping."""
        if actor.role in ASSIGNMENT_MANAGER_ROLES:
            assignment_type = AssignmentType.ADMIN_ASSIGNED
        elif actor.role == Role.SALES_REP and actor.user_id == sales_rep_id:
            assignment_type = AssignmentType.SELF_REQUESTED
        else:
            raise ForbiddenError(
                f"{actor.role.value} {actor.user_id} may not assign stock to {sales_rep_id}"
            )

        with self._uow as uow:
            quantities: dict[str, Decimal] = {}
            for name, qty in items.items():
                product = uow.products.get_by_name(name)
                if product is None:
                    raise EntityNotFoundError(f"Product not found: '{name}'")
                quantities[product.id] = qty

            assignment = build_assignment_ledger(uow).create_assignment(
                sales_rep_id=sales_rep_id,
                quantities=quantities,
                assigned_by=actor.user_id,
                assignment_type=assignment_type,
                vehicle_number=vehicle_number,
                notes=notes,
            )
            uow.commit()

        return to_assignment_dto(assignment)
