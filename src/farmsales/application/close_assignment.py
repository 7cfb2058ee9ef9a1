"""Application service: Close Assignment use case."""

from __future__ import annotations

from farmsales.application.dto import AssignmentDTO, to_assignment_dto
from farmsales.application.services import build_assignment_ledger
from farmsales.domain.exceptions import EntityNotFoundError, ForbiddenError
from farmsales.domain.model.assignment import AssignmentStatus
from farmsales.domain.model.roles import ASSIGNMENT_MANAGER_ROLES, Actor
from farmsales.domain.repository.unit_of_work import UnitOfWork


class CloseAssignmentHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        actor: Actor,
        assignment_id: int,
        status: AssignmentStatus = AssignmentStatus.CANCELLED,
    ) -> AssignmentDTO:
        """Cancel or complete an active assignment, restocking what is unsold."""
        if actor.role not in ASSIGNMENT_MANAGER_ROLES:
            raise ForbiddenError(f"{actor.role.value} may not close assignments")

        with self._uow as uow:
            assignment = uow.assignments.get_by_id(assignment_id)
            if assignment is None:
                raise EntityNotFoundError(f"Assignment #{assignment_id} not found")

            build_assignment_ledger(uow).close(assignment, status)
            uow.commit()

        return to_assignment_dto(assignment)
