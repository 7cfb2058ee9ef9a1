"""Application service: List Assignments use case (query)."""

from __future__ import annotations

from farmsales.application.dto import AssignmentDTO, to_assignment_dto
from farmsales.domain.model.assignment import AssignmentStatus
from farmsales.domain.model.roles import Actor, Role
from farmsales.domain.repository.unit_of_work import UnitOfWork


class ListAssignmentsHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        actor: Actor,
        sales_rep_id: str | None = None,
        status: AssignmentStatus | None = None,
    ) -> list[AssignmentDTO]:
        # A sales rep only sees the stock they carry.
        if actor.role == Role.SALES_REP:
            sales_rep_id = actor.user_id

        with self._uow as uow:
            assignments = uow.assignments.find(sales_rep_id=sales_rep_id, status=status)
        return [to_assignment_dto(a) for a in assignments]
