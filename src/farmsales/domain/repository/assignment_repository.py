"""Abstract repository for Assignment aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from farmsales.domain.model.assignment import Assignment, AssignmentStatus


class AssignmentRepository(ABC):

    @abstractmethod
    def get_by_id(self, assignment_id: int) -> Assignment | None:
        """Return an assignment by its ID, or None if not found."""

    @abstractmethod
    def find(
        self,
        sales_rep_id: str | None = None,
        status: AssignmentStatus | None = None,
    ) -> list[Assignment]:
        """Return assignments, optionally filtered by agent and status."""

    @abstractmethod
    def save(self, assignment: Assignment) -> None:
        """Persist a new or updated assignment."""
