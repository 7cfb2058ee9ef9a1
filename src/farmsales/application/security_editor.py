"""Application service: pre-fill the incomplete security check editor (query)."""

from __future__ import annotations

from dataclasses import dataclass

from farmsales.domain.exceptions import EntityNotFoundError
from farmsales.domain.model.security import SecurityReason
from farmsales.domain.repository.unit_of_work import UnitOfWork
from farmsales.domain.service.security_inspection import SecurityInspection


@dataclass(frozen=True)
class SecurityEditorDTO:
    order_id: int
    selected_reasons: list[str]
    note: str
    available_reasons: list[str]


class SecurityEditorHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, order_id: int) -> SecurityEditorDTO:
        with self._uow as uow:
            order = uow.orders.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")

        reasons, note = SecurityInspection.editor_defaults(order)
        return SecurityEditorDTO(
            order_id=order_id,
            selected_reasons=[r.value for r in reasons],
            note=note,
            available_reasons=[r.value for r in SecurityReason],
        )
