"""Wires the domain services onto one unit of work."""

from __future__ import annotations

from farmsales.domain.model.security import WorkingHours
from farmsales.domain.repository.unit_of_work import UnitOfWork
from farmsales.domain.service.assignment_ledger import AssignmentLedger
from farmsales.domain.service.inventory_ledger import InventoryLedger
from farmsales.domain.service.order_state_machine import OrderStateMachine
from farmsales.domain.service.payment_reconciliation import PaymentReconciliation
from farmsales.domain.service.return_processor import ReturnProcessor
from farmsales.domain.service.security_inspection import SecurityInspection


def build_state_machine(uow: UnitOfWork, working_hours: WorkingHours) -> OrderStateMachine:
    return OrderStateMachine(
        ledger=InventoryLedger(uow.products),
        inspection=SecurityInspection(working_hours),
        payments=PaymentReconciliation(uow.receipts),
    )


def build_return_processor(uow: UnitOfWork) -> ReturnProcessor:
    return ReturnProcessor(InventoryLedger(uow.products))


def build_assignment_ledger(uow: UnitOfWork) -> AssignmentLedger:
    return AssignmentLedger(
        uow.assignments, uow.products, InventoryLedger(uow.products), uow.receipts
    )
