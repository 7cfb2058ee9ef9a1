"""Domain service: Assignment Ledger.

Tracks the assigned / sold / returned triplet of every on-demand item and
keeps it consistent with the inventory ledger:

- creating an assignment reserves the stock (all products or none)
- selling moves the triplet and records an OnDemandSale with its own
  receipt number; the stock already left the ledger
- returning and closing put the unsold quantity back into the ledger
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal

from farmsales.domain.exceptions import EntityNotFoundError
from farmsales.domain.model.assignment import (
    Assignment,
    AssignmentItem,
    AssignmentStatus,
    AssignmentType,
    OnDemandSale,
)
from farmsales.domain.model.order import PaymentMethod
from farmsales.domain.model.value_objects import Money, format_quantity
from farmsales.domain.repository.assignment_repository import AssignmentRepository
from farmsales.domain.repository.product_repository import ProductRepository
from farmsales.domain.repository.receipt_sequence import ReceiptSequence
from farmsales.domain.service.inventory_ledger import InventoryLedger
from farmsales.domain.service.return_processor import ReturnProcessor

logger = logging.getLogger(__name__)


class AssignmentLedger:

    def __init__(
        self,
        assignment_repo: AssignmentRepository,
        product_repo: ProductRepository,
        ledger: InventoryLedger,
        receipts: ReceiptSequence,
    ) -> None:
        self._assignment_repo = assignment_repo
        self._product_repo = product_repo
        self._ledger = ledger
        self._receipts = receipts
        self._returns = ReturnProcessor(ledger)

    def create_assignment(
        self,
        sales_rep_id: str,
        quantities: dict[str, Decimal],
        assigned_by: str,
        assignment_type: AssignmentType,
        vehicle_number: str | None = None,
        notes: str = "",
    ) -> Assignment:
        items: list[AssignmentItem] = []
        for product_id, qty in quantities.items():
            product = self._product_repo.get_by_id(product_id)
            if product is None:
                raise EntityNotFoundError(f"Product '{product_id}' not found")
            items.append(
                AssignmentItem(
                    product_id=product.id,
                    product_name=product.name,
                    assigned_quantity=qty,
                )
            )

        assignment = Assignment.create(
            sales_rep_id=sales_rep_id,
            assigned_by=assigned_by,
            items=items,
            assignment_type=assignment_type,
            vehicle_number=vehicle_number,
            notes=notes,
        )
        self._ledger.reserve_many(quantities)
        self._assignment_repo.save(assignment)
        logger.info(
            f"Assignment #{assignment.id} ({assignment_type.value}) created for "
            f"{sales_rep_id}: {len(items)} product(s)"
        )
        return assignment

    def record_sale(
        self,
        assignment: Assignment,
        product_id: str,
        quantity: Decimal,
        unit_price: Money,
        payment_method: PaymentMethod,
        customer_name: str,
        sold_by: str,
        sold_at: datetime,
        customer_phone: str | None = None,
    ) -> OnDemandSale:
        sale = assignment.record_sale(
            product_id,
            quantity,
            unit_price,
            payment_method,
            self._receipts.next_on_demand_receipt_no,
            customer_name=customer_name,
            sold_by=sold_by,
            sold_at=sold_at,
            customer_phone=customer_phone,
        )
        self._complete_if_exhausted(assignment)
        self._assignment_repo.save(assignment)
        logger.info(
            f"Assignment #{assignment.id}: sale {sale.receipt_no} of "
            f"{format_quantity(sale.quantity)} x {sale.product_name} to {sale.customer_name}, "
            f"{sale.total_amount} ({sale.payment_method.value})"
        )
        return sale

    def return_stock(
        self, assignment: Assignment, product_id: str, quantity: Decimal
    ) -> AssignmentItem:
        assignment.assert_active()
        item = assignment.find_item(product_id)
        self._returns.process_assignment_return(item, quantity)
        self._complete_if_exhausted(assignment)
        self._assignment_repo.save(assignment)
        logger.info(
            f"Assignment #{assignment.id}: {format_quantity(quantity)} x {item.product_name} "
            f"returned to stock"
        )
        return item

    def close(self, assignment: Assignment, status: AssignmentStatus) -> dict[str, Decimal]:
        remainders = assignment.close(status)
        self._ledger.restock_many(remainders)
        self._assignment_repo.save(assignment)
        logger.info(
            f"Assignment #{assignment.id} {status.value}; restocked {remainders or 'nothing'}"
        )
        return remainders

    @staticmethod
    def _complete_if_exhausted(assignment: Assignment) -> None:
        if assignment.is_exhausted:
            assignment.status = AssignmentStatus.COMPLETED
