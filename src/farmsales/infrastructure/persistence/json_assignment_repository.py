"""JSON-document-backed implementation of AssignmentRepository.

On-demand sales are kept inside their assignment, in the order they were
made. Quantities and amounts are decimal strings.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from farmsales.domain.model.assignment import (
    Assignment,
    AssignmentItem,
    AssignmentStatus,
    AssignmentType,
    OnDemandSale,
)
from farmsales.domain.model.order import PaymentMethod
from farmsales.domain.model.value_objects import Money
from farmsales.domain.repository.assignment_repository import AssignmentRepository
from farmsales.infrastructure.persistence.json_document import next_sequence


class JsonAssignmentRepository(AssignmentRepository):

    def __init__(self, document: dict) -> None:
        self._document = document
        self._assignments: list[dict] = document.setdefault("assignments", [])

    def get_by_id(self, assignment_id: int) -> Assignment | None:
        for raw in self._assignments:
            if raw["id"] == assignment_id:
                return self._to_domain(raw)
        return None

    def find(
        self,
        sales_rep_id: str | None = None,
        status: AssignmentStatus | None = None,
    ) -> list[Assignment]:
        result = []
        for raw in self._assignments:
            if sales_rep_id is not None and raw["sales_rep_id"] != sales_rep_id:
                continue
            if status is not None and raw["status"] != status.value:
                continue
            result.append(self._to_domain(raw))
        return result

    def save(self, assignment: Assignment) -> None:
        if assignment.id is None:
            assignment.id = next_sequence(self._document, "assignment")

        for i, raw in enumerate(self._assignments):
            if raw["id"] == assignment.id:
                self._assignments[i] = self._to_raw(assignment)
                return
        self._assignments.append(self._to_raw(assignment))

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(assignment: Assignment) -> dict:
        return {
            "id": assignment.id,
            "sales_rep_id": assignment.sales_rep_id,
            "assigned_by": assignment.assigned_by,
            "assignment_type": assignment.assignment_type.value,
            "status": assignment.status.value,
            "vehicle_number": assignment.vehicle_number,
            "notes": assignment.notes,
            "assignment_date": assignment.assignment_date.isoformat(),
            "created_at": assignment.created_at.isoformat(),
            "items": [
                {
                    "product_id": item.product_id,
                    "product_name": item.product_name,
                    "assigned_quantity": str(item.assigned_quantity),
                    "sold_quantity": str(item.sold_quantity),
                    "returned_quantity": str(item.returned_quantity),
                }
                for item in assignment.items
            ],
            "sales": [_sale_to_raw(sale) for sale in assignment.sales],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Assignment:
        return Assignment(
            id=raw["id"],
            sales_rep_id=raw["sales_rep_id"],
            assigned_by=raw["assigned_by"],
            items=[
                AssignmentItem(
                    product_id=i["product_id"],
                    product_name=i["product_name"],
                    assigned_quantity=i["assigned_quantity"],
                    sold_quantity=i.get("sold_quantity", "0"),
                    returned_quantity=i.get("returned_quantity", "0"),
                )
                for i in raw["items"]
            ],
            assignment_type=AssignmentType(raw["assignment_type"]),
            status=AssignmentStatus(raw["status"]),
            vehicle_number=raw.get("vehicle_number"),
            notes=raw.get("notes", ""),
            assignment_date=date.fromisoformat(raw["assignment_date"]),
            created_at=datetime.fromisoformat(raw["created_at"]),
            sales=[_sale_to_domain(s) for s in raw.get("sales", [])],
        )


def _sale_to_raw(sale: OnDemandSale) -> dict:
    return {
        "receipt_no": sale.receipt_no,
        "product_id": sale.product_id,
        "product_name": sale.product_name,
        "quantity": str(sale.quantity),
        "currency": sale.unit_price.currency,
        "unit_price": str(sale.unit_price.amount),
        "total_amount": str(sale.total_amount.amount),
        "payment_method": sale.payment_method.value,
        "customer_name": sale.customer_name,
        "customer_phone": sale.customer_phone,
        "sold_by": sale.sold_by,
        "sold_at": sale.sold_at.isoformat(),
    }


def _sale_to_domain(raw: dict) -> OnDemandSale:
    currency = raw.get("currency", "LKR")
    return OnDemandSale(
        receipt_no=raw["receipt_no"],
        product_id=raw["product_id"],
        product_name=raw["product_name"],
        quantity=Decimal(raw["quantity"]),
        unit_price=Money(Decimal(raw["unit_price"]), currency),
        total_amount=Money(Decimal(raw["total_amount"]), currency),
        payment_method=PaymentMethod(raw["payment_method"]),
        customer_name=raw["customer_name"],
        customer_phone=raw.get("customer_phone"),
        sold_by=raw["sold_by"],
        sold_at=datetime.fromisoformat(raw["sold_at"]),
    )
