"""JSON-document-backed implementation of OrderRepository."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from farmsales.domain.model.order import (
    Order,
    OrderItem,
    OrderReturn,
    OrderStatus,
    PaymentMethod,
)
from farmsales.domain.model.security import (
    BypassedCheck,
    IncompleteCheck,
    SecurityCheck,
    SecurityCheckStatus,
    SecurityNotes,
    SecurityReason,
)
from farmsales.domain.model.value_objects import Money, Quantity, as_quantity
from farmsales.domain.repository.order_repository import OrderFilter, OrderRepository
from farmsales.infrastructure.persistence.json_document import next_sequence


class JsonOrderRepository(OrderRepository):

    def __init__(self, document: dict) -> None:
        self._document = document
        self._orders: list[dict] = document.setdefault("orders", [])

    # --- OrderRepository interface --------------------------------------------

    def next_id(self) -> int:
        return next_sequence(self._document, "order")

    def get_by_id(self, order_id: int) -> Order | None:
        for raw in self._orders:
            if raw["id"] == order_id:
                return self._to_domain(raw)
        return None

    def get_by_item_id(self, item_id: int) -> Order | None:
        for raw in self._orders:
            if any(i["id"] == item_id for i in raw["items"]):
                return self._to_domain(raw)
        return None

    def find(self, criteria: OrderFilter | None = None) -> list[Order]:
        criteria = criteria or OrderFilter()
        orders = (self._to_domain(raw) for raw in self._orders)
        return [order for order in orders if criteria.matches(order)]

    def save(self, order: Order) -> None:
        if order.id is None:
            order.id = self.next_id()
        for item in order.items:
            if item.id is None:
                item.id = next_sequence(self._document, "order_item")

        # Upsert: replace if exists, otherwise append
        for i, raw in enumerate(self._orders):
            if raw["id"] == order.id:
                self._orders[i] = self._to_raw(order)
                return
        self._orders.append(self._to_raw(order))

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        currency = order.total_amount.currency
        return {
            "id": order.id,
            "customer_name": order.customer_name,
            "status": order.status.value,
            "created_by": order.created_by,
            "assigned_to": order.assigned_to,
            "currency": currency,
            "total_amount": str(order.total_amount.amount),
            "vat_amount": str(order.vat_amount.amount),
            "is_vat_applicable": order.is_vat_applicable,
            "delivery_date": order.delivery_date.isoformat() if order.delivery_date else None,
            "vehicle_number": order.vehicle_number,
            "purchase_order_ref": order.purchase_order_ref,
            "security": _security_to_raw(order.security),
            "collected_amount": str(order.collected_amount.amount),
            # Stored for readers of the file only; always re-derived on load.
            "payment_status": order.payment_status.value,
            "payment_method": order.payment_method.value if order.payment_method else None,
            "receipt_no": order.receipt_no,
            "completed_by": order.completed_by,
            "completed_at": order.completed_at.isoformat() if order.completed_at else None,
            "created_at": order.created_at.isoformat(),
            "items": [
                {
                    "id": item.id,
                    "product_id": item.product_id,
                    "product_name": item.product_name,
                    "quantity": str(item.quantity.value),
                    "unit_price": str(item.unit_price.amount),
                    "returned_quantity": str(item.returned_quantity),
                    "returns": [
                        {
                            "quantity": str(r.quantity),
                            "reason": r.reason,
                            "returned_by": r.returned_by,
                            "returned_at": r.returned_at.isoformat(),
                        }
                        for r in item.returns
                    ],
                }
                for item in order.items
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        currency = raw.get("currency", "LKR")
        items = [
            OrderItem(
                id=i["id"],
                product_id=i["product_id"],
                product_name=i["product_name"],
                quantity=Quantity(i["quantity"]),
                unit_price=Money(Decimal(i["unit_price"]), currency),
                returned_quantity=as_quantity(i.get("returned_quantity", "0")),
                returns=[
                    OrderReturn(
                        quantity=as_quantity(r["quantity"]),
                        reason=r["reason"],
                        returned_by=r["returned_by"],
                        returned_at=datetime.fromisoformat(r["returned_at"]),
                    )
                    for r in i.get("returns", [])
                ],
            )
            for i in raw["items"]
        ]
        return Order(
            id=raw["id"],
            customer_name=raw["customer_name"],
            items=items,
            created_by=raw["created_by"],
            assigned_to=raw.get("assigned_to"),
            total_amount=Money(Decimal(raw["total_amount"]), currency),
            vat_amount=Money(Decimal(raw["vat_amount"]), currency),
            is_vat_applicable=raw.get("is_vat_applicable", False),
            status=OrderStatus(raw["status"]),
            delivery_date=_parse_date(raw.get("delivery_date")),
            vehicle_number=raw.get("vehicle_number"),
            purchase_order_ref=raw.get("purchase_order_ref"),
            security=_security_to_domain(raw.get("security")),
            collected_amount=Money(Decimal(raw.get("collected_amount", "0")), currency),
            payment_method=PaymentMethod(raw["payment_method"]) if raw.get("payment_method") else None,
            receipt_no=raw.get("receipt_no"),
            completed_by=raw.get("completed_by"),
            completed_at=_parse_datetime(raw.get("completed_at")),
            created_at=datetime.fromisoformat(raw["created_at"]),
        )


def _security_to_raw(check: SecurityCheck) -> dict:
    notes = check.notes
    raw_notes: dict | None = None
    if isinstance(notes, IncompleteCheck):
        raw_notes = {
            "kind": "incomplete",
            "reasons": [r.value for r in notes.reasons],
            "note": notes.note,
        }
    elif isinstance(notes, BypassedCheck):
        raw_notes = {
            "kind": "bypassed",
            "actor": notes.actor,
            "timestamp": notes.timestamp.isoformat(),
            "note": notes.note,
            "reason": notes.reason,
        }
    return {"status": check.status.value, "notes": raw_notes}


def _security_to_domain(raw: dict | None) -> SecurityCheck:
    if not raw:
        return SecurityCheck()
    raw_notes = raw.get("notes")
    notes: SecurityNotes = None
    if raw_notes and raw_notes["kind"] == "incomplete":
        notes = IncompleteCheck(
            reasons=tuple(SecurityReason(r) for r in raw_notes["reasons"]),
            note=raw_notes.get("note", ""),
        )
    elif raw_notes and raw_notes["kind"] == "bypassed":
        notes = BypassedCheck(
            actor=raw_notes["actor"],
            timestamp=datetime.fromisoformat(raw_notes["timestamp"]),
            note=raw_notes["note"],
            reason=raw_notes["reason"],
        )
    return SecurityCheck(status=SecurityCheckStatus(raw["status"]), notes=notes)


def _parse_date(value: str | None) -> date | None:
    return date.fromisoformat(value) if value else None


def _parse_datetime(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None
