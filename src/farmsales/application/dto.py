"""DTOs handed from the handlers to the CLI.

Money is pre-formatted as strings and enums are reduced to their values.
Quantities stay Decimal (weights such as 2.5 kg); the CLI renders them
with ``format_quantity``.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from farmsales.domain.model.assignment import Assignment, OnDemandSale
from farmsales.domain.model.order import Order
from farmsales.domain.model.security import BypassedCheck, IncompleteCheck


@dataclass(frozen=True)
class OrderItemSpec:
    """Input: a product line as entered by the order creator."""

    product_name: str
    quantity: Decimal | int | str
    unit_price: str


@dataclass(frozen=True)
class OrderLineItemDTO:
    """Output: a single line item as displayed to the user."""

    item_id: int
    product_name: str
    quantity: Decimal
    returned_quantity: Decimal
    unit_price: str  # formatted, e.g. "Rs 150.00"
    line_total: str


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: int
    customer_name: str
    status: str
    items: list[OrderLineItemDTO]
    subtotal: str
    vat_amount: str
    total: str
    collected: str
    pending_balance: str
    payment_status: str
    payment_method: str | None
    receipt_no: str | None
    security_status: str
    security_notes: str | None
    assigned_to: str | None
    vehicle_number: str | None
    delivery_date: str | None
    created_at: str

    @property
    def has_returns(self) -> bool:
        return any(item.returned_quantity > 0 for item in self.items)


@dataclass(frozen=True)
class PaymentResultDTO:
    order_id: int
    receipt_no: str
    payment_status: str
    collected: str
    pending_balance: str


@dataclass(frozen=True)
class AssignmentItemDTO:
    product_id: str
    product_name: str
    assigned: Decimal
    sold: Decimal
    returned: Decimal
    available: Decimal


@dataclass(frozen=True)
class OnDemandSaleDTO:
    assignment_id: int
    receipt_no: str
    product_name: str
    quantity: Decimal
    unit_price: str
    total: str
    payment_method: str
    customer_name: str
    customer_phone: str | None
    sold_by: str
    sold_at: str


@dataclass(frozen=True)
class AssignmentDTO:
    id: int
    sales_rep_id: str
    assigned_by: str
    assignment_type: str
    status: str
    vehicle_number: str | None
    items: list[AssignmentItemDTO]
    sales: list[OnDemandSaleDTO]


# --- Mapping ------------------------------------------------------------------


def _describe_security(order: Order) -> str | None:
    notes = order.security.notes
    if isinstance(notes, IncompleteCheck):
        parts = [r.value for r in notes.reasons]
        if notes.note:
            parts.append(notes.note)
        return "; ".join(parts)
    if isinstance(notes, BypassedCheck):
        return f"{notes.reason} by {notes.actor} at {notes.timestamp:%Y-%m-%d %H:%M}"
    return None


def to_order_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        id=order.id,  # type: ignore[arg-type]
        customer_name=order.customer_name,
        status=order.status.value,
        items=[
            OrderLineItemDTO(
                item_id=item.id,  # type: ignore[arg-type]
                product_name=item.product_name,
                quantity=item.quantity.value,
                returned_quantity=item.returned_quantity,
                unit_price=str(item.unit_price),
                line_total=str(item.line_total),
            )
            for item in order.items
        ],
        subtotal=str(order.subtotal),
        vat_amount=str(order.vat_amount),
        total=str(order.total_amount),
        collected=str(order.collected_amount),
        pending_balance=str(order.pending_balance),
        payment_status=order.payment_status.value,
        payment_method=order.payment_method.value if order.payment_method else None,
        receipt_no=order.receipt_no,
        security_status=order.security.status.value,
        security_notes=_describe_security(order),
        assigned_to=order.assigned_to,
        vehicle_number=order.vehicle_number,
        delivery_date=order.delivery_date.isoformat() if order.delivery_date else None,
        created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
    )


def to_assignment_dto(assignment: Assignment) -> AssignmentDTO:
    return AssignmentDTO(
        id=assignment.id,  # type: ignore[arg-type]
        sales_rep_id=assignment.sales_rep_id,
        assigned_by=assignment.assigned_by,
        assignment_type=assignment.assignment_type.value,
        status=assignment.status.value,
        vehicle_number=assignment.vehicle_number,
        items=[
            AssignmentItemDTO(
                product_id=item.product_id,
                product_name=item.product_name,
                assigned=item.assigned_quantity,
                sold=item.sold_quantity,
                returned=item.returned_quantity,
                available=item.available_quantity,
            )
            for item in assignment.items
        ],
        sales=[to_sale_dto(assignment.id, sale) for sale in assignment.sales],  # type: ignore[arg-type]
    )


def to_sale_dto(assignment_id: int, sale: OnDemandSale) -> OnDemandSaleDTO:
    return OnDemandSaleDTO(
        assignment_id=assignment_id,
        receipt_no=sale.receipt_no,
        product_name=sale.product_name,
        quantity=sale.quantity,
        unit_price=str(sale.unit_price),
        total=str(sale.total_amount),
        payment_method=sale.payment_method.value,
        customer_name=sale.customer_name,
        customer_phone=sale.customer_phone,
        sold_by=sale.sold_by,
        sold_at=sale.sold_at.strftime("%Y-%m-%d %H:%M"),
    )
