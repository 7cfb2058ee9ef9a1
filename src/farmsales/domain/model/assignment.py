"""Assignment: on-demand stock handed to a field agent.

Stock leaves the inventory ledger when the assignment is created. From
then on the agent sells from it or hands it back, and whatever is left
goes back to the ledger when the assignment is closed. Every sale leaves
an immutable OnDemandSale record with its own ``ODR-`` receipt number.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum

from farmsales.domain.exceptions import (
    EntityNotFoundError,
    InsufficientStockError,
    InvalidReturnError,
    InvalidTransitionError,
    ValidationError,
)
from farmsales.domain.model.order import PaymentMethod
from farmsales.domain.model.value_objects import Money, as_quantity, format_quantity


class AssignmentStatus(Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class AssignmentType(Enum):
    ADMIN_ASSIGNED = "admin_assigned"
    SELF_REQUESTED = "self_requested"


@dataclass(frozen=True)
class OnDemandSale:
    """What a field agent sold, to whom, for how much. Never edited."""

    receipt_no: str
    product_id: str
    product_name: str
    quantity: Decimal
    unit_price: Money
    total_amount: Money
    payment_method: PaymentMethod
    customer_name: str
    sold_by: str
    sold_at: datetime
    customer_phone: str | None = None


@dataclass
class AssignmentItem:
    """Invariant: ``assigned_quantity >= sold_quantity + returned_quantity``."""

    product_id: str
    product_name: str
    assigned_quantity: Decimal
    sold_quantity: Decimal = Decimal("0")
    returned_quantity: Decimal = Decimal("0")

    def __post_init__(self) -> None:
        self.assigned_quantity = as_quantity(self.assigned_quantity, "Assigned quantity")
        self.sold_quantity = as_quantity(self.sold_quantity, "Sold quantity")
        self.returned_quantity = as_quantity(self.returned_quantity, "Returned quantity")
        if self.assigned_quantity <= 0:
            raise ValidationError(
                f"Assigned quantity for {self.product_name} must be positive"
            )
        if self.sold_quantity < 0 or self.returned_quantity < 0:
            raise ValidationError("Sold and returned quantities cannot be negative")
        if self.available_quantity < 0:
            raise ValidationError(
                f"{self.product_name}: sold + returned exceeds assigned quantity"
            )

    @property
    def available_quantity(self) -> Decimal:
        return self.assigned_quantity - self.sold_quantity - self.returned_quantity

    def check_sale(self, quantity: Decimal) -> Decimal:
        quantity = as_quantity(quantity, "Sale quantity")
        if quantity <= 0:
            raise ValidationError("Sale quantity must be positive")
        if quantity > self.available_quantity:
            raise InsufficientStockError(
                self.product_name, quantity, self.available_quantity
            )
        return quantity

    def sell(self, quantity: Decimal) -> Decimal:
        quantity = self.check_sale(quantity)
        self.sold_quantity += quantity
        return quantity

    def take_back(self, quantity: Decimal) -> Decimal:
        quantity = as_quantity(quantity, "Return quantity")
        if quantity <= 0:
            raise InvalidReturnError("Return quantity must be greater than 0")
        if quantity > self.available_quantity:
            raise InvalidReturnError(
                f"Cannot return {format_quantity(quantity)} of {self.product_name}. "
                f"Only {format_quantity(self.available_quantity)} unsold"
            )
        self.returned_quantity += quantity
        return quantity


@dataclass
class Assignment:
    id: int | None
    sales_rep_id: str
    assigned_by: str
    items: list[AssignmentItem]
    assignment_type: AssignmentType = AssignmentType.ADMIN_ASSIGNED
    status: AssignmentStatus = AssignmentStatus.ACTIVE
    vehicle_number: str | None = None
    notes: str = ""
    assignment_date: date = field(default_factory=date.today)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    sales: list[OnDemandSale] = field(default_factory=list)

    @staticmethod
    def create(
        sales_rep_id: str,
        assigned_by: str,
        items: list[AssignmentItem],
        assignment_type: AssignmentType,
        vehicle_number: str | None = None,
        notes: str = "",
    ) -> Assignment:
        if not sales_rep_id or not sales_rep_id.strip():
            raise ValidationError("An assignment needs a sales rep")
        if not items:
            raise ValidationError("Assignment must contain at least one product")
        product_ids = [item.product_id for item in items]
        if len(set(product_ids)) != len(product_ids):
            raise ValidationError("Each product may appear only once per assignment")
        return Assignment(
            id=None,
            sales_rep_id=sales_rep_id.strip(),
            assigned_by=assigned_by,
            items=list(items),
            assignment_type=assignment_type,
            vehicle_number=(vehicle_number or "").strip() or None,
            notes=(notes or "").strip(),
        )

    @property
    def is_active(self) -> bool:
        return self.status == AssignmentStatus.ACTIVE

    @property
    def is_exhausted(self) -> bool:
        return all(item.available_quantity == 0 for item in self.items)

    def assert_active(self) -> None:
        if not self.is_active:
            raise InvalidTransitionError(
                f"Assignment #{self.id} is {self.status.value}, not active"
            )

    def find_item(self, product_id: str) -> AssignmentItem:
        for item in self.items:
            if item.product_id == product_id:
                return item
        raise EntityNotFoundError(
            f"Product '{product_id}' is not part of assignment #{self.id}"
        )

    def record_sale(
        self,
        product_id: str,
        quantity: Decimal,
        unit_price: Money,
        payment_method: PaymentMethod,
        allocate_receipt: Callable[[], str],
        customer_name: str,
        sold_by: str,
        sold_at: datetime,
        customer_phone: str | None = None,
    ) -> OnDemandSale:
        """Sell from one item and keep the sale record next to the counters.

        ``allocate_receipt`` is only called once the sale is known to be
        valid, so a rejected sale never consumes a receipt number.
        """
        self.assert_active()
        if not customer_name or not customer_name.strip():
            raise ValidationError("A customer name is required for an on-demand sale")
        if unit_price.is_zero:
            raise ValidationError("Selling price must be greater than 0")
        item = self.find_item(product_id)
        item.check_sale(quantity)

        receipt_no = allocate_receipt()
        sold = item.sell(quantity)
        sale = OnDemandSale(
            receipt_no=receipt_no,
            product_id=item.product_id,
            product_name=item.product_name,
            quantity=sold,
            unit_price=unit_price,
            total_amount=unit_price * sold,
            payment_method=payment_method,
            customer_name=customer_name.strip(),
            sold_by=sold_by,
            sold_at=sold_at,
            customer_phone=(customer_phone or "").strip() or None,
        )
        self.sales.append(sale)
        return sale

    def close(self, status: AssignmentStatus) -> dict[str, Decimal]:
        """Terminate the assignment.

        Every unsold remainder is booked as returned; the mapping of those
        quantities is returned so the caller can restock the ledger.
        """
        if status == AssignmentStatus.ACTIVE:
            raise ValidationError("An assignment can only be closed as completed or cancelled")
        self.assert_active()
        remainders: dict[str, Decimal] = {}
        for item in self.items:
            left = item.available_quantity
            if left > 0:
                item.returned_quantity += left
                remainders[item.product_id] = left
        self.status = status
        return remainders
