"""Order aggregate: one customer delivery from creation to completion.

The Order is an aggregate root that owns its line items and their return
records. Status changes are decided by the OrderStateMachine; the
aggregate itself guards the invariants that must hold whatever the path:

- ``collected_amount <= total_amount``
- ``payment_status`` is derived from ``(collected_amount, total_amount)``
- ``receipt_no`` is set if and only if the order is Delivered or Completed
- ``returned_quantity <= quantity`` on every line
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum

from farmsales.domain.exceptions import (
    EntityNotFoundError,
    InvalidAmountError,
    InvalidReturnError,
    InvalidTransitionError,
    ValidationError,
)
from farmsales.domain.model.security import SecurityCheck
from farmsales.domain.model.value_objects import Money, Quantity, as_quantity, format_quantity


class OrderStatus(Enum):
    PENDING = "Pending"
    ASSIGNED = "Assigned"
    PRODUCTS_LOADED = "Products Loaded"
    PRODUCT_RELOADED = "Product Reloaded"
    SECURITY_CHECK_INCOMPLETE = "Security Check Incomplete"
    SECURITY_CHECKED = "Security Checked"
    SECURITY_CHECK_BYPASSED = "Security Check Bypassed Due to Off Hours"
    DEPARTED_FARM = "Departed Farm"
    DELIVERED = "Delivered"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class PaymentTrigger(Enum):
    """Requestable targets that are never persisted.

    Both settle the payment and then commit ``OrderStatus.DELIVERED``.
    """

    PAYMENT_COLLECTED = "Delivered - Payment Collected"
    PAYMENT_PARTIALLY_COLLECTED = "Delivered - Payment Partially Collected"


TransitionTarget = OrderStatus | PaymentTrigger


def parse_target(raw: str) -> TransitionTarget:
    """Resolve a status label (or enum name) to a transition target."""
    wanted = raw.strip().lower()
    for member in (*OrderStatus, *PaymentTrigger):
        if wanted in (member.value.lower(), member.name.lower()):
            return member
    raise ValidationError(f"Unknown order status: '{raw}'")


class PaymentMethod(Enum):
    CASH = "Cash"
    NET = "Net"

    @staticmethod
    def parse(raw: str) -> PaymentMethod:
        for method in PaymentMethod:
            if raw.strip().lower() == method.value.lower():
                return method
        raise ValidationError(f"Unknown payment method: '{raw}'")


class PaymentStatus(Enum):
    UNPAID = "unpaid"
    PARTIALLY_PAID = "partially_paid"
    FULLY_PAID = "fully_paid"


def derive_payment_status(collected: Money, total: Money) -> PaymentStatus:
    """The only place payment status is computed."""
    if collected.is_zero:
        return PaymentStatus.UNPAID
    if collected >= total:
        return PaymentStatus.FULLY_PAID
    return PaymentStatus.PARTIALLY_PAID


SETTLED_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.COMPLETED})


@dataclass(frozen=True)
class OrderReturn:
    """Immutable audit record of one return against a line item."""

    quantity: Decimal
    reason: str
    returned_by: str
    returned_at: datetime


@dataclass
class OrderItem:
    """One product line. ``quantity`` and ``unit_price`` never change
    after creation; only the returned counter moves.
    """

    id: int | None
    product_id: str
    product_name: str
    quantity: Quantity
    unit_price: Money
    returned_quantity: Decimal = Decimal("0")
    returns: list[OrderReturn] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.returned_quantity = as_quantity(self.returned_quantity, "Returned quantity")

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value

    @property
    def returnable_quantity(self) -> Decimal:
        return self.quantity.value - self.returned_quantity

    def record_return(
        self, quantity: Decimal, reason: str, returned_by: str, returned_at: datetime
    ) -> OrderReturn:
        """Append a return record and bump the returned counter."""
        quantity = as_quantity(quantity, "Return quantity")
        if quantity <= 0:
            raise InvalidReturnError("Return quantity must be greater than 0")
        if quantity > self.returnable_quantity:
            raise InvalidReturnError(
                f"Cannot return {format_quantity(quantity)} of {self.product_name}. "
                f"Only {format_quantity(self.returnable_quantity)} available to return"
            )
        if not reason or not reason.strip():
            raise InvalidReturnError("A reason is required for a return")

        record = OrderReturn(
            quantity=quantity,
            reason=reason.strip(),
            returned_by=returned_by,
            returned_at=returned_at,
        )
        self.returns.append(record)
        self.returned_quantity += quantity
        return record


# ---------------------------------------------------------------------------
# Listing order
# ---------------------------------------------------------------------------
STATUS_PRIORITY: dict[OrderStatus, int] = {
    OrderStatus.ASSIGNED: 1,
    OrderStatus.PRODUCTS_LOADED: 2,
    OrderStatus.SECURITY_CHECK_INCOMPLETE: 3,
    OrderStatus.SECURITY_CHECKED: 3,
    OrderStatus.DEPARTED_FARM: 4,
    OrderStatus.DELIVERED: 5,
    OrderStatus.COMPLETED: 6,
    OrderStatus.PENDING: 7,
    OrderStatus.PRODUCT_RELOADED: 8,
    OrderStatus.CANCELLED: 9,
    OrderStatus.SECURITY_CHECK_BYPASSED: 10,
}


def order_sort_key(order: Order) -> tuple[int, date, int]:
    """Delivery date first (undated last), then status priority."""
    if order.delivery_date is None:
        return (1, date.max, STATUS_PRIORITY[order.status])
    return (0, order.delivery_date, STATUS_PRIORITY[order.status])


def sort_orders(orders: list[Order]) -> list[Order]:
    """Stable sort, so orders that tie keep their insertion order."""
    return sorted(orders, key=order_sort_key)


@dataclass
class Order:
    """Aggregate root for sales orders.

    Use the ``Order.create()`` factory for new orders; it enforces all
    business rules.  The ``__init__`` is intentionally simple so the
    repository can reconstitute persisted orders without re-validating.
    """

    id: int | None
    customer_name: str
    items: list[OrderItem]
    created_by: str
    assigned_to: str | None
    total_amount: Money
    vat_amount: Money
    is_vat_applicable: bool = False
    status: OrderStatus = OrderStatus.ASSIGNED
    delivery_date: date | None = None
    vehicle_number: str | None = None
    purchase_order_ref: str | None = None
    security: SecurityCheck = field(default_factory=SecurityCheck)
    collected_amount: Money | None = None
    payment_method: PaymentMethod | None = None
    receipt_no: str | None = None
    completed_by: str | None = None
    completed_at: datetime | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if self.collected_amount is None:
            self.collected_amount = Money.zero(self.total_amount.currency)

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        customer_name: str,
        items: list[OrderItem],
        created_by: str,
        assigned_to: str | None,
        delivery_date: date | None,
        vat_rate: Decimal,
        vat_applicable: bool = False,
        vehicle_number: str | None = None,
        purchase_order_ref: str | None = None,
    ) -> Order:
        """Create a new order in ``Assigned``, computing VAT and total."""
        if not customer_name or not customer_name.strip():
            raise ValidationError("Customer name is required")

        if not items:
            raise ValidationError("Order must contain at least one item")

        if not assigned_to or not assigned_to.strip():
            raise ValidationError("An order must be assigned to a sales rep")

        product_ids = [item.product_id for item in items]
        if len(set(product_ids)) != len(product_ids):
            raise ValidationError("Each product may appear only once per order")

        subtotal = _sum_lines(items)
        vat = subtotal.apply_rate(vat_rate) if vat_applicable else Money.zero(subtotal.currency)

        return Order(
            id=None,
            customer_name=customer_name.strip(),
            items=list(items),
            created_by=created_by,
            assigned_to=assigned_to.strip(),
            total_amount=subtotal + vat,
            vat_amount=vat,
            is_vat_applicable=vat_applicable,
            status=OrderStatus.ASSIGNED,
            delivery_date=delivery_date,
            vehicle_number=(vehicle_number or "").strip() or None,
            purchase_order_ref=(purchase_order_ref or "").strip() or None,
        )

    # --- Mutators used by the state machine -----------------------------------

    def move_to(self, status: OrderStatus) -> None:
        if status in SETTLED_STATUSES and self.receipt_no is None:
            raise InvalidTransitionError(
                f"Order cannot become {status.value} before payment is confirmed"
            )
        self.status = status

    def mark_completed(self, completed_by: str, completed_at: datetime) -> None:
        self.move_to(OrderStatus.COMPLETED)
        self.completed_by = completed_by
        self.completed_at = completed_at

    def record_payment(
        self,
        method: PaymentMethod,
        collected: Money,
        receipt_no: str,
        completed_by: str,
        completed_at: datetime,
    ) -> None:
        """Settle the order and mark it Delivered."""
        if self.receipt_no is not None:
            raise InvalidTransitionError(
                f"Order #{self.id} already has receipt {self.receipt_no}"
            )
        if collected > self.total_amount:
            raise InvalidAmountError(
                f"Collected amount {collected} cannot exceed total {self.total_amount}"
            )
        self.payment_method = method
        self.collected_amount = collected
        self.receipt_no = receipt_no
        self.completed_by = completed_by
        self.completed_at = completed_at
        self.move_to(OrderStatus.DELIVERED)

    def cancel(self) -> dict[str, Decimal]:
        """Transition to CANCELLED.

        Returns the per-product quantities still held by the order, which
        the caller must hand back to the inventory ledger.
        """
        if self.status == OrderStatus.CANCELLED:
            raise InvalidTransitionError("Order is already cancelled")
        if self.status in SETTLED_STATUSES:
            raise InvalidTransitionError(
                f"Cannot cancel order in {self.status.value} status"
            )
        self.status = OrderStatus.CANCELLED
        return {
            item.product_id: item.returnable_quantity
            for item in self.items
            if item.returnable_quantity > 0
        }

    # --- Computed properties --------------------------------------------------

    @property
    def subtotal(self) -> Money:
        return _sum_lines(self.items, self.total_amount.currency)

    @property
    def payment_status(self) -> PaymentStatus:
        return derive_payment_status(self.collected_amount, self.total_amount)

    @property
    def pending_balance(self) -> Money:
        return self.total_amount - self.collected_amount

    def find_item(self, item_id: int) -> OrderItem:
        for item in self.items:
            if item.id == item_id:
                return item
        raise EntityNotFoundError(f"Order item #{item_id} not found in order #{self.id}")


def _sum_lines(items: list[OrderItem], currency: str = "LKR") -> Money:
    result = Money.zero(items[0].unit_price.currency if items else currency)
    for item in items:
        result = result + item.line_total
    return result
