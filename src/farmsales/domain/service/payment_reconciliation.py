"""Domain service: Payment Reconciliation.

Validates the amount collected on delivery against the VAT-inclusive
order total, settles the order and builds the receipt artifact.

Amount rules:
- full payment: the collected amount is always the order total
- partial payment: ``0 < collected <= total``, otherwise InvalidAmountError
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal, InvalidOperation

from farmsales.domain.exceptions import InvalidAmountError
from farmsales.domain.model.order import (
    Order,
    PaymentMethod,
    PaymentTrigger,
)
from farmsales.domain.model.receipt import Receipt, ReceiptLine
from farmsales.domain.model.value_objects import Money
from farmsales.domain.repository.receipt_sequence import ReceiptSequence


class PaymentReconciliation:

    def __init__(self, receipts: ReceiptSequence) -> None:
        self._receipts = receipts

    def resolve_amount(
        self,
        order: Order,
        mode: PaymentTrigger,
        collected_amount: Decimal | str | int | float | None,
    ) -> Money:
        """Work out (and validate) how much is being collected."""
        total = order.total_amount
        if mode == PaymentTrigger.PAYMENT_COLLECTED:
            return total

        if collected_amount is None or collected_amount == "":
            raise InvalidAmountError("A collected amount is required for a partial payment")
        try:
            amount = Decimal(str(collected_amount))
        except (InvalidOperation, ValueError) as exc:
            raise InvalidAmountError(f"Invalid collected amount: {collected_amount!r}") from exc
        if not amount.is_finite() or amount <= 0:
            raise InvalidAmountError("Collected amount must be greater than 0")
        if amount > total.amount:
            raise InvalidAmountError(
                f"Collected amount Rs {amount:.2f} cannot exceed total amount {total}"
            )
        return Money(amount, total.currency)

    def confirm_payment(
        self,
        order: Order,
        method: PaymentMethod,
        mode: PaymentTrigger,
        collected_amount: Decimal | str | int | float | None,
        completed_by: str,
        completed_at: datetime,
    ) -> str:
        """Settle the order and return its newly allocated receipt number.

        Validation happens before the receipt number is drawn, so a
        rejected payment never consumes one.
        """
        collected = self.resolve_amount(order, mode, collected_amount)
        receipt_no = self._receipts.next_receipt_no()
        order.record_payment(method, collected, receipt_no, completed_by, completed_at)
        return receipt_no

    @staticmethod
    def build_receipt(order: Order, issued_at: datetime) -> Receipt:
        lines = tuple(
            ReceiptLine(
                product_name=item.product_name,
                quantity=item.quantity.value,
                unit_price=item.unit_price,
                amount=item.line_total,
            )
            for item in order.items
        )
        return Receipt(
            receipt_no=order.receipt_no or "",
            order_id=order.id,  # type: ignore[arg-type]
            customer_name=order.customer_name,
            payment_method=order.payment_method.value if order.payment_method else "",
            issued_at=issued_at,
            lines=lines,
            subtotal=order.total_amount - order.vat_amount,
            vat_amount=order.vat_amount if order.is_vat_applicable else None,
            grand_total=order.total_amount,
            collected=order.collected_amount,
            balance=order.pending_balance,
            sales_rep=order.assigned_to,
            vehicle_number=order.vehicle_number,
        )
