"""Receipt artifact handed to the printing/notification collaborator."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from farmsales.domain.model.value_objects import Money, format_quantity


@dataclass(frozen=True)
class ReceiptLine:
    product_name: str
    quantity: Decimal
    unit_price: Money
    amount: Money


@dataclass(frozen=True)
class Receipt:
    receipt_no: str
    order_id: int
    customer_name: str
    payment_method: str
    issued_at: datetime
    lines: tuple[ReceiptLine, ...]
    subtotal: Money
    vat_amount: Money | None
    grand_total: Money
    collected: Money
    balance: Money
    sales_rep: str | None = None
    vehicle_number: str | None = None

    def render(self) -> str:
        """Plain-text rendering, one line per row."""
        rows = [
            "SALES RECEIPT",
            f"Receipt No: {self.receipt_no}",
            f"Date: {self.issued_at:%d/%m/%Y %H:%M}",
            f"Bill to: {self.customer_name}",
            f"Order ID: {self.order_id}",
            f"Payment: {self.payment_method}",
            f"Sales Rep: {self.sales_rep or 'N/A'}",
        ]
        if self.vehicle_number:
            rows.append(f"Vehicle: {self.vehicle_number}")
        rows.append("-" * 40)
        for line in self.lines:
            rows.append(
                f"{line.product_name:<18} {format_quantity(line.quantity):>4} "
                f"{line.unit_price.amount:>8.2f} {line.amount.amount:>8.2f}"
            )
        rows.append("-" * 40)
        if self.vat_amount is not None:
            rows.append(f"Subtotal: {self.subtotal}")
            rows.append(f"VAT: {self.vat_amount}")
        rows.append(f"GRAND TOTAL: {self.grand_total}")
        rows.append(f"Collected: {self.collected}")
        if not self.balance.is_zero:
            rows.append(f"Balance due: {self.balance}")
        return "\n".join(rows)
