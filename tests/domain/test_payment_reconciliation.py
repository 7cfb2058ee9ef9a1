"""Unit tests for the PaymentReconciliation domain service."""

from datetime import datetime
from decimal import Decimal

import pytest

from farmsales.domain.exceptions import InvalidAmountError
from farmsales.domain.model.order import (
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    PaymentTrigger,
)
from farmsales.domain.model.value_objects import Money, Quantity
from farmsales.domain.service.payment_reconciliation import PaymentReconciliation
from tests.fakes import FakeReceiptSequence

NOON = datetime(2026, 3, 2, 12, 0)
FULL = PaymentTrigger.PAYMENT_COLLECTED
PARTIAL = PaymentTrigger.PAYMENT_PARTIALLY_COLLECTED


def _order(total: str = "1000.00", vat: bool = False) -> Order:
    item = OrderItem(None, "1", "Carrots", Quantity(1), Money.of(total))
    order = Order.create(
        "Green Grocers", [item], "admin-1", "rep-1", None, Decimal("0.18"), vat_applicable=vat
    )
    order.id = 7
    order.status = OrderStatus.DEPARTED_FARM
    return order


class TestResolveAmount:

    def test_full_mode_ignores_amount(self):
        svc = PaymentReconciliation(FakeReceiptSequence())
        assert svc.resolve_amount(_order(), FULL, "5") == Money.of("1000.00")

    @pytest.mark.parametrize("amount", [None, "", "0", "-5", "abc", "NaN", "Infinity"])
    def test_partial_mode_rejects_bad_amounts(self, amount):
        svc = PaymentReconciliation(FakeReceiptSequence())
        with pytest.raises(InvalidAmountError):
            svc.resolve_amount(_order(), PARTIAL, amount)

    def test_partial_mode_rejects_more_than_total(self):
        svc = PaymentReconciliation(FakeReceiptSequence())
        with pytest.raises(InvalidAmountError, match="cannot exceed total amount Rs 1000.00"):
            svc.resolve_amount(_order(), PARTIAL, "1000.01")

    def test_partial_mode_accepts_exact_total(self):
        svc = PaymentReconciliation(FakeReceiptSequence())
        assert svc.resolve_amount(_order(), PARTIAL, Decimal("1000")) == Money.of("1000")


class TestConfirmPayment:

    def test_full_payment_issues_receipt(self):
        receipts = FakeReceiptSequence()
        order = _order()
        receipt_no = PaymentReconciliation(receipts).confirm_payment(
            order, PaymentMethod.CASH, FULL, None, "rep-1", NOON
        )

        assert receipt_no == "REC0001"
        assert order.receipt_no == "REC0001"
        assert order.status == OrderStatus.DELIVERED
        assert order.payment_status == PaymentStatus.FULLY_PAID
        assert order.pending_balance.is_zero

    def test_rejected_amount_does_not_consume_a_receipt_number(self):
        receipts = FakeReceiptSequence()
        svc = PaymentReconciliation(receipts)
        with pytest.raises(InvalidAmountError):
            svc.confirm_payment(_order(), PaymentMethod.CASH, PARTIAL, "0", "rep-1", NOON)
        assert receipts.value == 0

        assert svc.confirm_payment(_order(), PaymentMethod.NET, PARTIAL, "300", "rep-1", NOON) == "REC0001"


class TestBuildReceipt:

    def test_vat_breakdown_only_when_applicable(self):
        order = _order(vat=True)
        PaymentReconciliation(FakeReceiptSequence()).confirm_payment(
            order, PaymentMethod.CASH, PARTIAL, "500", "rep-1", NOON
        )
        receipt = PaymentReconciliation.build_receipt(order, NOON)

        assert receipt.subtotal == Money.of("1000.00")
        assert receipt.vat_amount == Money.of("180.00")
        assert receipt.grand_total == Money.of("1180.00")
        assert receipt.balance == Money.of("680.00")
        text = receipt.render()
        assert "Receipt No: REC0001" in text
        assert "VAT: Rs 180.00" in text
        assert "Balance due: Rs 680.00" in text

    def test_no_vat_line_for_unregistered_customer(self):
        order = _order()
        PaymentReconciliation(FakeReceiptSequence()).confirm_payment(
            order, PaymentMethod.CASH, FULL, None, "rep-1", NOON
        )
        receipt = PaymentReconciliation.build_receipt(order, NOON)
        assert receipt.vat_amount is None
        assert "VAT" not in receipt.render()
        assert "Balance due" not in receipt.render()
