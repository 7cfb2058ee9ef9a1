"""Unit tests for the AssignmentLedger domain service."""

from datetime import datetime
from decimal import Decimal

import pytest

from farmsales.domain.exceptions import (
    EntityNotFoundError,
    InsufficientStockError,
    InvalidTransitionError,
    ValidationError,
)
from farmsales.domain.model.assignment import (
    AssignmentItem,
    AssignmentStatus,
    AssignmentType,
)
from farmsales.domain.model.order import PaymentMethod
from farmsales.domain.model.product import Product
from farmsales.domain.model.value_objects import Money
from farmsales.domain.service.assignment_ledger import AssignmentLedger
from farmsales.domain.service.inventory_ledger import InventoryLedger
from tests.fakes import (
    FakeAssignmentRepository,
    FakeProductRepository,
    FakeReceiptSequence,
)

SOLD_AT = datetime(2026, 3, 2, 11, 15)


def _setup(carrots=100, leeks=50):
    products = FakeProductRepository([
        Product(id="1", name="Carrots", quantity=carrots),
        Product(id="2", name="Leeks", quantity=leeks),
    ])
    assignments = FakeAssignmentRepository()
    receipts = FakeReceiptSequence()
    ledger = AssignmentLedger(assignments, products, InventoryLedger(products), receipts)
    return ledger, assignments, products, receipts


def _create(ledger: AssignmentLedger, quantities: dict):
    return ledger.create_assignment(
        "rep-1", quantities, "admin-1", AssignmentType.ADMIN_ASSIGNED, vehicle_number="WP-1234"
    )


def _sell(ledger, assignment, product_id, quantity, price="150", customer="Mrs. Perera",
          method=PaymentMethod.CASH):
    return ledger.record_sale(
        assignment,
        product_id,
        quantity,
        Money.of(price),
        method,
        customer_name=customer,
        sold_by="rep-1",
        sold_at=SOLD_AT,
    )


class TestCreateAssignment:

    def test_reserves_stock(self):
        ledger, assignments, products, _ = _setup()
        assignment = _create(ledger, {"1": 20, "2": 5})

        assert assignment.id == 1
        assert assignments.get_by_id(1) is assignment
        assert products.get_by_id("1").quantity == 80
        assert products.get_by_id("2").quantity == 45
        assert assignment.items[0].product_name == "Carrots"

    def test_reserves_fractional_weights(self):
        ledger, _, products, _ = _setup(carrots=Decimal("12.5"))
        assignment = _create(ledger, {"1": Decimal("7.3")})

        assert products.get_by_id("1").quantity == Decimal("5.2")
        assert assignment.items[0].assigned_quantity == Decimal("7.3")

    def test_all_or_nothing(self):
        ledger, assignments, products, _ = _setup(leeks=2)
        with pytest.raises(InsufficientStockError):
            _create(ledger, {"1": 20, "2": 5})
        assert products.get_by_id("1").quantity == 100
        assert assignments.find() == []

    def test_unknown_product(self):
        ledger, _, _, _ = _setup()
        with pytest.raises(EntityNotFoundError, match="'9' not found"):
            _create(ledger, {"9": 1})

    def test_non_positive_quantity_rejected(self):
        ledger, _, _, _ = _setup()
        with pytest.raises(ValidationError, match="must be positive"):
            _create(ledger, {"1": 0})


class TestOnDemandSales:

    def test_sale_moves_only_the_sold_counter(self):
        ledger, _, products, _ = _setup()
        assignment = _create(ledger, {"1": 10})

        _sell(ledger, assignment, "1", 4)

        item = assignment.items[0]
        assert item.sold_quantity == 4
        assert item.available_quantity == 6
        assert products.get_by_id("1").quantity == 90

    def test_sale_is_recorded_with_its_own_receipt(self):
        ledger, assignments, _, receipts = _setup()
        assignment = _create(ledger, {"1": 10})

        sale = _sell(ledger, assignment, "1", Decimal("2.5"), price="150.00",
                     method=PaymentMethod.NET)

        assert sale.receipt_no == "ODR-000001"
        assert sale.product_name == "Carrots"
        assert sale.quantity == Decimal("2.5")
        assert sale.total_amount == Money.of("375.00")
        assert sale.payment_method == PaymentMethod.NET
        assert sale.customer_name == "Mrs. Perera"
        assert sale.sold_at == SOLD_AT
        assert assignments.get_by_id(assignment.id).sales == [sale]
        assert receipts.value == 0

    def test_receipt_numbers_increase(self):
        ledger, _, _, _ = _setup()
        assignment = _create(ledger, {"1": 10})
        first = _sell(ledger, assignment, "1", 1)
        second = _sell(ledger, assignment, "1", Decimal("0.5"))
        assert (first.receipt_no, second.receipt_no) == ("ODR-000001", "ODR-000002")

    def test_rejected_sale_consumes_no_receipt_number(self):
        ledger, _, _, receipts = _setup()
        assignment = _create(ledger, {"1": 10})

        with pytest.raises(InsufficientStockError):
            _sell(ledger, assignment, "1", 11)
        with pytest.raises(ValidationError, match="customer name"):
            _sell(ledger, assignment, "1", 1, customer="  ")
        with pytest.raises(ValidationError, match="greater than 0"):
            _sell(ledger, assignment, "1", 1, price="0")

        assert receipts.on_demand_value == 0
        assert assignment.sales == []
        assert assignment.items[0].sold_quantity == 0

    def test_oversell_rejected(self):
        ledger, _, _, _ = _setup()
        assignment = _create(ledger, {"1": 10})
        _sell(ledger, assignment, "1", 8)
        with pytest.raises(InsufficientStockError, match="need 3, have 2"):
            _sell(ledger, assignment, "1", 3)

    def test_fractional_oversell_rejected(self):
        ledger, _, _, _ = _setup()
        assignment = _create(ledger, {"1": Decimal("1.5")})
        with pytest.raises(InsufficientStockError, match="need 1.6, have 1.5"):
            _sell(ledger, assignment, "1", Decimal("1.6"))

    def test_unknown_product_in_assignment(self):
        ledger, _, _, _ = _setup()
        assignment = _create(ledger, {"1": 10})
        with pytest.raises(EntityNotFoundError, match="not part of assignment"):
            _sell(ledger, assignment, "2", 1)


class TestReturns:

    def test_return_restocks(self):
        ledger, _, products, _ = _setup()
        assignment = _create(ledger, {"1": 10, "2": 5})
        ledger.return_stock(assignment, "1", 4)
        assert products.get_by_id("1").quantity == 94
        assert assignment.status == AssignmentStatus.ACTIVE

    def test_fractional_return_restocks(self):
        ledger, _, products, _ = _setup()
        assignment = _create(ledger, {"1": Decimal("3.5")})
        ledger.return_stock(assignment, "1", Decimal("1.2"))
        assert products.get_by_id("1").quantity == Decimal("97.7")
        assert assignment.items[0].available_quantity == Decimal("2.3")

    def test_exhausted_assignment_completes(self):
        ledger, _, _, _ = _setup()
        assignment = _create(ledger, {"1": 10})
        _sell(ledger, assignment, "1", Decimal("6.5"))
        ledger.return_stock(assignment, "1", Decimal("3.5"))
        assert assignment.status == AssignmentStatus.COMPLETED

        with pytest.raises(InvalidTransitionError, match="not active"):
            _sell(ledger, assignment, "1", 1)


class TestClose:

    def test_cancel_restocks_unsold_remainder(self):
        ledger, _, products, _ = _setup()
        assignment = _create(ledger, {"1": 10, "2": 5})
        _sell(ledger, assignment, "1", 6)
        ledger.return_stock(assignment, "1", 1)

        remainders = ledger.close(assignment, AssignmentStatus.CANCELLED)

        assert remainders == {"1": 3, "2": 5}
        assert products.get_by_id("1").quantity == 94
        assert products.get_by_id("2").quantity == 50
        assert assignment.status == AssignmentStatus.CANCELLED
        assert all(item.available_quantity == 0 for item in assignment.items)

    def test_cannot_close_twice(self):
        ledger, _, _, _ = _setup()
        assignment = _create(ledger, {"1": 10})
        ledger.close(assignment, AssignmentStatus.CANCELLED)
        with pytest.raises(InvalidTransitionError):
            ledger.close(assignment, AssignmentStatus.COMPLETED)

    def test_cannot_close_as_active(self):
        ledger, _, _, _ = _setup()
        assignment = _create(ledger, {"1": 10})
        with pytest.raises(ValidationError, match="completed or cancelled"):
            ledger.close(assignment, AssignmentStatus.ACTIVE)


class TestAssignmentItemInvariant:

    def test_sold_plus_returned_cannot_exceed_assigned(self):
        with pytest.raises(ValidationError, match="exceeds assigned"):
            AssignmentItem("1", "Carrots", assigned_quantity=5, sold_quantity=3, returned_quantity=3)
