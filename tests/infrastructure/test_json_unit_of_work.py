"""Tests for the JSON-file unit of work, using a temporary data dir."""

import json
import os
import subprocess
import sys
import textwrap
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path

import pytest

from farmsales.application.add_product import AddProductHandler
from farmsales.application.create_assignment import CreateAssignmentHandler
from farmsales.application.create_order import CreateOrderHandler
from farmsales.application.dto import OrderItemSpec
from farmsales.application.process_return import ProcessReturnHandler
from farmsales.application.record_assignment_sale import RecordAssignmentSaleHandler
from farmsales.application.request_transition import RequestTransitionHandler
from farmsales.domain.exceptions import InsufficientStockError, InvalidAmountError
from farmsales.domain.model.order import OrderStatus, PaymentMethod, PaymentTrigger
from farmsales.domain.model.product import Product
from farmsales.domain.model.roles import Actor, Role
from farmsales.domain.model.security import (
    BypassedCheck,
    IncompleteCheck,
    SecurityCheckStatus,
    SecurityReason,
)
from farmsales.domain.service.order_state_machine import TransitionPayload
from farmsales.infrastructure.persistence.json_unit_of_work import JsonUnitOfWork
from tests.fakes import FixedClock

ADMIN = Actor("admin-1", Role.ADMIN)
REP = Actor("rep-1", Role.SALES_REP)
GUARD = Actor("guard-1", Role.SECURITY_GUARD)
NIGHT = datetime(2026, 3, 2, 21, 0)
SRC_DIR = Path(__file__).resolve().parents[2] / "src"

ORDER_WORKER = textwrap.dedent("""
    import sys
    from decimal import Decimal
    from pathlib import Path

    from farmsales.application.create_order import CreateOrderHandler
    from farmsales.application.dto import OrderItemSpec
    from farmsales.domain.model.roles import Actor, Role
    from farmsales.infrastructure.persistence.json_unit_of_work import JsonUnitOfWork

    store, worker, rounds = Path(sys.argv[1]), sys.argv[2], int(sys.argv[3])
    admin = Actor("admin-1", Role.ADMIN)
    for n in range(rounds):
        CreateOrderHandler(JsonUnitOfWork(store, lock_timeout=60), Decimal("0.18")).handle(
            admin, f"Customer {worker}-{n}", [OrderItemSpec("Carrots", 1, "10")], "rep-1", None
        )
""")


@pytest.fixture
def store(tmp_path):
    return tmp_path / "farmsales.json"


def _seed(store, quantity: int = 100) -> int:
    AddProductHandler(JsonUnitOfWork(store)).handle("Carrots", quantity)
    dto = CreateOrderHandler(JsonUnitOfWork(store), Decimal("0.18")).handle(
        actor=ADMIN,
        customer_name="Green Grocers",
        item_specs=[OrderItemSpec("Carrots", 10, "100.00")],
        assigned_to="rep-1",
        delivery_date=date(2026, 3, 2),
        vat_applicable=True,
    )
    return dto.id


class TestUnitOfWork:

    def test_new_store_is_created_empty(self, store):
        JsonUnitOfWork(store)
        raw = json.loads(store.read_text())
        assert raw["orders"] == [] and raw["products"] == []

    def test_uncommitted_changes_are_discarded(self, store):
        with JsonUnitOfWork(store) as uow:
            uow.products.save(Product(id="1", name="Carrots", quantity=5))

        with JsonUnitOfWork(store) as uow:
            assert uow.products.get_by_id("1") is None

    def test_committed_changes_are_visible_to_a_new_unit_of_work(self, store):
        with JsonUnitOfWork(store) as uow:
            uow.products.save(Product(id="1", name="Carrots", quantity=5, reorder_threshold=2))
            uow.commit()

        with JsonUnitOfWork(store) as uow:
            assert uow.products.get_by_name("CARROTS") == Product("1", "Carrots", 5, 2)

    def test_fractional_stock_is_stored_exactly(self, store):
        with JsonUnitOfWork(store) as uow:
            uow.products.save(Product(id="1", name="Carrots", quantity=Decimal("12.3")))
            uow.commit()

        assert json.loads(store.read_text())["products"][0]["quantity"] == "12.3"
        with JsonUnitOfWork(store) as uow:
            assert uow.products.get_by_id("1").quantity == Decimal("12.3")

    def test_plain_numbers_from_older_files_still_load(self, store):
        JsonUnitOfWork(store)
        raw = json.loads(store.read_text())
        raw["products"].append({"id": "1", "name": "Leeks", "quantity": 7, "reorder_threshold": 2})
        store.write_text(json.dumps(raw))

        with JsonUnitOfWork(store) as uow:
            leeks = uow.products.get_by_id("1")
        assert (leeks.quantity, leeks.reorder_threshold) == (Decimal("7"), Decimal("2"))

    def test_commit_outside_unit_of_work_rejected(self, store):
        with pytest.raises(RuntimeError):
            JsonUnitOfWork(store).commit()

    def test_failed_command_leaves_file_untouched(self, store):
        order_id = _seed(store)
        with JsonUnitOfWork(store) as uow:
            order = uow.orders.get_by_id(order_id)
            order.status = OrderStatus.DEPARTED_FARM
            uow.orders.save(order)
            uow.commit()
        before = store.read_bytes()

        handler = RequestTransitionHandler(JsonUnitOfWork(store), FixedClock(NIGHT))
        with pytest.raises(InvalidAmountError):
            handler.handle(
                order_id, REP, PaymentTrigger.PAYMENT_PARTIALLY_COLLECTED,
                TransitionPayload(payment_method=PaymentMethod.CASH, collected_amount="99999"),
            )

        assert store.read_bytes() == before


class TestOrderPersistence:

    def test_order_survives_reload(self, store):
        order_id = _seed(store)

        with JsonUnitOfWork(store) as uow:
            order = uow.orders.get_by_id(order_id)
            assert uow.products.get_by_id("1").quantity == 90

        assert order.total_amount.amount == Decimal("1180.00")
        assert order.vat_amount.amount == Decimal("180.00")
        assert order.is_vat_applicable
        assert order.delivery_date == date(2026, 3, 2)
        assert order.items[0].id == 1

    def test_security_notes_round_trip(self, store):
        order_id = _seed(store)
        handler = RequestTransitionHandler(JsonUnitOfWork(store), FixedClock(NIGHT))
        handler.handle(order_id, REP, OrderStatus.PRODUCTS_LOADED)
        handler.handle(
            order_id, GUARD, OrderStatus.SECURITY_CHECK_INCOMPLETE,
            TransitionPayload(reasons=(SecurityReason.DAMAGED_PRODUCT,), note="crate 3"),
        )

        with JsonUnitOfWork(store) as uow:
            notes = uow.orders.get_by_id(order_id).security.notes
        assert notes == IncompleteCheck((SecurityReason.DAMAGED_PRODUCT,), "crate 3")

        handler.handle(order_id, GUARD, OrderStatus.SECURITY_CHECK_BYPASSED)
        with JsonUnitOfWork(store) as uow:
            security = uow.orders.get_by_id(order_id).security
        assert security.status == SecurityCheckStatus.BYPASSED
        assert isinstance(security.notes, BypassedCheck)
        assert security.notes.timestamp == NIGHT

    def test_payment_and_returns_round_trip(self, store):
        order_id = _seed(store)
        with JsonUnitOfWork(store) as uow:
            order = uow.orders.get_by_id(order_id)
            order.status = OrderStatus.DEPARTED_FARM
            uow.orders.save(order)
            uow.commit()

        clock = FixedClock(NIGHT)
        RequestTransitionHandler(JsonUnitOfWork(store), clock).handle(
            order_id, REP, PaymentTrigger.PAYMENT_PARTIALLY_COLLECTED,
            TransitionPayload(payment_method=PaymentMethod.NET, collected_amount="500"),
        )
        ProcessReturnHandler(JsonUnitOfWork(store), clock).handle(1, 2, "Bruised", REP)

        with JsonUnitOfWork(store) as uow:
            order = uow.orders.get_by_id(order_id)
            stock = uow.products.get_by_id("1").quantity

        assert order.receipt_no == "REC0001"
        assert order.payment_method == PaymentMethod.NET
        assert order.pending_balance.amount == Decimal("680.00")
        assert order.items[0].returned_quantity == 2
        assert order.items[0].returns[0].reason == "Bruised"
        assert stock == 92

        raw = json.loads(store.read_text())
        assert raw["orders"][0]["payment_status"] == "partially_paid"

    def test_receipt_counter_survives_restart(self, store):
        _seed(store, quantity=100)
        CreateOrderHandler(JsonUnitOfWork(store), Decimal("0.18")).handle(
            ADMIN, "Blue Bistro", [OrderItemSpec("Carrots", 1, "10")], "rep-1", None
        )
        for order_id in (1, 2):
            with JsonUnitOfWork(store) as uow:
                order = uow.orders.get_by_id(order_id)
                order.status = OrderStatus.DEPARTED_FARM
                uow.orders.save(order)
                uow.commit()
            result = RequestTransitionHandler(JsonUnitOfWork(store), FixedClock(NIGHT)).transition(
                order_id, REP, PaymentTrigger.PAYMENT_COLLECTED,
                TransitionPayload(payment_method=PaymentMethod.CASH),
            )
            assert result.receipt_no == f"REC000{order_id}"


class TestAssignmentPersistence:

    def test_on_demand_sale_round_trip(self, store):
        AddProductHandler(JsonUnitOfWork(store)).handle("Carrots", "40")
        assignment_id = CreateAssignmentHandler(JsonUnitOfWork(store)).handle(
            ADMIN, "rep-1", {"Carrots": Decimal("10")}
        ).id
        handler = RecordAssignmentSaleHandler(JsonUnitOfWork(store), FixedClock(NIGHT))
        handler.handle(REP, assignment_id, "1", "1.5", "200", "Cash", "Mrs. Perera")
        second = handler.handle(
            REP, assignment_id, "1", "2", "190", "Net", "Corner Shop", "0771234567"
        )

        with JsonUnitOfWork(store) as uow:
            assignment = uow.assignments.get_by_id(assignment_id)

        assert second.receipt_no == "ODR-000002"
        assert [s.receipt_no for s in assignment.sales] == ["ODR-000001", "ODR-000002"]
        first = assignment.sales[0]
        assert first.quantity == Decimal("1.5")
        assert first.total_amount.amount == Decimal("300.00")
        assert first.payment_method == PaymentMethod.CASH
        assert first.sold_at == NIGHT
        assert assignment.sales[1].customer_phone == "0771234567"
        assert assignment.items[0].sold_quantity == Decimal("3.5")
        assert json.loads(store.read_text())["sequences"]["on_demand_receipt"] == 2


class TestConcurrency:

    def test_last_unit_of_stock_is_sold_once(self, store):
        AddProductHandler(JsonUnitOfWork(store)).handle("Carrots", 1)

        def attempt(customer: str) -> str:
            handler = CreateOrderHandler(JsonUnitOfWork(store), Decimal("0.18"))
            try:
                handler.handle(ADMIN, customer, [OrderItemSpec("Carrots", 1, "10")], "rep-1", None)
            except InsufficientStockError:
                return "rejected"
            return "created"

        with ThreadPoolExecutor(max_workers=4) as pool:
            outcomes = list(pool.map(attempt, [f"Customer {i}" for i in range(4)]))

        assert sorted(outcomes) == ["created", "rejected", "rejected", "rejected"]
        with JsonUnitOfWork(store) as uow:
            assert uow.products.get_by_id("1").quantity == 0
            assert len(uow.orders.find()) == 1

    def test_separate_processes_do_not_lose_writes(self, store):
        workers, rounds = 4, 25
        AddProductHandler(JsonUnitOfWork(store)).handle("Carrots", 200)
        env = dict(os.environ)
        env["PYTHONPATH"] = os.pathsep.join(
            p for p in (str(SRC_DIR), env.get("PYTHONPATH")) if p
        )

        procs = [
            subprocess.Popen(
                [sys.executable, "-c", ORDER_WORKER, str(store), str(w), str(rounds)],
                env=env,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
            )
            for w in range(workers)
        ]
        for proc in procs:
            _, err = proc.communicate(timeout=120)
            assert proc.returncode == 0, err

        with JsonUnitOfWork(store) as uow:
            orders = uow.orders.find()
            assert uow.products.get_by_id("1").quantity == 200 - workers * rounds
        assert len(orders) == workers * rounds
        assert sorted(o.id for o in orders) == list(range(1, workers * rounds + 1))
        assert len({o.customer_name for o in orders}) == workers * rounds

    def test_lock_file_sits_next_to_the_store(self, store):
        with JsonUnitOfWork(store):
            assert (store.parent / "farmsales.json.lock").exists()
