"""Composition root: builds each handler on a JSON unit of work from Settings.

Settings are read on every call, so the environment in effect when a
command runs decides which data directory and working hours are used.
"""

from __future__ import annotations

from farmsales.application.add_product import AddProductHandler
from farmsales.application.close_assignment import CloseAssignmentHandler
from farmsales.application.confirm_payment import ConfirmPaymentHandler
from farmsales.application.create_assignment import CreateAssignmentHandler
from farmsales.application.create_order import CreateOrderHandler
from farmsales.application.list_assignments import ListAssignmentsHandler
from farmsales.application.list_orders import ListOrdersHandler
from farmsales.application.process_return import ProcessReturnHandler
from farmsales.application.record_assignment_sale import RecordAssignmentSaleHandler
from farmsales.application.request_transition import RequestTransitionHandler
from farmsales.application.return_assignment_stock import ReturnAssignmentStockHandler
from farmsales.application.security_editor import SecurityEditorHandler
from farmsales.application.show_inventory import ShowInventoryHandler
from farmsales.application.show_order import ShowOrderHandler
from farmsales.infrastructure.clock import SystemClock
from farmsales.infrastructure.config import Settings
from farmsales.infrastructure.notification import LoggingReceiptNotifier
from farmsales.infrastructure.persistence.json_unit_of_work import JsonUnitOfWork


def unit_of_work(settings: Settings | None = None) -> JsonUnitOfWork:
    settings = settings or Settings()
    return JsonUnitOfWork(settings.store_path, settings.lock_timeout)


def clock(settings: Settings | None = None) -> SystemClock:
    settings = settings or Settings()
    return SystemClock(settings.utc_offset_minutes, settings.working_hours)


# --- Orders -------------------------------------------------------------------


def create_order_handler() -> CreateOrderHandler:
    settings = Settings()
    return CreateOrderHandler(unit_of_work(settings), settings.vat_rate, settings.CURRENCY)


def request_transition_handler() -> RequestTransitionHandler:
    settings = Settings()
    return RequestTransitionHandler(
        unit_of_work(settings),
        clock(settings),
        LoggingReceiptNotifier(),
    )


def confirm_payment_handler() -> ConfirmPaymentHandler:
    return ConfirmPaymentHandler(request_transition_handler())


def process_return_handler() -> ProcessReturnHandler:
    settings = Settings()
    return ProcessReturnHandler(unit_of_work(settings), clock(settings))


def show_order_handler() -> ShowOrderHandler:
    return ShowOrderHandler(unit_of_work())


def list_orders_handler() -> ListOrdersHandler:
    return ListOrdersHandler(unit_of_work())


def security_editor_handler() -> SecurityEditorHandler:
    return SecurityEditorHandler(unit_of_work())


# --- Inventory ----------------------------------------------------------------


def add_product_handler() -> AddProductHandler:
    return AddProductHandler(unit_of_work())


def show_inventory_handler() -> ShowInventoryHandler:
    return ShowInventoryHandler(unit_of_work())


# --- Assignments --------------------------------------------------------------


def create_assignment_handler() -> CreateAssignmentHandler:
    return CreateAssignmentHandler(unit_of_work())


def list_assignments_handler() -> ListAssignmentsHandler:
    return ListAssignmentsHandler(unit_of_work())


def record_assignment_sale_handler() -> RecordAssignmentSaleHandler:
    settings = Settings()
    return RecordAssignmentSaleHandler(unit_of_work(settings), clock(settings), settings.CURRENCY)


def return_assignment_stock_handler() -> ReturnAssignmentStockHandler:
    return ReturnAssignmentStockHandler(unit_of_work())


def close_assignment_handler() -> CloseAssignmentHandler:
    return CloseAssignmentHandler(unit_of_work())
