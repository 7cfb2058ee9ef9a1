"""Domain service: Return Processor.

A return moves stock from a customer order (or an agent's unsold
on-demand batch) back into the inventory ledger. The line-item change and
the restock are made in the same unit of work by the calling handler.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal

from farmsales.domain.exceptions import InvalidReturnError
from farmsales.domain.model.assignment import AssignmentItem
from farmsales.domain.model.order import Order, OrderReturn, OrderStatus
from farmsales.domain.model.value_objects import format_quantity
from farmsales.domain.service.inventory_ledger import InventoryLedger

logger = logging.getLogger(__name__)


class ReturnProcessor:

    def __init__(self, ledger: InventoryLedger) -> None:
        self._ledger = ledger

    def process_return(
        self,
        order: Order,
        item_id: int,
        quantity: Decimal,
        reason: str,
        returned_by: str,
        returned_at: datetime,
    ) -> OrderReturn:
        """Return ``quantity`` of one order line to stock."""
        if order.status == OrderStatus.CANCELLED:
            raise InvalidReturnError(
                f"Order #{order.id} is cancelled; its stock was already restocked"
            )
        item = order.find_item(item_id)
        record = item.record_return(quantity, reason, returned_by, returned_at)
        self._ledger.restock(item.product_id, record.quantity)
        logger.info(
            f"Order #{order.id}: {format_quantity(record.quantity)} x {item.product_name} returned "
            f"by {returned_by} ({record.reason})"
        )
        return record

    def process_assignment_return(self, item: AssignmentItem, quantity: Decimal) -> None:
        """Field agent hands unsold on-demand stock back to the farm."""
        returned = item.take_back(quantity)
        self._ledger.restock(item.product_id, returned)
