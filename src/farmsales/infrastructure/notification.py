"""Receipt delivery stand-in: the rendered receipt goes to the log."""

from __future__ import annotations

import logging

from farmsales.domain.model.receipt import Receipt
from farmsales.domain.ports import ReceiptNotifier

logger = logging.getLogger(__name__)


class LoggingReceiptNotifier(ReceiptNotifier):

    def send_receipt(self, receipt: Receipt) -> None:
        logger.info(f"Receipt {receipt.receipt_no} for order #{receipt.order_id}\n{receipt.render()}")
