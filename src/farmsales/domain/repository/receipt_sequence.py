"""Abstract source of receipt numbers.

Delivered sales orders and on-demand sales are numbered from two
independent counters: ``REC0001`` and ``ODR-000001``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

RECEIPT_PREFIX = "REC"
ON_DEMAND_RECEIPT_PREFIX = "ODR-"


def format_receipt_no(value: int) -> str:
    return f"{RECEIPT_PREFIX}{value:04d}"


def format_on_demand_receipt_no(value: int) -> str:
    return f"{ON_DEMAND_RECEIPT_PREFIX}{value:06d}"


class ReceiptSequence(ABC):

    @abstractmethod
    def next_receipt_no(self) -> str:
        """Allocate the next receipt number. Numbers are never handed out twice."""

    @abstractmethod
    def next_on_demand_receipt_no(self) -> str:
        """Same guarantee, for sales made from on-demand stock."""
