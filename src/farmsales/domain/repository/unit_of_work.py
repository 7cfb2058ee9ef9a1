"""Abstract unit of work.

Every command runs inside one unit of work. Changes made through its
repositories become visible only when ``commit()`` is called; leaving the
``with`` block without committing (or because of an exception) discards
them, so a transition is either applied in full or not at all.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from farmsales.domain.repository.assignment_repository import AssignmentRepository
from farmsales.domain.repository.order_repository import OrderRepository
from farmsales.domain.repository.product_repository import ProductRepository
from farmsales.domain.repository.receipt_sequence import ReceiptSequence


class UnitOfWork(ABC):
    orders: OrderRepository
    products: ProductRepository
    assignments: AssignmentRepository
    receipts: ReceiptSequence

    def __enter__(self) -> UnitOfWork:
        self._begin()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        # Rolling back after a successful commit is a no-op.
        self.rollback()
        self._end()

    @abstractmethod
    def _begin(self) -> None:
        """Open the transaction (take locks, load a snapshot)."""

    def _end(self) -> None:
        """Release whatever ``_begin`` acquired."""

    @abstractmethod
    def commit(self) -> None:
        """Make every change since ``_begin`` durable, all together."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard uncommitted changes."""
