"""Collaborators the core consumes but does not implement."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from farmsales.domain.model.receipt import Receipt
from farmsales.domain.model.security import WorkingHours


class Clock(ABC):

    @abstractmethod
    def now(self) -> datetime:
        """Current local time at the farm."""

    @property
    @abstractmethod
    def working_hours(self) -> WorkingHours:
        """Window in which the security check cannot be bypassed."""


class ReceiptNotifier(ABC):

    @abstractmethod
    def send_receipt(self, receipt: Receipt) -> None:
        """Print and/or email a receipt. Best effort: may raise, callers log."""
