"""Abstract repository for Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date

from farmsales.domain.model.order import Order, OrderStatus


@dataclass(frozen=True)
class OrderFilter:
    """Predicates for listing orders. ``None`` means "don't filter"."""

    status: OrderStatus | None = None
    assigned_to: str | None = None
    vehicle_number: str | None = None
    customer_name: str | None = None
    delivery_from: date | None = None
    delivery_to: date | None = None

    def matches(self, order: Order) -> bool:
        if self.status is not None and order.status != self.status:
            return False
        if self.assigned_to is not None and order.assigned_to != self.assigned_to:
            return False
        if self.vehicle_number is not None and order.vehicle_number != self.vehicle_number:
            return False
        if (
            self.customer_name is not None
            and order.customer_name.lower() != self.customer_name.lower()
        ):
            return False
        if self.delivery_from is not None or self.delivery_to is not None:
            if order.delivery_date is None:
                return False
            if self.delivery_from is not None and order.delivery_date < self.delivery_from:
                return False
            if self.delivery_to is not None and order.delivery_date > self.delivery_to:
                return False
        return True


class OrderRepository(ABC):

    @abstractmethod
    def next_id(self) -> int:
        """Generate the next unique order ID."""

    @abstractmethod
    def get_by_id(self, order_id: int) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def get_by_item_id(self, item_id: int) -> Order | None:
        """Return the order owning the given line item, or None."""

    @abstractmethod
    def find(self, criteria: OrderFilter | None = None) -> list[Order]:
        """Return matching orders in insertion order."""

    @abstractmethod
    def save(self, order: Order) -> None:
        """Persist a new or updated order, assigning ids to new lines."""
