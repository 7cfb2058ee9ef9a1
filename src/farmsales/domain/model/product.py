"""Product: the stock record for one farm product.

Products live independently of orders and assignments. Both of those
reference a product and move its ``quantity`` counter, but only through
the InventoryLedger, which calls the two mutators below.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from farmsales.domain.exceptions import InsufficientStockError, ValidationError
from farmsales.domain.model.value_objects import as_quantity


@dataclass
class Product:
    """An inventory record. Stock is counted in the selling unit (kg for
    most produce), so it may be fractional.

    Invariants:
    - ``quantity`` is always >= 0
    """

    id: str
    name: str
    quantity: Decimal = Decimal("0")
    reorder_threshold: Decimal = Decimal("0")

    def __post_init__(self) -> None:
        self.quantity = as_quantity(self.quantity, "Stock")
        self.reorder_threshold = as_quantity(self.reorder_threshold, "Reorder threshold")
        if self.quantity < 0:
            raise ValidationError(
                f"Stock for {self.name} cannot be negative, got {self.quantity}"
            )

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.reorder_threshold

    def reserve(self, quantity: Decimal) -> None:
        """Take stock out of the available counter.

        Raises InsufficientStockError if ``quantity`` exceeds what is on hand.
        """
        quantity = as_quantity(quantity, "Reservation quantity")
        if quantity <= 0:
            raise ValidationError("Reservation quantity must be positive")
        if quantity > self.quantity:
            raise InsufficientStockError(self.name, quantity, self.quantity)
        self.quantity -= quantity

    def restock(self, quantity: Decimal) -> None:
        """Put stock back. There is no upper bound."""
        quantity = as_quantity(quantity, "Restock quantity")
        if quantity <= 0:
            raise ValidationError("Restock quantity must be positive")
        self.quantity += quantity
