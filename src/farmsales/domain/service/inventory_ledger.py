"""Domain service: Inventory Ledger.

The ledger is the only code allowed to move a product's available
quantity. Orders and assignments call it; they never touch
``Product.quantity`` themselves.

Multi-product reservations use a two-phase approach (validate-then-mutate)
so inventory is never left partially reserved when one product fails.
Persisting happens through the caller's unit of work, which serialises
concurrent writers and commits the whole group at once.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from farmsales.domain.exceptions import (
    EntityNotFoundError,
    InsufficientStockError,
    ValidationError,
)
from farmsales.domain.model.product import Product
from farmsales.domain.model.value_objects import as_quantity, format_quantity
from farmsales.domain.repository.product_repository import ProductRepository

logger = logging.getLogger(__name__)


class InventoryLedger:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def available(self, product_id: str) -> Decimal:
        return self._load(product_id).quantity

    def reserve(self, product_id: str, quantity: Decimal) -> Product:
        """Take ``quantity`` out of stock."""
        product = self._load(product_id)
        product.reserve(quantity)
        self._product_repo.save(product)
        logger.debug(
            f"Reserved {format_quantity(quantity)} of {product.name}, "
            f"{format_quantity(product.quantity)} left"
        )
        return product

    def restock(self, product_id: str, quantity: Decimal) -> Product:
        """Put ``quantity`` back into stock."""
        product = self._load(product_id)
        product.restock(quantity)
        self._product_repo.save(product)
        logger.debug(
            f"Restocked {format_quantity(quantity)} of {product.name}, "
            f"{format_quantity(product.quantity)} on hand"
        )
        return product

    def reserve_many(self, quantities: dict[str, Decimal]) -> None:
        """Reserve stock for several products at once.

        Phase 1: load and validate every product; fails before any mutation.
        Phase 2: mutate and persist.
        """
        loaded: list[tuple[Product, Decimal]] = []
        for product_id, raw_qty in quantities.items():
            product = self._load(product_id)
            qty = as_quantity(raw_qty, "Reservation quantity")
            if qty <= 0:
                raise ValidationError(
                    f"Reservation quantity for {product.name} must be positive"
                )
            if qty > product.quantity:
                raise InsufficientStockError(product.name, qty, product.quantity)
            loaded.append((product, qty))

        for product, qty in loaded:
            product.reserve(qty)
            self._product_repo.save(product)

    def restock_many(self, quantities: dict[str, Decimal]) -> None:
        for product_id, qty in quantities.items():
            if qty > 0:
                self.restock(product_id, qty)

    def _load(self, product_id: str) -> Product:
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product '{product_id}' not found")
        return product
