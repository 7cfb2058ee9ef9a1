"""Application service: Show Inventory use case (query)."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from farmsales.domain.repository.unit_of_work import UnitOfWork


@dataclass(frozen=True)
class InventoryLineDTO:
    product_id: str
    product_name: str
    available: Decimal
    reorder_threshold: Decimal
    low_stock: bool


class ShowInventoryHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, low_stock_only: bool = False) -> list[InventoryLineDTO]:
        with self._uow as uow:
            if low_stock_only:
                products = uow.products.list_low_stock()
            else:
                products = uow.products.list_all()
        return [
            InventoryLineDTO(
                product_id=p.id,
                product_name=p.name,
                available=p.quantity,
                reorder_threshold=p.reorder_threshold,
                low_stock=p.is_low_stock,
            )
            for p in products
        ]
