"""Port for the stock ledger rows (one Product per farm product)."""

from __future__ import annotations

from abc import ABC, abstractmethod

from farmsales.domain.model.product import Product


class ProductRepository(ABC):

    @abstractmethod
    def get_by_id(self, product_id: str) -> Product | None:
        ...

    @abstractmethod
    def get_by_name(self, name: str) -> Product | None:
        """Case-insensitive lookup; order entry uses product names."""

    @abstractmethod
    def list_all(self) -> list[Product]:
        ...

    @abstractmethod
    def save(self, product: Product) -> None:
        """Insert or overwrite the row keyed by ``product.id``."""

    def list_low_stock(self) -> list[Product]:
        return [p for p in self.list_all() if p.is_low_stock]
