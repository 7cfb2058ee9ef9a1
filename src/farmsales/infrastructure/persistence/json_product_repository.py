"""JSON-document-backed implementation of ProductRepository.

Stock figures are stored as decimal strings ("12.5") so weights survive
the round trip exactly; plain numbers written by older files still load.
"""

from __future__ import annotations

from farmsales.domain.model.product import Product
from farmsales.domain.repository.product_repository import ProductRepository


class JsonProductRepository(ProductRepository):

    def __init__(self, document: dict) -> None:
        self._products: list[dict] = document.setdefault("products", [])

    # --- ProductRepository interface ------------------------------------------

    def get_by_id(self, product_id: str) -> Product | None:
        for raw in self._products:
            if raw["id"] == product_id:
                return self._to_domain(raw)
        return None

    def get_by_name(self, name: str) -> Product | None:
        for raw in self._products:
            if raw["name"].lower() == name.strip().lower():
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[Product]:
        return [self._to_domain(raw) for raw in self._products]

    def save(self, product: Product) -> None:
        for i, raw in enumerate(self._products):
            if raw["id"] == product.id:
                self._products[i] = self._to_raw(product)
                return
        self._products.append(self._to_raw(product))

    # --- Serialization helpers ------------------------------------------------

    @staticmethod
    def _to_raw(product: Product) -> dict:
        return {
            "id": product.id,
            "name": product.name,
            "quantity": str(product.quantity),
            "reorder_threshold": str(product.reorder_threshold),
        }

    @staticmethod
    def _to_domain(raw: dict) -> Product:
        return Product(
            id=raw["id"],
            name=raw["name"],
            quantity=raw["quantity"],
            reorder_threshold=raw.get("reorder_threshold", "0"),
        )
