"""Application service: Add Product use case."""

from __future__ import annotations

from decimal import Decimal

from farmsales.domain.exceptions import ValidationError
from farmsales.domain.model.product import Product
from farmsales.domain.model.value_objects import as_quantity
from farmsales.domain.repository.unit_of_work import UnitOfWork


class AddProductHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        name: str,
        quantity: Decimal | int | str = 0,
        reorder_threshold: Decimal | int | str = 0,
    ) -> Product:
        """Add a new inventory record with its opening stock."""
        if not name or not name.strip():
            raise ValidationError("Product name is required")
        reorder_threshold = as_quantity(reorder_threshold, "Reorder threshold")
        if reorder_threshold < 0:
            raise ValidationError("Reorder threshold cannot be negative")

        with self._uow as uow:
            existing = uow.products.get_by_name(name)
            if existing is not None:
                raise ValidationError(f"Product '{name}' already exists")

            # Auto-assign ID based on existing products
            all_products = uow.products.list_all()
            if all_products:
                next_id = str(max(int(p.id) for p in all_products) + 1)
            else:
                next_id = "1"

            product = Product(
                id=next_id,
                name=name.strip(),
                quantity=quantity,
                reorder_threshold=reorder_threshold,
            )
            uow.products.save(product)
            uow.commit()
        return product
