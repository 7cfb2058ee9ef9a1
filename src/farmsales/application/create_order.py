"""Application service: Create Order use case.

Resolves product names, snapshots the agreed unit prices, lets the Order
aggregate validate its rules and takes the ordered stock out of the
inventory ledger. Order and stock changes commit together.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from farmsales.application.dto import OrderDTO, OrderItemSpec, to_order_dto
from farmsales.domain.exceptions import EntityNotFoundError, ForbiddenError
from farmsales.domain.model.order import Order, OrderItem
from farmsales.domain.model.roles import Actor
from farmsales.domain.model.value_objects import Money, Quantity
from farmsales.domain.repository.unit_of_work import UnitOfWork
from farmsales.domain.service.inventory_ledger import InventoryLedger

logger = logging.getLogger(__name__)


class CreateOrderHandler:

    def __init__(self, uow: UnitOfWork, vat_rate: Decimal, currency: str = "LKR") -> None:
        self._uow = uow
        self._vat_rate = vat_rate
        self._currency = currency

    def handle(
        self,
        actor: Actor,
        customer_name: str,
        item_specs: list[OrderItemSpec],
        assigned_to: str,
        delivery_date: date | None,
        vehicle_number: str | None = None,
        purchase_order_ref: str | None = None,
        vat_applicable: bool = False,
    ) -> OrderDTO:
        """Create a sales order in ``Assigned``.

        Steps:
        1. Resolve each product name to a Product (fail if not found).
        2. Build OrderItems with the agreed unit price (snapshot).
        3. Let the Order aggregate validate all business rules.
        4. Reserve the stock and persist, in one commit.
        """
        if not actor.role.is_back_office:
            raise ForbiddenError(f"{actor.role.value} may not create sales orders")

        with self._uow as uow:
            items: list[OrderItem] = []
            for spec in item_specs:
                product = uow.products.get_by_name(spec.product_name)
                if product is None:
                    raise EntityNotFoundError(f"Product not found: '{spec.product_name}'")
                items.append(
                    OrderItem(
                        id=None,
                        product_id=product.id,
                        product_name=product.name,
                        quantity=Quantity(spec.quantity),
                        unit_price=Money.of(spec.unit_price, self._currency),
                    )
                )

            order = Order.create(
                customer_name=customer_name,
                items=items,
                created_by=actor.user_id,
                assigned_to=assigned_to,
                delivery_date=delivery_date,
                vat_rate=self._vat_rate,
                vat_applicable=vat_applicable,
                vehicle_number=vehicle_number,
                purchase_order_ref=purchase_order_ref,
            )

            InventoryLedger(uow.products).reserve_many(
                {item.product_id: item.quantity.value for item in items}
            )
            uow.orders.save(order)
            uow.commit()

        logger.info(
            f"Order #{order.id} created by {actor.user_id} for {order.customer_name}, "
            f"total {order.total_amount}"
        )
        return to_order_dto(order)
