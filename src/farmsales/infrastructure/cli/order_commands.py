"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from farmsales.application.dto import OrderDTO, OrderItemSpec
from farmsales.domain.exceptions import DomainException, ValidationError
from farmsales.domain.model.order import OrderStatus, PaymentMethod, parse_target
from farmsales.domain.model.value_objects import format_quantity
from farmsales.domain.repository.order_repository import OrderFilter
from farmsales.domain.service.order_state_machine import TransitionPayload
from farmsales.infrastructure.bootstrap import (
    confirm_payment_handler,
    create_order_handler,
    list_orders_handler,
    process_return_handler,
    request_transition_handler,
    security_editor_handler,
    show_order_handler,
)
from farmsales.infrastructure.cli.options import (
    actor_options,
    make_actor,
    parse_quantity,
    to_quantity,
)

_DATE = click.DateTime(formats=["%Y-%m-%d"])


def _parse_items(raw: str) -> list[OrderItemSpec]:
    """Parse 'Carrots:2.5:150.00,Leeks:5:80' into OrderItemSpec list."""
    specs: list[OrderItemSpec] = []
    for entry in raw.split(","):
        entry = entry.strip()
        parts = entry.rsplit(":", 2)
        if len(parts) != 3:
            raise click.BadParameter(
                f"Invalid item format '{entry}'. Expected 'ProductName:Quantity:UnitPrice'."
            )
        name, qty_str, price = parts
        qty = to_quantity(qty_str, name)
        specs.append(OrderItemSpec(product_name=name.strip(), quantity=qty, unit_price=price.strip()))
    return specs


def _parse_method(ctx: click.Context, param: click.Parameter, value: str | None):
    if value is None:
        return None
    try:
        return PaymentMethod.parse(value)
    except ValidationError as exc:
        raise click.BadParameter(str(exc))


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order #{dto.id}  (status={dto.status})")
    click.echo(f"Customer: {dto.customer_name}")
    click.echo(f"Sales rep: {dto.assigned_to or '-'}  Vehicle: {dto.vehicle_number or '-'}")
    click.echo(f"Delivery: {dto.delivery_date or '-'}  Created: {dto.created_at}")
    click.echo()

    if dto.has_returns:
        # Extended table with a returned column
        click.echo(
            f"  {'#':>4} {'Product':<20} {'Qty':>5} {'Returned':>9} {'Price':>12} {'Total':>12}"
        )
        click.echo(f"  {'-'*67}")
        for item in dto.items:
            click.echo(
                f"  {item.item_id:>4} {item.product_name:<20} {format_quantity(item.quantity):>5} "
                f"{format_quantity(item.returned_quantity):>9} {item.unit_price:>12} {item.line_total:>12}"
            )
        click.echo(f"  {'-'*67}")
    else:
        click.echo(f"  {'#':>4} {'Product':<20} {'Qty':>5} {'Price':>12} {'Total':>12}")
        click.echo(f"  {'-'*57}")
        for item in dto.items:
            click.echo(
                f"  {item.item_id:>4} {item.product_name:<20} {format_quantity(item.quantity):>5} "
                f"{item.unit_price:>12} {item.line_total:>12}"
            )
        click.echo(f"  {'-'*57}")

    click.echo(f"  {'Subtotal':<27} {dto.subtotal:>20}")
    click.echo(f"  {'VAT':<27} {dto.vat_amount:>20}")
    click.echo(f"  {'Order Total':<27} {dto.total:>20}")
    click.echo(f"  {'Collected':<27} {dto.collected:>20}")
    click.echo(f"  {'Balance':<27} {dto.pending_balance:>20}")
    click.echo(f"Payment: {dto.payment_status}"
               + (f" ({dto.payment_method}, receipt {dto.receipt_no})" if dto.receipt_no else ""))
    click.echo(f"Security: {dto.security_status}"
               + (f" - {dto.security_notes}" if dto.security_notes else ""))


@click.command("create")
@actor_options
@click.option("--customer", required=True, help="Customer name.")
@click.option("--items", required=True, help="Items as 'Product:Qty:UnitPrice,...'.")
@click.option("--assign-to", "assigned_to", required=True, help="Sales rep user id.")
@click.option("--delivery-date", type=_DATE, default=None, help="YYYY-MM-DD.")
@click.option("--vehicle", default=None, help="Vehicle number.")
@click.option("--po-ref", default=None, help="Customer purchase order reference.")
@click.option("--vat/--no-vat", default=False, help="Customer is VAT-registered.")
def order_create(
    actor_id, role, customer, items, assigned_to, delivery_date, vehicle, po_ref, vat
) -> None:
    """Create a new sales order (takes the stock out of inventory)."""
    specs = _parse_items(items)
    handler = create_order_handler()

    try:
        dto = handler.handle(
            actor=make_actor(actor_id, role),
            customer_name=customer,
            item_specs=specs,
            assigned_to=assigned_to,
            delivery_date=delivery_date.date() if delivery_date else None,
            vehicle_number=vehicle,
            purchase_order_ref=po_ref,
            vat_applicable=vat,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{dto.id} created  (status={dto.status})")
    _display_order(dto)


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
def order_show(order_id: int) -> None:
    """Show details of an existing order."""
    handler = show_order_handler()

    try:
        dto = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("list")
@actor_options
@click.option("--status", default=None, help="Only orders in this status.")
@click.option("--assigned-to", default=None, help="Only orders of this sales rep.")
@click.option("--vehicle", default=None, help="Only orders on this vehicle.")
@click.option("--customer", default=None, help="Only orders for this customer.")
@click.option("--from", "date_from", type=_DATE, default=None, help="Delivery on or after.")
@click.option("--to", "date_to", type=_DATE, default=None, help="Delivery on or before.")
def order_list(actor_id, role, status, assigned_to, vehicle, customer, date_from, date_to) -> None:
    """List orders in delivery / status order."""
    handler = list_orders_handler()

    try:
        target = parse_target(status) if status else None
        if target is not None and not isinstance(target, OrderStatus):
            raise ValidationError(f"'{status}' is not a stored order status")
        criteria = OrderFilter(
            status=target,
            assigned_to=assigned_to,
            vehicle_number=vehicle,
            customer_name=customer,
            delivery_from=date_from.date() if date_from else None,
            delivery_to=date_to.date() if date_to else None,
        )
        orders = handler.handle(make_actor(actor_id, role), criteria)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not orders:
        click.echo("No orders found.")
        return

    click.echo(f"{'ID':>5} {'Delivery':<11} {'Status':<42} {'Customer':<20} {'Total':>14}")
    click.echo("-" * 96)
    for dto in orders:
        click.echo(
            f"{dto.id:>5} {dto.delivery_date or '-':<11} {dto.status:<42} "
            f"{dto.customer_name:<20} {dto.total:>14}"
        )


@click.command("transition")
@actor_options
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--to", "target", required=True, help="Target status label.")
@click.option("--reason", "reasons", multiple=True, help="Security check reason (repeatable).")
@click.option("--note", default="", help="Free-text security note.")
@click.option("--method", default=None, callback=_parse_method, help="Cash or Net.")
@click.option("--amount", default=None, help="Collected amount for a partial payment.")
def order_transition(actor_id, role, order_id, target, reasons, note, method, amount) -> None:
    """Move an order to another status."""
    handler = request_transition_handler()

    try:
        payload = TransitionPayload(
            reasons=tuple(reasons),
            note=note,
            payment_method=method,
            collected_amount=amount,
        )
        result = handler.transition(order_id, make_actor(actor_id, role), parse_target(target), payload)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Order #{order_id}: {result.previous_status.value} -> {result.order.status.value}"
    )
    if result.receipt_no:
        click.echo(f"Receipt {result.receipt_no} issued.")


@click.command("pay")
@actor_options
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--method", required=True, callback=_parse_method, help="Cash or Net.")
@click.option("--amount", default=None, help="Collected amount; omit when paid in full.")
def order_pay(actor_id, role, order_id, method, amount) -> None:
    """Confirm payment on delivery."""
    handler = confirm_payment_handler()

    try:
        result = handler.handle(order_id, make_actor(actor_id, role), method, amount)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} delivered, receipt {result.receipt_no}")
    click.echo(f"Collected {result.collected}, balance {result.pending_balance} ({result.payment_status})")


@click.command("return")
@actor_options
@click.option("--item-id", required=True, type=int, help="Order line item ID.")
@click.option("--quantity", required=True, callback=parse_quantity, help="Quantity to return, e.g. 1.5.")
@click.option("--reason", required=True, help="Why the goods came back.")
def order_return(actor_id, role, item_id, quantity, reason) -> None:
    """Return part of an order line to stock."""
    handler = process_return_handler()

    try:
        record = handler.handle(item_id, quantity, reason, make_actor(actor_id, role))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Returned {format_quantity(record.quantity)} from item #{item_id}: {record.reason}")


@click.command("security-editor")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
def order_security_editor(order_id: int) -> None:
    """Show the pre-filled incomplete security check form."""
    handler = security_editor_handler()

    try:
        dto = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    for reason in dto.available_reasons:
        mark = "x" if reason in dto.selected_reasons else " "
        click.echo(f"[{mark}] {reason}")
    click.echo(f"Note: {dto.note}")
