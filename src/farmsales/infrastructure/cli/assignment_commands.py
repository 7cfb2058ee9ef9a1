"""CLI commands for on-demand stock assignments."""

from __future__ import annotations

import click

from farmsales.application.dto import AssignmentDTO
from farmsales.domain.exceptions import DomainException
from farmsales.domain.model.assignment import AssignmentStatus
from farmsales.domain.model.value_objects import format_quantity
from farmsales.infrastructure.bootstrap import (
    close_assignment_handler,
    create_assignment_handler,
    list_assignments_handler,
    record_assignment_sale_handler,
    return_assignment_stock_handler,
)
from farmsales.infrastructure.cli.options import (
    actor_options,
    make_actor,
    parse_quantities,
    parse_quantity,
)

_STATUS = click.Choice([s.value for s in AssignmentStatus])


def _display_assignment(dto: AssignmentDTO) -> None:
    click.echo(
        f"Assignment #{dto.id}  ({dto.status}, {dto.assignment_type}) "
        f"rep={dto.sales_rep_id} vehicle={dto.vehicle_number or '-'}"
    )
    click.echo(f"  {'ID':<6} {'Product':<20} {'Assigned':>9} {'Sold':>6} {'Returned':>9} {'Left':>6}")
    click.echo(f"  {'-'*60}")
    for item in dto.items:
        click.echo(
            f"  {item.product_id:<6} {item.product_name:<20} {format_quantity(item.assigned):>9} "
            f"{format_quantity(item.sold):>6} {format_quantity(item.returned):>9} "
            f"{format_quantity(item.available):>6}"
        )
    if dto.sales:
        click.echo(f"  On-demand sales: {len(dto.sales)}")
        for sale in dto.sales:
            click.echo(
                f"    {sale.receipt_no}  {sale.sold_at}  {format_quantity(sale.quantity)} x "
                f"{sale.product_name} to {sale.customer_name}  {sale.total} ({sale.payment_method})"
            )


@click.command("create")
@actor_options
@click.option("--rep", "sales_rep_id", required=True, help="Sales rep receiving the stock.")
@click.option("--items", required=True, help="Items as 'Product:Qty,Product:Qty'.")
@click.option("--vehicle", default=None, help="Vehicle number.")
@click.option("--notes", default="", help="Free-text notes.")
def assignment_create(actor_id, role, sales_rep_id, items, vehicle, notes) -> None:
    """Hand on-demand stock to a sales rep (takes it out of inventory)."""
    quantities = parse_quantities(items)
    handler = create_assignment_handler()

    try:
        dto = handler.handle(
            make_actor(actor_id, role), sales_rep_id, quantities, vehicle_number=vehicle, notes=notes
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_assignment(dto)


@click.command("list")
@actor_options
@click.option("--rep", "sales_rep_id", default=None, help="Only this sales rep.")
@click.option("--status", type=_STATUS, default=None, help="Only this status.")
def assignment_list(actor_id, role, sales_rep_id, status) -> None:
    """List assignments."""
    handler = list_assignments_handler()
    assignments = handler.handle(
        make_actor(actor_id, role),
        sales_rep_id=sales_rep_id,
        status=AssignmentStatus(status) if status else None,
    )

    if not assignments:
        click.echo("No assignments found.")
        return
    for dto in assignments:
        _display_assignment(dto)


@click.command("sell")
@actor_options
@click.option("--id", "assignment_id", required=True, type=int, help="Assignment ID.")
@click.option("--product-id", required=True, help="Product ID.")
@click.option("--quantity", required=True, callback=parse_quantity, help="Quantity sold, e.g. 2.5.")
@click.option("--price", required=True, help="Selling price per unit.")
@click.option("--method", type=click.Choice(["Cash", "Net"], case_sensitive=False), default="Cash",
              show_default=True)
@click.option("--customer", required=True, help="Customer name.")
@click.option("--phone", default=None, help="Customer phone number.")
def assignment_sell(
    actor_id, role, assignment_id, product_id, quantity, price, method, customer, phone
) -> None:
    """Record a sale from on-demand stock and print its receipt number."""
    handler = record_assignment_sale_handler()

    try:
        sale = handler.handle(
            make_actor(actor_id, role),
            assignment_id,
            product_id,
            quantity,
            unit_price=price,
            payment_method=method,
            customer_name=customer,
            customer_phone=phone,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Sale {sale.receipt_no}: {format_quantity(sale.quantity)} x {sale.product_name} "
        f"@ {sale.unit_price} = {sale.total} ({sale.payment_method}) to {sale.customer_name}"
    )


@click.command("return")
@actor_options
@click.option("--id", "assignment_id", required=True, type=int, help="Assignment ID.")
@click.option("--product-id", required=True, help="Product ID.")
@click.option("--quantity", required=True, callback=parse_quantity, help="Quantity handed back.")
def assignment_return(actor_id, role, assignment_id, product_id, quantity) -> None:
    """Give unsold on-demand stock back to inventory."""
    handler = return_assignment_stock_handler()

    try:
        dto = handler.handle(make_actor(actor_id, role), assignment_id, product_id, quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_assignment(dto)


@click.command("close")
@actor_options
@click.option("--id", "assignment_id", required=True, type=int, help="Assignment ID.")
@click.option(
    "--status",
    type=click.Choice([AssignmentStatus.COMPLETED.value, AssignmentStatus.CANCELLED.value]),
    default=AssignmentStatus.CANCELLED.value,
    show_default=True,
)
def assignment_close(actor_id, role, assignment_id, status) -> None:
    """Close an assignment; unsold stock goes back to inventory."""
    handler = close_assignment_handler()

    try:
        dto = handler.handle(make_actor(actor_id, role), assignment_id, AssignmentStatus(status))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_assignment(dto)
