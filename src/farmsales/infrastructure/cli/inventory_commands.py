"""CLI commands for inventory management."""

from __future__ import annotations

from decimal import Decimal

import click

from farmsales.domain.exceptions import DomainException
from farmsales.domain.model.value_objects import format_quantity
from farmsales.infrastructure.bootstrap import add_product_handler, show_inventory_handler
from farmsales.infrastructure.cli.options import parse_quantity


@click.command("add")
@click.option("--name", required=True, help="Product name.")
@click.option("--quantity", default="0", callback=parse_quantity, help="Opening stock, e.g. 120.5 (kg).")
@click.option(
    "--reorder-threshold", default="0", callback=parse_quantity, help="Low-stock warning level."
)
def inventory_add(name: str, quantity: Decimal, reorder_threshold: Decimal) -> None:
    """Add a new product with its opening stock."""
    handler = add_product_handler()

    try:
        product = handler.handle(name=name, quantity=quantity, reorder_threshold=reorder_threshold)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Product #{product.id} '{product.name}' added with "
        f"{format_quantity(product.quantity)} in stock"
    )


@click.command("show")
@click.option("--low-stock", is_flag=True, default=False, help="Only products at or below threshold.")
def inventory_show(low_stock: bool) -> None:
    """Show current inventory levels."""
    handler = show_inventory_handler()
    lines = handler.handle(low_stock_only=low_stock)

    if not lines:
        click.echo("No inventory records found.")
        return

    click.echo(f"{'ID':<6} {'Product':<20} {'Available':>10} {'Reorder at':>11}")
    click.echo("-" * 50)
    for line in lines:
        flag = "  LOW" if line.low_stock else ""
        click.echo(
            f"{line.product_id:<6} {line.product_name:<20} {format_quantity(line.available):>10} "
            f"{format_quantity(line.reorder_threshold):>11}{flag}"
        )
