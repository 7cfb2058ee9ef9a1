import logging

import click

from farmsales.domain.exceptions import DomainException
from farmsales.infrastructure.cli.assignment_commands import (
    assignment_close,
    assignment_create,
    assignment_list,
    assignment_return,
    assignment_sell,
)
from farmsales.infrastructure.cli.inventory_commands import inventory_add, inventory_show
from farmsales.infrastructure.cli.order_commands import (
    order_create,
    order_list,
    order_pay,
    order_return,
    order_security_editor,
    order_show,
    order_transition,
)
from farmsales.infrastructure.config import Settings


@click.group()
def cli() -> None:
    """Farm sales: order lifecycle and inventory reconciliation"""
    try:
        level = Settings().log_level
    except DomainException as exc:
        raise click.ClickException(str(exc))
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@cli.group()
def order() -> None:
    """Manage sales orders."""


@cli.group()
def inventory() -> None:
    """Manage inventory."""


@cli.group()
def assignment() -> None:
    """Manage on-demand stock assignments."""


# Register subcommands
order.add_command(order_create)
order.add_command(order_list)
order.add_command(order_pay)
order.add_command(order_return)
order.add_command(order_security_editor)
order.add_command(order_show)
order.add_command(order_transition)
inventory.add_command(inventory_add)
inventory.add_command(inventory_show)
assignment.add_command(assignment_close)
assignment.add_command(assignment_create)
assignment.add_command(assignment_list)
assignment.add_command(assignment_return)
assignment.add_command(assignment_sell)
