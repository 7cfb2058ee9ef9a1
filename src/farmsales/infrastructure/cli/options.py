"""Option helpers shared by the command modules."""

from __future__ import annotations

from decimal import Decimal

import click

from farmsales.domain.exceptions import ValidationError
from farmsales.domain.model.roles import Actor, Role
from farmsales.domain.model.value_objects import as_quantity


def _parse_role(ctx: click.Context, param: click.Parameter, value: str) -> Role:
    try:
        return Role.parse(value)
    except ValidationError as exc:
        choices = ", ".join(r.value for r in Role)
        raise click.BadParameter(f"{exc}. Choose from: {choices}")


def actor_options(func):
    """Add ``--actor`` / ``--role``; the command receives them as an ``actor`` Actor."""
    func = click.option(
        "--role", required=True, callback=_parse_role, help="Role to act under, e.g. 'Sales Rep'."
    )(func)
    func = click.option("--actor", "actor_id", required=True, help="User id of the caller.")(func)
    return func


def make_actor(actor_id: str, role: Role) -> Actor:
    try:
        return Actor(user_id=actor_id, role=role)
    except ValidationError as exc:
        raise click.BadParameter(str(exc), param_hint="--actor")


def to_quantity(raw: str, name: str | None = None) -> Decimal:
    """Parse one quantity from the command line; the sign is left to the domain."""
    try:
        return as_quantity(raw)
    except ValidationError:
        suffix = f" for product '{name}'" if name else ""
        raise click.BadParameter(f"Invalid quantity '{raw}'{suffix}.")


def parse_quantity(ctx: click.Context, param: click.Parameter, value: str | None) -> Decimal | None:
    """Click callback for weights such as ``2.5``."""
    if value is None:
        return None
    return to_quantity(value)


def parse_quantities(raw: str) -> dict[str, Decimal]:
    """Parse 'Carrots:20,Leeks:2.5' into {name: qty}."""
    result: dict[str, Decimal] = {}
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'ProductName:Quantity'."
            )
        name, qty_str = pair.rsplit(":", 1)
        result[name.strip()] = to_quantity(qty_str, name)
    return result
