import logging

import click

from cartcore.infrastructure.cli.cart_commands import (
    cart_add,
    cart_clear,
    cart_health,
    cart_remove,
    cart_show,
    cart_sync,
    cart_update,
    cart_verify,
)
from cartcore.infrastructure.config import load_settings


@click.group()
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log debug output.")
def cli(verbose: bool) -> None:
    """cartcore — local shopping cart with validation and sync"""
    level = logging.DEBUG if verbose else load_settings().log_level
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.group()
def cart() -> None:
    """Manage the local cart."""


# Register subcommands
cart.add_command(cart_add)
cart.add_command(cart_clear)
cart.add_command(cart_health)
cart.add_command(cart_remove)
cart.add_command(cart_show)
cart.add_command(cart_sync)
cart.add_command(cart_update)
cart.add_command(cart_verify)
