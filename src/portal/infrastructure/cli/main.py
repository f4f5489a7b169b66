import click

from portal.infrastructure.bootstrap import settings
from portal.infrastructure.cli._common import open_session, run
from portal.infrastructure.cli.cart_commands import (
    cart_add,
    cart_clear,
    cart_remove,
    cart_set,
    cart_show,
)
from portal.infrastructure.cli.catalog_commands import catalog_categories, catalog_list
from portal.infrastructure.cli.order_commands import order_list, order_show, order_submit
from portal.infrastructure.logging_config import setup_logging


@click.group()
@click.option("-v", "--verbose", is_flag=True, default=False, help="Debug logging.")
def cli(verbose: bool) -> None:
    """B2B ordering portal."""
    setup_logging("DEBUG" if verbose else settings().log_level)


@cli.group()
def catalog() -> None:
    """Browse the catalog."""


@cli.group()
def cart() -> None:
    """Manage the cart."""


@cli.group()
def order() -> None:
    """Send and inspect orders."""


@cli.command("logout")
@click.option("--client", "username", required=True, help="Client username.")
def logout(username: str) -> None:
    """End the client's session and discard its cart."""

    async def _logout():
        (await open_session(username)).teardown()

    run(_logout())
    click.echo("Logged out.")


# Register subcommands
catalog.add_command(catalog_categories)
catalog.add_command(catalog_list)
cart.add_command(cart_add)
cart.add_command(cart_clear)
cart.add_command(cart_remove)
cart.add_command(cart_set)
cart.add_command(cart_show)
order.add_command(order_list)
order.add_command(order_show)
order.add_command(order_submit)
