"""CLI commands for the client's cart."""

from __future__ import annotations

import click

from portal.application.dto import CartDTO
from portal.infrastructure.cli._common import (
    display_lines,
    display_totals,
    open_session,
    run,
)

_client_option = click.option(
    "--client", "username", required=True, help="Client username."
)
_product_option = click.option("--product", "product_id", required=True, help="Product ID.")
_variant_option = click.option("--variant", "variant_id", required=True, help="Variant ID.")


def _display_cart(dto: CartDTO) -> None:
    if not dto.items:
        click.echo("Cart is empty.")
        return
    click.echo(f"Cart of {dto.owner}")
    click.echo()
    display_lines(dto.items)
    display_totals(dto.totals)


@click.command("show")
@_client_option
def cart_show(username: str) -> None:
    """Show the cart with totals."""

    async def _show():
        return (await open_session(username)).cart()

    _display_cart(run(_show()))


@click.command("set")
@_client_option
@_product_option
@_variant_option
@click.option("--qty", "quantity", required=True, type=int, help="New absolute quantity.")
def cart_set(username: str, product_id: str, variant_id: str, quantity: int) -> None:
    """Set the quantity of a variant (0 removes it)."""

    async def _set():
        session = await open_session(username)
        session.set_quantity(product_id, variant_id, quantity)
        return session.cart()

    _display_cart(run(_set()))


@click.command("add")
@_client_option
@_product_option
@_variant_option
@click.option("--qty", "quantity", default=1, show_default=True, type=int, help="Units to add.")
def cart_add(username: str, product_id: str, variant_id: str, quantity: int) -> None:
    """Add units of a variant to the cart."""

    async def _add():
        session = await open_session(username)
        session.add_item(product_id, variant_id, quantity)
        return session.cart()

    _display_cart(run(_add()))


@click.command("remove")
@_client_option
@_product_option
@_variant_option
def cart_remove(username: str, product_id: str, variant_id: str) -> None:
    """Remove a variant from the cart."""

    async def _remove():
        session = await open_session(username)
        session.remove_item(product_id, variant_id)
        return session.cart()

    _display_cart(run(_remove()))


@click.command("clear")
@_client_option
def cart_clear(username: str) -> None:
    """Empty the cart."""

    async def _clear():
        (await open_session(username)).clear_cart()

    run(_clear())
    click.echo("Cart cleared.")
