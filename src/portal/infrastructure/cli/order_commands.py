"""CLI commands for orders."""

from __future__ import annotations

import click

from portal.application.dto import OrderDTO
from portal.application.list_orders import ListOrdersHandler
from portal.application.session import authenticate
from portal.application.show_order import ShowOrderHandler
from portal.infrastructure.bootstrap import client_repository, order_repository
from portal.infrastructure.cli._common import (
    display_lines,
    display_totals,
    open_session,
    run,
)


@click.command("submit")
@click.option("--client", "username", required=True, help="Client username.")
def order_submit(username: str) -> None:
    """Send the cart as an order."""

    async def _submit():
        session = await open_session(username)
        return await session.submit_order()

    result = run(_submit())
    click.echo(f"Order #{result.order_id} sent  (total {result.grand_total})")


@click.command("list")
@click.option("--client", "username", required=True, help="Client username.")
def order_list(username: str) -> None:
    """List the client's orders, newest first."""

    async def _list():
        client = await authenticate(client_repository(), username)
        return await ListOrdersHandler(order_repository()).handle(client.client_id)

    orders = run(_list())
    if not orders:
        click.echo("No orders yet.")
        return

    click.echo(f"  {'Order':<32} {'Date':<20} {'Status':<10} {'Items':>5} {'Total':>11}")
    click.echo(f"  {'-'*82}")
    for o in orders:
        click.echo(
            f"  {o.id:<32} {o.created_at:<20} {o.status:<10} "
            f"{o.item_count:>5} {o.grand_total:>11}"
        )


def _display_order(dto: OrderDTO) -> None:
    click.echo(f"Order #{dto.id}  (status={dto.status})")
    click.echo(f"Client:   {dto.company_name} ({dto.username})")
    click.echo(f"Created:  {dto.created_at}")
    click.echo()
    display_lines(dto.items)
    display_totals(dto.totals)


@click.command("show")
@click.option("--client", "username", required=True, help="Client username.")
@click.option("--id", "order_id", required=True, help="Order ID to display.")
def order_show(username: str, order_id: str) -> None:
    """Show details of one of the client's orders."""

    async def _show():
        client = await authenticate(client_repository(), username)
        return await ShowOrderHandler(order_repository()).handle(order_id, client.client_id)

    _display_order(run(_show()))
