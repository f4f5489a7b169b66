"""Helpers shared by the CLI command modules."""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import TypeVar

import click

from portal.application.dto import LineDTO, TotalsDTO
from portal.application.session import PortalSession, authenticate
from portal.domain.exceptions import DomainException
from portal.infrastructure.bootstrap import client_repository, portal_session

T = TypeVar("T")


def run(coro: Coroutine[object, object, T]) -> T:
    """Run a use case, turning domain errors into one-line CLI errors."""
    try:
        return asyncio.run(coro)
    except DomainException as exc:
        raise click.ClickException(str(exc))


async def open_session(username: str) -> PortalSession:
    client = await authenticate(client_repository(), username)
    session = portal_session()
    await session.init(client)
    for notice in session.notices:
        click.echo(f"Note: {notice}", err=True)
    return session


def display_lines(items: list[LineDTO]) -> None:
    click.echo(
        f"  {'Product':<24} {'Size':<8} {'Qty':>5} {'Price':>10} {'Total':>11} {'VAT':>4}"
    )
    click.echo(f"  {'-'*67}")
    for item in items:
        click.echo(
            f"  {item.product_name:<24} {item.size:<8} {item.quantity:>5} "
            f"{item.unit_price:>10} {item.line_total:>11} {item.tax_rate:>3}%"
        )
    click.echo(f"  {'-'*67}")


def display_totals(totals: TotalsDTO) -> None:
    click.echo(f"  {'Subtotal':<40} {totals.subtotal:>27}")
    click.echo(f"  {'VAT 7%':<40} {totals.vat7_total:>27}")
    click.echo(f"  {'VAT 19%':<40} {totals.vat19_total:>27}")
    click.echo(f"  {'Order Total':<40} {totals.grand_total:>27}")
