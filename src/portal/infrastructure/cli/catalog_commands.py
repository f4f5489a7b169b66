"""CLI commands for browsing the catalog."""

from __future__ import annotations

import click

from portal.infrastructure.bootstrap import catalog_provider
from portal.infrastructure.cli._common import open_session, run


@click.command("list")
@click.option("--client", "username", required=True, help="Client username.")
@click.option("--category", "category_id", default=None, help="Only this category.")
def catalog_list(username: str, category_id: str | None) -> None:
    """List products with the client's effective prices."""

    async def _list():
        session = await open_session(username)
        return session.price_list(category_id)

    entries = run(_list())
    if not entries:
        click.echo("No products found.")
        return

    click.echo(
        f"  {'Product':<8} {'Variant':<8} {'Name':<24} {'Size':<8} {'Price':>10} {'VAT':>4}"
    )
    click.echo(f"  {'-'*67}")
    for e in entries:
        stock = "" if e.in_stock else "  (out of stock)"
        click.echo(
            f"  {e.product_id:<8} {e.variant_id:<8} {e.product_name:<24} "
            f"{e.size:<8} {e.price:>10} {e.tax_rate:>3}%{stock}"
        )


@click.command("categories")
def catalog_categories() -> None:
    """List product categories."""
    catalog = run(catalog_provider().load())
    categories = catalog.sorted_categories()
    if not categories:
        click.echo("No categories found.")
        return
    for category in categories:
        count = len(catalog.products_in_category(category.id))
        click.echo(f"  {category.id:<12} {category.name:<30} {count:>3} product(s)")
