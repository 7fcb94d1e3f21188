"""CLI commands for the local cart.

These commands play the part of the storefront UI: they perform the
advisory checks (stock limits, positive quantities) before calling the
store, which itself never refuses a mutation.
"""

from __future__ import annotations

import asyncio

import click

from cartcore.application.cart_report import CartReportHandler
from cartcore.application.sync_cart import SyncCartHandler
from cartcore.domain.model.line_item import ProductId
from cartcore.domain.service.cart_validation import validate_line_item
from cartcore.infrastructure.bootstrap import cart_store, remote_cart_api
from cartcore.infrastructure.config import load_settings


def _parse_id(raw: str) -> ProductId:
    """Numeric ids are ints in the catalog; anything else stays a string."""
    raw = raw.strip()
    return int(raw) if raw.isascii() and raw.isdigit() else raw


@click.command("add")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, help="Unit price (e.g. 9.99).")
@click.option("--quantity", default=1, show_default=True, type=int, help="Units to add.")
@click.option("--stock", default=None, type=int, help="Units available in the catalog.")
@click.option("--image", default=None, help="Image URL.")
@click.option("--slug", default=None, help="Product slug.")
def cart_add(
    product_id: str,
    name: str,
    price: str,
    quantity: int,
    stock: int | None,
    image: str | None,
    slug: str | None,
) -> None:
    """Add a product to the cart."""
    product = {
        "id": _parse_id(product_id),
        "name": name,
        "price": price,
        "stock": stock,
        "image": image,
        "slug": slug,
    }
    result = validate_line_item({**product, "quantity": quantity}, check_stock=False)
    if not result.is_valid:
        raise click.ClickException(", ".join(result.errors))

    store = cart_store()
    store.add_item(product, quantity)

    item = store.get_item(product["id"])
    click.echo(f"Added {quantity} x '{name}' (now {item.quantity} in cart)")
    if item.stock is not None and item.quantity > item.stock:
        click.echo(f"Warning: only {item.stock} available in stock", err=True)


@click.command("update")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--quantity", required=True, type=int, help="New quantity.")
@click.option("--force", is_flag=True, default=False, help="Allow exceeding the recorded stock.")
def cart_update(product_id: str, quantity: int, force: bool) -> None:
    """Set the quantity of a cart line."""
    store = cart_store()
    item = store.get_item(_parse_id(product_id))
    if item is None:
        raise click.ClickException(f"Product '{product_id}' is not in the cart")
    if quantity <= 0:
        raise click.ClickException(
            "Quantity must be positive (use 'cart remove' to delete a line)"
        )
    if item.stock is not None and quantity > item.stock and not force:
        raise click.ClickException(
            f"Only {item.stock} items available in stock (use --force to override)"
        )

    store.update_quantity(item.id, quantity)
    click.echo(f"'{item.name}' quantity set to {quantity}")
    if item.stock is not None and quantity > item.stock:
        click.echo(
            f"Warning: Quantity ({quantity}) exceeds available stock ({item.stock})",
            err=True,
        )


@click.command("remove")
@click.option("--id", "product_id", required=True, help="Product ID.")
def cart_remove(product_id: str) -> None:
    """Remove a line from the cart."""
    store = cart_store()
    item = store.get_item(_parse_id(product_id))
    store.remove_item(_parse_id(product_id))
    if item is None:
        click.echo(f"Product '{product_id}' was not in the cart.")
    else:
        click.echo(f"'{item.name}' removed from cart.")


@click.command("clear")
@click.confirmation_option(prompt="Are you sure you want to clear your entire cart?")
def cart_clear() -> None:
    """Empty the cart."""
    store = cart_store()
    if store.snapshot.is_empty:
        click.echo("Your cart is already empty.")
        return
    store.clear_cart()
    click.echo("Your cart has been cleared.")


@click.command("show")
def cart_show() -> None:
    """Show cart lines and the price breakdown."""
    dto = CartReportHandler(cart_store()).summary()

    if not dto.items:
        click.echo("Your cart is empty.")
        return

    click.echo(f"  {'ID':<8} {'Product':<20} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*56}")
    for line in dto.items:
        flag = " !" if line.over_stock else ""
        click.echo(
            f"  {line.product_id:<8} {line.name:<20} {line.quantity:>5} "
            f"{line.unit_price:>10} {line.line_total:>10}{flag}"
        )
    click.echo(f"  {'-'*56}")
    click.echo(f"  {'Items':<35} {dto.total_items:>20}")
    click.echo(f"  {'Subtotal':<35} {dto.subtotal:>20}")
    click.echo(f"  {'Tax (10%)':<35} {dto.tax:>20}")
    click.echo(f"  {'Shipping':<35} {dto.shipping:>20}")
    click.echo(f"  {'Total':<35} {dto.total:>20}")

    if dto.errors:
        click.echo()
        click.echo("Some items in your cart may have issues:")
        for error in dto.errors:
            click.echo(f"  - {error}")
    if dto.warnings:
        click.echo(f"{len(dto.warnings)} warning(s): " + "; ".join(dto.warnings))


@click.command("health")
def cart_health() -> None:
    """Report cart validity and totals."""
    dto = CartReportHandler(cart_store()).health()

    click.echo(f"Status:      {'HEALTHY' if dto.is_healthy else 'UNHEALTHY'}")
    click.echo(f"Lines:       {dto.item_count}")
    click.echo(f"Total items: {dto.total_items}")
    click.echo(f"Total value: {dto.total_value}")
    click.echo(f"Checked:     {dto.last_checked}")
    for error in dto.errors:
        click.echo(f"  error: {error}")
    for warning in dto.warnings:
        click.echo(f"  warning: {warning}")


@click.command("verify")
def cart_verify() -> None:
    """Verify the totals arithmetic against an unrounded recomputation."""
    dto = CartReportHandler(cart_store()).verify()

    if dto.is_valid:
        click.echo("Math verification: PASSED")
        return

    click.echo(f"  {'Field':<12} {'Current':>12} {'Expected':>12} {'Diff':>12}")
    for m in dto.mismatches:
        click.echo(f"  {m.field:<12} {m.current:>12} {m.expected:>12} {m.difference:>12}")
    raise click.ClickException("Math verification: FAILED")


@click.command("sync")
@click.option("--api-url", default=None, help="Base URL of the commerce API.")
@click.option("--token", default=None, help="Bearer token of the signed-in user.")
def cart_sync(api_url: str | None, token: str | None) -> None:
    """Merge the server-side cart into the local cart."""
    settings = load_settings()
    handler = SyncCartHandler(
        store=cart_store(settings),
        fetch_remote=remote_cart_api(settings, api_url=api_url, token=token),
        timeout=settings.sync_timeout,
    )

    result = asyncio.run(handler.handle())

    if not result.success:
        raise click.ClickException(f"{result.message} ({result.error})")
    click.echo(result.message)
