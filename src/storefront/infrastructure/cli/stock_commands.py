"""CLI commands for stock levels and reservations."""

from __future__ import annotations

import click

from storefront.application.reserve_stock import ReleaseStockHandler, ReserveStockHandler
from storefront.application.set_stock import SetStockHandler
from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import product_repository, reservation_service
from storefront.infrastructure.cli.runtime import run_with_store
from storefront.infrastructure.config import Settings
from storefront.infrastructure.persistence.store import SqlAlchemyStore


def _parse_items(raw: str) -> list[tuple[str, int]]:
    """Parse 'id1:3,id2:5' into (product_id, quantity) pairs."""
    items: list[tuple[str, int]] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'ProductId:Quantity'."
            )
        product_id, qty_str = pair.rsplit(":", 1)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for product '{product_id}'."
            )
        items.append((product_id.strip(), qty))
    return items


@click.command("set")
@click.argument("product_id")
@click.option("--quantity", required=True, type=int, help="Units on hand.")
@click.pass_obj
def stock_set(config: Settings, product_id: str, quantity: int) -> None:
    """Overwrite the stock level of a product."""

    async def work(store: SqlAlchemyStore) -> None:
        handler = SetStockHandler(product_repo=product_repository(store, config))
        await handler.handle(product_id, quantity)

    try:
        run_with_store(config, work)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Stock for product {product_id} set to {quantity}")


@click.command("reserve")
@click.option("--items", required=True, help="Items as 'ProductId:Qty,ProductId:Qty'.")
@click.pass_obj
def stock_reserve(config: Settings, items: str) -> None:
    """Reserve stock for several products, all or nothing."""
    lines = _parse_items(items)

    async def work(store: SqlAlchemyStore) -> bool:
        handler = ReserveStockHandler(reservation_service(store, config))
        return await handler.handle(lines)

    try:
        reserved = run_with_store(config, work)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not reserved:
        raise click.ClickException("Insufficient stock; nothing was reserved")
    click.echo(f"Reserved {len(lines)} line(s)")


@click.command("release")
@click.option("--items", required=True, help="Items as 'ProductId:Qty,ProductId:Qty'.")
@click.pass_obj
def stock_release(config: Settings, items: str) -> None:
    """Return previously reserved units to stock."""
    lines = _parse_items(items)

    async def work(store: SqlAlchemyStore) -> None:
        handler = ReleaseStockHandler(reservation_service(store, config))
        await handler.handle(lines)

    try:
        run_with_store(config, work)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Released {len(lines)} line(s)")
