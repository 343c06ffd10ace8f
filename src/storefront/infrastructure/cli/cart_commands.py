"""CLI commands for shopping carts."""

from __future__ import annotations

import click

from storefront.application.add_to_cart import AddToCartHandler
from storefront.application.dto import AddToCartRequest, AddToCartResponse, GetCartResponse
from storefront.application.get_cart import GetCartHandler
from storefront.application.remove_cart_item import ClearCartHandler, RemoveCartItemHandler
from storefront.application.update_cart_item import UpdateCartItemQuantityHandler
from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import cart_repository, product_repository
from storefront.infrastructure.cli.runtime import run_with_store
from storefront.infrastructure.config import Settings
from storefront.infrastructure.persistence.store import SqlAlchemyStore


@click.command("add")
@click.option("--user", "user_id", required=True, help="Shopper ID.")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--quantity", default=1, type=int, help="Units to add.")
@click.pass_obj
def cart_add(config: Settings, user_id: str, product_id: str, quantity: int) -> None:
    """Add a product to the user's cart at its current price."""

    async def work(store: SqlAlchemyStore) -> AddToCartResponse:
        handler = AddToCartHandler(
            cart_repo=cart_repository(store),
            product_repo=product_repository(store, config),
        )
        return await handler.handle(
            AddToCartRequest(user_id=user_id, product_id=product_id, quantity=quantity)
        )

    try:
        dto = run_with_store(config, work)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Cart line {dto.cart_item_id}: {dto.quantity} x {dto.unit_price} = {dto.total_price}"
    )


@click.command("show")
@click.option("--user", "user_id", required=True, help="Shopper ID.")
@click.pass_obj
def cart_show(config: Settings, user_id: str) -> None:
    """Show the user's active cart with totals."""

    async def work(store: SqlAlchemyStore) -> GetCartResponse:
        handler = GetCartHandler(cart_repo=cart_repository(store))
        return await handler.handle(user_id)

    try:
        dto = run_with_store(config, work)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not dto.items:
        click.echo("Cart is empty.")
        return

    click.echo(f"  {'Product':<24} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*52}")
    for item in dto.items:
        click.echo(
            f"  {item.product_name[:24]:<24} {item.quantity:>5} {item.price:>10} {item.total_price:>10}"
        )
    click.echo(f"  {'-'*52}")
    click.echo(f"  {'Items':<24} {dto.total_items:>5} {'Total':>10} {dto.total_amount:>10}")


@click.command("update")
@click.option("--user", "user_id", required=True, help="Shopper ID.")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--quantity", required=True, type=int, help="New quantity.")
@click.pass_obj
def cart_update(config: Settings, user_id: str, product_id: str, quantity: int) -> None:
    """Change how many units of a product are in the cart."""

    async def work(store: SqlAlchemyStore) -> None:
        handler = UpdateCartItemQuantityHandler(cart_repo=cart_repository(store))
        await handler.handle(user_id, product_id, quantity)

    try:
        run_with_store(config, work)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Quantity of {product_id} set to {quantity}")


@click.command("remove")
@click.option("--user", "user_id", required=True, help="Shopper ID.")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.pass_obj
def cart_remove(config: Settings, user_id: str, product_id: str) -> None:
    """Remove a product from the cart."""

    async def work(store: SqlAlchemyStore) -> None:
        handler = RemoveCartItemHandler(cart_repo=cart_repository(store))
        await handler.handle(user_id, product_id)

    try:
        run_with_store(config, work)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Removed {product_id} from the cart")


@click.command("clear")
@click.option("--user", "user_id", required=True, help="Shopper ID.")
@click.pass_obj
def cart_clear(config: Settings, user_id: str) -> None:
    """Empty the user's cart."""

    async def work(store: SqlAlchemyStore) -> None:
        handler = ClearCartHandler(cart_repo=cart_repository(store))
        await handler.handle(user_id)

    try:
        run_with_store(config, work)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo("Cart cleared")
