"""CLI commands for product variants."""

from __future__ import annotations

import click

from storefront.application.add_variant import AddVariantHandler
from storefront.domain.exceptions import DomainException
from storefront.domain.model.value_objects import Money
from storefront.domain.model.variant import NewProductVariant, ProductVariant
from storefront.infrastructure.bootstrap import product_repository, variant_repository
from storefront.infrastructure.cli.runtime import run_with_store
from storefront.infrastructure.config import Settings
from storefront.infrastructure.persistence.store import SqlAlchemyStore


def _parse_attributes(raw: tuple[str, ...]) -> dict[str, str]:
    """Parse ('color=red', 'size=L') into a mapping."""
    attributes: dict[str, str] = {}
    for pair in raw:
        if "=" not in pair:
            raise click.BadParameter(f"Invalid attribute '{pair}'. Expected 'key=value'.")
        key, value = pair.split("=", 1)
        attributes[key.strip()] = value.strip()
    return attributes


@click.command("create")
@click.argument("product_id")
@click.option("--as", "actor_id", required=True, help="Seller adding the variant.")
@click.option("--name", required=True, help="Variant name.")
@click.option("--sku", default=None, help="Variant SKU.")
@click.option("--price", default=None, help="Price override (e.g. 19.99).")
@click.option("--stock", "stock_quantity", default=0, type=int, help="Units on hand.")
@click.option("--attr", "attrs", multiple=True, help="Attribute as key=value; repeatable.")
@click.pass_obj
def variant_create(
    config: Settings,
    product_id: str,
    actor_id: str,
    name: str,
    sku: str | None,
    price: str | None,
    stock_quantity: int,
    attrs: tuple[str, ...],
) -> None:
    """Add a variant (size, colour...) to a product."""
    attributes = _parse_attributes(attrs)

    async def work(store: SqlAlchemyStore) -> ProductVariant:
        handler = AddVariantHandler(
            product_repo=product_repository(store, config),
            variant_repo=variant_repository(store),
        )
        return await handler.handle(
            NewProductVariant(
                product_id=product_id,
                name=name,
                sku=sku,
                price=Money.of(price) if price else None,
                stock_quantity=stock_quantity,
                attributes=attributes,
            ),
            actor_id,
        )

    try:
        variant = run_with_store(config, work)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Variant {variant.id} '{variant.display_name()}' added")


@click.command("list")
@click.argument("product_id")
@click.pass_obj
def variant_list(config: Settings, product_id: str) -> None:
    """List the variants of a product."""

    async def work(store: SqlAlchemyStore) -> list[ProductVariant]:
        return await variant_repository(store).find_by_product(product_id)

    try:
        variants = run_with_store(config, work)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not variants:
        click.echo("No variants found.")
        return

    click.echo(f"{'ID':<38} {'Variant':<30} {'SKU':<14} {'Price':>10} {'Stock':>6}")
    click.echo("-" * 102)
    for v in variants:
        price = str(v.price) if v.price else "-"
        click.echo(
            f"{v.id:<38} {v.display_name()[:30]:<30} {v.sku or '-':<14} {price:>10} {v.stock_quantity:>6}"
        )
