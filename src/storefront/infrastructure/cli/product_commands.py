"""CLI commands for the Product aggregate."""

from __future__ import annotations

import click

from storefront.application.create_product import CreateProductHandler
from storefront.application.delete_product import DeleteProductHandler
from storefront.application.dto import CreateProductRequest, LowStockLineDTO, ProductDTO
from storefront.application.get_product import GetProductHandler
from storefront.application.list_products import ListProductsHandler
from storefront.application.show_low_stock import ShowLowStockHandler
from storefront.application.update_product import UpdateProductHandler
from storefront.domain.exceptions import DomainException
from storefront.domain.model.product import ProductChanges, ProductStatus
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.query import Page, ProductFilters, QueryOptions, SortOrder
from storefront.infrastructure.bootstrap import category_repository, product_repository
from storefront.infrastructure.cli.runtime import run_with_store
from storefront.infrastructure.config import Settings
from storefront.infrastructure.persistence.store import SqlAlchemyStore

_STATUSES = [s.value for s in ProductStatus]


@click.command("create")
@click.option("--seller", "seller_id", required=True, help="Owning seller ID.")
@click.option("--name", required=True, help="Product name.")
@click.option("--slug", required=True, help="Kebab-case slug, e.g. 'red-sneakers'.")
@click.option("--price", required=True, help="Price (e.g. 15.00).")
@click.option("--compare-price", default=None, help="Original price, shown struck through.")
@click.option("--cost-price", default=None, help="Seller's cost.")
@click.option("--sku", default=None, help="Stock keeping unit.")
@click.option("--category", "category_id", default=None, help="Category ID.")
@click.option("--stock", "stock_quantity", default=0, type=int, help="Units on hand.")
@click.option("--status", default="draft", type=click.Choice(_STATUSES), help="Initial status.")
@click.option("--tag", "tags", multiple=True, help="Tag; repeat for several.")
@click.option("--image", "image_urls", multiple=True, help="Image URL; the first is the main one.")
@click.pass_obj
def product_create(
    config: Settings,
    seller_id: str,
    name: str,
    slug: str,
    price: str,
    compare_price: str | None,
    cost_price: str | None,
    sku: str | None,
    category_id: str | None,
    stock_quantity: int,
    status: str,
    tags: tuple[str, ...],
    image_urls: tuple[str, ...],
) -> None:
    """Add a new product to the catalog."""

    async def work(store: SqlAlchemyStore) -> ProductDTO:
        handler = CreateProductHandler(
            product_repo=product_repository(store, config),
            category_repo=category_repository(store, config),
            default_low_stock_threshold=config.low_stock_threshold,
        )
        return await handler.handle(
            CreateProductRequest(
                seller_id=seller_id,
                name=name,
                slug=slug,
                price=price,
                compare_price=compare_price,
                cost_price=cost_price,
                sku=sku,
                category_id=category_id,
                stock_quantity=stock_quantity,
                status=status,
                tags=tags,
                image_urls=image_urls,
            )
        )

    try:
        dto = run_with_store(config, work)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product {dto.id} '{dto.name}' added at {dto.price}")


@click.command("show")
@click.argument("id_or_slug")
@click.pass_obj
def product_show(config: Settings, id_or_slug: str) -> None:
    """Show one product by ID or slug."""

    async def work(store: SqlAlchemyStore) -> ProductDTO:
        handler = GetProductHandler(product_repo=product_repository(store, config))
        return await handler.handle(id_or_slug, count_view=True)

    try:
        dto = run_with_store(config, work)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"{dto.name}  ({dto.slug})")
    click.echo(f"ID:       {dto.id}")
    click.echo(f"Seller:   {dto.seller_id}")
    click.echo(f"Status:   {dto.status}  available={'yes' if dto.is_available else 'no'}")
    if dto.is_on_sale:
        click.echo(f"Price:    {dto.price}  (was {dto.compare_price}, {dto.discount_percentage}% off)")
    else:
        click.echo(f"Price:    {dto.price}")
    click.echo(f"Stock:    {dto.stock_quantity}{'  LOW' if dto.is_low_stock else ''}")
    click.echo(f"Rating:   {dto.average_rating} ({dto.review_count} reviews)")
    if dto.tags:
        click.echo(f"Tags:     {', '.join(dto.tags)}")
    click.echo(f"Created:  {dto.created_at}")


@click.command("list")
@click.option("--seller", "seller_id", default=None, help="Only this seller's products.")
@click.option("--category", "category_id", default=None, help="Only this category.")
@click.option("--status", default=None, type=click.Choice(_STATUSES), help="Only this status.")
@click.option("--search", default=None, help="Text to look for in name or description.")
@click.option("--tag", "tags", multiple=True, help="Match any of these tags.")
@click.option("--min-price", default=None, help="Lowest price.")
@click.option("--max-price", default=None, help="Highest price.")
@click.option("--in-stock/--any-stock", default=None, help="Only products that can ship.")
@click.option("--page", default=1, type=int, help="Page number (1-based).")
@click.option("--limit", default=None, type=int, help="Products per page.")
@click.option("--sort-by", default=None, help="Column to sort on.")
@click.option("--asc", "ascending", is_flag=True, help="Sort ascending.")
@click.pass_obj
def product_list(
    config: Settings,
    seller_id: str | None,
    category_id: str | None,
    status: str | None,
    search: str | None,
    tags: tuple[str, ...],
    min_price: str | None,
    max_price: str | None,
    in_stock: bool | None,
    page: int,
    limit: int | None,
    sort_by: str | None,
    ascending: bool,
) -> None:
    """List catalog products, one page at a time."""

    async def work(store: SqlAlchemyStore) -> Page[ProductDTO]:
        filters = ProductFilters(
            seller_id=seller_id,
            category_id=category_id,
            status=ProductStatus(status) if status else None,
            min_price=Money.of(min_price).amount if min_price else None,
            max_price=Money.of(max_price).amount if max_price else None,
            in_stock=in_stock,
            search=search,
            tags=list(tags),
        )
        options = QueryOptions(
            page=page,
            limit=limit or config.page_limit,
            sort_by=sort_by,
            sort_order=SortOrder.ASC if ascending else None,
        )
        handler = ListProductsHandler(product_repo=product_repository(store, config))
        return await handler.handle(filters, options)

    try:
        result = run_with_store(config, work)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not result.items:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<38} {'Name':<24} {'Price':>10} {'Stock':>6} {'Status':<12}")
    click.echo("-" * 94)
    for p in result.items:
        click.echo(
            f"{p.id:<38} {p.name[:24]:<24} {p.price:>10} {p.stock_quantity:>6} {p.status:<12}"
        )
    click.echo(f"Page {result.page}/{result.total_pages}  ({result.total} products)")


@click.command("update")
@click.argument("product_id")
@click.option("--as", "actor_id", required=True, help="Seller making the change.")
@click.option("--admin", "is_admin", is_flag=True, help="Act as an administrator.")
@click.option("--name", default=None, help="New name.")
@click.option("--price", default=None, help="New price (e.g. 29.99).")
@click.option("--compare-price", default=None, help="New compare price.")
@click.option("--status", default=None, type=click.Choice(_STATUSES), help="New status.")
@click.pass_obj
def product_update(
    config: Settings,
    product_id: str,
    actor_id: str,
    is_admin: bool,
    name: str | None,
    price: str | None,
    compare_price: str | None,
    status: str | None,
) -> None:
    """Change a product's name, price or status.

    Existing cart lines keep the price they were added at until the next
    add of the same product reprices them.
    """
    changes = ProductChanges()
    try:
        if name is not None:
            changes.name = name
        if price is not None:
            changes.price = Money.of(price)
        if compare_price is not None:
            changes.compare_price = Money.of(compare_price)
        if status is not None:
            changes.status = ProductStatus(status)
    except DomainException as exc:
        raise click.BadParameter(str(exc))

    async def work(store: SqlAlchemyStore) -> ProductDTO:
        handler = UpdateProductHandler(product_repo=product_repository(store, config))
        return await handler.handle(product_id, changes, actor_id, is_admin=is_admin)

    try:
        dto = run_with_store(config, work)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product {dto.id} updated: {dto.name} at {dto.price} ({dto.status})")


@click.command("delete")
@click.argument("product_id")
@click.option("--as", "actor_id", required=True, help="Seller requesting the delete.")
@click.option("--admin", "is_admin", is_flag=True, help="Act as an administrator.")
@click.pass_obj
def product_delete(config: Settings, product_id: str, actor_id: str, is_admin: bool) -> None:
    """Remove a product from the catalog (soft delete)."""

    async def work(store: SqlAlchemyStore) -> None:
        handler = DeleteProductHandler(product_repo=product_repository(store, config))
        await handler.handle(product_id, actor_id, is_admin=is_admin)

    try:
        run_with_store(config, work)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product {product_id} deleted")


@click.command("low-stock")
@click.option("--seller", "seller_id", default=None, help="Only this seller's products.")
@click.pass_obj
def product_low_stock(config: Settings, seller_id: str | None) -> None:
    """List tracked products at or below their low-stock threshold."""

    async def work(store: SqlAlchemyStore) -> list[LowStockLineDTO]:
        handler = ShowLowStockHandler(product_repo=product_repository(store, config))
        return await handler.handle(seller_id)

    try:
        lines = run_with_store(config, work)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not lines:
        click.echo("No products are low on stock.")
        return

    click.echo(f"{'ID':<38} {'Name':<24} {'SKU':<14} {'Stock':>6} {'Threshold':>10}")
    click.echo("-" * 96)
    for line in lines:
        click.echo(
            f"{line.product_id:<38} {line.name[:24]:<24} {line.sku or '-':<14} "
            f"{line.stock_quantity:>6} {line.low_stock_threshold:>10}"
        )
