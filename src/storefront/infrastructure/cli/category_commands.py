"""CLI commands for the Category aggregate."""

from __future__ import annotations

import click

from storefront.application.create_category import CreateCategoryHandler
from storefront.application.dto import CategoryDTO, CreateCategoryRequest
from storefront.application.show_category_tree import ShowCategoryTreeHandler
from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import category_repository
from storefront.infrastructure.cli.runtime import run_with_store
from storefront.infrastructure.config import Settings
from storefront.infrastructure.persistence.store import SqlAlchemyStore


@click.command("create")
@click.option("--name", required=True, help="Category name.")
@click.option("--slug", required=True, help="Kebab-case slug, e.g. 'mens-shoes'.")
@click.option("--parent", "parent_id", default=None, help="Parent category ID.")
@click.option("--sort-order", default=0, type=int, help="Position among siblings.")
@click.option("--description", default=None, help="Optional description.")
@click.pass_obj
def category_create(
    config: Settings,
    name: str,
    slug: str,
    parent_id: str | None,
    sort_order: int,
    description: str | None,
) -> None:
    """Create a category, optionally under a parent."""

    async def work(store: SqlAlchemyStore) -> CategoryDTO:
        handler = CreateCategoryHandler(category_repo=category_repository(store, config))
        return await handler.handle(
            CreateCategoryRequest(
                name=name,
                slug=slug,
                parent_id=parent_id,
                sort_order=sort_order,
                description=description,
            )
        )

    try:
        dto = run_with_store(config, work)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Category {dto.id} '{dto.name}' created at level {dto.level}")


@click.command("tree")
@click.pass_obj
def category_tree(config: Settings) -> None:
    """Show the category hierarchy."""

    async def work(store: SqlAlchemyStore) -> list[CategoryDTO]:
        handler = ShowCategoryTreeHandler(category_repo=category_repository(store, config))
        return await handler.handle()

    try:
        categories = run_with_store(config, work)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not categories:
        click.echo("No categories found.")
        return

    for c in categories:
        marker = "" if c.is_active else "  (inactive)"
        click.echo(f"{c.display_name:<40} {c.slug:<30} {c.id}{marker}")
