"""CLI commands for database housekeeping."""

from __future__ import annotations

import click

from storefront.domain.exceptions import DomainException
from storefront.infrastructure.cli.runtime import run_with_store
from storefront.infrastructure.config import Settings
from storefront.infrastructure.persistence.store import SqlAlchemyStore


@click.command("init")
@click.pass_obj
def db_init(config: Settings) -> None:
    """Create every table and index."""

    async def work(store: SqlAlchemyStore) -> None:
        await store.create_schema()

    try:
        run_with_store(config, work)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Schema created at {config.database_url}")


@click.command("ping")
@click.pass_obj
def db_ping(config: Settings) -> None:
    """Check that the database answers."""

    async def work(store: SqlAlchemyStore) -> bool:
        return await store.ping()

    if not run_with_store(config, work):
        raise click.ClickException(f"Database at {config.database_url} is unreachable")
    click.echo("Database is reachable")
