"""Bridges the synchronous click commands to the async application layer."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from storefront.infrastructure.bootstrap import open_store
from storefront.infrastructure.config import Settings
from storefront.infrastructure.persistence.store import SqlAlchemyStore

T = TypeVar("T")


def run_with_store(
    config: Settings, work: Callable[[SqlAlchemyStore], Awaitable[T]]
) -> T:
    """Open a store, await *work* with it, and always dispose of the engine."""

    async def main() -> T:
        store = open_store(config)
        try:
            return await work(store)
        finally:
            await store.close()

    return asyncio.run(main())
