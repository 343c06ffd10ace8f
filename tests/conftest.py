"""Shared fixtures.

Async code is driven from plain test functions through ``run``, which
executes a coroutine on a loop owned by the test.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from storefront.infrastructure.persistence.store import SqlAlchemyStore


class TickingClock:
    """Deterministic clock: every call is one second after the previous one."""

    def __init__(self, start: datetime | None = None) -> None:
        self._now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self._now += timedelta(seconds=1)
        return self._now


@pytest.fixture
def run():
    loop = asyncio.new_event_loop()
    yield loop.run_until_complete
    loop.close()


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def store(tmp_path, run):
    """A real SQLAlchemy store over a throwaway SQLite file."""
    store = SqlAlchemyStore.from_url(f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}")
    run(store.create_schema())
    yield store
    run(store.close())
