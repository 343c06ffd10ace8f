"""Tests for SqlAlchemyStore: error translation and transactions."""

from datetime import datetime, timezone

import pytest
from sqlalchemy import func, insert, select, text

from storefront.domain.exceptions import IntegrityViolation, StoreError, UniqueViolation
from storefront.infrastructure.persistence.store import SqlAlchemyStore
from storefront.infrastructure.persistence.tables import categories

NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _category(slug, level=0):
    return insert(categories).values(
        id=slug, name=slug.title(), slug=slug, level=level, sort_order=0,
        is_active=True, created_at=NOW, updated_at=NOW,
    )


def _count(run, store):
    rows = run(store.query(select(func.count().label("n")).select_from(categories)))
    return rows[0]["n"]


class TestQuery:

    def test_ping(self, run, store):
        assert run(store.ping()) is True

    def test_ping_on_unreachable_database(self, run, tmp_path):
        broken = SqlAlchemyStore.from_url(
            f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'nowhere.db'}"
        )
        assert run(broken.ping()) is False
        run(broken.close())

    def test_non_returning_dml_yields_no_rows(self, run, store):
        assert run(store.query(_category("shoes"))) == []
        assert _count(run, store) == 1

    def test_unique_violation_is_translated(self, run, store):
        run(store.query(_category("shoes")))
        with pytest.raises(UniqueViolation):
            run(store.query(_category("shoes")))

    def test_check_violation_is_not_a_unique_violation(self, run, store):
        with pytest.raises(IntegrityViolation) as excinfo:
            run(store.query(_category("shoes", level=-1)))
        assert not isinstance(excinfo.value, UniqueViolation)
        assert _count(run, store) == 0

    def test_other_failures_are_store_errors(self, run, store):
        with pytest.raises(StoreError):
            run(store.query(text("SELECT * FROM no_such_table")))


class TestTransaction:

    def test_commits_every_statement(self, run, store):
        async def both(tx):
            await tx.query(_category("shoes"))
            await tx.query(_category("bags"))
            return "done"

        assert run(store.transaction(both)) == "done"
        assert _count(run, store) == 2

    def test_failure_rolls_back_earlier_statements(self, run, store):
        async def half(tx):
            await tx.query(_category("shoes"))
            await tx.query(_category("shoes"))

        with pytest.raises(IntegrityViolation):
            run(store.transaction(half))
        assert _count(run, store) == 0

    def test_application_error_rolls_back(self, run, store):
        async def boom(tx):
            await tx.query(_category("shoes"))
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            run(store.transaction(boom))
        assert _count(run, store) == 0

    def test_nested_transactions_join_the_outer_one(self, run, store):
        async def inner(tx):
            await tx.query(_category("bags"))

        async def outer(tx):
            await tx.query(_category("shoes"))
            await tx.transaction(inner)
            raise RuntimeError("abort")

        with pytest.raises(RuntimeError):
            run(store.transaction(outer))
        assert _count(run, store) == 0
