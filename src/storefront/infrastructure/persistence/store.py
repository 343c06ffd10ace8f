"""Store: the persistence boundary every SQL repository talks through.

Repositories only ever hand the store parameterized SQLAlchemy Core
statements. The store runs each one in its own short transaction unless
the caller groups statements with ``transaction()``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, TypeVar

from sqlalchemy import text
from sqlalchemy.engine import RowMapping
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.sql import Executable

from storefront.domain.exceptions import IntegrityViolation, StoreError, UniqueViolation
from storefront.infrastructure.persistence.tables import metadata

T = TypeVar("T")

# SQLite says "UNIQUE constraint failed", PostgreSQL "duplicate key value".
_UNIQUE_MARKERS = ("unique constraint", "duplicate key")


class Store(ABC):

    @abstractmethod
    async def query(
        self, statement: Executable, params: Mapping[str, Any] | None = None
    ) -> list[RowMapping]:
        """Execute one statement; return its rows (empty for non-returning DML)."""

    @abstractmethod
    async def transaction(self, fn: Callable[[Store], Awaitable[T]]) -> T:
        """Run *fn* with a store whose queries share one transaction."""

    @abstractmethod
    async def ping(self) -> bool:
        """True if the database answers."""

    @abstractmethod
    async def close(self) -> None:
        """Release every pooled connection."""


class SqlAlchemyStore(Store):
    """Store backed by a SQLAlchemy ``AsyncEngine``.

    A store bound to a connection (the one handed to a ``transaction``
    callback) runs every query on that connection; nested transactions
    join the outer one.
    """

    def __init__(
        self,
        engine: AsyncEngine,
        connection: AsyncConnection | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._engine = engine
        self._connection = connection
        self._log = logger or logging.getLogger(__name__)

    @classmethod
    def from_url(cls, url: str, echo: bool = False) -> SqlAlchemyStore:
        return cls(create_async_engine(url, echo=echo))

    # --- Store interface ------------------------------------------------------

    async def query(
        self, statement: Executable, params: Mapping[str, Any] | None = None
    ) -> list[RowMapping]:
        if self._connection is not None:
            return await self._execute(self._connection, statement, params)
        try:
            async with self._engine.begin() as conn:
                return await self._execute(conn, statement, params)
        except SQLAlchemyError as exc:
            raise self._translate(exc) from exc

    async def transaction(self, fn: Callable[[Store], Awaitable[T]]) -> T:
        if self._connection is not None:
            return await fn(self)
        try:
            async with self._engine.begin() as conn:
                return await fn(SqlAlchemyStore(self._engine, conn, self._log))
        except SQLAlchemyError as exc:
            raise self._translate(exc) from exc

    async def ping(self) -> bool:
        try:
            await self.query(text("SELECT 1"))
        except StoreError as exc:
            self._log.warning("database ping failed: %s", exc)
            return False
        return True

    async def close(self) -> None:
        await self._engine.dispose()

    # --- Schema ---------------------------------------------------------------

    async def create_schema(self) -> None:
        async with self._engine.begin() as conn:
            await conn.run_sync(metadata.create_all)

    # --- Internal helpers -----------------------------------------------------

    async def _execute(
        self,
        conn: AsyncConnection,
        statement: Executable,
        params: Mapping[str, Any] | None,
    ) -> list[RowMapping]:
        try:
            result = await conn.execute(statement, params)
        except SQLAlchemyError as exc:
            raise self._translate(exc) from exc
        if not result.returns_rows:
            return []
        return list(result.mappings().all())

    @staticmethod
    def _translate(exc: SQLAlchemyError) -> StoreError:
        if isinstance(exc, IntegrityError):
            message = str(exc.orig)
            if any(marker in message.lower() for marker in _UNIQUE_MARKERS):
                return UniqueViolation(message)
            return IntegrityViolation(message)
        return StoreError(str(exc))
