"""Helpers shared by the SQL repositories: ordering, paging, JSON columns."""

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, TypeVar

from sqlalchemy import String, Table, cast, func, select
from sqlalchemy.engine import RowMapping
from sqlalchemy.sql import ColumnElement

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.product import ProductDimensions
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.query import Page, QueryOptions, SortOrder
from storefront.infrastructure.persistence.store import Store

T = TypeVar("T")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# --- Ordering & paging --------------------------------------------------------


def ordering(
    table: Table,
    options: QueryOptions,
    sortable: frozenset[str],
    default_by: str,
    default_order: SortOrder,
) -> list[ColumnElement[Any]]:
    """ORDER BY terms for *options*; only whitelisted columns may be sorted on."""
    sort_by = options.sort_by or default_by
    if sort_by not in sortable:
        raise ValidationError(f"Cannot sort by '{sort_by}'")
    column = table.c[sort_by]
    order = options.sort_order or default_order
    primary = column.asc() if order == SortOrder.ASC else column.desc()
    return [primary, table.c.created_at.desc(), table.c.id.asc()]


async def fetch_page(
    store: Store,
    table: Table,
    conditions: list[ColumnElement[bool]],
    options: QueryOptions,
    order: list[ColumnElement[Any]],
    to_domain: Callable[[RowMapping], T],
) -> Page[T]:
    """Count the matches, then load one page of them. Two round trips."""
    count_rows = await store.query(
        select(func.count().label("total")).select_from(table).where(*conditions)
    )
    total = int(count_rows[0]["total"])
    rows = await store.query(
        select(table)
        .where(*conditions)
        .order_by(*order)
        .limit(options.limit)
        .offset(options.offset)
    )
    return Page.of([to_domain(row) for row in rows], total, options)


def json_array_contains(column: Any, value: str) -> ColumnElement[bool]:
    """Match rows whose JSON string array holds *value*.

    Compares against the column's serialized text, which both SQLite and
    PostgreSQL ``JSON`` columns keep as written by ``json.dumps``.
    """
    return cast(column, String).contains(json.dumps(value), autoescape=True)


# --- Value conversion ---------------------------------------------------------


def amount(value: Money | Decimal | None) -> Decimal | None:
    if value is None:
        return None
    if isinstance(value, Money):
        return value.amount
    return Decimal(str(value))


def money(value: Any) -> Money | None:
    return None if value is None else Money.of(value)


def decimal_or_none(value: Any) -> Decimal | None:
    return None if value is None else Decimal(str(value))


def encode_dimensions(dimensions: ProductDimensions | None) -> dict[str, Any] | None:
    if dimensions is None:
        return None
    return {
        "length": _str_or_none(dimensions.length),
        "width": _str_or_none(dimensions.width),
        "height": _str_or_none(dimensions.height),
        "unit": dimensions.unit,
    }


def decode_dimensions(raw: dict[str, Any] | None) -> ProductDimensions | None:
    if not raw:
        return None
    return ProductDimensions(
        length=decimal_or_none(raw.get("length")),
        width=decimal_or_none(raw.get("width")),
        height=decimal_or_none(raw.get("height")),
        unit=raw.get("unit", "cm"),
    )


def _str_or_none(value: Decimal | None) -> str | None:
    return None if value is None else str(value)
