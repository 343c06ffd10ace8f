"""Query options, filters and the paginated result shared by repositories."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Generic, TypeVar

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.changes import UNSET
from storefront.domain.model.product import ProductStatus

T = TypeVar("T")

DEFAULT_PAGE_LIMIT = 20


class SortOrder(Enum):
    ASC = "ASC"
    DESC = "DESC"


@dataclass(frozen=True)
class QueryOptions:
    """Pagination and ordering. ``page`` is 1-based.

    ``sort_by``/``sort_order`` left as None fall back to the repository's
    natural ordering (newest first for products, ``sort_order`` for
    categories).
    """

    page: int = 1
    limit: int = DEFAULT_PAGE_LIMIT
    sort_by: str | None = None
    sort_order: SortOrder | None = None

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValidationError("Page must be 1 or greater")
        if self.limit < 1:
            raise ValidationError("Limit must be 1 or greater")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class Page(Generic[T]):
    items: list[T]
    total: int
    page: int
    limit: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool

    @staticmethod
    def of(items: list[T], total: int, options: QueryOptions) -> Page[T]:
        total_pages = math.ceil(total / options.limit)
        return Page(
            items=items,
            total=total,
            page=options.page,
            limit=options.limit,
            total_pages=total_pages,
            has_next_page=options.page < total_pages,
            has_previous_page=options.page > 1,
        )


@dataclass(frozen=True)
class ProductFilters:
    """Conjunctive product filters; None means "don't filter"."""

    seller_id: str | None = None
    category_id: str | None = None
    status: ProductStatus | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    in_stock: bool | None = None
    search: str | None = None
    tags: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class CategoryFilters:
    """Category filters. ``parent_id=None`` selects roots; leave it UNSET to skip."""

    parent_id: Any = UNSET
    level: int | None = None
    is_active: bool | None = None
    search: str | None = None
