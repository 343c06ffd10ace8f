"""SQL implementation of CategoryRepository."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any
from uuid import uuid4

from sqlalchemy import delete, insert, or_, select, update
from sqlalchemy.engine import RowMapping
from sqlalchemy.sql import ColumnElement

from storefront.domain.exceptions import (
    ConflictError,
    NotFoundError,
    UniqueViolation,
    ValidationError,
)
from storefront.domain.model.category import (
    MAX_CATEGORY_DEPTH,
    MAX_CATEGORY_LEVEL,
    Category,
    CategoryChanges,
    NewCategory,
)
from storefront.domain.model.changes import UNSET, supplied
from storefront.domain.repository.category_repository import CategoryRepository
from storefront.domain.repository.query import CategoryFilters, Page, QueryOptions, SortOrder
from storefront.infrastructure.persistence.sql_support import fetch_page, ordering, utcnow
from storefront.infrastructure.persistence.store import Store
from storefront.infrastructure.persistence.tables import categories

SORTABLE_COLUMNS = frozenset({"sort_order", "name", "level", "created_at", "updated_at"})


class SqlCategoryRepository(CategoryRepository):

    def __init__(
        self,
        store: Store,
        clock: Callable[[], datetime] = utcnow,
        default_options: QueryOptions | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._store = store
        self._clock = clock
        self._default_options = default_options or QueryOptions()
        self._log = logger or logging.getLogger(__name__)

    async def create(self, data: NewCategory) -> Category:
        level = await self._level_under(data.parent_id)
        now = self._clock()
        category = Category(
            id=str(uuid4()),
            name=data.name,
            slug=data.slug,
            description=data.description,
            image_url=data.image_url,
            parent_id=data.parent_id,
            level=level,
            sort_order=data.sort_order,
            seo_title=data.seo_title,
            seo_description=data.seo_description,
            seo_keywords=data.seo_keywords,
            is_active=data.is_active,
            created_at=now,
            updated_at=now,
        )
        try:
            rows = await self._store.query(
                insert(categories).values(**self._to_row(category)).returning(*categories.c)
            )
        except UniqueViolation as exc:
            raise ConflictError(f"Category with slug '{category.slug}' already exists") from exc
        self._log.info("category created id=%s level=%s", category.id, level)
        return self._to_domain(rows[0])

    async def find_by_id(self, category_id: str) -> Category | None:
        return await self._find_one(categories.c.id == category_id)

    async def find_by_slug(self, slug: str) -> Category | None:
        return await self._find_one(categories.c.slug == slug)

    async def update(self, category_id: str, changes: CategoryChanges) -> Category:
        if changes.is_empty():
            raise ValidationError("No fields to update")
        current = await self.find_by_id(category_id)
        if current is None:
            raise NotFoundError(f"Category with id '{category_id}' not found")
        values: dict[str, Any] = supplied(changes)
        if changes.parent_id is not UNSET:
            await self._check_new_parent(category_id, changes.parent_id)
            values["level"] = await self._level_under(changes.parent_id)
        # Validates the changed category before any write.
        candidate = current.update(**values)
        values["updated_at"] = self._clock()
        stmt = (
            update(categories)
            .where(categories.c.id == category_id)
            .values(**values)
            .returning(*categories.c)
        )
        try:
            rows = await self._store.query(stmt)
        except UniqueViolation as exc:
            raise ConflictError(
                f"Category with slug '{candidate.slug}' already exists"
            ) from exc
        if not rows:
            raise NotFoundError(f"Category with id '{category_id}' not found")
        self._log.info("category updated id=%s fields=%s", category_id, sorted(values))
        return self._to_domain(rows[0])

    async def delete(self, category_id: str) -> None:
        children = await self._store.query(
            select(categories.c.id).where(categories.c.parent_id == category_id).limit(1)
        )
        if children:
            raise ConflictError("Cannot delete category with child categories")
        rows = await self._store.query(
            delete(categories).where(categories.c.id == category_id).returning(categories.c.id)
        )
        if not rows:
            raise NotFoundError(f"Category with id '{category_id}' not found")
        self._log.info("category deleted id=%s", category_id)

    async def find_all(self, options: QueryOptions | None = None) -> Page[Category]:
        return await self.find_by_filters(CategoryFilters(), options)

    async def find_by_filters(
        self, filters: CategoryFilters, options: QueryOptions | None = None
    ) -> Page[Category]:
        options = options or self._default_options
        order = ordering(categories, options, SORTABLE_COLUMNS, "sort_order", SortOrder.ASC)
        return await fetch_page(
            self._store,
            categories,
            self._conditions(filters),
            options,
            order,
            self._to_domain,
        )

    async def find_children(
        self, parent_id: str, options: QueryOptions | None = None
    ) -> Page[Category]:
        return await self.find_by_filters(CategoryFilters(parent_id=parent_id), options)

    async def find_root_categories(
        self, options: QueryOptions | None = None
    ) -> Page[Category]:
        return await self.find_by_filters(CategoryFilters(parent_id=None), options)

    async def find_category_tree(self) -> list[Category]:
        rows = await self._store.query(
            select(categories).order_by(
                categories.c.level.asc(),
                categories.c.sort_order.asc(),
                categories.c.name.asc(),
            )
        )
        return [self._to_domain(row) for row in rows]

    async def exists(self, category_id: str) -> bool:
        return await self._any(categories.c.id == category_id)

    async def slug_exists(self, slug: str, exclude_id: str | None = None) -> bool:
        return await self._any(categories.c.slug == slug, exclude_id=exclude_id)

    async def update_sort_order(self, category_id: str, sort_order: int) -> None:
        if sort_order < 0:
            raise ValidationError("Category sort order must be non-negative")
        rows = await self._store.query(
            update(categories)
            .where(categories.c.id == category_id)
            .values(sort_order=sort_order, updated_at=self._clock())
            .returning(categories.c.id)
        )
        if not rows:
            raise NotFoundError(f"Category with id '{category_id}' not found")

    # --- Internal helpers -----------------------------------------------------

    async def _check_new_parent(self, category_id: str, parent_id: str | None) -> None:
        """Refuse a parent that is the category itself or one of its descendants."""
        if parent_id == category_id:
            raise ValidationError("Category cannot be its own parent")
        seen: set[str] = set()
        ancestor_id = parent_id
        while ancestor_id is not None and ancestor_id not in seen:
            if ancestor_id == category_id:
                raise ValidationError("Category cannot be moved under its own descendant")
            seen.add(ancestor_id)
            ancestor = await self.find_by_id(ancestor_id)
            ancestor_id = ancestor.parent_id if ancestor else None

    async def _level_under(self, parent_id: str | None) -> int:
        """Level a category gets when placed under *parent_id* (0 for roots)."""
        if parent_id is None:
            return 0
        parent = await self.find_by_id(parent_id)
        if parent is None:
            raise NotFoundError(f"Parent category with id '{parent_id}' not found")
        if parent.level >= MAX_CATEGORY_LEVEL:
            raise ValidationError(
                f"Category nesting cannot exceed {MAX_CATEGORY_DEPTH} levels"
            )
        return parent.level + 1

    async def _find_one(self, condition: ColumnElement[bool]) -> Category | None:
        rows = await self._store.query(select(categories).where(condition))
        if not rows:
            return None
        return self._to_domain(rows[0])

    async def _any(
        self, condition: ColumnElement[bool], exclude_id: str | None = None
    ) -> bool:
        conditions = [condition]
        if exclude_id is not None:
            conditions.append(categories.c.id != exclude_id)
        rows = await self._store.query(
            select(categories.c.id).where(*conditions).limit(1)
        )
        return bool(rows)

    @staticmethod
    def _conditions(filters: CategoryFilters) -> list[ColumnElement[bool]]:
        conditions: list[ColumnElement[bool]] = []
        if filters.parent_id is None:
            conditions.append(categories.c.parent_id.is_(None))
        elif filters.parent_id is not UNSET:
            conditions.append(categories.c.parent_id == filters.parent_id)
        if filters.level is not None:
            conditions.append(categories.c.level == filters.level)
        if filters.is_active is not None:
            conditions.append(categories.c.is_active.is_(filters.is_active))
        if filters.search:
            conditions.append(
                or_(
                    categories.c.name.icontains(filters.search, autoescape=True),
                    categories.c.description.icontains(filters.search, autoescape=True),
                )
            )
        return conditions

    @staticmethod
    def _to_row(category: Category) -> dict[str, Any]:
        return {
            "id": category.id,
            "name": category.name,
            "slug": category.slug,
            "description": category.description,
            "image_url": category.image_url,
            "parent_id": category.parent_id,
            "level": category.level,
            "sort_order": category.sort_order,
            "seo_title": category.seo_title,
            "seo_description": category.seo_description,
            "seo_keywords": category.seo_keywords,
            "is_active": category.is_active,
            "created_at": category.created_at,
            "updated_at": category.updated_at,
        }

    @staticmethod
    def _to_domain(row: RowMapping) -> Category:
        return Category(
            id=row["id"],
            name=row["name"],
            slug=row["slug"],
            description=row["description"],
            image_url=row["image_url"],
            parent_id=row["parent_id"],
            level=row["level"],
            sort_order=row["sort_order"],
            seo_title=row["seo_title"],
            seo_description=row["seo_description"],
            seo_keywords=row["seo_keywords"],
            is_active=bool(row["is_active"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
