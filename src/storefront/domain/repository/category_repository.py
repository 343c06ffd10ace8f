"""Abstract repository for the Category aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.category import Category, CategoryChanges, NewCategory
from storefront.domain.repository.query import CategoryFilters, Page, QueryOptions


class CategoryRepository(ABC):

    @abstractmethod
    async def create(self, data: NewCategory) -> Category:
        """Insert a category one level below its parent (level 0 for roots)."""

    @abstractmethod
    async def find_by_id(self, category_id: str) -> Category | None:
        """Return a category by its ID, or None if not found."""

    @abstractmethod
    async def find_by_slug(self, slug: str) -> Category | None:
        """Return a category by its slug, or None if not found."""

    @abstractmethod
    async def update(self, category_id: str, changes: CategoryChanges) -> Category:
        """Write the supplied fields; a new ``parent_id`` recomputes the level."""

    @abstractmethod
    async def delete(self, category_id: str) -> None:
        """Remove a category; ConflictError while it still has children."""

    @abstractmethod
    async def find_all(self, options: QueryOptions | None = None) -> Page[Category]:
        """Page through every category."""

    @abstractmethod
    async def find_by_filters(
        self, filters: CategoryFilters, options: QueryOptions | None = None
    ) -> Page[Category]:
        """Page through categories matching every supplied filter."""

    @abstractmethod
    async def find_children(
        self, parent_id: str, options: QueryOptions | None = None
    ) -> list[Category]:
        """Direct children of *parent_id*."""

    @abstractmethod
    async def find_root_categories(
        self, options: QueryOptions | None = None
    ) -> list[Category]:
        """Categories without a parent."""

    @abstractmethod
    async def find_category_tree(self) -> list[Category]:
        """Every category ordered by level, sort order, then name."""

    @abstractmethod
    async def exists(self, category_id: str) -> bool:
        """True if the category exists."""

    @abstractmethod
    async def slug_exists(self, slug: str, exclude_id: str | None = None) -> bool:
        """True if another category uses *slug*."""

    @abstractmethod
    async def update_sort_order(self, category_id: str, sort_order: int) -> None:
        """Move a category within its siblings."""
