"""Abstract repository for the Product aggregate.

Defined in the domain layer so the domain never depends on
infrastructure. Every method suspends on the store, hence async.
Soft-deleted products are invisible to every read.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from storefront.domain.model.product import NewProduct, Product, ProductChanges
from storefront.domain.repository.query import Page, ProductFilters, QueryOptions


class ProductRepository(ABC):

    @abstractmethod
    async def create(self, data: NewProduct) -> Product:
        """Insert a product with zeroed counters; ConflictError on slug/SKU clash."""

    @abstractmethod
    async def find_by_id(self, product_id: str) -> Product | None:
        """Return a live product by ID, or None."""

    @abstractmethod
    async def find_by_slug(self, slug: str) -> Product | None:
        """Return a live product by slug, or None."""

    @abstractmethod
    async def find_by_sku(self, sku: str) -> Product | None:
        """Return a live product by SKU, or None."""

    @abstractmethod
    async def update(self, product_id: str, changes: ProductChanges) -> Product:
        """Write only the supplied fields; ValidationError if none, NotFoundError if missing."""

    @abstractmethod
    async def delete(self, product_id: str) -> None:
        """Hard delete, regardless of soft-delete state."""

    @abstractmethod
    async def soft_delete(self, product_id: str) -> None:
        """Stamp ``deleted_at`` and mark the product inactive."""

    @abstractmethod
    async def find_all(self, options: QueryOptions | None = None) -> Page[Product]:
        """Page through every live product."""

    @abstractmethod
    async def find_by_filters(
        self, filters: ProductFilters, options: QueryOptions | None = None
    ) -> Page[Product]:
        """Page through live products matching every supplied filter."""

    @abstractmethod
    async def find_by_seller(
        self, seller_id: str, options: QueryOptions | None = None
    ) -> Page[Product]:
        """Products owned by one seller."""

    @abstractmethod
    async def find_by_category(
        self, category_id: str, options: QueryOptions | None = None
    ) -> Page[Product]:
        """Products assigned to one category."""

    @abstractmethod
    async def search(
        self,
        text: str,
        filters: ProductFilters | None = None,
        options: QueryOptions | None = None,
    ) -> Page[Product]:
        """Free-text search over name and description, plus optional filters."""

    @abstractmethod
    async def find_related_products(self, product_id: str, limit: int = 5) -> list[Product]:
        """Active products sharing the category or a tag, same-category first."""

    @abstractmethod
    async def find_featured_products(self, limit: int = 10) -> list[Product]:
        """Active products rated 4.0 or higher, best rated first."""

    @abstractmethod
    async def update_stock(self, product_id: str, quantity: int) -> None:
        """Set stock to an absolute value (administrative correction)."""

    @abstractmethod
    async def reserve_stock(self, product_id: str, quantity: int) -> bool:
        """Atomically take *quantity* units if that many are in stock.

        Returns False, leaving stock untouched, when there are not enough.
        """

    @abstractmethod
    async def release_stock(self, product_id: str, quantity: int) -> None:
        """Put *quantity* units back (compensates a reservation)."""

    @abstractmethod
    async def find_low_stock_products(self, seller_id: str | None = None) -> list[Product]:
        """Tracked products at or below their low-stock threshold, lowest first."""

    @abstractmethod
    async def increment_view_count(self, product_id: str) -> None:
        """Add one view."""

    @abstractmethod
    async def update_rating(
        self, product_id: str, average_rating: Decimal, review_count: int
    ) -> None:
        """Store the recomputed review aggregate."""

    @abstractmethod
    async def exists(self, product_id: str) -> bool:
        """True if a live product has this ID."""

    @abstractmethod
    async def slug_exists(self, slug: str, exclude_id: str | None = None) -> bool:
        """True if another live product uses *slug*."""

    @abstractmethod
    async def sku_exists(self, sku: str, exclude_id: str | None = None) -> bool:
        """True if another live product uses *sku*."""

    @abstractmethod
    async def count_by_filters(self, filters: ProductFilters) -> int:
        """Number of live products matching *filters*."""
