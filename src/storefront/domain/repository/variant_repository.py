"""Abstract repository for product variants."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.variant import NewProductVariant, ProductVariant, VariantChanges


class ProductVariantRepository(ABC):

    @abstractmethod
    async def create(self, data: NewProductVariant) -> ProductVariant:
        """Insert a variant; ConflictError on SKU clash."""

    @abstractmethod
    async def find_by_id(self, variant_id: str) -> ProductVariant | None:
        """Return a variant by ID, or None."""

    @abstractmethod
    async def find_by_sku(self, sku: str) -> ProductVariant | None:
        """Return a variant by SKU, or None."""

    @abstractmethod
    async def find_by_product(self, product_id: str) -> list[ProductVariant]:
        """Every variant of a product."""

    @abstractmethod
    async def find_active_by_product(self, product_id: str) -> list[ProductVariant]:
        """Active variants of a product."""

    @abstractmethod
    async def update(self, variant_id: str, changes: VariantChanges) -> ProductVariant:
        """Write only the supplied fields."""

    @abstractmethod
    async def delete(self, variant_id: str) -> None:
        """Remove a variant; NotFoundError if missing."""

    @abstractmethod
    async def delete_by_product(self, product_id: str) -> None:
        """Remove every variant of a product."""

    @abstractmethod
    async def update_stock(self, variant_id: str, quantity: int) -> None:
        """Set stock to an absolute value."""

    @abstractmethod
    async def reserve_stock(self, variant_id: str, quantity: int) -> bool:
        """Same conditional-decrement protocol as products."""

    @abstractmethod
    async def release_stock(self, variant_id: str, quantity: int) -> None:
        """Put units back."""

    @abstractmethod
    async def exists(self, variant_id: str) -> bool:
        """True if the variant exists."""

    @abstractmethod
    async def sku_exists(self, sku: str, exclude_id: str | None = None) -> bool:
        """True if another variant uses *sku*."""
