"""Application service: Get Product use case (query)."""

from __future__ import annotations

from storefront.application.dto import ProductDTO
from storefront.domain.exceptions import NotFoundError
from storefront.domain.repository.product_repository import ProductRepository


class GetProductHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    async def handle(self, id_or_slug: str, count_view: bool = False) -> ProductDTO:
        """Look a product up by ID, falling back to its slug.

        Soft-deleted products are reported as not found.
        """
        product = await self._product_repo.find_by_id(id_or_slug)
        if product is None:
            product = await self._product_repo.find_by_slug(id_or_slug)
        if product is None:
            raise NotFoundError(f"Product '{id_or_slug}' not found")

        if count_view:
            await self._product_repo.increment_view_count(product.id)
        return ProductDTO.from_entity(product)
