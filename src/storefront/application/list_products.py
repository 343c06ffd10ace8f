"""Application service: List Products use case (query)."""

from __future__ import annotations

from dataclasses import replace

from storefront.application.dto import ProductDTO
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.repository.query import Page, ProductFilters, QueryOptions


class ListProductsHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    async def handle(
        self,
        filters: ProductFilters | None = None,
        options: QueryOptions | None = None,
    ) -> Page[ProductDTO]:
        filters = filters or ProductFilters()
        if filters.search:
            page = await self._product_repo.search(filters.search, filters, options)
        else:
            page = await self._product_repo.find_by_filters(filters, options)
        return replace(page, items=[ProductDTO.from_entity(p) for p in page.items])  # type: ignore[arg-type]
