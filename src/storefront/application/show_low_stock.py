"""Application service: Show Low Stock use case (query)."""

from __future__ import annotations

from storefront.application.dto import LowStockLineDTO
from storefront.domain.repository.product_repository import ProductRepository


class ShowLowStockHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    async def handle(self, seller_id: str | None = None) -> list[LowStockLineDTO]:
        products = await self._product_repo.find_low_stock_products(seller_id)
        return [
            LowStockLineDTO(
                product_id=p.id,
                name=p.name,
                sku=p.sku,
                stock_quantity=p.stock_quantity,
                low_stock_threshold=p.low_stock_threshold,
            )
            for p in products
        ]
