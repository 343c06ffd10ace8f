"""Application service: Add Product Variant use case."""

from __future__ import annotations

import logging

from storefront.domain.exceptions import ConflictError, NotFoundError, PermissionDeniedError
from storefront.domain.model.variant import NewProductVariant, ProductVariant
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.repository.variant_repository import ProductVariantRepository


class AddVariantHandler:

    def __init__(
        self,
        product_repo: ProductRepository,
        variant_repo: ProductVariantRepository,
        logger: logging.Logger | None = None,
    ) -> None:
        self._product_repo = product_repo
        self._variant_repo = variant_repo
        self._log = logger or logging.getLogger(__name__)

    async def handle(
        self, data: NewProductVariant, actor_id: str, is_admin: bool = False
    ) -> ProductVariant:
        """Attach a variant to a product the caller owns."""
        product = await self._product_repo.find_by_id(data.product_id)
        if product is None:
            raise NotFoundError(f"Product with id '{data.product_id}' not found")
        if not is_admin and not product.belongs_to_seller(actor_id):
            raise PermissionDeniedError(
                f"Seller '{actor_id}' does not own product '{data.product_id}'"
            )
        if data.sku and await self._variant_repo.sku_exists(data.sku):
            raise ConflictError(f"Variant with SKU '{data.sku}' already exists")

        variant = await self._variant_repo.create(data)
        self._log.info("variant %s added to product %s", variant.id, product.id)
        return variant
