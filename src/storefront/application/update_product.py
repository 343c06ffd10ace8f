"""Application service: Update Product use case."""

from __future__ import annotations

import logging

from storefront.application.dto import ProductDTO
from storefront.domain.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from storefront.domain.model.changes import UNSET
from storefront.domain.model.product import ProductChanges
from storefront.domain.repository.product_repository import ProductRepository


class UpdateProductHandler:

    def __init__(
        self,
        product_repo: ProductRepository,
        logger: logging.Logger | None = None,
    ) -> None:
        self._product_repo = product_repo
        self._log = logger or logging.getLogger(__name__)

    async def handle(
        self,
        product_id: str,
        changes: ProductChanges,
        actor_id: str,
        is_admin: bool = False,
    ) -> ProductDTO:
        """Apply a partial update on behalf of *actor_id*.

        Only the owning seller or an admin may change a product. The changes
        are applied to the entity first so an invalid result never reaches
        the store.
        """
        if changes.is_empty():
            raise ValidationError("No fields to update")

        product = await self._product_repo.find_by_id(product_id)
        if product is None:
            raise NotFoundError(f"Product with id '{product_id}' not found")
        if not is_admin and not product.belongs_to_seller(actor_id):
            raise PermissionDeniedError(
                f"Seller '{actor_id}' does not own product '{product_id}'"
            )

        if changes.slug is not UNSET and await self._product_repo.slug_exists(
            changes.slug, exclude_id=product_id
        ):
            raise ConflictError(f"Product with slug '{changes.slug}' already exists")
        if changes.sku not in (UNSET, None) and await self._product_repo.sku_exists(
            changes.sku, exclude_id=product_id
        ):
            raise ConflictError(f"Product with SKU '{changes.sku}' already exists")

        updated = product.apply(changes)
        if updated.compare_price is not None and updated.compare_price <= updated.price:
            raise ValidationError("Compare price must be higher than regular price")
        if updated.cost_price is not None and updated.cost_price >= updated.price:
            raise ValidationError("Cost price should be lower than selling price")

        saved = await self._product_repo.update(product_id, changes)
        self._log.info("product %s updated by %s", product_id, actor_id)
        return ProductDTO.from_entity(saved)
