"""Application service: Delete Product use case.

Deleting from the catalog is a soft delete: the row stays for order
history but disappears from every read path.
"""

from __future__ import annotations

import logging

from storefront.domain.exceptions import NotFoundError, PermissionDeniedError
from storefront.domain.repository.product_repository import ProductRepository


class DeleteProductHandler:

    def __init__(
        self,
        product_repo: ProductRepository,
        logger: logging.Logger | None = None,
    ) -> None:
        self._product_repo = product_repo
        self._log = logger or logging.getLogger(__name__)

    async def handle(self, product_id: str, actor_id: str, is_admin: bool = False) -> None:
        product = await self._product_repo.find_by_id(product_id)
        if product is None:
            raise NotFoundError(f"Product with id '{product_id}' not found")
        if not is_admin and not product.belongs_to_seller(actor_id):
            raise PermissionDeniedError(
                f"Seller '{actor_id}' does not own product '{product_id}'"
            )

        await self._product_repo.soft_delete(product_id)
        self._log.info("product %s deleted by %s", product_id, actor_id)
