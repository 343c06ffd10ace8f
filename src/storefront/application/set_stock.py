"""Application service: Set Stock use case.

An administrative correction: overwrites the on-hand quantity. Not a
reservation, so it bypasses the conditional-decrement protocol.
"""

from __future__ import annotations

import logging

from storefront.domain.exceptions import ValidationError
from storefront.domain.repository.product_repository import ProductRepository


class SetStockHandler:

    def __init__(
        self,
        product_repo: ProductRepository,
        logger: logging.Logger | None = None,
    ) -> None:
        self._product_repo = product_repo
        self._log = logger or logging.getLogger(__name__)

    async def handle(self, product_id: str, quantity: int) -> None:
        if quantity < 0:
            raise ValidationError("Stock quantity must be non-negative")
        await self._product_repo.update_stock(product_id, quantity)
        self._log.info("stock for product %s set to %s", product_id, quantity)
