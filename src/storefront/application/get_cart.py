"""Application service: Get Cart use case (query)."""

from __future__ import annotations

import logging

from storefront.application.dto import GetCartResponse
from storefront.domain.repository.cart_repository import CartRepository


class GetCartHandler:

    def __init__(
        self,
        cart_repo: CartRepository,
        logger: logging.Logger | None = None,
    ) -> None:
        self._cart_repo = cart_repo
        self._log = logger or logging.getLogger(__name__)

    async def handle(self, user_id: str) -> GetCartResponse:
        lines = await self._cart_repo.get_cart_items(user_id)
        response = GetCartResponse.from_lines(user_id, lines)
        self._log.info(
            "cart read user=%s items=%s total=%s",
            user_id,
            len(response.items),
            response.total_amount,
        )
        return response
