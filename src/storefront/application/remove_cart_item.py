"""Application services: Remove Cart Item and Clear Cart use cases."""

from __future__ import annotations

from storefront.domain.exceptions import NotFoundError
from storefront.domain.repository.cart_repository import CartRepository


class RemoveCartItemHandler:

    def __init__(self, cart_repo: CartRepository) -> None:
        self._cart_repo = cart_repo

    async def handle(self, user_id: str, product_id: str) -> None:
        """Drop the line for *product_id* from the user's active cart."""
        lines = await self._cart_repo.get_cart_items(user_id)
        for line in lines:
            if line.product_id == product_id:
                await self._cart_repo.remove_cart_item(line.id)
                return
        raise NotFoundError(f"Product '{product_id}' is not in the cart")


class ClearCartHandler:

    def __init__(self, cart_repo: CartRepository) -> None:
        self._cart_repo = cart_repo

    async def handle(self, user_id: str) -> None:
        cart = await self._cart_repo.find_active_cart_by_user_id(user_id)
        if cart is None:
            return
        await self._cart_repo.clear_cart(cart.id)
