"""Application service: Update Cart Item Quantity use case.

Stock is not re-checked here; availability is settled at reservation time.
"""

from __future__ import annotations

from storefront.domain.exceptions import NotFoundError
from storefront.domain.model.value_objects import Quantity
from storefront.domain.repository.cart_repository import CartRepository


class UpdateCartItemQuantityHandler:

    def __init__(self, cart_repo: CartRepository) -> None:
        self._cart_repo = cart_repo

    async def handle(self, user_id: str, product_id: str, quantity: int) -> None:
        new_quantity = Quantity(quantity)
        cart = await self._cart_repo.find_active_cart_by_user_id(user_id)
        if cart is None:
            raise NotFoundError(f"Product '{product_id}' is not in the cart")
        await self._cart_repo.update_cart_item_quantity(cart.id, product_id, new_quantity)
