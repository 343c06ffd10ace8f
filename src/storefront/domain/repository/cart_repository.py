"""Abstract repository for carts and their line items."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.cart import Cart, CartItem, CartLine
from storefront.domain.model.value_objects import Money, Quantity


class CartRepository(ABC):

    @abstractmethod
    async def find_active_cart_by_user_id(self, user_id: str) -> Cart | None:
        """Return the user's active cart without creating one."""

    @abstractmethod
    async def find_or_create_cart_by_user_id(self, user_id: str) -> Cart:
        """Return the user's active cart, creating it on first use."""

    @abstractmethod
    async def add_cart_item(
        self, cart_id: str, product_id: str, quantity: Quantity, unit_price: Money
    ) -> CartItem:
        """Insert a line, or merge into the existing line for the same product.

        A merge adds the quantities and reprices the whole line at *unit_price*.
        """

    @abstractmethod
    async def update_cart_item_quantity(
        self, cart_id: str, product_id: str, quantity: Quantity
    ) -> None:
        """Set a line's quantity, keeping its unit price."""

    @abstractmethod
    async def get_cart_items(self, user_id: str) -> list[CartLine]:
        """Lines of the user's active cart, most recently added first."""

    @abstractmethod
    async def remove_cart_item(self, cart_item_id: str) -> None:
        """Delete one line."""

    @abstractmethod
    async def clear_cart(self, cart_id: str) -> None:
        """Delete every line of a cart."""
