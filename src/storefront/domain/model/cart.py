"""Cart and its line items.

A user has one active cart. Line totals are snapshotted per item; the
cart itself stores no totals, they are always summed from its lines.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from storefront.domain.model.value_objects import Money, Quantity


class CartStatus(Enum):
    ACTIVE = "active"
    ABANDONED = "abandoned"
    CONVERTED = "converted"


@dataclass(frozen=True)
class Cart:
    id: str
    user_id: str
    status: CartStatus = CartStatus.ACTIVE


@dataclass(frozen=True)
class CartItem:
    """One ``(cart, product)`` line with the unit price captured at add time."""

    id: str
    cart_id: str
    product_id: str
    quantity: Quantity
    unit_price: Money
    total_price: Money

    @staticmethod
    def priced(
        id: str, cart_id: str, product_id: str, quantity: Quantity, unit_price: Money
    ) -> CartItem:
        return CartItem(
            id=id,
            cart_id=cart_id,
            product_id=product_id,
            quantity=quantity,
            unit_price=unit_price,
            total_price=unit_price * quantity.value,
        )

    def merged(self, extra: Quantity, unit_price: Money) -> CartItem:
        """Add *extra* units and reprice the whole line at *unit_price*."""
        return CartItem.priced(
            id=self.id,
            cart_id=self.cart_id,
            product_id=self.product_id,
            quantity=self.quantity + extra,
            unit_price=unit_price,
        )


@dataclass(frozen=True)
class CartLine:
    """Read model: a cart item joined with its product's name."""

    id: str
    product_id: str
    product_name: str
    quantity: int
    price: Money
    total_price: Money
    added_at: datetime
