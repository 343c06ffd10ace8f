"""SQL implementation of CartRepository."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from uuid import uuid4

from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import RowMapping

from storefront.domain.exceptions import NotFoundError, UniqueViolation
from storefront.domain.model.cart import Cart, CartItem, CartLine, CartStatus
from storefront.domain.model.value_objects import Money, Quantity
from storefront.domain.repository.cart_repository import CartRepository
from storefront.infrastructure.persistence.sql_support import utcnow
from storefront.infrastructure.persistence.store import Store
from storefront.infrastructure.persistence.tables import cart_items, carts, products

_ACTIVE = CartStatus.ACTIVE.value


class SqlCartRepository(CartRepository):

    def __init__(
        self,
        store: Store,
        clock: Callable[[], datetime] = utcnow,
        logger: logging.Logger | None = None,
    ) -> None:
        self._store = store
        self._clock = clock
        self._log = logger or logging.getLogger(__name__)

    async def find_active_cart_by_user_id(self, user_id: str) -> Cart | None:
        rows = await self._store.query(
            select(carts)
            .where(carts.c.user_id == user_id, carts.c.status == _ACTIVE)
            .order_by(carts.c.created_at.desc())
            .limit(1)
        )
        if not rows:
            return None
        row = rows[0]
        return Cart(id=row["id"], user_id=row["user_id"], status=CartStatus(row["status"]))

    async def find_or_create_cart_by_user_id(self, user_id: str) -> Cart:
        cart = await self.find_active_cart_by_user_id(user_id)
        if cart is not None:
            return cart

        now = self._clock()
        cart = Cart(id=str(uuid4()), user_id=user_id)
        try:
            await self._store.query(
                insert(carts).values(
                    id=cart.id,
                    user_id=user_id,
                    status=_ACTIVE,
                    created_at=now,
                    updated_at=now,
                )
            )
        except UniqueViolation:
            # A concurrent first add created the active cart; use that one.
            existing = await self.find_active_cart_by_user_id(user_id)
            if existing is None:
                raise
            self._log.debug("reused concurrently created cart user=%s", user_id)
            return existing
        self._log.info("cart created id=%s user=%s", cart.id, user_id)
        return cart

    async def add_cart_item(
        self, cart_id: str, product_id: str, quantity: Quantity, unit_price: Money
    ) -> CartItem:
        async def merge_or_insert(tx: Store) -> CartItem:
            rows = await tx.query(
                select(cart_items).where(
                    cart_items.c.cart_id == cart_id,
                    cart_items.c.product_id == product_id,
                )
            )
            now = self._clock()
            if rows:
                item = self._to_item(rows[0]).merged(quantity, unit_price)
                await tx.query(
                    update(cart_items)
                    .where(cart_items.c.id == item.id)
                    .values(
                        quantity=item.quantity.value,
                        unit_price=item.unit_price.amount,
                        total_price=item.total_price.amount,
                        updated_at=now,
                    )
                )
            else:
                item = CartItem.priced(
                    id=str(uuid4()),
                    cart_id=cart_id,
                    product_id=product_id,
                    quantity=quantity,
                    unit_price=unit_price,
                )
                await tx.query(
                    insert(cart_items).values(
                        id=item.id,
                        cart_id=cart_id,
                        product_id=product_id,
                        quantity=item.quantity.value,
                        unit_price=item.unit_price.amount,
                        total_price=item.total_price.amount,
                        created_at=now,
                        updated_at=now,
                    )
                )
            await tx.query(
                update(carts).where(carts.c.id == cart_id).values(updated_at=now)
            )
            return item

        try:
            item = await self._store.transaction(merge_or_insert)
        except UniqueViolation:
            # Lost the insert race for this (cart, product) line: the retry merges.
            self._log.debug("retrying cart add as merge cart=%s product=%s", cart_id, product_id)
            item = await self._store.transaction(merge_or_insert)
        self._log.info(
            "cart item saved cart=%s product=%s quantity=%s",
            cart_id,
            product_id,
            item.quantity.value,
        )
        return item

    async def update_cart_item_quantity(
        self, cart_id: str, product_id: str, quantity: Quantity
    ) -> None:
        rows = await self._store.query(
            update(cart_items)
            .where(cart_items.c.cart_id == cart_id, cart_items.c.product_id == product_id)
            .values(
                quantity=quantity.value,
                total_price=cart_items.c.unit_price * quantity.value,
                updated_at=self._clock(),
            )
            .returning(cart_items.c.id)
        )
        if not rows:
            self._log.error(
                "cart item missing cart=%s product=%s", cart_id, product_id
            )
            raise NotFoundError(f"Product '{product_id}' is not in the cart")

    async def get_cart_items(self, user_id: str) -> list[CartLine]:
        rows = await self._store.query(
            select(
                cart_items.c.id,
                cart_items.c.product_id,
                products.c.name.label("product_name"),
                cart_items.c.quantity,
                cart_items.c.unit_price,
                cart_items.c.total_price,
                cart_items.c.created_at,
            )
            .select_from(
                carts.join(cart_items, cart_items.c.cart_id == carts.c.id).join(
                    products, products.c.id == cart_items.c.product_id
                )
            )
            .where(
                carts.c.user_id == user_id,
                carts.c.status == _ACTIVE,
                products.c.deleted_at.is_(None),
            )
            .order_by(cart_items.c.created_at.desc(), cart_items.c.id.asc())
        )
        return [self._to_line(row) for row in rows]

    async def remove_cart_item(self, cart_item_id: str) -> None:
        rows = await self._store.query(
            delete(cart_items).where(cart_items.c.id == cart_item_id).returning(cart_items.c.id)
        )
        if not rows:
            self._log.error("cart item missing id=%s", cart_item_id)
            raise NotFoundError(f"Cart item with id '{cart_item_id}' not found")
        self._log.info("cart item removed id=%s", cart_item_id)

    async def clear_cart(self, cart_id: str) -> None:
        await self._store.query(delete(cart_items).where(cart_items.c.cart_id == cart_id))
        self._log.info("cart cleared id=%s", cart_id)

    # --- Internal helpers -----------------------------------------------------

    @staticmethod
    def _to_item(row: RowMapping) -> CartItem:
        return CartItem(
            id=row["id"],
            cart_id=row["cart_id"],
            product_id=row["product_id"],
            quantity=Quantity(row["quantity"]),
            unit_price=Money.of(row["unit_price"]),
            total_price=Money.of(row["total_price"]),
        )

    @staticmethod
    def _to_line(row: RowMapping) -> CartLine:
        return CartLine(
            id=row["id"],
            product_id=row["product_id"],
            product_name=row["product_name"],
            quantity=row["quantity"],
            price=Money.of(row["unit_price"]),
            total_price=Money.of(row["total_price"]),
            added_at=row["created_at"],
        )
