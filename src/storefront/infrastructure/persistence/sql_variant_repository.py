"""SQL implementation of ProductVariantRepository."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any
from uuid import uuid4

from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import RowMapping
from sqlalchemy.sql import ColumnElement

from storefront.domain.exceptions import (
    ConflictError,
    NotFoundError,
    UniqueViolation,
    ValidationError,
)
from storefront.domain.model.changes import supplied
from storefront.domain.model.variant import NewProductVariant, ProductVariant, VariantChanges
from storefront.domain.repository.variant_repository import ProductVariantRepository
from storefront.infrastructure.persistence.sql_support import (
    amount,
    decimal_or_none,
    decode_dimensions,
    encode_dimensions,
    money,
    utcnow,
)
from storefront.infrastructure.persistence.store import Store
from storefront.infrastructure.persistence.tables import product_variants

_ENCODERS: dict[str, Callable[[Any], Any]] = {
    "price": amount,
    "compare_price": amount,
    "cost_price": amount,
    "weight": amount,
    "dimensions": encode_dimensions,
    "attributes": dict,
}


def _encode(column: str, value: Any) -> Any:
    encoder = _ENCODERS.get(column)
    if encoder is None or value is None:
        return value
    return encoder(value)


class SqlVariantRepository(ProductVariantRepository):

    def __init__(
        self,
        store: Store,
        clock: Callable[[], datetime] = utcnow,
        logger: logging.Logger | None = None,
    ) -> None:
        self._store = store
        self._clock = clock
        self._log = logger or logging.getLogger(__name__)

    async def create(self, data: NewProductVariant) -> ProductVariant:
        now = self._clock()
        variant = ProductVariant(
            id=str(uuid4()),
            product_id=data.product_id,
            name=data.name,
            sku=data.sku,
            price=data.price,
            compare_price=data.compare_price,
            cost_price=data.cost_price,
            stock_quantity=data.stock_quantity,
            weight=data.weight,
            dimensions=data.dimensions,
            image_url=data.image_url,
            attributes=dict(data.attributes),
            is_active=data.is_active,
            created_at=now,
            updated_at=now,
        )
        row = {
            "id": variant.id,
            "product_id": variant.product_id,
            "name": variant.name,
            "sku": variant.sku,
            "price": amount(variant.price),
            "compare_price": amount(variant.compare_price),
            "cost_price": amount(variant.cost_price),
            "stock_quantity": variant.stock_quantity,
            "weight": variant.weight,
            "dimensions": encode_dimensions(variant.dimensions),
            "image_url": variant.image_url,
            "attributes": variant.attributes,
            "is_active": variant.is_active,
            "created_at": now,
            "updated_at": now,
        }
        try:
            rows = await self._store.query(
                insert(product_variants).values(**row).returning(*product_variants.c)
            )
        except UniqueViolation as exc:
            raise ConflictError(f"Variant with SKU '{variant.sku}' already exists") from exc
        self._log.info("variant created id=%s product=%s", variant.id, variant.product_id)
        return self._to_domain(rows[0])

    async def find_by_id(self, variant_id: str) -> ProductVariant | None:
        rows = await self._store.query(
            select(product_variants).where(product_variants.c.id == variant_id)
        )
        return self._to_domain(rows[0]) if rows else None

    async def find_by_sku(self, sku: str) -> ProductVariant | None:
        rows = await self._store.query(
            select(product_variants).where(product_variants.c.sku == sku)
        )
        return self._to_domain(rows[0]) if rows else None

    async def find_by_product(self, product_id: str) -> list[ProductVariant]:
        return await self._list(product_variants.c.product_id == product_id)

    async def find_active_by_product(self, product_id: str) -> list[ProductVariant]:
        return await self._list(
            product_variants.c.product_id == product_id,
            product_variants.c.is_active.is_(True),
        )

    async def update(self, variant_id: str, changes: VariantChanges) -> ProductVariant:
        if changes.is_empty():
            raise ValidationError("No fields to update")
        current = await self.find_by_id(variant_id)
        if current is None:
            raise NotFoundError(f"Variant with id '{variant_id}' not found")
        changed = supplied(changes)
        candidate = current.update(**changed)
        values = {column: _encode(column, value) for column, value in changed.items()}
        values["updated_at"] = self._clock()
        stmt = (
            update(product_variants)
            .where(product_variants.c.id == variant_id)
            .values(**values)
            .returning(*product_variants.c)
        )
        try:
            rows = await self._store.query(stmt)
        except UniqueViolation as exc:
            raise ConflictError(
                f"Variant with SKU '{candidate.sku}' already exists"
            ) from exc
        if not rows:
            raise NotFoundError(f"Variant with id '{variant_id}' not found")
        return self._to_domain(rows[0])

    async def delete(self, variant_id: str) -> None:
        rows = await self._store.query(
            delete(product_variants)
            .where(product_variants.c.id == variant_id)
            .returning(product_variants.c.id)
        )
        if not rows:
            raise NotFoundError(f"Variant with id '{variant_id}' not found")
        self._log.info("variant deleted id=%s", variant_id)

    async def delete_by_product(self, product_id: str) -> None:
        await self._store.query(
            delete(product_variants).where(product_variants.c.product_id == product_id)
        )
        self._log.info("variants deleted product=%s", product_id)

    async def update_stock(self, variant_id: str, quantity: int) -> None:
        if quantity < 0:
            raise ValidationError("Stock quantity must be non-negative")
        rows = await self._store.query(
            update(product_variants)
            .where(product_variants.c.id == variant_id)
            .values(stock_quantity=quantity, updated_at=self._clock())
            .returning(product_variants.c.id)
        )
        if not rows:
            raise NotFoundError(f"Variant with id '{variant_id}' not found")

    async def reserve_stock(self, variant_id: str, quantity: int) -> bool:
        if quantity <= 0:
            raise ValidationError("Reservation quantity must be positive")
        rows = await self._store.query(
            update(product_variants)
            .where(
                product_variants.c.id == variant_id,
                product_variants.c.stock_quantity >= quantity,
            )
            .values(
                stock_quantity=product_variants.c.stock_quantity - quantity,
                updated_at=self._clock(),
            )
            .returning(product_variants.c.id)
        )
        return bool(rows)

    async def release_stock(self, variant_id: str, quantity: int) -> None:
        if quantity <= 0:
            raise ValidationError("Release quantity must be positive")
        rows = await self._store.query(
            update(product_variants)
            .where(product_variants.c.id == variant_id)
            .values(
                stock_quantity=product_variants.c.stock_quantity + quantity,
                updated_at=self._clock(),
            )
            .returning(product_variants.c.id)
        )
        if not rows:
            self._log.warning(
                "release matched no variant variant=%s quantity=%s", variant_id, quantity
            )

    async def exists(self, variant_id: str) -> bool:
        rows = await self._store.query(
            select(product_variants.c.id).where(product_variants.c.id == variant_id)
        )
        return bool(rows)

    async def sku_exists(self, sku: str, exclude_id: str | None = None) -> bool:
        conditions = [product_variants.c.sku == sku]
        if exclude_id is not None:
            conditions.append(product_variants.c.id != exclude_id)
        rows = await self._store.query(
            select(product_variants.c.id).where(*conditions).limit(1)
        )
        return bool(rows)

    # --- Internal helpers -----------------------------------------------------

    async def _list(self, *conditions: ColumnElement[bool]) -> list[ProductVariant]:
        rows = await self._store.query(
            select(product_variants)
            .where(*conditions)
            .order_by(product_variants.c.created_at.asc(), product_variants.c.id.asc())
        )
        return [self._to_domain(row) for row in rows]

    @staticmethod
    def _to_domain(row: RowMapping) -> ProductVariant:
        return ProductVariant(
            id=row["id"],
            product_id=row["product_id"],
            name=row["name"],
            sku=row["sku"],
            price=money(row["price"]),
            compare_price=money(row["compare_price"]),
            cost_price=money(row["cost_price"]),
            stock_quantity=row["stock_quantity"],
            weight=decimal_or_none(row["weight"]),
            dimensions=decode_dimensions(row["dimensions"]),
            image_url=row["image_url"],
            attributes=dict(row["attributes"] or {}),
            is_active=bool(row["is_active"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
