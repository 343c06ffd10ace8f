"""SQL implementation of ProductRepository."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import fields
from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import uuid4

from sqlalchemy import and_, case, delete, func, insert, or_, select, update
from sqlalchemy.engine import RowMapping
from sqlalchemy.sql import ColumnElement

from storefront.domain.exceptions import (
    ConflictError,
    NotFoundError,
    UniqueViolation,
    ValidationError,
)
from storefront.domain.model.changes import supplied
from storefront.domain.model.product import (
    MAX_RATING,
    NewProduct,
    Product,
    ProductChanges,
    ProductImage,
    ProductStatus,
    ProductVisibility,
)
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.repository.query import Page, ProductFilters, QueryOptions, SortOrder
from storefront.infrastructure.persistence.sql_support import (
    amount,
    decimal_or_none,
    decode_dimensions,
    encode_dimensions,
    fetch_page,
    json_array_contains,
    money,
    ordering,
    utcnow,
)
from storefront.infrastructure.persistence.store import Store
from storefront.infrastructure.persistence.tables import products

FEATURED_MIN_RATING = Decimal("4.0")

SORTABLE_COLUMNS = frozenset(
    {
        "created_at",
        "updated_at",
        "name",
        "price",
        "stock_quantity",
        "average_rating",
        "review_count",
        "view_count",
    }
)

_live = products.c.deleted_at.is_(None)


def _encode_images(images: Any) -> list[dict[str, Any]]:
    return [
        {
            "id": image.id,
            "url": image.url,
            "alt": image.alt,
            "sort_order": image.sort_order,
            "is_main": image.is_main,
        }
        for image in images
    ]


# Per-column encoders for values that are not stored as-is.
_ENCODERS: dict[str, Callable[[Any], Any]] = {
    "price": amount,
    "compare_price": amount,
    "cost_price": amount,
    "weight": amount,
    "dimensions": encode_dimensions,
    "images": _encode_images,
    "tags": list,
    "attributes": dict,
    "status": lambda status: status.value,
    "visibility": lambda visibility: visibility.value,
}


def _encode(column: str, value: Any) -> Any:
    encoder = _ENCODERS.get(column)
    if encoder is None or value is None:
        return value
    return encoder(value)


class SqlProductRepository(ProductRepository):

    def __init__(
        self,
        store: Store,
        clock: Callable[[], datetime] = utcnow,
        default_options: QueryOptions | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._store = store
        self._clock = clock
        self._default_options = default_options or QueryOptions()
        self._log = logger or logging.getLogger(__name__)

    # --- CRUD -----------------------------------------------------------------

    async def create(self, data: NewProduct) -> Product:
        now = self._clock()
        # Building the entity first validates every invariant before any I/O.
        product = Product(
            id=str(uuid4()),
            **{f.name: getattr(data, f.name) for f in fields(data)},
            created_at=now,
            updated_at=now,
        )
        try:
            rows = await self._store.query(
                insert(products).values(**self._to_row(product)).returning(*products.c)
            )
        except UniqueViolation as exc:
            raise self._conflict(product.slug, product.sku) from exc
        self._log.info("product created id=%s seller=%s", product.id, product.seller_id)
        return self._to_domain(rows[0])

    async def find_by_id(self, product_id: str) -> Product | None:
        return await self._find_one(products.c.id == product_id)

    async def find_by_slug(self, slug: str) -> Product | None:
        return await self._find_one(products.c.slug == slug)

    async def find_by_sku(self, sku: str) -> Product | None:
        return await self._find_one(products.c.sku == sku)

    async def update(self, product_id: str, changes: ProductChanges) -> Product:
        if changes.is_empty():
            raise ValidationError("No fields to update")
        current = await self.find_by_id(product_id)
        if current is None:
            raise NotFoundError(f"Product with id '{product_id}' not found")
        # Applying the changes to the entity validates the result before any write.
        candidate = current.apply(changes)
        values = {column: _encode(column, value) for column, value in supplied(changes).items()}
        values["updated_at"] = self._clock()
        stmt = (
            update(products)
            .where(products.c.id == product_id, _live)
            .values(**values)
            .returning(*products.c)
        )
        try:
            rows = await self._store.query(stmt)
        except UniqueViolation as exc:
            raise self._conflict(candidate.slug, candidate.sku) from exc
        if not rows:
            raise NotFoundError(f"Product with id '{product_id}' not found")
        self._log.info("product updated id=%s fields=%s", product_id, sorted(values))
        return self._to_domain(rows[0])

    async def delete(self, product_id: str) -> None:
        rows = await self._store.query(
            delete(products).where(products.c.id == product_id).returning(products.c.id)
        )
        if not rows:
            raise NotFoundError(f"Product with id '{product_id}' not found")
        self._log.info("product deleted id=%s", product_id)

    async def soft_delete(self, product_id: str) -> None:
        now = self._clock()
        rows = await self._store.query(
            update(products)
            .where(products.c.id == product_id, _live)
            .values(
                deleted_at=now,
                status=ProductStatus.INACTIVE.value,
                updated_at=now,
            )
            .returning(products.c.id)
        )
        if not rows:
            raise NotFoundError(f"Product with id '{product_id}' not found")
        self._log.info("product soft-deleted id=%s", product_id)

    # --- Listing & search -----------------------------------------------------

    async def find_all(self, options: QueryOptions | None = None) -> Page[Product]:
        return await self.find_by_filters(ProductFilters(), options)

    async def find_by_filters(
        self, filters: ProductFilters, options: QueryOptions | None = None
    ) -> Page[Product]:
        options = options or self._default_options
        order = ordering(
            products, options, SORTABLE_COLUMNS, "created_at", SortOrder.DESC
        )
        return await fetch_page(
            self._store,
            products,
            self._conditions(filters),
            options,
            order,
            self._to_domain,
        )

    async def find_by_seller(
        self, seller_id: str, options: QueryOptions | None = None
    ) -> Page[Product]:
        return await self.find_by_filters(ProductFilters(seller_id=seller_id), options)

    async def find_by_category(
        self, category_id: str, options: QueryOptions | None = None
    ) -> Page[Product]:
        return await self.find_by_filters(ProductFilters(category_id=category_id), options)

    async def search(
        self,
        text: str,
        filters: ProductFilters | None = None,
        options: QueryOptions | None = None,
    ) -> Page[Product]:
        base = filters or ProductFilters()
        return await self.find_by_filters(
            ProductFilters(
                seller_id=base.seller_id,
                category_id=base.category_id,
                status=base.status,
                min_price=base.min_price,
                max_price=base.max_price,
                in_stock=base.in_stock,
                search=text,
                tags=list(base.tags),
            ),
            options,
        )

    async def find_related_products(self, product_id: str, limit: int = 5) -> list[Product]:
        target = await self.find_by_id(product_id)
        if target is None:
            return []

        matches: list[ColumnElement[bool]] = [
            json_array_contains(products.c.tags, tag) for tag in target.tags
        ]
        order: list[ColumnElement[Any]] = []
        if target.category_id is not None:
            same_category = products.c.category_id == target.category_id
            matches.append(same_category)
            order.append(case((same_category, 0), else_=1))
        if not matches:
            return []
        order += [products.c.average_rating.desc(), products.c.created_at.desc()]

        rows = await self._store.query(
            select(products)
            .where(
                products.c.id != product_id,
                _live,
                products.c.status == ProductStatus.ACTIVE.value,
                or_(*matches),
            )
            .order_by(*order)
            .limit(limit)
        )
        return [self._to_domain(row) for row in rows]

    async def find_featured_products(self, limit: int = 10) -> list[Product]:
        rows = await self._store.query(
            select(products)
            .where(
                _live,
                products.c.status == ProductStatus.ACTIVE.value,
                products.c.average_rating >= FEATURED_MIN_RATING,
            )
            .order_by(
                products.c.average_rating.desc(),
                products.c.review_count.desc(),
                products.c.created_at.desc(),
            )
            .limit(limit)
        )
        return [self._to_domain(row) for row in rows]

    async def count_by_filters(self, filters: ProductFilters) -> int:
        rows = await self._store.query(
            select(func.count().label("total"))
            .select_from(products)
            .where(*self._conditions(filters))
        )
        return int(rows[0]["total"])

    # --- Stock ----------------------------------------------------------------

    async def update_stock(self, product_id: str, quantity: int) -> None:
        if quantity < 0:
            raise ValidationError("Stock quantity must be non-negative")
        rows = await self._store.query(
            update(products)
            .where(products.c.id == product_id, _live)
            .values(stock_quantity=quantity, updated_at=self._clock())
            .returning(products.c.id)
        )
        if not rows:
            raise NotFoundError(f"Product with id '{product_id}' not found")
        self._log.info("stock set product=%s quantity=%s", product_id, quantity)

    async def reserve_stock(self, product_id: str, quantity: int) -> bool:
        if quantity <= 0:
            raise ValidationError("Reservation quantity must be positive")
        # One conditional statement: the row lock serializes concurrent
        # reservations and the guard keeps stock from going negative.
        rows = await self._store.query(
            update(products)
            .where(
                products.c.id == product_id,
                _live,
                products.c.stock_quantity >= quantity,
            )
            .values(
                stock_quantity=products.c.stock_quantity - quantity,
                updated_at=self._clock(),
            )
            .returning(products.c.stock_quantity)
        )
        if not rows:
            self._log.debug("reservation refused product=%s quantity=%s", product_id, quantity)
            return False
        self._log.debug(
            "reserved product=%s quantity=%s remaining=%s",
            product_id,
            quantity,
            rows[0]["stock_quantity"],
        )
        return True

    async def release_stock(self, product_id: str, quantity: int) -> None:
        if quantity <= 0:
            raise ValidationError("Release quantity must be positive")
        rows = await self._store.query(
            update(products)
            .where(products.c.id == product_id)
            .values(
                stock_quantity=products.c.stock_quantity + quantity,
                updated_at=self._clock(),
            )
            .returning(products.c.id)
        )
        if not rows:
            self._log.warning(
                "release matched no product product=%s quantity=%s", product_id, quantity
            )

    async def find_low_stock_products(self, seller_id: str | None = None) -> list[Product]:
        conditions = [
            _live,
            products.c.track_inventory.is_(True),
            products.c.stock_quantity <= products.c.low_stock_threshold,
        ]
        if seller_id is not None:
            conditions.append(products.c.seller_id == seller_id)
        rows = await self._store.query(
            select(products)
            .where(*conditions)
            .order_by(products.c.stock_quantity.asc(), products.c.created_at.desc())
        )
        return [self._to_domain(row) for row in rows]

    # --- Counters -------------------------------------------------------------

    async def increment_view_count(self, product_id: str) -> None:
        await self._store.query(
            update(products)
            .where(products.c.id == product_id, _live)
            .values(view_count=products.c.view_count + 1, updated_at=self._clock())
        )

    async def update_rating(
        self, product_id: str, average_rating: Decimal, review_count: int
    ) -> None:
        if not Decimal("0") <= average_rating <= MAX_RATING:
            raise ValidationError("Product average rating must be between 0 and 5")
        if review_count < 0:
            raise ValidationError("Product review count must be non-negative")
        await self._store.query(
            update(products)
            .where(products.c.id == product_id, _live)
            .values(
                average_rating=average_rating,
                review_count=review_count,
                updated_at=self._clock(),
            )
        )

    # --- Uniqueness checks ----------------------------------------------------

    async def exists(self, product_id: str) -> bool:
        return await self._any(products.c.id == product_id)

    async def slug_exists(self, slug: str, exclude_id: str | None = None) -> bool:
        return await self._any(products.c.slug == slug, exclude_id=exclude_id)

    async def sku_exists(self, sku: str, exclude_id: str | None = None) -> bool:
        return await self._any(products.c.sku == sku, exclude_id=exclude_id)

    # --- Internal helpers -----------------------------------------------------

    async def _find_one(self, condition: ColumnElement[bool]) -> Product | None:
        rows = await self._store.query(select(products).where(condition, _live))
        if not rows:
            return None
        return self._to_domain(rows[0])

    async def _any(
        self, condition: ColumnElement[bool], exclude_id: str | None = None
    ) -> bool:
        conditions = [condition, _live]
        if exclude_id is not None:
            conditions.append(products.c.id != exclude_id)
        rows = await self._store.query(
            select(products.c.id).where(*conditions).limit(1)
        )
        return bool(rows)

    @staticmethod
    def _conditions(filters: ProductFilters) -> list[ColumnElement[bool]]:
        conditions: list[ColumnElement[bool]] = [_live]
        if filters.seller_id is not None:
            conditions.append(products.c.seller_id == filters.seller_id)
        if filters.category_id is not None:
            conditions.append(products.c.category_id == filters.category_id)
        if filters.status is not None:
            conditions.append(products.c.status == filters.status.value)
        if filters.min_price is not None:
            conditions.append(products.c.price >= filters.min_price)
        if filters.max_price is not None:
            conditions.append(products.c.price <= filters.max_price)
        if filters.in_stock is True:
            conditions.append(
                or_(
                    products.c.track_inventory.is_(False),
                    products.c.stock_quantity > 0,
                )
            )
        elif filters.in_stock is False:
            conditions.append(
                and_(
                    products.c.track_inventory.is_(True),
                    products.c.stock_quantity <= 0,
                )
            )
        if filters.search:
            conditions.append(
                or_(
                    products.c.name.icontains(filters.search, autoescape=True),
                    products.c.description.icontains(filters.search, autoescape=True),
                )
            )
        if filters.tags:
            conditions.append(
                or_(*(json_array_contains(products.c.tags, tag) for tag in filters.tags))
            )
        return conditions

    @staticmethod
    def _conflict(slug: str | None, sku: str | None) -> ConflictError:
        if sku:
            return ConflictError(f"Product slug '{slug}' or SKU '{sku}' already exists")
        return ConflictError(f"Product with slug '{slug}' already exists")

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_row(product: Product) -> dict[str, Any]:
        return {
            f.name: _encode(f.name, getattr(product, f.name))
            for f in fields(product)
        }

    @staticmethod
    def _to_domain(row: RowMapping) -> Product:
        return Product(
            id=row["id"],
            seller_id=row["seller_id"],
            category_id=row["category_id"],
            name=row["name"],
            slug=row["slug"],
            description=row["description"],
            short_description=row["short_description"],
            price=money(row["price"]),  # type: ignore[arg-type]
            compare_price=money(row["compare_price"]),
            cost_price=money(row["cost_price"]),
            sku=row["sku"],
            stock_quantity=row["stock_quantity"],
            low_stock_threshold=row["low_stock_threshold"],
            track_inventory=bool(row["track_inventory"]),
            allow_backorders=bool(row["allow_backorders"]),
            weight=decimal_or_none(row["weight"]),
            dimensions=decode_dimensions(row["dimensions"]),
            images=tuple(
                ProductImage(
                    url=raw["url"],
                    sort_order=raw.get("sort_order", 0),
                    is_main=raw.get("is_main", False),
                    id=raw.get("id"),
                    alt=raw.get("alt"),
                )
                for raw in row["images"] or []
            ),
            video_url=row["video_url"],
            status=ProductStatus(row["status"]),
            visibility=ProductVisibility(row["visibility"]),
            password=row["password"],
            seo_title=row["seo_title"],
            seo_description=row["seo_description"],
            seo_keywords=row["seo_keywords"],
            tags=tuple(row["tags"] or ()),
            attributes=dict(row["attributes"] or {}),
            view_count=row["view_count"],
            favorite_count=row["favorite_count"],
            average_rating=Decimal(str(row["average_rating"])),
            review_count=row["review_count"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            deleted_at=row["deleted_at"],
        )
