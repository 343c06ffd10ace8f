"""Application service: Create Product use case.

Enforces the catalog rules a single Product cannot check on its own
(slug and SKU taken, category usable, price ordering) before any write.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from enum import Enum
from typing import TypeVar

from storefront.application.dto import CreateProductRequest, ProductDTO
from storefront.domain.exceptions import ConflictError, NotFoundError, ValidationError
from storefront.domain.model.product import (
    DEFAULT_LOW_STOCK_THRESHOLD,
    NewProduct,
    ProductImage,
    ProductStatus,
    ProductVisibility,
)
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.category_repository import CategoryRepository
from storefront.domain.repository.product_repository import ProductRepository

E = TypeVar("E", bound=Enum)


class CreateProductHandler:

    def __init__(
        self,
        product_repo: ProductRepository,
        category_repo: CategoryRepository,
        default_low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
        logger: logging.Logger | None = None,
    ) -> None:
        self._product_repo = product_repo
        self._category_repo = category_repo
        self._default_low_stock_threshold = default_low_stock_threshold
        self._log = logger or logging.getLogger(__name__)

    async def handle(self, request: CreateProductRequest) -> ProductDTO:
        await self._check_business_rules(request)

        product = await self._product_repo.create(
            NewProduct(
                seller_id=request.seller_id,
                name=request.name.strip(),
                slug=request.slug,
                price=Money(request.price_amount),
                category_id=request.category_id,
                description=request.description,
                short_description=request.short_description,
                compare_price=_money(request.compare_price_amount),
                cost_price=_money(request.cost_price_amount),
                sku=request.sku,
                stock_quantity=request.stock_quantity,
                low_stock_threshold=(
                    request.low_stock_threshold
                    if request.low_stock_threshold is not None
                    else self._default_low_stock_threshold
                ),
                track_inventory=request.track_inventory,
                allow_backorders=request.allow_backorders,
                weight=request.weight_amount,
                images=[
                    ProductImage(url=url, sort_order=position, is_main=position == 0)
                    for position, url in enumerate(request.image_urls)
                ],
                status=_enum(ProductStatus, request.status, "status"),
                visibility=_enum(ProductVisibility, request.visibility, "visibility"),
                password=request.password,
                tags=list(request.tags),
                attributes=dict(request.attributes),
            )
        )
        self._log.info(
            "product %s created by seller %s", product.id, product.seller_id
        )
        return ProductDTO.from_entity(product)

    async def _check_business_rules(self, request: CreateProductRequest) -> None:
        if await self._product_repo.slug_exists(request.slug):
            raise ConflictError(f"Product with slug '{request.slug}' already exists")

        if request.sku and await self._product_repo.sku_exists(request.sku):
            raise ConflictError(f"Product with SKU '{request.sku}' already exists")

        if request.category_id:
            category = await self._category_repo.find_by_id(request.category_id)
            if category is None:
                raise NotFoundError(
                    f"Category with id '{request.category_id}' not found"
                )
            if not category.is_active:
                raise ValidationError("Cannot assign product to inactive category")

        price = request.price_amount
        compare_price = request.compare_price_amount
        if compare_price is not None and compare_price <= price:
            raise ValidationError("Compare price must be higher than regular price")

        cost_price = request.cost_price_amount
        if cost_price is not None and cost_price >= price:
            raise ValidationError("Cost price should be lower than selling price")


def _money(amount: Decimal | None) -> Money | None:
    return Money(amount) if amount is not None else None


def _enum(enum_type: type[E], value: str, label: str) -> E:
    try:
        return enum_type(value)
    except ValueError as exc:
        raise ValidationError(f"Unknown product {label}: '{value}'") from exc
