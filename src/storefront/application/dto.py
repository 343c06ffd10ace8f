"""Data Transfer Objects: plain containers that cross layer boundaries.

Requests validate their own shape on construction; cross-entity rules
(slug taken, category inactive...) belong to the handlers. Responses carry
display-ready values: money formatted like ``"$15.00"``, timestamps as
``"YYYY-MM-DD HH:MM UTC"``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.cart import CartLine
from storefront.domain.model.category import Category
from storefront.domain.model.product import MAX_NAME_LENGTH, Product
from storefront.domain.model.value_objects import MAX_SLUG_LENGTH, Money, is_valid_slug


def _timestamp(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %H:%M UTC")


def _amount(value: str | None, label: str) -> Decimal | None:
    if value is None:
        return None
    try:
        parsed = Decimal(str(value))
    except InvalidOperation as exc:
        raise ValidationError(f"{label} is not a valid amount: {value!r}") from exc
    if parsed < 0:
        raise ValidationError(f"{label} must be non-negative")
    return parsed


# --- Catalog ------------------------------------------------------------------


@dataclass(frozen=True)
class CreateProductRequest:
    """Input: a seller's new catalog entry. Prices are decimal strings."""

    seller_id: str
    name: str
    slug: str
    price: str
    category_id: str | None = None
    description: str | None = None
    short_description: str | None = None
    compare_price: str | None = None
    cost_price: str | None = None
    sku: str | None = None
    stock_quantity: int = 0
    low_stock_threshold: int | None = None
    track_inventory: bool = True
    allow_backorders: bool = False
    weight: str | None = None
    image_urls: tuple[str, ...] = ()
    status: str = "draft"
    visibility: str = "public"
    password: str | None = None
    tags: tuple[str, ...] = ()
    attributes: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.seller_id or not self.seller_id.strip():
            raise ValidationError("Seller ID is required")
        if not self.name or not self.name.strip():
            raise ValidationError("Product name is required")
        if not self.slug or not self.slug.strip():
            raise ValidationError("Product slug is required")
        _amount(self.price, "Product price")
        _amount(self.compare_price, "Compare price")
        _amount(self.cost_price, "Cost price")
        _amount(self.weight, "Weight")
        if self.stock_quantity < 0:
            raise ValidationError("Stock quantity must be non-negative")
        if self.low_stock_threshold is not None and self.low_stock_threshold < 0:
            raise ValidationError("Low stock threshold must be non-negative")
        if len(self.name) > MAX_NAME_LENGTH:
            raise ValidationError("Product name must be 255 characters or less")
        if len(self.slug) > MAX_SLUG_LENGTH:
            raise ValidationError("Product slug must be 255 characters or less")
        if not is_valid_slug(self.slug):
            raise ValidationError("Product slug must be in kebab-case format")

    @property
    def price_amount(self) -> Decimal:
        return _amount(self.price, "Product price")  # type: ignore[return-value]

    @property
    def compare_price_amount(self) -> Decimal | None:
        return _amount(self.compare_price, "Compare price")

    @property
    def cost_price_amount(self) -> Decimal | None:
        return _amount(self.cost_price, "Cost price")

    @property
    def weight_amount(self) -> Decimal | None:
        return _amount(self.weight, "Weight")


@dataclass(frozen=True)
class ProductDTO:
    """Output: a product as shown to shoppers and sellers."""

    id: str
    seller_id: str
    category_id: str | None
    name: str
    slug: str
    sku: str | None
    price: str
    compare_price: str | None
    stock_quantity: int
    status: str
    visibility: str
    tags: list[str]
    is_available: bool
    is_low_stock: bool
    is_on_sale: bool
    discount_percentage: int
    main_image: str | None
    average_rating: str
    review_count: int
    view_count: int
    created_at: str

    @staticmethod
    def from_entity(product: Product) -> ProductDTO:
        main_image = product.main_image()
        return ProductDTO(
            id=product.id,
            seller_id=product.seller_id,
            category_id=product.category_id,
            name=product.name,
            slug=product.slug,
            sku=product.sku,
            price=str(product.price),
            compare_price=str(product.compare_price) if product.compare_price else None,
            stock_quantity=product.stock_quantity,
            status=product.status.value,
            visibility=product.visibility.value,
            tags=list(product.tags),
            is_available=product.is_available(),
            is_low_stock=product.is_low_stock(),
            is_on_sale=product.is_on_sale(),
            discount_percentage=product.discount_percentage(),
            main_image=main_image.url if main_image else None,
            average_rating=str(product.average_rating),
            review_count=product.review_count,
            view_count=product.view_count,
            created_at=_timestamp(product.created_at),
        )


@dataclass(frozen=True)
class LowStockLineDTO:
    product_id: str
    name: str
    sku: str | None
    stock_quantity: int
    low_stock_threshold: int


@dataclass(frozen=True)
class CreateCategoryRequest:
    name: str
    slug: str
    parent_id: str | None = None
    description: str | None = None
    image_url: str | None = None
    sort_order: int = 0
    is_active: bool = True

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValidationError("Category name is required")
        if not self.slug or not self.slug.strip():
            raise ValidationError("Category slug is required")
        if not is_valid_slug(self.slug):
            raise ValidationError("Category slug must be in kebab-case format")
        if self.sort_order < 0:
            raise ValidationError("Category sort order must be non-negative")


@dataclass(frozen=True)
class CategoryDTO:
    id: str
    name: str
    slug: str
    parent_id: str | None
    level: int
    sort_order: int
    is_active: bool
    display_name: str

    @staticmethod
    def from_entity(category: Category) -> CategoryDTO:
        return CategoryDTO(
            id=category.id,
            name=category.name,
            slug=category.slug,
            parent_id=category.parent_id,
            level=category.level,
            sort_order=category.sort_order,
            is_active=category.is_active,
            display_name=category.display_name(),
        )


# --- Cart ---------------------------------------------------------------------


@dataclass(frozen=True)
class AddToCartRequest:
    user_id: str
    product_id: str
    quantity: int

    def __post_init__(self) -> None:
        if not self.user_id or not self.user_id.strip():
            raise ValidationError("User ID is required")
        if not self.product_id or not self.product_id.strip():
            raise ValidationError("Product ID is required")


@dataclass(frozen=True)
class AddToCartResponse:
    cart_id: str
    cart_item_id: str
    product_id: str
    quantity: int
    unit_price: str
    total_price: str


@dataclass(frozen=True)
class CartItemDTO:
    """Output: one cart line as displayed to the user."""

    id: str
    product_id: str
    product_name: str
    quantity: int
    price: str
    total_price: str
    added_at: str


@dataclass(frozen=True)
class GetCartResponse:
    """Output: the user's active cart.

    Totals are summed from the lines on every read; nothing stored on the
    cart itself is trusted.
    """

    user_id: str
    items: list[CartItemDTO]
    total_items: int
    total_amount: str

    @staticmethod
    def from_lines(user_id: str, lines: list[CartLine]) -> GetCartResponse:
        total = Money.zero()
        for line in lines:
            total = total + line.total_price
        return GetCartResponse(
            user_id=user_id,
            items=[
                CartItemDTO(
                    id=line.id,
                    product_id=line.product_id,
                    product_name=line.product_name,
                    quantity=line.quantity,
                    price=str(line.price),
                    total_price=str(line.total_price),
                    added_at=_timestamp(line.added_at),
                )
                for line in lines
            ],
            total_items=sum(line.quantity for line in lines),
            total_amount=str(total),
        )
