"""Product aggregate.

A product belongs to exactly one seller and carries its own inventory
counters. Instances are immutable: ``update()`` and ``mark_as_deleted()``
return a new, re-validated Product, so an invalid product can never exist.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.changes import UNSET, supplied
from storefront.domain.model.value_objects import MAX_SLUG_LENGTH, Money, is_valid_slug

MAX_IMAGES = 5
MAX_NAME_LENGTH = 255
DEFAULT_LOW_STOCK_THRESHOLD = 10
MAX_RATING = Decimal("5")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProductStatus(Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    INACTIVE = "inactive"
    OUT_OF_STOCK = "out_of_stock"


class ProductVisibility(Enum):
    PUBLIC = "public"
    PRIVATE = "private"
    PASSWORD_PROTECTED = "password_protected"


@dataclass(frozen=True)
class ProductImage:
    url: str
    sort_order: int = 0
    is_main: bool = False
    id: str | None = None
    alt: str | None = None


@dataclass(frozen=True)
class ProductDimensions:
    length: Decimal | None = None
    width: Decimal | None = None
    height: Decimal | None = None
    unit: str = "cm"


@dataclass(frozen=True)
class Product:
    """Aggregate root for catalog products.

    Invariants (checked on every construction):
    - name, slug and seller are present; slug is kebab-case, <= 255 chars
    - stock, thresholds, counters and weight are non-negative
    - average rating lies in [0, 5]
    - at most 5 images
    - password-protected products carry a password
    """

    id: str
    seller_id: str
    name: str
    slug: str
    price: Money
    category_id: str | None = None
    description: str | None = None
    short_description: str | None = None
    compare_price: Money | None = None
    cost_price: Money | None = None
    sku: str | None = None
    stock_quantity: int = 0
    low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD
    track_inventory: bool = True
    allow_backorders: bool = False
    weight: Decimal | None = None
    dimensions: ProductDimensions | None = None
    images: tuple[ProductImage, ...] = ()
    video_url: str | None = None
    status: ProductStatus = ProductStatus.DRAFT
    visibility: ProductVisibility = ProductVisibility.PUBLIC
    password: str | None = None
    seo_title: str | None = None
    seo_description: str | None = None
    seo_keywords: str | None = None
    tags: tuple[str, ...] = ()
    attributes: dict[str, Any] = field(default_factory=dict)
    view_count: int = 0
    favorite_count: int = 0
    average_rating: Decimal = Decimal("0")
    review_count: int = 0
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)
    deleted_at: datetime | None = None

    def __post_init__(self) -> None:
        # Callers hand in lists; store tuples so the entity stays immutable.
        object.__setattr__(self, "images", tuple(self.images))
        object.__setattr__(self, "tags", tuple(self.tags))
        self._validate()

    def _validate(self) -> None:
        if not self.name or not self.name.strip():
            raise ValidationError("Product name is required")
        if not self.slug or not self.slug.strip():
            raise ValidationError("Product slug is required")
        if not self.seller_id or not self.seller_id.strip():
            raise ValidationError("Product seller ID is required")
        if len(self.name) > MAX_NAME_LENGTH:
            raise ValidationError(
                f"Product name must be {MAX_NAME_LENGTH} characters or less"
            )
        if len(self.slug) > MAX_SLUG_LENGTH:
            raise ValidationError(
                f"Product slug must be {MAX_SLUG_LENGTH} characters or less"
            )
        if self.stock_quantity < 0:
            raise ValidationError("Product stock quantity must be non-negative")
        if self.low_stock_threshold < 0:
            raise ValidationError("Product low stock threshold must be non-negative")
        if self.weight is not None and self.weight < 0:
            raise ValidationError("Product weight must be non-negative")
        if not Decimal("0") <= self.average_rating <= MAX_RATING:
            raise ValidationError("Product average rating must be between 0 and 5")
        if self.review_count < 0:
            raise ValidationError("Product review count must be non-negative")
        if self.view_count < 0:
            raise ValidationError("Product view count must be non-negative")
        if self.favorite_count < 0:
            raise ValidationError("Product favorite count must be non-negative")
        if not is_valid_slug(self.slug):
            raise ValidationError("Product slug must be in kebab-case format")
        if len(self.images) > MAX_IMAGES:
            raise ValidationError(f"Product can have maximum {MAX_IMAGES} images")
        if (
            self.visibility == ProductVisibility.PASSWORD_PROTECTED
            and not self.password
        ):
            raise ValidationError(
                "Password is required for password-protected products"
            )

    # --- Queries --------------------------------------------------------------

    def is_available(self) -> bool:
        """Active, and either untracked, in stock, or open to backorders."""
        if self.status != ProductStatus.ACTIVE:
            return False
        return (
            not self.track_inventory
            or self.stock_quantity > 0
            or self.allow_backorders
        )

    def is_out_of_stock(self) -> bool:
        return self.track_inventory and self.stock_quantity <= 0

    def is_low_stock(self) -> bool:
        return self.track_inventory and self.stock_quantity <= self.low_stock_threshold

    def is_on_sale(self) -> bool:
        return self.compare_price is not None and self.compare_price > self.price

    def discount_percentage(self) -> int:
        if not self.is_on_sale():
            return 0
        return self.price.percent_off(self.compare_price)  # type: ignore[arg-type]

    def main_image(self) -> ProductImage | None:
        """The image flagged as main, else the first one added."""
        for image in self.images:
            if image.is_main:
                return image
        return self.images[0] if self.images else None

    def sorted_images(self) -> list[ProductImage]:
        return sorted(self.images, key=lambda image: image.sort_order)

    def belongs_to_seller(self, seller_id: str) -> bool:
        return self.seller_id == seller_id

    # --- Copy-on-write transitions -------------------------------------------

    def update(self, **changes: Any) -> Product:
        """Return a new Product with *changes* applied and ``updated_at`` refreshed."""
        for frozen_field in ("id", "created_at"):
            if frozen_field in changes:
                raise ValidationError(f"Product {frozen_field} cannot be changed")
        return replace(self, **{**changes, "updated_at": _utcnow()})

    def apply(self, changes: ProductChanges) -> Product:
        return self.update(**supplied(changes))

    def mark_as_deleted(self) -> Product:
        now = _utcnow()
        return replace(
            self, deleted_at=now, status=ProductStatus.INACTIVE, updated_at=now
        )


@dataclass
class NewProduct:
    """Input for ``ProductRepository.create``.

    Omitted counters are filled by the repository (views, favorites and
    reviews start at zero) and ``status`` defaults to draft.
    """

    seller_id: str
    name: str
    slug: str
    price: Money
    category_id: str | None = None
    description: str | None = None
    short_description: str | None = None
    compare_price: Money | None = None
    cost_price: Money | None = None
    sku: str | None = None
    stock_quantity: int = 0
    low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD
    track_inventory: bool = True
    allow_backorders: bool = False
    weight: Decimal | None = None
    dimensions: ProductDimensions | None = None
    images: list[ProductImage] = field(default_factory=list)
    video_url: str | None = None
    status: ProductStatus = ProductStatus.DRAFT
    visibility: ProductVisibility = ProductVisibility.PUBLIC
    password: str | None = None
    seo_title: str | None = None
    seo_description: str | None = None
    seo_keywords: str | None = None
    tags: list[str] = field(default_factory=list)
    attributes: dict[str, Any] = field(default_factory=dict)


@dataclass
class ProductChanges:
    """Closed set of product fields a partial update may touch."""

    category_id: Any = UNSET
    name: Any = UNSET
    slug: Any = UNSET
    description: Any = UNSET
    short_description: Any = UNSET
    price: Any = UNSET
    compare_price: Any = UNSET
    cost_price: Any = UNSET
    sku: Any = UNSET
    stock_quantity: Any = UNSET
    low_stock_threshold: Any = UNSET
    track_inventory: Any = UNSET
    allow_backorders: Any = UNSET
    weight: Any = UNSET
    dimensions: Any = UNSET
    images: Any = UNSET
    video_url: Any = UNSET
    status: Any = UNSET
    visibility: Any = UNSET
    password: Any = UNSET
    seo_title: Any = UNSET
    seo_description: Any = UNSET
    seo_keywords: Any = UNSET
    tags: Any = UNSET
    attributes: Any = UNSET

    def is_empty(self) -> bool:
        return not supplied(self)
