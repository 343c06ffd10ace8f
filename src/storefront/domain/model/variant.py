"""ProductVariant: a purchasable variation of a product (size, colour...).

Price, weight, dimensions and image are optional overrides; when unset the
parent product's values apply.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.changes import UNSET, supplied
from storefront.domain.model.product import ProductDimensions
from storefront.domain.model.value_objects import Money


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ProductVariant:

    id: str
    product_id: str
    name: str
    sku: str | None = None
    price: Money | None = None
    compare_price: Money | None = None
    cost_price: Money | None = None
    stock_quantity: int = 0
    weight: Decimal | None = None
    dimensions: ProductDimensions | None = None
    image_url: str | None = None
    attributes: dict[str, Any] = field(default_factory=dict)
    is_active: bool = True
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValidationError("Product variant name is required")
        if not self.product_id or not self.product_id.strip():
            raise ValidationError("Product variant product ID is required")
        if self.stock_quantity < 0:
            raise ValidationError("Product variant stock quantity must be non-negative")
        if self.weight is not None and self.weight < 0:
            raise ValidationError("Product variant weight must be non-negative")

    def is_available(self) -> bool:
        return self.is_active and self.stock_quantity > 0

    def is_out_of_stock(self) -> bool:
        return self.stock_quantity <= 0

    def has_custom_pricing(self) -> bool:
        return self.price is not None

    def effective_price(self, product_price: Money) -> Money:
        return self.price if self.price is not None else product_price

    def effective_compare_price(self, product_compare_price: Money | None) -> Money | None:
        return self.compare_price if self.compare_price is not None else product_compare_price

    def is_on_sale(self, product_price: Money, product_compare_price: Money | None = None) -> bool:
        compare = self.effective_compare_price(product_compare_price)
        return compare is not None and compare > self.effective_price(product_price)

    def discount_percentage(
        self, product_price: Money, product_compare_price: Money | None = None
    ) -> int:
        if not self.is_on_sale(product_price, product_compare_price):
            return 0
        compare = self.effective_compare_price(product_compare_price)
        return self.effective_price(product_price).percent_off(compare)  # type: ignore[arg-type]

    def display_name(self) -> str:
        """``"T-Shirt (Red / L)"``: the name followed by non-empty attribute values."""
        values = " / ".join(str(v) for v in self.attributes.values() if v)
        return f"{self.name} ({values})" if values else self.name

    def update(self, **changes: Any) -> ProductVariant:
        for frozen_field in ("id", "product_id", "created_at"):
            if frozen_field in changes:
                raise ValidationError(f"Product variant {frozen_field} cannot be changed")
        return replace(self, **{**changes, "updated_at": _utcnow()})

    def deactivate(self) -> ProductVariant:
        return self.update(is_active=False)


@dataclass
class NewProductVariant:
    product_id: str
    name: str
    sku: str | None = None
    price: Money | None = None
    compare_price: Money | None = None
    cost_price: Money | None = None
    stock_quantity: int = 0
    weight: Decimal | None = None
    dimensions: ProductDimensions | None = None
    image_url: str | None = None
    attributes: dict[str, Any] = field(default_factory=dict)
    is_active: bool = True


@dataclass
class VariantChanges:
    name: Any = UNSET
    sku: Any = UNSET
    price: Any = UNSET
    compare_price: Any = UNSET
    cost_price: Any = UNSET
    stock_quantity: Any = UNSET
    weight: Any = UNSET
    dimensions: Any = UNSET
    image_url: Any = UNSET
    attributes: Any = UNSET
    is_active: Any = UNSET

    def is_empty(self) -> bool:
        return not supplied(self)
