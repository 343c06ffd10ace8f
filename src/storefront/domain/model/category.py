"""Category aggregate: a node in the catalog hierarchy.

Roots sit at level 0 and every child is one level below its parent.
The hierarchy is at most five levels deep (levels 0 through 4).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.changes import UNSET, supplied
from storefront.domain.model.value_objects import is_valid_slug

MAX_CATEGORY_DEPTH = 5
MAX_CATEGORY_LEVEL = MAX_CATEGORY_DEPTH - 1


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Category:

    id: str
    name: str
    slug: str
    description: str | None = None
    image_url: str | None = None
    parent_id: str | None = None
    level: int = 0
    sort_order: int = 0
    seo_title: str | None = None
    seo_description: str | None = None
    seo_keywords: str | None = None
    is_active: bool = True
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValidationError("Category name is required")
        if not self.slug or not self.slug.strip():
            raise ValidationError("Category slug is required")
        if self.level < 0:
            raise ValidationError("Category level must be non-negative")
        if self.level > MAX_CATEGORY_LEVEL:
            raise ValidationError(
                f"Category nesting cannot exceed {MAX_CATEGORY_DEPTH} levels"
            )
        if self.sort_order < 0:
            raise ValidationError("Category sort order must be non-negative")
        if not is_valid_slug(self.slug):
            raise ValidationError("Category slug must be in kebab-case format")

    def is_root_category(self) -> bool:
        return self.parent_id is None and self.level == 0

    def is_child_category(self) -> bool:
        return self.parent_id is not None and self.level > 0

    def display_name(self) -> str:
        """Name indented two spaces per level, for admin listings."""
        return "  " * self.level + self.name

    def update(self, **changes: Any) -> Category:
        for frozen_field in ("id", "created_at"):
            if frozen_field in changes:
                raise ValidationError(f"Category {frozen_field} cannot be changed")
        return replace(self, **{**changes, "updated_at": _utcnow()})


@dataclass
class NewCategory:
    """Input for ``CategoryRepository.create``; the level is derived from the parent."""

    name: str
    slug: str
    description: str | None = None
    image_url: str | None = None
    parent_id: str | None = None
    sort_order: int = 0
    seo_title: str | None = None
    seo_description: str | None = None
    seo_keywords: str | None = None
    is_active: bool = True


@dataclass
class CategoryChanges:
    """Closed set of category fields a partial update may touch.

    Setting ``parent_id`` (to an id or to None) makes the repository
    recompute ``level`` from the new parent.
    """

    name: Any = UNSET
    slug: Any = UNSET
    description: Any = UNSET
    image_url: Any = UNSET
    parent_id: Any = UNSET
    sort_order: Any = UNSET
    seo_title: Any = UNSET
    seo_description: Any = UNSET
    seo_keywords: Any = UNSET
    is_active: Any = UNSET

    def is_empty(self) -> bool:
        return not supplied(self)
