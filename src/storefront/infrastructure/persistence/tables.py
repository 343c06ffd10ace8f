"""Relational schema (SQLAlchemy Core).

Uniqueness rules live here as constraints so the store enforces them even
when two requests race past the use-case pre-checks.
"""

from __future__ import annotations

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    UniqueConstraint,
)

metadata = MetaData()

ID = String(36)

categories = Table(
    "categories",
    metadata,
    Column("id", ID, primary_key=True),
    Column("name", String(100), nullable=False),
    Column("slug", String(100), nullable=False, unique=True),
    Column("description", Text),
    Column("image_url", String(500)),
    Column("parent_id", ID, ForeignKey("categories.id", ondelete="SET NULL")),
    Column("level", Integer, nullable=False, default=0),
    Column("sort_order", Integer, nullable=False, default=0),
    Column("seo_title", String(255)),
    Column("seo_description", String(500)),
    Column("seo_keywords", String(500)),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    CheckConstraint("level >= 0", name="ck_categories_level"),
    CheckConstraint("sort_order >= 0", name="ck_categories_sort_order"),
    Index("ix_categories_parent_level", "parent_id", "level"),
)

products = Table(
    "products",
    metadata,
    Column("id", ID, primary_key=True),
    Column("seller_id", ID, nullable=False),
    Column("category_id", ID, ForeignKey("categories.id", ondelete="SET NULL")),
    Column("name", String(255), nullable=False),
    Column("slug", String(255), nullable=False),
    Column("description", Text),
    Column("short_description", String(500)),
    Column("price", Numeric(10, 2), nullable=False),
    Column("compare_price", Numeric(10, 2)),
    Column("cost_price", Numeric(10, 2)),
    Column("sku", String(100)),
    Column("stock_quantity", Integer, nullable=False, default=0),
    Column("low_stock_threshold", Integer, nullable=False, default=10),
    Column("track_inventory", Boolean, nullable=False, default=True),
    Column("allow_backorders", Boolean, nullable=False, default=False),
    Column("weight", Numeric(8, 2)),
    Column("dimensions", JSON),
    Column("images", JSON, nullable=False),
    Column("video_url", String(500)),
    Column("status", String(20), nullable=False, default="draft"),
    Column("visibility", String(20), nullable=False, default="public"),
    Column("password", String(255)),
    Column("seo_title", String(255)),
    Column("seo_description", String(500)),
    Column("seo_keywords", String(500)),
    Column("tags", JSON, nullable=False),
    Column("attributes", JSON, nullable=False),
    Column("view_count", Integer, nullable=False, default=0),
    Column("favorite_count", Integer, nullable=False, default=0),
    Column("average_rating", Numeric(3, 2), nullable=False, default=0),
    Column("review_count", Integer, nullable=False, default=0),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    Column("deleted_at", DateTime(timezone=True)),
    CheckConstraint("price >= 0", name="ck_products_price"),
    CheckConstraint("stock_quantity >= 0", name="ck_products_stock"),
    CheckConstraint(
        "average_rating >= 0 AND average_rating <= 5", name="ck_products_rating"
    ),
    Index("ix_products_seller_status", "seller_id", "status"),
    Index("ix_products_category", "category_id"),
)

# Slug and SKU are unique among live rows only, so a soft-deleted product
# does not block its slug forever.
Index(
    "uq_products_slug_live",
    products.c.slug,
    unique=True,
    sqlite_where=products.c.deleted_at.is_(None),
    postgresql_where=products.c.deleted_at.is_(None),
)
Index(
    "uq_products_sku_live",
    products.c.sku,
    unique=True,
    sqlite_where=products.c.deleted_at.is_(None),
    postgresql_where=products.c.deleted_at.is_(None),
)

product_variants = Table(
    "product_variants",
    metadata,
    Column("id", ID, primary_key=True),
    Column(
        "product_id", ID, ForeignKey("products.id", ondelete="CASCADE"), nullable=False
    ),
    Column("name", String(255), nullable=False),
    Column("sku", String(100), unique=True),
    Column("price", Numeric(10, 2)),
    Column("compare_price", Numeric(10, 2)),
    Column("cost_price", Numeric(10, 2)),
    Column("stock_quantity", Integer, nullable=False, default=0),
    Column("weight", Numeric(8, 2)),
    Column("dimensions", JSON),
    Column("image_url", String(500)),
    Column("attributes", JSON, nullable=False),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    CheckConstraint("stock_quantity >= 0", name="ck_variants_stock"),
    Index("ix_product_variants_product", "product_id"),
)

carts = Table(
    "carts",
    metadata,
    Column("id", ID, primary_key=True),
    Column("user_id", ID, nullable=False),
    Column("status", String(20), nullable=False, default="active"),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)

# At most one active cart per user.
Index(
    "uq_carts_user_active",
    carts.c.user_id,
    unique=True,
    sqlite_where=carts.c.status == "active",
    postgresql_where=carts.c.status == "active",
)

cart_items = Table(
    "cart_items",
    metadata,
    Column("id", ID, primary_key=True),
    Column("cart_id", ID, ForeignKey("carts.id", ondelete="CASCADE"), nullable=False),
    Column(
        "product_id", ID, ForeignKey("products.id", ondelete="CASCADE"), nullable=False
    ),
    Column("quantity", Integer, nullable=False),
    Column("unit_price", Numeric(10, 2), nullable=False),
    Column("total_price", Numeric(10, 2), nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    CheckConstraint("quantity > 0", name="ck_cart_items_quantity"),
    UniqueConstraint("cart_id", "product_id", name="uq_cart_items_cart_product"),
)
