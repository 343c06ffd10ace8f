"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from storefront.domain.repository.query import QueryOptions
from storefront.domain.service.stock_reservation_service import StockReservationService
from storefront.infrastructure.config import Settings
from storefront.infrastructure.persistence.sql_cart_repository import SqlCartRepository
from storefront.infrastructure.persistence.sql_category_repository import (
    SqlCategoryRepository,
)
from storefront.infrastructure.persistence.sql_product_repository import (
    SqlProductRepository,
)
from storefront.infrastructure.persistence.sql_variant_repository import (
    SqlVariantRepository,
)
from storefront.infrastructure.persistence.store import SqlAlchemyStore


def settings() -> Settings:
    return Settings.from_env()


def open_store(config: Settings) -> SqlAlchemyStore:
    return SqlAlchemyStore.from_url(config.database_url, echo=config.db_echo)


def product_repository(store: SqlAlchemyStore, config: Settings) -> SqlProductRepository:
    return SqlProductRepository(
        store, default_options=QueryOptions(limit=config.page_limit)
    )


def category_repository(store: SqlAlchemyStore, config: Settings) -> SqlCategoryRepository:
    return SqlCategoryRepository(
        store, default_options=QueryOptions(limit=config.page_limit)
    )


def variant_repository(store: SqlAlchemyStore) -> SqlVariantRepository:
    return SqlVariantRepository(store)


def cart_repository(store: SqlAlchemyStore) -> SqlCartRepository:
    return SqlCartRepository(store)


def reservation_service(store: SqlAlchemyStore, config: Settings) -> StockReservationService:
    return StockReservationService(product_repository(store, config))
