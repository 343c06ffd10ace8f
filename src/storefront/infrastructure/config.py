"""Runtime settings, read once from the environment by the composition root."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.product import DEFAULT_LOW_STOCK_THRESHOLD
from storefront.domain.repository.query import DEFAULT_PAGE_LIMIT

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///storefront.db"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    db_echo: bool = False
    log_level: str = "INFO"
    page_limit: int = DEFAULT_PAGE_LIMIT
    low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> Settings:
        """Build settings from ``STOREFRONT_*`` variables; unset ones keep defaults."""
        env = os.environ if env is None else env
        log_level = env.get("STOREFRONT_LOG_LEVEL", "INFO").upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ValidationError(f"Unknown log level: '{log_level}'")
        return Settings(
            database_url=env.get("STOREFRONT_DATABASE_URL", DEFAULT_DATABASE_URL),
            db_echo=_flag(env, "STOREFRONT_DB_ECHO"),
            log_level=log_level,
            page_limit=_positive_int(env, "STOREFRONT_PAGE_LIMIT", DEFAULT_PAGE_LIMIT),
            low_stock_threshold=_positive_int(
                env,
                "STOREFRONT_LOW_STOCK_THRESHOLD",
                DEFAULT_LOW_STOCK_THRESHOLD,
                allow_zero=True,
            ),
        )


def _flag(env: Mapping[str, str], name: str) -> bool:
    raw = env.get(name, "").strip().lower()
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise ValidationError(f"{name} must be a boolean, got '{raw}'")


def _positive_int(
    env: Mapping[str, str], name: str, default: int, allow_zero: bool = False
) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValidationError(f"{name} must be an integer, got '{raw}'") from exc
    if value < 0 or (value == 0 and not allow_zero):
        raise ValidationError(f"{name} is out of range: {value}")
    return value
