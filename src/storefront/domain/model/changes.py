"""Partial-update support.

A ``*Changes`` dataclass lists every field a caller may change. Fields
default to ``UNSET`` so "not supplied" stays distinct from "set to None".
"""

from __future__ import annotations

from dataclasses import fields
from typing import Any


class _Unset:
    _instance: _Unset | None = None

    def __new__(cls) -> _Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


def supplied(changes: object) -> dict[str, Any]:
    """Return ``{field_name: value}`` for every field that is not UNSET."""
    return {
        f.name: getattr(changes, f.name)
        for f in fields(changes)  # type: ignore[arg-type]
        if getattr(changes, f.name) is not UNSET
    }
