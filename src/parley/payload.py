"""Utilities for reading untyped inbound and outbound payloads."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


def field_of(payload: Any, key: str, default: Any = None) -> Any:
    """Read a field from mapping-like or attribute-based payloads."""

    if isinstance(payload, Mapping):
        return payload.get(key, default)
    try:
        return getattr(payload, key, default)
    except Exception:
        return default


def path_of(payload: Any, *keys: str, default: Any = None) -> Any:
    """Follow a chain of fields, returning default as soon as one is missing."""

    current = payload
    for key in keys:
        current = field_of(current, key, _MISSING)
        if current is _MISSING:
            return default
    return current


_MISSING = object()
