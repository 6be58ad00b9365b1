"""Configuration resolution and process settings for Parley."""

from __future__ import annotations

from collections.abc import Mapping
from functools import lru_cache
from types import MappingProxyType
from typing import Any

from loguru import logger
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from parley.errors import ConfigMergeError


class ParleySettings(BaseSettings):
    """Process-wide settings."""

    model_config = SettingsConfigDict(
        env_prefix="PARLEY_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = Field(default="INFO", description="Log level")
    log_profile: str = Field(default="default", description="Log profile: default or cli")
    strict_config: bool = Field(default=False, description="Reject config overrides with mismatched shapes")


@lru_cache(maxsize=1)
def get_settings() -> ParleySettings:
    """Get application settings, loaded once per process."""
    return ParleySettings()


def resolve(default: Mapping[str, Any], override: Any = None, *, strict: bool = False) -> dict[str, Any]:
    """Merge a partial override into a default configuration.

    Nested mappings are merged key by key, anything else in the override
    (sequences included) replaces the default value outright. Neither input
    is mutated.

    Args:
        default: The component's built-in configuration.
        override: Caller-supplied partial configuration. ``None`` means ``{}``.
        strict: Raise ``ConfigMergeError`` on shape mismatches instead of
            letting the override win.

    Returns:
        A fresh dict holding the effective configuration.
    """
    if override is None:
        return _copy(default)
    if not isinstance(override, Mapping):
        if strict:
            raise ConfigMergeError(f"config override must be a mapping, got {type(override).__name__}")
        logger.warning("config.override_ignored type={}", type(override).__name__)
        return _copy(default)
    return _merge(default, override, strict=strict, path="")


def deep_merge(target: Mapping[str, Any], source: Mapping[str, Any]) -> dict[str, Any]:
    """Permissive merge of two arbitrary mappings, source winning."""
    return _merge(target, source, strict=False, path="")


def _merge(default: Mapping[str, Any], override: Mapping[str, Any], *, strict: bool, path: str) -> dict[str, Any]:
    merged = _copy(default)
    for key, value in override.items():
        key_path = f"{path}.{key}" if path else str(key)
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = _merge(current, value, strict=strict, path=key_path)
            continue
        if strict and _shape_mismatch(current, value):
            raise ConfigMergeError(
                f"config key {key_path!r} expects {type(current).__name__}, got {type(value).__name__}"
            )
        merged[key] = _copy(value)
    return merged


def _copy(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _copy(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_copy(item) for item in value]
    return value


def _shape_mismatch(current: Any, value: Any) -> bool:
    if current is None or value is None:
        return False
    return isinstance(current, Mapping) != isinstance(value, Mapping)


def freeze(value: Any) -> Any:
    """Return a read-only view: mappings become proxies, lists become tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({key: freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(item) for item in value)
    return value


def thaw(value: Any) -> Any:
    """Inverse of ``freeze``, producing plain dicts and lists."""
    if isinstance(value, Mapping):
        return {key: thaw(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [thaw(item) for item in value]
    return value
