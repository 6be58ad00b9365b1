"""Application-level exception types for Parley."""

from __future__ import annotations

from typing import Any


class ParleyError(Exception):
    """Base exception for Parley."""


class ConfigMergeError(ParleyError):
    """Raised by strict config resolution when an override has the wrong shape."""


class DuplicateIdentityError(ParleyError):
    """Raised when a host already has a child installed under the same name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"plugin {name!r} is already installed")
        self.name = name


class LifecycleHookError(ParleyError):
    """Raised when an initialize/install/uninstall hook fails."""

    def __init__(self, plugin: Any, stage: str, message: str | None = None) -> None:
        name = getattr(plugin, "name", type(plugin).__name__)
        super().__init__(message or f"{stage} hook of plugin {name!r} failed")
        self.plugin = plugin
        self.stage = stage


class LifecycleStateError(LifecycleHookError):
    """Raised when a lifecycle hook is requested from an illegal state."""


class UnsupportedConversionError(ParleyError):
    """Raised when a converter has no native mapping for a value kind."""

    def __init__(self, kind: str, platform: str) -> None:
        super().__init__(f"{platform} cannot render values of kind {kind!r}")
        self.kind = kind
        self.platform = platform
