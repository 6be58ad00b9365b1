"""Pluggy hook namespace and observer hook specifications."""

from __future__ import annotations

from typing import Any

import pluggy

from parley.output.sanitize import TruncationWarning

PARLEY_HOOK_NAMESPACE = "parley"
hookspec = pluggy.HookspecMarker(PARLEY_HOOK_NAMESPACE)
hookimpl = pluggy.HookimplMarker(PARLEY_HOOK_NAMESPACE)


class ParleyHookSpecs:
    """Observer contract for hosts and platforms."""

    @hookspec
    def on_plugin_installed(self, parent: Any, plugin: Any) -> None:
        """Observe a plugin that finished its install hook."""

    @hookspec
    def on_plugin_uninstalled(self, parent: Any, plugin: Any) -> None:
        """Observe a plugin that finished its uninstall hook."""

    @hookspec
    def on_truncation(self, platform: str, warning: TruncationWarning) -> None:
        """Observe one sanitization truncation performed by a converter."""

    @hookspec
    def on_error(self, stage: str, error: Exception) -> None:
        """Observe failures of other observers."""
