"""Root host: owns observer hooks and routes payloads to platforms."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import pluggy

from parley.extensible import Extensible
from parley.hook_runtime import HookRuntime
from parley.hookspecs import PARLEY_HOOK_NAMESPACE, ParleyHookSpecs
from parley.platforms.base import Platform
from parley.plugin import Plugin, PluginDefinitionInput


class App(Extensible):
    """The root of a plugin tree.

    Observers registered with ``register_observer`` receive lifecycle and
    truncation events from every node below the app. Observer failures are
    logged and never reach the caller.
    """

    def __init__(
        self,
        config: Mapping[str, Any] | None = None,
        *,
        plugins: Sequence[PluginDefinitionInput | Plugin] = (),
        name: str | None = None,
    ) -> None:
        self._plugin_manager = pluggy.PluginManager(PARLEY_HOOK_NAMESPACE)
        self._plugin_manager.add_hookspecs(ParleyHookSpecs)
        self._hook_runtime = HookRuntime(self._plugin_manager)
        super().__init__(config, plugins=plugins, name=name)

    def register_observer(self, observer: object, name: str | None = None) -> None:
        self._plugin_manager.register(observer, name=name)

    async def start(self) -> None:
        """Install every declared child, then mark the app installed."""

        await self.run_install(None)

    async def dispose(self) -> None:
        """Uninstall every child in reverse order."""

        await self.run_uninstall(None)

    @property
    def platforms(self) -> list[Platform[Any, Any]]:
        return [plugin for plugin in self if isinstance(plugin, Platform)]

    def find_request_platform(self, request: Any) -> Platform[Any, Any] | None:
        """First installed platform that recognizes the request."""

        return next((platform for platform in self.platforms if platform.is_request_related(request)), None)

    def find_response_platform(self, response: Any) -> Platform[Any, Any] | None:
        return next((platform for platform in self.platforms if platform.is_response_related(response)), None)

    def notify(self, hook_name: str, **kwargs: Any) -> None:
        self._hook_runtime.call_many(hook_name, **kwargs)

    def hook_report(self) -> dict[str, list[str]]:
        """Return hook implementation summary for diagnostics."""

        return self._hook_runtime.hook_report()
