"""Plugin hosts that own an identity-keyed registry of installed children."""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from loguru import logger

from parley.errors import DuplicateIdentityError
from parley.plugin import Plugin, PluginDefinitionInput, PluginState, build_plugin

if TYPE_CHECKING:
    from parley.output.sanitize import TruncationWarning


class Extensible(Plugin):
    """A plugin that installs other plugins into itself.

    Children are registered under their name in insertion order. Installation
    is sequential: every child of a batch is initialized first, then each is
    installed, always in declaration order.
    """

    def __init__(
        self,
        config: Mapping[str, Any] | None = None,
        *,
        plugins: Sequence[PluginDefinitionInput | Plugin] = (),
        name: str | None = None,
    ) -> None:
        self._plugins: dict[str, Plugin] = {}
        super().__init__(config, plugins=plugins, name=name)

    @property
    def plugins(self) -> Mapping[str, Plugin]:
        return MappingProxyType(self._plugins)

    def get(self, name: str) -> Plugin | None:
        return self._plugins.get(name)

    def __iter__(self) -> Iterator[Plugin]:
        return iter(list(self._plugins.values()))

    def __len__(self) -> int:
        return len(self._plugins)

    def __contains__(self, name: object) -> bool:
        return name in self._plugins

    async def install(self, parent: Extensible | None) -> None:
        await self.install_plugins(*self.children)

    async def uninstall(self, parent: Extensible | None) -> None:
        for name in reversed(list(self._plugins)):
            if self._plugins[name].state is PluginState.INSTALLED:
                await self.uninstall_plugin(name)

    async def install_plugin(self, item: PluginDefinitionInput | Plugin) -> Plugin:
        """Build, initialize and install one child."""

        installed = await self.install_plugins(item)
        return installed[0]

    async def install_plugins(self, *items: PluginDefinitionInput | Plugin) -> list[Plugin]:
        """Build, initialize and install children in declaration order.

        Children preceding a duplicate name are still installed before
        ``DuplicateIdentityError`` is raised. A failing hook aborts the batch
        without undoing what already ran.
        """

        admitted: list[Plugin] = []
        duplicate: DuplicateIdentityError | None = None
        for item in items:
            plugin = build_plugin(item)
            if plugin.name in self._plugins:
                duplicate = DuplicateIdentityError(plugin.name)
                break
            self._plugins[plugin.name] = plugin
            admitted.append(plugin)

        for plugin in admitted:
            await plugin.run_initialize(self)
        for plugin in admitted:
            await plugin.run_install(self)
            self.notify("on_plugin_installed", parent=self, plugin=plugin)

        if duplicate is not None:
            logger.warning("plugin.duplicate host={} name={}", self.name, duplicate.name)
            raise duplicate
        return admitted

    async def uninstall_plugin(self, name: str) -> Plugin:
        plugin = self._plugins.get(name)
        if plugin is None:
            raise KeyError(name)
        await plugin.run_uninstall(self)
        del self._plugins[name]
        self.notify("on_plugin_uninstalled", parent=self, plugin=plugin)
        return plugin

    def notify(self, hook_name: str, **kwargs: Any) -> None:
        """Forward an observer event towards the root host."""

        if self.parent is not None:
            self.parent.notify(hook_name, **kwargs)

    def report_truncation(self, platform: str, warning: TruncationWarning) -> None:
        self.notify("on_truncation", platform=platform, warning=warning)
