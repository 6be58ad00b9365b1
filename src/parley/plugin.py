"""Plugin nodes, their definitions and the lifecycle state machine."""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Protocol, TypeAlias, runtime_checkable

from loguru import logger

from parley.config import freeze, get_settings, resolve
from parley.errors import DuplicateIdentityError, LifecycleHookError, LifecycleStateError
from parley.types import Config, PartialConfig

if TYPE_CHECKING:
    from parley.extensible import Extensible


class PluginState(StrEnum):
    CONSTRUCTED = "constructed"
    INITIALIZED = "initialized"
    INSTALLED = "installed"
    UNINSTALLED = "uninstalled"


PluginConstructor: TypeAlias = "Callable[..., Plugin]"


@dataclass(frozen=True)
class PluginDefinition:
    """A plugin constructor together with its partial config and nested plugins."""

    constructor: PluginConstructor
    config: PartialConfig | None = None
    plugins: Sequence[PluginDefinitionInput] = field(default_factory=tuple)
    name: str | None = None


@runtime_checkable
class SupportsDefinition(Protocol):
    """Plain data values that describe how to build a plugin."""

    def as_definition(self) -> PluginDefinition: ...


PluginDefinitionInput: TypeAlias = "type[Plugin] | PluginDefinition | SupportsDefinition"


def to_definition(item: PluginDefinitionInput) -> PluginDefinition:
    """Normalize any accepted registration input to a ``PluginDefinition``."""

    if isinstance(item, PluginDefinition):
        return item
    if isinstance(item, type) and issubclass(item, Plugin):
        return PluginDefinition(constructor=item)
    if isinstance(item, SupportsDefinition):
        return item.as_definition()
    raise TypeError(f"unsupported plugin definition: {item!r}")


def build_plugin(item: PluginDefinitionInput | Plugin) -> Plugin:
    """Construct a plugin node, recursively constructing its declared children."""

    if isinstance(item, Plugin):
        return item
    definition = to_definition(item)
    return definition.constructor(definition.config, plugins=definition.plugins, name=definition.name)


class Plugin(ABC):
    """A configurable node in the plugin tree.

    The effective config is resolved once from ``get_default_config()`` and the
    caller's partial override, then frozen. Children are built right after, in
    declaration order.
    """

    def __init__(
        self,
        config: PartialConfig | None = None,
        *,
        plugins: Sequence[PluginDefinitionInput | Plugin] = (),
        name: str | None = None,
    ) -> None:
        self.name = name or type(self).__name__
        self._config = freeze(resolve(self.get_default_config(), config, strict=get_settings().strict_config))
        self.children: tuple[Plugin, ...] = tuple(build_plugin(item) for item in plugins)
        self.state = PluginState.CONSTRUCTED
        self.parent: Extensible | None = None

    @property
    def config(self) -> Config:
        return self._config

    def get_default_config(self) -> dict[str, Any]:
        return {}

    async def initialize(self, parent: Extensible | None) -> None:
        """Optional setup that needs the parent but must finish before siblings install."""

    @abstractmethod
    def install(self, parent: Extensible | None) -> Awaitable[None] | None:
        """Integrate this plugin into its parent."""

    def uninstall(self, parent: Extensible | None) -> Awaitable[None] | None:
        """Optional teardown. ``parent`` is None when it is already gone."""
        return None

    async def run_initialize(self, parent: Extensible | None) -> None:
        self._require_state("initialize", PluginState.CONSTRUCTED)
        await self._run_hook("initialize", self.initialize, parent)
        self.parent = parent
        self.state = PluginState.INITIALIZED

    async def run_install(self, parent: Extensible | None) -> None:
        self._require_state("install", PluginState.CONSTRUCTED, PluginState.INITIALIZED)
        self.parent = parent
        await self._run_hook("install", self.install, parent)
        self.state = PluginState.INSTALLED
        logger.debug("plugin.installed name={}", self.name)

    async def run_uninstall(self, parent: Extensible | None) -> None:
        self._require_state("uninstall", PluginState.INSTALLED)
        await self._run_hook("uninstall", self.uninstall, parent)
        self.parent = None
        self.state = PluginState.UNINSTALLED
        logger.debug("plugin.uninstalled name={}", self.name)

    async def _run_hook(self, stage: str, hook: Callable[..., Any], parent: Extensible | None) -> None:
        try:
            result = hook(parent)
            if inspect.isawaitable(result):
                await result
        except (LifecycleHookError, DuplicateIdentityError):
            raise
        except Exception as exc:
            raise LifecycleHookError(self, stage) from exc

    def _require_state(self, stage: str, *allowed: PluginState) -> None:
        if self.state in allowed:
            return
        if self.state is PluginState.UNINSTALLED:
            message = f"plugin {self.name!r} was uninstalled and cannot {stage} again"
        else:
            message = f"plugin {self.name!r} cannot {stage} from state {self.state}"
        raise LifecycleStateError(self, stage, message)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r} state={self.state}>"
