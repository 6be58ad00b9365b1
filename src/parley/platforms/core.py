"""Core platform and the factory for named platform variants."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from parley.config import deep_merge, thaw
from parley.output.dialogflow import DialogflowOutputConverter
from parley.payload import field_of, path_of
from parley.platforms.base import Platform
from parley.plugin import PluginConstructor, PluginDefinition, PluginDefinitionInput
from parley.types import NativeResponse

CORE_PLATFORM_TYPE = "parley-platform-core"


class CorePlatform(Platform[Any, dict[str, Any]]):
    """Platform for clients speaking the core request format.

    Requests carry ``version``, ``request.type`` and a ``type`` tag that must
    equal the configured one.
    """

    def get_default_config(self) -> dict[str, Any]:
        return {"type": CORE_PLATFORM_TYPE, "output": {}}

    def create_output_converter(self) -> DialogflowOutputConverter:
        return DialogflowOutputConverter(thaw(self.config["output"]), platform_name=self.name)

    def matches_request(self, request: Any) -> bool:
        return bool(
            field_of(request, "version")
            and path_of(request, "request", "type")
            and field_of(request, "type") == self.config["type"]
        )

    def matches_response(self, response: Any) -> bool:
        if field_of(response, "type") != self.config["type"]:
            return False
        if not isinstance(field_of(response, "session"), Mapping):
            return False
        return all(
            isinstance(field_of(response, key, []), list) for key in ("fulfillment_messages", "session_entity_types")
        )

    def finalize_response(self, response: NativeResponse, app_state: Any) -> NativeResponse:
        response["type"] = self.config["type"]
        session = response.setdefault("session", {})
        session["data"] = dict(field_of(app_state, "session", None) or {})
        return response


@dataclass(frozen=True)
class PlatformDescriptor:
    """Plain description of a named platform variant with its own type tag."""

    name: str
    type: str
    constructor: PluginConstructor = CorePlatform

    def as_definition(
        self,
        config: Mapping[str, Any] | None = None,
        plugins: Sequence[PluginDefinitionInput] = (),
    ) -> PluginDefinition:
        return PluginDefinition(
            constructor=self.constructor,
            config=deep_merge({"type": self.type}, config or {}),
            plugins=plugins,
            name=self.name,
        )


def make_platform(name: str, type_tag: str) -> PlatformDescriptor:
    return PlatformDescriptor(name=name, type=type_tag)
