"""Output converter strategy base and value renderer registry."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping, Sequence
from typing import Any, ClassVar, Generic, TypeAlias, TypeVar

from loguru import logger

from parley.config import deep_merge, freeze, resolve
from parley.errors import UnsupportedConversionError
from parley.output.models import Message, MessageValue, OutputTemplate, PlatformOutputTemplate
from parley.output.sanitize import Reporter, SanitizationOptions, TruncationWarning

Renderer: TypeAlias = Callable[[Any], Any]


class RendererRegistry:
    """Maps a value kind to the function rendering it for one platform."""

    def __init__(self, platform: str) -> None:
        self.platform = platform
        self._renderers: dict[type, Renderer] = {}

    def register(self, kind: type, renderer: Renderer) -> None:
        self._renderers[kind] = renderer

    def discard(self, kind: type) -> None:
        self._renderers.pop(kind, None)

    def __contains__(self, kind: object) -> bool:
        return kind in self._renderers

    def resolve(self, value: Any) -> Renderer:
        for kind in type(value).__mro__:
            renderer = self._renderers.get(kind)
            if renderer is not None:
                return renderer
        raise UnsupportedConversionError(type(value).__name__, self.platform)

    def render(self, value: Any) -> Any:
        return self.resolve(value)(value)


ResponseT = TypeVar("ResponseT")


class OutputConverterStrategy(ABC, Generic[ResponseT]):
    """Converts output templates to one platform's native response and back.

    Conversions keep no per-call state on the instance, so one converter can
    serve independent requests concurrently.
    """

    platform_name: ClassVar[str] = "Core"

    def __init__(
        self,
        config: Mapping[str, Any] | None = None,
        *,
        platform_name: str | None = None,
        reporter: Reporter | None = None,
    ) -> None:
        self.config = freeze(resolve(self.get_default_config(), config))
        self.platform_name = platform_name or type(self).platform_name
        self.reporter = reporter
        self.renderers = RendererRegistry(self.platform_name)
        self.register_renderers(self.renderers)

    def get_default_config(self) -> dict[str, Any]:
        return {"sanitization": True}

    def register_renderers(self, registry: RendererRegistry) -> None:
        """Register renderers for the structured value kinds this platform supports."""

    @property
    def sanitization_options(self) -> SanitizationOptions:
        return SanitizationOptions.from_config(self.config.get("sanitization"))

    def report(self, warning: TruncationWarning) -> None:
        logger.warning(
            "output.{}_truncated platform={} path={} ceiling={}",
            warning.kind,
            self.platform_name,
            warning.path,
            warning.ceiling,
        )
        if self.reporter is not None:
            self.reporter(warning)

    def platform_output(self, output: OutputTemplate) -> PlatformOutputTemplate | None:
        return (output.platforms or {}).get(self.platform_name)

    def pick(self, output: OutputTemplate, field: str) -> tuple[Any, str]:
        """Return the effective value of a field and its path.

        A platform override, when set, replaces the generic value entirely. An
        empty string override counts as unset; an empty list still overrides.
        """

        alias = OutputTemplate.model_fields[field].alias or field
        override = self.platform_output(output)
        value = getattr(override, field, None) if override is not None else None
        if value is not None and value != "":
            return value, f"platforms.{self.platform_name}.{alias}"
        return getattr(output, field), alias

    def prepare_output(self, output: OutputTemplate | Sequence[OutputTemplate]) -> OutputTemplate:
        if isinstance(output, OutputTemplate):
            return output
        return merge_output_templates(output)

    def convert(self, output: OutputTemplate | Sequence[OutputTemplate]) -> ResponseT:
        return self.to_response(self.prepare_output(output))

    @abstractmethod
    def to_response(self, output: OutputTemplate) -> ResponseT:
        """Render one output template as the platform's native response."""

    @abstractmethod
    def from_response(self, response: ResponseT) -> OutputTemplate:
        """Rebuild an output template from a native response."""


def merge_messages(target: MessageValue, source: MessageValue) -> MessageValue:
    if isinstance(target, str) and isinstance(source, str):
        return f"{target} {source}"
    target_message = Message(text=target) if isinstance(target, str) else target
    source_message = Message(text=source) if isinstance(source, str) else source
    display_text = None
    if target_message.display_text is not None or source_message.display_text is not None:
        display_text = (
            f"{target_message.display_text or target_message.text} {source_message.display_text or source_message.text}"
        )
    return Message(text=f"{target_message.text} {source_message.text}", display_text=display_text)


def merge_output_templates(templates: Sequence[OutputTemplate]) -> OutputTemplate:
    """Merge templates left to right into one.

    Messages are joined with a space, platform overrides are merged per
    platform, every other field set later replaces the earlier value.
    """

    fields: dict[str, Any] = {}
    for template in templates:
        for name, value in _set_values(template).items():
            current = fields.get(name)
            if current is None:
                fields[name] = value
            elif name == "message":
                fields[name] = merge_messages(current, value)
            elif name == "platforms":
                fields[name] = _merge_platforms(current, value)
            else:
                fields[name] = value
    return OutputTemplate(**fields)


def _merge_platforms(
    target: dict[str, PlatformOutputTemplate], source: dict[str, PlatformOutputTemplate]
) -> dict[str, PlatformOutputTemplate]:
    merged = dict(target)
    for platform, override in source.items():
        current = merged.get(platform)
        if current is None:
            merged[platform] = override
            continue
        values = _set_values(current)
        for name, value in _set_values(override).items():
            if name == "message" and values.get(name) is not None:
                values[name] = merge_messages(values[name], value)
            elif name == "native_response" and values.get(name) is not None:
                values[name] = deep_merge(values[name], value)
            else:
                values[name] = value
        merged[platform] = PlatformOutputTemplate(**values)
    return merged


def _set_values(model: OutputTemplate | PlatformOutputTemplate) -> dict[str, Any]:
    values = {name: getattr(model, name) for name in type(model).model_fields if getattr(model, name) is not None}
    values.update({name: value for name, value in (model.model_extra or {}).items() if value is not None})
    return values
