from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest

from parley.app import App
from parley.errors import DuplicateIdentityError
from parley.hookspecs import hookimpl
from parley.output.models import OutputTemplate
from parley.output.sanitize import TruncationWarning
from parley.platforms.core import CORE_PLATFORM_TYPE, CorePlatform, PlatformDescriptor, make_platform
from parley.plugin import PluginDefinition, PluginState


def _request(type_tag: str = CORE_PLATFORM_TYPE) -> dict[str, Any]:
    return {"version": "4.0.0", "type": type_tag, "request": {"type": "TEXT", "body": {"text": "hi"}}}


@dataclass
class Conversation:
    session: dict[str, Any] = field(default_factory=dict)


class Recorder:
    def __init__(self) -> None:
        self.events: list[tuple[str, Any]] = []

    @hookimpl
    def on_plugin_installed(self, parent: Any, plugin: Any) -> None:
        self.events.append(("installed", plugin.name))

    @hookimpl
    def on_plugin_uninstalled(self, parent: Any, plugin: Any) -> None:
        self.events.append(("uninstalled", plugin.name))

    @hookimpl
    def on_truncation(self, platform: str, warning: TruncationWarning) -> None:
        self.events.append(("truncation", (platform, warning)))


def test_make_platform_is_plain_data() -> None:
    descriptor = make_platform("Web", "web-chat")

    assert descriptor == PlatformDescriptor(name="Web", type="web-chat")
    definition = descriptor.as_definition({"output": {"limits": {"text_max_length": 50}}})
    assert definition.constructor is CorePlatform
    assert definition.name == "Web"
    assert definition.config == {"type": "web-chat", "output": {"limits": {"text_max_length": 50}}}


def test_request_recognition_requires_version_request_type_and_tag() -> None:
    platform = CorePlatform()

    assert platform.is_request_related(_request())
    assert not platform.is_request_related(_request("other"))
    assert not platform.is_request_related({**_request(), "version": ""})
    assert not platform.is_request_related({"version": "4", "type": CORE_PLATFORM_TYPE, "request": {}})


@pytest.mark.parametrize(
    "payload",
    [None, 42, "text", [], {}, {"request": "not a mapping"}, {"version": "1", "request": None, "type": None}, object()],
)
def test_recognition_is_total(payload: Any) -> None:
    platform = CorePlatform()

    assert platform.is_request_related(payload) is False
    assert platform.is_response_related(payload) is False


def test_recognition_swallows_predicate_failures() -> None:
    class Exploding:
        def __getattr__(self, name: str) -> Any:
            raise RuntimeError("boom")

        def __eq__(self, other: object) -> bool:
            raise RuntimeError("boom")

    platform = CorePlatform()

    assert platform.is_request_related({"version": "1", "request": {"type": "x"}, "type": Exploding()}) is False
    assert platform.is_request_related(Exploding()) is False


def test_finalize_stamps_type_and_session_data() -> None:
    platform = CorePlatform({"type": "web-chat"})
    state = Conversation(session={"turn": 3})

    response = platform.create_response(OutputTemplate(message="hello"), state)

    assert response["type"] == "web-chat"
    assert response["session"] == {"data": {"turn": 3}}
    assert platform.is_response_related(response)
    assert not CorePlatform().is_response_related(response)


def test_finalize_accepts_mapping_state() -> None:
    response = CorePlatform().finalize_response({}, {"session": {"user": "u1"}})

    assert response == {"type": CORE_PLATFORM_TYPE, "session": {"data": {"user": "u1"}}}


def test_platform_recognizes_its_own_empty_response() -> None:
    platform = CorePlatform()

    response = platform.create_response(OutputTemplate(), Conversation(session={}))

    assert response == {"type": CORE_PLATFORM_TYPE, "session": {"data": {}}}
    assert platform.is_response_related(response)


def test_response_with_malformed_message_list_is_not_related() -> None:
    platform = CorePlatform()
    base = {"type": CORE_PLATFORM_TYPE, "session": {"data": {}}}

    assert not platform.is_response_related({**base, "fulfillment_messages": "hello"})
    assert not platform.is_response_related({**base, "session_entity_types": {"name": "x"}})
    assert not platform.is_response_related({"type": CORE_PLATFORM_TYPE, "session": "nope"})


def test_platform_converter_uses_platform_name_for_overrides() -> None:
    platform = CorePlatform(name="Web")
    output = OutputTemplate.model_validate({"message": "generic", "platforms": {"Web": {"message": "web only"}}})

    response = platform.to_response(output)

    assert response["fulfillment_messages"][0]["message"]["text"] == {"text": ["web only"]}
    assert platform.from_response(response).message == "web only"


@pytest.mark.asyncio
async def test_app_routes_to_first_matching_platform() -> None:
    app = App(
        plugins=[
            make_platform("Web", "web-chat"),
            make_platform("Kiosk", "kiosk"),
            make_platform("WebBeta", "web-chat"),
        ]
    )
    await app.start()

    assert [platform.name for platform in app.platforms] == ["Web", "Kiosk", "WebBeta"]
    assert app.find_request_platform(_request("kiosk")).name == "Kiosk"
    assert app.find_request_platform(_request("web-chat")).name == "Web"
    assert app.find_request_platform(_request("unknown")) is None
    assert app.find_request_platform("garbage") is None

    response = app.get("Kiosk").create_response(OutputTemplate(message="hi"), Conversation())
    assert app.find_response_platform(response).name == "Kiosk"


@pytest.mark.asyncio
async def test_app_observers_receive_lifecycle_and_truncation_events() -> None:
    recorder = Recorder()
    app = App(
        plugins=[
            PluginDefinition(
                constructor=CorePlatform,
                config={"output": {"limits": {"quick_replies_max_size": 2}}},
                name="Web",
            )
        ]
    )
    app.register_observer(recorder, name="recorder")
    await app.start()

    app.get("Web").to_response(OutputTemplate(quick_replies=["a", "b", "c"]))
    await app.dispose()

    assert recorder.events == [
        ("installed", "Web"),
        ("truncation", ("Web", TruncationWarning("array", "quickReplies", 2))),
        ("uninstalled", "Web"),
    ]
    assert app.state is PluginState.UNINSTALLED
    assert app.hook_report()["on_truncation"] == ["recorder"]


@pytest.mark.asyncio
async def test_failing_observer_does_not_break_conversion() -> None:
    class BrokenObserver:
        @hookimpl
        def on_truncation(self, platform: str, warning: TruncationWarning) -> None:
            raise RuntimeError("observer broke on purpose")

    errors: list[str] = []

    class ErrorObserver:
        @hookimpl
        def on_error(self, stage: str, error: Exception) -> None:
            errors.append(stage)

    app = App(plugins=[PluginDefinition(constructor=CorePlatform, config={"output": {"limits": {"text_max_length": 2}}})])
    app.register_observer(BrokenObserver(), name="broken")
    app.register_observer(ErrorObserver(), name="errors")
    await app.start()

    response = app.get("CorePlatform").to_response(OutputTemplate(message="hello"))

    assert response["fulfillment_messages"][0]["message"]["text"] == {"text": ["he"]}
    assert errors == ["on_truncation:broken"]


@pytest.mark.asyncio
async def test_nested_platform_events_bubble_to_app() -> None:
    recorder = Recorder()
    app = App(plugins=[PluginDefinition(constructor=CorePlatform, name="Outer", plugins=[make_platform("Inner", "inner")])])
    app.register_observer(recorder)
    await app.start()

    assert recorder.events == [("installed", "Inner"), ("installed", "Outer")]
    outer = app.get("Outer")
    assert outer.get("Inner").state is PluginState.INSTALLED


@pytest.mark.asyncio
async def test_app_start_reports_duplicate_platform_names() -> None:
    app = App(plugins=[make_platform("Web", "web-chat"), make_platform("Web", "kiosk")])

    with pytest.raises(DuplicateIdentityError) as exc_info:
        await app.start()

    assert exc_info.value.name == "Web"
    assert [platform.config["type"] for platform in app.platforms] == ["web-chat"]


def test_platform_output_config_reaches_converter() -> None:
    platform = CorePlatform({"output": {"limits": {"quick_replies_max_size": 2}}})

    response = platform.to_response(OutputTemplate(quick_replies=["a", "b", "c"]))

    assert response["fulfillment_messages"][0]["message"]["quick_replies"] == {"quick_replies": ["a", "b"]}
    assert platform.output_converter.limit("text_max_length") == 4096
