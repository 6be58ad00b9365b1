"""Converter for the fulfillment-message response format."""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from typing import Any

from loguru import logger

from parley.config import deep_merge
from parley.errors import UnsupportedConversionError
from parley.output.models import (
    Card,
    DynamicEntities,
    DynamicEntitiesMode,
    DynamicEntity,
    DynamicEntityValue,
    ListenValue,
    Message,
    MessageValue,
    OutputTemplate,
    QuickReply,
    QuickReplyValue,
)
from parley.output.sanitize import sanitize_message, sanitize_quick_replies
from parley.output.strategy import OutputConverterStrategy, RendererRegistry
from parley.payload import field_of, path_of
from parley.types import NativeResponse

TEXT_MAX_LENGTH = 4096
QUICK_REPLIES_MAX_SIZE = 10
QUICK_REPLY_MAX_LENGTH = 20


class EntityOverrideMode(StrEnum):
    UNSPECIFIED = "ENTITY_OVERRIDE_MODE_UNSPECIFIED"
    OVERRIDE = "ENTITY_OVERRIDE_MODE_OVERRIDE"
    SUPPLEMENT = "ENTITY_OVERRIDE_MODE_SUPPLEMENT"


class DialogflowOutputConverter(OutputConverterStrategy[dict[str, Any]]):
    """Renders output templates as ordered fulfillment messages.

    One fulfillment message is produced per kind, in the order text, quick
    replies, card. Clients render them in array order.
    """

    platform_name = "Dialogflow"

    def get_default_config(self) -> dict[str, Any]:
        return {
            "sanitization": {"max_size": True, "max_length": True},
            "limits": {
                "text_max_length": TEXT_MAX_LENGTH,
                "quick_replies_max_size": QUICK_REPLIES_MAX_SIZE,
                "quick_reply_max_length": QUICK_REPLY_MAX_LENGTH,
            },
        }

    def register_renderers(self, registry: RendererRegistry) -> None:
        registry.register(Message, lambda message: {"text": [message.display_text or message.text]})
        registry.register(QuickReply, lambda quick_reply: quick_reply.value or quick_reply.text)
        registry.register(Card, convert_card)

    def limit(self, name: str) -> int:
        return int(self.config["limits"][name])

    def to_response(self, output: OutputTemplate) -> NativeResponse:
        response: NativeResponse = {}
        options = self.sanitization_options

        message, message_path = self.pick(output, "message")
        if message is not None:
            message = sanitize_message(message, message_path, self.limit("text_max_length"), self.report, options=options)

        quick_replies, quick_replies_path = self.pick(output, "quick_replies")
        if quick_replies:
            quick_replies = sanitize_quick_replies(
                quick_replies,
                quick_replies_path,
                self.limit("quick_replies_max_size"),
                self.limit("quick_reply_max_length"),
                self.report,
                options=options,
            )

        listen, _ = self.pick(output, "listen")
        if isinstance(listen, ListenValue) and listen.entities is not None and listen.entities.types:
            mode = (
                EntityOverrideMode.SUPPLEMENT
                if listen.entities.mode == DynamicEntitiesMode.MERGE
                else EntityOverrideMode.OVERRIDE
            )
            response["session_entity_types"] = [
                convert_dynamic_entity(entity, mode) for entity in listen.entities.types
            ]

        if message is not None:
            text = self._render_or_omit("message", message, self.convert_message)
            if text is not None:
                self._append(response, {"text": text})

        if quick_replies:
            converted = self._render_or_omit("quickReplies", quick_replies, self.convert_quick_replies)
            if converted is not None:
                self._append(response, {"quick_replies": {"quick_replies": converted}})

        card, _ = self.pick(output, "card")
        if card is not None:
            native_card = self._render_or_omit("card", card, self.renderers.render)
            if native_card is not None:
                self._append(response, {"card": native_card})

        override = self.platform_output(output)
        if override is not None and override.native_response:
            response = deep_merge(response, override.native_response)
        return response

    def from_response(self, response: NativeResponse) -> OutputTemplate:
        fields: dict[str, Any] = {}
        messages = [
            item["message"]
            for item in _list_of(response, "fulfillment_messages")
            if isinstance(item, Mapping) and isinstance(item.get("message"), Mapping)
        ]

        text = _first_of_kind(messages, "text")
        if text is not None:
            parts = text.get("text")
            if isinstance(parts, str):
                parts = [parts]
            fields["message"] = " ".join(_strings(parts))

        quick_replies = _strings(path_of(_first_of_kind(messages, "quick_replies"), "quick_replies"))
        if quick_replies:
            fields["quick_replies"] = quick_replies

        card = _first_of_kind(messages, "card")
        if card is not None:
            fields["card"] = parse_card(card)

        session_entity_types = [
            item for item in _list_of(response, "session_entity_types") if isinstance(item, Mapping)
        ]
        if session_entity_types:
            # The mapping is lossy: OVERRIDE never maps back to anything but REPLACE.
            mode = (
                DynamicEntitiesMode.MERGE
                if session_entity_types[0].get("entity_override_mode") == EntityOverrideMode.SUPPLEMENT
                else DynamicEntitiesMode.REPLACE
            )
            fields["listen"] = ListenValue(
                entities=DynamicEntities(
                    mode=mode,
                    types=[parse_session_entity_type(item) for item in session_entity_types],
                )
            )
        return OutputTemplate(**fields)

    def convert_message(self, message: MessageValue) -> dict[str, list[str]]:
        if isinstance(message, str):
            return {"text": [message]}
        return self.renderers.render(message)

    def convert_quick_replies(self, quick_replies: list[QuickReplyValue]) -> list[str]:
        return [item if isinstance(item, str) else self.renderers.render(item) for item in quick_replies]

    def _render_or_omit(self, field: str, value: Any, render: Any) -> Any:
        try:
            return render(value)
        except UnsupportedConversionError as exc:
            logger.warning("output.field_omitted platform={} field={} reason={}", self.platform_name, field, exc)
            return None

    @staticmethod
    def _append(response: NativeResponse, message: dict[str, Any]) -> None:
        response.setdefault("fulfillment_messages", []).append({"message": message})


def convert_card(card: Card) -> dict[str, Any]:
    native: dict[str, Any] = {"title": card.title}
    if card.subtitle is not None:
        native["subtitle"] = card.subtitle
    if card.image_url is not None:
        native["image_uri"] = card.image_url
    if card.buttons:
        native["buttons"] = [{"text": button.text, "postback": button.value or button.text} for button in card.buttons]
    return native


def parse_card(native: Mapping[str, Any]) -> Card:
    return Card(
        title=_string(native.get("title")) or "",
        subtitle=_string(native.get("subtitle")),
        image_url=_string(native.get("image_uri")),
        buttons=[
            QuickReply(text=_string(button.get("text")) or "", value=_string(button.get("postback")))
            for button in _list_of(native, "buttons")
            if isinstance(button, Mapping)
        ],
    )


def convert_dynamic_entity(entity: DynamicEntity, mode: EntityOverrideMode) -> dict[str, Any]:
    return {
        "name": entity.name,
        "entity_override_mode": mode.value,
        "entities": [
            {
                "value": value.id or value.value,
                # the first synonym is always the value itself
                "synonyms": list(dict.fromkeys([value.value, *value.synonyms])),
            }
            for value in entity.values
        ],
    }


def parse_session_entity_type(native: Mapping[str, Any]) -> DynamicEntity:
    values: list[DynamicEntityValue] = []
    for entity in _list_of(native, "entities"):
        if not isinstance(entity, Mapping):
            continue
        synonyms = _strings(entity.get("synonyms"))
        native_value = _string(entity.get("value"))
        if native_value is None and not synonyms:
            continue
        value = synonyms[0] if synonyms else native_value
        values.append(DynamicEntityValue(id=native_value, value=value, synonyms=synonyms[1:]))
    return DynamicEntity(name=_string(native.get("name")) or "", values=values)


def _first_of_kind(messages: list[Mapping[str, Any]], kind: str) -> Mapping[str, Any] | None:
    return next(
        (message[kind] for message in messages if isinstance(message.get(kind), Mapping) and message[kind]),
        None,
    )


def _list_of(payload: Any, key: str) -> list[Any]:
    value = field_of(payload, key)
    return list(value) if isinstance(value, list | tuple) else []


def _strings(value: Any) -> list[str]:
    if not isinstance(value, list | tuple):
        return []
    return [item for item in value if isinstance(item, str)]


def _string(value: Any) -> str | None:
    return value if isinstance(value, str) else None
