"""Platform-agnostic output template models."""

from __future__ import annotations

from enum import StrEnum
from typing import Any, TypeAlias

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class OutputModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Message(OutputModel):
    text: str
    display_text: str | None = None


class QuickReply(OutputModel):
    text: str
    value: str | None = None


class Card(OutputModel):
    title: str
    subtitle: str | None = None
    image_url: str | None = None
    buttons: list[QuickReply] = Field(default_factory=list)


class DynamicEntitiesMode(StrEnum):
    REPLACE = "REPLACE"
    MERGE = "MERGE"
    CLEAR = "CLEAR"


class DynamicEntityValue(OutputModel):
    id: str | None = None
    value: str
    synonyms: list[str] = Field(default_factory=list)


class DynamicEntity(OutputModel):
    name: str
    values: list[DynamicEntityValue] = Field(default_factory=list)


class DynamicEntities(OutputModel):
    mode: DynamicEntitiesMode | None = None
    types: list[DynamicEntity] = Field(default_factory=list)


class ListenValue(OutputModel):
    entities: DynamicEntities | None = None


MessageValue: TypeAlias = str | Message
QuickReplyValue: TypeAlias = str | QuickReply


class PlatformOutputTemplate(OutputModel):
    """Per-platform overrides. Any field set here replaces the generic one."""

    message: str | Message | None = None
    quick_replies: list[str | QuickReply] | None = None
    card: Card | None = None
    listen: bool | ListenValue | None = None
    native_response: dict[str, Any] | None = None


class OutputTemplate(OutputModel):
    message: str | Message | None = None
    quick_replies: list[str | QuickReply] | None = None
    card: Card | None = None
    listen: bool | ListenValue | None = None
    platforms: dict[str, PlatformOutputTemplate] | None = None
