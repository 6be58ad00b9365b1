"""Size and length ceilings for output values.

Every function here degrades by truncating and reporting a
``TruncationWarning``; none of them raise. Inputs are never mutated.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Literal, TypeAlias, TypeVar

from parley.output.models import MessageValue, QuickReplyValue


@dataclass(frozen=True)
class TruncationWarning:
    kind: Literal["array", "string"]
    path: str
    ceiling: int

    def __str__(self) -> str:
        unit = "items" if self.kind == "array" else "characters"
        return f"{self.path} was truncated to {self.ceiling} {unit}"


Reporter: TypeAlias = Callable[[TruncationWarning], None]


@dataclass(frozen=True)
class SanitizationOptions:
    """Independent toggles for the quick-reply count and the text length ceilings."""

    max_size: bool = True
    max_length: bool = True

    @classmethod
    def from_config(cls, value: Any) -> SanitizationOptions:
        if isinstance(value, bool):
            return cls(max_size=value, max_length=value)
        if isinstance(value, Mapping):
            return cls(max_size=bool(value.get("max_size", True)), max_length=bool(value.get("max_length", True)))
        return cls()


T = TypeVar("T")


def truncate_array(items: Sequence[T], path: str, ceiling: int, report: Reporter) -> list[T]:
    if len(items) <= ceiling:
        return list(items)
    report(TruncationWarning("array", path, ceiling))
    return list(items[:ceiling])


def truncate_string(text: str, path: str, ceiling: int, report: Reporter) -> str:
    if len(text) <= ceiling:
        return text
    report(TruncationWarning("string", path, ceiling))
    return text[:ceiling]


def sanitize_message(
    message: MessageValue,
    path: str,
    max_length: int,
    report: Reporter,
    *,
    options: SanitizationOptions,
) -> MessageValue:
    if not options.max_length:
        return message
    if isinstance(message, str):
        return truncate_string(message, path, max_length, report)
    updates: dict[str, str] = {}
    text = truncate_string(message.text, f"{path}.text", max_length, report)
    if text != message.text:
        updates["text"] = text
    if message.display_text is not None:
        display_text = truncate_string(message.display_text, f"{path}.displayText", max_length, report)
        if display_text != message.display_text:
            updates["display_text"] = display_text
    return message.model_copy(update=updates) if updates else message


def sanitize_quick_replies(
    quick_replies: Sequence[QuickReplyValue],
    path: str,
    max_size: int,
    max_length: int,
    report: Reporter,
    *,
    options: SanitizationOptions,
) -> list[QuickReplyValue]:
    result = list(quick_replies)
    if options.max_size:
        result = truncate_array(result, path, max_size, report)
    if not options.max_length:
        return result
    return [_sanitize_quick_reply(item, f"{path}[{index}]", max_length, report) for index, item in enumerate(result)]


def _sanitize_quick_reply(quick_reply: QuickReplyValue, path: str, max_length: int, report: Reporter) -> QuickReplyValue:
    if isinstance(quick_reply, str):
        return truncate_string(quick_reply, path, max_length, report)
    updates: dict[str, str] = {}
    text = truncate_string(quick_reply.text, path, max_length, report)
    if text != quick_reply.text:
        updates["text"] = text
    # the value is what gets rendered when set
    if quick_reply.value is not None:
        value = truncate_string(quick_reply.value, f"{path}.value", max_length, report)
        if value != quick_reply.value:
            updates["value"] = value
    return quick_reply.model_copy(update=updates) if updates else quick_reply

