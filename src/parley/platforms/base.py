"""Base platform interface."""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Sequence
from functools import partial
from typing import Any, Generic, TypeVar

from loguru import logger

from parley.extensible import Extensible
from parley.output.models import OutputTemplate
from parley.output.strategy import OutputConverterStrategy


RequestT = TypeVar("RequestT")
ResponseT = TypeVar("ResponseT")


class Platform(Extensible, Generic[RequestT, ResponseT]):
    """A plugin bound to one request type, one response type and one converter.

    Recognition predicates are total: any failure while inspecting a payload
    counts as "not related".
    """

    output_converter: OutputConverterStrategy[ResponseT]

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.output_converter = self.create_output_converter()

    @abstractmethod
    def create_output_converter(self) -> OutputConverterStrategy[ResponseT]:
        """Build the converter owned by this platform."""

    @abstractmethod
    def matches_request(self, request: Any) -> bool: ...

    @abstractmethod
    def matches_response(self, response: Any) -> bool: ...

    @abstractmethod
    def finalize_response(self, response: ResponseT, app_state: Any) -> ResponseT:
        """Stamp platform data and session state onto a converted response."""

    def is_request_related(self, request: RequestT | Any) -> bool:
        return self._safe_match(self.matches_request, request)

    def is_response_related(self, response: ResponseT | Any) -> bool:
        return self._safe_match(self.matches_response, response)

    async def install(self, parent: Extensible | None) -> None:
        if parent is not None:
            self.output_converter.reporter = partial(parent.report_truncation, self.name)
        await super().install(parent)

    def to_response(self, output: OutputTemplate | Sequence[OutputTemplate]) -> ResponseT:
        return self.output_converter.convert(output)

    def from_response(self, response: ResponseT) -> OutputTemplate:
        return self.output_converter.from_response(response)

    def create_response(self, output: OutputTemplate | Sequence[OutputTemplate], app_state: Any) -> ResponseT:
        return self.finalize_response(self.to_response(output), app_state)

    def _safe_match(self, predicate: Any, payload: Any) -> bool:
        try:
            return bool(predicate(payload))
        except Exception:
            logger.opt(exception=True).debug("platform.match_failed platform={}", self.name)
            return False
