"""Framework-neutral data aliases."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeAlias

Config: TypeAlias = Mapping[str, Any]
PartialConfig: TypeAlias = Mapping[str, Any]
NativeResponse: TypeAlias = dict[str, Any]
