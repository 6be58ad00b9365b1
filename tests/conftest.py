from __future__ import annotations

from collections.abc import Iterator

import pytest

from parley.config import get_settings


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.delenv("PARLEY_STRICT_CONFIG", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
