"""Shared fixtures for Abhyasa tests.

The engines are pure, so no application fixtures are needed. The only
global state is the configured local timezone, which every test starts
from as UTC.
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import date
from zoneinfo import ZoneInfo

import pytest

from abhyasa.utils import dt_utils
from tests.helpers import REFERENCE_DAY


@pytest.fixture(autouse=True)
def utc_timezone(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Run every test with UTC as the local timezone."""
    monkeypatch.setattr(dt_utils, "DEFAULT_TIME_ZONE", ZoneInfo("UTC"))
    yield


@pytest.fixture
def new_york_timezone(monkeypatch: pytest.MonkeyPatch) -> ZoneInfo:
    """Switch the local timezone to America/New_York for one test."""
    tz = ZoneInfo("America/New_York")
    monkeypatch.setattr(dt_utils, "DEFAULT_TIME_ZONE", tz)
    return tz


@pytest.fixture
def reference_day() -> date:
    """Return the shared reference day (Wednesday 2026-01-21)."""
    return REFERENCE_DAY
