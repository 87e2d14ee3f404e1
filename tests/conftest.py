"""Shared fixtures for GymVerse tests."""

from __future__ import annotations

from collections.abc import Iterator
from zoneinfo import ZoneInfo

import pytest

from gymverse.store import ProgressionStore
from gymverse.utils import dt_utils


@pytest.fixture(autouse=True)
def reset_default_timezone() -> Iterator[None]:
    """Run every test in UTC unless it sets its own reference timezone."""
    dt_utils.set_default_timezone(ZoneInfo("UTC"))
    yield
    dt_utils.set_default_timezone(ZoneInfo("UTC"))


@pytest.fixture
def memory_store() -> ProgressionStore:
    """Return a loaded in-memory store."""
    store = ProgressionStore()
    store.load()
    return store
