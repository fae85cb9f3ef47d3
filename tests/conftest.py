"""
Shared pytest fixtures for prestowatch tests.

Provides:
- A controllable clock
- An in-memory metrics sink
- Log context cleanup between tests

Payload builders live in ``tests._support.engine``.
"""

from typing import Generator

import pytest

from prestowatch.framework.logging import clear_context
from prestowatch.observability.metrics import RegistrySink
from tests._support.engine import FakeClock


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark tests without an explicit marker as unit tests."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


@pytest.fixture(autouse=True)
def clean_log_context() -> Generator[None, None, None]:
    clear_context()
    yield
    clear_context()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def metrics() -> RegistrySink:
    return RegistrySink()
