"""Shared fixtures for the roost test suite."""

from collections.abc import Iterator

import pytest

from roost.events import UnitEvent, set_unit_event_sink


@pytest.fixture
def anyio_backend() -> str:
    # The loader schedules asyncio tasks, so only the asyncio backend applies
    return "asyncio"


@pytest.fixture
def unit_events() -> Iterator[list[UnitEvent]]:
    """Collect unit events emitted during the test."""
    events: list[UnitEvent] = []
    set_unit_event_sink(events.append)
    try:
        yield events
    finally:
        set_unit_event_sink(None)
