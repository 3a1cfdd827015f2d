"""Tests for roost.events — the opt-in unit event channel."""

import logging

import pytest

from roost.events import UnitEvent, emit_unit_event, set_unit_event_sink


def test_emit_without_sink_is_noop() -> None:
    set_unit_event_sink(None)
    emit_unit_event("unit.load.started", "home")


def test_sink_receives_structured_event(unit_events: list[UnitEvent]) -> None:
    emit_unit_event("unit.load.succeeded", "home", duration=0.25, details={"attempt": 1})

    (event,) = unit_events
    assert event.name == "unit.load.succeeded"
    assert event.unit_id == "home"
    assert event.duration == 0.25
    assert event.details == {"attempt": 1}
    assert event.timestamp > 0


def test_details_default_to_empty(unit_events: list[UnitEvent]) -> None:
    emit_unit_event("unit.preload.dispatched", "reports")
    assert unit_events[0].details == {}
    assert unit_events[0].duration is None


def test_clearing_sink_stops_delivery() -> None:
    received: list[UnitEvent] = []
    set_unit_event_sink(received.append)
    emit_unit_event("a", "u")
    set_unit_event_sink(None)
    emit_unit_event("b", "u")
    assert [e.name for e in received] == ["a"]


def test_raising_sink_is_logged_not_raised(caplog: pytest.LogCaptureFixture) -> None:
    def sink(event: UnitEvent) -> None:
        msg = "collector offline"
        raise ConnectionError(msg)

    set_unit_event_sink(sink)
    try:
        with caplog.at_level(logging.ERROR, logger="roost.events"):
            emit_unit_event("unit.load.started", "home")
    finally:
        set_unit_event_sink(None)

    (record,) = caplog.records
    assert "unit.load.started" in record.getMessage()
    assert record.exc_info is not None
