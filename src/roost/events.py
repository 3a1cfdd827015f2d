"""Unit lifecycle events.

Small opt-in event channel for load, preload, gate, and navigation
telemetry. Applications can register a sink to forward events to logs,
metrics, or a dashboard.
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from time import time
from typing import Any, TypeAlias

_log = logging.getLogger("roost.events")


@dataclass(frozen=True, slots=True)
class UnitEvent:
    """A structured unit lifecycle event."""

    name: str
    unit_id: str
    timestamp: float = field(default_factory=time)
    duration: float | None = None
    details: dict[str, Any] = field(default_factory=dict)


UnitEventSink: TypeAlias = Callable[[UnitEvent], None]


_sink_lock = threading.Lock()
_sink: UnitEventSink | None = None


def set_unit_event_sink(sink: UnitEventSink | None) -> None:
    """Set a process-wide sink for unit events.

    Pass ``None`` to disable event delivery.
    """
    global _sink
    with _sink_lock:
        _sink = sink


def emit_unit_event(
    name: str,
    unit_id: str,
    *,
    duration: float | None = None,
    details: dict[str, Any] | None = None,
) -> None:
    """Emit a best-effort unit event to the configured sink.

    A sink that raises is logged and ignored: events never interrupt a
    load, a preload pass, or a navigation.
    """
    with _sink_lock:
        sink = _sink
    if sink is None:
        return

    event = UnitEvent(
        name=name,
        unit_id=unit_id,
        duration=duration,
        details=details or {},
    )
    try:
        sink(event)
    except Exception:
        _log.exception("Unit event sink raised for %s (%s)", name, unit_id)
