"""Gate decisions — allow/deny as a value, not an exception."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from roost.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class GateDecision:
    """Outcome of evaluating one or more gates.

    A denial may name a ``redirect_target`` (a trigger key). The core
    never follows it; the navigator hands it to the redirect handler.
    """

    allowed: bool
    redirect_target: str | None = None

    @classmethod
    def allow(cls) -> GateDecision:
        return _ALLOW

    @classmethod
    def deny(cls, redirect_target: str | None = None) -> GateDecision:
        return cls(allowed=False, redirect_target=redirect_target)

    @property
    def denied(self) -> bool:
        return not self.allowed

    def __bool__(self) -> bool:
        return self.allowed


_ALLOW = GateDecision(allowed=True)


def coerce_decision(value: Any, gate: Any) -> GateDecision:
    """Normalize a gate's return value.

    Gates may return a ``GateDecision`` or a plain bool. Anything else is
    a programming error in the gate.
    """
    if isinstance(value, GateDecision):
        return value
    if isinstance(value, bool):
        return _ALLOW if value else GateDecision(allowed=False)
    name = getattr(gate, "__name__", repr(gate))
    msg = f"Gate {name} returned {type(value).__name__}; expected GateDecision or bool"
    raise ConfigurationError(msg)
