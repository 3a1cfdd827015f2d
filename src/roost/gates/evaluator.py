"""Gate evaluator — logical AND over every gate attached to a unit.

Gates run in order: global gates, then the descriptor's own gates, then
gates attached by unit id. Evaluation stops at the first denial, so later
gates (and their side effects) are never reached.

The evaluator is pure with respect to ``context``: the caller supplies
the principal/session snapshot, and the evaluator never looks anything
up on its own and never navigates.
"""

import logging
from collections.abc import Sequence
from typing import Any

from roost._internal.invoke import invoke
from roost._internal.types import Gate
from roost.events import emit_unit_event
from roost.gates.decision import GateDecision, coerce_decision
from roost.units.descriptor import UnitDescriptor

_log = logging.getLogger("roost.gates")


class GateEvaluator:
    """Evaluates gates for a unit against a caller-supplied context.

    Usage::

        gates = GateEvaluator()
        gates.attach("profile", authenticated(redirect_to="/login"))
        decision = await gates.evaluate(profile, {"authenticated": False})
        decision.redirect_target  # "/login"
    """

    __slots__ = ("_attached", "_global")

    def __init__(self, global_gates: Sequence[Gate] = ()) -> None:
        self._global: list[Gate] = list(global_gates)
        self._attached: dict[str, list[Gate]] = {}

    def add_global(self, *gates: Gate) -> None:
        """Add gates evaluated for every unit, before unit-specific gates."""
        self._global.extend(gates)

    def attach(self, unit_id: str, *gates: Gate) -> None:
        """Attach gates to a unit by id, after the descriptor's own gates."""
        self._attached.setdefault(unit_id, []).extend(gates)

    def gates_for(self, descriptor: UnitDescriptor) -> tuple[Gate, ...]:
        return (
            *self._global,
            *descriptor.gates,
            *self._attached.get(descriptor.id, ()),
        )

    async def evaluate(self, descriptor: UnitDescriptor, context: Any) -> GateDecision:
        """Return the combined decision for *descriptor* under *context*."""
        for gate in self.gates_for(descriptor):
            decision = coerce_decision(await invoke(gate, descriptor, context), gate)
            if not decision.allowed:
                gate_name = getattr(gate, "__name__", type(gate).__name__)
                _log.info(
                    "Gate %s denied unit %r (redirect: %s)",
                    gate_name,
                    descriptor.id,
                    decision.redirect_target,
                )
                emit_unit_event(
                    "unit.gate.denied",
                    descriptor.id,
                    details={"gate": gate_name, "redirect_target": decision.redirect_target},
                )
                return decision
        return GateDecision.allow()
