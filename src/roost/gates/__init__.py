"""Access-control gates for unit activation."""

from roost.gates.builtins import authenticated, policy, requires
from roost.gates.decision import GateDecision
from roost.gates.evaluator import GateEvaluator

__all__ = [
    "GateDecision",
    "GateEvaluator",
    "authenticated",
    "policy",
    "requires",
]
