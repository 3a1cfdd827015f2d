"""Tests for roost.gates — decisions, the evaluator, and built-in gates."""

from dataclasses import dataclass, field

import pytest

from roost.errors import ConfigurationError
from roost.events import UnitEvent
from roost.gates import GateDecision, GateEvaluator, authenticated, policy, requires
from roost.gates.builtins import context_value
from roost.units import UnitDescriptor


async def _load() -> str:
    return "exports"


def _unit(*gates, unit_id: str = "profile") -> UnitDescriptor:
    return UnitDescriptor(id=unit_id, trigger_key=f"/{unit_id}", load=_load, gates=gates)


@dataclass(frozen=True, slots=True)
class _Session:
    is_authenticated: bool = False
    permissions: frozenset[str] = field(default_factory=frozenset)


class _Recorder:
    """Gate that records each call and returns a fixed decision."""

    def __init__(self, name: str, result: GateDecision | bool, log: list[str]) -> None:
        self.__name__ = name
        self.result = result
        self.log = log

    def __call__(self, descriptor: UnitDescriptor, context: object) -> GateDecision | bool:
        self.log.append(self.__name__)
        return self.result


class TestGateDecision:
    def test_allow(self) -> None:
        decision = GateDecision.allow()
        assert decision.allowed
        assert decision.redirect_target is None
        assert bool(decision) is True

    def test_deny_with_redirect(self) -> None:
        decision = GateDecision.deny("/login")
        assert decision.denied
        assert decision.redirect_target == "/login"
        assert bool(decision) is False


class TestEvaluator:
    @pytest.mark.anyio
    async def test_no_gates_allows(self) -> None:
        decision = await GateEvaluator().evaluate(_unit(), None)
        assert decision.allowed

    @pytest.mark.anyio
    async def test_short_circuits_on_first_denial(self) -> None:
        log: list[str] = []
        g1 = _Recorder("g1", GateDecision.deny("/login"), log)
        g2 = _Recorder("g2", GateDecision.allow(), log)

        decision = await GateEvaluator().evaluate(_unit(g1, g2), None)

        assert decision == GateDecision.deny("/login")
        assert log == ["g1"]

    @pytest.mark.anyio
    async def test_all_allow_evaluates_every_gate(self) -> None:
        log: list[str] = []
        gates = [_Recorder(f"g{i}", True, log) for i in range(3)]
        decision = await GateEvaluator().evaluate(_unit(*gates), None)
        assert decision.allowed
        assert log == ["g0", "g1", "g2"]

    @pytest.mark.anyio
    async def test_order_global_then_descriptor_then_attached(self) -> None:
        log: list[str] = []
        evaluator = GateEvaluator([_Recorder("global", True, log)])
        evaluator.attach("profile", _Recorder("attached", True, log))
        unit = _unit(_Recorder("own", True, log))

        await evaluator.evaluate(unit, None)
        assert log == ["global", "own", "attached"]

    @pytest.mark.anyio
    async def test_attached_gates_scoped_to_unit(self) -> None:
        log: list[str] = []
        evaluator = GateEvaluator()
        evaluator.attach("admin", _Recorder("admin-only", False, log))

        decision = await evaluator.evaluate(_unit(unit_id="profile"), None)
        assert decision.allowed
        assert log == []

    @pytest.mark.anyio
    async def test_false_becomes_denial_without_redirect(self) -> None:
        decision = await GateEvaluator().evaluate(_unit(lambda d, c: False), None)
        assert decision == GateDecision(allowed=False)

    @pytest.mark.anyio
    async def test_async_gate(self) -> None:
        async def gate(descriptor: UnitDescriptor, context: dict) -> GateDecision:
            return GateDecision.deny("/upgrade") if context["plan"] == "free" else GateDecision.allow()

        evaluator = GateEvaluator()
        assert (await evaluator.evaluate(_unit(gate), {"plan": "free"})).redirect_target == "/upgrade"
        assert (await evaluator.evaluate(_unit(gate), {"plan": "pro"})).allowed

    @pytest.mark.anyio
    async def test_gate_receives_descriptor_and_context(self) -> None:
        seen: list[tuple] = []

        def gate(descriptor: UnitDescriptor, context: object) -> bool:
            seen.append((descriptor, context))
            return True

        unit = _unit(gate)
        context = object()
        await GateEvaluator().evaluate(unit, context)
        assert seen == [(unit, context)]

    @pytest.mark.anyio
    async def test_invalid_return_raises(self) -> None:
        def bad_gate(descriptor: UnitDescriptor, context: object) -> str:
            return "yes"

        with pytest.raises(ConfigurationError, match="bad_gate"):
            await GateEvaluator().evaluate(_unit(bad_gate), None)

    @pytest.mark.anyio
    async def test_denial_emits_event(self, unit_events: list[UnitEvent]) -> None:
        await GateEvaluator().evaluate(_unit(authenticated("/login")), {"authenticated": False})
        assert [e.name for e in unit_events] == ["unit.gate.denied"]
        assert unit_events[0].unit_id == "profile"
        assert unit_events[0].details["redirect_target"] == "/login"


class TestContextValue:
    def test_mapping(self) -> None:
        assert context_value({"authenticated": True}, "is_authenticated", "authenticated") is True

    def test_attribute(self) -> None:
        assert context_value(_Session(is_authenticated=True), "is_authenticated") is True

    def test_default(self) -> None:
        assert context_value(None, "is_authenticated", default=False) is False


class TestAuthenticated:
    def test_denies_anonymous_with_redirect(self) -> None:
        gate = authenticated(redirect_to="/login")
        assert gate(_unit(), {"authenticated": False}) == GateDecision.deny("/login")

    def test_allows_authenticated_mapping(self) -> None:
        assert authenticated()(_unit(), {"authenticated": True}).allowed

    def test_allows_authenticated_object(self) -> None:
        assert authenticated()(_unit(), _Session(is_authenticated=True)).allowed

    def test_missing_context_denies(self) -> None:
        assert authenticated()(_unit(), None).denied

    def test_no_redirect(self) -> None:
        assert authenticated(redirect_to=None)(_unit(), {}).redirect_target is None


class TestRequires:
    def test_anonymous_redirects_to_login(self) -> None:
        gate = requires("admin", redirect_to="/")
        assert gate(_unit(), _Session()) == GateDecision.deny("/login")

    def test_missing_permission(self) -> None:
        gate = requires("admin", "billing", redirect_to="/")
        session = _Session(is_authenticated=True, permissions=frozenset({"admin"}))
        assert gate(_unit(), session) == GateDecision.deny("/")

    def test_all_permissions_present(self) -> None:
        gate = requires("admin", "billing")
        session = _Session(is_authenticated=True, permissions=frozenset({"admin", "billing", "x"}))
        assert gate(_unit(), session).allowed

    def test_mapping_context(self) -> None:
        gate = requires("editor")
        assert gate(_unit(), {"authenticated": True, "permissions": ["editor"]}).allowed


class TestPolicy:
    @pytest.mark.anyio
    async def test_sync_predicate(self) -> None:
        gate = policy(lambda ctx: ctx["beta"], redirect_to="/waitlist")
        assert (await gate(_unit(), {"beta": True})).allowed
        assert (await gate(_unit(), {"beta": False})).redirect_target == "/waitlist"

    @pytest.mark.anyio
    async def test_async_predicate(self) -> None:
        async def in_region(ctx: dict) -> bool:
            return ctx["region"] == "eu"

        gate = policy(in_region)
        assert gate.__name__ == "policy(in_region)"
        assert (await GateEvaluator().evaluate(_unit(gate), {"region": "eu"})).allowed
        assert (await GateEvaluator().evaluate(_unit(gate), {"region": "us"})).denied
