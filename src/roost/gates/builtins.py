"""Built-in gates — authenticated, requires, and policy.

Each factory returns a plain gate function ``(descriptor, context) ->
GateDecision``. The context is whatever the context provider returns:
an object with attributes or a mapping with keys both work.

Usage::

    orchestrator = Orchestrator()

    @orchestrator.unit("/profile", gates=[authenticated(redirect_to="/login")])
    async def profile():
        return await fetch_profile_bundle()

    @orchestrator.unit("/admin", gates=[requires("admin", redirect_to="/")])
    async def admin():
        ...
"""

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from roost._internal.invoke import invoke
from roost.gates.decision import GateDecision
from roost.units.descriptor import UnitDescriptor

_log = logging.getLogger("roost.gates")

_MISSING = object()


def context_value(context: Any, *names: str, default: Any = None) -> Any:
    """Read the first of *names* present on *context*.

    Mappings are read by key, anything else by attribute.
    """
    for name in names:
        if isinstance(context, Mapping):
            value = context.get(name, _MISSING)
        else:
            value = getattr(context, name, _MISSING)
        if value is not _MISSING:
            return value
    return default


def _is_authenticated(context: Any) -> bool:
    return bool(context_value(context, "is_authenticated", "authenticated", default=False))


def authenticated(redirect_to: str | None = "/login") -> Callable[[UnitDescriptor, Any], GateDecision]:
    """Allow only authenticated principals.

    Unauthenticated contexts are denied with *redirect_to* as the
    redirect target (``None`` denies without a redirect).
    """

    def authenticated_gate(descriptor: UnitDescriptor, context: Any) -> GateDecision:
        if _is_authenticated(context):
            return GateDecision.allow()
        return GateDecision.deny(redirect_to)

    return authenticated_gate


def requires(
    *permissions: str,
    redirect_to: str | None = None,
    login_url: str | None = "/login",
) -> Callable[[UnitDescriptor, Any], GateDecision]:
    """Require an authenticated principal holding ALL listed permissions.

    Unauthenticated contexts redirect to *login_url*; authenticated ones
    missing a permission are denied with *redirect_to*.
    """
    required = frozenset(permissions)

    def requires_gate(descriptor: UnitDescriptor, context: Any) -> GateDecision:
        if not _is_authenticated(context):
            return GateDecision.deny(login_url)
        granted = frozenset(context_value(context, "permissions", default=()) or ())
        if not required.issubset(granted):
            _log.warning(
                "Unit %r requires missing permissions: %s",
                descriptor.id,
                ", ".join(sorted(required - granted)),
            )
            return GateDecision.deny(redirect_to)
        return GateDecision.allow()

    return requires_gate


def policy(
    predicate: Callable[[Any], bool | Awaitable[bool]],
    *,
    redirect_to: str | None = None,
) -> Callable[[UnitDescriptor, Any], Awaitable[GateDecision]]:
    """Wrap a ``context -> bool`` predicate (sync or async) as a gate."""

    async def policy_gate(descriptor: UnitDescriptor, context: Any) -> GateDecision:
        if await invoke(predicate, context):
            return GateDecision.allow()
        return GateDecision.deny(redirect_to)

    policy_gate.__name__ = f"policy({getattr(predicate, '__name__', 'custom_policy')})"
    return policy_gate
