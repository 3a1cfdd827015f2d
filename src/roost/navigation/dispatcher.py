"""Navigator — gate-then-load activation of a unit by trigger key.

For each navigation::

    lookup(trigger_key)            UnitNotFoundError if absent
    gates.evaluate(unit, context)  denied -> redirect handler, load() never called
    await loader.load(unit)        LoadFailure propagates to the caller

A navigation started while an older one is still waiting supersedes it:
the older call returns ``SUPERSEDED`` once its load settles, and the
loaded unit stays cached for the next visit.
"""

import enum
import logging
import threading
from dataclasses import dataclass
from typing import Any

import anyio

from roost._internal.invoke import invoke
from roost._internal.types import ContextProvider, RedirectHandler
from roost.config import RoostConfig
from roost.errors import LoadFailure, TooManyRedirects
from roost.events import emit_unit_event
from roost.gates.decision import GateDecision
from roost.gates.evaluator import GateEvaluator
from roost.loading.loader import UnitLoader
from roost.units.descriptor import UnitHandle
from roost.units.registry import UnitRegistry

_log = logging.getLogger("roost.navigation")

_UNSET: Any = object()


class NavigationStatus(enum.Enum):
    ACTIVATED = "activated"  # Gates allowed, unit loaded
    REDIRECTED = "redirected"  # Gate denied with a redirect target
    DENIED = "denied"  # Gate denied without a redirect target
    SUPERSEDED = "superseded"  # A newer navigation started first


@dataclass(frozen=True, slots=True)
class NavigationResult:
    """Outcome of one ``Navigator.navigate()`` call.

    ``target`` is the trigger key this result is about (the final one when
    redirects were followed). ``redirects`` lists the trigger keys whose
    gates redirected along the way.
    """

    target: str
    status: NavigationStatus
    handle: UnitHandle | None = None
    decision: GateDecision | None = None
    redirects: tuple[str, ...] = ()

    @property
    def activated(self) -> bool:
        return self.status is NavigationStatus.ACTIVATED


class Navigator:
    """Dispatches navigation events to the gate evaluator and the loader.

    ``context_provider`` supplies the current principal/session snapshot
    (sync or async, zero arguments). ``on_redirect`` is called with the
    redirect target when a gate denies (sync or async).
    """

    __slots__ = (
        "_config",
        "_context_provider",
        "_current",
        "_gates",
        "_generation",
        "_loader",
        "_lock",
        "_on_redirect",
        "_registry",
    )

    def __init__(
        self,
        registry: UnitRegistry,
        loader: UnitLoader,
        gates: GateEvaluator,
        *,
        context_provider: ContextProvider | None = None,
        on_redirect: RedirectHandler | None = None,
        config: RoostConfig | None = None,
    ) -> None:
        self._registry = registry
        self._loader = loader
        self._gates = gates
        self._context_provider = context_provider
        self._on_redirect = on_redirect
        self._config = config or RoostConfig()
        self._generation = 0
        self._current: str | None = None
        self._lock = threading.Lock()

    @property
    def current(self) -> str | None:
        """Trigger key of the most recent activated navigation."""
        return self._current

    async def navigate(
        self,
        trigger_key: str,
        *,
        context: Any = _UNSET,
        timeout: float | None = None,
    ) -> NavigationResult:
        """Activate the unit registered for *trigger_key*.

        Args:
            trigger_key: The unit's trigger key (e.g. ``"/profile"``).
            context: Principal/session snapshot. Defaults to the context
                provider's value (``None`` when there is no provider).
            timeout: Seconds to wait for the load before raising
                ``TimeoutError``. The load itself keeps running. Defaults
                to ``config.navigation_timeout``.

        Raises:
            UnitNotFoundError: Nothing is registered for *trigger_key*.
            LoadFailure: The unit's load function raised.
            TooManyRedirects: Followed redirects exceeded ``max_redirects``.
        """
        with self._lock:
            self._generation += 1
            generation = self._generation
        if timeout is None:
            timeout = self._config.navigation_timeout
        return await self._navigate(trigger_key, generation, context, timeout, ())

    async def _navigate(
        self,
        trigger_key: str,
        generation: int,
        context: Any,
        timeout: float | None,
        redirects: tuple[str, ...],
    ) -> NavigationResult:
        descriptor = self._registry.lookup(trigger_key)
        principal = await self._resolve_context(context)
        decision = await self._gates.evaluate(descriptor, principal)

        if self._superseded(generation):
            return self._supersede(trigger_key, descriptor.id, redirects)

        if not decision.allowed:
            return await self._deny(trigger_key, decision, generation, context, timeout, redirects)

        future = self._loader.load(descriptor)
        try:
            if timeout is None:
                handle = await future
            else:
                with anyio.fail_after(timeout):
                    handle = await future
        except LoadFailure:
            # The user already left; the failure stays recorded in the loader
            if self._superseded(generation):
                return self._supersede(trigger_key, descriptor.id, redirects)
            raise

        if self._superseded(generation):
            return self._supersede(trigger_key, descriptor.id, redirects)

        self._current = trigger_key
        _log.debug("Activated unit %r for %s", descriptor.id, trigger_key)
        return NavigationResult(
            target=trigger_key,
            status=NavigationStatus.ACTIVATED,
            handle=handle,
            decision=decision,
            redirects=redirects,
        )

    async def _deny(
        self,
        trigger_key: str,
        decision: GateDecision,
        generation: int,
        context: Any,
        timeout: float | None,
        redirects: tuple[str, ...],
    ) -> NavigationResult:
        target = decision.redirect_target
        if target is None:
            return NavigationResult(
                target=trigger_key,
                status=NavigationStatus.DENIED,
                decision=decision,
                redirects=redirects,
            )

        if self._on_redirect is not None:
            await invoke(self._on_redirect, target)

        if not self._config.follow_redirects:
            return NavigationResult(
                target=trigger_key,
                status=NavigationStatus.REDIRECTED,
                decision=decision,
                redirects=redirects,
            )

        chain = (*redirects, trigger_key)
        if len(chain) > self._config.max_redirects:
            raise TooManyRedirects((*chain, target))
        _log.debug("Following redirect %s -> %s", trigger_key, target)
        return await self._navigate(target, generation, context, timeout, chain)

    async def _resolve_context(self, context: Any) -> Any:
        if context is not _UNSET:
            return context
        if self._context_provider is None:
            return None
        return await invoke(self._context_provider)

    def _superseded(self, generation: int) -> bool:
        with self._lock:
            return generation != self._generation

    def _supersede(
        self,
        trigger_key: str,
        unit_id: str,
        redirects: tuple[str, ...],
    ) -> NavigationResult:
        _log.debug("Navigation to %s superseded by a newer navigation", trigger_key)
        emit_unit_event("unit.navigation.superseded", unit_id)
        return NavigationResult(
            target=trigger_key,
            status=NavigationStatus.SUPERSEDED,
            redirects=redirects,
        )
