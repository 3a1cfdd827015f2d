"""Roost orchestrator — the composition root.

Mutable during setup (unit registration, gates, startup hooks).
Frozen when ``start()`` is first awaited.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable, Iterable
from typing import Any

from roost._internal.invoke import invoke
from roost._internal.types import ContextProvider, Gate, LoadFn, RedirectHandler
from roost.config import RoostConfig
from roost.errors import RegistryFrozenError
from roost.gates.evaluator import GateEvaluator
from roost.loading.loader import UnitLoader
from roost.navigation.dispatcher import NavigationResult, Navigator
from roost.preload.scheduler import PreloadScheduler
from roost.preload.strategies import PreloadStrategy, resolve_strategy
from roost.units.descriptor import LoadMode, UnitDescriptor
from roost.units.registry import UnitRegistry

_log = logging.getLogger("roost")


class Orchestrator:
    """Wires the registry, loader, gates, preload scheduler, and navigator.

    Usage::

        orchestrator = Orchestrator(context_provider=lambda: session)

        @orchestrator.unit("/", mode=LoadMode.EAGER)
        async def home():
            return await fetch_bundle("home")

        @orchestrator.unit("/profile", preload=True, gates=[authenticated()])
        async def profile():
            return await fetch_bundle("profile")

        await orchestrator.start()
        result = await orchestrator.navigate("/profile")

    Thread safety:
        Setup is single-threaded (decorators at import time). The freeze
        transition uses a Lock + double-check so exactly one caller
        freezes the registry.
    """

    __slots__ = (
        "_freeze_lock",
        "_frozen",
        "_gates",
        "_loader",
        "_navigator",
        "_registry",
        "_scheduler",
        "_started",
        "_startup_hooks",
        "config",
    )

    def __init__(
        self,
        config: RoostConfig | None = None,
        *,
        context_provider: ContextProvider | None = None,
        on_redirect: RedirectHandler | None = None,
    ) -> None:
        self.config: RoostConfig = config or RoostConfig()
        self._registry = UnitRegistry()
        self._loader = UnitLoader()
        self._gates = GateEvaluator()
        self._scheduler = PreloadScheduler(self._registry, self._loader)
        self._navigator = Navigator(
            self._registry,
            self._loader,
            self._gates,
            context_provider=context_provider,
            on_redirect=on_redirect,
            config=self.config,
        )
        self._startup_hooks: list[Callable[..., Any]] = []
        self._started = False
        self._frozen = False
        self._freeze_lock = threading.Lock()

    # -- Unit registration --

    def unit(
        self,
        trigger_key: str,
        *,
        id: str | None = None,  # noqa: A002 — mirrors UnitDescriptor.id
        mode: LoadMode = LoadMode.LAZY,
        gates: Iterable[Gate] = (),
        **metadata: Any,
    ) -> Callable[[LoadFn], LoadFn]:
        """Register the decorated function as a unit's load function.

        Args:
            trigger_key: Key that activates the unit (e.g. ``"/profile"``).
            id: Unit id. Defaults to the function's ``__name__``.
            mode: ``LoadMode.EAGER`` to load during ``start()``.
            gates: Gates evaluated, in order, before on-demand activation.
            **metadata: Opaque flags for strategies and gates
                (e.g. ``preload=True``).
        """

        def decorator(func: LoadFn) -> LoadFn:
            self.add_unit(
                UnitDescriptor(
                    id=id or func.__name__,
                    trigger_key=trigger_key,
                    load=func,
                    metadata=metadata,
                    mode=mode,
                    gates=tuple(gates),
                )
            )
            return func

        return decorator

    def add_unit(self, descriptor: UnitDescriptor) -> UnitDescriptor:
        """Register a prebuilt descriptor."""
        return self._registry.register(descriptor)

    def add_units(self, descriptors: Iterable[UnitDescriptor]) -> None:
        """Bulk registration, e.g. from a configuration table."""
        for descriptor in descriptors:
            self._registry.register(descriptor)

    # -- Gates --

    def gate(self, *gates: Gate) -> None:
        """Add gates evaluated for every unit, before unit-specific gates."""
        self._check_not_frozen()
        self._gates.add_global(*gates)

    def attach_gate(self, unit_id: str, *gates: Gate) -> None:
        """Attach gates to an already-declared unit by id."""
        self._check_not_frozen()
        self._gates.attach(unit_id, *gates)

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync hook run after eager units load, before preloading.

        Usage::

            @orchestrator.on_startup
            async def warm_caches():
                ...
        """
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    # -- Accessors --

    @property
    def registry(self) -> UnitRegistry:
        return self._registry

    @property
    def loader(self) -> UnitLoader:
        return self._loader

    @property
    def gates(self) -> GateEvaluator:
        return self._gates

    @property
    def scheduler(self) -> PreloadScheduler:
        return self._scheduler

    @property
    def navigator(self) -> Navigator:
        return self._navigator

    # -- Runtime --

    async def start(self, strategy: str | PreloadStrategy | None = None) -> None:
        """Freeze, load eager units, run startup hooks, then preload once.

        Eager units load concurrently and all settle before anything
        is raised. An eager failure is fatal: the first ``LoadFailure``
        propagates, the rest are logged, and preloading does not run.
        *strategy* overrides ``config.preload_strategy``.
        """
        resolved = resolve_strategy(
            strategy if strategy is not None else self.config.preload_strategy,
            flag_key=self.config.preload_flag,
        )
        self._ensure_frozen()

        # Start every eager load before awaiting any, so they run concurrently
        eager = [self._loader.load(d) for d in self._registry.eager()]
        # Settle all of them so no failure goes unretrieved, then raise the first
        outcomes = await asyncio.gather(*eager, return_exceptions=True)
        failures = [o for o in outcomes if isinstance(o, BaseException)]
        if failures:
            for extra in failures[1:]:
                _log.error("Eager unit also failed: %s", extra)
            raise failures[0]
        if eager:
            _log.info("Loaded %d eager unit(s)", len(eager))

        if self._started:
            return
        self._started = True

        for hook in self._startup_hooks:
            await invoke(hook)

        if self.config.preload:
            self._scheduler.run(resolved)

    async def navigate(
        self,
        trigger_key: str,
        *,
        context: Any = None,
        timeout: float | None = None,
    ) -> NavigationResult:
        """Activate a unit. See ``Navigator.navigate``.

        ``context=None`` uses the orchestrator's context provider.
        """
        if context is None:
            return await self._navigator.navigate(trigger_key, timeout=timeout)
        return await self._navigator.navigate(trigger_key, context=context, timeout=timeout)

    async def shutdown(self) -> None:
        """Wait for preloads and any other in-flight loads to settle."""
        await self._scheduler.drain()
        await self._loader.aclose()

    async def __aenter__(self) -> Orchestrator:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.shutdown()

    # -- Internal --

    def _ensure_frozen(self) -> None:
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._registry.freeze()
            self._frozen = True
            _log.debug("Froze unit registry with %d unit(s)", len(self._registry))

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the orchestrator after start(). "
                "Declare units, gates, and hooks before starting."
            )
            raise RegistryFrozenError(msg)
