"""Preload scheduler — one speculative pass over the registry.

Runs once, after eager units have loaded. For every unit the strategy
accepts, it calls ``UnitLoader.load()`` without awaiting the result.
Gates are not consulted: preloading fetches code, it never activates a
unit, so no authorization redirect can fire from here.

State machine::

    IDLE --run()--> SCHEDULING --all units dispatched--> DONE

``DONE`` is terminal; later ``run()`` calls are no-ops.
"""

import enum
import logging
import threading

import anyio

from roost.errors import LoadFailure
from roost.events import emit_unit_event
from roost.loading.loader import UnitLoader
from roost.loading.state import LoadFuture
from roost.preload.strategies import PreloadStrategy
from roost.units.descriptor import UnitDescriptor, UnitHandle
from roost.units.registry import UnitRegistry

_log = logging.getLogger("roost.preload")


class SchedulerState(enum.Enum):
    IDLE = "idle"
    SCHEDULING = "scheduling"
    DONE = "done"


class PreloadScheduler:
    """Fire-and-forget preloading driven by a strategy function.

    One unit's failure (in the strategy or in its load) is logged and
    never stops the pass over the remaining units.
    """

    __slots__ = ("_dispatched", "_loader", "_lock", "_registry", "_state")

    def __init__(self, registry: UnitRegistry, loader: UnitLoader) -> None:
        self._registry = registry
        self._loader = loader
        self._state = SchedulerState.IDLE
        self._lock = threading.Lock()
        self._dispatched: tuple[LoadFuture, ...] = ()

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def has_run(self) -> bool:
        return self._state is not SchedulerState.IDLE

    @property
    def dispatched(self) -> tuple[LoadFuture, ...]:
        """Futures of every load this scheduler started or joined."""
        return self._dispatched

    def run(self, strategy: PreloadStrategy) -> tuple[LoadFuture, ...]:
        """Dispatch speculative loads for every unit *strategy* accepts.

        Returns the dispatched futures (already-loaded units included).
        Returns ``()`` if the scheduler has already run.
        Must be called from a running event loop.
        """
        with self._lock:
            if self._state is not SchedulerState.IDLE:
                _log.debug("Preload scheduler already ran; ignoring run()")
                return ()
            self._state = SchedulerState.SCHEDULING

        dispatched: list[LoadFuture] = []
        try:
            for descriptor in self._registry.all():
                if not self._selected(strategy, descriptor):
                    continue
                future = self._loader.load(descriptor)
                future.add_done_callback(self._observe)
                dispatched.append(future)
                emit_unit_event("unit.preload.dispatched", descriptor.id)
        finally:
            self._dispatched = tuple(dispatched)
            self._state = SchedulerState.DONE

        _log.info(
            "Preload pass dispatched %d of %d units",
            len(dispatched),
            len(self._registry),
        )
        return self._dispatched

    def _selected(self, strategy: PreloadStrategy, descriptor: UnitDescriptor) -> bool:
        try:
            return bool(strategy(descriptor))
        except Exception as exc:
            _log.exception(
                "Preload strategy %s raised for unit %r",
                getattr(strategy, "__name__", repr(strategy)),
                descriptor.id,
            )
            emit_unit_event(
                "unit.preload.failed",
                descriptor.id,
                details={"stage": "strategy", "error": repr(exc)},
            )
            return False

    def _observe(self, future: LoadFuture) -> None:
        # Retrieving the exception here also marks it as handled for asyncio
        error = future.exception()
        if error is None:
            return
        _log.warning("Preload of unit %r failed: %s", future.unit_id, error)
        emit_unit_event(
            "unit.preload.failed",
            future.unit_id,
            details={"stage": "load", "error": repr(error)},
        )

    async def drain(self) -> dict[str, UnitHandle | BaseException]:
        """Wait for every dispatched preload to settle.

        Never raises for load failures; they are returned in the mapping
        keyed by unit id.
        """
        results: dict[str, UnitHandle | BaseException] = {}

        async def _settle(future: LoadFuture) -> None:
            try:
                results[future.unit_id] = await future
            except LoadFailure as exc:
                results[future.unit_id] = exc

        async with anyio.create_task_group() as tg:
            for future in self._dispatched:
                tg.start_soon(_settle, future)
        return results
