"""Unit loader — the single source of truth for "is this unit materialized".

Both the preload scheduler and the navigator call ``UnitLoader.load()``.
Concurrent callers for the same unit share one ``LoadFuture`` and the
load function runs once per attempt.

Concurrency:
    ``load()`` is a plain (non-async) method. Reading the current state
    and writing ``Loading`` happen inside one critical section with no
    await in between, so two first-callers can never both observe
    ``Unloaded``. The lock also keeps the table consistent when several
    event loops share a loader under free-threading.
"""

import asyncio
import logging
import threading
import time

from roost._internal.invoke import invoke
from roost.errors import LoadFailure
from roost.events import emit_unit_event
from roost.loading.state import UNLOADED, Failed, Loaded, LoadFuture, Loading, LoadState
from roost.units.descriptor import UnitDescriptor, UnitHandle

_log = logging.getLogger("roost.loader")


class UnitLoader:
    """Memoizing loader keyed by unit id.

    Usage::

        loader = UnitLoader()
        handle = await loader.load(descriptor)
        assert loader.handle(descriptor.id) is handle
    """

    __slots__ = ("_lock", "_states", "_tasks")

    def __init__(self) -> None:
        self._states: dict[str, LoadState] = {}
        self._lock = threading.Lock()
        # Strong references so in-flight loads are never garbage collected
        self._tasks: set[asyncio.Task[None]] = set()

    def load(self, descriptor: UnitDescriptor) -> LoadFuture:
        """Return the shared future for *descriptor*, starting a load if needed.

        - ``Loaded``: the original, already-completed future.
        - ``Loading``: the in-flight future (no second call to the load function).
        - ``Unloaded`` / ``Failed``: transition to ``Loading`` and start one task.

        Must be called from a running event loop.
        """
        loop = asyncio.get_running_loop()
        unit_id = descriptor.id

        with self._lock:
            state = self._states.get(unit_id, UNLOADED)
            if isinstance(state, Loaded):
                return state.future
            if isinstance(state, Loading):
                return state.future
            attempt = state.attempts + 1 if isinstance(state, Failed) else 1
            future = LoadFuture(unit_id, loop.create_future())
            self._states[unit_id] = Loading(future, attempt)

        task = loop.create_task(
            self._materialize(descriptor, future, attempt),
            name=f"roost.load:{unit_id}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        task.add_done_callback(lambda t: self._settle_unfinished(t, unit_id, future, attempt))
        return future

    async def _materialize(
        self,
        descriptor: UnitDescriptor,
        future: LoadFuture,
        attempt: int,
    ) -> None:
        """Run the load function and settle state and future together."""
        unit_id = descriptor.id
        _log.debug("Loading unit %r (attempt %d)", unit_id, attempt)
        t0 = time.perf_counter()

        try:
            emit_unit_event("unit.load.started", unit_id, details={"attempt": attempt})
            exports = await invoke(descriptor.load)
        except BaseException as exc:
            elapsed = time.perf_counter() - t0
            failure = LoadFailure(unit_id, exc)
            failure.__cause__ = exc
            # State first, so woken waiters that retry see Failed, not Loading
            with self._lock:
                self._states[unit_id] = Failed(failure, attempt)
            future._set_exception(failure)
            _log.warning("Unit %r failed to load after %.3fs: %r", unit_id, elapsed, exc)
            emit_unit_event(
                "unit.load.failed",
                unit_id,
                duration=elapsed,
                details={"attempt": attempt, "error": repr(exc)},
            )
            if not isinstance(exc, Exception):
                raise
            return

        elapsed = time.perf_counter() - t0
        handle = UnitHandle(unit_id=unit_id, exports=exports)
        with self._lock:
            self._states[unit_id] = Loaded(handle, future, attempt)
        future._set_result(handle)
        _log.info("Loaded unit %r in %.3fs", unit_id, elapsed)
        emit_unit_event(
            "unit.load.succeeded",
            unit_id,
            duration=elapsed,
            details={"attempt": attempt},
        )

    def _settle_unfinished(
        self,
        task: asyncio.Task[None],
        unit_id: str,
        future: LoadFuture,
        attempt: int,
    ) -> None:
        """Fail a load whose task ended without settling, e.g. cancelled before it ran."""
        if future.done():
            return
        cause: BaseException
        if task.cancelled():
            cause = asyncio.CancelledError()
        else:
            cause = task.exception() or RuntimeError("load task ended without a result")
        failure = LoadFailure(unit_id, cause)
        failure.__cause__ = cause
        with self._lock:
            self._states[unit_id] = Failed(failure, attempt)
        future._set_exception(failure)
        _log.warning("Unit %r load task ended unsettled: %r", unit_id, cause)

    # -- Introspection --

    def state(self, unit_id: str) -> LoadState:
        """Current state of *unit_id* (``UNLOADED`` if never attempted)."""
        with self._lock:
            return self._states.get(unit_id, UNLOADED)

    def states(self) -> dict[str, LoadState]:
        """Snapshot of every unit that has been attempted."""
        with self._lock:
            return dict(self._states)

    def is_loaded(self, unit_id: str) -> bool:
        return isinstance(self.state(unit_id), Loaded)

    def handle(self, unit_id: str) -> UnitHandle | None:
        """The cached handle, or ``None`` if the unit is not loaded."""
        state = self.state(unit_id)
        if isinstance(state, Loaded):
            return state.handle
        return None

    def attempts(self, unit_id: str) -> int:
        """How many times the load function has been started for *unit_id*."""
        state = self.state(unit_id)
        if isinstance(state, Loading):
            return state.attempt
        if isinstance(state, (Loaded, Failed)):
            return state.attempts
        return 0

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def aclose(self) -> None:
        """Wait for every in-flight load to settle. Never cancels them."""
        while self._tasks:
            await asyncio.gather(*tuple(self._tasks), return_exceptions=True)
