"""Per-unit load states and the shared load future.

Every unit is in exactly one ``LoadState`` at a time::

    Unloaded -> Loading -> Loaded
    Unloaded -> Loading -> Failed -> Loading  (retry on next load())

``Loaded`` is terminal: a materialized unit lives for the process lifetime.
"""

import asyncio
from collections.abc import Callable, Generator
from dataclasses import dataclass
from typing import Any, TypeAlias

from roost.errors import LoadFailure
from roost.units.descriptor import UnitHandle


class LoadFuture:
    """The single awaitable shared by every caller of one load attempt.

    Awaiting goes through ``asyncio.shield``: a caller that is cancelled
    or times out stops waiting, but the load itself keeps running and its
    result is still cached. Awaiting a completed future does not suspend.
    """

    __slots__ = ("_future", "unit_id")

    def __init__(self, unit_id: str, future: asyncio.Future[UnitHandle]) -> None:
        self.unit_id = unit_id
        self._future = future

    def __await__(self) -> Generator[Any, None, UnitHandle]:
        return asyncio.shield(self._future).__await__()

    def done(self) -> bool:
        return self._future.done()

    def result(self) -> UnitHandle:
        """Return the handle, or raise ``LoadFailure`` / ``InvalidStateError``."""
        return self._future.result()

    def exception(self) -> BaseException | None:
        return self._future.exception()

    def add_done_callback(self, fn: Callable[["LoadFuture"], None]) -> None:
        """Call ``fn(self)`` once the load settles."""
        self._future.add_done_callback(lambda _inner: fn(self))

    def _set_result(self, handle: UnitHandle) -> None:
        self._future.set_result(handle)

    def _set_exception(self, failure: LoadFailure) -> None:
        self._future.set_exception(failure)

    def __repr__(self) -> str:
        if not self._future.done():
            status = "pending"
        elif self._future.exception() is not None:
            status = "failed"
        else:
            status = "loaded"
        return f"<LoadFuture {self.unit_id!r} {status}>"


@dataclass(frozen=True, slots=True)
class Unloaded:
    """No load has been attempted yet."""


UNLOADED = Unloaded()


@dataclass(frozen=True, slots=True)
class Loading:
    """A load is in flight. ``future`` is handed to every caller."""

    future: LoadFuture
    attempt: int


@dataclass(frozen=True, slots=True)
class Loaded:
    """The unit is materialized. Terminal."""

    handle: UnitHandle
    future: LoadFuture
    attempts: int


@dataclass(frozen=True, slots=True)
class Failed:
    """The last attempt raised. The next ``load()`` retries."""

    error: LoadFailure
    attempts: int


LoadState: TypeAlias = Unloaded | Loading | Loaded | Failed
