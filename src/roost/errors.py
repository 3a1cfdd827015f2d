"""Roost exception hierarchy.

Shared across the registry, loader, gates, and navigator so every module
raises and catches the same types.

Gate denial is deliberately absent: a denied gate is a ``GateDecision``
value, not an exception.
"""


class RoostError(Exception):
    """Base for all roost-specific errors."""


class ConfigurationError(RoostError):
    """Raised when units, gates, or config are declared incorrectly.

    Typically raised during registration or ``Orchestrator.start()``.
    """


class DuplicateUnitError(ConfigurationError):
    """A unit with the same trigger key (or id) is already registered."""

    def __init__(self, trigger_key: str, detail: str = "") -> None:
        self.trigger_key = trigger_key
        super().__init__(detail or f"Unit already registered for trigger key {trigger_key!r}")


class RegistryFrozenError(ConfigurationError):
    """Registration attempted after the registry was frozen."""

    def __init__(self, detail: str = "") -> None:
        super().__init__(
            detail
            or (
                "Cannot register units after the registry is frozen. "
                "Declare every unit before calling start()."
            )
        )


class UnitNotFoundError(RoostError):
    """404 — no unit is registered for the trigger key."""

    status = 404

    def __init__(self, trigger_key: str) -> None:
        self.trigger_key = trigger_key
        super().__init__(f"No unit registered for trigger key {trigger_key!r}")


class LoadFailure(RoostError):
    """A unit's load function raised.

    Every caller waiting on the same load receives this error. The
    original exception is available as ``cause`` (and ``__cause__``).
    """

    def __init__(self, unit_id: str, cause: BaseException) -> None:
        self.unit_id = unit_id
        self.cause = cause
        super().__init__(f"Unit {unit_id!r} failed to load: {cause!r}")


class TooManyRedirects(RoostError):  # noqa: N818 — mirrors the HTTP client convention
    """Redirect-following navigation exceeded ``max_redirects``."""

    def __init__(self, chain: tuple[str, ...]) -> None:
        self.chain = chain
        super().__init__("Too many gate redirects: " + " -> ".join(chain))
