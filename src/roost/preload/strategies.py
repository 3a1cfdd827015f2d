"""Preload strategies — plain ``(UnitDescriptor) -> bool`` functions.

Returning ``False`` means the load function is simply not invoked.
Any function with the same signature can be passed to the scheduler::

    def small_units(descriptor: UnitDescriptor) -> bool:
        return descriptor.metadata.get("size_kb", 0) < 50

    await orchestrator.start(strategy=small_units)
"""

from collections.abc import Callable
from typing import TypeAlias

from roost.errors import ConfigurationError
from roost.units.descriptor import UnitDescriptor

PreloadStrategy: TypeAlias = Callable[[UnitDescriptor], bool]


def all_units(descriptor: UnitDescriptor) -> bool:
    """Preload every registered unit."""
    return True


def no_units(descriptor: UnitDescriptor) -> bool:
    """Preload nothing; every lazy unit waits for navigation."""
    return False


def flag(key: str) -> PreloadStrategy:
    """Preload units whose ``metadata[key]`` is exactly ``True``."""

    def flag_strategy(descriptor: UnitDescriptor) -> bool:
        return descriptor.metadata.get(key) is True

    flag_strategy.__name__ = f"flag({key!r})"
    return flag_strategy


def metadata_flag(descriptor: UnitDescriptor) -> bool:
    """Preload units declared with ``preload=True`` metadata."""
    return descriptor.metadata.get("preload") is True


_NAMED: dict[str, PreloadStrategy] = {
    "all": all_units,
    "flagged": metadata_flag,
    "none": no_units,
}


def resolve_strategy(strategy: str | PreloadStrategy, *, flag_key: str = "preload") -> PreloadStrategy:
    """Resolve a config name (``"all"``, ``"flagged"``, ``"none"``) or pass a callable through.

    ``flag_key`` replaces the metadata key read by ``"flagged"``.
    """
    if callable(strategy):
        return strategy
    if strategy == "flagged" and flag_key != "preload":
        return flag(flag_key)
    resolved = _NAMED.get(strategy)
    if resolved is None:
        options = ", ".join(sorted(_NAMED))
        msg = f"Unknown preload strategy {strategy!r}. Expected one of: {options}"
        raise ConfigurationError(msg)
    return resolved
