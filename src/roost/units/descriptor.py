"""Frozen unit types.

A ``UnitDescriptor`` is created at registry-build time and never changes.
A ``UnitHandle`` is what loading produces; the loader caches it for the
process lifetime.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from time import time
from types import MappingProxyType
from typing import Any

from roost._internal.types import Gate, LoadFn
from roost.errors import ConfigurationError


class LoadMode(Enum):
    """When a unit is materialized without an explicit request."""

    EAGER = "eager"  # Loaded unconditionally during start()
    LAZY = "lazy"  # Loaded on first navigation, or by the preload pass


@dataclass(frozen=True, slots=True, eq=False)
class UnitDescriptor:
    """A loadable unit. Immutable after creation.

    ``metadata`` is opaque to the core; only strategies and gates interpret
    it (e.g. a ``preload`` hint). It is exposed as a read-only mapping.
    Descriptors compare and hash by identity.
    """

    id: str
    trigger_key: str
    load: LoadFn
    metadata: Mapping[str, Any] = field(default_factory=dict)
    mode: LoadMode = LoadMode.LAZY
    gates: tuple[Gate, ...] = ()

    def __post_init__(self) -> None:
        if not self.id:
            msg = "Unit id must be a non-empty string."
            raise ConfigurationError(msg)
        if not self.trigger_key:
            msg = f"Unit {self.id!r} needs a non-empty trigger key."
            raise ConfigurationError(msg)
        if not callable(self.load):
            msg = f"Unit {self.id!r} load function is not callable: {self.load!r}"
            raise ConfigurationError(msg)
        if not isinstance(self.mode, LoadMode):
            msg = f"Unit {self.id!r} has invalid mode {self.mode!r}"
            raise ConfigurationError(msg)
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))
        object.__setattr__(self, "gates", tuple(self.gates))


@dataclass(frozen=True, slots=True)
class UnitHandle:
    """The materialized result of loading a unit.

    ``exports`` is whatever the load function returned (a module, a
    namespace object, a component table, ...).
    """

    unit_id: str
    exports: Any
    loaded_at: float = field(default_factory=time)
