"""Unit registry — static table of loadable units.

Units are registered during setup and the table is frozen when the
orchestrator starts. Lookup is by trigger key; iteration follows
registration order so preload scheduling is deterministic.
"""

from collections.abc import Iterator

from roost.errors import DuplicateUnitError, RegistryFrozenError, UnitNotFoundError
from roost.units.descriptor import LoadMode, UnitDescriptor


class UnitRegistry:
    """Ordered table of unit descriptors.

    Usage::

        registry = UnitRegistry()
        registry.register(UnitDescriptor("home", "/", load_home))
        registry.freeze()
        descriptor = registry.lookup("/")
    """

    __slots__ = ("_by_id", "_by_key", "_frozen")

    def __init__(self) -> None:
        # dicts preserve insertion order, which is the registration order
        self._by_key: dict[str, UnitDescriptor] = {}
        self._by_id: dict[str, UnitDescriptor] = {}
        self._frozen = False

    def register(self, descriptor: UnitDescriptor) -> UnitDescriptor:
        """Add a unit. Must be called before freeze()."""
        if self._frozen:
            raise RegistryFrozenError
        if descriptor.trigger_key in self._by_key:
            raise DuplicateUnitError(descriptor.trigger_key)
        if descriptor.id in self._by_id:
            raise DuplicateUnitError(
                descriptor.trigger_key,
                f"Unit id {descriptor.id!r} is already registered "
                f"(trigger key {self._by_id[descriptor.id].trigger_key!r})",
            )
        self._by_key[descriptor.trigger_key] = descriptor
        self._by_id[descriptor.id] = descriptor
        return descriptor

    def lookup(self, trigger_key: str) -> UnitDescriptor:
        """Return the unit for *trigger_key*.

        Raises ``UnitNotFoundError`` if nothing is registered for it.
        """
        descriptor = self._by_key.get(trigger_key)
        if descriptor is None:
            raise UnitNotFoundError(trigger_key)
        return descriptor

    def get(self, trigger_key: str) -> UnitDescriptor | None:
        """Look up a unit by trigger key. Returns ``None`` if not found."""
        return self._by_key.get(trigger_key)

    def by_id(self, unit_id: str) -> UnitDescriptor | None:
        """Look up a unit by id. Returns ``None`` if not found."""
        return self._by_id.get(unit_id)

    def all(self) -> tuple[UnitDescriptor, ...]:
        """Every registered unit, in registration order."""
        return tuple(self._by_key.values())

    def eager(self) -> tuple[UnitDescriptor, ...]:
        """Units declared with ``LoadMode.EAGER``, in registration order."""
        return tuple(d for d in self._by_key.values() if d.mode is LoadMode.EAGER)

    def freeze(self) -> None:
        """Freeze the registry. No more units can be registered."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __len__(self) -> int:
        return len(self._by_key)

    def __contains__(self, trigger_key: object) -> bool:
        return trigger_key in self._by_key

    def __iter__(self) -> Iterator[UnitDescriptor]:
        return iter(self.all())
