"""Unit declarations and the registry that holds them."""

from roost.units.descriptor import LoadMode, UnitDescriptor, UnitHandle
from roost.units.registry import UnitRegistry

__all__ = [
    "LoadMode",
    "UnitDescriptor",
    "UnitHandle",
    "UnitRegistry",
]
