"""At-most-once unit materialization."""

from roost.loading.imports import import_unit
from roost.loading.loader import UnitLoader
from roost.loading.state import (
    UNLOADED,
    Failed,
    Loaded,
    LoadFuture,
    Loading,
    LoadState,
    Unloaded,
)

__all__ = [
    "UNLOADED",
    "Failed",
    "LoadFuture",
    "LoadState",
    "Loaded",
    "Loading",
    "UnitLoader",
    "Unloaded",
    "import_unit",
]
