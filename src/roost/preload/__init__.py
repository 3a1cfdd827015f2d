"""Speculative background loading after startup."""

from roost.preload.scheduler import PreloadScheduler, SchedulerState
from roost.preload.strategies import (
    PreloadStrategy,
    all_units,
    flag,
    metadata_flag,
    no_units,
    resolve_strategy,
)

__all__ = [
    "PreloadScheduler",
    "PreloadStrategy",
    "SchedulerState",
    "all_units",
    "flag",
    "metadata_flag",
    "no_units",
    "resolve_strategy",
]
