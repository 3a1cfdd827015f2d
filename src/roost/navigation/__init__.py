"""On-demand activation of units: gate, then load."""

from roost.navigation.dispatcher import NavigationResult, NavigationStatus, Navigator

__all__ = [
    "NavigationResult",
    "NavigationStatus",
    "Navigator",
]
