"""Shared type aliases used across roost modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Unit load function — zero arguments, sync or async, returns the unit's exports
LoadFn: TypeAlias = Callable[[], Any]

# Gate — (descriptor, context) -> GateDecision | bool, sync or async
Gate: TypeAlias = Callable[[Any, Any], Any]

# Context provider — zero arguments, sync or async, returns an opaque principal snapshot
ContextProvider: TypeAlias = Callable[[], Any]

# Redirect handler — receives the redirect trigger key
RedirectHandler: TypeAlias = Callable[[str], Any]
