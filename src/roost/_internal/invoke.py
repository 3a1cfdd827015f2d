"""Invoke helpers — call sync or async callables uniformly.

Load functions, gates, context providers, and redirect handlers can all be
``def`` or ``async def``. This module keeps the sync/async check in exactly
one place.

Usage::

    from roost._internal.invoke import invoke

    result = await invoke(load_fn)
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it's awaitable."""
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
