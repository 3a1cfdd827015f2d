"""Import-string load functions.

``import_unit("myapp.billing:unit")`` builds a load function that imports
the module in a worker thread and returns the named attribute (or the
module itself when no attribute is given). This is the Python analogue of
a dynamically imported code bundle: nothing is imported until the unit is
first loaded.
"""

import importlib
from collections.abc import Awaitable, Callable
from typing import Any

import anyio.to_thread

from roost.errors import ConfigurationError


def parse_import_string(target: str) -> tuple[str, str | None]:
    """Split ``"module.path:attr"`` into ``("module.path", "attr")``.

    The attribute part is optional. Raises ``ConfigurationError`` for
    empty module paths or empty attributes after the colon.
    """
    module_path, sep, attr_name = target.partition(":")
    module_path = module_path.strip()
    if not module_path or any(not part for part in module_path.split(".")):
        msg = f"Invalid import string {target!r}: expected 'package.module[:attribute]'"
        raise ConfigurationError(msg)
    if sep and not attr_name.strip():
        msg = f"Invalid import string {target!r}: empty attribute after ':'"
        raise ConfigurationError(msg)
    return module_path, (attr_name.strip() or None)


def import_target(module_path: str, attr_name: str | None) -> Any:
    module = importlib.import_module(module_path)
    if attr_name is None:
        return module
    obj: Any = module
    for part in attr_name.split("."):
        obj = getattr(obj, part)
    return obj


def import_unit(target: str, *, in_thread: bool = True) -> Callable[[], Awaitable[Any]]:
    """Build a load function that imports *target* on first load.

    Args:
        target: ``"package.module"`` or ``"package.module:attribute"``.
            Dotted attributes (``"pkg.mod:Class.factory"``) are followed.
        in_thread: Run the import in a worker thread so slow imports do
            not block the event loop. Set ``False`` for imports that must
            happen on the loop thread.

    Usage::

        orchestrator.add_unit(UnitDescriptor(
            id="reports",
            trigger_key="/reports",
            load=import_unit("myapp.reports:unit"),
        ))
    """
    module_path, attr_name = parse_import_string(target)

    async def load() -> Any:
        if in_thread:
            return await anyio.to_thread.run_sync(import_target, module_path, attr_name)
        return import_target(module_path, attr_name)

    load.__name__ = f"import_unit({target!r})"
    load.__qualname__ = load.__name__
    return load
