"""Resolve ``"module:attribute"`` strings to an Orchestrator for the CLI."""

from roost.loading.imports import import_target, parse_import_string
from roost.orchestrator import Orchestrator


def resolve_orchestrator(import_string: str) -> Orchestrator:
    """Resolve an import string to an Orchestrator instance.

    The attribute defaults to ``orchestrator``. A callable that is not
    itself an Orchestrator is treated as a factory and called once.

    Raises:
        ConfigurationError: If the import string is malformed.
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
        TypeError: If the resolved object is not an ``Orchestrator``.
    """
    module_path, attr_name = parse_import_string(import_string)
    obj = import_target(module_path, attr_name or "orchestrator")

    if callable(obj) and not isinstance(obj, Orchestrator):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"Orchestrator factory {import_string!r} failed: {exc}"
            raise TypeError(msg) from exc

    if not isinstance(obj, Orchestrator):
        msg = f"{import_string!r} resolved to {type(obj).__name__}, expected roost.Orchestrator"
        raise TypeError(msg)
    return obj
