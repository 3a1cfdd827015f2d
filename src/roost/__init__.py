"""Roost — deferred unit loading with admission gates.

Each unit is loaded at most once: eagerly at startup, speculatively by
the preload pass, or on demand when a navigation passes its gates.

Basic usage::

    from roost import LoadMode, Orchestrator, authenticated

    orchestrator = Orchestrator(context_provider=get_session)

    @orchestrator.unit("/", mode=LoadMode.EAGER)
    async def home():
        return await fetch_bundle("home")

    @orchestrator.unit("/profile", preload=True, gates=[authenticated()])
    async def profile():
        return await fetch_bundle("profile")

    await orchestrator.start()
    result = await orchestrator.navigate("/profile")
"""

import importlib

__version__ = "0.1.0.dev0"
__all__ = [
    "ConfigurationError",
    "DuplicateUnitError",
    "GateDecision",
    "GateEvaluator",
    "LoadFailure",
    "LoadMode",
    "NavigationResult",
    "NavigationStatus",
    "Navigator",
    "Orchestrator",
    "PreloadScheduler",
    "RegistryFrozenError",
    "RoostConfig",
    "RoostError",
    "UnitDescriptor",
    "UnitHandle",
    "UnitLoader",
    "UnitNotFoundError",
    "UnitRegistry",
    "all_units",
    "authenticated",
    "import_unit",
    "metadata_flag",
    "policy",
    "requires",
]

# Public name -> defining module. Resolved on first attribute access so
# ``import roost`` stays cheap.
_LAZY_IMPORTS: dict[str, str] = {
    "ConfigurationError": "roost.errors",
    "DuplicateUnitError": "roost.errors",
    "GateDecision": "roost.gates.decision",
    "GateEvaluator": "roost.gates.evaluator",
    "LoadFailure": "roost.errors",
    "LoadMode": "roost.units.descriptor",
    "NavigationResult": "roost.navigation.dispatcher",
    "NavigationStatus": "roost.navigation.dispatcher",
    "Navigator": "roost.navigation.dispatcher",
    "Orchestrator": "roost.orchestrator",
    "PreloadScheduler": "roost.preload.scheduler",
    "RegistryFrozenError": "roost.errors",
    "RoostConfig": "roost.config",
    "RoostError": "roost.errors",
    "UnitDescriptor": "roost.units.descriptor",
    "UnitHandle": "roost.units.descriptor",
    "UnitLoader": "roost.loading.loader",
    "UnitNotFoundError": "roost.errors",
    "UnitRegistry": "roost.units.registry",
    "all_units": "roost.preload.strategies",
    "authenticated": "roost.gates.builtins",
    "import_unit": "roost.loading.imports",
    "metadata_flag": "roost.preload.strategies",
    "policy": "roost.gates.builtins",
    "requires": "roost.gates.builtins",
}


def __getattr__(name: str) -> object:
    """Lazy imports for public API."""
    module_path = _LAZY_IMPORTS.get(name)
    if module_path is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)
    return getattr(importlib.import_module(module_path), name)
