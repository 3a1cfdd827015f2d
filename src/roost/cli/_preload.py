"""``roost preload`` — start the orchestrator and report load states.

Exits with code 1 if an eager unit or any preloaded unit failed.
"""

import argparse
import logging
import sys

import anyio

from roost.cli._resolve import resolve_orchestrator
from roost.errors import ConfigurationError, LoadFailure
from roost.loading.state import Failed, Loaded, Loading
from roost.orchestrator import Orchestrator

_log = logging.getLogger("roost.cli")


def _describe(orchestrator: Orchestrator, unit_id: str) -> str:
    state = orchestrator.loader.state(unit_id)
    if isinstance(state, Loaded):
        return "loaded"
    if isinstance(state, Failed):
        return f"failed ({state.error.cause!r})"
    if isinstance(state, Loading):
        return "loading"
    return "unloaded"


async def _preload(orchestrator: Orchestrator, strategy: str | None) -> bool:
    await orchestrator.start(strategy=strategy)
    results = await orchestrator.scheduler.drain()
    return not any(isinstance(r, BaseException) for r in results.values())


def run_preload(args: argparse.Namespace) -> None:
    try:
        orchestrator = resolve_orchestrator(args.app)
    except (ConfigurationError, ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    logging.basicConfig(
        level=orchestrator.config.log_level.upper(),
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        ok = anyio.run(_preload, orchestrator, args.strategy)
    except (ConfigurationError, LoadFailure) as exc:
        _log.error("Startup failed: %s", exc)
        raise SystemExit(1) from exc

    for descriptor in orchestrator.registry.all():
        print(f"{descriptor.id:<24} {_describe(orchestrator, descriptor.id)}")

    if not ok:
        raise SystemExit(1)
