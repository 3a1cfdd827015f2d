"""``roost units`` — list registered units."""

import argparse
import sys

from roost.cli._resolve import resolve_orchestrator
from roost.errors import ConfigurationError


def run_units(args: argparse.Namespace) -> None:
    """Print a table of ID, TRIGGER, MODE, PRELOAD and GATES."""
    try:
        orchestrator = resolve_orchestrator(args.app)
    except (ConfigurationError, ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    units = orchestrator.registry.all()
    if not units:
        print("No units registered.")
        return

    flag_key = orchestrator.config.preload_flag
    rows = [
        (
            d.id,
            d.trigger_key,
            d.mode.value,
            "yes" if d.metadata.get(flag_key) is True else "no",
            str(len(orchestrator.gates.gates_for(d))),
        )
        for d in units
    ]
    headers = ("ID", "TRIGGER", "MODE", "PRELOAD", "GATES")
    widths = [max(len(h), *(len(r[i]) for r in rows)) for i, h in enumerate(headers)]
    fmt = "  ".join(f"{{:<{w}}}" for w in widths)
    print(fmt.format(*headers).rstrip())
    print("-" * min(sum(widths) + 2 * (len(widths) - 1), 80))
    for row in rows:
        print(fmt.format(*row).rstrip())
