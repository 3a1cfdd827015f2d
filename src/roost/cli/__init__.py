"""Roost CLI — inspect units and exercise the preload pass.

Entry point registered as ``roost`` in ``pyproject.toml``::

    [project.scripts]
    roost = "roost.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``roost`` command."""
    parser = argparse.ArgumentParser(
        prog="roost",
        description="Roost — deferred unit loading with admission gates.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- roost units ------------------------------------------------------
    units_parser = subparsers.add_parser("units", help="List registered units")
    units_parser.add_argument(
        "app",
        help="Import string (e.g. myapp:orchestrator)",
    )

    # -- roost preload ----------------------------------------------------
    preload_parser = subparsers.add_parser(
        "preload",
        help="Start the orchestrator, run the preload pass, and report load states",
    )
    preload_parser.add_argument(
        "app",
        help="Import string (e.g. myapp:orchestrator)",
    )
    preload_parser.add_argument(
        "--strategy",
        choices=("all", "flagged", "none"),
        default=None,
        help="Override the configured preload strategy",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "units":
        from roost.cli._units import run_units

        run_units(args)
    elif args.command == "preload":
        from roost.cli._preload import run_preload

        run_preload(args)
