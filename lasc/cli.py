"""Command-line entry point.

Usage::

    lasc [--root DIR]
    python -m lasc --root ./my-function
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from pydantic import ValidationError
from rich.markup import escape
from rich.panel import Panel

from lasc import __version__
from lasc.config import ScaffoldConfig
from lasc.scaffolder import ProjectGenerator, ScaffoldError
from lasc.utils import console, print_error, print_success, print_summary_table

STATUS_OK = 0
STATUS_NG = 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lasc",
        description="Scaffold a container-image Go function project",
    )
    parser.add_argument(
        "--root",
        default=None,
        help="root directory (default: $LASC_ROOT or .)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def run(argv: list[str] | None = None) -> int:
    """Parse *argv*, run the scaffold pipeline and return the exit status."""
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        # -h / --version exit 0, usage errors exit 2.
        return STATUS_OK if exc.code in (0, None) else STATUS_NG

    try:
        config = ScaffoldConfig.from_env(root_dir=args.root)
    except (ValidationError, ValueError) as exc:
        print_error(f"invalid configuration: {exc}")
        return STATUS_NG

    generator = ProjectGenerator(config)
    console.print(
        Panel(
            f"Root : {escape(str(generator.root_dir))}\nGo   : {escape(config.go_binary)}",
            title="[bold]lasc[/bold]",
            border_style="bright_cyan",
        )
    )

    try:
        result = asyncio.run(generator.generate())
    except ScaffoldError as exc:
        print_error(str(exc))
        return STATUS_NG

    print_summary_table(result.summary(), title="Scaffold")
    print_success("Scaffold complete.")
    return STATUS_OK


def main() -> None:
    """Console-script entry point."""
    sys.exit(run(sys.argv[1:]))
