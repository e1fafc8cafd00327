# ==================================================================================================
#                                   CLI
# ==================================================================================================
#
# Entry point for the `paf` command-line interface.
#
# This module is a thin dispatcher:
# - parse global + subcommand arguments
# - configure logging and load the optional project config once
# - call a single command handler per subcommand
#
# Signal processing must live in `paf.analysis.*`, not here.
#
# ==================================================================================================
# Imports
# ==================================================================================================

import argparse
import logging
from pathlib import Path
from typing import Dict, Sequence

from paf.config import ProjectConfig, load_project_config
from paf.cli.types import CliCommand
from paf.logging import configure_logging

from paf.cli.commands import (  # noqa: F401
    analyze as cmd_analyze,
    series as cmd_series,
)


# ==================================================================================================
# Command registry
# ==================================================================================================

_COMMANDS: Dict[str, CliCommand] = {
    "analyze": cmd_analyze,
    "series": cmd_series,
}


# ==================================================================================================
# Argument parsing
# ==================================================================================================

def build_arg_parser() -> argparse.ArgumentParser:
    """
    Build the top-level CLI parser with subcommands.

    Returns
    -------
    argparse.ArgumentParser
        Configured parser.

    Usage example
    -------------
        paf analyze session.zip --window-sec 6 --sub-window-sec 3 --overlap 0.25

        paf series session.zip --config config/paf.yaml --out derived/session_series.csv
    """
    parser = argparse.ArgumentParser(
        prog="paf",
        description="Peak alpha frequency analysis of two-channel headband recordings",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")

    subparsers = parser.add_subparsers(dest="command", required=True, metavar="<command>")

    for name, module in _COMMANDS.items():
        if not hasattr(module, "add_subparser"):
            raise RuntimeError(f"CLI command module for '{name}' is missing add_subparser().")
        module.add_subparser(subparsers)

    return parser


# ==================================================================================================
# Entry point
# ==================================================================================================

def main(argv: Sequence[str] | None = None) -> int:
    """
    CLI entry point.

    Parameters
    ----------
    argv
        Optional argv for testing. If None, reads from sys.argv.

    Returns
    -------
    int
        Exit status returned by the command handler.

    Usage example
    -------------
        main(["analyze", "session.zip", "--overlap", "0.5"])
    """
    parser = build_arg_parser()
    args = parser.parse_args(argv)  # noqa

    configure_logging(logging.DEBUG if getattr(args, "verbose", False) else logging.INFO)

    # Every subcommand accepts --config (registered by the handlers).
    if not hasattr(args, "config"):
        raise RuntimeError("Internal error: subcommand args missing --config.")

    cfg = ProjectConfig() if args.config is None else load_project_config(Path(args.config))

    command_name = str(args.command)
    module = _COMMANDS.get(command_name)
    if module is None:
        raise RuntimeError(f"Unknown command: {command_name}")

    if not hasattr(module, "run"):
        raise RuntimeError(f"CLI command module for '{command_name}' is missing run().")

    return int(module.run(args, cfg) or 0)


if __name__ == "__main__":
    raise SystemExit(main())
