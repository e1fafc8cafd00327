# ==================================================================================================
#                              CLI: series
# ==================================================================================================
#
# Command handler for: `paf series RECORDING --out FILE`
#
# Writes the four peak power series (FFT/Welch x left/right) of one recording
# to a long-format CSV. Errors propagate to the caller unchanged.
#

import argparse
from pathlib import Path
from typing import Any

from paf.analysis.pipeline import analyze_recording, compute_peak_series
from paf.cli.commands.common import add_analysis_arguments, resolve_parameters, resolve_timestamp_unit
from paf.config import ProjectConfig
from paf.io.export import write_series_csv


def add_subparser(subparsers: Any) -> None:
    """
    Register the `series` subcommand.

    Usage example
    -------------
        # called internally by paf.cli.main.build_arg_parser()
        add_subparser(subparsers)
    """
    parser = subparsers.add_parser(
        "series",
        help="Export sliding FFT and Welch peak power series of one recording",
    )
    parser.add_argument("input", type=Path, help="Recording CSV file or ZIP archive.")
    parser.add_argument("--out", type=Path, required=True, help="Output CSV file.")
    add_analysis_arguments(parser)


def run(args: argparse.Namespace, cfg: ProjectConfig) -> int:
    """
    Execute the `series` command.

    Usage example
    -------------
        # called internally by paf.cli.main.main()
        run(args, cfg)
    """
    params = resolve_parameters(args, cfg)
    result = analyze_recording(args.input, params, timestamp_unit=resolve_timestamp_unit(args, cfg))
    write_series_csv(compute_peak_series(result, params), args.out)
    print(f"Wrote {args.out}")
    return 0
