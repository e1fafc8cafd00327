# ==================================================================================================
#                              CLI: analyze
# ==================================================================================================
#
# Command handler for: `paf analyze RECORDING [RECORDING ...]`
#
# Responsibilities
# ----------------
# - define subcommand arguments (add_subparser)
# - analyze each recording under the batch error policy, print its summary and
#   peak note, optionally export its peak series (run)
#
# No signal processing belongs here.
#

# ==================================================================================================
# Imports
# ==================================================================================================
import argparse
import logging
from pathlib import Path
from typing import Any, Optional

from paf.analysis.parameters import SamplingParameters
from paf.analysis.pipeline import (
    analyze_recording,
    compute_peak_series,
    format_peak_note,
    is_undetermined,
)
from paf.cli.commands.common import add_analysis_arguments, resolve_parameters, resolve_timestamp_unit
from paf.config import ProjectConfig
from paf.errors import ErrorPolicy, run_step
from paf.io.export import write_series_csv

logger = logging.getLogger(__name__)

# ==================================================================================================
# Constants
# ==================================================================================================

DEFAULT_LOG_PATH: Path = Path("paf.log")
SERIES_SUFFIX: str = "_series.csv"


# ==================================================================================================
# Subparser
# ==================================================================================================

def add_subparser(subparsers: Any) -> None:
    """
    Register the `analyze` subcommand.

    Parameters
    ----------
    subparsers
        Subparser registry from the top-level CLI.

    Usage example
    -------------
        # called internally by paf.cli.main.build_arg_parser()
        add_subparser(subparsers)
    """
    parser = subparsers.add_parser(
        "analyze",
        help="Estimate peak alpha frequency of CSV or ZIP recordings",
    )

    parser.add_argument("inputs", type=Path, nargs="+", help="Recording CSV files or ZIP archives.")
    add_analysis_arguments(parser)
    parser.add_argument(
        "--out-dir",
        type=Path,
        default=None,
        help="If set, write each recording's peak series to <out-dir>/<name>_series.csv.",
    )
    parser.add_argument("--debug", action="store_true", help="Stop at the first failing recording.")
    parser.add_argument("--log", type=Path, default=DEFAULT_LOG_PATH, help="Failure log file.")


# ==================================================================================================
# Runner
# ==================================================================================================

def analyze_one(
    input_path: Path,
    params: SamplingParameters,
    timestamp_unit: str,
    out_dir: Optional[Path] = None,
) -> str:
    """
    Analyze one recording and return its printable report.

    Usage example
    -------------
        print(analyze_one(Path("session.zip"), SamplingParameters(), "auto"))
    """
    result = analyze_recording(input_path, params, timestamp_unit=timestamp_unit)
    series = compute_peak_series(result, params)

    for name in ("fft_left", "fft_right", "welch_left", "welch_right"):
        if is_undetermined(getattr(result, name)):
            logger.warning("%s: %s is undetermined", input_path, name)

    if out_dir is not None:
        written = write_series_csv(series, out_dir / f"{input_path.stem}{SERIES_SUFFIX}")
        logger.info("Wrote %s", written)

    return f"{result.format()}\n{format_peak_note(result, series, params)}"


def run(args: argparse.Namespace, cfg: ProjectConfig) -> int:
    """
    Execute the `analyze` command.

    Parameters
    ----------
    args
        Parsed argparse namespace for this subcommand.
    cfg
        Project config (already loaded once in paf.cli.main).

    Returns
    -------
    int
        0 when every recording was analyzed, 1 otherwise.

    Usage example
    -------------
        # called internally by paf.cli.main.main()
        run(args, cfg)
    """
    params = resolve_parameters(args, cfg)
    unit = resolve_timestamp_unit(args, cfg)
    policy = ErrorPolicy(debug=bool(args.debug), log_path=args.log)

    failures = 0
    for input_path in args.inputs:
        context = {
            "input": str(input_path),
            "window_sec": params.window_sec,
            "sub_window_sec": params.sub_window_sec,
            "overlap": params.overlap,
            "timestamp_unit": unit,
        }
        res = run_step(policy, "analyze", context, analyze_one, input_path, params, unit, args.out_dir)
        print(f"== {input_path}")
        if res.failure is not None:
            failures += 1
            print(f"Error: {res.failure.message}")
        else:
            print(res.value)

    return 1 if failures else 0
