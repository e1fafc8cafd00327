# ==================================================================================================
#                          CLI: shared analysis options
# ==================================================================================================
#
# Window/overlap/timestamp options accepted by every analysis subcommand, and
# their resolution against the loaded config (CLI flags win over config).

import argparse
from pathlib import Path
from typing import Optional

from paf.analysis.parameters import TIMESTAMP_UNITS, SamplingParameters, timestamp_unit_from_config
from paf.config import ProjectConfig


def add_analysis_arguments(parser: argparse.ArgumentParser) -> None:
    """
    Register `--config`, window, overlap and timestamp-unit options.

    Usage example
    -------------
        parser = subparsers.add_parser("analyze")
        add_analysis_arguments(parser)
    """
    parser.add_argument("--config", type=Path, default=None, help="Optional config YAML.")
    parser.add_argument("--window-sec", type=float, default=None, help="Window length (s). Default 6.0.")
    parser.add_argument(
        "--sub-window-sec",
        type=float,
        default=None,
        help="Welch sub-window length (s). Default 3.0.",
    )
    parser.add_argument("--overlap", type=float, default=None, help="Window overlap in [0, 1). Default 0.25.")
    parser.add_argument(
        "--timestamp-unit",
        choices=TIMESTAMP_UNITS,
        default=None,
        help="Unit of numeric timestamps; 'auto' infers it from the first delta.",
    )


def resolve_parameters(args: argparse.Namespace, cfg: ProjectConfig) -> SamplingParameters:
    """
    Config parameters with CLI overrides applied.

    Usage example
    -------------
        params = resolve_parameters(args, cfg)
    """
    return SamplingParameters.from_config(cfg).with_overrides(
        window_sec=args.window_sec,
        sub_window_sec=args.sub_window_sec,
        overlap=args.overlap,
    )


def resolve_timestamp_unit(args: argparse.Namespace, cfg: ProjectConfig) -> str:
    """CLI `--timestamp-unit` if given, else `analysis.timestamp_unit` from config."""
    unit: Optional[str] = getattr(args, "timestamp_unit", None)
    if unit is not None:
        return unit
    return timestamp_unit_from_config(cfg)
