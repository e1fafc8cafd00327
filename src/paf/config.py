# ==================================================================================================
#                               Config loading
# ==================================================================================================
#
# Single entry point for reading analysis configuration from disk.
#
# The YAML file is optional for the CLI. When present it may define:
#   - analysis.window_sec      primary window length (seconds)
#   - analysis.sub_window_sec  Welch sub-window length (seconds)
#   - analysis.overlap         fractional overlap in [0, 1)
#   - analysis.timestamp_unit  "auto" | "s" | "ms"
#
# This module only loads and packages raw config data. Interpreting the
# `analysis` mapping is done by `paf.analysis.parameters`.

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping

import yaml


# ==================================================================================================
#                                   TYPES
# ==================================================================================================

@dataclass(frozen=True, slots=True)
class ProjectConfig:
    """
    Parsed project configuration.

    Parameters
    ----------
    raw
        Raw config dictionary loaded from YAML. Empty when no file is given.

    Usage example
    -------------
        cfg = load_project_config(Path("config/paf.yaml"))
        window = cfg.raw["analysis"]["window_sec"]
    """

    raw: Dict[str, Any] = field(default_factory=dict)


# ==================================================================================================
#                                   IO
# ==================================================================================================

def load_project_config(config_path: Path) -> ProjectConfig:
    """
    Load YAML config into a ProjectConfig object.

    Parameters
    ----------
    config_path
        Path to YAML config file.

    Returns
    -------
    ProjectConfig
        Loaded configuration. An empty YAML document yields an empty mapping.

    Usage example
    -------------
        cfg = load_project_config(Path("config/paf.yaml"))
        print(cfg.raw.get("analysis", {}))
    """
    with config_path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return ProjectConfig(raw={})

    if not isinstance(data, Mapping):
        raise ValueError(f"Config must be a mapping at top-level, got: {type(data)}")

    return ProjectConfig(raw=dict(data))
