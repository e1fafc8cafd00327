# ==================================================================================================
#                               Sampling parameters
# ==================================================================================================
#
# Converts the loosely typed `analysis` config section into an explicit,
# immutable `SamplingParameters` value. Every spectral and series call receives
# this value as an argument; there is no process-wide analysis state.

from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional

from paf.config import ProjectConfig

# ==================================================================================================
#                                   CONSTANTS
# ==================================================================================================

DEFAULT_WINDOW_SEC: float = 6.0
DEFAULT_SUB_WINDOW_SEC: float = 3.0
DEFAULT_OVERLAP: float = 0.25

TIMESTAMP_UNITS: tuple[str, ...] = ("auto", "s", "ms")
DEFAULT_TIMESTAMP_UNIT: str = "auto"


# ==================================================================================================
#                                   TYPES
# ==================================================================================================

@dataclass(frozen=True, slots=True)
class SamplingParameters:
    """
    Window settings shared by the Welch and sliding-series estimators.

    Parameters
    ----------
    window_sec
        Primary window length in seconds. Used as the Welch sub-window length
        for whole-segment PAF and as the sliding window length of both series.
    sub_window_sec
        Welch sub-window length in seconds inside each sliding block.
    overlap
        Fractional overlap between consecutive windows, in [0, 1).

    Usage example
    -------------
        params = SamplingParameters(window_sec=4.0, overlap=0.5)
        series = welch_peak_series(result.raw_left, result.fs, params)
    """

    window_sec: float = DEFAULT_WINDOW_SEC
    sub_window_sec: float = DEFAULT_SUB_WINDOW_SEC
    overlap: float = DEFAULT_OVERLAP

    def __post_init__(self) -> None:
        if not self.window_sec > 0:
            raise ValueError(f"window_sec must be > 0, got {self.window_sec}")
        if not self.sub_window_sec > 0:
            raise ValueError(f"sub_window_sec must be > 0, got {self.sub_window_sec}")
        if not 0.0 <= self.overlap < 1.0:
            raise ValueError(f"overlap must be in [0, 1), got {self.overlap}")

    def with_overrides(
        self,
        *,
        window_sec: Optional[float] = None,
        sub_window_sec: Optional[float] = None,
        overlap: Optional[float] = None,
    ) -> "SamplingParameters":
        """
        Return a copy with the given fields replaced; None keeps the current value.

        Usage example
        -------------
            params = SamplingParameters.from_config(cfg).with_overrides(overlap=args.overlap)
        """
        changes: dict[str, float] = {}
        if window_sec is not None:
            changes["window_sec"] = float(window_sec)
        if sub_window_sec is not None:
            changes["sub_window_sec"] = float(sub_window_sec)
        if overlap is not None:
            changes["overlap"] = float(overlap)
        return replace(self, **changes)

    def describe(self) -> str:
        """
        Human-readable description of the window settings for report notes.

        Usage example
        -------------
            print(SamplingParameters().describe())
        """
        overlap_pct = int(self.overlap * 100)
        return (
            f"Welch: averaged PSD over sub-windows (window={self.window_sec}s, "
            f"sub-window={self.sub_window_sec}s, overlap={overlap_pct}%). "
            f"FFT: single-window PSD (window={self.window_sec}s, overlap={overlap_pct}%)."
        )

    @staticmethod
    def from_config(cfg: ProjectConfig) -> "SamplingParameters":
        """
        Construct SamplingParameters from the optional `analysis` config mapping.

        Parameters
        ----------
        cfg
            Project configuration.

        Returns
        -------
        SamplingParameters
            Parameters with defaults for missing keys.

        Usage example
        -------------
            params = SamplingParameters.from_config(cfg)
        """
        analysis_cfg = _analysis_section(cfg)
        return SamplingParameters(
            window_sec=float(analysis_cfg.get("window_sec", DEFAULT_WINDOW_SEC)),
            sub_window_sec=float(analysis_cfg.get("sub_window_sec", DEFAULT_SUB_WINDOW_SEC)),
            overlap=float(analysis_cfg.get("overlap", DEFAULT_OVERLAP)),
        )


# ==================================================================================================
#                                   HELPERS
# ==================================================================================================

def _analysis_section(cfg: ProjectConfig) -> Mapping[str, Any]:
    """Return the `analysis` mapping, or an empty one when absent."""
    analysis_cfg = cfg.raw.get("analysis", None)
    if analysis_cfg is None:
        return {}
    if not isinstance(analysis_cfg, Mapping):
        raise ValueError("Config entry 'analysis' must be a mapping")
    return analysis_cfg


def timestamp_unit_from_config(cfg: ProjectConfig) -> str:
    """
    Read `analysis.timestamp_unit` ("auto", "s" or "ms"), defaulting to "auto".

    Usage example
    -------------
        unit = timestamp_unit_from_config(cfg)
    """
    unit = str(_analysis_section(cfg).get("timestamp_unit", DEFAULT_TIMESTAMP_UNIT))
    if unit not in TIMESTAMP_UNITS:
        raise ValueError(f"analysis.timestamp_unit must be one of {TIMESTAMP_UNITS}, got {unit!r}")
    return unit
