"""Peak alpha frequency analysis: timestamps, segmenting, spectral estimates, series."""

from .parameters import SamplingParameters
from .pipeline import PafResult, PeakSeriesSet, analyze, analyze_recording, compute_peak_series
from .series import PeakPoint, ScanStep

__all__ = [
    "PafResult",
    "PeakPoint",
    "PeakSeriesSet",
    "SamplingParameters",
    "ScanStep",
    "analyze",
    "analyze_recording",
    "compute_peak_series",
]
