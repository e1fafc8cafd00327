# ==================================================================================================
#                         Peak alpha frequency pipeline
# ==================================================================================================
#
# Canonical analysis of one headband recording:
#
#   tokenized rows
#     -> validity filter (device-on flag)
#     -> timestamps in seconds + raw left/right amplitudes
#     -> sampling rate from the median positive timestamp delta
#     -> trim 10 s at both ends
#     -> dedup + natural cubic spline resampling per channel
#     -> FFT PAF and Welch PAF per channel
#     -> PafResult (per channel, mean, two-value median)
#
# `compute_peak_series` derives the four time-resolved peak power series
# (FFT/Welch x left/right) from a PafResult for charting or export.

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Sequence

import numpy as np

from paf.analysis.parameters import SamplingParameters
from paf.analysis.segment import resample_channels, trim_segment
from paf.analysis.series import PeakPoint, peak_time, sliding_fft_peak_series, welch_peak_series
from paf.analysis.spectral import DEFAULT_PARAMETERS, fft_peak, welch_peak
from paf.analysis.timestamps import estimate_sample_rate, parse_timestamps
from paf.constants import LEFT_CHANNEL_COLUMN, RIGHT_CHANNEL_COLUMN, TIMESTAMP_COLUMN
from paf.errors import CsvFormatError
from paf.io.archive import read_recording_rows
from paf.io.rows import RawRow, filter_valid_rows

logger = logging.getLogger(__name__)


# ==================================================================================================
# Types
# ==================================================================================================

@dataclass(frozen=True)
class PafResult:
    """
    Aggregated peak alpha frequency estimates of one recording.

    Parameters
    ----------
    fs
        Estimated sampling rate in Hz.
    duration
        Length of the resampled segment in seconds.
    fft_left, fft_right, fft_mean, fft_median
        Single-window FFT PAF in Hz.
    fft_time_left, fft_time_right
        FFT peak bin index divided by `fs` (bin-index artifact, see `fft_peak`).
    welch_left, welch_right, welch_mean, welch_median
        Welch PAF in Hz.
    raw_left, raw_right
        Resampled channels (read-only), input to the peak power series.

    Usage example
    -------------
        result = analyze(rows)
        print(result.format())
    """

    fs: float
    duration: float
    fft_left: float
    fft_right: float
    fft_mean: float
    fft_median: float
    fft_time_left: float
    fft_time_right: float
    welch_left: float
    welch_right: float
    welch_mean: float
    welch_median: float
    raw_left: np.ndarray
    raw_right: np.ndarray

    def format(self) -> str:
        """Three-line summary with one-decimal frequencies."""
        return (
            f"fs={self.fs:.1f} Hz, dur={self.duration:.1f}s\n"
            f"Welch PAF: L={self.welch_left:.1f} R={self.welch_right:.1f} mean={self.welch_mean:.1f}\n"
            f"FFT PAF:   L={self.fft_left:.1f} R={self.fft_right:.1f} mean={self.fft_mean:.1f}"
        )


@dataclass(frozen=True)
class PeakSeriesSet:
    """
    The four peak power series of one recording.

    Usage example
    -------------
        series = compute_peak_series(result, params)
        print(len(series.welch_left))
    """

    fft_left: List[PeakPoint]
    fft_right: List[PeakPoint]
    welch_left: List[PeakPoint]
    welch_right: List[PeakPoint]

    def as_dict(self) -> Dict[tuple[str, str], List[PeakPoint]]:
        """Series keyed by `(method, channel)`."""
        return {
            ("fft", "left"): self.fft_left,
            ("fft", "right"): self.fft_right,
            ("welch", "left"): self.welch_left,
            ("welch", "right"): self.welch_right,
        }

    def peak_times(self) -> Dict[tuple[str, str], float]:
        """Time of the highest-power point of each series (NaN when empty)."""
        return {key: peak_time(points) for key, points in self.as_dict().items()}


# ==================================================================================================
# Helpers
# ==================================================================================================

def two_channel_mean(left: float, right: float) -> float:
    """Arithmetic mean of the left and right estimates."""
    return (left + right) / 2.0


def two_channel_median(left: float, right: float) -> float:
    """
    Median of the left and right estimates.

    With exactly two values the median equals the mean; it is reported under
    its own name to keep the result layout stable.
    """
    return (left + right) / 2.0


def _channel_values(rows: Sequence[RawRow], column: int) -> np.ndarray:
    """Parse one amplitude column as floats."""
    try:
        values = np.array([float(row[column]) for row in rows], dtype=float)
    except ValueError as exc:
        raise CsvFormatError(f"Invalid amplitude in column {column}: {exc}") from exc
    if not np.all(np.isfinite(values)):
        raise CsvFormatError(f"Non-finite amplitude in column {column}")
    return values


# ==================================================================================================
# Core logic
# ==================================================================================================

def analyze(
    rows: Sequence[RawRow],
    params: SamplingParameters = DEFAULT_PARAMETERS,
    *,
    timestamp_unit: str = "auto",
) -> PafResult:
    """
    Estimate the peak alpha frequency of a two-channel recording.

    Parameters
    ----------
    rows
        Tokenized CSV rows, header included as the first row.
    params
        Window settings for the Welch estimate (`window_sec`, `overlap`).
    timestamp_unit
        "auto", "s" or "ms"; see `parse_timestamps`.

    Returns
    -------
    PafResult
        FFT and Welch estimates per channel plus the resampled channels.

    Raises
    ------
    CsvFormatError
        At the first unsatisfiable precondition. Spectral degeneracies are
        reported as NaN fields instead.

    Usage example
    -------------
        rows = read_recording_rows(Path("session.zip"))
        result = analyze(rows, SamplingParameters(window_sec=4.0))
    """
    valid = filter_valid_rows(rows)
    valid = [row for row in valid if row[TIMESTAMP_COLUMN].strip()]

    times = parse_timestamps([row[TIMESTAMP_COLUMN] for row in valid], unit=timestamp_unit)
    fs = estimate_sample_rate(times)

    left = _channel_values(valid, LEFT_CHANNEL_COLUMN)
    right = _channel_values(valid, RIGHT_CHANNEL_COLUMN)
    t_seg, left_seg, right_seg = trim_segment(times, left, right)

    segment = resample_channels(t_seg, left_seg, right_seg)
    segment.left.setflags(write=False)
    segment.right.setflags(write=False)

    fft_l, time_l = fft_peak(segment.left, fs)
    fft_r, time_r = fft_peak(segment.right, fs)
    welch_l = welch_peak(segment.left, fs, params)
    welch_r = welch_peak(segment.right, fs, params)

    logger.info(
        "PAF fft L=%.2f R=%.2f | welch L=%.2f R=%.2f (%d samples, %.1f s)",
        fft_l, fft_r, welch_l, welch_r, segment.times.size, segment.duration,
    )

    return PafResult(
        fs=fs,
        duration=segment.duration,
        fft_left=fft_l,
        fft_right=fft_r,
        fft_mean=two_channel_mean(fft_l, fft_r),
        fft_median=two_channel_median(fft_l, fft_r),
        fft_time_left=time_l,
        fft_time_right=time_r,
        welch_left=welch_l,
        welch_right=welch_r,
        welch_mean=two_channel_mean(welch_l, welch_r),
        welch_median=two_channel_median(welch_l, welch_r),
        raw_left=segment.left,
        raw_right=segment.right,
    )


def analyze_recording(
    path: Path,
    params: SamplingParameters = DEFAULT_PARAMETERS,
    *,
    timestamp_unit: str = "auto",
) -> PafResult:
    """
    Read a CSV or ZIP recording from disk and analyze it.

    Usage example
    -------------
        result = analyze_recording(Path("session.zip"))
    """
    return analyze(read_recording_rows(Path(path)), params, timestamp_unit=timestamp_unit)


def compute_peak_series(result: PafResult, params: SamplingParameters = DEFAULT_PARAMETERS) -> PeakSeriesSet:
    """
    Sliding FFT and Welch peak power series for both resampled channels.

    Usage example
    -------------
        series = compute_peak_series(result, params)
        chart(series.welch_left, series.welch_right)
    """
    series = PeakSeriesSet(
        fft_left=sliding_fft_peak_series(result.raw_left, result.fs, params),
        fft_right=sliding_fft_peak_series(result.raw_right, result.fs, params),
        welch_left=welch_peak_series(result.raw_left, result.fs, params),
        welch_right=welch_peak_series(result.raw_right, result.fs, params),
    )
    logger.debug(
        "Peak series sizes: fft %d/%d, welch %d/%d",
        len(series.fft_left), len(series.fft_right), len(series.welch_left), len(series.welch_right),
    )
    return series


def format_peak_note(result: PafResult, series: PeakSeriesSet, params: SamplingParameters) -> str:
    """
    Report note: PAF per strategy with the time of maximum series power.

    Usage example
    -------------
        print(format_peak_note(result, compute_peak_series(result, params), params))
    """
    times = series.peak_times()
    return (
        f"Welch PAF: L={result.welch_left:.1f} Hz @ {times[('welch', 'left')]:.2f} s, "
        f"R={result.welch_right:.1f} Hz @ {times[('welch', 'right')]:.2f} s.\n"
        f"FFT PAF:   L={result.fft_left:.1f} Hz @ {times[('fft', 'left')]:.2f} s, "
        f"R={result.fft_right:.1f} Hz @ {times[('fft', 'right')]:.2f} s.\n"
        f"{params.describe()}"
    )


def is_undetermined(value: float) -> bool:
    """True for NaN estimates (empty band or no fitting window)."""
    return math.isnan(value)
