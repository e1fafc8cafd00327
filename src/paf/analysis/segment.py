# ==================================================================================================
#                         Segment trimming and spline resampling
# ==================================================================================================
#
# The first and last seconds of a headband session carry settling artifacts
# (electrode contact, movement), so they are cut before spectral analysis.
#
# The trimmed segment may still contain repeated timestamps. Each channel is
# reduced to unique, time-sorted samples and passed through a natural cubic
# spline evaluated at those same instants. This does not change the rate: it
# yields a clean, strictly ordered signal for the FFT and Welch estimators.

import logging
from dataclasses import dataclass
from typing import Tuple

import numpy as np
from scipy.interpolate import CubicSpline

from paf.constants import TRIM_SECONDS
from paf.errors import CsvFormatError

logger = logging.getLogger(__name__)


# ==================================================================================================
# Types
# ==================================================================================================

@dataclass(frozen=True, slots=True)
class ResampledSegment:
    """
    Clean two-channel signal on unique, increasing timestamps.

    Parameters
    ----------
    times
        Unique timestamps in seconds, strictly increasing.
    left
        Spline-evaluated left channel, one value per timestamp.
    right
        Spline-evaluated right channel, one value per timestamp.

    Usage example
    -------------
        segment = resample_channels(t_seg, left_seg, right_seg)
        print(segment.duration)
    """

    times: np.ndarray
    left: np.ndarray
    right: np.ndarray

    @property
    def duration(self) -> float:
        """Last minus first unique timestamp, in seconds."""
        return float(self.times[-1] - self.times[0])


# ==================================================================================================
# Helpers
# ==================================================================================================

def _unique_first_sorted(times: np.ndarray) -> np.ndarray:
    """
    Indices of the first occurrence of each timestamp, ordered by time.

    `np.unique` returns first-occurrence indices for sorted unique values, so
    the result is already sorted by timestamp.
    """
    _, first_idx = np.unique(times, return_index=True)
    return first_idx


def _spline_at_knots(times: np.ndarray, values: np.ndarray) -> np.ndarray:
    """Fit a natural cubic spline and evaluate it at its own knots."""
    spline = CubicSpline(times, values, bc_type="natural")
    return spline(times)


# ==================================================================================================
# Core logic
# ==================================================================================================

def trim_segment(
    times: np.ndarray,
    left: np.ndarray,
    right: np.ndarray,
    *,
    trim_s: float = TRIM_SECONDS,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Drop the first and last `trim_s` seconds of a recording.

    Parameters
    ----------
    times
        Row-order timestamps in seconds (not deduplicated).
    left, right
        Raw channel amplitudes aligned with `times`.
    trim_s
        Seconds cut at each end.

    Returns
    -------
    tuple of np.ndarray
        `(times, left, right)` sliced to `[start, end)`, where `start` is the
        first index with `t >= t[0] + trim_s` and `end` the last index with
        `t <= t[-1] - trim_s`.

    Raises
    ------
    CsvFormatError
        If no start index exists or `end <= start`.

    Usage example
    -------------
        t_seg, l_seg, r_seg = trim_segment(times, left, right)
    """
    times = np.asarray(times, dtype=float)
    left = np.asarray(left, dtype=float)
    right = np.asarray(right, dtype=float)
    if not (times.size == left.size == right.size):
        raise ValueError(
            f"times/left/right must have equal length, got {times.size}/{left.size}/{right.size}"
        )
    if times.size == 0:
        raise CsvFormatError("Invalid interval after trimming.")

    start_candidates = np.flatnonzero(times >= times[0] + trim_s)
    end_candidates = np.flatnonzero(times <= times[-1] - trim_s)
    if start_candidates.size == 0 or end_candidates.size == 0:
        raise CsvFormatError("Invalid interval after trimming.")

    start = int(start_candidates[0])
    end = int(end_candidates[-1])
    if end <= start:
        raise CsvFormatError("Invalid interval after trimming.")

    logger.debug("Trimmed segment to rows [%d, %d)", start, end)
    return times[start:end], left[start:end], right[start:end]


def resample_channels(times: np.ndarray, left: np.ndarray, right: np.ndarray) -> ResampledSegment:
    """
    Deduplicate timestamps and spline-resample both channels at them.

    Parameters
    ----------
    times
        Trimmed timestamps, possibly with duplicates or inversions.
    left, right
        Trimmed channel amplitudes aligned with `times`.

    Returns
    -------
    ResampledSegment
        Unique sorted timestamps with both spline-evaluated channels.

    Raises
    ------
    CsvFormatError
        If fewer than two unique timestamps remain.

    Notes
    -----
    For a repeated timestamp the amplitude of its first row is kept.

    Usage example
    -------------
        segment = resample_channels(t_seg, l_seg, r_seg)
        fft_peak(segment.left, fs)
    """
    times = np.asarray(times, dtype=float)
    left = np.asarray(left, dtype=float)
    right = np.asarray(right, dtype=float)

    keep = _unique_first_sorted(times)
    if keep.size < 2:
        raise CsvFormatError("Not enough unique segment timestamps.")

    t_unique = times[keep]
    return ResampledSegment(
        times=t_unique,
        left=_spline_at_knots(t_unique, left[keep]),
        right=_spline_at_knots(t_unique, right[keep]),
    )
