# ==================================================================================================
#                           Time-resolved peak power series
# ==================================================================================================
#
# Slides a window of `window_sec` over a resampled channel and reports, per
# window, the peak alpha power in dB at the window centre:
#
# - `sliding_fft_peak_series`: one Hamming-windowed periodogram per window.
# - `welch_peak_series`: a Welch average over `sub_window_sec` sub-windows
#   inside each window.
#
# Both emit points at `(start + n // 2) / fs`, so consecutive times differ by
# exactly `step / fs`.

import enum
import logging
import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np

from paf.analysis.parameters import SamplingParameters
from paf.analysis.spectral import (
    DEFAULT_PARAMETERS,
    band_peak_index,
    hamming_window,
    next_pow2,
    power_db,
    samples_per_window,
    welch_peak_db,
    window_step,
    windowed_psd,
)
from paf.constants import WELCH_ALPHA_BAND_HZ

logger = logging.getLogger(__name__)


# ==================================================================================================
# Types
# ==================================================================================================

@dataclass(frozen=True, slots=True)
class PeakPoint:
    """
    One sample of a peak power series.

    Parameters
    ----------
    time
        Window centre in seconds from the start of the resampled segment.
    peak_db
        Peak alpha power in dB.
    """

    time: float
    peak_db: float


class ScanStep(enum.Enum):
    """Outcome of one window of the sliding FFT scan."""

    CONTINUE = "continue"
    STOP = "stop"


# ==================================================================================================
# Helpers
# ==================================================================================================

def _fft_window_peak(
    data: np.ndarray,
    start: int,
    window: np.ndarray,
    win_power: float,
    fs: float,
    nfft: int,
) -> Tuple[ScanStep, float]:
    """Peak dB of one sliding FFT window, or STOP when the band holds no bin."""
    segment = data[start:start + window.size]
    psd = windowed_psd(segment, window, win_power, fs, nfft)
    peak = band_peak_index(psd, fs, nfft, WELCH_ALPHA_BAND_HZ)
    if peak is None:
        return ScanStep.STOP, math.nan
    return ScanStep.CONTINUE, power_db(psd[peak])


# ==================================================================================================
# Core logic
# ==================================================================================================

def sliding_fft_peak_series(
    data: np.ndarray,
    fs: float,
    params: SamplingParameters = DEFAULT_PARAMETERS,
) -> List[PeakPoint]:
    """
    Peak power series from single-window periodograms.

    Parameters
    ----------
    data
        Resampled channel.
    fs
        Sampling rate in Hz.
    params
        `window_sec` sets the window length, `overlap` the hop.

    Returns
    -------
    list[PeakPoint]
        One point per full window, in time order. If a window has no
        frequency bin in 8-12 Hz the scan ends there and the points gathered
        so far are returned.

    Usage example
    -------------
        series = sliding_fft_peak_series(result.raw_left, result.fs, params)
    """
    data = np.asarray(data, dtype=float)
    n_per_seg = samples_per_window(fs, params.window_sec)
    nfft = next_pow2(n_per_seg)
    step = window_step(n_per_seg, params.overlap)
    window = hamming_window(n_per_seg)
    win_power = float(np.sum(window ** 2))

    series: List[PeakPoint] = []
    start = 0
    while start + n_per_seg <= data.size:
        outcome, peak_db = _fft_window_peak(data, start, window, win_power, fs, nfft)
        if outcome is ScanStep.STOP:
            logger.info("Sliding FFT scan stopped at sample %d: no bin in alpha band", start)
            break
        series.append(PeakPoint(time=(start + n_per_seg // 2) / fs, peak_db=peak_db))
        start += step
    return series


def welch_peak_series(
    data: np.ndarray,
    fs: float,
    params: SamplingParameters = DEFAULT_PARAMETERS,
) -> List[PeakPoint]:
    """
    Peak power series from Welch averages inside each sliding window.

    Each `window_sec` block is split into `sub_window_sec` sub-windows with
    `overlap`; the block's peak is `welch_peak_db` of those sub-windows. The
    point is NaN when no sub-window fits in a block.

    Usage example
    -------------
        series = welch_peak_series(result.raw_right, result.fs, params)
    """
    data = np.asarray(data, dtype=float)
    n_window = samples_per_window(fs, params.window_sec)
    step = window_step(n_window, params.overlap)

    series: List[PeakPoint] = []
    start = 0
    while start + n_window <= data.size:
        block = data[start:start + n_window]
        peak_db = welch_peak_db(block, fs, params.sub_window_sec, params.overlap)
        series.append(PeakPoint(time=(start + n_window // 2) / fs, peak_db=peak_db))
        start += step
    return series


def peak_time(series: Sequence[PeakPoint]) -> float:
    """
    Time of the highest-power point of a series (first one on ties), NaN if empty.

    Usage example
    -------------
        t = peak_time(welch_peak_series(x, fs))
    """
    best = None
    for point in series:
        if best is None or point.peak_db > best.peak_db:
            best = point
    return math.nan if best is None else best.time
