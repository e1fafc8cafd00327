# ==================================================================================================
#                               Spectral estimation
# ==================================================================================================
#
# Two competing estimates of the peak alpha frequency (PAF) of one channel:
#
# - `fft_peak`: one unwindowed FFT over the whole segment, zero-padded to a
#   power of two, searched in 8-13 Hz by complex magnitude.
# - `welch_peak`: Welch-averaged periodogram over Hamming-windowed,
#   overlapping sub-windows, searched in 8-12 Hz by power spectral density.
#
# `welch_peak_db` reuses the Welch accumulation on a block and reports the
# peak power in dB instead of its frequency; the sliding series are built on it.
#
# Band limits are inclusive and the first maximum (lowest frequency) wins
# ties. Degenerate cases (empty band, no sub-window fits) yield NaN, never an
# exception.

import logging
import math
from typing import Optional, Tuple

import numpy as np

from paf.analysis.parameters import SamplingParameters
from paf.constants import FFT_ALPHA_BAND_HZ, WELCH_ALPHA_BAND_HZ

logger = logging.getLogger(__name__)

DEFAULT_PARAMETERS = SamplingParameters()


# ==================================================================================================
# Windowing primitives
# ==================================================================================================

def hamming_window(n: int) -> np.ndarray:
    """
    Symmetric Hamming window `0.54 - 0.46 cos(2 pi i / (n - 1))`.

    A single-sample window is `[1.0]`.

    Usage example
    -------------
        w = hamming_window(256)
        win_power = float(np.sum(w ** 2))
    """
    if n < 1:
        raise ValueError(f"window length must be >= 1, got {n}")
    if n == 1:
        return np.ones(1)
    return np.hamming(n)


def next_pow2(n: int) -> int:
    """Smallest power of two >= n (1 for n <= 1)."""
    v = 1
    while v < n:
        v <<= 1
    return v


def samples_per_window(fs: float, seconds: float) -> int:
    """Window length in samples, truncated, at least 1."""
    return max(int(fs * seconds), 1)


def window_step(n_per_seg: int, overlap: float) -> int:
    """Hop between consecutive window starts, truncated, at least 1."""
    return max(int(n_per_seg * (1.0 - overlap)), 1)


def band_bins(n_bins: int, fs: float, nfft: int, band: Tuple[float, float]) -> np.ndarray:
    """
    Indices `i < n_bins` whose frequency `i * fs / nfft` lies in `band` (inclusive).

    Usage example
    -------------
        idx = band_bins(1024, 256.0, 2048, (8.0, 12.0))
    """
    low, high = band
    freqs = np.arange(n_bins) * fs / nfft
    return np.flatnonzero((freqs >= low) & (freqs <= high))


def band_peak_index(values: np.ndarray, fs: float, nfft: int, band: Tuple[float, float]) -> Optional[int]:
    """Index of the first maximum of `values` inside `band`, or None when the band is empty."""
    idx = band_bins(values.size, fs, nfft, band)
    if idx.size == 0:
        return None
    return int(idx[int(np.argmax(values[idx]))])


def windowed_psd(
    segment: np.ndarray,
    window: np.ndarray,
    win_power: float,
    fs: float,
    nfft: int,
) -> np.ndarray:
    """
    One-sided periodogram `|X|^2 / (fs * win_power)` over the first `nfft // 2` bins.

    Parameters
    ----------
    segment
        Samples, same length as `window`.
    window
        Tapering window.
    win_power
        Sum of squared window values.
    fs
        Sampling rate in Hz.
    nfft
        Transform size; the windowed segment is zero-padded to it.

    Usage example
    -------------
        w = hamming_window(768)
        psd = windowed_psd(x[:768], w, float(np.sum(w ** 2)), 256.0, 1024)
    """
    spec = np.fft.rfft(segment * window, n=nfft)[: nfft // 2]
    return (spec.real ** 2 + spec.imag ** 2) / (fs * win_power)


def welch_psd(data: np.ndarray, fs: float, n_per_seg: int, overlap: float) -> Tuple[Optional[np.ndarray], int]:
    """
    Welch-averaged PSD of `data` over sub-windows of `n_per_seg` samples.

    Returns
    -------
    tuple
        `(psd, nfft)`; `psd` is None when no sub-window fits in `data`.

    Usage example
    -------------
        psd, nfft = welch_psd(x, 256.0, 1536, 0.25)
    """
    data = np.asarray(data, dtype=float)
    nfft = next_pow2(n_per_seg)
    step = window_step(n_per_seg, overlap)
    window = hamming_window(n_per_seg)
    win_power = float(np.sum(window ** 2))

    acc = np.zeros(nfft // 2)
    count = 0
    offset = 0
    while offset + n_per_seg <= data.size:
        acc += windowed_psd(data[offset:offset + n_per_seg], window, win_power, fs, nfft)
        count += 1
        offset += step

    if count == 0:
        return None, nfft
    return acc / count, nfft


def power_db(value: float) -> float:
    """`10 log10(value)`; zero power maps to -inf."""
    with np.errstate(divide="ignore"):
        return float(10.0 * np.log10(value))


# ==================================================================================================
# Peak estimators
# ==================================================================================================

def fft_peak(data: np.ndarray, fs: float) -> Tuple[float, float]:
    """
    Peak alpha frequency from a single unwindowed FFT of the whole signal.

    Parameters
    ----------
    data
        Resampled channel.
    fs
        Sampling rate in Hz.

    Returns
    -------
    tuple of float
        `(peak_hz, bin_time)`. `peak_hz` is the frequency of the 8-13 Hz bin
        with the largest complex magnitude. `bin_time` is that bin index
        divided by `fs`: a bin-index artifact kept for compatibility with
        existing reports, not the time of any event in the recording.
        Both are NaN when no bin lies in the band or all magnitudes are zero.

    Usage example
    -------------
        paf_hz, _ = fft_peak(segment.left, fs)
    """
    data = np.asarray(data, dtype=float)
    n = next_pow2(data.size)
    spec = np.fft.fft(data, n=n)

    idx = band_bins(n, fs, n, FFT_ALPHA_BAND_HZ)
    if idx.size == 0:
        return math.nan, math.nan

    magnitudes = np.abs(spec[idx])
    best = int(np.argmax(magnitudes))
    if not magnitudes[best] > 0.0:
        return math.nan, math.nan

    peak_bin = int(idx[best])
    return peak_bin * fs / n, peak_bin / fs


def welch_peak(data: np.ndarray, fs: float, params: SamplingParameters = DEFAULT_PARAMETERS) -> float:
    """
    Peak alpha frequency (Hz) of the Welch-averaged PSD, searched in 8-12 Hz.

    Sub-windows are `params.window_sec` long and overlap by `params.overlap`.
    Returns NaN if no sub-window fits or no bin lies in the band.

    Usage example
    -------------
        paf_hz = welch_peak(segment.left, fs, SamplingParameters(window_sec=4.0))
    """
    n_per_seg = samples_per_window(fs, params.window_sec)
    psd, nfft = welch_psd(data, fs, n_per_seg, params.overlap)
    if psd is None:
        logger.debug("No Welch sub-window of %d samples fits in %d samples", n_per_seg, len(data))
        return math.nan

    peak = band_peak_index(psd, fs, nfft, WELCH_ALPHA_BAND_HZ)
    if peak is None:
        return math.nan
    return peak * fs / nfft


def welch_peak_db(block: np.ndarray, fs: float, sub_window_sec: float, overlap: float) -> float:
    """
    Peak alpha power (dB) of the Welch-averaged PSD of one block.

    Same accumulation as `welch_peak` with `sub_window_sec` sub-windows;
    returns `10 log10(max psd in 8-12 Hz)`, or NaN in the same degenerate cases.

    Usage example
    -------------
        db = welch_peak_db(x[0:1536], 256.0, 3.0, 0.25)
    """
    n_sub = samples_per_window(fs, sub_window_sec)
    psd, nfft = welch_psd(block, fs, n_sub, overlap)
    if psd is None:
        return math.nan

    peak = band_peak_index(psd, fs, nfft, WELCH_ALPHA_BAND_HZ)
    if peak is None:
        return math.nan
    return power_db(psd[peak])
