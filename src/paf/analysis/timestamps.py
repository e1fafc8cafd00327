# ==================================================================================================
#                   Timestamp normalization and sampling-rate estimation
# ==================================================================================================
#
# Headband exports carry timestamps either as numbers (seconds or
# milliseconds, origin arbitrary) or as local date-time strings
# ("YYYY-MM-DD HH:MM:SS.mmm"). Both are normalized to float seconds here.
#
# The sampling rate is never read from the file: it is inferred from the
# median positive delta between unique sorted timestamps, which tolerates
# repeated rows and occasional out-of-order samples.

import logging
import re
from datetime import datetime
from typing import Sequence

import numpy as np

from paf.constants import DATETIME_FORMAT
from paf.errors import CsvFormatError

logger = logging.getLogger(__name__)

# ==================================================================================================
# Constants
# ==================================================================================================

NUMERIC_TIMESTAMP_PATTERN = re.compile(r"[-\d.]+")
# Fixed millisecond precision; `%f` alone would also take 1-6 fractional digits.
DATETIME_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\.\d{3}")

# A first-pair delta in (0, MS_DELTA_THRESHOLD] marks the column as milliseconds.
MS_DELTA_THRESHOLD: float = 0.01
MS_PER_SECOND: float = 1000.0


# ==================================================================================================
# Helpers
# ==================================================================================================

def infer_millisecond_scale(values: np.ndarray) -> bool:
    """
    Decide whether numeric timestamps are milliseconds.

    Parameters
    ----------
    values
        Parsed numeric timestamps, at least two.

    Returns
    -------
    bool
        True when the delta between the first two values lies in (0, 0.01].

    Notes
    -----
    Only the first pair is inspected. The threshold is kept for compatibility
    with existing exports; it classifies second-based recordings sampled above
    100 Hz as milliseconds, so callers that know the unit should pass it
    explicitly to `parse_timestamps`.

    Usage example
    -------------
        if infer_millisecond_scale(np.array([0.0, 0.004])):
            print("milliseconds")
    """
    delta = float(values[1] - values[0])
    return 0.0 < delta <= MS_DELTA_THRESHOLD


def _parse_numeric(raw: Sequence[str]) -> np.ndarray:
    """Parse a numeric timestamp column."""
    try:
        return np.array([float(value) for value in raw], dtype=float)
    except ValueError as exc:
        raise CsvFormatError(f"Invalid numeric timestamp: {exc}") from exc


def _parse_datetimes(raw: Sequence[str]) -> np.ndarray:
    """Parse local date-time strings into seconds relative to the first one."""
    epoch_ms = np.empty(len(raw), dtype=np.int64)
    for i, value in enumerate(raw):
        if not DATETIME_PATTERN.fullmatch(value.strip()):
            raise CsvFormatError(f"Invalid timestamp {value!r}: expected YYYY-MM-DD HH:MM:SS.mmm")
        try:
            stamp = datetime.strptime(value.strip(), DATETIME_FORMAT)
        except ValueError as exc:
            raise CsvFormatError(f"Invalid timestamp {value!r}: {exc}") from exc
        # Naive datetimes are interpreted in the local time zone.
        whole_seconds = int(stamp.replace(microsecond=0).timestamp())
        epoch_ms[i] = whole_seconds * 1000 + stamp.microsecond // 1000
    return (epoch_ms - epoch_ms[0]) / MS_PER_SECOND


# ==================================================================================================
# Core logic
# ==================================================================================================

def parse_timestamps(raw: Sequence[str], *, unit: str = "auto") -> np.ndarray:
    """
    Normalize a raw timestamp column to float seconds.

    Parameters
    ----------
    raw
        Non-blank timestamp strings in original row order.
    unit
        "auto" applies `infer_millisecond_scale` to numeric columns; "s" and
        "ms" force the unit. Date-time strings ignore this argument.

    Returns
    -------
    np.ndarray
        Seconds, one per input value, in input order. Duplicates and
        inversions are preserved.

    Raises
    ------
    CsvFormatError
        If fewer than two values are given or a value cannot be parsed.

    Usage example
    -------------
        times = parse_timestamps(["2024-05-01 10:00:00.000", "2024-05-01 10:00:00.004"])
    """
    if len(raw) < 2:
        raise CsvFormatError("Need at least two timestamps.")
    if unit not in ("auto", "s", "ms"):
        raise ValueError(f"unit must be 'auto', 's' or 'ms', got {unit!r}")

    if not NUMERIC_TIMESTAMP_PATTERN.fullmatch(raw[0].strip()):
        return _parse_datetimes(raw)

    values = _parse_numeric(raw)
    if unit == "ms" or (unit == "auto" and infer_millisecond_scale(values)):
        logger.debug("Numeric timestamps interpreted as milliseconds")
        return values / MS_PER_SECOND
    return values


def estimate_sampling_interval(times: np.ndarray) -> float:
    """
    Median positive delta between unique sorted timestamps.

    Parameters
    ----------
    times
        Full (untrimmed) timestamp sequence in seconds.

    Returns
    -------
    float
        Canonical sampling interval `dt` in seconds.

    Raises
    ------
    CsvFormatError
        If fewer than two unique timestamps exist or no delta is positive.

    Usage example
    -------------
        dt = estimate_sampling_interval(np.arange(100) / 256.0)
    """
    unique_sorted = np.unique(np.asarray(times, dtype=float))
    if unique_sorted.size < 2:
        raise CsvFormatError("Not enough unique timestamps.")

    deltas = np.diff(unique_sorted)
    deltas = deltas[deltas > 0.0]
    if deltas.size == 0:
        raise CsvFormatError("Cannot estimate sampling rate.")

    return float(np.median(deltas))


def estimate_sample_rate(times: np.ndarray) -> float:
    """
    Effective sampling rate `1 / dt` in Hz.

    Usage example
    -------------
        fs = estimate_sample_rate(times)
    """
    dt = estimate_sampling_interval(times)
    fs = 1.0 / dt
    logger.info("Estimated sampling rate %.3f Hz (dt=%.6f s)", fs, dt)
    return fs
