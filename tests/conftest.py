"""Shared pytest fixtures for the paf test suite.

Recordings are synthesized in memory (sine + seeded noise) in the headband
CSV layout, so tests stay fast, deterministic and independent of real files.
"""

from datetime import datetime, timedelta
from pathlib import Path
import sys
from typing import Callable, Optional, Sequence

import numpy as np
import pytest

# Ensure `import paf` resolves to the in-repo source tree during tests.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = PROJECT_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

N_FIELDS = 39


def _header() -> list[str]:
    header = [f"Col{i}" for i in range(N_FIELDS)]
    header[0] = "TimeStamp"
    header[22] = "RAW_AF7"
    header[23] = "RAW_AF8"
    header[37] = "HeadBandOn"
    return header


def build_rows(
    timestamps: Sequence[str],
    left: Sequence[float],
    right: Sequence[float],
    flags: Optional[Sequence[str]] = None,
) -> list[list[str]]:
    """Header plus one headband-layout row per sample."""
    rows = [_header()]
    for i, (ts, lv, rv) in enumerate(zip(timestamps, left, right)):
        row = [""] * N_FIELDS
        row[0] = ts
        row[22] = f"{lv:.6f}"
        row[23] = f"{rv:.6f}"
        row[37] = "1" if flags is None else flags[i]
        rows.append(row)
    return rows


def sine_channels(
    fs: float,
    duration_s: float,
    f_left: float,
    f_right: float,
    *,
    amplitude: float = 10.0,
    noise: float = 1.0,
    seed: int = 0,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Sample times plus noisy left/right sines."""
    rng = np.random.default_rng(seed)
    t = np.arange(int(round(fs * duration_s))) / fs
    left = amplitude * np.sin(2 * np.pi * f_left * t) + noise * rng.standard_normal(t.size)
    right = amplitude * np.sin(2 * np.pi * f_right * t + 0.3) + noise * rng.standard_normal(t.size)
    return t, left, right


@pytest.fixture(scope="session")
def make_channels() -> Callable[..., tuple[np.ndarray, np.ndarray, np.ndarray]]:
    """Factory for sample times plus noisy left/right sines."""
    return sine_channels


@pytest.fixture(scope="session")
def make_rows() -> Callable[..., list[list[str]]]:
    """Factory for headband-layout rows from explicit columns."""
    return build_rows


@pytest.fixture(scope="session")
def make_recording() -> Callable[..., list[list[str]]]:
    """
    Factory for a synthetic two-channel recording.

    `timestamp_style` is "seconds" (numeric, origin 0), "milliseconds"
    (numeric, origin 0) or "datetime" (local date-time strings).
    """

    def _make(
        fs: float = 256.0,
        duration_s: float = 60.0,
        f_left: float = 10.0,
        f_right: float = 9.5,
        timestamp_style: str = "seconds",
        seed: int = 0,
    ) -> list[list[str]]:
        t, left, right = sine_channels(fs, duration_s, f_left, f_right, seed=seed)
        if timestamp_style == "seconds":
            stamps = [f"{v:.8f}" for v in t]
        elif timestamp_style == "milliseconds":
            stamps = [f"{v * 1000.0:.5f}" for v in t]
        elif timestamp_style == "datetime":
            start = datetime(2024, 5, 1, 10, 0, 0)
            stamps = [
                (start + timedelta(milliseconds=int(round(v * 1000.0)))).strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
                for v in t
            ]
        else:
            raise ValueError(timestamp_style)
        return build_rows(stamps, left, right)

    return _make


@pytest.fixture(scope="session")
def write_csv() -> Callable[[Path, list[list[str]]], Path]:
    """Write rows as a plain comma-separated file."""

    def _write(path: Path, rows: list[list[str]]) -> Path:
        path.write_text("\n".join(",".join(row) for row in rows) + "\n", encoding="utf-8")
        return path

    return _write
