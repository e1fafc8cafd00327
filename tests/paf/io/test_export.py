"""Tests for long-format peak series export."""

from pathlib import Path

import pandas as pd

from paf.analysis.pipeline import PeakSeriesSet
from paf.analysis.series import PeakPoint
from paf.io import export as mod


def _series() -> PeakSeriesSet:
    return PeakSeriesSet(
        fft_left=[PeakPoint(3.0, 20.0), PeakPoint(7.5, 21.0)],
        fft_right=[PeakPoint(3.0, 19.0)],
        welch_left=[],
        welch_right=[PeakPoint(3.0, 18.5)],
    )


def test_series_to_frame_is_long_format_in_fixed_order() -> None:
    frame = mod.series_to_frame(_series())

    assert list(frame.columns) == ["method", "channel", "time_s", "peak_db"]
    assert frame[["method", "channel"]].values.tolist() == [
        ["fft", "left"],
        ["fft", "left"],
        ["fft", "right"],
        ["welch", "right"],
    ]
    assert frame["time_s"].tolist() == [3.0, 7.5, 3.0, 3.0]


def test_series_to_frame_handles_all_empty_series() -> None:
    frame = mod.series_to_frame(PeakSeriesSet([], [], [], []))

    assert frame.empty
    assert list(frame.columns) == ["method", "channel", "time_s", "peak_db"]


def test_write_series_csv_creates_parent_dirs(tmp_path: Path) -> None:
    out = tmp_path / "nested" / "series.csv"

    written = mod.write_series_csv(_series(), out)

    assert written == out
    table = pd.read_csv(out)
    assert len(table) == 4
    assert table.loc[1, "peak_db"] == 21.0
