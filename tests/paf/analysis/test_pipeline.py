"""End-to-end tests for the PAF pipeline on synthetic recordings."""

from concurrent.futures import ThreadPoolExecutor
import math

import numpy as np
import pytest

from paf.analysis import pipeline as mod
from paf.analysis.parameters import SamplingParameters
from paf.analysis.series import PeakPoint
from paf.errors import CsvFormatError

WELCH_BIN_256 = 256.0 / 2048


@pytest.fixture(scope="module")
def seconds_rows(make_recording) -> list[list[str]]:  # noqa: ANN001
    """60 s at 256 Hz: left 10 Hz, right 9.5 Hz, numeric seconds from 0."""
    return make_recording(fs=256.0, duration_s=60.0, f_left=10.0, f_right=9.5, timestamp_style="seconds")


@pytest.fixture(scope="module")
def seconds_result(seconds_rows) -> mod.PafResult:  # noqa: ANN001
    return mod.analyze(seconds_rows, SamplingParameters(), timestamp_unit="s")


def test_end_to_end_estimates(seconds_result) -> None:  # noqa: ANN001
    res = seconds_result
    fft_bin = 256.0 / 16384

    assert res.fs == pytest.approx(256.0)
    assert res.welch_left == pytest.approx(10.0, abs=WELCH_BIN_256)
    assert res.welch_right == pytest.approx(9.5, abs=WELCH_BIN_256)
    assert res.fft_left == pytest.approx(10.0, abs=fft_bin)
    assert res.fft_right == pytest.approx(9.5, abs=fft_bin)
    assert res.welch_mean == pytest.approx((res.welch_left + res.welch_right) / 2)
    assert res.welch_median == res.welch_mean
    assert res.fft_median == res.fft_mean


def test_end_to_end_segment_is_trimmed_middle(seconds_result) -> None:  # noqa: ANN001
    res = seconds_result

    # Rows at 10.0 s .. 49.996 s (exclusive end) survive trimming.
    assert res.raw_left.size == 10239
    assert res.raw_right.size == 10239
    assert res.duration == pytest.approx(10238 / 256.0)


def test_resampled_channels_are_read_only(seconds_result) -> None:  # noqa: ANN001
    with pytest.raises(ValueError):
        seconds_result.raw_left[0] = 0.0


def test_fft_time_is_bin_index_over_fs(seconds_result) -> None:  # noqa: ANN001
    res = seconds_result
    n = 16384

    assert res.fft_time_left == pytest.approx(res.fft_left * n / 256.0 / 256.0)


def test_peak_series_cover_trimmed_segment(seconds_result) -> None:  # noqa: ANN001
    res = seconds_result
    series = mod.compute_peak_series(res, SamplingParameters())

    for points in series.as_dict().values():
        assert points
        times = [p.time for p in points]
        assert times == sorted(times)
        assert times[0] >= 0.0
        assert times[-1] <= res.duration
    # Peak power sits at the alpha tone: tens of dB above the noise floor.
    assert min(p.peak_db for p in series.welch_left) > 10.0


def test_auto_unit_misreads_fast_second_timestamps(seconds_rows) -> None:  # noqa: ANN001
    """First delta 1/256 s falls in the millisecond window; the 60 ms 'recording' cannot be trimmed."""
    with pytest.raises(CsvFormatError, match="Invalid interval after trimming"):
        mod.analyze(seconds_rows)


def test_millisecond_timestamps(make_recording) -> None:  # noqa: ANN001
    rows = make_recording(timestamp_style="milliseconds")

    res = mod.analyze(rows, timestamp_unit="ms")

    assert res.fs == pytest.approx(256.0)
    assert res.welch_left == pytest.approx(10.0, abs=WELCH_BIN_256)


def test_datetime_timestamps(make_recording) -> None:  # noqa: ANN001
    rows = make_recording(fs=250.0, timestamp_style="datetime")

    res = mod.analyze(rows)

    assert res.fs == pytest.approx(250.0)
    assert res.welch_left == pytest.approx(10.0, abs=250.0 / 2048)
    assert res.welch_right == pytest.approx(9.5, abs=250.0 / 2048)


def test_header_only_input_is_empty_dataset(make_rows) -> None:  # noqa: ANN001
    with pytest.raises(CsvFormatError, match="Empty CSV"):
        mod.analyze(make_rows([], [], []))


def test_rows_with_device_off_are_ignored(make_rows, make_channels) -> None:  # noqa: ANN001
    t, left, right = make_channels(128.0, 50.0, 10.0, 10.0)
    flags = ["0" if v < 5.0 else "1" for v in t]
    rows = make_rows([f"{v:.8f}" for v in t], left, right, flags)

    res = mod.analyze(rows, timestamp_unit="s")

    assert res.fs == pytest.approx(128.0)
    assert res.welch_left == pytest.approx(10.0, abs=128.0 / 1024)


def test_blank_timestamps_are_dropped_with_their_rows(make_rows, make_channels) -> None:  # noqa: ANN001
    t, left, right = make_channels(128.0, 40.0, 10.0, 10.0)
    stamps = ["" if i == 5 else f"{v:.8f}" for i, v in enumerate(t)]

    res = mod.analyze(make_rows(stamps, left, right), timestamp_unit="s")

    assert res.fs == pytest.approx(128.0)


def test_non_numeric_amplitude_raises(make_rows) -> None:  # noqa: ANN001
    rows = make_rows([f"{i * 0.1:.1f}" for i in range(400)], [0.0] * 400, [0.0] * 400)
    rows[3][22] = "abc"

    with pytest.raises(CsvFormatError, match="Invalid amplitude"):
        mod.analyze(rows, timestamp_unit="s")


@pytest.mark.parametrize("value", ["nan", "inf", "-inf"])
def test_non_finite_amplitude_raises(make_recording, value: str) -> None:  # noqa: ANN001
    rows = make_recording(duration_s=30.0)
    rows[3000][22] = value

    with pytest.raises(CsvFormatError, match="Non-finite amplitude in column 22"):
        mod.analyze(rows, timestamp_unit="s")


def test_short_recording_fails_trimming(make_recording) -> None:  # noqa: ANN001
    rows = make_recording(duration_s=15.0)

    with pytest.raises(CsvFormatError, match="Invalid interval after trimming"):
        mod.analyze(rows, timestamp_unit="s")


def test_all_identical_timestamps_raise(make_rows) -> None:  # noqa: ANN001
    rows = make_rows(["5.0"] * 10, [1.0] * 10, [1.0] * 10)

    with pytest.raises(CsvFormatError, match="Not enough unique timestamps"):
        mod.analyze(rows)


def test_concurrent_analyses_with_different_parameters(seconds_rows) -> None:  # noqa: ANN001
    """Parameters are per call: parallel runs match their sequential counterparts."""
    settings = [SamplingParameters(window_sec=w) for w in (2.0, 4.0, 6.0, 8.0)]
    expected = [mod.analyze(seconds_rows, p, timestamp_unit="s").welch_left for p in settings]

    with ThreadPoolExecutor(max_workers=4) as pool:
        got = list(pool.map(lambda p: mod.analyze(seconds_rows, p, timestamp_unit="s").welch_left, settings))

    assert got == expected


# ==================================================================================================
# Aggregation and formatting
# ==================================================================================================

def _result(**overrides) -> mod.PafResult:  # noqa: ANN003
    fields = dict(
        fs=256.0,
        duration=39.99,
        fft_left=10.04,
        fft_right=9.46,
        fft_mean=9.75,
        fft_median=9.75,
        fft_time_left=9.8,
        fft_time_right=9.2,
        welch_left=10.0,
        welch_right=9.5,
        welch_mean=9.75,
        welch_median=9.75,
        raw_left=np.zeros(4),
        raw_right=np.zeros(4),
    )
    fields.update(overrides)
    return mod.PafResult(**fields)


def test_two_channel_median_equals_mean() -> None:
    assert mod.two_channel_mean(9.0, 10.0) == 9.5
    assert mod.two_channel_median(9.0, 10.0) == 9.5


def test_format_uses_one_decimal() -> None:
    text = _result().format()

    assert text.splitlines() == [
        "fs=256.0 Hz, dur=40.0s",
        "Welch PAF: L=10.0 R=9.5 mean=9.8",
        "FFT PAF:   L=10.0 R=9.5 mean=9.8",
    ]


def test_format_shows_nan_for_undetermined_estimates() -> None:
    text = _result(welch_left=math.nan).format()

    assert "L=nan" in text
    assert mod.is_undetermined(math.nan)
    assert not mod.is_undetermined(10.0)


def test_peak_note_reports_series_maxima_and_parameters() -> None:
    series = mod.PeakSeriesSet(
        fft_left=[PeakPoint(3.0, 10.0), PeakPoint(7.5, 12.0)],
        fft_right=[PeakPoint(3.0, 11.0)],
        welch_left=[],
        welch_right=[PeakPoint(3.0, 9.0), PeakPoint(7.5, 8.0)],
    )

    note = mod.format_peak_note(_result(), series, SamplingParameters(overlap=0.5))

    lines = note.splitlines()
    assert lines[0] == "Welch PAF: L=10.0 Hz @ nan s, R=9.5 Hz @ 3.00 s."
    assert lines[1] == "FFT PAF:   L=10.0 Hz @ 7.50 s, R=9.5 Hz @ 3.00 s."
    assert "overlap=50%" in lines[2]
