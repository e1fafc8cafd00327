"""
Tabular export of peak power series.

The four series of a recording are flattened into one long-format table with
columns `method`, `channel`, `time_s`, `peak_db`, which plots directly as
time-vs-power with one line per (method, channel).
"""

from pathlib import Path

import pandas as pd

from paf.analysis.pipeline import PeakSeriesSet

SERIES_COLUMNS: tuple[str, ...] = ("method", "channel", "time_s", "peak_db")


def series_to_frame(series: PeakSeriesSet) -> pd.DataFrame:
    """
    Flatten a PeakSeriesSet into a long-format DataFrame.

    Returns
    -------
    pandas.DataFrame
        One row per point, ordered fft-left, fft-right, welch-left,
        welch-right, each in time order.

    DataFrame format example
    ------------------------
    | method | channel | time_s | peak_db |
    |--------|---------|--------|---------|
    | fft    | left    | 3.0    | 21.4    |
    | welch  | right   | 3.0    | 19.8    |

    Usage example
    -------------
        frame = series_to_frame(compute_peak_series(result, params))
    """
    records = [
        (method, channel, point.time, point.peak_db)
        for (method, channel), points in series.as_dict().items()
        for point in points
    ]
    return pd.DataFrame.from_records(records, columns=list(SERIES_COLUMNS))


def write_series_csv(series: PeakSeriesSet, output_path: Path) -> Path:
    """
    Write the long-format series table to CSV, creating parent directories.

    Usage example
    -------------
        write_series_csv(series, Path("out/session_series.csv"))
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    series_to_frame(series).to_csv(output_path, index=False)
    return output_path
