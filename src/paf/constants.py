# ==================================================================================================
#                                   Constants
# ==================================================================================================
#
# Fixed recording layout and alpha search bands shared by the analysis modules.
# Defining them once here prevents the FFT and Welch paths from drifting apart.

from typing import Final, Tuple

# Headband CSV layout (0-indexed field positions).
TIMESTAMP_COLUMN: Final[int] = 0
LEFT_CHANNEL_COLUMN: Final[int] = 22
RIGHT_CHANNEL_COLUMN: Final[int] = 23
VALIDITY_COLUMN: Final[int] = 37
VALIDITY_FLAG_ON: Final[str] = "1"

# Settling artifacts at both ends of a recording.
TRIM_SECONDS: Final[float] = 10.0

# 8-13 Hz: single-window FFT search band.
FFT_ALPHA_BAND_HZ: Final[Tuple[float, float]] = (8.0, 13.0)
# 8-12 Hz: Welch and sliding-series search band.
WELCH_ALPHA_BAND_HZ: Final[Tuple[float, float]] = (8.0, 12.0)

DATETIME_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S.%f"
