"""Fixed-window moving-average smoothing."""

import logging
from typing import Optional

import pandas as pd

from ..utils.error_handling import EmptySeriesError, InvalidWindowError

logger = logging.getLogger(__name__)

MODES = ("backward", "centered")


def moving_average(
    series: pd.Series,
    window: int,
    mode: str = "backward",
) -> pd.Series:
    """
    Unweighted moving average of ``window`` consecutive values.

    backward: position i averages ``series[i-window+1 .. i]``; the first
    ``window-1`` positions are NaN.
    centered: position i averages ``series[i-window//2 .. i+ceil(window/2)-1]``;
    positions where that span runs off either end are NaN.

    Args:
        series: Input series (index is preserved)
        window: Number of values per average
        mode: 'backward' or 'centered'

    Returns:
        Series of the same length and index as ``series``

    Raises:
        EmptySeriesError: If ``series`` is empty
        InvalidWindowError: If ``window < 1`` or ``window > len(series)``
    """
    if mode not in MODES:
        raise ValueError(f"Unknown moving-average mode '{mode}'. Expected one of {MODES}")

    series = pd.Series(series, dtype=float)
    if len(series) == 0:
        raise EmptySeriesError("Cannot smooth an empty series")
    if window < 1 or window > len(series):
        raise InvalidWindowError(
            f"Window {window} is invalid for a series of length {len(series)}",
            candidate=window,
        )

    # min_periods=window keeps partial windows undefined instead of shrinking them
    return series.rolling(
        window=window, min_periods=window, center=(mode == "centered")
    ).mean()


class MovingAverageFilter:
    """Moving-average smoother bound to a window and mode."""

    def __init__(self, window: int, mode: str = "backward"):
        self.window = window
        self.mode = mode

    def transform(self, series: pd.Series) -> pd.Series:
        return moving_average(series, self.window, self.mode)

    def add_column(
        self,
        df: pd.DataFrame,
        source: str,
        name: Optional[str] = None,
    ) -> pd.DataFrame:
        """
        Return a copy of ``df`` with the smoothed ``source`` column added.

        Args:
            df: Dataset (left untouched)
            source: Column to smooth
            name: Output column; defaults to '<source>_ma<window>'

        Returns:
            New DataFrame including the smoothed column
        """
        name = name or f"{source}_ma{self.window}"
        result = df.copy()
        result[name] = self.transform(df[source])
        return result
