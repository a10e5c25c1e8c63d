"""Chronological splitting and sequential slice construction."""

from typing import List, Sequence, Tuple
import logging

import pandas as pd

from ..utils.error_handling import InvalidSliceError
from .structs import SliceSpec

logger = logging.getLogger(__name__)


class TimeSeriesSplitter:
    """Time-series aware splitting that never lets later rows precede earlier ones."""

    def train_test_split(
        self,
        df: pd.DataFrame,
        test_fraction: float = 0.2,
    ) -> Tuple[pd.DataFrame, pd.DataFrame]:
        """
        Split a dataset chronologically into a leading train part and a trailing test part.

        Args:
            df: Dataset sorted by time
            test_fraction: Proportion of rows kept for testing

        Returns:
            Tuple of (train_df, test_df)
        """
        if not 0.0 < test_fraction < 1.0:
            raise ValueError(f"test_fraction must be in (0, 1), got {test_fraction}")

        n = len(df)
        train_end = int(round(n * (1.0 - test_fraction)))
        if train_end == 0 or train_end == n:
            raise ValueError(
                f"test_fraction={test_fraction} leaves an empty split for {n} rows"
            )

        logger.info(f"Chronological split: {train_end} train rows, {n - train_end} test rows")
        return df.iloc[:train_end], df.iloc[train_end:]

    def sequential_slices(
        self,
        n_rows: int,
        n_slices: int = 5,
        slice_size: int = 200,
        train_size: int = 150,
        start: int = 0,
    ) -> List[SliceSpec]:
        """
        Lay out back-to-back slices, each split into a fixed training head and holdout tail.

        Args:
            n_rows: Number of rows available
            n_slices: Number of slices
            slice_size: Rows per slice
            train_size: Leading rows of each slice used for training
            start: First row of the first slice

        Returns:
            List of SliceSpec in temporal order
        """
        if n_slices < 1:
            raise InvalidSliceError(f"n_slices must be at least 1, got {n_slices}")
        if not 0 < train_size < slice_size:
            raise InvalidSliceError(
                f"train_size ({train_size}) must leave a non-empty holdout "
                f"in slices of {slice_size} rows"
            )

        needed = start + n_slices * slice_size
        if needed > n_rows:
            raise InvalidSliceError(
                f"{n_slices} slices of {slice_size} rows from row {start} "
                f"need {needed} rows, dataset has {n_rows}"
            )

        slices = []
        for i in range(n_slices):
            slice_start = start + i * slice_size
            slices.append(SliceSpec(
                start=slice_start,
                train_stop=slice_start + train_size,
                stop=slice_start + slice_size,
            ))
        return slices

    def validate_slices(self, slices: Sequence[SliceSpec], n_rows: int) -> None:
        """
        Check every slice is well formed and that no two slices overlap.

        Raises:
            InvalidSliceError: On the first problem found
        """
        if not slices:
            raise InvalidSliceError("At least one slice is required")

        for spec in slices:
            spec.validate(n_rows)

        ordered = sorted(slices, key=lambda s: s.start)
        for previous, current in zip(ordered, ordered[1:]):
            if current.start < previous.stop:
                raise InvalidSliceError(
                    f"Slices overlap: {previous} ends at row {previous.stop}, "
                    f"{current} starts at row {current.start}"
                )


def make_sequential_slices(
    n_rows: int,
    n_slices: int = 5,
    slice_size: int = 200,
    train_size: int = 150,
    start: int = 0,
) -> List[SliceSpec]:
    """Module-level shortcut for ``TimeSeriesSplitter().sequential_slices``."""
    return TimeSeriesSplitter().sequential_slices(
        n_rows, n_slices=n_slices, slice_size=slice_size, train_size=train_size, start=start
    )
