"""Core data structures for smoothing experiments."""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Tuple
import pandas as pd

from ..utils.error_handling import EmptySeriesError, InvalidSliceError

TIME_COLUMN = "t"
TARGET_COLUMN = "y"
LATENT_COLUMN = "x"
NOISY_COLUMN = "x_noisy"

REQUIRED_COLUMNS = (TIME_COLUMN, TARGET_COLUMN, NOISY_COLUMN)


def validate_dataset(df: pd.DataFrame, required: Iterable[str] = REQUIRED_COLUMNS) -> None:
    """
    Check that a dataset has the required columns and a strictly increasing time column.

    Args:
        df: Dataset with one row per time step
        required: Column names that must be present

    Raises:
        EmptySeriesError: If the dataset has no rows
        ValueError: If a column is missing or ``t`` is not strictly increasing
    """
    missing = [col for col in required if col not in df.columns]
    if missing:
        raise ValueError(f"Dataset is missing required columns: {missing}")

    if len(df) == 0:
        raise EmptySeriesError("Dataset has no rows")

    if TIME_COLUMN in df.columns and not (df[TIME_COLUMN].diff().dropna() > 0).all():
        raise ValueError(f"Column '{TIME_COLUMN}' must be strictly increasing")


@dataclass(frozen=True)
class SliceSpec:
    """
    A contiguous slice of positional rows split into training and holdout parts.

    Training rows are ``[start, train_stop)`` and holdout rows are
    ``[train_stop, stop)``, so the holdout always follows training in time.
    """
    start: int
    train_stop: int
    stop: int

    @property
    def train_size(self) -> int:
        return self.train_stop - self.start

    @property
    def holdout_size(self) -> int:
        return self.stop - self.train_stop

    def validate(self, n_rows: int) -> None:
        """Raise InvalidSliceError if either part is empty or out of bounds."""
        if self.start < 0:
            raise InvalidSliceError(f"Slice {self} starts before row 0")
        if self.train_size <= 0:
            raise InvalidSliceError(f"Slice {self} has an empty training range")
        if self.holdout_size <= 0:
            raise InvalidSliceError(f"Slice {self} has an empty holdout range")
        if self.stop > n_rows:
            raise InvalidSliceError(
                f"Slice {self} runs past the end of the dataset ({n_rows} rows)"
            )

    def split(self, df: pd.DataFrame) -> Tuple[pd.DataFrame, pd.DataFrame]:
        """Return (train_df, holdout_df) views of ``df``."""
        return df.iloc[self.start:self.train_stop], df.iloc[self.train_stop:self.stop]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"start": self.start, "train_stop": self.train_stop, "stop": self.stop}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SliceSpec":
        """Create from dictionary."""
        return cls(start=data["start"], train_stop=data["train_stop"], stop=data["stop"])
