"""Dataset construction, validation and splitting."""

from .noise import NoiseModel
from .structs import SliceSpec, validate_dataset
from .splitters import TimeSeriesSplitter, make_sequential_slices

__all__ = [
    "NoiseModel",
    "SliceSpec",
    "validate_dataset",
    "TimeSeriesSplitter",
    "make_sequential_slices",
]
