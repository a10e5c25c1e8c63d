"""Smoothing a noisy predictor and cross-validating the smoother's hyperparameter."""

from smoothcv.data import NoiseModel, SliceSpec, TimeSeriesSplitter, make_sequential_slices
from smoothcv.evaluation import RegressionEvaluator
from smoothcv.search import (
    HyperparameterGridResult,
    KFoldWindowSearch,
    SequentialSliceSearch,
    select_minimum,
    select_plateau,
)
from smoothcv.smoothing import (
    ExponentialFit,
    ExponentialSmoother,
    MovingAverageFilter,
    SmootherState,
    moving_average,
)
from smoothcv.utils.error_handling import (
    EmptySeriesError,
    InsufficientDataError,
    InvalidAlphaError,
    InvalidSliceError,
    InvalidWindowError,
    SmoothingError,
)

__version__ = "0.1.0"

__all__ = [
    "NoiseModel",
    "SliceSpec",
    "TimeSeriesSplitter",
    "make_sequential_slices",
    "RegressionEvaluator",
    "HyperparameterGridResult",
    "KFoldWindowSearch",
    "SequentialSliceSearch",
    "select_minimum",
    "select_plateau",
    "ExponentialFit",
    "ExponentialSmoother",
    "MovingAverageFilter",
    "SmootherState",
    "moving_average",
    "EmptySeriesError",
    "InsufficientDataError",
    "InvalidAlphaError",
    "InvalidSliceError",
    "InvalidWindowError",
    "SmoothingError",
]
