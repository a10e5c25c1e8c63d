"""Moving-average and exponential smoothers."""

from .moving_average import MovingAverageFilter, moving_average
from .exponential import (
    ExponentialFit,
    ExponentialSmoother,
    SmootherState,
    smooth_with_level,
)

__all__ = [
    "MovingAverageFilter",
    "moving_average",
    "ExponentialFit",
    "ExponentialSmoother",
    "SmootherState",
    "smooth_with_level",
]
