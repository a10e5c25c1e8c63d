"""Hyperparameter grid searches for the two smoothing families."""

from .grid import (
    SELECTION_POLICIES,
    HyperparameterGridResult,
    select_minimum,
    select_plateau,
)
from .kfold_window import KFoldWindowSearch
from .sequential_slice import SequentialSliceSearch

__all__ = [
    "SELECTION_POLICIES",
    "HyperparameterGridResult",
    "select_minimum",
    "select_plateau",
    "KFoldWindowSearch",
    "SequentialSliceSearch",
]
