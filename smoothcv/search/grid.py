"""Grid-search results and the policies that pick a hyperparameter from them."""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List

import numpy as np
import pandas as pd


@dataclass(frozen=True)
class HyperparameterGridResult:
    """
    Cross-validated error for every candidate of one hyperparameter.

    Attributes:
        parameter: Hyperparameter name ('window', 'alpha')
        scores: Candidate -> mean held-out MSE, in candidate order
        fold_scores: Candidate -> held-out MSE per fold or slice
        n_rows: Candidate -> rows available after smoothing and trimming
        metadata: Search settings (folds, slices, ...)
    """
    parameter: str
    scores: Dict[Any, float]
    fold_scores: Dict[Any, List[float]] = field(default_factory=dict)
    n_rows: Dict[Any, int] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def candidates(self) -> List[Any]:
        return list(self.scores)

    def to_frame(self) -> pd.DataFrame:
        """One row per candidate with its mean MSE (and row count when known)."""
        frame = pd.DataFrame({
            self.parameter: self.candidates,
            "mse": [self.scores[c] for c in self.candidates],
        })
        if self.n_rows:
            frame["n_rows"] = [self.n_rows.get(c) for c in self.candidates]
        return frame

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "parameter": self.parameter,
            "scores": [
                {"candidate": c, "mse": s} for c, s in self.scores.items()
            ],
            "fold_scores": {str(c): s for c, s in self.fold_scores.items()},
            "n_rows": {str(c): n for c, n in self.n_rows.items()},
            "metadata": self.metadata,
        }


def select_minimum(grid: HyperparameterGridResult) -> Any:
    """Candidate with the lowest mean MSE; ties go to the earliest candidate."""
    if not grid.scores:
        raise ValueError(f"Grid for '{grid.parameter}' is empty")
    return grid.candidates[int(np.argmin([grid.scores[c] for c in grid.candidates]))]


def select_plateau(grid: HyperparameterGridResult, tolerance: float = 0.01) -> Any:
    """
    Smallest candidate whose MSE is within ``tolerance`` (relative) of the minimum.

    For moving averages this prefers shorter windows once the error curve
    flattens, which costs fewer undefined leading rows.
    """
    if tolerance < 0:
        raise ValueError(f"tolerance must be non-negative, got {tolerance}")
    best = grid.scores[select_minimum(grid)]
    threshold = best + abs(best) * tolerance
    near_best = [c for c in grid.candidates if grid.scores[c] <= threshold]
    return min(near_best)


SELECTION_POLICIES: Dict[str, Callable[..., Any]] = {
    "minimum": select_minimum,
    "plateau": select_plateau,
}
