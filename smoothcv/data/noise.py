"""Synthetic data with a predictor observed through measurement noise."""

import logging
from typing import Optional

import numpy as np
import pandas as pd

from .structs import LATENT_COLUMN, NOISY_COLUMN, TARGET_COLUMN, TIME_COLUMN

logger = logging.getLogger(__name__)

LATENT_KINDS = ("random_walk", "trend", "sine")


class NoiseModel:
    """
    Generates a regression dataset whose predictor is only observed with noise.

    The target follows ``y_t = intercept + slope * x_t + e_t`` while the
    observed predictor is ``x_noisy_t = x_t + u_t`` with
    ``u_t ~ N(0, noise_variance)``.
    """

    def __init__(self, noise_variance: float = 1.0, random_state: Optional[int] = None):
        if noise_variance < 0:
            raise ValueError(f"noise_variance must be non-negative, got {noise_variance}")
        self.noise_variance = noise_variance
        self.random_state = random_state
        self._rng = np.random.default_rng(random_state)

    def add_noise(self, x: np.ndarray) -> np.ndarray:
        """Return ``x`` plus independent Gaussian measurement noise."""
        x = np.asarray(x, dtype=float)
        return x + self._rng.normal(0.0, np.sqrt(self.noise_variance), size=x.shape)

    def latent_signal(self, n: int, kind: str = "random_walk") -> np.ndarray:
        """
        Generate a slowly varying true predictor of length ``n``.

        Args:
            n: Number of time steps
            kind: 'random_walk', 'trend' (monotone linear) or 'sine'

        Returns:
            Latent series as a float array
        """
        t = np.arange(1, n + 1, dtype=float)
        if kind == "random_walk":
            return np.cumsum(self._rng.normal(0.0, 0.1, size=n))
        if kind == "trend":
            return t / n * 10.0
        if kind == "sine":
            return 2.0 * np.sin(2 * np.pi * t / max(n / 4, 1.0))
        raise ValueError(f"Unknown latent kind '{kind}'. Expected one of {LATENT_KINDS}")

    def generate(
        self,
        n: int,
        intercept: float = 2.0,
        slope: float = 3.0,
        error_sd: float = 1.0,
        latent: str = "random_walk",
    ) -> pd.DataFrame:
        """
        Build a dataset with columns t, x, y and x_noisy.

        Args:
            n: Number of rows
            intercept: Regression intercept
            slope: Regression slope on the true predictor
            error_sd: Standard deviation of the regression error
            latent: Kind of latent signal (see ``latent_signal``)

        Returns:
            DataFrame indexed 0..n-1 with ``t`` running 1..n
        """
        if n < 1:
            raise ValueError(f"n must be positive, got {n}")

        x = self.latent_signal(n, latent)
        y = intercept + slope * x + self._rng.normal(0.0, error_sd, size=n)
        x_noisy = self.add_noise(x)

        logger.info(
            f"Generated {n} rows (latent={latent}, noise_variance={self.noise_variance})"
        )

        return pd.DataFrame({
            TIME_COLUMN: np.arange(1, n + 1),
            LATENT_COLUMN: x,
            TARGET_COLUMN: y,
            NOISY_COLUMN: x_noisy,
        })
