"""Pytest configuration and shared fixtures."""

import pytest
import pandas as pd
import numpy as np

from smoothcv.data.noise import NoiseModel


@pytest.fixture
def small_dataset():
    """Deterministic 20-row dataset with a monotone latent predictor."""
    t = np.arange(1, 21)
    x = t / 2.0
    # Fixed zig-zag measurement noise so results are reproducible without an RNG
    noise = np.where(t % 2 == 0, 0.8, -0.8) * (1 + (t % 3) / 4)
    y = 2 + 3 * x + np.where(t % 4 < 2, 0.3, -0.3)
    return pd.DataFrame({
        "t": t,
        "x": x,
        "y": y,
        "x_noisy": x + noise,
    })


@pytest.fixture
def synthetic_dataset():
    """1000 rows of y = 2 + 3x + e with a random-walk latent x."""
    return NoiseModel(noise_variance=1.0, random_state=7).generate(1000, latent="random_walk")


@pytest.fixture
def trend_dataset():
    """600 rows with a monotone latent x observed under heavy noise."""
    return NoiseModel(noise_variance=4.0, random_state=11).generate(600, latent="trend")


@pytest.fixture
def sample_series():
    np.random.seed(42)
    return pd.Series(np.random.normal(10, 2, 50))
