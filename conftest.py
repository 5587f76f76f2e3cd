"""Shared fixtures for the flat test_cN.py modules (offline, Agg backend)."""

from datetime import date, timedelta

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from c1_series import Observation


def make_series(closes, start=date(2020, 1, 1), step=1, volumes=None):
    """Observations with consecutive calendar dates (step days apart)."""
    if volumes is None:
        volumes = [None] * len(closes)
    return [
        Observation(timestamp=start + timedelta(days=i * step), close=float(c), volume=v)
        for i, (c, v) in enumerate(zip(closes, volumes))
    ]


@pytest.fixture
def series_factory():
    return make_series


@pytest.fixture
def daily_series():
    """~8 months of realistic daily OHLCV observations."""
    rng = np.random.default_rng(42)
    n = 240
    closes = 100.0 * np.cumprod(1 + rng.normal(0, 0.02, n))
    opens = np.roll(closes, 1)
    opens[0] = closes[0]
    highs = np.maximum(opens, closes) * (1 + rng.uniform(0, 0.01, n))
    lows = np.minimum(opens, closes) * (1 - rng.uniform(0, 0.01, n))
    volumes = rng.integers(1_000_000, 5_000_000, n)
    start = date(2023, 1, 2)
    return [
        Observation(
            timestamp=start + timedelta(days=i),
            close=float(closes[i]),
            open=float(opens[i]),
            high=float(highs[i]),
            low=float(lows[i]),
            volume=int(volumes[i]),
        )
        for i in range(n)
    ]
