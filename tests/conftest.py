"""Shared fixtures for the ordered binning tests."""

import numpy as np
import pytest

from ordered_binning.core.config import CONFIG_ENV_VAR
from ordered_binning.core.ordered_bins import ordered_bins


@pytest.fixture(autouse=True)
def _no_config_env(monkeypatch):
    """Keep a developer's config override out of the tests."""
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def strict_bins():
    """Bins 0..3 with the default configuration."""
    return ordered_bins(range(4))


@pytest.fixture
def lenient_bins():
    """Bins 0..3 breaking ties left, with asymmetric halos and sentinels."""
    return ordered_bins(
        range(4),
        "left",
        halo_below=0.5,
        error_below=False,
        halo_above=2,
        error_above=False,
    )


def random_values(rng, n=100):
    """Mix of exact boundary hits and uniform draws over [0, 3]."""
    return [
        int(rng.integers(0, 4)) if rng.random() < 0.5 else float(rng.random() * 3.0)
        for _ in range(n)
    ]
