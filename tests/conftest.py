'''
Pytest configuration and fixtures for the macropost test suite.

Provides seeded data generators, a small macro table shaped like a forecast
output, and an isolated configuration manager for every test so that user
configuration files and environment variables never leak into results.
'''

import os
from typing import Dict

import matplotlib
matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from macropost.core import config as config_module


# ---- Configuration isolation ----

@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch) -> config_module.ConfigManager:
    """Give every test a fresh configuration manager with no user file."""
    for env_var in list(os.environ):
        if env_var.startswith(config_module.CONFIG_ENV_PREFIX):
            monkeypatch.delenv(env_var, raising=False)
    monkeypatch.setenv(config_module.USER_CONFIG_DIR_ENV, str(tmp_path / "config"))
    manager = config_module.ConfigManager()
    monkeypatch.setattr(config_module, "_config_manager", manager)
    return manager


# ---- Basic Data Generation Fixtures ----

@pytest.fixture
def rng() -> np.random.Generator:
    """Provide a seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def sample_size() -> int:
    """Default sample size for test data."""
    return 120


@pytest.fixture
def quarterly_index(sample_size: int) -> pd.DatetimeIndex:
    """Quarter-end dates starting in 1990."""
    return pd.date_range(start="1990-03-31", periods=sample_size, freq="QE")


@pytest.fixture
def trending_series(rng: np.random.Generator, sample_size: int) -> np.ndarray:
    """Log-level style series: linear trend plus a cycle plus noise."""
    t = np.arange(sample_size)
    trend = 100 + 0.5 * t
    cycle = 2.0 * np.sin(2 * np.pi * t / 24)
    noise = rng.standard_normal(sample_size) * 0.3
    return trend + cycle + noise


@pytest.fixture
def macro_table(rng: np.random.Generator, sample_size: int,
                quarterly_index: pd.DatetimeIndex) -> pd.DataFrame:
    """Table of aligned macro series named by their FRED mnemonics."""
    t = np.arange(sample_size)
    population = 180_000 * np.exp(0.003 * t)
    gdp_deflator = 60 * np.exp(0.006 * t + 0.001 * rng.standard_normal(sample_size))
    pce_deflator = 62 * np.exp(0.005 * t + 0.001 * rng.standard_normal(sample_size))
    nominal_gdp = 6_000 * np.exp(0.012 * t + 0.005 * rng.standard_normal(sample_size))
    unfiltered_growth = 0.003 + 0.0005 * rng.standard_normal(sample_size)
    filtered_growth = np.full(sample_size, 0.003)

    data: Dict[str, np.ndarray] = {
        "GDP": nominal_gdp,
        "CNP16OV": population,
        "GDPCTPI": gdp_deflator,
        "PCEPILFE": pce_deflator,
        "unfiltered_population_growth": unfiltered_growth,
        "filtered_population_growth": filtered_growth,
    }
    return pd.DataFrame(data, index=quarterly_index)


@pytest.fixture
def reference_series() -> np.ndarray:
    """Short quarterly series with a known smooth upward trend."""
    return np.array([100.0, 102.0, 101.0, 105.0, 108.0, 107.0, 110.0])
