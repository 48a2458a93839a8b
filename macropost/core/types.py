# macropost/core/types.py

"""
Core type annotations and enumerations for macropost.

Series arguments are accepted either as one-dimensional NumPy arrays or as
pandas Series; tables are pandas DataFrames (or plain mappings of column name
to series). The enumerations below replace string-keyed lookups of data
mnemonics so that the choice of deflator or population measure is made once
by the caller rather than inside each transform.
"""

from enum import Enum
from pathlib import Path
from typing import Dict, Literal, Mapping, Sequence, Tuple, Union

import numpy as np
import pandas as pd

# NumPy array type aliases
Vector = np.ndarray  # 1D array

# Series and table types
SeriesLike = Union[np.ndarray, pd.Series, Sequence[float]]
Series = Union[np.ndarray, pd.Series]
Table = Union[pd.DataFrame, Mapping[str, SeriesLike]]

# Result of a trend-cycle decomposition
TrendCycle = Tuple[Series, Series]

# Solver names for the trend filter
SolverType = Literal["sparse", "banded"]

# File path types
FilePath = Union[str, Path]

# Log levels
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# Generic configuration mapping
ConfigDict = Dict[str, Dict[str, object]]


class Deflator(Enum):
    """Price indices used to convert nominal series into real terms."""
    GDP = "GDPCTPI"     # GDP chain-type price index
    PCE = "PCEPILFE"    # Core PCE price index

    @property
    def mnemonic(self) -> str:
        return self.value


class PopulationMeasure(Enum):
    """Population series used to express values per person."""
    CNP16OV = "CNP16OV"  # Civilian noninstitutional population, 16 and over

    @property
    def mnemonic(self) -> str:
        return self.value


class ForecastProduct(Enum):
    """Forecast output kinds that a scenario can be plotted from."""
    FORECAST = "forecast"
    UNTRANSFORMED = "forecastut"
    FOUR_QUARTER = "forecast4q"
