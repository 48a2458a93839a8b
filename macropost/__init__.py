# macropost/__init__.py
"""
macropost - post-processing utilities for macroeconomic forecasts

The package provides:
- Unit conversions (nominal to real, per-capita, annual to quarterly)
- Percentage-change transforms
- A Hodrick-Prescott trend/cycle decomposition filter
- Charts of scenario forecasts in deviations from baseline
"""

import os
import logging
from typing import Union

from macropost.version import __version__

# Set up package-wide logger
logger = logging.getLogger("macropost")
logger.setLevel(getattr(logging, os.environ.get("MACROPOST_LOG_LEVEL", "INFO").upper(), logging.INFO))
_handler = logging.StreamHandler()
_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
logger.addHandler(_handler)

from macropost import core
from macropost import transforms
from macropost import filters
from macropost import plotting

from macropost.core.exceptions import (
    MacroPostError, ShapeError, DomainError, NumericalError, MissingDataError,
    ConfigurationError
)
from macropost.core.types import Deflator, PopulationMeasure, ForecastProduct
from macropost.transforms import (
    percapita, nominal_to_real, nominal_to_realpercapita, annual_to_quarter,
    diff_log, q2q_pct_change, real_q2q_pct_change, hp_adjust
)
from macropost.filters import HPFilter, hp_filter


def get_version() -> str:
    """Return the version of macropost."""
    return __version__


def set_log_level(level: Union[str, int]) -> None:
    """
    Set the logging level for macropost.

    Args:
        level: Logging level, either as string ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')
              or as an integer constant from the logging module
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())
    logger.setLevel(level)
    logger.debug(f"Log level set to {logging.getLevelName(level)}")


def configure_logging() -> None:
    """Apply the level and format from the ``logging`` configuration section."""
    from macropost.core.config import get_config_manager

    section = get_config_manager().get_section("logging")
    _handler.setFormatter(logging.Formatter(section.log_format, datefmt=section.log_date_format))
    set_log_level(section.log_level)


__all__ = [
    # Subpackages
    'core',
    'transforms',
    'filters',
    'plotting',

    # Errors
    'MacroPostError',
    'ShapeError',
    'DomainError',
    'NumericalError',
    'MissingDataError',
    'ConfigurationError',

    # Types
    'Deflator',
    'PopulationMeasure',
    'ForecastProduct',

    # Transforms and filter
    'percapita',
    'nominal_to_real',
    'nominal_to_realpercapita',
    'annual_to_quarter',
    'diff_log',
    'q2q_pct_change',
    'real_q2q_pct_change',
    'hp_adjust',
    'HPFilter',
    'hp_filter',

    # Public functions
    'get_version',
    'set_log_level',
    'configure_logging',
    '__version__',
]
