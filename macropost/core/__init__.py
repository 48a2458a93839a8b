"""
Core infrastructure for macropost: exceptions, types, validation and configuration.
"""

from macropost.core.exceptions import (
    MacroPostError, ShapeError, DomainError, NumericalError, MissingDataError,
    ConfigurationError, MacroPostWarning, NumericalWarning
)
from macropost.core.types import Deflator, PopulationMeasure, ForecastProduct
from macropost.core.config import (
    get_config, set_config, reset_config, save_config, get_config_manager
)

__all__ = [
    'MacroPostError',
    'ShapeError',
    'DomainError',
    'NumericalError',
    'MissingDataError',
    'ConfigurationError',
    'MacroPostWarning',
    'NumericalWarning',
    'Deflator',
    'PopulationMeasure',
    'ForecastProduct',
    'get_config',
    'set_config',
    'reset_config',
    'save_config',
    'get_config_manager',
]
