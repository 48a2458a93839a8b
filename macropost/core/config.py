'''
Configuration management for macropost.

Settings are organised in dataclass sections and resolved in layers:

1. Defaults built into the package
2. A user configuration file (JSON), read only when it exists
3. Environment variables named MACROPOST_<SECTION>_<OPTION>
4. Runtime modifications through set_config()

The core transforms and the trend filter only read configuration to fill in
defaults that the caller did not pass explicitly.
'''

import os
import json
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

from .exceptions import ConfigurationError
from .types import ConfigDict, LogLevel

# Set up module-level logger
logger = logging.getLogger("macropost.core.config")

# Constants for configuration paths and environment variables
CONFIG_ENV_PREFIX = "MACROPOST_"
DEFAULT_CONFIG_FILENAME = "macropost_config.json"
USER_CONFIG_DIR_ENV = "MACROPOST_CONFIG_DIR"

SOLVERS = ("sparse", "banded")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class FilterConfig:
    """
    Trend filter settings.

    Attributes:
        lambda_: Default smoothing parameter (1600 for quarterly data)
        solver: Linear solver, "sparse" or "banded"
        min_observations: Shortest series the filter accepts
    """
    lambda_: float = 1600.0
    solver: str = "sparse"
    min_observations: int = 4


@dataclass
class TransformConfig:
    """
    Series transform settings.

    Attributes:
        population_mnemonic: Default population column for per-capita values
        deflator: Default deflator, a Deflator member name or a column name
        scale: Default scale factor for real per-capita values
        strict_missing: Whether missing values raise instead of becoming NaN
    """
    population_mnemonic: str = "CNP16OV"
    deflator: str = "GDP"
    scale: float = 1.0
    strict_missing: bool = False


@dataclass
class PlotConfig:
    """
    Scenario plot settings.

    Attributes:
        plotroot: Directory plots are saved to; empty disables saving
        file_format: Image file extension
        tick_size: Spacing of x-axis ticks in years
        legend: Legend mode, "none" or a matplotlib legend location
        dpi: Resolution of saved figures
        figsize: Figure size in inches
    """
    plotroot: str = ""
    file_format: str = "png"
    tick_size: int = 1
    legend: str = "none"
    dpi: int = 100
    figsize: Tuple[int, int] = (8, 5)


@dataclass
class LoggingConfig:
    """
    Logging settings.

    Attributes:
        log_level: Level of the package logger
        log_format: Format string for log messages
        log_date_format: Format string for log message timestamps
    """
    log_level: LogLevel = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_date_format: str = "%Y-%m-%d %H:%M:%S"


@dataclass
class MacroPostConfig:
    """Complete configuration, one attribute per section."""
    filters: FilterConfig = field(default_factory=FilterConfig)
    transforms: TransformConfig = field(default_factory=TransformConfig)
    plotting: PlotConfig = field(default_factory=PlotConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


_SECTION_TYPES = {
    "filters": FilterConfig,
    "transforms": TransformConfig,
    "plotting": PlotConfig,
    "logging": LoggingConfig,
}


class ConfigManager:
    """
    Configuration manager for macropost.

    Attributes:
        _config: The current configuration object
        _initialized: Whether the manager has loaded file and environment layers
        _config_file: Path to the user configuration file
    """

    def __init__(self):
        """Initialize the configuration manager with default settings."""
        self._config = MacroPostConfig()
        self._initialized = False
        self._config_file: Optional[Path] = None
        self._modified_keys: Set[str] = set()

    def initialize(self) -> None:
        """
        Load the user configuration file and environment overrides.

        Calling this more than once has no effect.
        """
        if self._initialized:
            return

        self._config_file = self._locate_config_file()
        self._load_user_config()
        self._apply_env_overrides()
        self._validate_config()

        self._initialized = True
        logger.debug("Configuration manager initialized")

    def _locate_config_file(self) -> Path:
        env_config_dir = os.environ.get(USER_CONFIG_DIR_ENV)
        if env_config_dir:
            config_dir = Path(env_config_dir)
        else:
            config_dir = Path.home() / ".macropost"
        return config_dir / DEFAULT_CONFIG_FILENAME

    def _load_user_config(self) -> None:
        if not self._config_file or not self._config_file.exists():
            logger.debug("No user configuration file found")
            return

        try:
            with open(self._config_file, 'r') as f:
                user_config = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(
                "Failed to read user configuration file",
                config_file=self._config_file,
                issue=str(e)
            ) from e

        self.update_from_dict(user_config)
        logger.debug(f"Loaded user configuration from {self._config_file}")

    def _apply_env_overrides(self) -> None:
        """
        Apply MACROPOST_<SECTION>_<OPTION> environment variables.

        Variables that do not name a known section and option are ignored.
        """
        for env_var, value in os.environ.items():
            if not env_var.startswith(CONFIG_ENV_PREFIX) or env_var == USER_CONFIG_DIR_ENV:
                continue

            key = env_var[len(CONFIG_ENV_PREFIX):]
            parts = key.lower().split('_', 1)
            if len(parts) != 2:
                continue

            section, option = parts
            section_obj = getattr(self._config, section, None)
            if section not in _SECTION_TYPES or section_obj is None:
                continue

            # lambda_ is spelled MACROPOST_FILTERS_LAMBDA in the environment
            if not hasattr(section_obj, option) and hasattr(section_obj, option + "_"):
                option = option + "_"
            if not hasattr(section_obj, option):
                continue

            self._set_option(section, option, value)
            logger.debug(f"Applied environment override: {env_var}={value}")

    def _validate_config(self) -> None:
        filters_cfg = self._config.filters
        if filters_cfg.lambda_ < 0:
            raise ConfigurationError(
                "filters.lambda_ must be non-negative",
                setting="filters.lambda_",
                value=filters_cfg.lambda_,
                issue="negative smoothing parameter"
            )
        if filters_cfg.solver not in SOLVERS:
            raise ConfigurationError(
                f"filters.solver must be one of {', '.join(SOLVERS)}",
                setting="filters.solver",
                value=filters_cfg.solver,
                issue="unknown solver"
            )
        if filters_cfg.min_observations < 4:
            raise ConfigurationError(
                "filters.min_observations must be at least 4",
                setting="filters.min_observations",
                value=filters_cfg.min_observations,
                issue="boundary stencils need four observations"
            )
        if self._config.logging.log_level not in LOG_LEVELS:
            raise ConfigurationError(
                f"logging.log_level must be one of {', '.join(LOG_LEVELS)}",
                setting="logging.log_level",
                value=self._config.logging.log_level,
                issue="unknown log level"
            )

    def update_from_dict(self, config_dict: Dict[str, Any]) -> None:
        """
        Update the configuration from a nested dictionary.

        Raises:
            ConfigurationError: If a section, option or value is invalid
        """
        for section_name, section_values in config_dict.items():
            if not isinstance(section_values, dict):
                raise ConfigurationError(
                    f"Configuration section {section_name} must be a mapping",
                    setting=section_name,
                    value=section_values,
                    issue="not a mapping"
                )
            for option_name, option_value in section_values.items():
                self._set_option(section_name, option_name, option_value)

    def _set_option(self, section: str, option: str, value: Any) -> None:
        if section not in _SECTION_TYPES:
            raise ConfigurationError(
                f"Unknown configuration section: {section}",
                setting=f"{section}.{option}",
                value=value,
                issue="Section not found"
            )

        section_obj = getattr(self._config, section)
        if not hasattr(section_obj, option):
            raise ConfigurationError(
                f"Unknown configuration option: {section}.{option}",
                setting=f"{section}.{option}",
                value=value,
                issue="Option not found"
            )

        current_value = getattr(section_obj, option)
        value_type = type(current_value)

        try:
            if value_type is bool and isinstance(value, str):
                typed_value = value.lower() in ('true', 'yes', '1', 'y')
            elif value_type is tuple:
                if isinstance(value, str):
                    value = [part.strip() for part in value.split(',')]
                typed_value = tuple(int(v) for v in value)
                if len(typed_value) != len(current_value):
                    raise ValueError(f"expected {len(current_value)} values")
            elif value_type is not type(value):
                typed_value = value_type(value)
            else:
                typed_value = value
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                f"Failed to set configuration option: {section}.{option}",
                setting=f"{section}.{option}",
                value=value,
                issue=str(e)
            ) from e

        setattr(section_obj, option, typed_value)

    def get(self, section: str, option: str, default: Any = None) -> Any:
        """
        Get a configuration value, or ``default`` if it does not exist.
        """
        section_obj = getattr(self._config, section, None)
        if section not in _SECTION_TYPES or section_obj is None:
            return default
        return getattr(section_obj, option, default)

    def set(self, section: str, option: str, value: Any) -> None:
        """
        Set a configuration value.

        The previous value is restored if the new one fails validation.

        Raises:
            ConfigurationError: If the section, option or value is invalid
        """
        previous = self.get(section, option)
        self._set_option(section, option, value)
        try:
            self._validate_config()
        except ConfigurationError:
            setattr(getattr(self._config, section), option, previous)
            raise

        self._modified_keys.add(f"{section}.{option}")
        logger.debug(f"Set configuration option: {section}.{option}={value}")

    def reset(self, section: Optional[str] = None, option: Optional[str] = None) -> None:
        """
        Reset configuration to default values.

        Args:
            section: The section to reset, or None to reset everything
            option: The option to reset, or None to reset the entire section

        Raises:
            ConfigurationError: If the section or option is not found
        """
        if section is None:
            self._config = MacroPostConfig()
            self._modified_keys.clear()
            logger.debug("Reset all configuration to defaults")
            return

        if section not in _SECTION_TYPES:
            raise ConfigurationError(
                f"Unknown configuration section: {section}",
                setting=section,
                issue="Section not found"
            )

        defaults = _SECTION_TYPES[section]()
        if option is None:
            setattr(self._config, section, defaults)
            self._modified_keys = {k for k in self._modified_keys
                                   if not k.startswith(f"{section}.")}
            return

        if not hasattr(defaults, option):
            raise ConfigurationError(
                f"Unknown configuration option: {section}.{option}",
                setting=f"{section}.{option}",
                issue="Option not found"
            )
        setattr(getattr(self._config, section), option, getattr(defaults, option))
        self._modified_keys.discard(f"{section}.{option}")

    def save_user_config(self) -> Path:
        """
        Write the current configuration to the user configuration file.

        Returns:
            Path: The file written
        """
        if self._config_file is None:
            self._config_file = self._locate_config_file()

        self._config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self._config_file, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

        logger.debug(f"Saved user configuration to {self._config_file}")
        return self._config_file

    def to_dict(self) -> ConfigDict:
        """
        Convert the configuration to a nested dictionary of JSON-safe values.
        """
        result: ConfigDict = {}
        for section_name in _SECTION_TYPES:
            section = getattr(self._config, section_name)
            section_dict = {}
            for f in fields(section):
                value = getattr(section, f.name)
                if isinstance(value, tuple):
                    value = list(value)
                section_dict[f.name] = value
            result[section_name] = section_dict
        return result

    def get_modified_options(self) -> List[str]:
        """Return the options changed at runtime, sorted."""
        return sorted(self._modified_keys)

    def get_section(self, section: str) -> Any:
        """
        Get a configuration section object.

        Raises:
            ConfigurationError: If the section is not found
        """
        if section not in _SECTION_TYPES:
            raise ConfigurationError(
                f"Unknown configuration section: {section}",
                setting=section,
                issue="Section not found"
            )
        return getattr(self._config, section)

    def get_config_file(self) -> Optional[Path]:
        return self._config_file


# Create a singleton instance of the configuration manager
_config_manager = ConfigManager()


def initialize_config() -> None:
    """Load the user configuration file and environment overrides."""
    _config_manager.initialize()


def get_config_manager() -> ConfigManager:
    """Get the initialized configuration manager instance."""
    if not _config_manager._initialized:
        initialize_config()
    return _config_manager


def get_config(section: str, option: str, default: Any = None) -> Any:
    """
    Get a configuration value.

    Args:
        section: The configuration section
        option: The configuration option
        default: Default value if the option is not found

    Returns:
        The configuration value, or the default if not found
    """
    return get_config_manager().get(section, option, default)


def set_config(section: str, option: str, value: Any) -> None:
    """
    Set a configuration value.

    Raises:
        ConfigurationError: If the section, option or value is invalid
    """
    get_config_manager().set(section, option, value)


def reset_config(section: Optional[str] = None, option: Optional[str] = None) -> None:
    """
    Reset configuration to default values.

    Raises:
        ConfigurationError: If the section or option is not found
    """
    get_config_manager().reset(section, option)


def save_config() -> Path:
    """Save the current configuration to the user configuration file."""
    return get_config_manager().save_user_config()


def to_dict() -> ConfigDict:
    """Return the current configuration as a nested dictionary."""
    return get_config_manager().to_dict()
