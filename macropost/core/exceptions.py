'''
Custom exception classes for macropost.

This module defines the exception hierarchy used throughout the package. Each
exception carries a primary message plus optional details and a context
dictionary, which are rendered into the final error message so that failures
in long batch runs can be traced back to the offending series or setting.

The hierarchy is intentionally shallow:

- ShapeError: mismatched lengths, series too short, missing table columns
- DomainError: parameters outside their domain or mutually exclusive options
- NumericalError: linear solves that fail or produce non-finite output
- MissingDataError: missing observations where complete data is required
- ConfigurationError: invalid configuration sections, options or values
'''

from typing import Any, Dict, Optional, Sequence, Tuple, Union
import inspect
import warnings
import numpy as np
from pathlib import Path


class MacroPostError(Exception):
    """Base exception class for all macropost errors.

    Attributes:
        message: The error message
        details: Additional details about the error
        context: Dictionary containing contextual information about the error
    """

    def __init__(self,
                 message: str,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details
        self.context = context or {}

        full_message = message
        if details:
            full_message += f"\n\nDetails: {details}"

        if context:
            context_str = "\n".join(f"  {k}: {v}" for k, v in context.items())
            full_message += f"\n\nContext:\n{context_str}"

        frame = inspect.currentframe()
        if frame:
            try:
                frame = frame.f_back
                # Skip the constructors of subclasses and the raise_* helpers
                while frame and (frame.f_code.co_name == "__init__"
                                 or frame.f_code.co_name.startswith("raise_")):
                    frame = frame.f_back
                if frame:
                    caller_info = inspect.getframeinfo(frame)
                    full_message += f"\n\nLocation: {Path(caller_info.filename).name}:{caller_info.lineno}"
            finally:
                del frame  # Avoid reference cycles

        super().__init__(full_message)


class ShapeError(MacroPostError):
    """Exception raised when series lengths or table columns do not line up.

    Attributes:
        array_name: The name of the series that caused the error
        expected_shape: The expected shape or length
        actual_shape: The actual shape
        missing_columns: Columns a table was expected to contain
    """

    def __init__(self,
                 message: str,
                 array_name: Optional[str] = None,
                 expected_shape: Optional[Union[Tuple[int, ...], str]] = None,
                 actual_shape: Optional[Tuple[int, ...]] = None,
                 missing_columns: Optional[Sequence[str]] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.array_name = array_name
        self.expected_shape = expected_shape
        self.actual_shape = actual_shape
        self.missing_columns = list(missing_columns) if missing_columns else []

        context_dict = context or {}
        if array_name:
            context_dict["Array"] = array_name
        if expected_shape is not None:
            context_dict["Expected Shape"] = expected_shape
        if actual_shape is not None:
            context_dict["Actual Shape"] = actual_shape
        if self.missing_columns:
            context_dict["Missing Columns"] = ", ".join(self.missing_columns)

        super().__init__(message, details, context_dict)


class DomainError(MacroPostError):
    """Exception raised for parameters outside their admissible domain.

    Also used when two options are requested together that cannot be
    combined, e.g. an untransformed and a four-quarter forecast at once.

    Attributes:
        param_name: The name of the parameter that caused the error
        param_value: The invalid parameter value
        constraint: Description of the constraint that was violated
    """

    def __init__(self,
                 message: str,
                 param_name: Optional[str] = None,
                 param_value: Optional[Any] = None,
                 constraint: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.param_name = param_name
        self.param_value = param_value
        self.constraint = constraint

        context_dict = context or {}
        if param_name:
            context_dict["Parameter"] = param_name
        if param_value is not None:
            context_dict["Value"] = param_value
        if constraint:
            context_dict["Constraint"] = constraint

        super().__init__(message, details, context_dict)


class NumericalError(MacroPostError):
    """Exception raised when a numerical computation fails.

    Attributes:
        operation: The operation that caused the error
        values: The values that caused the error
        error_type: The type of numerical error (e.g., "singular", "non-finite")
    """

    def __init__(self,
                 message: str,
                 operation: Optional[str] = None,
                 values: Optional[Any] = None,
                 error_type: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.operation = operation
        self.values = values
        self.error_type = error_type

        context_dict = context or {}
        if operation:
            context_dict["Operation"] = operation
        if values is not None:
            if isinstance(values, np.ndarray) and values.size > 10:
                context_dict["Values"] = f"Array with shape {values.shape}"
            else:
                context_dict["Values"] = values
        if error_type:
            context_dict["Error Type"] = error_type

        super().__init__(message, details, context_dict)


class MissingDataError(MacroPostError):
    """Exception raised for missing observations where complete data is required.

    Attributes:
        data_name: The name of the data that caused the error
        issue: Description of the issue with the data
        index: Positions where missing values were found
    """

    def __init__(self,
                 message: str,
                 data_name: Optional[str] = None,
                 issue: Optional[str] = None,
                 index: Optional[Union[int, Tuple[int, ...], str]] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.data_name = data_name
        self.issue = issue
        self.index = index

        context_dict = context or {}
        if data_name:
            context_dict["Data"] = data_name
        if issue:
            context_dict["Issue"] = issue
        if index is not None:
            context_dict["Index"] = index

        super().__init__(message, details, context_dict)


class ConfigurationError(MacroPostError):
    """Exception raised for errors in configuration.

    Attributes:
        config_file: The configuration file path
        setting: The setting that caused the error
        value: The invalid setting value
        issue: Description of the issue with the configuration
    """

    def __init__(self,
                 message: str,
                 config_file: Optional[Union[str, Path]] = None,
                 setting: Optional[str] = None,
                 value: Optional[Any] = None,
                 issue: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.config_file = config_file
        self.setting = setting
        self.value = value
        self.issue = issue

        context_dict = context or {}
        if config_file:
            context_dict["Config File"] = str(config_file)
        if setting:
            context_dict["Setting"] = setting
        if value is not None:
            context_dict["Value"] = value
        if issue:
            context_dict["Issue"] = issue

        super().__init__(message, details, context_dict)


class MacroPostWarning(Warning):
    """Base warning class for all macropost warnings."""

    def __init__(self,
                 message: str,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details
        self.context = context or {}

        full_message = message
        if details:
            full_message += f"\n\nDetails: {details}"
        if context:
            context_str = "\n".join(f"  {k}: {v}" for k, v in context.items())
            full_message += f"\n\nContext:\n{context_str}"

        super().__init__(full_message)


class NumericalWarning(MacroPostWarning):
    """Warning for numerical issues that do not prevent computation.

    Attributes:
        operation: The operation where the issue was detected
        issue: Description of the numerical issue
        value: The value that may cause numerical issues
    """

    def __init__(self,
                 message: str,
                 operation: Optional[str] = None,
                 issue: Optional[str] = None,
                 value: Optional[Any] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.operation = operation
        self.issue = issue
        self.value = value

        context_dict = context or {}
        if operation:
            context_dict["Operation"] = operation
        if issue:
            context_dict["Issue"] = issue
        if value is not None:
            context_dict["Value"] = value

        super().__init__(message, details, context_dict)


# Helper functions for raising exceptions with consistent formatting

def raise_shape_error(message: str,
                      array_name: Optional[str] = None,
                      expected_shape: Optional[Union[Tuple[int, ...], str]] = None,
                      actual_shape: Optional[Tuple[int, ...]] = None,
                      missing_columns: Optional[Sequence[str]] = None,
                      details: Optional[str] = None,
                      context: Optional[Dict[str, Any]] = None) -> None:
    """Raise a ShapeError with consistent formatting.

    Raises:
        ShapeError: The formatted shape error
    """
    raise ShapeError(message, array_name, expected_shape, actual_shape,
                     missing_columns, details, context)


def raise_domain_error(message: str,
                       param_name: Optional[str] = None,
                       param_value: Optional[Any] = None,
                       constraint: Optional[str] = None,
                       details: Optional[str] = None,
                       context: Optional[Dict[str, Any]] = None) -> None:
    """Raise a DomainError with consistent formatting.

    Raises:
        DomainError: The formatted domain error
    """
    raise DomainError(message, param_name, param_value, constraint, details, context)


def raise_numerical_error(message: str,
                          operation: Optional[str] = None,
                          values: Optional[Any] = None,
                          error_type: Optional[str] = None,
                          details: Optional[str] = None,
                          context: Optional[Dict[str, Any]] = None) -> None:
    """Raise a NumericalError with consistent formatting.

    Raises:
        NumericalError: The formatted numerical error
    """
    raise NumericalError(message, operation, values, error_type, details, context)


def raise_missing_data_error(message: str,
                             data_name: Optional[str] = None,
                             issue: Optional[str] = None,
                             index: Optional[Union[int, Tuple[int, ...], str]] = None,
                             details: Optional[str] = None,
                             context: Optional[Dict[str, Any]] = None) -> None:
    """Raise a MissingDataError with consistent formatting.

    Raises:
        MissingDataError: The formatted missing-data error
    """
    raise MissingDataError(message, data_name, issue, index, details, context)


def warn_numerical(message: str,
                   operation: Optional[str] = None,
                   issue: Optional[str] = None,
                   value: Optional[Any] = None,
                   details: Optional[str] = None,
                   context: Optional[Dict[str, Any]] = None) -> None:
    """Issue a NumericalWarning with consistent formatting."""
    warnings.warn(
        NumericalWarning(message, operation, issue, value, details, context),
        stacklevel=2
    )
