# macropost/core/validation.py

"""
Validation utilities for macropost.

These helpers turn caller input into float64 NumPy arrays and enforce the
small input contract of the transforms and the trend filter: aligned lengths,
required table columns, complete data where it is needed and non-negative
smoothing parameters. Each helper raises the matching exception from
macropost.core.exceptions at the point of detection.
"""

import math
from typing import Any, Iterable, Optional, Sequence

import numpy as np
import pandas as pd

from macropost.core.exceptions import (
    DomainError,
    raise_domain_error, raise_missing_data_error,
    raise_shape_error
)
from macropost.core.types import SeriesLike, Table, Vector


def _check_numeric_dtype(dtype: Any, name: str) -> None:
    """Reject dtypes whose values would convert to meaningless floats."""
    if (pd.api.types.is_datetime64_any_dtype(dtype)
            or pd.api.types.is_timedelta64_dtype(dtype)
            or pd.api.types.is_complex_dtype(dtype)
            or isinstance(dtype, (pd.PeriodDtype, pd.IntervalDtype,
                                  pd.CategoricalDtype, pd.StringDtype))
            or getattr(dtype, "kind", None) in ("U", "S", "V")):
        raise_domain_error(
            f"{name} must be numeric, got dtype {dtype}",
            param_name=name,
            param_value=str(dtype),
            constraint="numeric values"
        )


def as_float_array(
    data: SeriesLike,
    name: str = "series",
    strict: bool = False
) -> Vector:
    """Convert a series to a one-dimensional float64 array.

    Missing markers (None, pandas.NA, NaT) become NaN. When ``strict`` is
    True any missing value raises instead.

    Args:
        data: Series to convert
        name: Name of the series for error messages
        strict: Whether missing values are an error

    Returns:
        np.ndarray: A new float64 array; the caller's data is never aliased

    Raises:
        ShapeError: If the data is not one-dimensional
        DomainError: If the data is not numeric (text, dates, durations,
            complex values)
        MissingDataError: If ``strict`` is True and values are missing
    """
    raw = data if isinstance(data, pd.Series) else np.asarray(data)
    _check_numeric_dtype(raw.dtype, name)

    try:
        if isinstance(raw, pd.Series):
            missing = raw.isna().to_numpy()
            values = pd.to_numeric(raw).to_numpy(dtype=np.float64, na_value=np.nan)
        elif raw.dtype == object:
            missing = np.asarray(pd.isna(raw), dtype=bool)
            values = np.where(missing, np.nan, raw).astype(np.float64)
        else:
            values = raw.astype(np.float64, copy=True)
            missing = np.isnan(values)
    except (TypeError, ValueError) as e:
        raise DomainError(
            f"{name} must contain numeric values: {e}",
            param_name=name,
            constraint="numeric values"
        ) from e

    if values.ndim != 1:
        raise_shape_error(
            f"{name} must be 1-dimensional, got {values.ndim} dimensions",
            array_name=name,
            expected_shape="(n,)",
            actual_shape=values.shape
        )

    if strict and missing.any():
        positions = tuple(int(i) for i in np.flatnonzero(missing))
        raise_missing_data_error(
            f"{name} contains {len(positions)} missing value(s)",
            data_name=name,
            issue="missing values with strict validation",
            index=positions
        )

    return values


def validate_same_length(arrays: Sequence[np.ndarray], names: Sequence[str]) -> int:
    """Validate that all arrays have the same length.

    Args:
        arrays: Arrays to compare
        names: Names of the arrays for error messages

    Returns:
        int: The common length

    Raises:
        ShapeError: If any array length differs from the first
    """
    if len(arrays) != len(names):
        raise ValueError("arrays and names must have the same length")

    ref_len = len(arrays[0])
    for arr, name in zip(arrays[1:], names[1:]):
        if len(arr) != ref_len:
            raise_shape_error(
                f"{name} has length {len(arr)} which does not match "
                f"{names[0]} length {ref_len}",
                array_name=name,
                expected_shape=f"({ref_len},)",
                actual_shape=(len(arr),)
            )
    return ref_len


def validate_columns(table: Table, columns: Iterable[str], table_name: str = "table") -> None:
    """Validate that a table contains every required column.

    Raises:
        ShapeError: Listing all missing columns
    """
    available = table.columns if isinstance(table, pd.DataFrame) else table.keys()
    missing = [c for c in columns if c not in available]
    if missing:
        raise_shape_error(
            f"{table_name} is missing required column(s): {', '.join(map(str, missing))}",
            array_name=table_name,
            missing_columns=[str(c) for c in missing]
        )


def validate_complete(values: np.ndarray, name: str = "series") -> np.ndarray:
    """Validate that an array holds only finite values.

    Raises:
        MissingDataError: If any value is NaN or infinite
    """
    bad = ~np.isfinite(values)
    if bad.any():
        positions = tuple(int(i) for i in np.flatnonzero(bad))
        raise_missing_data_error(
            f"{name} contains missing or non-finite values",
            data_name=name,
            issue="NaN or infinite values",
            index=positions
        )
    return values


def validate_min_length(values: np.ndarray, min_length: int, name: str = "series") -> int:
    """Validate that a series has at least ``min_length`` observations.

    Raises:
        ShapeError: If the series is too short
    """
    n = len(values)
    if n < min_length:
        raise_shape_error(
            f"{name} must have at least {min_length} observations, got {n}",
            array_name=name,
            expected_shape=f"(n >= {min_length},)",
            actual_shape=values.shape
        )
    return n


def validate_non_negative(value: float, param_name: str) -> float:
    """Validate that a parameter is a finite, non-negative number.

    Raises:
        DomainError: If the parameter is negative, NaN or infinite
    """
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise_domain_error(
            f"Parameter {param_name} must be a real number, got {value!r}",
            param_name=param_name,
            param_value=value,
            constraint="real number"
        )
    if not math.isfinite(value) or value < 0:
        raise_domain_error(
            f"Parameter {param_name} must be non-negative, got {value}",
            param_name=param_name,
            param_value=value,
            constraint=f"{param_name} >= 0"
        )
    return value


def first_index(*series: Any) -> Optional[pd.Index]:
    """Return the index of the first pandas Series among the inputs, if any."""
    for s in series:
        if isinstance(s, pd.Series):
            return s.index
    return None
