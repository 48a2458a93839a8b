# macropost/transforms/series.py

"""
Elementwise transforms for macroeconomic series.

Every function takes one or more aligned series (NumPy arrays or pandas
Series), checks that their lengths agree and returns a new series; inputs are
never modified. When any input is a pandas Series, the result is a pandas
Series carrying that input's index, otherwise it is a float64 NumPy array.

Missing values are converted to NaN before computing. Passing ``strict=True``
(or setting ``transforms.strict_missing`` in the configuration) makes a
missing value raise MissingDataError instead.

Functions:
    percapita: Divide a series by population
    nominal_to_real: Divide a nominal series by a deflator
    nominal_to_realpercapita: Real per-capita value, optionally scaled
    annual_to_quarter: Convert an annual flow to a quarterly one
    diff_log: First difference of logs
    q2q_pct_change: Quarter-to-quarter percentage change
    real_q2q_pct_change: Real quarter-to-quarter percentage change
    hp_adjust: Adjust a series for filtered population growth
"""

import logging
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd

from macropost.core.config import get_config
from macropost.core.types import Series, SeriesLike
from macropost.core.validation import (
    as_float_array, first_index, validate_same_length
)

logger = logging.getLogger("macropost.transforms.series")


def _resolve_strict(strict: Optional[bool]) -> bool:
    if strict is None:
        return bool(get_config("transforms", "strict_missing", False))
    return strict


def _prepare(named: List[Tuple[str, SeriesLike]],
             strict: Optional[bool]) -> Tuple[List[np.ndarray], Optional[pd.Index], Optional[str]]:
    """Convert aligned inputs to float arrays and remember the output index."""
    strict = _resolve_strict(strict)
    arrays = [as_float_array(data, name=name, strict=strict) for name, data in named]
    validate_same_length(arrays, [name for name, _ in named])

    series = [data for _, data in named]
    index = first_index(*series)
    label = next((s.name for s in series if isinstance(s, pd.Series)), None)
    return arrays, index, label


def _wrap(values: np.ndarray, index: Optional[pd.Index], name: Optional[str]) -> Series:
    if index is None:
        return values
    return pd.Series(values, index=index, name=name)


def percapita(value: SeriesLike, population: SeriesLike,
              strict: Optional[bool] = None) -> Series:
    """Convert a series to a per-capita value.

    Division by a zero population follows IEEE semantics (inf or NaN).

    Args:
        value: Series to convert
        population: Population series aligned with ``value``
        strict: Raise on missing values instead of propagating NaN

    Returns:
        ``value / population`` elementwise

    Raises:
        ShapeError: If the series lengths differ
    """
    (v, p), index, name = _prepare([("value", value), ("population", population)], strict)
    with np.errstate(divide="ignore", invalid="ignore"):
        return _wrap(v / p, index, name)


def nominal_to_real(value: SeriesLike, deflator: SeriesLike,
                    strict: Optional[bool] = None) -> Series:
    """Convert nominal values to real values using a deflator.

    Args:
        value: Nominal series
        deflator: Price index aligned with ``value``
        strict: Raise on missing values instead of propagating NaN

    Returns:
        ``value / deflator`` elementwise

    Raises:
        ShapeError: If the series lengths differ
    """
    (v, d), index, name = _prepare([("value", value), ("deflator", deflator)], strict)
    with np.errstate(divide="ignore", invalid="ignore"):
        return _wrap(v / d, index, name)


def nominal_to_realpercapita(value: SeriesLike, population: SeriesLike,
                             deflator: SeriesLike, scale: Optional[float] = None,
                             strict: Optional[bool] = None) -> Series:
    """Convert a nominal series to a real, per-capita value.

    Equivalent to ``scale * nominal_to_real(percapita(value, population), deflator)``.
    The per-capita intermediate is a local array.

    Args:
        value: Nominal series
        population: Population series
        deflator: Price index
        scale: Multiplier applied to the result (default from
            ``transforms.scale``, normally 1.0)
        strict: Raise on missing values instead of propagating NaN

    Raises:
        ShapeError: If the series lengths differ
    """
    if scale is None:
        scale = float(get_config("transforms", "scale", 1.0))

    per_person = percapita(value, population, strict=strict)
    real = nominal_to_real(per_person, deflator, strict=strict)
    return scale * real


def annual_to_quarter(v: SeriesLike, strict: Optional[bool] = None) -> Series:
    """Convert an annual flow to a quarterly one by dividing by 4."""
    (values,), index, name = _prepare([("v", v)], strict)
    return _wrap(values / 4, index, name)


def diff_log(x: SeriesLike, strict: Optional[bool] = None) -> Series:
    """First difference of the natural log of a series.

    The result has the same length as the input. The first element has no
    prior observation and is NaN. Non-positive values follow log semantics
    and yield NaN or -inf without raising.

    Args:
        x: Series to difference
        strict: Raise on missing values instead of propagating NaN

    Returns:
        ``[NaN, ln x[1] - ln x[0], ..., ln x[n-1] - ln x[n-2]]``
    """
    (values,), index, name = _prepare([("x", x)], strict)

    result = np.full(len(values), np.nan)
    if len(values) > 1:
        with np.errstate(divide="ignore", invalid="ignore"):
            logs = np.log(values)
            result[1:] = logs[1:] - logs[:-1]
    return _wrap(result, index, name)


def q2q_pct_change(y: SeriesLike, strict: Optional[bool] = None) -> Series:
    """Quarter-to-quarter percentage change, ``100 * diff_log(y)``."""
    return 100 * diff_log(y, strict=strict)


def real_q2q_pct_change(value: SeriesLike, deflator: SeriesLike,
                        strict: Optional[bool] = None) -> Series:
    """Real quarter-to-quarter percentage change.

    Args:
        value: Nominal series
        deflator: Already resolved price index aligned with ``value``
        strict: Raise on missing values instead of propagating NaN

    Returns:
        ``100 * (diff_log(value) - diff_log(deflator))``

    Raises:
        ShapeError: If the series lengths differ
    """
    (v, d), index, name = _prepare([("value", value), ("deflator", deflator)], strict)
    with np.errstate(invalid="ignore"):
        result = 100 * (diff_log(v) - diff_log(d))
    return _wrap(result, index, name)


def hp_adjust(y: SeriesLike, unfiltered_growth: SeriesLike,
              filtered_growth: SeriesLike, strict: Optional[bool] = None) -> Series:
    """Adjust a growth series for the gap between raw and filtered population growth.

    Args:
        y: Series to adjust
        unfiltered_growth: Raw population growth
        filtered_growth: HP-filtered population growth

    Returns:
        ``y + 100 * (unfiltered_growth - filtered_growth)``

    Raises:
        ShapeError: If the series lengths differ
    """
    (values, unfiltered, filtered), index, name = _prepare(
        [("y", y), ("unfiltered_growth", unfiltered_growth),
         ("filtered_growth", filtered_growth)],
        strict
    )
    return _wrap(values + 100 * (unfiltered - filtered), index, name)
