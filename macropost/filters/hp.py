# macropost/filters/hp.py

"""
Hodrick-Prescott trend/cycle decomposition.

The trend ``tau`` of a series ``y`` minimises

    sum((y - tau)**2) + lambda * sum((D2 tau)**2)

where ``D2`` is the second-difference operator. The first-order conditions
give the linear system ``(I + lambda * D2'D2) tau = y``, whose matrix is
symmetric, positive definite and pentadiagonal. The matrix is assembled from
its bands as a sparse matrix (or in banded storage) and solved directly; the
cyclical component is the residual ``y - tau``.

Classes:
    DecompositionResult: Container for a trend/cycle decomposition
    HPFilter: Hodrick-Prescott filter with a fixed smoothing parameter

Functions:
    penalty_matrix: Sparse normal equations matrix for a given length and lambda
    hp_filter: Convenience function returning ``(trend, cycle)``
    hp_filter_frame: Filter every column of a table, collecting failures
    trend_roughness: Penalty term of the objective for a given trend
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

import numpy as np
import pandas as pd
from scipy import linalg, sparse
from scipy.sparse import linalg as sparse_linalg

from macropost.core.config import get_config
from macropost.core.exceptions import (
    ConfigurationError, MacroPostError, NumericalError, ShapeError,
    raise_numerical_error, warn_numerical
)
from macropost.core.types import Series, SeriesLike, SolverType, Table, TrendCycle
from macropost.core.validation import (
    as_float_array, validate_complete, validate_min_length, validate_non_negative
)
from macropost.filters._numba_core import hp_penalty_bands, second_difference_sum_squares

# Set up module-level logger
logger = logging.getLogger("macropost.filters.hp")

SOLVERS = ("sparse", "banded")

# The condition number of the system grows roughly like 16 * lambda
LARGE_LAMBDA = 1e10


def _validate_solver(solver: Optional[str]) -> SolverType:
    if solver is None:
        solver = get_config("filters", "solver", "sparse")
    if solver not in SOLVERS:
        raise ConfigurationError(
            f"Unknown solver: {solver}",
            setting="filters.solver",
            value=solver,
            issue=f"expected one of {', '.join(SOLVERS)}"
        )
    return solver


def _min_observations() -> int:
    return max(4, int(get_config("filters", "min_observations", 4)))


def penalty_matrix(n: int, lambda_: float) -> sparse.csc_matrix:
    """Build the HP normal equations matrix ``I + lambda * D2'D2``.

    Args:
        n: Number of observations (at least 4)
        lambda_: Smoothing parameter (non-negative)

    Returns:
        sparse.csc_matrix: Symmetric pentadiagonal ``n x n`` matrix

    Raises:
        ShapeError: If ``n`` is below the minimum length
        DomainError: If ``lambda_`` is negative or not finite
    """
    lambda_ = validate_non_negative(lambda_, "lambda_")
    min_obs = _min_observations()
    if n < min_obs:
        raise ShapeError(
            f"Penalty matrix needs at least {min_obs} observations, got {n}",
            array_name="y",
            expected_shape=f"(n >= {min_obs},)",
            actual_shape=(n,)
        )

    main, first, second = hp_penalty_bands(int(n), float(lambda_))
    return sparse.diags(
        [second, first, main, first, second],
        offsets=[-2, -1, 0, 1, 2],
        shape=(n, n),
        format="csc"
    )


def _solve_sparse(y: np.ndarray, lambda_: float) -> np.ndarray:
    A = penalty_matrix(len(y), lambda_)
    return sparse_linalg.spsolve(A, y)


def _solve_banded(y: np.ndarray, lambda_: float) -> np.ndarray:
    n = len(y)
    main, first, second = hp_penalty_bands(n, lambda_)

    # Upper form: ab[u + i - j, j] == A[i, j] with u = 2
    ab = np.zeros((3, n))
    ab[0, 2:] = second
    ab[1, 1:] = first
    ab[2, :] = main
    return linalg.solveh_banded(ab, y, check_finite=False)


def trend_roughness(trend: SeriesLike) -> float:
    """Sum of squared second differences of a trend series.

    This is the term weighted by lambda in the HP objective; it is
    non-increasing in lambda.
    """
    values = as_float_array(trend, name="trend")
    return float(second_difference_sum_squares(values))


@dataclass
class DecompositionResult:
    """Result container for a trend/cycle decomposition.

    The result unpacks like the tuple returned by ``hp_filter``::

        trend, cycle = HPFilter(1600).filter(y)

    Attributes:
        original: The filtered series as a float array
        trend: Trend component
        cycle: Cycle component, ``original - trend``
        lambda_: Smoothing parameter used
        solver: Linear solver used
        index: Index of the input when it was a pandas Series
        name: Name of the input when it was a pandas Series
    """

    original: np.ndarray
    trend: np.ndarray
    cycle: np.ndarray
    lambda_: float
    solver: SolverType = "sparse"
    index: Optional[pd.Index] = None
    name: Optional[Any] = None
    parameters: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        n = len(self.original)
        for label, component in (("trend", self.trend), ("cycle", self.cycle)):
            if len(component) != n:
                raise ShapeError(
                    f"{label.capitalize()} component length must match original data length",
                    array_name=label,
                    expected_shape=f"({n},)",
                    actual_shape=component.shape
                )

    def __iter__(self) -> Iterator[Series]:
        yield self.trend_series
        yield self.cycle_series

    @property
    def trend_series(self) -> Series:
        """Trend component, as a pandas Series when the input was one."""
        return self._wrap(self.trend)

    @property
    def cycle_series(self) -> Series:
        """Cycle component, as a pandas Series when the input was one."""
        return self._wrap(self.cycle)

    def _wrap(self, values: np.ndarray) -> Series:
        if self.index is None:
            return values
        return pd.Series(values, index=self.index, name=self.name)

    @property
    def roughness(self) -> float:
        """Sum of squared second differences of the trend."""
        return float(second_difference_sum_squares(self.trend))

    def to_dataframe(self) -> pd.DataFrame:
        """Return original, trend and cycle as columns of a DataFrame."""
        data = {
            "original": self.original,
            "trend": self.trend,
            "cycle": self.cycle
        }
        if self.index is not None:
            return pd.DataFrame(data, index=self.index)
        return pd.DataFrame(data)


class HPFilter:
    """Hodrick-Prescott filter.

    Attributes:
        lambda_: Smoothing parameter (higher values give smoother trends)
        solver: "sparse" for a sparse LU solve, "banded" for a banded
            Cholesky solve
    """

    def __init__(self, lambda_: Optional[float] = None, solver: Optional[SolverType] = None,
                 name: str = "Hodrick-Prescott Filter"):
        """Initialize the HP filter.

        Args:
            lambda_: Smoothing parameter (default from ``filters.lambda_``,
                normally 1600.0 for quarterly data)
            solver: Linear solver (default from ``filters.solver``)
            name: A descriptive name for the filter

        Raises:
            DomainError: If ``lambda_`` is negative
            ConfigurationError: If ``solver`` is unknown
        """
        self._name = name
        if lambda_ is None:
            lambda_ = get_config("filters", "lambda_", 1600.0)
        self.lambda_ = lambda_
        self.solver = _validate_solver(solver)

    @property
    def lambda_(self) -> float:
        return self._lambda

    @lambda_.setter
    def lambda_(self, value: float) -> None:
        self._lambda = validate_non_negative(value, "lambda_")

    def __repr__(self) -> str:
        return f"HPFilter(lambda_={self._lambda!r}, solver={self.solver!r})"

    def filter(self, data: SeriesLike, lambda_: Optional[float] = None) -> DecompositionResult:
        """Split a series into trend and cycle.

        Args:
            data: Series to filter (at least four observations, no missing values)
            lambda_: Smoothing parameter for this call only

        Returns:
            DecompositionResult: Trend and cycle components

        Raises:
            ShapeError: If the series is not 1-dimensional or too short
            DomainError: If ``lambda_`` is negative
            MissingDataError: If the series contains NaN or infinite values
            NumericalError: If the linear solve fails
        """
        lam = self._lambda if lambda_ is None else validate_non_negative(lambda_, "lambda_")

        y = as_float_array(data, name="y")
        validate_min_length(y, _min_observations(), name="y")
        validate_complete(y, name="y")

        if lam > LARGE_LAMBDA:
            warn_numerical(
                "Very large smoothing parameter; the trend may be inaccurate",
                operation="HP filter",
                issue="ill-conditioned system",
                value=lam
            )

        logger.debug(f"HP filter: n={len(y)}, lambda={lam}, solver={self.solver}")

        try:
            if self.solver == "banded":
                trend = _solve_banded(y, lam)
            else:
                trend = _solve_sparse(y, lam)
        except (linalg.LinAlgError, RuntimeError, ValueError) as e:
            raise NumericalError(
                f"HP filter failed: {e}",
                operation="HP filter",
                error_type="solve",
                details=str(e)
            ) from e

        trend = np.asarray(trend, dtype=np.float64)
        if not np.all(np.isfinite(trend)):
            raise_numerical_error(
                "HP filter produced non-finite trend values",
                operation="HP filter",
                values=trend,
                error_type="non-finite"
            )

        cycle = y - trend

        index = data.index if isinstance(data, pd.Series) else None
        name = data.name if isinstance(data, pd.Series) else None
        return DecompositionResult(
            original=y,
            trend=trend,
            cycle=cycle,
            lambda_=lam,
            solver=self.solver,
            index=index,
            name=name,
            parameters={"lambda_": lam, "solver": self.solver}
        )

    async def filter_async(self, data: SeriesLike,
                           lambda_: Optional[float] = None) -> DecompositionResult:
        """Run ``filter`` in the default executor.

        Args:
            data: Series to filter
            lambda_: Smoothing parameter for this call only

        Returns:
            DecompositionResult: Trend and cycle components
        """
        loop = asyncio.get_event_loop()
        result = await loop.run_in_executor(
            None, lambda: self.filter(data, lambda_=lambda_)
        )
        return result


def hp_filter(y: SeriesLike, lambda_: Optional[float] = None,
              solver: Optional[SolverType] = None) -> TrendCycle:
    """Apply the Hodrick-Prescott filter.

    Args:
        y: Series to filter
        lambda_: Smoothing parameter (default: 1600.0 for quarterly data)
        solver: "sparse" or "banded"

    Returns:
        Tuple of (trend, cycle), pandas Series when ``y`` is one

    Raises:
        ShapeError: If ``y`` has fewer than four observations
        DomainError: If ``lambda_`` is negative
        MissingDataError: If ``y`` contains missing values
        NumericalError: If the linear solve fails
    """
    result = HPFilter(lambda_=lambda_, solver=solver).filter(y)
    return result.trend_series, result.cycle_series


def hp_filter_frame(table: Table, lambda_: Optional[float] = None,
                    columns: Optional[List[str]] = None,
                    solver: Optional[SolverType] = None
                    ) -> Tuple[pd.DataFrame, pd.DataFrame, Dict[str, Exception]]:
    """Filter several columns of a table independently.

    A column that cannot be filtered (too short, missing data, failed solve)
    is recorded in the returned failures and skipped; the remaining columns
    are still filtered.

    Args:
        table: DataFrame, or mapping of column name to series
        lambda_: Smoothing parameter
        columns: Columns to filter (default: all)
        solver: "sparse" or "banded"

    Returns:
        Tuple of (trends, cycles, failures); ``trends`` and ``cycles`` hold one
        column per successfully filtered input column
    """
    hp = HPFilter(lambda_=lambda_, solver=solver)
    if columns is None:
        columns = list(table.columns if isinstance(table, pd.DataFrame) else table.keys())
    index = table.index if isinstance(table, pd.DataFrame) else None

    trends: Dict[str, np.ndarray] = {}
    cycles: Dict[str, np.ndarray] = {}
    failures: Dict[str, Exception] = {}
    for col in columns:
        try:
            if col not in table:
                raise ShapeError(
                    f"table is missing required column: {col}",
                    array_name="table",
                    missing_columns=[str(col)]
                )
            result = hp.filter(table[col])
        except MacroPostError as e:
            logger.warning(f"HP filter failed for column {col}: {e.message}")
            failures[col] = e
            continue
        trends[col] = result.trend
        cycles[col] = result.cycle

    if index is None and trends:
        lengths = {len(v) for v in trends.values()}
        if len(lengths) > 1:
            # Unaligned mapping input: keep each column on its own range index
            return (pd.DataFrame({k: pd.Series(v) for k, v in trends.items()}),
                    pd.DataFrame({k: pd.Series(v) for k, v in cycles.items()}),
                    failures)

    return (pd.DataFrame(trends, index=index),
            pd.DataFrame(cycles, index=index),
            failures)
