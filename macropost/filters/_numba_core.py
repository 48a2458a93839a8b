"""
Numba-accelerated kernels for the trend filter.

The Hodrick-Prescott normal equations matrix ``I + lambda * D'D`` is symmetric
and pentadiagonal, so it is fully described by its main diagonal and the
first two superdiagonals. The kernels here fill those three bands directly,
including the modified rows at both ends of the series where the
second-difference penalty is truncated.
"""

import logging
from typing import Tuple

import numpy as np
from numba import jit

# Set up module-level logger
logger = logging.getLogger("macropost.filters._numba_core")


@jit(nopython=True, cache=True)
def hp_penalty_bands(n: int, lam: float) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Compute the bands of the HP normal equations matrix.

    Interior rows carry the stencil ``[lam, -4 lam, 6 lam + 1, -4 lam, lam]``.
    The first row is ``[1 + lam, -2 lam, lam]`` and the second row is
    ``[-2 lam, 1 + 5 lam, -4 lam, lam]``; the last two rows mirror them.

    Args:
        n: Number of observations, at least 4
        lam: Smoothing parameter

    Returns:
        Tuple of (main diagonal of length n, first superdiagonal of length
        n - 1, second superdiagonal of length n - 2)
    """
    main = np.empty(n)
    first = np.empty(n - 1)
    second = np.empty(n - 2)

    for i in range(n):
        main[i] = 6.0 * lam + 1.0
    for i in range(n - 1):
        first[i] = -4.0 * lam
    for i in range(n - 2):
        second[i] = lam

    # Free boundary at both ends
    main[0] = 1.0 + lam
    main[1] = 1.0 + 5.0 * lam
    main[n - 2] = 1.0 + 5.0 * lam
    main[n - 1] = 1.0 + lam
    first[0] = -2.0 * lam
    first[n - 2] = -2.0 * lam

    return main, first, second


@jit(nopython=True, cache=True)
def second_difference_sum_squares(x: np.ndarray) -> float:
    """
    Sum of squared second differences of a series.

    Args:
        x: Series of length n

    Returns:
        float: ``sum((x[t+1] - 2 x[t] + x[t-1])**2)`` over interior t
    """
    total = 0.0
    for t in range(1, len(x) - 1):
        d2 = x[t + 1] - 2.0 * x[t] + x[t - 1]
        total += d2 * d2
    return total
