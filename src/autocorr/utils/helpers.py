#!/usr/bin/env python3
"""
Common utility functions for autocorr.

This module provides input checks and display helpers shared by the
statistics modules.
"""
from __future__ import annotations

import numpy as np
import pandas as pd

from autocorr.errors import (
    DegenerateWeightsError,
    DimensionMismatchError,
    InsufficientDataError,
    NonFiniteValueError,
    ZeroVarianceError,
)


def as_value_vector(values, n: int) -> np.ndarray:
    """
    Convert values to a float vector aligned with ``n`` units.

    Values are matched to units by position; a pandas Series index is
    ignored. A column vector of shape ``(n, 1)`` is accepted; any other
    multi-dimensional input is rejected.

    Raises
    ------
    DimensionMismatchError
        If the input is not one value per unit.
    NonFiniteValueError
        If any value is NaN or infinite.
    """
    if isinstance(values, pd.Series):
        values = values.to_numpy()
    arr = np.asarray(values, dtype=float)
    if arr.ndim == 2 and arr.shape[1] == 1:
        arr = arr[:, 0]
    if arr.ndim != 1:
        raise DimensionMismatchError(arr.size, n, shape=arr.shape)
    if arr.shape[0] != n:
        raise DimensionMismatchError(arr.shape[0], n)
    bad = np.flatnonzero(~np.isfinite(arr))
    if bad.size:
        raise NonFiniteValueError(bad.tolist())
    return arr


def prepare_inputs(values, weights) -> tuple:
    """
    Run the shared preconditions of the global statistics.

    Returns
    -------
    tuple
        ``(values, deviations, sum_sq)`` where ``deviations`` are the values
        minus their mean and ``sum_sq`` is the sum of squared deviations.
    """
    y = as_value_vector(values, weights.n)
    n = y.shape[0]
    if n < 2:
        raise InsufficientDataError(n, 2)

    if np.all(y == y[0]):
        raise ZeroVarianceError(float(y[0]))

    with np.errstate(over='ignore', invalid='ignore'):
        dy = y - y.mean()
        sum_sq = float(np.sum(dy * dy))
    if not np.isfinite(sum_sq):
        raise NonFiniteValueError(
            [],
            detail=f"sum of squared deviations overflows (largest |value| = {np.max(np.abs(y)):g}); rescale the values",
        )
    if sum_sq == 0:
        raise ZeroVarianceError(float(y[0]))

    if weights.s0 == 0:
        raise DegenerateWeightsError(n)

    return y, dy, sum_sq


def sample_kurtosis(deviations: np.ndarray) -> float:
    """
    Sample kurtosis ``(sum(dy**4) / n) / (sum(dy**2) / n)**2``.

    Computed on deviations scaled by their largest magnitude; the ratio is
    scale free and the fourth powers stay finite.
    """
    z = deviations / np.max(np.abs(deviations))
    m2 = np.mean(z * z)
    return float(np.mean(z ** 4) / (m2 * m2))


def format_pvalue(p: float, threshold: float = 0.001) -> str:
    """Format p-value for display."""
    if np.isnan(p):
        return "NA"
    if p < threshold:
        return f"<{threshold}"
    return f"{p:.3f}"


def add_significance_stars(p: float) -> str:
    """Add significance stars based on p-value."""
    if p < 0.001:
        return "***"
    elif p < 0.01:
        return "**"
    elif p < 0.05:
        return "*"
    return ""
