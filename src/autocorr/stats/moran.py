"""
Global Moran's I.

Moran's I measures whether neighboring units carry similar values:

    I = (n / sum_i dy_i^2) * (sum_i sum_j W_ij dy_i dy_j / S0)

where ``dy`` are deviations from the mean and ``S0`` is the sum of all
weights. Under no spatial autocorrelation ``E[I] = -1 / (n - 1)``.

Three entry points share the same preconditions:

- :func:`moran` computes the observed index.
- :func:`moran_test` adds the analytic z-test under normality or
  randomisation.
- :func:`moran_mc` adds a Monte Carlo permutation test.

Example Usage
-------------
>>> graph = NeighborGraph.build(5, pairs, symmetric=True)
>>> w = derive(graph, 'B')
>>> result = moran_mc(values, w, nsim=999, random_state=42)
>>> print(f"I = {result.I:.3f}, p = {result.p_sim:.3f}")
"""

from __future__ import annotations

import warnings
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd
from scipy import stats

from autocorr.config import (
    DEFAULT_ALTERNATIVE,
    DEFAULT_NSIM,
    MC_ALTERNATIVE_MORAN,
    SIGNIFICANCE_LEVEL,
)
from autocorr.core.weights import WeightMatrix
from autocorr.errors import InsufficientDataError
from autocorr.stats.permutation import (
    RandomState,
    check_alternative,
    empirical_pvalue,
    simulate,
)
from autocorr.utils.helpers import (
    add_significance_stars,
    format_pvalue,
    prepare_inputs,
    sample_kurtosis,
)


@dataclass(frozen=True)
class MoranResult:
    """
    Outcome of a global Moran's I computation.

    Attributes
    ----------
    I : float
        Observed Moran's I.
    expected : float
        ``E[I] = -1 / (n - 1)``.
    n : int
        Number of units.
    s0 : float
        Sum of weights.
    style : str
        Weight style the index was computed with.
    variance : float, optional
        Analytic variance of I (``moran_test`` only).
    z_score : float, optional
        ``(I - E[I]) / sqrt(variance)``.
    p_value : float, optional
        Analytic p-value for ``alternative``.
    randomisation : bool, optional
        Whether the variance assumes randomisation (True) or normality.
    alternative : str, optional
        Alternative hypothesis of the reported p-value.
    nsim : int, optional
        Number of permutations (``moran_mc`` only).
    simulated : np.ndarray, optional
        Simulated I values, one per permutation.
    p_sim : float, optional
        Empirical p-value from the permutation distribution.
    """

    I: float
    expected: float
    n: int
    s0: float
    style: str
    variance: Optional[float] = None
    z_score: Optional[float] = None
    p_value: Optional[float] = None
    randomisation: Optional[bool] = None
    alternative: Optional[str] = None
    nsim: Optional[int] = None
    simulated: Optional[np.ndarray] = field(default=None, repr=False, compare=False)
    p_sim: Optional[float] = None

    @property
    def mean_sim(self) -> Optional[float]:
        """Mean of the permutation distribution."""
        return None if self.simulated is None else float(self.simulated.mean())

    @property
    def std_sim(self) -> Optional[float]:
        """Standard deviation of the permutation distribution."""
        return None if self.simulated is None else float(self.simulated.std())

    def is_significant(self, level: float = SIGNIFICANCE_LEVEL) -> bool:
        """True if the permutation (preferred) or analytic p-value is below ``level``."""
        p = self.p_sim if self.p_sim is not None else self.p_value
        return p is not None and p < level

    def to_dict(self) -> Dict[str, Any]:
        """Scalar fields as a dictionary; the simulated values are left out."""
        d = asdict(self)
        d.pop('simulated')
        return d

    def to_series(self) -> pd.Series:
        return pd.Series(self.to_dict(), name='moran')

    def __str__(self) -> str:
        lines = [
            f"Moran's I: {self.I:.6f}  (expected {self.expected:.6f}, n={self.n}, style={self.style})"
        ]
        if self.z_score is not None:
            mode = 'randomisation' if self.randomisation else 'normality'
            lines.append(
                f"  analytic ({mode}, {self.alternative}): z = {self.z_score:.4f}, "
                f"p = {format_pvalue(self.p_value)}{add_significance_stars(self.p_value)}"
            )
        if self.p_sim is not None:
            lines.append(
                f"  Monte Carlo ({self.nsim} permutations, {self.alternative}): "
                f"p = {format_pvalue(self.p_sim)}{add_significance_stars(self.p_sim)}"
            )
        return "\n".join(lines)


def _cross_products(deviations: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """``sum_i sum_j W_ij z_i z_j`` for each row ``z`` of a ``(k, n)`` stack."""
    return np.einsum('ki,ij,kj->k', deviations, matrix, deviations)


def _moran_statistic(deviations: np.ndarray, weights: WeightMatrix, sum_sq: float) -> np.ndarray:
    n = deviations.shape[-1]
    return (n / sum_sq) * (_cross_products(deviations, weights.matrix) / weights.s0)


def _normal_pvalue(z: float, alternative: str) -> float:
    if alternative == 'greater':
        return float(stats.norm.sf(z))
    if alternative == 'less':
        return float(stats.norm.cdf(z))
    return float(2.0 * stats.norm.sf(abs(z)))


def moran(values, weights: WeightMatrix) -> MoranResult:
    """
    Compute the observed global Moran's I.

    Parameters
    ----------
    values : array-like
        One value per unit, aligned by position with ``weights``.
    weights : WeightMatrix
        Spatial weights.

    Returns
    -------
    MoranResult

    Raises
    ------
    DimensionMismatchError
        If ``len(values) != weights.n``.
    InsufficientDataError
        If there are fewer than 2 units.
    ZeroVarianceError
        If all values are identical.
    DegenerateWeightsError
        If the weights have no links at all.
    """
    _, dy, sum_sq = prepare_inputs(values, weights)
    n = dy.shape[0]
    I = float(_moran_statistic(dy[np.newaxis, :], weights, sum_sq)[0])
    return MoranResult(
        I=I,
        expected=-1.0 / (n - 1),
        n=n,
        s0=weights.s0,
        style=weights.style,
    )


def moran_variance(values, weights: WeightMatrix, randomisation: bool = True) -> float:
    """
    Analytic variance of Moran's I under the null hypothesis.

    Parameters
    ----------
    values : array-like
        One value per unit.
    weights : WeightMatrix
        Spatial weights.
    randomisation : bool, default=True
        Use the randomisation variance (accounts for sample kurtosis);
        otherwise the normality variance.

    Raises
    ------
    InsufficientDataError
        If ``randomisation`` is True and there are fewer than 4 units.
    """
    _, dy, _ = prepare_inputs(values, weights)
    n = dy.shape[0]
    if randomisation and n < 4:
        raise InsufficientDataError(n, 4, what="The randomisation variance of Moran's I")

    s0, s1, s2 = weights.s0, weights.s1, weights.s2
    s02 = s0 * s0
    n2 = n * n
    ei = -1.0 / (n - 1)

    if not randomisation:
        return (n2 * s1 - n * s2 + 3 * s02) / ((n2 - 1) * s02) - ei * ei

    # Sample kurtosis
    k = sample_kurtosis(dy)
    a = n * ((n2 - 3 * n + 3) * s1 - n * s2 + 3 * s02)
    b = k * ((n2 - n) * s1 - 2 * n * s2 + 6 * s02)
    return float((a - b) / ((n - 1) * (n - 2) * (n - 3) * s02) - ei * ei)


def moran_test(
    values,
    weights: WeightMatrix,
    randomisation: bool = True,
    alternative: str = DEFAULT_ALTERNATIVE,
) -> MoranResult:
    """
    Moran's I with an analytic z-test.

    Parameters
    ----------
    values : array-like
        One value per unit.
    weights : WeightMatrix
        Spatial weights.
    randomisation : bool, default=True
        Variance under randomisation (True) or normality (False).
    alternative : str, default='two-sided'
        'two-sided', 'greater' (positive autocorrelation) or 'less'.

    Returns
    -------
    MoranResult
        With ``variance``, ``z_score`` and ``p_value`` set. If the variance
        is not positive, z and p are NaN and a warning is issued.
    """
    check_alternative(alternative)
    base = moran(values, weights)
    variance = moran_variance(values, weights, randomisation=randomisation)

    if variance > 0:
        z = (base.I - base.expected) / np.sqrt(variance)
        p = _normal_pvalue(z, alternative)
    else:
        warnings.warn(
            f"Non-positive variance of Moran's I ({variance:.3g}); z-score is undefined",
            UserWarning,
            stacklevel=2,
        )
        z = p = float('nan')

    return MoranResult(
        I=base.I,
        expected=base.expected,
        n=base.n,
        s0=base.s0,
        style=base.style,
        variance=float(variance),
        z_score=float(z),
        p_value=float(p),
        randomisation=randomisation,
        alternative=alternative,
    )


def moran_mc(
    values,
    weights: WeightMatrix,
    nsim: int = DEFAULT_NSIM,
    random_state: RandomState = None,
    alternative: str = MC_ALTERNATIVE_MORAN,
    n_jobs: int = 1,
    verbose: bool = False,
) -> MoranResult:
    """
    Moran's I with a Monte Carlo permutation test.

    Values are shuffled across units ``nsim`` times with the weights held
    fixed; the observed I is ranked among the ``nsim + 1`` values.

    Parameters
    ----------
    values : array-like
        One value per unit.
    weights : WeightMatrix
        Spatial weights.
    nsim : int, default=99
        Number of permutations.
    random_state : None, int, numpy Generator or permutation source
        Source of shuffles. Pass a seed or a seeded generator for
        reproducible results.
    alternative : str, default='greater'
        'greater', 'less' or 'two-sided'.
    n_jobs : int, default=1
        Worker threads for evaluating permutations.
    verbose : bool, default=False
        Print the result.

    Returns
    -------
    MoranResult
        With ``nsim``, ``simulated`` and ``p_sim`` set.
    """
    check_alternative(alternative)
    base = moran(values, weights)
    _, dy, sum_sq = prepare_inputs(values, weights)

    simulated = simulate(
        lambda block: _moran_statistic(block, weights, sum_sq),
        dy,
        nsim,
        random_state=random_state,
        n_jobs=n_jobs,
    )
    simulated.setflags(write=False)

    result = MoranResult(
        I=base.I,
        expected=base.expected,
        n=base.n,
        s0=base.s0,
        style=base.style,
        alternative=alternative,
        nsim=simulated.shape[0],
        simulated=simulated,
        p_sim=empirical_pvalue(base.I, simulated, alternative),
    )

    if verbose:
        print(result)
        print(f"  simulated mean {result.mean_sim:.6f}, sd {result.std_sim:.6f}")

    return result


def spatial_lag(values, weights: WeightMatrix) -> np.ndarray:
    """Spatial lag of ``values`` (neighbor average for row-standardized weights)."""
    return weights.lag(values)


@dataclass(frozen=True)
class MoranScatter:
    """
    Data behind a Moran scatterplot.

    Attributes
    ----------
    data : pd.DataFrame
        Columns ``value``, ``deviation`` and ``lag`` (spatial lag of the
        deviations), one row per unit.
    slope : float
        OLS slope of ``lag`` on ``deviation``. Equals Moran's I when the
        weights are row-standardized with no islands.
    intercept : float
        OLS intercept.
    """

    data: pd.DataFrame = field(repr=False)
    slope: float
    intercept: float


def moran_scatter(values, weights: WeightMatrix) -> MoranScatter:
    """Deviations against their spatial lag, with the fitted regression line."""
    y, dy, _ = prepare_inputs(values, weights)
    lag = weights.lag(dy)
    fit = stats.linregress(dy, lag)
    data = pd.DataFrame({'value': y, 'deviation': dy, 'lag': lag})
    data.index.name = 'unit'
    return MoranScatter(data=data, slope=float(fit.slope), intercept=float(fit.intercept))
