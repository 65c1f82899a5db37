"""
Global Geary's C.

Geary's C compares squared differences between neighbors to the overall
variance:

    C = ((n - 1) / (2 S0)) * sum_i sum_j W_ij (x_i - x_j)^2 / sum_i dy_i^2

``E[C] = 1``. Values below 1 indicate positive spatial autocorrelation
(neighbors are alike), values above 1 negative autocorrelation. Inputs and
preconditions are the same as for Moran's I.
"""

from __future__ import annotations

import warnings
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd

from autocorr.config import (
    DEFAULT_ALTERNATIVE,
    DEFAULT_NSIM,
    MC_ALTERNATIVE_GEARY,
    SIGNIFICANCE_LEVEL,
)
from autocorr.core.weights import WeightMatrix
from autocorr.errors import InsufficientDataError
from autocorr.stats.moran import _cross_products, _normal_pvalue
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
class GearyResult:
    """
    Outcome of a global Geary's C computation.

    Fields mirror :class:`autocorr.stats.moran.MoranResult`, with ``C`` in
    place of ``I`` and ``expected`` always 1.
    """

    C: float
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
        return None if self.simulated is None else float(self.simulated.mean())

    @property
    def std_sim(self) -> Optional[float]:
        return None if self.simulated is None else float(self.simulated.std())

    def is_significant(self, level: float = SIGNIFICANCE_LEVEL) -> bool:
        p = self.p_sim if self.p_sim is not None else self.p_value
        return p is not None and p < level

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d.pop('simulated')
        return d

    def to_series(self) -> pd.Series:
        return pd.Series(self.to_dict(), name='geary')

    def __str__(self) -> str:
        lines = [f"Geary's C: {self.C:.6f}  (expected 1, n={self.n}, style={self.style})"]
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


def _squared_differences(deviations: np.ndarray, weights: WeightMatrix) -> np.ndarray:
    """``sum_i sum_j W_ij (z_i - z_j)^2`` for each row of a ``(k, n)`` stack."""
    # Expanded: sum_i r_i z_i^2 + sum_j c_j z_j^2 - 2 z'Wz
    margins = weights.row_sums + weights.col_sums
    return (deviations * deviations) @ margins - 2.0 * _cross_products(deviations, weights.matrix)


def _geary_statistic(deviations: np.ndarray, weights: WeightMatrix, sum_sq: float) -> np.ndarray:
    n = deviations.shape[-1]
    return ((n - 1) / (2.0 * weights.s0)) * _squared_differences(deviations, weights) / sum_sq


def geary(values, weights: WeightMatrix) -> GearyResult:
    """
    Compute the observed global Geary's C.

    Raises the same errors as :func:`autocorr.stats.moran.moran`.
    """
    _, dy, sum_sq = prepare_inputs(values, weights)
    n = dy.shape[0]
    C = float(_geary_statistic(dy[np.newaxis, :], weights, sum_sq)[0])
    return GearyResult(C=C, expected=1.0, n=n, s0=weights.s0, style=weights.style)


def geary_variance(values, weights: WeightMatrix, randomisation: bool = True) -> float:
    """
    Analytic variance of Geary's C under the null hypothesis.

    Raises
    ------
    InsufficientDataError
        If ``randomisation`` is True and there are fewer than 4 units.
    """
    _, dy, _ = prepare_inputs(values, weights)
    n = dy.shape[0]
    if randomisation and n < 4:
        raise InsufficientDataError(n, 4, what="The randomisation variance of Geary's C")

    s0, s1, s2 = weights.s0, weights.s1, weights.s2
    s02 = s0 * s0
    n2 = n * n

    if not randomisation:
        return ((2 * s1 + s2) * (n - 1) - 4 * s02) / (2 * (n + 1) * s02)

    k = sample_kurtosis(dy)
    a = (n - 1) * s1 * (n2 - 3 * n + 3 - (n - 1) * k)
    b = 0.25 * (n - 1) * s2 * (n2 + 3 * n - 6 - (n2 - n + 2) * k)
    c = s02 * (n2 - 3 - (n - 1) ** 2 * k)
    return float((a - b + c) / (n * (n - 2) * (n - 3) * s02))


def geary_test(
    values,
    weights: WeightMatrix,
    randomisation: bool = True,
    alternative: str = DEFAULT_ALTERNATIVE,
) -> GearyResult:
    """
    Geary's C with an analytic z-test.

    ``z = (C - 1) / sqrt(variance)``. With ``alternative='less'`` the test
    looks for positive autocorrelation (C below 1).
    """
    check_alternative(alternative)
    base = geary(values, weights)
    variance = geary_variance(values, weights, randomisation=randomisation)

    if variance > 0:
        z = (base.C - base.expected) / np.sqrt(variance)
        p = _normal_pvalue(z, alternative)
    else:
        warnings.warn(
            f"Non-positive variance of Geary's C ({variance:.3g}); z-score is undefined",
            UserWarning,
            stacklevel=2,
        )
        z = p = float('nan')

    return GearyResult(
        C=base.C,
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


def geary_mc(
    values,
    weights: WeightMatrix,
    nsim: int = DEFAULT_NSIM,
    random_state: RandomState = None,
    alternative: str = MC_ALTERNATIVE_GEARY,
    n_jobs: int = 1,
    verbose: bool = False,
) -> GearyResult:
    """
    Geary's C with a Monte Carlo permutation test.

    The default alternative is 'less' because small C signals positive
    autocorrelation. See :func:`autocorr.stats.moran.moran_mc` for the
    other parameters.
    """
    check_alternative(alternative)
    base = geary(values, weights)
    _, dy, sum_sq = prepare_inputs(values, weights)

    simulated = simulate(
        lambda block: _geary_statistic(block, weights, sum_sq),
        dy,
        nsim,
        random_state=random_state,
        n_jobs=n_jobs,
    )
    simulated.setflags(write=False)

    result = GearyResult(
        C=base.C,
        expected=base.expected,
        n=base.n,
        s0=base.s0,
        style=base.style,
        alternative=alternative,
        nsim=simulated.shape[0],
        simulated=simulated,
        p_sim=empirical_pvalue(base.C, simulated, alternative),
    )

    if verbose:
        print(result)
        print(f"  simulated mean {result.mean_sim:.6f}, sd {result.std_sim:.6f}")

    return result
