"""
Spatial weights matrices.

Turns a NeighborGraph into a dense ``n x n`` weights matrix under one of two
standardization styles:

- ``'B'``: binary, ``W[i, j] = 1`` for each neighbor ``j`` of ``i``.
- ``'W'``: row-standardized, ``W[i, j] = 1 / deg(i)``; each non-island row
  sums to 1. Island rows stay zero and are recorded as degenerate.

Example
-------
>>> graph = NeighborGraph.build(3, [(0, 1), (1, 2)], symmetric=True)
>>> w = derive(graph, 'W')
>>> w.row_sums
array([1., 1., 1.])
"""

from __future__ import annotations

import warnings
from typing import Tuple

import numpy as np
import pandas as pd

from autocorr.config import DEFAULT_WEIGHT_STYLE, ROW_SUM_TOLERANCE, WEIGHT_STYLES
from autocorr.core.neighbors import NeighborGraph
from autocorr.errors import DimensionMismatchError, UnknownStyleError


class WeightMatrix:
    """
    Dense spatial weights derived from a NeighborGraph.

    Use :meth:`derive` (or the module-level :func:`derive`) to construct.

    Attributes
    ----------
    matrix : np.ndarray
        Read-only ``(n, n)`` float array with a zero diagonal.
    style : str
        ``'B'`` or ``'W'``.
    graph : NeighborGraph
        The adjacency the weights were derived from.
    degenerate_units : tuple[int, ...]
        Island units whose rows are all zero.
    """

    def __init__(
        self,
        matrix: np.ndarray,
        style: str,
        graph: NeighborGraph,
        degenerate_units: Tuple[int, ...] = (),
    ):
        matrix = np.array(matrix, dtype=float)
        matrix.setflags(write=False)
        self.matrix = matrix
        self.style = style
        self.graph = graph
        self.degenerate_units = tuple(degenerate_units)

    @classmethod
    def derive(cls, graph: NeighborGraph, style: str = DEFAULT_WEIGHT_STYLE) -> "WeightMatrix":
        """
        Derive weights from a neighbor graph.

        Parameters
        ----------
        graph : NeighborGraph
            Adjacency relation.
        style : str, default='W'
            ``'B'`` (binary) or ``'W'`` (row-standardized).

        Returns
        -------
        WeightMatrix

        Raises
        ------
        UnknownStyleError
            If ``style`` is not ``'B'`` or ``'W'``.

        Warns
        -----
        UserWarning
            For style ``'W'`` when some units have no neighbors.
        """
        if style not in WEIGHT_STYLES:
            raise UnknownStyleError(style, WEIGHT_STYLES)

        n = graph.n
        matrix = np.zeros((n, n), dtype=float)
        for i, j in graph.pairs():
            matrix[i, j] = 1.0

        degenerate: Tuple[int, ...] = ()
        if style == 'W':
            degrees = graph.degrees()
            has_links = degrees > 0
            matrix[has_links] /= degrees[has_links, np.newaxis]
            degenerate = graph.islands()
            if degenerate:
                warnings.warn(
                    f"{len(degenerate)} unit(s) have no neighbors and get all-zero "
                    f"rows under row-standardization: {list(degenerate)[:10]}",
                    UserWarning,
                    stacklevel=2,
                )

        return cls(matrix, style, graph, degenerate)

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    @property
    def n(self) -> int:
        """Number of units."""
        return self.matrix.shape[0]

    @property
    def s0(self) -> float:
        """Sum of all weights."""
        return float(self.matrix.sum())

    @property
    def s1(self) -> float:
        """Half the sum of squared symmetric weights, ``0.5 * sum((w_ij + w_ji)^2)``."""
        sym = self.matrix + self.matrix.T
        return float(0.5 * (sym * sym).sum())

    @property
    def s2(self) -> float:
        """Sum over units of squared row-plus-column totals."""
        return float(((self.row_sums + self.col_sums) ** 2).sum())

    @property
    def row_sums(self) -> np.ndarray:
        return self.matrix.sum(axis=1)

    @property
    def col_sums(self) -> np.ndarray:
        return self.matrix.sum(axis=0)

    def check_row_sums(self, tol: float = ROW_SUM_TOLERANCE) -> bool:
        """
        Check that every non-island row of a row-standardized matrix sums to 1.

        Always True for binary weights.
        """
        if self.style != 'W':
            return True
        sums = self.row_sums
        linked = np.ones(self.n, dtype=bool)
        linked[list(self.degenerate_units)] = False
        return bool(np.all(np.abs(sums[linked] - 1.0) <= tol))

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def lag(self, values) -> np.ndarray:
        """
        Spatial lag ``W @ values``.

        For row-standardized weights this is the mean of each unit's
        neighbors; for binary weights it is their sum.
        """
        values = np.asarray(values, dtype=float)
        if values.shape[0] != self.n:
            raise DimensionMismatchError(values.shape[0], self.n)
        return self.matrix @ values

    def to_frame(self) -> pd.DataFrame:
        """Weights as a DataFrame indexed by unit."""
        return pd.DataFrame(self.matrix.copy())

    def __repr__(self) -> str:
        return f"WeightMatrix(n={self.n}, style={self.style!r}, s0={self.s0:.4g})"


def derive(graph: NeighborGraph, style: str = DEFAULT_WEIGHT_STYLE) -> WeightMatrix:
    """Derive a WeightMatrix from a NeighborGraph. See :meth:`WeightMatrix.derive`."""
    return WeightMatrix.derive(graph, style)
