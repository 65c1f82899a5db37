"""
Neighbor graphs for spatial units.

A NeighborGraph records which units (polygons, cells, regions) are adjacent.
Units are identified by integer positions ``0..n-1``; the graph is immutable
once built. Symmetry of the relation is assumed but not enforced, and units
with no neighbors (islands) are allowed.

Example
-------
>>> graph = NeighborGraph.build(4, [(0, 1), (1, 2), (2, 3)], symmetric=True)
>>> graph.neighbors_of(1)
(0, 2)
>>> graph.summary().mean_degree
1.5
"""

from __future__ import annotations

import operator
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from autocorr.errors import InvalidIndexError, SelfLoopError


def _as_index(value, n: int, pair=None) -> int:
    """Coerce an index to int and check it lies in [0, n)."""
    if isinstance(value, (bool, np.bool_)):
        raise InvalidIndexError(value, n, pair)
    try:
        idx = operator.index(value)
    except TypeError:
        raise InvalidIndexError(value, n, pair) from None
    if idx < 0 or idx >= n:
        raise InvalidIndexError(idx, n, pair)
    return idx


@dataclass(frozen=True)
class NeighborSummary:
    """
    Descriptive statistics for a NeighborGraph.

    Attributes
    ----------
    n : int
        Number of units.
    n_links : int
        Number of directed neighbor links.
    mean_degree : float
        Average number of neighbors per unit.
    percent_nonzero : float
        Share of non-zero cells in the implied n x n weights matrix.
    degree_counts : pd.Series
        Number of units (values) having each degree (index).
    least_connected : tuple[int, ...]
        Units with the smallest degree.
    most_connected : tuple[int, ...]
        Units with the largest degree.
    islands : tuple[int, ...]
        Units with no neighbors.
    """

    n: int
    n_links: int
    mean_degree: float
    percent_nonzero: float
    degree_counts: pd.Series = field(compare=False)
    least_connected: Tuple[int, ...] = ()
    most_connected: Tuple[int, ...] = ()
    islands: Tuple[int, ...] = ()

    def __str__(self) -> str:
        lines = [
            f"Number of units: {self.n}",
            f"Number of nonzero links: {self.n_links}",
            f"Percentage nonzero weights: {self.percent_nonzero:.4g}",
            f"Average number of links: {self.mean_degree:.4g}",
        ]
        if self.islands:
            lines.append(
                f"{len(self.islands)} unit(s) with no links: "
                + " ".join(str(i) for i in self.islands)
            )
        if len(self.degree_counts):
            lines.append("Link number distribution:")
            lines.append(
                "  degree: " + " ".join(f"{d:>3}" for d in self.degree_counts.index)
            )
            lines.append(
                "  units:  " + " ".join(f"{c:>3}" for c in self.degree_counts.values)
            )
            if self.least_connected:
                lo = int(self.degree_counts.index.min())
                lines.append(
                    f"{len(self.least_connected)} least connected unit(s): "
                    + " ".join(str(i) for i in self.least_connected)
                    + f" with {lo} link(s)"
                )
            if self.most_connected:
                hi = int(self.degree_counts.index.max())
                lines.append(
                    f"{len(self.most_connected)} most connected unit(s): "
                    + " ".join(str(i) for i in self.most_connected)
                    + f" with {hi} link(s)"
                )
        return "\n".join(lines)


class NeighborGraph:
    """
    Adjacency relation between ``n`` spatial units.

    Build instances with :meth:`build`, :meth:`from_dict` or
    :meth:`from_frame`; the constructor expects already-validated lists.

    Parameters
    ----------
    n : int
        Number of units.
    neighbors : list of tuple of int
        ``neighbors[i]`` is the ordered tuple of neighbors of unit ``i``.
    """

    def __init__(self, n: int, neighbors: Sequence[Tuple[int, ...]]):
        if len(neighbors) != n:
            raise ValueError(f"Expected {n} neighbor lists, got {len(neighbors)}")
        self._n = n
        self._neighbors: Tuple[Tuple[int, ...], ...] = tuple(tuple(nb) for nb in neighbors)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def build(
        cls,
        n: int,
        pairs: Iterable[Tuple[int, int]],
        symmetric: bool = False,
    ) -> "NeighborGraph":
        """
        Build a graph from ``(i, j)`` adjacency pairs.

        Each pair adds ``j`` to the neighbors of ``i``. Duplicate pairs are
        ignored; neighbor order follows first appearance.

        Parameters
        ----------
        n : int
            Number of units.
        pairs : iterable of (int, int)
            Adjacency pairs.
        symmetric : bool, default=False
            Also add ``i`` to the neighbors of ``j`` for every pair.

        Returns
        -------
        NeighborGraph

        Raises
        ------
        InvalidIndexError
            If ``n`` is not a non-negative integer or a pair references a
            unit outside ``[0, n)``.
        SelfLoopError
            If a pair has ``i == j``.
        """
        if isinstance(n, (bool, np.bool_)):
            raise InvalidIndexError(n, 0)
        try:
            n = operator.index(n)
        except TypeError:
            raise InvalidIndexError(n, 0) from None
        if n < 0:
            raise InvalidIndexError(n, 0)

        lists: List[List[int]] = [[] for _ in range(n)]
        seen: List[set] = [set() for _ in range(n)]

        def _add(a: int, b: int) -> None:
            if b not in seen[a]:
                seen[a].add(b)
                lists[a].append(b)

        for pair in pairs:
            i, j = pair
            i = _as_index(i, n, pair=(i, j))
            j = _as_index(j, n, pair=(i, j))
            if i == j:
                raise SelfLoopError(i)
            _add(i, j)
            if symmetric:
                _add(j, i)

        return cls(n, [tuple(nb) for nb in lists])

    @classmethod
    def from_dict(
        cls,
        mapping: Mapping[int, Iterable[int]],
        n: Optional[int] = None,
    ) -> "NeighborGraph":
        """
        Build a graph from a ``{unit: [neighbors, ...]}`` mapping.

        If ``n`` is omitted it is taken as one more than the largest index
        among the keys and their neighbors.
        Units missing from the mapping are islands.
        """
        pairs =[(i, j) for i, nbs in mapping.items() for j in nbs]
        if n is None:
            indices = list(mapping) + [j for _, j in pairs]
            n = int(max(indices)) + 1 if indices else 0
        return cls.build(n, pairs)

    @classmethod
    def from_frame(
        cls,
        df: pd.DataFrame,
        source: str = 'source',
        target: str = 'target',
        n: Optional[int] = None,
        symmetric: bool = False,
    ) -> "NeighborGraph":
        """
        Build a graph from an edge-list DataFrame.

        Parameters
        ----------
        df : pd.DataFrame
            One row per adjacency link.
        source, target : str
            Column names holding the unit indices.
        n : int, optional
            Number of units. Defaults to one more than the largest index.
        symmetric : bool, default=False
            Add each link in both directions.
        """
        missing = [c for c in (source, target) if c not in df.columns]
        if missing:
            raise ValueError(f"Edge list is missing column(s): {missing}")
        if n is None:
            n = int(max(df[source].max(), df[target].max())) + 1 if len(df) else 0
        pairs = zip(df[source].tolist(), df[target].tolist())
        return cls.build(n, pairs, symmetric=symmetric)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def n(self) -> int:
        """Number of units."""
        return self._n

    def __len__(self) -> int:
        return self._n

    def __repr__(self) -> str:
        return f"NeighborGraph(n={self._n}, n_links={self.n_links})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, NeighborGraph):
            return NotImplemented
        return self._n == other._n and self._neighbors == other._neighbors

    def __hash__(self) -> int:
        return hash((self._n, self._neighbors))

    def neighbors_of(self, i: int) -> Tuple[int, ...]:
        """Ordered neighbors of unit ``i`` (empty for an island)."""
        return self._neighbors[_as_index(i, self._n)]

    def degree(self, i: int) -> int:
        """Number of neighbors of unit ``i``."""
        return len(self.neighbors_of(i))

    def degrees(self) -> np.ndarray:
        """Degrees of all units as an integer array."""
        return np.array([len(nb) for nb in self._neighbors], dtype=int)

    @property
    def n_links(self) -> int:
        """Total number of directed links."""
        return sum(len(nb) for nb in self._neighbors)

    def islands(self) -> Tuple[int, ...]:
        """Units with no neighbors."""
        return tuple(i for i, nb in enumerate(self._neighbors) if not nb)

    def pairs(self) -> List[Tuple[int, int]]:
        """All directed ``(i, j)`` links in unit order."""
        return [(i, j) for i, nb in enumerate(self._neighbors) for j in nb]

    def asymmetric_pairs(self) -> List[Tuple[int, int]]:
        """Links ``(i, j)`` whose reverse ``(j, i)`` is absent."""
        lookup = [set(nb) for nb in self._neighbors]
        return [(i, j) for i, j in self.pairs() if i not in lookup[j]]

    def is_symmetric(self) -> bool:
        """True if every link has its reverse."""
        return not self.asymmetric_pairs()

    def to_dict(self) -> Dict[int, List[int]]:
        """Neighbors as a ``{unit: [neighbors]}`` dictionary."""
        return {i: list(nb) for i, nb in enumerate(self._neighbors)}

    def to_frame(self) -> pd.DataFrame:
        """Edge list with ``source`` and ``target`` columns."""
        return pd.DataFrame(self.pairs(), columns=['source', 'target'], dtype=int)

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def summary(self) -> NeighborSummary:
        """Aggregate degree statistics, for checking adjacency before analysis."""
        degrees = self.degrees()
        n = self._n
        if n == 0:
            return NeighborSummary(
                n=0,
                n_links=0,
                mean_degree=0.0,
                percent_nonzero=0.0,
                degree_counts=pd.Series([], dtype=int, name='units'),
            )

        counts = pd.Series(degrees).value_counts().sort_index()
        counts.index.name = 'degree'
        counts.name = 'units'

        return NeighborSummary(
            n=n,
            n_links=int(degrees.sum()),
            mean_degree=float(degrees.mean()),
            percent_nonzero=100.0 * degrees.sum() / (n * n),
            degree_counts=counts,
            least_connected=tuple(int(i) for i in np.flatnonzero(degrees == degrees.min())),
            most_connected=tuple(int(i) for i in np.flatnonzero(degrees == degrees.max())),
            islands=self.islands(),
        )

    def print_summary(self) -> None:
        """Print the degree summary."""
        print(self.summary())
