"""
Global spatial autocorrelation statistics.

This package builds neighbor graphs and spatial weights for a set of spatial
units and computes Moran's I and Geary's C with analytic and Monte Carlo
significance tests.

Example usage:
    from autocorr import NeighborGraph, derive, moran_mc

    # Adjacency between five polygons
    graph = NeighborGraph.build(5, [(0, 3), (0, 4), (1, 3)], symmetric=True)

    # Binary weights
    w = derive(graph, style='B')

    # Permutation test with a fixed seed
    result = moran_mc([10, 6, 4, 11, 6], w, nsim=999, random_state=42)
    print(result)
"""

from autocorr.errors import (
    SpatialAutocorrelationError,
    InvalidIndexError,
    SelfLoopError,
    UnknownStyleError,
    DimensionMismatchError,
    InsufficientDataError,
    ZeroVarianceError,
    DegenerateWeightsError,
    NonFiniteValueError,
)
from autocorr.core.neighbors import NeighborGraph, NeighborSummary
from autocorr.core.weights import WeightMatrix, derive
from autocorr.core.contiguity import graph_from_geometries
from autocorr.stats.moran import (
    MoranResult,
    MoranScatter,
    moran,
    moran_test,
    moran_mc,
    moran_variance,
    moran_scatter,
    spatial_lag,
)
from autocorr.stats.geary import (
    GearyResult,
    geary,
    geary_test,
    geary_mc,
    geary_variance,
)
from autocorr.stats.permutation import PermutationSource, empirical_pvalue

__version__ = "0.1.0"

__all__ = [
    # Errors
    "SpatialAutocorrelationError",
    "InvalidIndexError",
    "SelfLoopError",
    "UnknownStyleError",
    "DimensionMismatchError",
    "InsufficientDataError",
    "ZeroVarianceError",
    "DegenerateWeightsError",
    "NonFiniteValueError",
    # Neighbors and weights
    "NeighborGraph",
    "NeighborSummary",
    "WeightMatrix",
    "derive",
    "graph_from_geometries",
    # Moran's I
    "MoranResult",
    "MoranScatter",
    "moran",
    "moran_test",
    "moran_mc",
    "moran_variance",
    "moran_scatter",
    "spatial_lag",
    # Geary's C
    "GearyResult",
    "geary",
    "geary_test",
    "geary_mc",
    "geary_variance",
    # Permutation tests
    "PermutationSource",
    "empirical_pvalue",
]
