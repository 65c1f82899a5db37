"""
Core structures: neighbor graphs, weights matrices, and polygon contiguity.
"""

from autocorr.core.neighbors import NeighborGraph, NeighborSummary
from autocorr.core.weights import WeightMatrix, derive
from autocorr.core.contiguity import graph_from_geometries, contiguity_pairs

__all__ = [
    "NeighborGraph",
    "NeighborSummary",
    "WeightMatrix",
    "derive",
    "graph_from_geometries",
    "contiguity_pairs",
]
