"""
Polygon contiguity neighbors.

Derives a NeighborGraph from polygon geometry. Requires geopandas and shapely.

Queen contiguity: polygons are neighbors if they share any boundary
(edge or vertex).

Rook contiguity: polygons are neighbors only if they share an edge
(not just a vertex point).
"""

from __future__ import annotations

from typing import Any, List, Tuple

from autocorr.config import CONTIGUITY_TYPES, DEFAULT_CONTIGUITY
from autocorr.core.neighbors import NeighborGraph

try:
    import geopandas as gpd
    from shapely.geometry import MultiPoint, Point
    HAS_GEOPANDAS = True
except ImportError:
    HAS_GEOPANDAS = False
    gpd = None


def _check_geopandas() -> None:
    """Raise ImportError if geopandas is not available."""
    if not HAS_GEOPANDAS:
        raise ImportError(
            "geopandas and shapely are required for polygon contiguity. "
            "Install with: pip install geopandas shapely"
        )


def _as_geoseries(geoms: Any) -> "gpd.GeoSeries":
    if isinstance(geoms, gpd.GeoDataFrame):
        return geoms.geometry.reset_index(drop=True)
    if isinstance(geoms, gpd.GeoSeries):
        return geoms.reset_index(drop=True)
    return gpd.GeoSeries(list(geoms))


def contiguity_pairs(geoms: Any, contiguity: str = DEFAULT_CONTIGUITY) -> List[Tuple[int, int]]:
    """
    Find adjacent polygon pairs ``(i, j)`` with ``i < j``.

    Parameters
    ----------
    geoms : GeoDataFrame, GeoSeries or sequence of shapely geometries
        Polygons in unit order. Empty or missing geometries have no neighbors.
    contiguity : str, default='queen'
        'queen' (shared vertices/edges) or 'rook' (shared edges only).

    Returns
    -------
    list of (int, int)
        Positional index pairs.
    """
    _check_geopandas()

    contiguity = contiguity.lower()
    if contiguity not in CONTIGUITY_TYPES:
        raise ValueError(f"Unknown contiguity type: {contiguity}")

    geoms = _as_geoseries(geoms)
    sindex = geoms.sindex
    pairs: List[Tuple[int, int]] = []

    for i, geom in enumerate(geoms):
        if geom is None or geom.is_empty:
            continue

        candidates = sorted(int(j) for j in sindex.intersection(geom.bounds))
        for j in candidates:
            if j <= i:
                continue

            other = geoms.iloc[j]
            if other is None or other.is_empty:
                continue

            inter = geom.boundary.intersection(other.boundary)
            if inter.is_empty:
                continue

            if contiguity == 'rook':
                # Rook: shared boundary must have positive length
                if isinstance(inter, (Point, MultiPoint)):
                    continue
                if inter.length == 0:
                    continue

            pairs.append((i, j))

    return pairs


def graph_from_geometries(geoms: Any, contiguity: str = DEFAULT_CONTIGUITY) -> NeighborGraph:
    """
    Build a symmetric NeighborGraph from polygon geometry.

    Parameters
    ----------
    geoms : GeoDataFrame, GeoSeries or sequence of shapely geometries
        Polygons; unit ``i`` is the ``i``-th geometry.
    contiguity : str, default='queen'
        'queen' or 'rook'.

    Returns
    -------
    NeighborGraph

    Raises
    ------
    ImportError
        If geopandas is not installed.
    ValueError
        If the contiguity type is unknown.

    Examples
    --------
    >>> gdf = gpd.read_file('counties.gpkg')
    >>> graph = graph_from_geometries(gdf, contiguity='rook')
    >>> graph.print_summary()
    """
    _check_geopandas()
    geoms = _as_geoseries(geoms)
    pairs = contiguity_pairs(geoms, contiguity)
    return NeighborGraph.build(len(geoms), pairs, symmetric=True)
