#!/usr/bin/env python3
"""
Shared pytest fixtures for the test suite.

This module provides common fixtures used across test modules including:
- Small hand-checkable neighbor graphs
- Path and lattice graphs
- Value vectors with and without spatial structure
"""
from __future__ import annotations

import sys
from pathlib import Path

# Add src directory to Python path for test imports
_project_root = Path(__file__).parent.parent
_src_path = _project_root / 'src'
if str(_src_path) not in sys.path:
    sys.path.insert(0, str(_src_path))

import pytest
import numpy as np

from autocorr.core.neighbors import NeighborGraph


# ============================================================
# GRAPH FIXTURES
# ============================================================

# Five units: 3 and 4 touch everything, 0-2 only touch 3 and 4.
# Degrees are 2, 2, 2, 4, 4 (14 links, mean degree 2.8).
WORKED_PAIRS = [(0, 3), (0, 4), (1, 3), (1, 4), (2, 3), (2, 4), (3, 4)]
WORKED_VALUES = [10.0, 6.0, 4.0, 11.0, 6.0]


def make_path_graph(n: int) -> NeighborGraph:
    """Each unit adjacent to its predecessor and successor only."""
    return NeighborGraph.build(n, [(i, i + 1) for i in range(n - 1)], symmetric=True)


def make_lattice_graph(rows: int, cols: int) -> NeighborGraph:
    """Rook adjacency on a rows x cols grid."""
    pairs = []
    for r in range(rows):
        for c in range(cols):
            i = r * cols + c
            if c + 1 < cols:
                pairs.append((i, i + 1))
            if r + 1 < rows:
                pairs.append((i, i + cols))
    return NeighborGraph.build(rows * cols, pairs, symmetric=True)


@pytest.fixture
def worked_graph() -> NeighborGraph:
    """Five-unit graph used in the hand-computed example."""
    return NeighborGraph.build(5, WORKED_PAIRS, symmetric=True)


@pytest.fixture
def worked_values() -> list:
    """Values for the five-unit example."""
    return list(WORKED_VALUES)


@pytest.fixture
def path_graph() -> NeighborGraph:
    """Path of 30 units."""
    return make_path_graph(30)


@pytest.fixture
def lattice_graph() -> NeighborGraph:
    """6 x 6 rook lattice."""
    return make_lattice_graph(6, 6)


@pytest.fixture
def island_graph() -> NeighborGraph:
    """Four units where unit 3 has no neighbors."""
    return NeighborGraph.build(4, [(0, 1), (1, 2), (0, 2)], symmetric=True)


# ============================================================
# VALUE FIXTURES
# ============================================================

@pytest.fixture
def random_values() -> np.ndarray:
    """I.i.d. uniform values with no spatial structure."""
    rng = np.random.default_rng(42)
    return rng.uniform(0, 100, 30)


@pytest.fixture
def lattice_gradient() -> np.ndarray:
    """Values increasing smoothly across the 6 x 6 lattice."""
    r, c = np.divmod(np.arange(36), 6)
    return (r + c).astype(float)


@pytest.fixture
def path_graph_of():
    """Factory for path graphs of a given length."""
    return make_path_graph
