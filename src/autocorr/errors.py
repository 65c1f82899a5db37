"""
Error types for spatial autocorrelation analysis.

Every error subclasses ``ValueError`` so callers that already guard against
bad input with ``except ValueError`` keep working. Each message names the
violated precondition and the offending input.

Usage
-----
    from autocorr.errors import SelfLoopError

    try:
        graph = NeighborGraph.build(5, [(0, 0)])
    except SelfLoopError as exc:
        print(exc)
"""
from __future__ import annotations


class SpatialAutocorrelationError(ValueError):
    """Base class for all autocorr input errors."""


class InvalidIndexError(SpatialAutocorrelationError):
    """Adjacency references a unit outside ``[0, n)``."""

    def __init__(self, index, n: int, pair=None):
        self.index = index
        self.n = n
        self.pair = pair
        where = f" in pair {pair}" if pair is not None else ""
        super().__init__(
            f"Unit index {index!r}{where} is out of range for {n} units "
            f"(valid: 0..{n - 1})"
        )


class SelfLoopError(SpatialAutocorrelationError):
    """Adjacency lists a unit as its own neighbor."""

    def __init__(self, index: int):
        self.index = index
        super().__init__(
            f"Unit {index} is listed as its own neighbor; self-loops are not allowed"
        )


class UnknownStyleError(SpatialAutocorrelationError):
    """Weight standardization style is not recognised."""

    def __init__(self, style, valid=("B", "W")):
        self.style = style
        super().__init__(
            f"Unknown weight style {style!r}. Available: {', '.join(valid)}"
        )


class DimensionMismatchError(SpatialAutocorrelationError):
    """Value vector length does not match the number of units."""

    def __init__(self, n_values: int, n_units: int, shape=None):
        self.n_values = n_values
        self.n_units = n_units
        self.shape = shape
        got = f"values of shape {shape}" if shape is not None else f"{n_values} values"
        super().__init__(
            f"Got {got} for {n_units} units; "
            "the value vector must have one entry per unit"
        )


class InsufficientDataError(SpatialAutocorrelationError):
    """Too few units for the requested computation."""

    def __init__(self, n: int, required: int = 2, what: str = "the statistic"):
        self.n = n
        self.required = required
        super().__init__(
            f"{what} requires at least {required} units, got {n}"
        )


class ZeroVarianceError(SpatialAutocorrelationError):
    """All values are identical, so the statistic is undefined."""

    def __init__(self, value=None):
        self.value = value
        detail = f" (all values equal {value!r})" if value is not None else ""
        super().__init__(
            f"Values have zero variance{detail}; spatial autocorrelation is undefined"
        )


class DegenerateWeightsError(SpatialAutocorrelationError):
    """The weights matrix has no links at all (S0 == 0)."""

    def __init__(self, n: int):
        self.n = n
        super().__init__(
            f"Weights matrix for {n} units has no links (S0 = 0); "
            "every unit is an island"
        )


class NonFiniteValueError(SpatialAutocorrelationError):
    """Value vector contains NaN or infinite entries, or overflows when summed."""

    def __init__(self, positions, detail=None):
        self.positions = list(positions)
        if detail is None:
            shown = self.positions[:10]
            more = "..." if len(self.positions) > 10 else ""
            detail = f"found NaN/inf at unit(s) {shown}{more}"
        super().__init__(f"Values must be finite; {detail}")
