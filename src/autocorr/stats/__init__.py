"""
Global autocorrelation statistics and permutation tests.
"""

from autocorr.stats.moran import MoranResult, moran, moran_test, moran_mc
from autocorr.stats.geary import GearyResult, geary, geary_test, geary_mc

__all__ = [
    "MoranResult",
    "moran",
    "moran_test",
    "moran_mc",
    "GearyResult",
    "geary",
    "geary_test",
    "geary_mc",
]
