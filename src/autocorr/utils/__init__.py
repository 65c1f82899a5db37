"""
Utilities package.

Provides shared helpers:
- helpers: input checks and p-value formatting
"""
from .helpers import as_value_vector, format_pvalue, add_significance_stars, sample_kurtosis
