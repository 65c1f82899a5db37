#!/usr/bin/env python3
"""
Configuration constants for autocorr.

This module centralizes weighting defaults, significance-testing parameters,
and parallel execution settings. Functions take these as defaults; every
value can be overridden per call.

Usage
-----
    from autocorr.config import DEFAULT_NSIM, RANDOM_STATE

    # Or import specific sections
    from autocorr.config import (
        # Weights
        DEFAULT_WEIGHT_STYLE,
        ROW_SUM_TOLERANCE,

        # Significance testing
        DEFAULT_NSIM,
        SIGNIFICANCE_LEVEL,

        # Parallel execution
        PARALLEL_MAX_WORKERS,
    )
"""
from __future__ import annotations


# =============================================================================
# SPATIAL WEIGHTS
# =============================================================================

# Supported standardization styles
# 'B': binary (1 for each neighbor)
# 'W': row-standardized (each neighbor weighted 1/degree)
WEIGHT_STYLES = ('B', 'W')

# Default style used when none is given
DEFAULT_WEIGHT_STYLE = 'W'

# Tolerance for row sums of row-standardized weights
ROW_SUM_TOLERANCE = 1e-9

# Default polygon contiguity rule ('queen' or 'rook')
DEFAULT_CONTIGUITY = 'queen'
CONTIGUITY_TYPES = ('queen', 'rook')


# =============================================================================
# SIGNIFICANCE TESTING
# =============================================================================

# Number of permutations for Monte Carlo tests
DEFAULT_NSIM = 99

# Seed used by callers that want reproducible permutation tests
RANDOM_STATE = 42

# Alternative hypotheses
ALTERNATIVES = ('two-sided', 'greater', 'less')
DEFAULT_ALTERNATIVE = 'two-sided'

# Monte Carlo defaults: large I and small C both signal positive autocorrelation
MC_ALTERNATIVE_MORAN = 'greater'
MC_ALTERNATIVE_GEARY = 'less'

# Statistical thresholds
SIGNIFICANCE_LEVEL = 0.05


# =============================================================================
# PARALLEL EXECUTION SETTINGS
# =============================================================================

# Allow n_jobs > 1 for permutation tests
PARALLEL_ENABLED = True

# Maximum number of worker threads (None = let the executor decide)
PARALLEL_MAX_WORKERS = None

# Permutations evaluated per worker task
MC_CHUNK_SIZE = 256


# =============================================================================
# VALIDATION
# =============================================================================

def validate_config() -> bool:
    """
    Validate configuration settings.

    Returns
    -------
    bool
        True if all validations pass

    Raises
    ------
    ValueError
        If any configuration is invalid
    """
    errors = []

    if DEFAULT_WEIGHT_STYLE not in WEIGHT_STYLES:
        errors.append(
            f"DEFAULT_WEIGHT_STYLE must be one of {WEIGHT_STYLES}: {DEFAULT_WEIGHT_STYLE}"
        )

    if DEFAULT_CONTIGUITY not in CONTIGUITY_TYPES:
        errors.append(
            f"DEFAULT_CONTIGUITY must be one of {CONTIGUITY_TYPES}: {DEFAULT_CONTIGUITY}"
        )

    if not 0 < ROW_SUM_TOLERANCE < 1e-3:
        errors.append(f"ROW_SUM_TOLERANCE must be small and positive: {ROW_SUM_TOLERANCE}")

    if SIGNIFICANCE_LEVEL <= 0 or SIGNIFICANCE_LEVEL >= 1:
        errors.append(f"SIGNIFICANCE_LEVEL must be between 0 and 1: {SIGNIFICANCE_LEVEL}")

    if DEFAULT_NSIM < 1:
        errors.append(f"DEFAULT_NSIM must be positive: {DEFAULT_NSIM}")

    if DEFAULT_ALTERNATIVE not in ALTERNATIVES:
        errors.append(
            f"DEFAULT_ALTERNATIVE must be one of {ALTERNATIVES}: {DEFAULT_ALTERNATIVE}"
        )

    for name, value in (('MC_ALTERNATIVE_MORAN', MC_ALTERNATIVE_MORAN),
                        ('MC_ALTERNATIVE_GEARY', MC_ALTERNATIVE_GEARY)):
        if value not in ALTERNATIVES:
            errors.append(f"{name} must be one of {ALTERNATIVES}: {value}")

    if PARALLEL_MAX_WORKERS is not None and PARALLEL_MAX_WORKERS < 1:
        errors.append(f"PARALLEL_MAX_WORKERS must be positive or None: {PARALLEL_MAX_WORKERS}")

    if MC_CHUNK_SIZE < 1:
        errors.append(f"MC_CHUNK_SIZE must be positive: {MC_CHUNK_SIZE}")

    if errors:
        raise ValueError("Configuration errors:\n" + "\n".join(f"  - {e}" for e in errors))

    return True


# =============================================================================
# MODULE INITIALIZATION
# =============================================================================

if __name__ == '__main__':
    # Print configuration when run directly
    print("autocorr Configuration")
    print("=" * 50)
    print(f"DEFAULT_WEIGHT_STYLE: {DEFAULT_WEIGHT_STYLE}")
    print(f"ROW_SUM_TOLERANCE:    {ROW_SUM_TOLERANCE}")
    print(f"DEFAULT_CONTIGUITY:   {DEFAULT_CONTIGUITY}")
    print()
    print(f"DEFAULT_NSIM:         {DEFAULT_NSIM}")
    print(f"RANDOM_STATE:         {RANDOM_STATE}")
    print(f"SIGNIFICANCE_LEVEL:   {SIGNIFICANCE_LEVEL}")
    print(f"MC_ALTERNATIVE_MORAN: {MC_ALTERNATIVE_MORAN}")
    print(f"MC_ALTERNATIVE_GEARY: {MC_ALTERNATIVE_GEARY}")
    print(f"PARALLEL_ENABLED:     {PARALLEL_ENABLED}")
    print()
    print("Validating configuration...")
    try:
        validate_config()
        print("Configuration valid.")
    except ValueError as e:
        print(f"Configuration invalid:\n{e}")
