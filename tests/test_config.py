#!/usr/bin/env python3
"""
Tests for src/autocorr/config.py

Tests cover:
- Configuration imports
- validate_config() function
"""
from __future__ import annotations

import pytest
import sys
from pathlib import Path
from unittest.mock import patch

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))


class TestConfigImports:
    """Tests for configuration module imports."""

    def test_import_weight_settings(self):
        """Weight settings can be imported."""
        from autocorr.config import (
            WEIGHT_STYLES,
            DEFAULT_WEIGHT_STYLE,
            ROW_SUM_TOLERANCE,
        )
        assert WEIGHT_STYLES == ('B', 'W')
        assert DEFAULT_WEIGHT_STYLE in WEIGHT_STYLES
        assert ROW_SUM_TOLERANCE == 1e-9

    def test_import_testing_settings(self):
        """Significance testing settings can be imported."""
        from autocorr.config import (
            DEFAULT_NSIM,
            RANDOM_STATE,
            SIGNIFICANCE_LEVEL,
            ALTERNATIVES,
            DEFAULT_ALTERNATIVE,
        )
        assert DEFAULT_NSIM == 99
        assert isinstance(RANDOM_STATE, int)
        assert 0 < SIGNIFICANCE_LEVEL < 1
        assert DEFAULT_ALTERNATIVE in ALTERNATIVES

    def test_import_monte_carlo_alternatives(self):
        """Monte Carlo defaults point at the positive-autocorrelation tail."""
        from autocorr.config import MC_ALTERNATIVE_MORAN, MC_ALTERNATIVE_GEARY
        assert MC_ALTERNATIVE_MORAN == 'greater'
        assert MC_ALTERNATIVE_GEARY == 'less'

    def test_monte_carlo_functions_use_config_defaults(self):
        """moran_mc and geary_mc take their default alternative from config."""
        import inspect
        from autocorr.config import MC_ALTERNATIVE_MORAN, MC_ALTERNATIVE_GEARY
        from autocorr.stats.geary import geary_mc
        from autocorr.stats.moran import moran_mc
        assert inspect.signature(moran_mc).parameters['alternative'].default == MC_ALTERNATIVE_MORAN
        assert inspect.signature(geary_mc).parameters['alternative'].default == MC_ALTERNATIVE_GEARY

    def test_import_parallel_settings(self):
        """Parallel settings can be imported."""
        from autocorr.config import PARALLEL_ENABLED, PARALLEL_MAX_WORKERS, MC_CHUNK_SIZE
        assert isinstance(PARALLEL_ENABLED, bool)
        assert PARALLEL_MAX_WORKERS is None or PARALLEL_MAX_WORKERS > 0
        assert MC_CHUNK_SIZE > 0


class TestValidateConfig:
    """Tests for validate_config()."""

    def test_default_config_valid(self):
        """Shipped configuration passes validation."""
        from autocorr.config import validate_config
        assert validate_config() is True

    def test_invalid_significance_level(self):
        """Out-of-range significance level is reported."""
        import autocorr.config as config
        with patch.object(config, 'SIGNIFICANCE_LEVEL', 1.5):
            with pytest.raises(ValueError, match="SIGNIFICANCE_LEVEL"):
                config.validate_config()

    def test_invalid_style(self):
        """Unknown default weight style is reported."""
        import autocorr.config as config
        with patch.object(config, 'DEFAULT_WEIGHT_STYLE', 'X'):
            with pytest.raises(ValueError, match="DEFAULT_WEIGHT_STYLE"):
                config.validate_config()

    def test_invalid_monte_carlo_alternative(self):
        """Unknown Monte Carlo alternative is reported by name."""
        import autocorr.config as config
        with patch.object(config, 'MC_ALTERNATIVE_GEARY', 'lower'):
            with pytest.raises(ValueError, match="MC_ALTERNATIVE_GEARY"):
                config.validate_config()

    def test_multiple_errors_listed(self):
        """All problems are reported together."""
        import autocorr.config as config
        with patch.object(config, 'DEFAULT_NSIM', 0), \
                patch.object(config, 'MC_CHUNK_SIZE', 0):
            with pytest.raises(ValueError) as exc:
                config.validate_config()
        message = str(exc.value)
        assert "DEFAULT_NSIM" in message
        assert "MC_CHUNK_SIZE" in message
