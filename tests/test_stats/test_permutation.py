"""Tests for the permutation engine."""

import pytest
import numpy as np
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from autocorr.stats.permutation import (
    PermutationSource,
    check_nsim,
    draw_permutations,
    empirical_pvalue,
    ensure_source,
    run_permutations,
    simulate,
)


class TestEmpiricalPvalue:
    """Ranking of the observed value among simulated values."""

    def test_greater_counts_ties_against_observed(self):
        sims = np.array([0.1, 0.5, 0.5, 0.9])
        # sims >= 0.5: three of four
        assert empirical_pvalue(0.5, sims, 'greater') == pytest.approx(4 / 5)

    def test_greater_extreme(self):
        sims = np.linspace(-1, 0, 99)
        assert empirical_pvalue(2.0, sims, 'greater') == pytest.approx(1 / 100)

    def test_less(self):
        sims = np.array([0.1, 0.5, 0.9])
        assert empirical_pvalue(0.1, sims, 'less') == pytest.approx(2 / 4)

    def test_two_sided_folds(self):
        sims = np.linspace(0, 1, 99)
        p = empirical_pvalue(-1.0, sims, 'two-sided')
        assert p == pytest.approx(2 / 100)

    def test_two_sided_capped(self):
        sims = np.zeros(9)
        assert empirical_pvalue(0.0, sims, 'two-sided') == 1.0

    def test_order_irrelevant(self):
        """The simulated values behave as an unordered multiset."""
        rng = np.random.default_rng(0)
        sims = rng.normal(size=199)
        shuffled = rng.permutation(sims)
        for alt in ('greater', 'less', 'two-sided'):
            assert empirical_pvalue(0.3, sims, alt) == empirical_pvalue(0.3, shuffled, alt)

    def test_empty_simulations(self):
        with pytest.raises(ValueError):
            empirical_pvalue(0.0, np.array([]))

    def test_unknown_alternative(self):
        with pytest.raises(ValueError, match="Unknown alternative"):
            empirical_pvalue(0.0, np.zeros(3), 'upper')


class TestSources:
    """Random source handling."""

    def test_int_seed(self):
        a = ensure_source(42).permutation(10)
        b = ensure_source(42).permutation(10)
        np.testing.assert_array_equal(a, b)

    def test_none_gives_generator(self):
        assert isinstance(ensure_source(None), np.random.Generator)

    def test_generator_passthrough(self):
        rng = np.random.default_rng(1)
        assert ensure_source(rng) is rng

    def test_generator_is_source(self):
        assert isinstance(np.random.default_rng(), PermutationSource)

    def test_rejects_other_types(self):
        with pytest.raises(TypeError):
            ensure_source(1.5)

    def test_draw_shape_and_content(self):
        perms = draw_permutations(np.random.default_rng(3), 7, 20)
        assert perms.shape == (20, 7)
        for row in perms:
            assert sorted(row.tolist()) == list(range(7))

    def test_bad_source_shape(self):
        class Short:
            def permutation(self, n):
                return np.arange(n - 1)

        with pytest.raises(ValueError, match="shape"):
            draw_permutations(Short(), 5, 2)

    def test_source_with_repeated_indices_rejected(self):
        """A draw with repeats or gaps is not a shuffle."""
        class Constant:
            def permutation(self, n):
                return np.zeros(n, dtype=int)

        with pytest.raises(ValueError, match="not a permutation"):
            draw_permutations(Constant(), 5, 2)

    def test_bad_draw_detected_after_good_ones(self):
        class Flaky:
            def __init__(self):
                self.calls = 0

            def permutation(self, n):
                self.calls += 1
                if self.calls == 3:
                    return np.array([0, 0, 2, 3, 4])
                return np.arange(n)

        with pytest.raises(ValueError, match="draw 2"):
            draw_permutations(Flaky(), 5, 4)

    @pytest.mark.parametrize("nsim", [0, -5, 2.5, True, "99"])
    def test_invalid_nsim(self, nsim):
        with pytest.raises(ValueError):
            check_nsim(nsim)


class TestRunPermutations:
    """Chunked evaluation."""

    def test_chunks_concatenated_in_order(self):
        values = np.arange(5, dtype=float)
        perms = draw_permutations(np.random.default_rng(0), 5, 23)
        out = run_permutations(lambda block: block[:, 0], values, perms, chunk_size=4)
        np.testing.assert_array_equal(out, values[perms[:, 0]])

    def test_threads_match_serial(self):
        values = np.random.default_rng(1).normal(size=12)
        perms = draw_permutations(np.random.default_rng(2), 12, 500)
        stat = lambda block: block @ np.arange(12.0)  # noqa: E731
        serial = run_permutations(stat, values, perms, n_jobs=1, chunk_size=50)
        threaded = run_permutations(stat, values, perms, n_jobs=4, chunk_size=50)
        np.testing.assert_array_equal(serial, threaded)

    def test_invalid_jobs(self):
        perms = np.zeros((1, 2), dtype=int)
        with pytest.raises(ValueError, match="n_jobs"):
            run_permutations(lambda b: b[:, 0], np.zeros(2), perms, n_jobs=0)

    def test_simulate_reproducible(self):
        values = np.arange(6, dtype=float)
        stat = lambda block: block[:, 0]  # noqa: E731
        np.testing.assert_array_equal(
            simulate(stat, values, 30, random_state=9),
            simulate(stat, values, 30, random_state=9),
        )
