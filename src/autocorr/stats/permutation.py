"""
Permutation machinery for Monte Carlo significance tests.

The random source is always passed explicitly. Anything exposing
``permutation(n)`` (returning a uniform shuffle of ``range(n)``) works;
``numpy.random.Generator`` is the usual choice. All permutations are drawn
serially from the source before evaluation, so a seeded run gives the same
simulated values whatever the number of worker threads.
"""

from __future__ import annotations

import operator
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Protocol, Union, runtime_checkable

import numpy as np

from autocorr.config import (
    ALTERNATIVES,
    MC_CHUNK_SIZE,
    PARALLEL_ENABLED,
    PARALLEL_MAX_WORKERS,
)


@runtime_checkable
class PermutationSource(Protocol):
    """Anything that can shuffle ``range(n)``."""

    def permutation(self, n: int) -> np.ndarray:
        ...


RandomState = Union[None, int, np.random.Generator, PermutationSource]


def ensure_source(random_state: RandomState = None) -> PermutationSource:
    """
    Normalise ``random_state`` into a permutation source.

    ``None`` gives a freshly seeded generator, an ``int`` gives a seeded
    generator, and a Generator or custom source is returned unchanged.
    """
    if random_state is None or isinstance(random_state, (int, np.integer)):
        return np.random.default_rng(random_state)
    if isinstance(random_state, PermutationSource):
        return random_state
    raise TypeError(
        "random_state must be None, an int seed, a numpy Generator, "
        f"or an object with a permutation(n) method; got {type(random_state).__name__}"
    )


def check_nsim(nsim) -> int:
    """Validate the permutation count."""
    if isinstance(nsim, (bool, np.bool_)):
        raise ValueError(f"nsim must be a positive integer: {nsim!r}")
    try:
        nsim = operator.index(nsim)
    except TypeError:
        raise ValueError(f"nsim must be a positive integer: {nsim!r}") from None
    if nsim < 1:
        raise ValueError(f"nsim must be a positive integer: {nsim}")
    return nsim


def check_alternative(alternative: str) -> str:
    if alternative not in ALTERNATIVES:
        raise ValueError(
            f"Unknown alternative '{alternative}'. Available: {', '.join(ALTERNATIVES)}"
        )
    return alternative


def draw_permutations(source: PermutationSource, n: int, nsim: int) -> np.ndarray:
    """
    Draw ``nsim`` permutations of ``range(n)``.

    Returns
    -------
    np.ndarray
        Integer array of shape ``(nsim, n)``; each row is one shuffle.

    Raises
    ------
    ValueError
        If a draw has the wrong shape or is not a permutation of ``range(n)``.
    """
    perms = np.empty((nsim, n), dtype=np.intp)
    identity = np.arange(n)
    for k in range(nsim):
        perm = np.asarray(source.permutation(n), dtype=np.intp)
        if perm.shape != (n,):
            raise ValueError(
                f"Random source returned shape {perm.shape}, expected ({n},)"
            )
        if not np.array_equal(np.sort(perm), identity):
            raise ValueError(
                f"Random source draw {k} is not a permutation of range({n}): {perm.tolist()}"
            )
        perms[k] = perm
    return perms


def run_permutations(
    statistic: Callable[[np.ndarray], np.ndarray],
    values: np.ndarray,
    permutations: np.ndarray,
    n_jobs: int = 1,
    chunk_size: int = MC_CHUNK_SIZE,
) -> np.ndarray:
    """
    Evaluate a statistic on permuted copies of ``values``.

    Parameters
    ----------
    statistic : callable
        Maps a ``(k, n)`` stack of value vectors to ``k`` statistics.
    values : np.ndarray
        Observed values, length ``n``.
    permutations : np.ndarray
        ``(nsim, n)`` index array from :func:`draw_permutations`.
    n_jobs : int, default=1
        Worker threads. Chunks are merged in submission order.
    chunk_size : int
        Permutations per task.

    Returns
    -------
    np.ndarray
        Simulated statistics, length ``nsim``.
    """
    nsim = permutations.shape[0]
    starts = range(0, nsim, chunk_size)

    def _chunk(start: int) -> np.ndarray:
        # Each task works on its own permuted copy of the values
        block = values[permutations[start:start + chunk_size]]
        return np.asarray(statistic(block), dtype=float)

    if n_jobs is None or n_jobs < 1:
        raise ValueError(f"n_jobs must be a positive integer: {n_jobs}")

    if n_jobs == 1 or not PARALLEL_ENABLED or nsim <= chunk_size:
        parts = [_chunk(s) for s in starts]
    else:
        max_workers = n_jobs
        if PARALLEL_MAX_WORKERS is not None:
            max_workers = min(max_workers, PARALLEL_MAX_WORKERS)
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            parts = list(executor.map(_chunk, starts))

    return np.concatenate(parts) if parts else np.empty(0, dtype=float)


def empirical_pvalue(
    observed: float,
    simulated: np.ndarray,
    alternative: str = 'greater',
) -> float:
    """
    Pseudo p-value of an observed statistic against its permutation distribution.

    The observed value is ranked among the ``nsim + 1`` values with ties
    counted against it:

    - 'greater': ``(1 + #{sim >= obs}) / (nsim + 1)``
    - 'less': ``(1 + #{sim <= obs}) / (nsim + 1)``
    - 'two-sided': twice the smaller tail, capped at 1.

    The order of ``simulated`` does not matter.
    """
    check_alternative(alternative)
    simulated = np.asarray(simulated, dtype=float)
    nsim = simulated.shape[0]
    if nsim == 0:
        raise ValueError("simulated must contain at least one value")

    n_ge = int(np.count_nonzero(simulated >= observed))
    n_le = int(np.count_nonzero(simulated <= observed))

    if alternative == 'greater':
        return (n_ge + 1.0) / (nsim + 1.0)
    if alternative == 'less':
        return (n_le + 1.0) / (nsim + 1.0)
    return min(1.0, 2.0 * (min(n_ge, n_le) + 1.0) / (nsim + 1.0))


def simulate(
    statistic: Callable[[np.ndarray], np.ndarray],
    values: np.ndarray,
    nsim: int,
    random_state: RandomState = None,
    n_jobs: int = 1,
) -> np.ndarray:
    """Draw permutations from ``random_state`` and evaluate ``statistic`` on each."""
    nsim = check_nsim(nsim)
    source = ensure_source(random_state)
    perms = draw_permutations(source, values.shape[0], nsim)
    return run_permutations(statistic, values, perms, n_jobs=n_jobs)
