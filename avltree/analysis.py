"""Empirical cost of split, measured through the joins it performs.

Two split keys are compared on random trees: a uniformly random key, and
the largest key of the root's left subtree, which sits at the bottom of a
long path and forces the most joins.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Tuple

import numpy as np
from numpy.random import Generator, default_rng

from . import config
from .tree import AVLTree, SplitStats

logger = logging.getLogger(__name__)

# Coefficient of the AVL height bound h < c * log2(n + 2).
AVL_HEIGHT_COEFF = 1.44


def height_bound(n: int) -> float:
    return float(AVL_HEIGHT_COEFF * np.log2(n + 2))


def random_tree(n: int, rng: Generator) -> AVLTree:
    tree = AVLTree()
    for key in rng.permutation(np.arange(1, n + 1)):
        tree.insert(int(key), str(key))
    return tree


def split_costs(n: int, rng: Generator) -> Tuple[SplitStats, SplitStats]:
    """Split two fresh random trees of size `n`.

    Returns the stats for a random split key and for the maximum of the
    root's left subtree, in that order.
    """
    if n < 2:
        raise ValueError("need at least two keys to split, got {}".format(n))

    tree = random_tree(n, rng)
    _, _, random_stats = tree.split_with_stats(int(rng.integers(1, n + 1)))

    tree = random_tree(n, rng)
    pivot = tree.max_node(tree.get_root().left)
    if pivot is None:
        pivot = tree.get_root()
    _, _, worst_stats = tree.split_with_stats(pivot.key)

    return random_stats, worst_stats


def _per_join(stats: SplitStats) -> float:
    if stats.joins == 0:
        return 0.0
    return stats.total_cost / stats.joins


def run_split_experiment(
    sizes: Iterable[int], trials: int = 1, seed: Optional[int] = None
) -> np.ndarray:
    """Average join cost per split for each tree size.

    Returns an array with one row per size and the columns
    [n, mean_random_cost, max_random_cost, mean_worst_cost, max_worst_cost],
    where the means are per join and averaged over `trials`.
    """
    if seed is None:
        seed = config.ANALYSIS_SEED
    rng = default_rng(seed)

    rows = []
    for n in sizes:
        per_trial = np.zeros((trials, 4))
        for t in range(trials):
            random_stats, worst_stats = split_costs(n, rng)
            per_trial[t] = (
                _per_join(random_stats),
                random_stats.max_cost,
                _per_join(worst_stats),
                worst_stats.max_cost,
            )

        means = per_trial.mean(axis=0)
        maxes = per_trial.max(axis=0)
        row = (n, means[0], maxes[1], means[2], maxes[3])
        logger.debug("split experiment n=%d: %s", n, row)
        rows.append(row)

    return np.array(rows, dtype=float).reshape(-1, 5)
