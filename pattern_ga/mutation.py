"""
Mutation operator for pattern evolution.

Flips each pattern cell independently with a fixed probability.
"""

import numpy as np

from .data_models import Candidate

MUTATION_RATE = 0.05


def mutate(
    candidate: Candidate,
    mutation_rate: float,
    rng: np.random.Generator
) -> int:
    """
    Flip every cell of every pattern with probability mutation_rate.

    The candidate is modified in place; its fitness is left stale until the
    population is re-evaluated.

    Args:
        candidate: Candidate to mutate
        mutation_rate: Per-cell flip probability in [0, 1]
        rng: Random number generator

    Returns:
        Number of cells flipped
    """
    flips = rng.random(candidate.patterns.shape) < mutation_rate
    candidate.patterns[flips] ^= 1
    return int(np.count_nonzero(flips))
