"""
Crossover operator for pattern evolution.

Implements uniform crossover at pattern granularity: each pattern slot is
inherited whole from one parent, never blended cell by cell.
"""

from typing import List, Tuple

import numpy as np

from .data_models import Candidate


def uniform_pattern_crossover(
    parent_a: Candidate,
    parent_b: Candidate,
    rng: np.random.Generator
) -> Tuple[Candidate, List[str]]:
    """
    Combine two parents slot by slot.

    For every pattern slot, flip a fair coin and copy that parent's full
    pattern into the child at the same slot.

    Args:
        parent_a: First parent
        parent_b: Second parent
        rng: Random number generator

    Returns:
        Tuple of (child, crossover_mask)
        where crossover_mask[slot] is "A" or "B"

    Raises:
        ValueError: If the parents' pattern arrays differ in shape

    Note:
        The child's fitness is 0 until the population is re-evaluated.
    """
    if parent_a.patterns.shape != parent_b.patterns.shape:
        raise ValueError(
            f"Parent shapes differ: {parent_a.patterns.shape} vs {parent_b.patterns.shape}"
        )

    take_b = rng.integers(0, 2, size=parent_a.num_patterns).astype(bool)
    child_patterns = np.where(take_b[:, None, None], parent_b.patterns, parent_a.patterns)

    crossover_mask = ["B" if b else "A" for b in take_b]

    return Candidate(patterns=child_patterns, fitness=0), crossover_mask
