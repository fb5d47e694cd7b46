"""
Data models for pattern evolution.

Core data structure representing a candidate pattern dictionary, plus
random pattern generation and population initialization.
"""

from dataclasses import dataclass
from typing import List

import numpy as np

NUM_PATTERNS = 7
BLOCK_SIZE = 3


@dataclass
class Candidate:
    """
    Represents one pattern dictionary (individual in GA population).

    Attributes:
        patterns: Array of shape (num_patterns, block_size, block_size) holding 0/1 cells
        fitness: Sum of per-image losses from the last evaluation (lower is better)
    """
    patterns: np.ndarray
    fitness: int = 0

    def __post_init__(self):
        """Ensure patterns are stored as an owned uint8 array."""
        self.patterns = np.array(self.patterns, dtype=np.uint8)
        if self.patterns.ndim != 3 or self.patterns.shape[1] != self.patterns.shape[2]:
            raise ValueError(
                f"Patterns must have shape (num_patterns, k, k), got {self.patterns.shape}"
            )

    @property
    def num_patterns(self) -> int:
        """Number of patterns in this dictionary."""
        return self.patterns.shape[0]

    @property
    def block_size(self) -> int:
        """Side length of each pattern."""
        return self.patterns.shape[1]

    def copy(self) -> "Candidate":
        """
        Create a value copy of this candidate.

        Returns:
            New Candidate with its own patterns array and the same fitness
        """
        return Candidate(patterns=self.patterns.copy(), fitness=self.fitness)


def generate_random_patterns(
    rng: np.random.Generator,
    num_patterns: int = NUM_PATTERNS,
    block_size: int = BLOCK_SIZE
) -> np.ndarray:
    """
    Fill every cell of every pattern with an independent uniform random bit.

    Args:
        rng: Random number generator
        num_patterns: Number of patterns in the dictionary
        block_size: Side length of each pattern

    Returns:
        uint8 array of shape (num_patterns, block_size, block_size)
    """
    return rng.integers(0, 2, size=(num_patterns, block_size, block_size), dtype=np.uint8)


def initialize_population(
    population_size: int,
    rng: np.random.Generator,
    num_patterns: int = NUM_PATTERNS,
    block_size: int = BLOCK_SIZE
) -> List[Candidate]:
    """
    Create a population of random candidates.

    Fitness starts at 0 and is overwritten by the first evaluation.

    Args:
        population_size: Number of candidates
        rng: Random number generator
        num_patterns: Number of patterns per candidate
        block_size: Side length of each pattern

    Returns:
        List of freshly generated candidates
    """
    return [
        Candidate(patterns=generate_random_patterns(rng, num_patterns, block_size), fitness=0)
        for _ in range(population_size)
    ]
