"""
Selection operators for pattern evolution.

Tournament selection for parent choice and a linear best-candidate scan
used by the elitist strategy and final reporting.
"""

from typing import List

import numpy as np

from .data_models import Candidate

TOURNAMENT_SIZE = 3


def tournament_selection(
    population: List[Candidate],
    rng: np.random.Generator,
    tournament_size: int = TOURNAMENT_SIZE
) -> Candidate:
    """
    Pick the fittest of a few uniformly drawn candidates.

    Contestants are drawn with replacement. The comparison is strict, so on
    equal fitness the contestant drawn first wins.

    Args:
        population: Evaluated population to select from
        rng: Random number generator
        tournament_size: Number of contestants

    Returns:
        Value copy of the winning candidate

    Raises:
        ValueError: If population is empty or tournament_size < 1
    """
    if not population:
        raise ValueError("Cannot select from an empty population")
    if tournament_size < 1:
        raise ValueError(f"tournament_size must be at least 1, got {tournament_size}")

    best = None
    for index in rng.integers(0, len(population), size=tournament_size):
        contestant = population[index]
        if best is None or contestant.fitness < best.fitness:
            best = contestant

    return best.copy()


def find_best_index(population: List[Candidate]) -> int:
    """
    Index of the lowest-fitness candidate; the first one found wins ties.

    Raises:
        ValueError: If population is empty
    """
    if not population:
        raise ValueError("Cannot search an empty population")

    best_index = 0
    for i in range(1, len(population)):
        if population[i].fitness < population[best_index].fitness:
            best_index = i
    return best_index


def find_best(population: List[Candidate]) -> Candidate:
    """Value copy of the lowest-fitness candidate."""
    return population[find_best_index(population)].copy()
