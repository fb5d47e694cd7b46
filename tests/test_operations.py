"""
Tests for GA operations: selection, crossover, and mutation.
"""

import unittest
import numpy as np

from pattern_ga.data_models import Candidate, generate_random_patterns
from pattern_ga.selection import (
    tournament_selection,
    find_best_index,
    find_best,
)
from pattern_ga.crossover import uniform_pattern_crossover
from pattern_ga.mutation import mutate


def make_population(fitnesses, rng):
    return [
        Candidate(patterns=generate_random_patterns(rng), fitness=f)
        for f in fitnesses
    ]


class TestSelection(unittest.TestCase):
    """Test selection operators."""

    def setUp(self):
        """Set up a small population with known fitness values."""
        self.rng = np.random.default_rng(42)
        self.population = make_population([50, 10, 30, 10, 70, 20], self.rng)

    def test_tournament_matches_drawn_contestants(self):
        """Test the winner is the fittest of the drawn indices, first on ties."""
        for seed in range(20):
            expected_rng = np.random.default_rng(seed)
            drawn = expected_rng.integers(0, len(self.population), size=3)
            expected = drawn[0]
            for index in drawn[1:]:
                if self.population[index].fitness < self.population[expected].fitness:
                    expected = index

            winner = tournament_selection(self.population, np.random.default_rng(seed))

            self.assertEqual(winner.fitness, self.population[expected].fitness)
            np.testing.assert_array_equal(winner.patterns, self.population[expected].patterns)

    def test_tournament_returns_copy(self):
        """Test the winner is a value copy, not a population slot."""
        winner = tournament_selection(self.population, self.rng)
        winner.patterns[:] = 1 - winner.patterns

        self.assertFalse(any(winner.patterns is c.patterns for c in self.population))
        self.assertFalse(any(np.array_equal(winner.patterns, c.patterns) for c in self.population))

    def test_tournament_single_candidate(self):
        """Test a population of one always yields that candidate."""
        population = make_population([7], self.rng)
        winner = tournament_selection(population, self.rng)
        np.testing.assert_array_equal(winner.patterns, population[0].patterns)

    def test_tournament_favours_fit_candidates(self):
        """Test better candidates win more often than worse ones."""
        counts = {f: 0 for f in (10, 20, 30, 50, 70)}
        for _ in range(2000):
            counts[tournament_selection(self.population, self.rng).fitness] += 1

        self.assertGreater(counts[10], counts[50])
        self.assertGreater(counts[50], counts[70])

    def test_tournament_rejects_empty(self):
        """Test empty population raises."""
        with self.assertRaises(ValueError):
            tournament_selection([], self.rng)

    def test_find_best_index_first_on_tie(self):
        """Test the first lowest fitness wins."""
        self.assertEqual(find_best_index(self.population), 1)

    def test_find_best_returns_copy(self):
        """Test find_best copies the winning candidate."""
        best = find_best(self.population)
        self.assertEqual(best.fitness, 10)
        self.assertIsNot(best.patterns, self.population[1].patterns)
        np.testing.assert_array_equal(best.patterns, self.population[1].patterns)

    def test_find_best_rejects_empty(self):
        """Test empty population raises."""
        with self.assertRaises(ValueError):
            find_best_index([])


class TestCrossover(unittest.TestCase):
    """Test crossover operator."""

    def setUp(self):
        """Set up complementary parents so every slot is traceable."""
        self.rng = np.random.default_rng(7)
        self.parent_a = Candidate(patterns=generate_random_patterns(self.rng), fitness=5)
        self.parent_b = Candidate(patterns=1 - self.parent_a.patterns, fitness=8)

    def test_child_slots_come_from_a_parent(self):
        """Test every slot equals the same slot of parent A or parent B."""
        for _ in range(50):
            child, mask = uniform_pattern_crossover(self.parent_a, self.parent_b, self.rng)

            self.assertEqual(child.patterns.shape, (7, 3, 3))
            self.assertEqual(len(mask), 7)
            for slot, source in enumerate(mask):
                parent = self.parent_a if source == "A" else self.parent_b
                np.testing.assert_array_equal(child.patterns[slot], parent.patterns[slot])

    def test_child_fitness_reset(self):
        """Test child fitness starts at 0."""
        child, _ = uniform_pattern_crossover(self.parent_a, self.parent_b, self.rng)
        self.assertEqual(child.fitness, 0)

    def test_child_does_not_alias_parents(self):
        """Test mutating the child leaves both parents untouched."""
        before_a = self.parent_a.patterns.copy()
        before_b = self.parent_b.patterns.copy()

        child, _ = uniform_pattern_crossover(self.parent_a, self.parent_b, self.rng)
        child.patterns[:] = 0

        np.testing.assert_array_equal(self.parent_a.patterns, before_a)
        np.testing.assert_array_equal(self.parent_b.patterns, before_b)

    def test_parent_choice_is_fair(self):
        """Test each parent supplies about half the slots."""
        from_a = 0
        trials = 2000
        for _ in range(trials):
            _, mask = uniform_pattern_crossover(self.parent_a, self.parent_b, self.rng)
            from_a += mask.count("A")

        self.assertAlmostEqual(from_a / (trials * 7), 0.5, delta=0.02)

    def test_shape_mismatch(self):
        """Test parents with different shapes are rejected."""
        other = Candidate(patterns=np.zeros((5, 3, 3)))
        with self.assertRaises(ValueError):
            uniform_pattern_crossover(self.parent_a, other, self.rng)


class TestMutation(unittest.TestCase):
    """Test mutation operator."""

    def setUp(self):
        """Set up a seeded generator."""
        self.rng = np.random.default_rng(2024)

    def test_flip_count_matches_changes(self):
        """Test the returned count equals the number of changed cells."""
        candidate = Candidate(patterns=generate_random_patterns(self.rng))
        before = candidate.patterns.copy()

        flipped = mutate(candidate, 0.3, self.rng)

        self.assertEqual(flipped, int(np.count_nonzero(before != candidate.patterns)))
        self.assertTrue(np.isin(candidate.patterns, [0, 1]).all())

    def test_zero_rate(self):
        """Test rate 0 never flips."""
        candidate = Candidate(patterns=generate_random_patterns(self.rng))
        before = candidate.patterns.copy()

        self.assertEqual(mutate(candidate, 0.0, self.rng), 0)
        np.testing.assert_array_equal(candidate.patterns, before)

    def test_full_rate(self):
        """Test rate 1 flips every cell."""
        candidate = Candidate(patterns=generate_random_patterns(self.rng))
        before = candidate.patterns.copy()

        self.assertEqual(mutate(candidate, 1.0, self.rng), 63)
        np.testing.assert_array_equal(candidate.patterns, 1 - before)

    def test_flip_rate_statistics(self):
        """Test observed flip rate matches the mutation rate."""
        trials = 2000
        total_flips = 0
        for _ in range(trials):
            candidate = Candidate(patterns=np.zeros((7, 3, 3)))
            total_flips += mutate(candidate, 0.05, self.rng)

        observed = total_flips / (trials * 7 * 3 * 3)
        self.assertAlmostEqual(observed, 0.05, delta=0.005)
        # Expected flips per candidate: 7 * 9 * 0.05
        self.assertAlmostEqual(total_flips / trials, 3.15, delta=0.3)


if __name__ == '__main__':
    unittest.main()
