"""
Evolution driver for pattern evolution.

Runs the generation loop: evaluate, build the next population by
selection + crossover + mutation (full replacement or elitist), swap it in,
re-evaluate, and report best/average fitness.
"""

import time
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Callable, List, Optional, Sequence

import numpy as np

from .config_loader import GAConfig, normalize_method
from .crossover import uniform_pattern_crossover
from .data_models import Candidate, initialize_population
from .loss import evaluate_population
from .mutation import mutate
from .selection import tournament_selection, find_best_index, find_best


class NextGenMethod(Enum):
    """Strategy for filling the next population"""
    REPLACEMENT = "replacement"
    ELITIST = "elitist"


class DriverState(Enum):
    """Lifecycle of an EvolutionDriver"""
    CREATED = "created"
    INITIALIZED = "initialized"
    EVALUATED = "evaluated"
    VARYING = "varying"
    TERMINATED = "terminated"


@dataclass
class GenerationStats:
    """Fitness summary of one evaluated generation"""
    generation: int
    best_fitness: int
    average_fitness: int

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class EvolutionResult:
    """
    Outcome of a completed run.

    Attributes:
        best: Value copy of the best candidate in the final population
        history: One GenerationStats per generation run
        seed: Seed the generator was created with (None if an external rng was supplied)
        initial_best_fitness: Best fitness of the evaluated initial population
        final_population: Evaluated population after the last generation
    """
    best: Candidate
    history: List[GenerationStats]
    seed: Optional[int]
    initial_best_fitness: int
    final_population: List[Candidate] = field(default_factory=list, repr=False)


def resolve_seed(seed: Optional[int]) -> int:
    """Return seed, or one derived from the wall clock when seed is None."""
    if seed is None:
        return int(time.time())
    return int(seed)


def population_stats(population: List[Candidate], generation: int) -> GenerationStats:
    """
    Best (minimum) and truncated mean fitness of a population.

    Raises:
        ValueError: If population is empty
    """
    if not population:
        raise ValueError("Cannot summarize an empty population")

    fitnesses = [candidate.fitness for candidate in population]
    return GenerationStats(
        generation=generation,
        best_fitness=min(fitnesses),
        average_fitness=sum(fitnesses) // len(fitnesses),
    )


def breed_child(
    population: List[Candidate],
    rng: np.random.Generator,
    mutation_rate: float,
    tournament_size: int
) -> Candidate:
    """
    Produce one child: two tournaments, crossover, mutation.

    Args:
        population: Evaluated population to draw parents from
        rng: Random number generator
        mutation_rate: Per-cell flip probability
        tournament_size: Contestants per tournament

    Returns:
        New candidate with stale fitness (0)
    """
    parent_a = tournament_selection(population, rng, tournament_size)
    parent_b = tournament_selection(population, rng, tournament_size)
    child, _ = uniform_pattern_crossover(parent_a, parent_b, rng)
    mutate(child, mutation_rate, rng)
    return child


def build_next_generation(
    population: List[Candidate],
    method: NextGenMethod,
    rng: np.random.Generator,
    mutation_rate: float,
    tournament_size: int
) -> List[Candidate]:
    """
    Build a new population of the same size from an evaluated one.

    REPLACEMENT fills every slot with a bred child. ELITIST puts a copy of
    the best candidate (first found on ties) in slot 0 and breeds the rest.
    The input population is only read.

    Args:
        population: Evaluated current population
        method: Next-generation strategy
        rng: Random number generator
        mutation_rate: Per-cell flip probability
        tournament_size: Contestants per tournament

    Returns:
        New list of candidates; fitness of bred children is stale
    """
    new_population = []

    if method is NextGenMethod.ELITIST:
        new_population.append(population[find_best_index(population)].copy())

    while len(new_population) < len(population):
        new_population.append(breed_child(population, rng, mutation_rate, tournament_size))

    return new_population


class EvolutionDriver:
    """
    Owns the population, the random generator and the generation loop.

    Typical use:
        driver = EvolutionDriver(images, config)
        result = driver.run()

    The on_generation callback receives each GenerationStats as soon as the
    generation is evaluated.
    """

    def __init__(
        self,
        images: Sequence[np.ndarray],
        config: GAConfig,
        rng: Optional[np.random.Generator] = None,
        on_generation: Optional[Callable[[GenerationStats], None]] = None
    ):
        self.config = config
        self.images = [self._check_image(image, config.image_size) for image in images]
        self.method = NextGenMethod(normalize_method(config.next_gen_method))
        self.on_generation = on_generation

        if rng is None:
            self.seed = resolve_seed(config.random_seed)
            self.rng = np.random.default_rng(self.seed)
        else:
            self.seed = None
            self.rng = rng

        self.population: List[Candidate] = []
        self.history: List[GenerationStats] = []
        self.generation = 0
        self.initial_best_fitness: Optional[int] = None
        self.state = DriverState.CREATED

    @staticmethod
    def _check_image(image: np.ndarray, image_size: int) -> np.ndarray:
        image = np.asarray(image)
        if image.shape != (image_size, image_size):
            raise ValueError(
                f"Expected image of shape ({image_size}, {image_size}), got {image.shape}"
            )
        # Checked before the cast so 0.7 or 256 can't wrap into a valid cell
        if not np.isin(image, (0, 1)).all():
            raise ValueError("Image cells must be 0 or 1")
        return image.astype(np.uint8, copy=False)

    def initialize(self) -> List[Candidate]:
        """Create the random initial population (not yet evaluated)."""
        self.population = initialize_population(
            self.config.population_size,
            self.rng,
            self.config.num_patterns,
            self.config.block_size,
        )
        self.history = []
        self.generation = 0
        self.initial_best_fitness = None
        self.state = DriverState.INITIALIZED
        return self.population

    def evaluate(self) -> None:
        """Score the whole current population against all images."""
        evaluate_population(self.population, self.images)
        if self.initial_best_fitness is None:
            self.initial_best_fitness = min(c.fitness for c in self.population)
        self.state = DriverState.EVALUATED

    def step(self) -> GenerationStats:
        """
        Run one generation.

        Returns:
            Stats of the newly evaluated population

        Raises:
            RuntimeError: If the current population has not been evaluated
        """
        if self.state is not DriverState.EVALUATED:
            raise RuntimeError(f"Cannot step from state {self.state.value}; evaluate first")

        self.state = DriverState.VARYING
        next_population = build_next_generation(
            self.population,
            self.method,
            self.rng,
            self.config.mutation_rate,
            self.config.tournament_size,
        )
        self.population = next_population
        self.evaluate()

        stats = population_stats(self.population, self.generation)
        self.history.append(stats)
        self.generation += 1

        if self.on_generation is not None:
            self.on_generation(stats)

        return stats

    def best_candidate(self) -> Candidate:
        """Value copy of the best candidate in the current population."""
        return find_best(self.population)

    def run(self) -> EvolutionResult:
        """
        Run the configured number of generations.

        Initializes and evaluates the population first if that has not
        happened yet.

        Returns:
            EvolutionResult for the final population
        """
        if self.state in (DriverState.CREATED, DriverState.TERMINATED):
            self.initialize()
        if self.state is DriverState.INITIALIZED:
            self.evaluate()

        while self.generation < self.config.generations:
            self.step()

        self.state = DriverState.TERMINATED

        return EvolutionResult(
            best=self.best_candidate(),
            history=list(self.history),
            seed=self.seed,
            initial_best_fitness=self.initial_best_fitness,
            final_population=self.population,
        )
