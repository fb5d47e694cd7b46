"""
Configuration Loading System

Loads the YAML run configuration and converts it into a validated GAConfig
for the pattern evolution run.
"""

from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .data_models import NUM_PATTERNS, BLOCK_SIZE
from .mutation import MUTATION_RATE
from .selection import TOURNAMENT_SIZE

IMAGE_SIZE = 24
NUM_IMAGES = 5
POP_SIZE = 500
GENERATIONS = 500

NEXT_GEN_METHODS = ("replacement", "elitist")
# Numeric aliases for the two strategies
_METHOD_ALIASES = {0: "replacement", 1: "elitist", "0": "replacement", "1": "elitist"}


class ConfigurationError(Exception):
    """Raised when configuration is invalid"""
    pass


@dataclass
class GAConfig:
    """
    Validated parameters for one evolution run.

    Attributes:
        image_size: Side length of every training image
        block_size: Side length of blocks and patterns
        num_images: Number of training images to load
        num_patterns: Patterns per candidate
        population_size: Candidates per generation
        generations: Number of generations to run
        mutation_rate: Per-cell flip probability
        tournament_size: Contestants per tournament
        next_gen_method: "replacement" or "elitist"
        random_seed: Seed for the generator (None derives one from the clock)
        output_root: Directory for CSV, report and plots
        csv_name: File name of the per-generation CSV
        details_name: File name of the detailed text report
        overwrite: Allow replacing existing output files
        save_plots: Write PNG plots at the end of the run
    """
    image_size: int = IMAGE_SIZE
    block_size: int = BLOCK_SIZE
    num_images: int = NUM_IMAGES
    num_patterns: int = NUM_PATTERNS
    population_size: int = POP_SIZE
    generations: int = GENERATIONS
    mutation_rate: float = MUTATION_RATE
    tournament_size: int = TOURNAMENT_SIZE
    next_gen_method: str = "replacement"
    random_seed: Optional[int] = None
    output_root: str = "output"
    csv_name: str = "results.csv"
    details_name: str = "detailed_results.txt"
    overwrite: bool = True
    save_plots: bool = False

    @property
    def num_blocks(self) -> int:
        """Blocks per image side."""
        return self.image_size // self.block_size

    def to_dict(self) -> Dict[str, Any]:
        """Flat dictionary of all parameters."""
        return asdict(self)


def load_config(config_path: Union[str, Path] = "config.yaml") -> Dict[str, Any]:
    """Load configuration from YAML file"""
    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigurationError(f"Configuration file not found: {config_path}")
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in configuration file: {e}")

    if config is None:
        raise ConfigurationError("Configuration file is empty")
    if not isinstance(config, dict):
        raise ConfigurationError("Configuration root must be a mapping")

    return config


def normalize_method(method: Any) -> str:
    """
    Map a next-generation method setting to its canonical name.

    Accepts "replacement"/"elitist" (any case) or the numeric flags 0/1.

    Raises:
        ConfigurationError: If the value names no known method
    """
    if isinstance(method, (int, str)) and not isinstance(method, bool):
        if method in _METHOD_ALIASES:
            return _METHOD_ALIASES[method]
        if isinstance(method, str) and method.strip().lower() in NEXT_GEN_METHODS:
            return method.strip().lower()
    raise ConfigurationError(
        f"Invalid next_gen_method: {method!r}. Must be one of {', '.join(NEXT_GEN_METHODS)} (or 0/1)"
    )


def _section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = config.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"'{name}' must be a dictionary")
    return section


def _positive_int(value: Any, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigurationError(f"'{field}' must be a positive integer, got: {value}")
    return value


def build_config(config: Dict[str, Any]) -> GAConfig:
    """
    Convert a raw configuration dictionary into a validated GAConfig.

    Missing keys fall back to the reference defaults.

    Args:
        config: Dictionary as returned by load_config

    Returns:
        Validated GAConfig

    Raises:
        ConfigurationError: If any value is invalid
    """
    image = _section(config, "image")
    ga = _section(config, "ga")
    output = _section(config, "output")

    ga_config = GAConfig(
        image_size=image.get("size", IMAGE_SIZE),
        block_size=image.get("block_size", BLOCK_SIZE),
        num_images=image.get("num_images", NUM_IMAGES),
        num_patterns=ga.get("num_patterns", NUM_PATTERNS),
        population_size=ga.get("population_size", POP_SIZE),
        generations=ga.get("generations", GENERATIONS),
        mutation_rate=ga.get("mutation_rate", MUTATION_RATE),
        tournament_size=ga.get("tournament_size", TOURNAMENT_SIZE),
        next_gen_method=ga.get("next_gen_method", "replacement"),
        random_seed=config.get("random_seed"),
        output_root=str(output.get("root", "output")),
        csv_name=str(output.get("csv_name", "results.csv")),
        details_name=str(output.get("details_name", "detailed_results.txt")),
        overwrite=bool(output.get("overwrite", True)),
        save_plots=bool(output.get("save_plots", False)),
    )

    validate_config(ga_config)
    return ga_config


def validate_config(config: GAConfig) -> None:
    """
    Validate run parameters in place.

    Normalizes next_gen_method to its canonical name.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    _positive_int(config.image_size, "image.size")
    _positive_int(config.block_size, "image.block_size")
    _positive_int(config.num_images, "image.num_images")
    _positive_int(config.num_patterns, "ga.num_patterns")
    _positive_int(config.population_size, "ga.population_size")
    _positive_int(config.tournament_size, "ga.tournament_size")

    if config.image_size % config.block_size != 0:
        raise ConfigurationError(
            f"Image size ({config.image_size}) must be divisible by block size ({config.block_size})"
        )

    if isinstance(config.generations, bool) or not isinstance(config.generations, int) \
            or config.generations < 0:
        raise ConfigurationError(
            f"'ga.generations' must be a non-negative integer, got: {config.generations}"
        )

    if isinstance(config.mutation_rate, bool) or not isinstance(config.mutation_rate, (int, float)) \
            or not 0.0 <= config.mutation_rate <= 1.0:
        raise ConfigurationError(
            f"'ga.mutation_rate' must be a number in [0, 1], got: {config.mutation_rate}"
        )

    if config.random_seed is not None and (
            isinstance(config.random_seed, bool) or not isinstance(config.random_seed, int)
            or config.random_seed < 0):
        raise ConfigurationError(
            f"'random_seed' must be a non-negative integer or null, got: {config.random_seed}"
        )

    config.next_gen_method = normalize_method(config.next_gen_method)


def load_ga_config(config_path: Optional[Union[str, Path]] = None) -> GAConfig:
    """
    Load and validate a GAConfig.

    Args:
        config_path: YAML file path, or None for the built-in defaults

    Returns:
        Validated GAConfig
    """
    if config_path is None:
        return build_config({})
    return build_config(load_config(config_path))


def print_config_summary(config: GAConfig) -> None:
    """Print the run parameters"""
    print("Configuration Summary:")
    print(f"  Images: {config.num_images} x {config.image_size}x{config.image_size}")
    print(f"  Blocks: {config.num_blocks}x{config.num_blocks} of {config.block_size}x{config.block_size}")
    print(f"  Patterns per candidate: {config.num_patterns}")
    print(f"  Population size: {config.population_size}")
    print(f"  Generations: {config.generations}")
    print(f"  Mutation rate: {config.mutation_rate}")
    print(f"  Tournament size: {config.tournament_size}")
    print(f"  Next generation method: {config.next_gen_method}")
    seed = config.random_seed if config.random_seed is not None else "from clock"
    print(f"  Random seed: {seed}")
