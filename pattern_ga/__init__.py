"""
Pattern Dictionary Evolution

This package evolves a small dictionary of binary block patterns that
approximates a set of binary training images under block-wise
nearest-pattern reconstruction, using a genetic algorithm.

Key Features:
- Block-match loss (sum of per-block minimum Hamming distances)
- Tournament selection, pattern-wise uniform crossover, bit-flip mutation
- Two next-generation strategies: full replacement and elitist
- Seeded numpy generator for reproducible runs

Modules:
- data_models: Candidate structure and random initialization
- loss: Block extraction, Hamming distances, image loss, population scoring
- selection: Tournament selection and best-candidate lookup
- crossover: Uniform crossover at pattern granularity
- mutation: Independent per-cell bit-flip mutation
- evolution: Generation loop (EvolutionDriver) and run statistics
- reconstruction: Image approximation from a candidate's patterns
- config_loader: YAML configuration loading and validation
- io_utils: Image files, filename prompts, CSV and text reports
- visualization_utils: Loss curve, pattern and reconstruction plots
- orchestration: End-to-end run wiring the pieces together
- cli: Command-line interface
"""

__version__ = "0.1.0"
__author__ = "Pattern Evolution Team"

from .data_models import Candidate
from .config_loader import GAConfig, ConfigurationError
from .io_utils import ImageLoadError
from .evolution import EvolutionDriver, GenerationStats, NextGenMethod

__all__ = [
    "Candidate",
    "GAConfig",
    "ConfigurationError",
    "ImageLoadError",
    "EvolutionDriver",
    "GenerationStats",
    "NextGenMethod",
]
