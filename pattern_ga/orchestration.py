"""
Orchestration module for pattern evolution.

Implements the end-to-end run: load images, evolve, reconstruct, and
write the CSV log, detailed report and optional plots.
"""

from pathlib import Path
from typing import Callable, List, Optional, Sequence

import numpy as np

from .config_loader import GAConfig, print_config_summary
from .evolution import EvolutionDriver, EvolutionResult, GenerationStats, resolve_seed
from .io_utils import (
    load_images,
    print_images,
    format_generation_line,
    format_image,
    GenerationLog,
    DetailedReport,
)
from .reconstruction import reconstruct_all


def run_evolution(
    config: GAConfig,
    images: Sequence[np.ndarray],
    output_root: Optional[Path] = None
) -> EvolutionResult:
    """
    Evolve a pattern dictionary for already-loaded images.

    Args:
        config: Validated run configuration
        images: Training images
        output_root: Directory for outputs (defaults to config.output_root)

    Algorithm:
        1. Resolve seed (config or wall clock) and create the generator
        2. Open CSV log and detailed report under output_root
        3. Initialize population, log the first candidate's patterns, evaluate
        4. For each generation: breed, swap, evaluate, print/log stats
        5. Log best patterns, reconstruct every image, log and print results
        6. Save plots if config.save_plots

    Returns:
        EvolutionResult of the run
    """
    output_root = Path(output_root or config.output_root)
    output_root.mkdir(parents=True, exist_ok=True)

    seed = resolve_seed(config.random_seed)
    print(f"Random seed: {seed}")
    rng = np.random.default_rng(seed)

    csv_path = output_root / config.csv_name
    details_path = output_root / config.details_name

    with GenerationLog(csv_path, overwrite=config.overwrite) as csv_log, \
            DetailedReport(details_path, overwrite=config.overwrite) as report:

        def on_generation(stats: GenerationStats) -> None:
            print(format_generation_line(stats.generation, stats.best_fitness, stats.average_fitness))
            csv_log.write(stats.generation, stats.best_fitness, stats.average_fitness)
            report.write_generation(stats.generation, stats.best_fitness, stats.average_fitness)

        driver = EvolutionDriver(images, config, rng=rng, on_generation=on_generation)
        report.write_header(seed, config.to_dict())

        population = driver.initialize()
        report.write_initial_patterns(population[0])
        driver.evaluate()
        print(f"Initial best total loss: {driver.initial_best_fitness}")
        print()

        result = driver.run()
        result.seed = seed

        report.write_final_patterns(result.best, config.generations)

        reconstructions = reconstruct_all(driver.images, result.best)
        for i, (image, (reconstructed, loss)) in enumerate(zip(driver.images, reconstructions)):
            report.write_image_result(i, image, reconstructed, loss)

            print(f"Reconstructed Image {i + 1} Using Evolved Patterns (loss = {loss}):")
            print(format_image(reconstructed))
            print()

    print(f"CSV log: {csv_path}")
    print(f"Detailed report: {details_path}")

    if config.save_plots:
        save_run_plots(result, driver.images, reconstructions, output_root)

    return result


def save_run_plots(
    result: EvolutionResult,
    images: Sequence[np.ndarray],
    reconstructions: List,
    output_root: Path
) -> List[Path]:
    """
    Write loss curve, pattern and reconstruction plots.

    Plot failures are reported and skipped; the run's text outputs are
    already on disk at this point.

    Returns:
        Paths of the plots that were written
    """
    from .visualization_utils import plot_loss_curve, plot_patterns, plot_reconstructions

    print(f"\nGenerating visualization plots...")
    written = []
    plots = [
        ("loss_curve.png", lambda p: plot_loss_curve(result.history, p)),
        ("best_patterns.png", lambda p: plot_patterns(result.best, p)),
        ("reconstructions.png", lambda p: plot_reconstructions(images, reconstructions, p)),
    ]
    for name, plot in plots:
        path = output_root / name
        try:
            plot(path)
        except (OSError, ValueError) as e:
            print(f"  ✗ Plot {name}: Failed - {e}")
            continue
        print(f"  ✓ Plot: {path}")
        written.append(path)

    return written


def run_from_images(
    config: GAConfig,
    image_paths: Optional[Sequence[str]] = None,
    input_fn: Callable[[str], str] = input
) -> EvolutionResult:
    """
    Full interactive run: load (or prompt for) images, then evolve.

    This is the main entry point called by the CLI.

    Args:
        config: Validated run configuration
        image_paths: Image files given up front; missing ones are prompted for
        input_fn: Reads one line of user input

    Returns:
        EvolutionResult of the run
    """
    print("=" * 70)
    print("PATTERN EVOLUTION")
    print("=" * 70)
    print_config_summary(config)
    print()

    images = load_images(config.num_images, config.image_size, image_paths, input_fn=input_fn)

    print_images(images, "Original Image")
    print()

    result = run_evolution(config, images)

    # Print summary
    print()
    print("=" * 70)
    print("SUMMARY")
    print("=" * 70)
    print(f"Generations: {len(result.history)}")
    print(f"Initial best total loss: {result.initial_best_fitness}")
    print(f"Final best total loss: {result.best.fitness}")
    print(f"Random seed: {result.seed}")

    return result
