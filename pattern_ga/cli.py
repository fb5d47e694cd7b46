"""
CLI module for pattern evolution.

Parses command-line arguments, loads and validates the run configuration,
applies overrides and dispatches the run.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .config_loader import (
    ConfigurationError,
    GAConfig,
    NEXT_GEN_METHODS,
    load_ga_config,
    validate_config,
)

DEFAULT_CONFIG = "config.yaml"


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        description="Evolve a binary pattern dictionary that approximates a set of images",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python3 main.py                                   # Prompt for the image files
  python3 main.py img1.txt img2.txt img3.txt img4.txt img5.txt
  python3 main.py --config custom.yaml img*.txt     # Custom config file
  python3 main.py --method elitist --seed 42 img*.txt
  python3 main.py --generations 50 --plot img*.txt  # Short run with PNG plots
        """
    )

    parser.add_argument(
        'images',
        nargs='*',
        help='Image text files (prompted for when fewer than image.num_images are given)'
    )

    parser.add_argument(
        '--config', '-c',
        default=None,
        help=f'Configuration file path (default: {DEFAULT_CONFIG} if present, '
             f'else built-in reference settings)'
    )

    parser.add_argument(
        '--seed', '-s',
        type=int,
        help='Random seed (default: from config, else the current time)'
    )

    parser.add_argument(
        '--generations', '-g',
        type=int,
        metavar='N',
        help='Number of generations'
    )

    parser.add_argument(
        '--population-size', '-p',
        type=int,
        metavar='N',
        help='Candidates per generation'
    )

    parser.add_argument(
        '--method', '-m',
        choices=list(NEXT_GEN_METHODS) + ['0', '1'],
        help='Next generation method (0 = replacement, 1 = elitist)'
    )

    parser.add_argument(
        '--output-root', '-o',
        metavar='DIR',
        help='Directory for CSV, report and plots'
    )

    parser.add_argument(
        '--plot',
        action='store_true',
        help='Save loss curve, pattern and reconstruction plots'
    )

    return parser


def apply_overrides(config: GAConfig, args: argparse.Namespace) -> GAConfig:
    """
    Apply command-line overrides to a loaded configuration.

    Raises:
        ConfigurationError: If an overridden value is invalid
    """
    if args.seed is not None:
        config.random_seed = args.seed
    if args.generations is not None:
        config.generations = args.generations
    if args.population_size is not None:
        config.population_size = args.population_size
    if args.method is not None:
        config.next_gen_method = args.method
    if args.output_root is not None:
        config.output_root = args.output_root
    if args.plot:
        config.save_plots = True

    validate_config(config)
    return config


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point with command-line argument parsing"""
    parser = build_parser()
    args = parser.parse_args(argv)

    config_path = args.config
    if config_path is None and Path(DEFAULT_CONFIG).exists():
        config_path = DEFAULT_CONFIG

    try:
        if config_path is not None:
            print(f"Loading configuration from: {config_path}")
        config = apply_overrides(load_ga_config(config_path), args)

        if len(args.images) > config.num_images:
            parser.error(f"expected at most {config.num_images} image files, got {len(args.images)}")

        from .orchestration import run_from_images
        run_from_images(config, args.images)

    except KeyboardInterrupt:
        print("\nOperation cancelled by user.")
        sys.exit(1)
    except ConfigurationError as e:
        print(f"Configuration error: {e}")
        sys.exit(1)
    except EOFError:
        print("\nNo more input; aborting.")
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)
