"""
Visualization utilities for pattern evolution.

Plots the loss curve of a run, the evolved pattern dictionary, and the
original images next to their reconstructions.
"""

from pathlib import Path
from typing import List, Sequence, Tuple, Union

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import numpy as np

from .data_models import Candidate
from .evolution import GenerationStats


def plot_loss_curve(
    history: Sequence[GenerationStats],
    output_path: Union[str, Path],
    figsize: Tuple[int, int] = (10, 6)
) -> Path:
    """
    Plot best and average total loss per generation.

    Args:
        history: Per-generation stats in run order
        output_path: Path to save PNG file
        figsize: Figure size (width, height) in inches

    Returns:
        Path to saved PNG
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    generations = [s.generation for s in history]
    fig, ax = plt.subplots(figsize=figsize)
    ax.plot(generations, [s.best_fitness for s in history], label="Best total loss", color="tab:blue")
    ax.plot(generations, [s.average_fitness for s in history], label="Average total loss",
            color="tab:orange", alpha=0.8)
    ax.set_xlabel("Generation")
    ax.set_ylabel("Total loss")
    ax.set_title("Pattern evolution progress")
    ax.grid(True, alpha=0.3)
    ax.legend()

    fig.tight_layout()
    fig.savefig(output_path, dpi=120)
    plt.close(fig)

    return output_path


def plot_patterns(
    candidate: Candidate,
    output_path: Union[str, Path],
    figsize: Tuple[int, int] = (12, 2)
) -> Path:
    """
    Draw every pattern of a candidate side by side.

    Returns:
        Path to saved PNG
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    num_patterns = candidate.num_patterns
    fig, axes = plt.subplots(1, num_patterns, figsize=figsize, squeeze=False)

    for i, ax in enumerate(axes[0]):
        ax.imshow(candidate.patterns[i], cmap="gray_r", vmin=0, vmax=1)
        ax.set_title(f"Pattern {i + 1}", fontsize=9)
        ax.set_xticks([])
        ax.set_yticks([])

    fig.suptitle(f"Best candidate (fitness = {candidate.fitness})")
    fig.tight_layout()
    fig.savefig(output_path, dpi=120)
    plt.close(fig)

    return output_path


def plot_reconstructions(
    images: Sequence[np.ndarray],
    reconstructions: List[Tuple[np.ndarray, int]],
    output_path: Union[str, Path],
    figsize: Tuple[int, int] = (12, 5)
) -> Path:
    """
    Show each original image above its reconstruction and loss.

    Args:
        images: Original images
        reconstructions: (reconstructed_image, loss) per image
        output_path: Path to save PNG file
        figsize: Figure size (width, height) in inches

    Returns:
        Path to saved PNG
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    fig, axes = plt.subplots(2, len(images), figsize=figsize, squeeze=False)

    for i, (image, (reconstructed, loss)) in enumerate(zip(images, reconstructions)):
        axes[0, i].imshow(image, cmap="gray_r", vmin=0, vmax=1)
        axes[0, i].set_title(f"Image {i + 1}", fontsize=9)
        axes[1, i].imshow(reconstructed, cmap="gray_r", vmin=0, vmax=1)
        axes[1, i].set_title(f"Loss = {loss}", fontsize=9)
        for ax in (axes[0, i], axes[1, i]):
            ax.set_xticks([])
            ax.set_yticks([])

    axes[0, 0].set_ylabel("Original")
    axes[1, 0].set_ylabel("Reconstructed")

    fig.tight_layout()
    fig.savefig(output_path, dpi=120)
    plt.close(fig)

    return output_path
