"""
Block-match loss engine.

Splits an image into non-overlapping square blocks and scores a candidate
by the Hamming distance from each block to its closest pattern.
"""

from typing import List, Sequence

import numpy as np

from .data_models import Candidate


def extract_blocks(image: np.ndarray, block_size: int) -> np.ndarray:
    """
    Cut an image into disjoint blocks in row-major block order.

    Args:
        image: Square 0/1 array whose side is a multiple of block_size
        block_size: Side length of each block

    Returns:
        Array of shape (num_blocks**2, block_size**2), one flattened block
        per row, ordered by block row then block column

    Raises:
        ValueError: If the image side is not a multiple of block_size
    """
    size = image.shape[0]
    if image.ndim != 2 or image.shape[1] != size:
        raise ValueError(f"Image must be square, got shape {image.shape}")
    if size % block_size != 0:
        raise ValueError(f"Image size {size} is not divisible by block size {block_size}")

    num_blocks = size // block_size
    # (block_row, row_in_block, block_col, col_in_block) -> (block_row, block_col, ...)
    blocks = image.reshape(num_blocks, block_size, num_blocks, block_size).swapaxes(1, 2)
    return blocks.reshape(num_blocks * num_blocks, block_size * block_size)


def block_distances(blocks: np.ndarray, patterns: np.ndarray) -> np.ndarray:
    """
    Hamming distance from every block to every pattern.

    Args:
        blocks: Array of shape (n_blocks, k*k)
        patterns: Array of shape (num_patterns, k, k)

    Returns:
        Integer array of shape (n_blocks, num_patterns)
    """
    flat_patterns = patterns.reshape(patterns.shape[0], -1)
    return np.count_nonzero(blocks[:, None, :] != flat_patterns[None, :, :], axis=2)


def best_pattern_indices(image: np.ndarray, patterns: np.ndarray) -> np.ndarray:
    """
    Index of the closest pattern for each block of an image.

    Ties go to the lowest pattern index (np.argmin returns the first minimum).

    Args:
        image: Square 0/1 image
        patterns: Array of shape (num_patterns, k, k)

    Returns:
        Integer array of length num_blocks**2 in row-major block order
    """
    blocks = extract_blocks(image, patterns.shape[1])
    return np.argmin(block_distances(blocks, patterns), axis=1)


def compute_image_loss(image: np.ndarray, candidate: Candidate) -> int:
    """
    Loss of one image under a candidate's patterns.

    Args:
        image: Square 0/1 image
        candidate: Candidate whose patterns approximate the blocks

    Returns:
        Sum over blocks of the minimum Hamming distance to any pattern
    """
    blocks = extract_blocks(image, candidate.block_size)
    return int(block_distances(blocks, candidate.patterns).min(axis=1).sum())


def evaluate_population(population: List[Candidate], images: Sequence[np.ndarray]) -> None:
    """
    Score every candidate against every training image.

    Each candidate's fitness is overwritten with the sum of its per-image
    losses. Nothing is cached between calls.

    Args:
        population: Candidates to score (modified in place)
        images: Training images
    """
    if not population:
        return

    if len(images) == 0:
        for candidate in population:
            candidate.fitness = 0
        return

    # Stacking the blocks of all images gives the same total as summing per image.
    block_size = population[0].block_size
    all_blocks = np.concatenate([extract_blocks(image, block_size) for image in images])

    for candidate in population:
        distances = block_distances(all_blocks, candidate.patterns)
        candidate.fitness = int(distances.min(axis=1).sum())
