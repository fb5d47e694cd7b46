"""
Image reconstruction from an evolved pattern dictionary.
"""

from typing import List, Sequence, Tuple

import numpy as np

from .data_models import Candidate
from .loss import best_pattern_indices, compute_image_loss


def reconstruct_image(image: np.ndarray, candidate: Candidate) -> np.ndarray:
    """
    Replace every block of an image by its closest pattern.

    Uses the same first-found tie rule as the loss engine, so the Hamming
    distance between the image and its reconstruction equals the image loss.

    Args:
        image: Square 0/1 image
        candidate: Candidate providing the patterns

    Returns:
        New uint8 array with the same shape as image
    """
    block_size = candidate.block_size
    num_blocks = image.shape[0] // block_size

    indices = best_pattern_indices(image, candidate.patterns)
    chosen = candidate.patterns[indices].reshape(num_blocks, num_blocks, block_size, block_size)

    return chosen.swapaxes(1, 2).reshape(image.shape).astype(np.uint8)


def reconstruct_all(
    images: Sequence[np.ndarray],
    candidate: Candidate
) -> List[Tuple[np.ndarray, int]]:
    """
    Reconstruct every image and pair it with its loss.

    Returns:
        List of (reconstructed_image, loss), one per input image
    """
    return [
        (reconstruct_image(image, candidate), compute_image_loss(image, candidate))
        for image in images
    ]
