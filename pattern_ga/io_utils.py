"""
I/O utilities for pattern evolution.

Handles image text files, interactive filename prompts, console dumps of
images and patterns, the per-generation CSV log and the detailed text
report.
"""

import csv
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, TextIO, Union

import numpy as np

from .data_models import Candidate


class ImageLoadError(Exception):
    """Raised when an image file is missing or malformed"""
    pass


def read_image(image_path: Union[str, Path], image_size: int = 24) -> np.ndarray:
    """
    Load a binary image from a whitespace-separated text file.

    File format (image_size rows of image_size integers):
        0 1 1 0 ...
        1 0 0 1 ...
        ...

    Tokens are read in order regardless of line breaks; anything after the
    first image_size**2 values is ignored.

    Args:
        image_path: Path to image text file
        image_size: Side length of the image

    Returns:
        Read-only uint8 array of shape (image_size, image_size)

    Raises:
        ImageLoadError: If the file can't be read or any needed cell is not 0/1
    """
    image_path = Path(image_path)

    try:
        with open(image_path, 'r') as f:
            tokens = f.read().split()
    except (OSError, UnicodeDecodeError) as e:
        raise ImageLoadError(f"Cannot read image file {image_path}: {e}")

    total = image_size * image_size
    pixels = []
    for i, token in enumerate(tokens[:total]):
        row, col = divmod(i, image_size)
        try:
            value = int(token)
        except ValueError:
            raise ImageLoadError(
                f"Error reading pixel at ({row}, {col}) in {image_path}: {token!r} is not an integer"
            )
        if value not in (0, 1):
            raise ImageLoadError(
                f"Error reading pixel at ({row}, {col}) in {image_path}: expected 0 or 1, got {value}"
            )
        pixels.append(value)

    if len(pixels) < total:
        row, col = divmod(len(pixels), image_size)
        raise ImageLoadError(
            f"Error reading pixel at ({row}, {col}) in {image_path}: "
            f"file has {len(pixels)} of {total} values"
        )

    image = np.array(pixels, dtype=np.uint8).reshape(image_size, image_size)
    image.setflags(write=False)
    return image


def prompt_for_image(
    index: int,
    image_size: int = 24,
    initial_path: Optional[str] = None,
    input_fn: Callable[[str], str] = input,
    output_fn: Callable[[str], None] = print
) -> np.ndarray:
    """
    Ask for an image filename until one loads.

    Args:
        index: Zero-based image number (shown one-based)
        image_size: Side length of the image
        initial_path: Filename to try first instead of prompting
        input_fn: Reads one line of user input
        output_fn: Shows error messages

    Returns:
        Loaded image
    """
    filename = initial_path
    if filename is None:
        filename = input_fn(f"Enter name of image file {index + 1}: ").strip()

    while True:
        try:
            return read_image(filename, image_size)
        except ImageLoadError as e:
            output_fn(str(e))
            filename = input_fn(f"Error reading image file {filename}. Please re-enter: ").strip()


def load_images(
    num_images: int,
    image_size: int = 24,
    image_paths: Optional[Sequence[str]] = None,
    input_fn: Callable[[str], str] = input,
    output_fn: Callable[[str], None] = print
) -> List[np.ndarray]:
    """
    Load all training images, prompting for any that are missing or bad.

    Args:
        num_images: Number of images to load
        image_size: Side length of each image
        image_paths: Filenames to try first (may be shorter than num_images)
        input_fn: Reads one line of user input
        output_fn: Shows error messages

    Returns:
        List of num_images loaded images

    Raises:
        ValueError: If more paths than num_images are given
    """
    image_paths = list(image_paths or [])
    if len(image_paths) > num_images:
        raise ValueError(f"Expected at most {num_images} image paths, got {len(image_paths)}")

    images = []
    for index in range(num_images):
        initial = image_paths[index] if index < len(image_paths) else None
        images.append(prompt_for_image(index, image_size, initial, input_fn, output_fn))
    return images


def save_image(image: np.ndarray, output_path: Union[str, Path]) -> Path:
    """
    Write an image in the same text format read_image accepts.

    Used to round-trip images, e.g. saving fixtures or reconstructions.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w') as f:
        for row in image:
            f.write(" ".join(str(int(v)) for v in row) + "\n")

    return output_path


def format_image(image: np.ndarray) -> str:
    """Render an image as rows of right-aligned 0/1 cells."""
    return "\n".join("".join(f"{int(v):2d}" for v in row) for row in image)


def format_patterns(patterns: np.ndarray) -> str:
    """
    Render a pattern dictionary, one numbered block per pattern.

    Example:
        Pattern 1:
        0 1 0
        1 1 1
        0 1 0
    """
    chunks = []
    for i, pattern in enumerate(patterns):
        rows = "\n".join(" ".join(str(int(v)) for v in row) for row in pattern)
        chunks.append(f"Pattern {i + 1}:\n{rows}\n")
    return "\n".join(chunks)


def format_generation_line(generation: int, best_fitness: int, average_fitness: int) -> str:
    """One-line generation summary used on the console and in the report."""
    return (
        f"Generation {generation}: Best Total Loss = {best_fitness}, "
        f"Average Total Loss = {average_fitness}"
    )


def _prepare_output(output_path: Union[str, Path], overwrite: bool) -> Path:
    output_path = Path(output_path)

    if output_path.exists() and not overwrite:
        raise FileExistsError(f"Output file already exists: {output_path}")

    # Create parent directory if needed
    output_path.parent.mkdir(parents=True, exist_ok=True)
    return output_path


class GenerationLog:
    """
    CSV log with one row per generation.

    Columns: Generation,BestLoss,AverageLoss
    """

    fieldnames = ['Generation', 'BestLoss', 'AverageLoss']

    def __init__(self, output_path: Union[str, Path], overwrite: bool = False):
        self.path = _prepare_output(output_path, overwrite)
        self._file = open(self.path, 'w', newline='')
        self._writer = csv.writer(self._file)
        self._writer.writerow(self.fieldnames)

    def write(self, generation: int, best_fitness: int, average_fitness: int) -> None:
        self._writer.writerow([generation, best_fitness, average_fitness])
        self._file.flush()

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()

    def __enter__(self) -> "GenerationLog":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def load_generation_log(csv_path: Union[str, Path]) -> List[dict]:
    """
    Read a generation CSV back into a list of rows.

    Counterpart of GenerationLog for round-tripping a finished run.

    Returns:
        List of dicts with integer 'Generation', 'BestLoss', 'AverageLoss'

    Raises:
        FileNotFoundError: If the CSV doesn't exist
        ValueError: If the header is wrong
    """
    csv_path = Path(csv_path)

    if not csv_path.exists():
        raise FileNotFoundError(f"CSV file not found: {csv_path}")

    with open(csv_path, 'r', newline='') as f:
        reader = csv.DictReader(f)

        if reader.fieldnames != GenerationLog.fieldnames:
            raise ValueError(
                f"Invalid CSV format in {csv_path}. Expected columns: {','.join(GenerationLog.fieldnames)}"
            )

        return [{key: int(value) for key, value in row.items()} for row in reader]


class DetailedReport:
    """
    Human-readable text report of a run.

    Sections are written in run order: header, initial patterns, one line
    per generation, final patterns, then original/reconstructed/loss per
    image.
    """

    def __init__(self, output_path: Union[str, Path], overwrite: bool = False):
        self.path = _prepare_output(output_path, overwrite)
        self._file: TextIO = open(self.path, 'w')

    def write_header(self, seed: Optional[int], parameters: dict) -> None:
        self._file.write(f"Run started: {datetime.now().isoformat()}\n")
        self._file.write(f"Random seed: {seed}\n")
        for key, value in parameters.items():
            self._file.write(f"{key}: {value}\n")
        self._file.write("\n")

    def write_initial_patterns(self, candidate: Candidate) -> None:
        self._file.write("Initial Random Patterns (from first candidate):\n")
        self._file.write(format_patterns(candidate.patterns))
        self._file.write("\n")

    def write_generation(self, generation: int, best_fitness: int, average_fitness: int) -> None:
        self._file.write(format_generation_line(generation, best_fitness, average_fitness) + "\n")
        self._file.flush()

    def write_final_patterns(self, candidate: Candidate, generations: int) -> None:
        self._file.write(f"\nFinal Best Candidate's Patterns After {generations} Generations:\n")
        self._file.write(format_patterns(candidate.patterns))
        self._file.write("\n")

    def write_image_result(
        self,
        index: int,
        original: np.ndarray,
        reconstructed: np.ndarray,
        loss: int
    ) -> None:
        self._file.write(f"Image {index + 1}:\n")
        self._file.write("Original Image:\n")
        self._file.write(format_image(original) + "\n")
        self._file.write("\nReconstructed Image:\n")
        self._file.write(format_image(reconstructed) + "\n")
        self._file.write(f"\nLoss for Image {index + 1} = {loss}\n\n")

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()

    def __enter__(self) -> "DetailedReport":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def print_images(images: Iterable[np.ndarray], title: str) -> None:
    """Print each image under a numbered title."""
    for i, image in enumerate(images):
        print(f"\n{title} {i + 1}:")
        print(format_image(image))
