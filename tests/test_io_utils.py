"""
Tests for I/O utilities.

Tests image parsing, filename prompting, CSV logging and the detailed report.
"""

import unittest
import tempfile
import shutil
from pathlib import Path

import numpy as np

from pattern_ga.data_models import Candidate
from pattern_ga.io_utils import (
    ImageLoadError,
    read_image,
    prompt_for_image,
    load_images,
    save_image,
    format_image,
    format_patterns,
    format_generation_line,
    GenerationLog,
    load_generation_log,
    DetailedReport,
)


def scripted_input(answers):
    """Return an input function that replays answers and records prompts."""
    answers = list(answers)
    prompts = []

    def fake_input(prompt):
        prompts.append(prompt)
        return answers.pop(0)

    fake_input.prompts = prompts
    return fake_input


class TestReadImage(unittest.TestCase):
    """Test image file parsing."""

    def setUp(self):
        """Create temporary directory for tests."""
        self.temp_dir = tempfile.mkdtemp()
        self.temp_path = Path(self.temp_dir)
        self.image = np.random.default_rng(0).integers(0, 2, size=(24, 24)).astype(np.uint8)

    def tearDown(self):
        """Clean up temporary directory."""
        shutil.rmtree(self.temp_dir)

    def write(self, name, text):
        path = self.temp_path / name
        path.write_text(text)
        return path

    def test_read_valid_image(self):
        """Test a well-formed file loads as a read-only 24x24 array."""
        path = save_image(self.image, self.temp_path / "img.txt")

        loaded = read_image(path)

        np.testing.assert_array_equal(loaded, self.image)
        self.assertEqual(loaded.dtype, np.uint8)
        self.assertFalse(loaded.flags.writeable)

    def test_layout_independent(self):
        """Test values are read in order regardless of line breaks."""
        text = "\n".join(str(v) for v in self.image.ravel())
        loaded = read_image(self.write("one_per_line.txt", text))
        np.testing.assert_array_equal(loaded, self.image)

    def test_trailing_tokens_ignored(self):
        """Test values after the last pixel are ignored."""
        text = " ".join(str(v) for v in self.image.ravel()) + "\n1 0 junk\n"
        loaded = read_image(self.write("trailing.txt", text))
        np.testing.assert_array_equal(loaded, self.image)

    def test_missing_file(self):
        """Test missing file raises ImageLoadError."""
        with self.assertRaises(ImageLoadError):
            read_image(self.temp_path / "nope.txt")

    def test_non_integer_token(self):
        """Test a non-integer cell rejects the whole image."""
        values = [str(v) for v in self.image.ravel()]
        values[30] = "x"
        with self.assertRaises(ImageLoadError) as ctx:
            read_image(self.write("bad.txt", " ".join(values)))
        self.assertIn("(1, 6)", str(ctx.exception))

    def test_non_binary_value(self):
        """Test a value other than 0/1 is rejected."""
        values = [str(v) for v in self.image.ravel()]
        values[0] = "2"
        with self.assertRaises(ImageLoadError):
            read_image(self.write("two.txt", " ".join(values)))

    def test_too_few_values(self):
        """Test a short file is rejected."""
        values = [str(v) for v in self.image.ravel()][:575]
        with self.assertRaises(ImageLoadError) as ctx:
            read_image(self.write("short.txt", " ".join(values)))
        self.assertIn("(23, 23)", str(ctx.exception))

    def test_custom_size(self):
        """Test non-default image sizes."""
        loaded = read_image(self.write("small.txt", "0 1 1\n1 0 0\n0 0 1\n"), image_size=3)
        np.testing.assert_array_equal(loaded, [[0, 1, 1], [1, 0, 0], [0, 0, 1]])

    def test_binary_file(self):
        """Test undecodable bytes raise ImageLoadError."""
        path = self.temp_path / "binary.txt"
        path.write_bytes(b"\xff\xfe\x00\x81 garbage")
        with self.assertRaises(ImageLoadError):
            read_image(path)


class TestPrompting(unittest.TestCase):
    """Test interactive filename prompts."""

    def setUp(self):
        """Create temporary directory with one valid image."""
        self.temp_dir = tempfile.mkdtemp()
        self.temp_path = Path(self.temp_dir)
        self.image = np.eye(24, dtype=np.uint8)
        self.good = str(save_image(self.image, self.temp_path / "good.txt"))
        self.messages = []

    def tearDown(self):
        """Clean up temporary directory."""
        shutil.rmtree(self.temp_dir)

    def test_retry_until_success(self):
        """Test bad filenames are re-prompted until one loads."""
        fake_input = scripted_input(["missing.txt", "also_missing.txt", self.good])

        loaded = prompt_for_image(0, input_fn=fake_input, output_fn=self.messages.append)

        np.testing.assert_array_equal(loaded, self.image)
        self.assertEqual(fake_input.prompts[0], "Enter name of image file 1: ")
        self.assertEqual(
            fake_input.prompts[1], "Error reading image file missing.txt. Please re-enter: "
        )
        self.assertEqual(len(fake_input.prompts), 3)
        self.assertEqual(len(self.messages), 2)

    def test_initial_path_skips_prompt(self):
        """Test a good initial path loads without asking."""
        fake_input = scripted_input([])
        loaded = prompt_for_image(2, initial_path=self.good, input_fn=fake_input)

        np.testing.assert_array_equal(loaded, self.image)
        self.assertEqual(fake_input.prompts, [])

    def test_bad_initial_path_reprompts(self):
        """Test a bad initial path falls back to prompting."""
        fake_input = scripted_input([self.good])
        prompt_for_image(0, initial_path="bad.txt", input_fn=fake_input,
                         output_fn=self.messages.append)

        self.assertEqual(fake_input.prompts, ["Error reading image file bad.txt. Please re-enter: "])

    def test_binary_initial_path_reprompts(self):
        """Test a binary file is reported and re-prompted like any bad image."""
        binary = self.temp_path / "bad.txt"
        binary.write_bytes(b"\xff\xfe\x00\x81 garbage")
        fake_input = scripted_input([self.good])

        loaded = prompt_for_image(0, initial_path=str(binary), input_fn=fake_input,
                                  output_fn=self.messages.append)

        np.testing.assert_array_equal(loaded, self.image)
        self.assertEqual(fake_input.prompts, [f"Error reading image file {binary}. Please re-enter: "])
        self.assertEqual(len(self.messages), 1)

    def test_load_images_mixes_paths_and_prompts(self):
        """Test given paths are used first and the rest are prompted for."""
        fake_input = scripted_input([self.good, self.good])

        images = load_images(3, image_paths=[self.good], input_fn=fake_input,
                             output_fn=self.messages.append)

        self.assertEqual(len(images), 3)
        self.assertEqual(fake_input.prompts, [
            "Enter name of image file 2: ",
            "Enter name of image file 3: ",
        ])

    def test_load_images_too_many_paths(self):
        """Test more paths than images is an error."""
        with self.assertRaises(ValueError):
            load_images(1, image_paths=[self.good, self.good])


class TestFormatting(unittest.TestCase):
    """Test text rendering helpers."""

    def test_format_image(self):
        """Test two-character right-aligned cells."""
        self.assertEqual(format_image(np.array([[0, 1], [1, 0]])), " 0 1\n 1 0")

    def test_format_patterns(self):
        """Test numbered pattern blocks."""
        patterns = np.zeros((2, 3, 3), dtype=np.uint8)
        patterns[1, 1, 1] = 1
        text = format_patterns(patterns)

        self.assertTrue(text.startswith("Pattern 1:\n0 0 0\n0 0 0\n0 0 0\n"))
        self.assertIn("Pattern 2:\n0 0 0\n0 1 0\n0 0 0\n", text)

    def test_format_generation_line(self):
        """Test the per-generation summary line."""
        self.assertEqual(
            format_generation_line(4, 120, 251),
            "Generation 4: Best Total Loss = 120, Average Total Loss = 251"
        )


class TestOutputFiles(unittest.TestCase):
    """Test CSV log and detailed report."""

    def setUp(self):
        """Create temporary directory for tests."""
        self.temp_dir = tempfile.mkdtemp()
        self.temp_path = Path(self.temp_dir)

    def tearDown(self):
        """Clean up temporary directory."""
        shutil.rmtree(self.temp_dir)

    def test_generation_log(self):
        """Test header and rows of the generation CSV."""
        path = self.temp_path / "logs" / "results.csv"
        with GenerationLog(path) as log:
            log.write(0, 300, 410)
            log.write(1, 280, 395)

        self.assertEqual(path.read_text().splitlines()[0], "Generation,BestLoss,AverageLoss")
        rows = load_generation_log(path)
        self.assertEqual(rows, [
            {'Generation': 0, 'BestLoss': 300, 'AverageLoss': 410},
            {'Generation': 1, 'BestLoss': 280, 'AverageLoss': 395},
        ])

    def test_overwrite_protection(self):
        """Test existing outputs are kept unless overwrite is set."""
        path = self.temp_path / "existing.csv"
        path.touch()

        with self.assertRaises(FileExistsError):
            GenerationLog(path, overwrite=False)
        with self.assertRaises(FileExistsError):
            DetailedReport(path, overwrite=False)

        GenerationLog(path, overwrite=True).close()

    def test_load_generation_log_bad_header(self):
        """Test a CSV with the wrong header is rejected."""
        path = self.temp_path / "bad.csv"
        path.write_text("a,b,c\n1,2,3\n")
        with self.assertRaises(ValueError):
            load_generation_log(path)

    def test_detailed_report_sections(self):
        """Test report contains every section in run order."""
        path = self.temp_path / "details.txt"
        candidate = Candidate(patterns=np.zeros((7, 3, 3)), fitness=0)
        image = np.zeros((24, 24), dtype=np.uint8)

        with DetailedReport(path) as report:
            report.write_header(42, {"population_size": 10})
            report.write_initial_patterns(candidate)
            report.write_generation(0, 5, 9)
            report.write_final_patterns(candidate, 1)
            report.write_image_result(0, image, image, 0)

        text = path.read_text()
        markers = [
            "Random seed: 42",
            "population_size: 10",
            "Initial Random Patterns (from first candidate):",
            "Generation 0: Best Total Loss = 5, Average Total Loss = 9",
            "Final Best Candidate's Patterns After 1 Generations:",
            "Image 1:",
            "Original Image:",
            "Reconstructed Image:",
            "Loss for Image 1 = 0",
        ]
        positions = [text.index(marker) for marker in markers]
        self.assertEqual(positions, sorted(positions))


if __name__ == '__main__':
    unittest.main()
