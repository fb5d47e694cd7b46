#!/usr/bin/env python3
"""
Pattern Dictionary Evolution

Main entry point for evolving a binary pattern dictionary that
approximates a set of binary images.

Usage:
    python3 main.py [--config config.yaml] [image files ...]
    python3 main.py --help
"""

import sys
from pathlib import Path

# Add current directory to path for imports
sys.path.append(str(Path(__file__).parent))

from pattern_ga.cli import main


if __name__ == "__main__":
    main()
