#!/usr/bin/env python3
"""Tree Editor - Desktop editor for phrase-structure annotated text.

Usage:
    python main.py [FILE] [--settings PATH] [--debug]   # from project root
    python -m treedraw.main [FILE]
"""
import sys
from pathlib import Path

# Ensure the project root (this file's directory) is on sys.path so that
# `import treedraw` works regardless of how the script is invoked.
_root = str(Path(__file__).resolve().parent)
if _root not in sys.path:
    sys.path.insert(0, _root)

from treedraw.main import main  # noqa: E402


if __name__ == '__main__':
    main()
