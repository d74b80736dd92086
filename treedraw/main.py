#!/usr/bin/env python3
"""Tree Editor - Desktop editor for phrase-structure annotated text.

Edits labeled-bracket (Penn treebank style) files: move, wrap, prune,
split, relabel and coindex nodes with per-action undo. Built with PySide6.

Usage:
    python -m treedraw.main [FILE] [--settings PATH] [--debug]
    treedraw [FILE]
"""
import argparse
import logging
import sys
from pathlib import Path

from PySide6.QtWidgets import QApplication

# Allow running as a script (python treedraw/main.py) in addition to
# running as a module (python -m treedraw.main).
if not __package__:
    _parent = str(Path(__file__).resolve().parent.parent)
    if _parent not in sys.path:
        sys.path.insert(0, _parent)
    __package__ = "treedraw"


def main():
    parser = argparse.ArgumentParser(description='Tree Editor')
    parser.add_argument('file', nargs='?', default=None,
                        help='Labeled-bracket file to open')
    parser.add_argument('--settings', type=str, default=None,
                        help='Path to a settings JSON file (default: ~/.config/treedraw/settings.json)')
    parser.add_argument('--debug', action='store_true',
                        help='Log every tree operation')
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format='[%(name)s] %(levelname)s: %(message)s',
    )

    from .core.settings import Settings
    settings = Settings(args.settings)

    app = QApplication(sys.argv)
    app.setStyle('Fusion')

    # Import here so the settings and logging are set up first
    from .app import App
    main_window = App(path=args.file, settings=settings)
    main_window.show()

    sys.exit(app.exec())


if __name__ == '__main__':
    main()
