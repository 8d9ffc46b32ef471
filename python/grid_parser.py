"""
Program loading for gridfunge.

Turns raw program text into a rectangular Grid:
- Lines are split on \\n (a trailing \\r is dropped, so \\r\\n files load cleanly)
- Short lines are padded on the right with blanks
- An empty program becomes a single blank cell
"""

from __future__ import annotations

import logging
from pathlib import Path

from grid_types import BLANK, Grid

__all__ = ["parse_program", "load_program"]

logger = logging.getLogger(__name__)


def parse_program(text: str, name: str = "main") -> Grid:
    """
    Parse program text into a Grid.

    Example:
        \"\"\"
        >25*"!iH",,,@
        \"\"\"
        Creates a 1x14 grid. Every character, including tabs and spaces, is
        one cell.

    Args:
        text: The program source
        name: Name recorded on the grid (used in messages and rendering)

    Returns:
        A rectangular Grid, padded with blanks
    """
    lines = text.split("\n")
    lines = [line[:-1] if line.endswith("\r") else line for line in lines]

    # A single trailing newline does not add an empty row
    if len(lines) > 1 and lines[-1] == "":
        lines.pop()

    width = max(len(line) for line in lines)
    if width == 0:
        width = 1

    rows = tuple(line.ljust(width, BLANK) for line in lines)
    grid = Grid(rows, name)

    logger.info("parse_program: '%s' loaded as %dx%d grid", name, grid.width, grid.height)
    return grid


def load_program(path: str | Path) -> Grid:
    """
    Load a program file into a Grid.

    The file is decoded as latin-1 so every byte maps to exactly one symbol.
    """
    path = Path(path)
    text = path.read_text(encoding="latin-1")
    return parse_program(text, name=path.name)
