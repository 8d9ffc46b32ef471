"""
The execution cursor: a position on the toroidal grid plus a direction.
"""

from __future__ import annotations

from typing import Callable

from grid_types import Direction, Grid, Instruction, Mode, Op, PushChar

# Type alias for the symbol lookup collaborator
Lookup = Callable[[str], Instruction | None]

STRING_DELIMITER = '"'

# Direction deltas: (dx, dy)
DELTAS = {
    Direction.UP: (0, -1),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
}


class Cursor:
    """Single moving execution point. Starts at (0, 0) facing right."""

    def __init__(self, x: int = 0, y: int = 0, direction: Direction = Direction.RIGHT) -> None:
        self.x = x
        self.y = y
        self.direction = direction

    @property
    def position(self) -> tuple[int, int]:
        return (self.x, self.y)

    def set_direction(self, direction: Direction) -> None:
        """Change direction. Position is unaffected until the next advance."""
        self.direction = direction

    def advance(self, grid: Grid) -> None:
        """Move one cell in the current direction, wrapping at the grid edges."""
        dx, dy = DELTAS[self.direction]
        # Python's % with a positive modulus is already Euclidean
        self.x = (self.x + dx) % grid.width
        self.y = (self.y + dy) % grid.height

    def current_symbol(self, grid: Grid) -> str:
        return grid.symbol_at(self.x, self.y)

    def resolve_instruction(self, grid: Grid, mode: Mode, lookup: Lookup) -> Instruction | None:
        """
        Decide what the symbol under the cursor means in the given mode.

        In string mode every symbol except the delimiter is data and becomes a
        PushChar; the delimiter toggles back to normal mode. In normal mode the
        lookup decides, and None means the symbol is a no-op.
        """
        symbol = self.current_symbol(grid)

        if mode == Mode.STRING:
            if symbol == STRING_DELIMITER:
                return Op.TOGGLE_STRING_MODE
            return PushChar(symbol)

        return lookup(symbol)

    def __repr__(self) -> str:
        return f"Cursor(x={self.x}, y={self.y}, direction={self.direction.name})"
