"""
Shared type definitions for the gridfunge interpreter.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


class Direction(Enum):
    """Cardinal direction the cursor travels in."""

    UP = "up"  # decreasing y
    DOWN = "down"  # increasing y
    LEFT = "left"  # decreasing x
    RIGHT = "right"  # increasing x


class Mode(Enum):
    """How a fetched symbol is turned into an instruction."""

    NORMAL = "normal"  # symbols are code
    STRING = "string"  # symbols are pushed as character data


class Status(Enum):
    """Lifecycle of an interpreter run."""

    RUNNING = "running"
    HALTED = "halted"


# =============================================================================
# Stack Values
# =============================================================================


@dataclass(frozen=True)
class EmptyValue:
    """Synthetic result of popping an exhausted stack. Never pushed explicitly."""

    pass


@dataclass(frozen=True)
class IntValue:
    """A 32-bit signed integer."""

    value: int


@dataclass(frozen=True)
class CharValue:
    """A single character; its codepoint is its numeric value."""

    char: str

    @property
    def code(self) -> int:
        return ord(self.char)


StackValue = EmptyValue | IntValue | CharValue


def wrap_int32(value: int) -> int:
    """Wrap an arbitrary Python int into the signed 32-bit range."""
    return (value - INT32_MIN) % 2**32 + INT32_MIN


# =============================================================================
# Grid
# =============================================================================

BLANK = " "


@dataclass(frozen=True)
class Grid:
    """A rectangular, read-only grid of program symbols."""

    rows: tuple[str, ...]
    name: str = "main"

    def __post_init__(self) -> None:
        if not self.rows:
            raise ValueError(f"Grid '{self.name}' must have at least one cell")

        width = len(self.rows[0])
        mismatched = [(i, len(row)) for i, row in enumerate(self.rows) if len(row) != width]
        if mismatched:
            error_msg = (
                f"Inconsistent row lengths in grid '{self.name}'\n"
                f"  Expected: {width} columns (from row 0)\n"
                f"  Mismatched rows:\n"
            )
            for row_idx, actual in mismatched:
                error_msg += f"    Row {row_idx}: {actual} columns\n"
            raise ValueError(error_msg)

        if width == 0:
            raise ValueError(f"Grid '{self.name}' must have at least one cell")

    @property
    def width(self) -> int:
        return len(self.rows[0])

    @property
    def height(self) -> int:
        return len(self.rows)

    def symbol_at(self, x: int, y: int) -> str:
        """Symbol at column x, row y. Coordinates must already be wrapped."""
        return self.rows[y][x]


# =============================================================================
# Instructions
# =============================================================================


class Op(Enum):
    """Payload-free instructions."""

    ADD = "add"
    SUB = "sub"
    MUL = "mul"
    DIV = "div"
    MOD = "mod"
    MOVE_UP = "move_up"
    MOVE_DOWN = "move_down"
    MOVE_LEFT = "move_left"
    MOVE_RIGHT = "move_right"
    HORIZONTAL_IF = "horizontal_if"
    VERTICAL_IF = "vertical_if"
    BRIDGE = "bridge"
    DUPLICATE = "duplicate"
    SWAP = "swap"
    POP = "pop"
    PRINT_CHAR = "print_char"
    PRINT_INT = "print_int"
    INPUT_INT = "input_int"
    INPUT_CHAR = "input_char"
    TOGGLE_STRING_MODE = "toggle_string_mode"
    HALT = "halt"


@dataclass(frozen=True)
class PushInt:
    """Push an integer literal."""

    value: int


@dataclass(frozen=True)
class PushChar:
    """Push a character literal."""

    char: str


Instruction = Op | PushInt | PushChar
