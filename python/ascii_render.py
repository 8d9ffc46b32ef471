"""
ASCII rendering for gridfunge programs.

Provides:
1. Grid rendering - the program as a bordered character grid, symbols colored
   by instruction class, with the cursor cell highlighted
2. Stack rendering - the value stack, top first
"""

from __future__ import annotations

import logging
from typing import Callable

import simple_chalk as chalk  # type: ignore[import-untyped]

from cursor import Cursor
from grid_types import CharValue, EmptyValue, Grid, IntValue, Mode, Op, PushInt, StackValue
from symbol_table import lookup
from value_stack import ValueStack

logger = logging.getLogger(__name__)

Colorizer = Callable[[str], str]

# Instruction class -> color
OP_COLORS: dict[Op, Colorizer] = {
    Op.ADD: chalk.yellow,
    Op.SUB: chalk.yellow,
    Op.MUL: chalk.yellow,
    Op.DIV: chalk.yellow,
    Op.MOD: chalk.yellow,
    Op.MOVE_UP: chalk.green,
    Op.MOVE_DOWN: chalk.green,
    Op.MOVE_LEFT: chalk.green,
    Op.MOVE_RIGHT: chalk.green,
    Op.HORIZONTAL_IF: chalk.greenBright,
    Op.VERTICAL_IF: chalk.greenBright,
    Op.BRIDGE: chalk.greenBright,
    Op.DUPLICATE: chalk.blue,
    Op.SWAP: chalk.blue,
    Op.POP: chalk.blue,
    Op.PRINT_CHAR: chalk.magenta,
    Op.PRINT_INT: chalk.magenta,
    Op.INPUT_INT: chalk.blueBright,
    Op.INPUT_CHAR: chalk.blueBright,
    Op.TOGGLE_STRING_MODE: chalk.red,
    Op.HALT: chalk.redBright,
}


def symbol_color(symbol: str) -> Colorizer:
    """Colorizer for a symbol as it would execute in normal mode."""
    instruction = lookup(symbol)
    if isinstance(instruction, PushInt):
        return chalk.cyan
    if isinstance(instruction, Op):
        return OP_COLORS[instruction]
    return chalk.white


def _printable(symbol: str) -> str:
    """Single visible character for a cell."""
    if symbol == "\t":
        return "→"
    if not symbol.isprintable():
        return "·"
    return symbol


def render_grid(
    grid: Grid,
    cursor: Cursor | None = None,
    cell_width: int = 1,
    colorize: bool = True,
) -> str:
    """
    Render a grid as a bordered character display.

    Args:
        grid: The program grid
        cursor: Optional cursor; its cell is highlighted
        cell_width: Characters per cell (default 1)
        colorize: Color symbols by instruction class (default True)

    Returns:
        Rendered string; contains ANSI codes when colorize is True
    """
    logger.debug("render_grid: %s %dx%d cursor=%s", grid.name, grid.width, grid.height, cursor)

    lines: list[str] = []
    grid_width = grid.width * cell_width + 2

    # Top border with title
    title = f" {grid.name} {grid.width}x{grid.height} "
    if len(title) <= grid_width - 2:
        padding = grid_width - 2 - len(title)
        lines.append("┌" + title + "─" * padding + "┐")
    else:
        lines.append("┌" + "─" * (grid_width - 2) + "┐")

    for y, row in enumerate(grid.rows):
        line_parts = ["│"]

        for x, symbol in enumerate(row):
            char = _printable(symbol)
            content = char if cell_width == 1 else char.center(cell_width)

            is_highlighted = cursor is not None and cursor.x == x and cursor.y == y
            if is_highlighted:
                content = chalk.bgWhite.black(content)
            elif colorize:
                content = symbol_color(symbol)(content)

            line_parts.append(content)

        line_parts.append("│")
        lines.append("".join(line_parts))

    lines.append("└" + "─" * (grid_width - 2) + "┘")
    return "\n".join(lines)


def format_value(value: StackValue) -> str:
    """Stack value as shown in the stack panel."""
    match value:
        case EmptyValue():
            return "<empty>"
        case IntValue(value=n):
            return f"Int({n})"
        case CharValue(char=c):
            return f"Char({c!r})"
    return repr(value)


def render_stack(stack: ValueStack, max_items: int = 16) -> str:
    """
    Render the stack top first, one value per line.

    Args:
        stack: The value stack
        max_items: Number of values shown before the rest is summarized

    Returns:
        Rendered string ("(empty)" for an empty stack)
    """
    values = list(reversed(stack.snapshot()))
    if not values:
        return "(empty)"

    lines = []
    for depth, value in enumerate(values[:max_items]):
        marker = "top" if depth == 0 else f"{depth:>3}"
        lines.append(f"{marker} │ {format_value(value)}")

    if len(values) > max_items:
        lines.append(f"... {len(values) - max_items} more")
    return "\n".join(lines)


def render_status_line(cursor: Cursor, mode: Mode, steps: int) -> str:
    """One-line summary of cursor, mode and step count."""
    mode_text = chalk.red(mode.value) if mode == Mode.STRING else mode.value
    return (
        f"pos=({cursor.x}, {cursor.y}) dir={cursor.direction.value} "
        f"mode={mode_text} steps={steps}"
    )
