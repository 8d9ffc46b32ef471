"""Static mapping from program symbols to instructions (Normal mode only)."""

from __future__ import annotations

from grid_types import Instruction, Op, PushInt

SYMBOLS: dict[str, Instruction] = {
    "+": Op.ADD,
    "-": Op.SUB,
    "*": Op.MUL,
    "/": Op.DIV,
    "%": Op.MOD,
    "^": Op.MOVE_UP,
    "v": Op.MOVE_DOWN,
    "<": Op.MOVE_LEFT,
    ">": Op.MOVE_RIGHT,
    "_": Op.HORIZONTAL_IF,
    "|": Op.VERTICAL_IF,
    "#": Op.BRIDGE,
    ":": Op.DUPLICATE,
    "\\": Op.SWAP,
    "$": Op.POP,
    ",": Op.PRINT_CHAR,
    ".": Op.PRINT_INT,
    "&": Op.INPUT_INT,
    "~": Op.INPUT_CHAR,
    '"': Op.TOGGLE_STRING_MODE,
    "@": Op.HALT,
}
SYMBOLS.update({str(digit): PushInt(digit) for digit in range(10)})


def lookup(symbol: str) -> Instruction | None:
    """Instruction for a symbol, or None when the symbol is a no-op."""
    return SYMBOLS.get(symbol)
