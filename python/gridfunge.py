"""
Interpreter for a two-dimensional, stack-based esoteric language.
Fetch (cursor + mode + lookup) -> execute (one exhaustive match) -> advance.
"""

from __future__ import annotations

import io
import logging
import re
from dataclasses import dataclass, field
from typing import BinaryIO, Callable

from cursor import Cursor, Lookup
from grid_parser import parse_program
from grid_types import (
    INT32_MAX,
    INT32_MIN,
    CharValue,
    Direction,
    EmptyValue,
    Grid,
    Instruction,
    IntValue,
    Mode,
    Op,
    PushChar,
    PushInt,
    StackValue,
    Status,
    wrap_int32,
)
from symbol_table import lookup as default_lookup
from value_stack import ValueStack, coerce_to_int, is_truthy

logger = logging.getLogger(__name__)


# =============================================================================
# Errors
# =============================================================================


class FungeError(Exception):
    """Base class for interpreter errors."""


class FungeRuntimeError(FungeError):
    """A fatal condition while executing an instruction. Aborts the run."""

    def __init__(self, message: str, position: tuple[int, int], symbol: str) -> None:
        self.message = message
        self.position = position
        self.symbol = symbol
        super().__init__(
            f"{message}\n"
            f"  Position: x={position[0]}, y={position[1]}\n"
            f"  Symbol: {symbol!r}"
        )


class StepLimitExceeded(FungeError):
    """The configured step cap was reached before the program halted."""

    def __init__(self, max_steps: int) -> None:
        self.max_steps = max_steps
        super().__init__(f"Program did not halt within {max_steps} steps")


# =============================================================================
# Configuration and Shared State
# =============================================================================


@dataclass(frozen=True)
class RunConfig:
    """Settings governing a run."""

    max_steps: int | None = None  # None = run until halt
    empty_stack_message: str = "Stack is empty!"


class FungeIO:
    """Byte-stream collaborators: a reader of lines/bytes and a writer of bytes."""

    def __init__(self, input: BinaryIO | None = None, output: BinaryIO | None = None) -> None:
        self.input = input if input is not None else io.BytesIO()
        self.output = output if output is not None else io.BytesIO()

    def read_line(self) -> bytes:
        return self.input.readline()

    def read_byte(self) -> bytes:
        return self.input.read(1)

    def write(self, data: bytes) -> None:
        self.output.write(data)
        flush = getattr(self.output, "flush", None)
        if flush is not None:
            flush()


@dataclass
class ExecutionState:
    """Everything an instruction may touch. Owned by the Interpreter."""

    grid: Grid
    stack: ValueStack = field(default_factory=ValueStack)
    cursor: Cursor = field(default_factory=Cursor)
    mode: Mode = Mode.NORMAL
    halted: bool = False


# =============================================================================
# Instruction Execution
# =============================================================================


def _truncating_div(b: int, a: int) -> int:
    quotient = abs(b) // abs(a)
    return quotient if (b < 0) == (a < 0) else -quotient


def _truncating_mod(b: int, a: int) -> int:
    # Sign follows the dividend
    return b - a * _truncating_div(b, a)


# Operands are (b, a) where a was on top: "5 3 -" is 5 - 3
BINARY_OPS: dict[Op, Callable[[int, int], int]] = {
    Op.ADD: lambda b, a: b + a,
    Op.SUB: lambda b, a: b - a,
    Op.MUL: lambda b, a: b * a,
    Op.DIV: _truncating_div,
    Op.MOD: _truncating_mod,
}

MOVES = {
    Op.MOVE_UP: Direction.UP,
    Op.MOVE_DOWN: Direction.DOWN,
    Op.MOVE_LEFT: Direction.LEFT,
    Op.MOVE_RIGHT: Direction.RIGHT,
}

INTEGER_TEXT = re.compile(r"[+-]?[0-9]+")


def _fail(state: ExecutionState, message: str) -> FungeRuntimeError:
    return FungeRuntimeError(
        message, state.cursor.position, state.cursor.current_symbol(state.grid)
    )


def _byte_of(value: IntValue | CharValue) -> bytes:
    code = value.value if isinstance(value, IntValue) else value.code
    return bytes([code & 0xFF])


def _binary(state: ExecutionState, op: Op) -> None:
    top, second = state.stack.pop_pair()
    a = coerce_to_int(top).value
    b = coerce_to_int(second).value

    if op in (Op.DIV, Op.MOD) and a == 0:
        raise _fail(state, f"{'Division' if op == Op.DIV else 'Modulo'} by zero: {b} {op.value} 0")

    state.stack.push(IntValue(wrap_int32(BINARY_OPS[op](b, a))))


def _read_int(state: ExecutionState, funge_io: FungeIO) -> IntValue:
    line = funge_io.read_line()
    if not line:
        raise _fail(state, "End of input while reading an integer")

    text = line.decode("latin-1").strip()
    if not INTEGER_TEXT.fullmatch(text):
        raise _fail(state, f"Invalid integer input: {text!r}")

    value = int(text)
    if not INT32_MIN <= value <= INT32_MAX:
        raise _fail(state, f"Integer input out of 32-bit range: {text!r}")
    return IntValue(value)


def _read_char(state: ExecutionState, funge_io: FungeIO) -> CharValue:
    data = funge_io.read_byte()
    if not data:
        raise _fail(state, "End of input while reading a character")
    return CharValue(chr(data[0]))


def execute(
    instruction: Instruction,
    state: ExecutionState,
    funge_io: FungeIO,
    config: RunConfig = RunConfig(),
) -> None:
    """
    Apply one instruction to the shared state.

    Does not advance the cursor; the interpreter loop does that uniformly
    after every instruction (BRIDGE adds one extra advance of its own).

    Raises:
        FungeRuntimeError: division/modulo by zero, bad or missing input
    """
    stack = state.stack

    match instruction:
        case PushInt(value=n):
            stack.push(IntValue(n))
        case PushChar(char=c):
            stack.push(CharValue(c))
        case Op.ADD | Op.SUB | Op.MUL | Op.DIV | Op.MOD:
            _binary(state, instruction)
        case Op.MOVE_UP | Op.MOVE_DOWN | Op.MOVE_LEFT | Op.MOVE_RIGHT:
            state.cursor.set_direction(MOVES[instruction])
        case Op.HORIZONTAL_IF:
            state.cursor.set_direction(Direction.LEFT if is_truthy(stack.pop()) else Direction.RIGHT)
        case Op.VERTICAL_IF:
            state.cursor.set_direction(Direction.UP if is_truthy(stack.pop()) else Direction.DOWN)
        case Op.BRIDGE:
            state.cursor.advance(state.grid)
        case Op.DUPLICATE:
            value = stack.pop()
            stack.push(value)
            stack.push(value)
        case Op.SWAP:
            top, second = stack.pop_pair()
            stack.push(coerce_to_int(top))
            stack.push(coerce_to_int(second))
        case Op.POP:
            stack.pop()
        case Op.PRINT_CHAR:
            match stack.pop():
                case EmptyValue():
                    funge_io.write(config.empty_stack_message.encode())
                case IntValue() | CharValue() as value:
                    funge_io.write(_byte_of(value))
        case Op.PRINT_INT:
            match stack.pop():
                case EmptyValue():
                    funge_io.write(config.empty_stack_message.encode())
                case IntValue(value=n):
                    funge_io.write(str(n).encode("ascii"))
                case CharValue() as value:
                    # Characters print as their byte, not as numeric text
                    funge_io.write(_byte_of(value))
        case Op.INPUT_INT:
            stack.push(_read_int(state, funge_io))
        case Op.INPUT_CHAR:
            stack.push(_read_char(state, funge_io))
        case Op.TOGGLE_STRING_MODE:
            state.mode = Mode.STRING if state.mode == Mode.NORMAL else Mode.NORMAL
        case Op.HALT:
            state.halted = True
        case _:
            raise TypeError(f"Unknown instruction: {instruction!r}")


# =============================================================================
# Interpreter Loop
# =============================================================================


class Interpreter:
    """
    Owns the grid, stack, cursor, mode and I/O; runs the step loop.

    Usage:
        interpreter = Interpreter(parse_program('"!iH",,,@'), output=sys.stdout.buffer)
        interpreter.run()
        print(interpreter.steps)
    """

    def __init__(
        self,
        grid: Grid,
        input: BinaryIO | None = None,
        output: BinaryIO | None = None,
        config: RunConfig | None = None,
        lookup: Lookup = default_lookup,
    ) -> None:
        self.grid = grid
        self.io = FungeIO(input, output)
        self.config = config if config is not None else RunConfig()
        self.lookup = lookup
        self.reset()

    def reset(self) -> None:
        """Return to the initial state: cursor at (0, 0) facing right, empty stack."""
        self.state = ExecutionState(self.grid)
        self.steps = 0

    @property
    def status(self) -> Status:
        return Status.HALTED if self.state.halted else Status.RUNNING

    @property
    def stack(self) -> ValueStack:
        return self.state.stack

    @property
    def cursor(self) -> Cursor:
        return self.state.cursor

    @property
    def mode(self) -> Mode:
        return self.state.mode

    def step(self) -> Status:
        """Execute the instruction under the cursor, then advance unless halted."""
        if self.state.halted:
            return Status.HALTED

        state = self.state
        instruction = state.cursor.resolve_instruction(state.grid, state.mode, self.lookup)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "step %d: (%d, %d) %r -> %s mode=%s top=%r depth=%d",
                self.steps,
                state.cursor.x,
                state.cursor.y,
                state.cursor.current_symbol(state.grid),
                instruction,
                state.mode.value,
                state.stack.peek(),
                len(state.stack),
            )

        if instruction is not None:
            execute(instruction, state, self.io, self.config)
        self.steps += 1

        if state.halted:
            return Status.HALTED

        state.cursor.advance(state.grid)
        return Status.RUNNING

    def run(self) -> int:
        """
        Step until the program halts.

        Returns:
            Total number of steps executed

        Raises:
            FungeRuntimeError: on a fatal instruction error (output so far is kept)
            StepLimitExceeded: if config.max_steps is reached first
        """
        max_steps = self.config.max_steps
        while self.status == Status.RUNNING:
            if max_steps is not None and self.steps >= max_steps:
                raise StepLimitExceeded(max_steps)
            self.step()

        logger.info("run: '%s' halted after %d steps", self.grid.name, self.steps)
        return self.steps


@dataclass(frozen=True)
class RunResult:
    """Outcome of run_program()."""

    output: bytes
    steps: int
    stack: tuple[StackValue, ...]


def run_program(
    source: str | Grid,
    input_data: bytes = b"",
    config: RunConfig | None = None,
) -> RunResult:
    """
    Run a program to completion against in-memory I/O.

    Args:
        source: Program text or an already loaded Grid
        input_data: Bytes made available to the input instructions
        config: Optional RunConfig (step cap etc.)

    Returns:
        RunResult with the bytes written, step count and final stack
    """
    grid = parse_program(source) if isinstance(source, str) else source
    output = io.BytesIO()
    interpreter = Interpreter(grid, io.BytesIO(input_data), output, config)
    steps = interpreter.run()
    return RunResult(output.getvalue(), steps, interpreter.stack.snapshot())
