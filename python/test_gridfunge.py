"""
Comprehensive test suite for the gridfunge interpreter.
"""

import io
import logging

import pytest

from grid_parser import parse_program
from grid_types import (
    INT32_MAX,
    INT32_MIN,
    CharValue,
    Direction,
    EmptyValue,
    Grid,
    IntValue,
    Mode,
    Op,
    PushChar,
    PushInt,
    Status,
)
from gridfunge import (
    ExecutionState,
    FungeIO,
    FungeRuntimeError,
    Interpreter,
    RunConfig,
    StepLimitExceeded,
    execute,
    run_program,
)
from value_stack import ValueStack


def make_state(*values, grid: Grid | None = None) -> ExecutionState:
    """State over a blank grid with the given values pushed bottom first."""
    state = ExecutionState(grid or Grid(("     ",) * 3))
    state.stack = ValueStack(list(values))
    return state


def final_stack(source: str, input_data: bytes = b"") -> tuple:
    return run_program(source, input_data).stack


# =============================================================================
# Test Arithmetic
# =============================================================================


class TestArithmetic:
    """Tests for the binary arithmetic instructions."""

    def test_add(self) -> None:
        assert final_stack("23+@") == (IntValue(5),)

    def test_sub_uses_second_minus_top(self) -> None:
        """5 3 - is 5 - 3."""
        assert final_stack("53-@") == (IntValue(2),)

    def test_mul(self) -> None:
        assert final_stack("67*@") == (IntValue(42),)

    def test_div(self) -> None:
        assert final_stack("53/@") == (IntValue(1),)

    def test_mod(self) -> None:
        assert final_stack("53%@") == (IntValue(2),)

    def test_add_on_empty_stack(self) -> None:
        """Missing operands count as zero."""
        assert final_stack("+@") == (IntValue(0),)

    def test_sub_with_one_operand(self) -> None:
        """A single value is the top; the missing second is zero."""
        assert final_stack("4-@") == (IntValue(-4),)

    def test_div_truncates_toward_zero(self) -> None:
        """-7 / 3 is -2, not -3."""
        assert final_stack("07-3/@") == (IntValue(-2),)

    def test_mod_sign_follows_dividend(self) -> None:
        """-7 % 3 is -1."""
        assert final_stack("07-3%@") == (IntValue(-1),)
        assert final_stack("703-%@") == (IntValue(1),)

    def test_chars_coerce_to_codepoints(self) -> None:
        """Characters take part in arithmetic as their codepoint."""
        assert final_stack('"A"1+@') == (IntValue(66),)

    def test_overflow_wraps(self) -> None:
        """Results wrap to 32-bit signed."""
        state = make_state(IntValue(INT32_MAX), IntValue(1))
        execute(Op.ADD, state, FungeIO())

        assert state.stack.snapshot() == (IntValue(INT32_MIN),)

    def test_min_div_minus_one_wraps(self) -> None:
        state = make_state(IntValue(INT32_MIN), IntValue(-1))
        execute(Op.DIV, state, FungeIO())

        assert state.stack.snapshot() == (IntValue(INT32_MIN),)

    def test_div_by_zero_is_fatal(self) -> None:
        with pytest.raises(FungeRuntimeError, match="Division by zero"):
            run_program("50/@")

    def test_mod_by_zero_is_fatal(self) -> None:
        with pytest.raises(FungeRuntimeError, match="Modulo by zero"):
            run_program("50%@")

    def test_div_by_zero_error_details(self) -> None:
        """The error records where it happened."""
        with pytest.raises(FungeRuntimeError) as exc_info:
            run_program("v\n5\n0\n/")

        assert exc_info.value.position == (0, 3)
        assert exc_info.value.symbol == "/"
        assert "x=0, y=3" in str(exc_info.value)


# =============================================================================
# Test Stack Instructions
# =============================================================================


class TestStackInstructions:
    """Tests for literals, duplicate, swap and pop."""

    def test_digit_literals(self) -> None:
        assert final_stack("0129@") == (IntValue(0), IntValue(1), IntValue(2), IntValue(9))

    def test_duplicate_char_not_coerced(self) -> None:
        """Duplicate keeps characters as characters."""
        assert final_stack('"A":@') == (CharValue("A"), CharValue("A"))

    def test_duplicate_empty(self) -> None:
        """Duplicating an empty stack duplicates Empty, not zero."""
        assert final_stack(":@") == (EmptyValue(), EmptyValue())

    def test_swap(self) -> None:
        assert final_stack("12\\@") == (IntValue(2), IntValue(1))

    def test_swap_coerces(self) -> None:
        """Both swapped slots are normalized to integers."""
        assert final_stack('"A"1\\@') == (IntValue(1), IntValue(65))

    def test_swap_empty_stack(self) -> None:
        assert final_stack("\\@") == (IntValue(0), IntValue(0))

    def test_swap_one_value(self) -> None:
        assert final_stack("7\\@") == (IntValue(7), IntValue(0))

    def test_pop(self) -> None:
        assert final_stack("12$@") == (IntValue(1),)

    def test_pop_empty_is_noop(self) -> None:
        assert final_stack("$$@") == ()

    def test_execute_literals_directly(self) -> None:
        state = make_state()
        execute(PushInt(3), state, FungeIO())
        execute(PushChar("z"), state, FungeIO())

        assert state.stack.snapshot() == (IntValue(3), CharValue("z"))


# =============================================================================
# Test Control Flow
# =============================================================================


class TestControlFlow:
    """Tests for moves, branches, bridge and halt."""

    def test_moves_set_direction_only(self) -> None:
        """Direction changes do not move the cursor by themselves."""
        for op, direction in [
            (Op.MOVE_UP, Direction.UP),
            (Op.MOVE_DOWN, Direction.DOWN),
            (Op.MOVE_LEFT, Direction.LEFT),
            (Op.MOVE_RIGHT, Direction.RIGHT),
        ]:
            state = make_state()
            execute(op, state, FungeIO())
            assert state.cursor.direction == direction
            assert state.cursor.position == (0, 0)

    def test_horizontal_if(self) -> None:
        cases = [
            (IntValue(3), Direction.LEFT),
            (IntValue(0), Direction.RIGHT),
            (CharValue("a"), Direction.LEFT),
            (CharValue("Ā"), Direction.RIGHT),
        ]
        for value, expected in cases:
            state = make_state(value)
            execute(Op.HORIZONTAL_IF, state, FungeIO())
            assert state.cursor.direction == expected, value
            assert len(state.stack) == 0

    def test_horizontal_if_empty_goes_right(self) -> None:
        state = make_state()
        state.cursor.set_direction(Direction.UP)
        execute(Op.HORIZONTAL_IF, state, FungeIO())

        assert state.cursor.direction == Direction.RIGHT

    def test_vertical_if(self) -> None:
        state = make_state(IntValue(-1))
        execute(Op.VERTICAL_IF, state, FungeIO())
        assert state.cursor.direction == Direction.UP

        state = make_state(IntValue(0))
        execute(Op.VERTICAL_IF, state, FungeIO())
        assert state.cursor.direction == Direction.DOWN

        state = make_state()
        execute(Op.VERTICAL_IF, state, FungeIO())
        assert state.cursor.direction == Direction.DOWN

    def test_bridge_skips_one_cell(self) -> None:
        """After '#' the cursor is two cells on, never executing the skipped cell."""
        interpreter = Interpreter(parse_program("#X>"))
        interpreter.step()

        assert interpreter.cursor.position == (2, 0)
        assert interpreter.steps == 1

    def test_bridge_skips_instruction(self) -> None:
        """The skipped cell's instruction never runs."""
        assert final_stack("#1@") == ()

    def test_vertical_program(self) -> None:
        """Execution continues downward after a 'v'."""
        source = "1v\n  \n 1\n 2\n @"
        assert final_stack(source) == (IntValue(1), IntValue(1), IntValue(2))

    def test_wraparound_execution(self) -> None:
        """Turning left at column 0 wraps to the last column."""
        result = run_program("<@")

        assert result.steps == 2

    def test_vertical_wraparound_execution(self) -> None:
        result = run_program("^\n@")

        assert result.steps == 2

    def test_halt_only_program(self) -> None:
        """'@' alone halts after exactly one step with the stack unchanged."""
        interpreter = Interpreter(parse_program("@"))
        steps = interpreter.run()

        assert steps == 1
        assert interpreter.status == Status.HALTED
        assert len(interpreter.stack) == 0
        assert interpreter.cursor.position == (0, 0)

    def test_unmapped_symbols_are_noops(self) -> None:
        result = run_program("xyz 1@")

        assert result.steps == 6
        assert result.stack == (IntValue(1),)


# =============================================================================
# Test String Mode
# =============================================================================


class TestStringMode:
    """Tests for string literal mode."""

    def test_string_pushes_chars_and_returns_to_normal(self) -> None:
        interpreter = Interpreter(parse_program('"ab"'))
        for _ in range(4):
            interpreter.step()

        assert interpreter.mode == Mode.NORMAL
        assert interpreter.stack.snapshot() == (CharValue("a"), CharValue("b"))

    def test_mode_during_string(self) -> None:
        interpreter = Interpreter(parse_program('"ab"'))
        interpreter.step()

        assert interpreter.mode == Mode.STRING

    def test_instructions_are_data_in_string_mode(self) -> None:
        """Symbols like '@' and digits are pushed, not executed."""
        assert final_stack('"@1 "@') == (CharValue("@"), CharValue("1"), CharValue(" "))

    def test_toggle_instruction(self) -> None:
        state = make_state()
        execute(Op.TOGGLE_STRING_MODE, state, FungeIO())
        assert state.mode == Mode.STRING

        execute(Op.TOGGLE_STRING_MODE, state, FungeIO())
        assert state.mode == Mode.NORMAL


# =============================================================================
# Test Output
# =============================================================================


class TestOutput:
    """Tests for the print instructions."""

    def test_print_char(self) -> None:
        assert run_program('"A",@').output == b"A"

    def test_print_int_value_as_char(self) -> None:
        assert run_program("55+,@").output == b"\n"

    def test_print_char_low_byte(self) -> None:
        state = make_state(IntValue(256 + 65))
        funge_io = FungeIO()
        execute(Op.PRINT_CHAR, state, funge_io)

        assert funge_io.output.getvalue() == b"A"

    def test_print_int(self) -> None:
        assert run_program("55+.@").output == b"10"

    def test_print_negative_int(self) -> None:
        assert run_program("09-.@").output == b"-9"

    def test_print_int_of_char_writes_byte(self) -> None:
        """A character printed as integer writes its byte, not its code."""
        assert run_program('"A".@').output == b"A"

    def test_print_empty_writes_diagnostic(self) -> None:
        assert run_program(",@").output == b"Stack is empty!"
        assert run_program(".@").output == b"Stack is empty!"

    def test_custom_empty_message(self) -> None:
        result = run_program(".@", config=RunConfig(empty_stack_message="?"))

        assert result.output == b"?"

    def test_hello_world(self) -> None:
        result = run_program('"!dlroW ,olleH">:#,_@')

        assert result.output == b"Hello, World!"

    def test_countdown(self) -> None:
        result = run_program("5>:.1-:v\n ^     _@")

        assert result.output == b"54321"
        assert result.stack == (IntValue(0),)


# =============================================================================
# Test Input
# =============================================================================


class TestInput:
    """Tests for the input instructions."""

    def test_read_int(self) -> None:
        assert final_stack("&@", b"42\n") == (IntValue(42),)

    def test_read_two_ints_and_add(self) -> None:
        assert run_program("&&+.@", b"2\n3\n").output == b"5"

    def test_read_signed_int_with_whitespace(self) -> None:
        assert final_stack("&&@", b"  -7 \n+8\n") == (IntValue(-7), IntValue(8))

    def test_read_int_without_newline(self) -> None:
        assert final_stack("&@", b"12") == (IntValue(12),)

    def test_read_invalid_int_is_fatal(self) -> None:
        with pytest.raises(FungeRuntimeError, match="Invalid integer input"):
            run_program("&@", b"abc\n")

    def test_read_int_out_of_range_is_fatal(self) -> None:
        with pytest.raises(FungeRuntimeError, match="out of 32-bit range"):
            run_program("&@", b"3000000000\n")

    def test_read_int_eof_is_fatal(self) -> None:
        with pytest.raises(FungeRuntimeError, match="End of input"):
            run_program("&@")

    def test_read_char(self) -> None:
        assert final_stack("~~@", b"hi") == (CharValue("h"), CharValue("i"))

    def test_read_char_high_byte(self) -> None:
        assert final_stack("~@", b"\xe9") == (CharValue("é"),)

    def test_echo(self) -> None:
        assert run_program("~,@", b"Z").output == b"Z"

    def test_read_char_eof_is_fatal(self) -> None:
        with pytest.raises(FungeRuntimeError, match="End of input while reading a character"):
            run_program("~@")


# =============================================================================
# Test Interpreter
# =============================================================================


class TestInterpreter:
    """Tests for the step loop, step cap and error propagation."""

    def test_initial_state(self) -> None:
        interpreter = Interpreter(parse_program("@"))

        assert interpreter.status == Status.RUNNING
        assert interpreter.mode == Mode.NORMAL
        assert interpreter.cursor.position == (0, 0)
        assert interpreter.cursor.direction == Direction.RIGHT
        assert interpreter.steps == 0

    def test_step_after_halt_does_nothing(self) -> None:
        interpreter = Interpreter(parse_program("@"))
        interpreter.step()

        assert interpreter.step() == Status.HALTED
        assert interpreter.steps == 1

    def test_step_returns_status(self) -> None:
        interpreter = Interpreter(parse_program("1@"))

        assert interpreter.step() == Status.RUNNING
        assert interpreter.step() == Status.HALTED

    def test_step_limit(self) -> None:
        """A program that never halts is stopped by the step cap."""
        interpreter = Interpreter(parse_program(">"), config=RunConfig(max_steps=100))

        with pytest.raises(StepLimitExceeded, match="100 steps"):
            interpreter.run()
        assert interpreter.steps == 100

    def test_step_limit_not_hit(self) -> None:
        result = run_program("1@", config=RunConfig(max_steps=2))

        assert result.steps == 2

    def test_partial_output_preserved_on_error(self) -> None:
        """Output written before a fatal error is kept."""
        output = io.BytesIO()
        interpreter = Interpreter(parse_program('"x",10/@'), output=output)

        with pytest.raises(FungeRuntimeError):
            interpreter.run()
        assert output.getvalue() == b"x"

    def test_reset(self) -> None:
        interpreter = Interpreter(parse_program('"a"v'))
        for _ in range(4):
            interpreter.step()
        interpreter.reset()

        assert interpreter.steps == 0
        assert len(interpreter.stack) == 0
        assert interpreter.cursor.position == (0, 0)
        assert interpreter.mode == Mode.NORMAL

    def test_run_program_accepts_grid(self) -> None:
        result = run_program(Grid(("7.@",)))

        assert result.output == b"7"
        assert result.steps == 3

    def test_custom_lookup(self) -> None:
        """The symbol table is a pluggable collaborator."""
        table = {"h": Op.HALT, "n": PushInt(9)}
        interpreter = Interpreter(parse_program("nh"), lookup=table.get)
        interpreter.run()

        assert interpreter.stack.snapshot() == (IntValue(9),)

    def test_trace_logging(self, caplog) -> None:
        """Each step is logged at DEBUG level."""
        with caplog.at_level(logging.DEBUG, logger="gridfunge"):
            run_program("1@")

        steps = [r for r in caplog.records if r.getMessage().startswith("step ")]
        assert len(steps) == 2
        assert "halted after 2 steps" in caplog.text
