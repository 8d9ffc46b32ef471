"""
Interactive step debugger for gridfunge.
Display the program grid, cursor, stack and output, and step with the keyboard.
"""

import io
import logging

import readchar, sys
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from ascii_render import render_grid, render_stack, render_status_line
from grid_parser import load_program, parse_program
from grid_types import Grid, Status
from gridfunge import FungeRuntimeError, Interpreter, RunConfig, StepLimitExceeded

DEFAULT_RUN_LIMIT = 10_000


class InteractiveDebugger:
    """Single-step debugger over an Interpreter with in-memory I/O."""

    def __init__(self, grid: Grid, input_data: bytes = b"", config: RunConfig | None = None) -> None:
        self.grid = grid
        self.input_data = input_data
        self.config = config if config is not None else RunConfig(max_steps=DEFAULT_RUN_LIMIT)
        self.console = Console()
        self.status_message = "Ready"
        self.reset()

    def reset(self) -> None:
        """Restart the program with fresh stack, cursor and I/O."""
        self.output = io.BytesIO()
        self.interpreter = Interpreter(
            self.grid, io.BytesIO(self.input_data), self.output, self.config
        )
        self.status_message = "Program reset"

    @property
    def output_text(self) -> str:
        return self.output.getvalue().decode("latin-1")

    def generate_display(self) -> Panel:
        """Generate the current display with grid, stack, output and status."""
        interpreter = self.interpreter

        status = Text()
        status.append(Text.from_ansi(render_grid(self.grid, interpreter.cursor)))
        status.append("\n\n")
        status.append(Text.from_ansi(render_status_line(interpreter.cursor, interpreter.mode, interpreter.steps)))
        status.append("\n\n")

        status.append("Stack:\n", style="bold")
        status.append(render_stack(interpreter.stack, max_items=8))
        status.append("\n\n")

        status.append("Output:\n", style="bold")
        status.append(self.output_text or "(none)")
        status.append("\n\n")

        status.append("Keys:\n", style="bold cyan")
        status.append("  Space/S - Step\n")
        status.append("  R - Run until halt\n")
        status.append("  X - Reset program\n")
        status.append("  Q - Quit\n\n")

        # Status line at the bottom
        status.append("─" * 40 + "\n", style="dim")
        status.append("Status: ", style="bold")
        status.append(self.status_message)

        border = "red" if interpreter.status == Status.HALTED else "green"
        return Panel(status, title=f"gridfunge - {self.grid.name}", border_style=border, width=100)

    def step(self) -> None:
        """Execute a single instruction."""
        if self.interpreter.status == Status.HALTED:
            self.status_message = "Program has halted (X to reset)"
            return

        try:
            result = self.interpreter.step()
        except FungeRuntimeError as exc:
            self.status_message = f"✗ {exc.message} at {exc.position}"
            return

        if result == Status.HALTED:
            self.status_message = f"✓ Halted after {self.interpreter.steps} steps"
        else:
            self.status_message = f"Step {self.interpreter.steps}"

    def run_to_halt(self) -> None:
        """Step until the program halts, bounded by the configured step cap."""
        try:
            steps = self.interpreter.run()
        except FungeRuntimeError as exc:
            self.status_message = f"✗ {exc.message} at {exc.position}"
        except StepLimitExceeded as exc:
            self.status_message = f"✗ {exc}"
        else:
            self.status_message = f"✓ Halted after {steps} steps"

    def run(self) -> None:
        """Run the interactive debugger."""
        with Live(self.generate_display(), console=self.console, refresh_per_second=4) as live:
            try:
                while True:
                    live.update(self.generate_display())

                    key = readchar.readkey()

                    if key.lower() == 'q':
                        self.status_message = "Quitting..."
                        live.update(self.generate_display())
                        break
                    elif key == ' ' or key.lower() == 's':
                        self.step()
                    elif key.lower() == 'r':
                        self.run_to_halt()
                    elif key.lower() == 'x':
                        self.reset()
                    else:
                        self.status_message = f"Unknown key: {repr(key)}"

            except KeyboardInterrupt:
                self.status_message = "Interrupted by user"
                live.update(self.generate_display())


def main(grid: Grid, input_data: bytes = b"") -> None:
    """Run the debugger on a grid."""
    InteractiveDebugger(grid, input_data).run()


if __name__ == "__main__":
    logging.basicConfig(level=logging.WARNING, format='%(levelname)s: %(message)s')

    if len(sys.argv) > 1:
        main(load_program(sys.argv[1]))
    else:
        main(parse_program('"!olleH",,,,,,@'))
