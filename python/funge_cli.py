"""
Command-line driver for gridfunge.

    gridfunge program.bf
    gridfunge --example hello
    echo 7 | gridfunge --example echo
"""

from __future__ import annotations

import argparse
import io
import logging
import sys

import simple_chalk as chalk  # type: ignore[import-untyped]

from ascii_render import render_grid, render_stack, render_status_line
from grid_parser import load_program, parse_program
from grid_types import Grid
from gridfunge import FungeError, Interpreter, RunConfig

logger = logging.getLogger(__name__)

EXAMPLES = dict(
    hello='"!dlroW ,olleH">:#,_@',
    countdown='5>:.1-:v\n ^     _@',
    add='&&+.@',
    echo='~,@',
)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="gridfunge", description="Run a two-dimensional stack program")
    ap.add_argument('program', nargs='?', help='Program file')
    ap.add_argument('-e', '--example', choices=sorted(EXAMPLES), help='Run a bundled example instead of a file')
    ap.add_argument('-i', '--input', help='Input string (default: read stdin)')
    ap.add_argument('--max-steps', type=int, default=None, help='Abort after this many steps')
    ap.add_argument('--show', action='store_true', help='Render the grid and final stack to stderr')
    ap.add_argument('--interactive', action='store_true', help='Open the step debugger')
    ap.add_argument('-v', '--verbose', action='store_true', help='Log run summaries')
    ap.add_argument('--trace', action='store_true', help='Log every step')
    return ap


def _load(args: argparse.Namespace, ap: argparse.ArgumentParser) -> Grid:
    if args.example:
        return parse_program(EXAMPLES[args.example], name=args.example)
    if not args.program:
        ap.error("a program file or --example is required")
    return load_program(args.program)


def main(argv: list[str] | None = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)

    level = logging.DEBUG if args.trace else logging.INFO if args.verbose else logging.WARNING
    logging.basicConfig(level=level, format='%(levelname)s: %(message)s')

    try:
        grid = _load(args, ap)
    except OSError as exc:
        print(chalk.red(f"error: cannot load program: {exc}"), file=sys.stderr)
        return 1

    input_data = args.input.encode('utf-8') if args.input is not None else None
    config = RunConfig(max_steps=args.max_steps)

    if args.interactive:
        from interactive_demo import InteractiveDebugger

        InteractiveDebugger(grid, input_data or b"", config if args.max_steps is not None else None).run()
        return 0

    stdin = io.BytesIO(input_data) if input_data is not None else sys.stdin.buffer
    interpreter = Interpreter(grid, stdin, sys.stdout.buffer, config)

    try:
        interpreter.run()
    except FungeError as exc:
        sys.stdout.flush()
        print(chalk.red(f"error: {exc}"), file=sys.stderr)
        return 1
    finally:
        if args.show:
            print(file=sys.stderr)
            print(render_grid(grid, interpreter.cursor), file=sys.stderr)
            print(render_status_line(interpreter.cursor, interpreter.mode, interpreter.steps), file=sys.stderr)
            print(render_stack(interpreter.stack), file=sys.stderr)

    logger.info("main: %s finished in %d steps", grid.name, interpreter.steps)
    return 0


if __name__ == '__main__':
    sys.exit(main())
