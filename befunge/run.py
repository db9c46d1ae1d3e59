"""
Command-line runner for Befunge-93 programs.

Usage:
    python -m befunge.run examples/hello.bf
    python -m befunge.run -e '12+.@'
    python -m befunge.run --seed 7 --max-steps 100000 --stats program.b93
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .host import BefungeHost, EXIT_FAULT

__version__ = "0.1.0"

SOURCE_SUFFIXES = (".bf", ".b93", ".befunge")


class _ArgumentParser(argparse.ArgumentParser):
    """Usage errors exit with EXIT_FAULT like every other failure."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(EXIT_FAULT, f"{self.prog}: error: {message}\n")


def _resolve_source(name: str) -> Path:
    path = Path(name)
    if not path.is_file():
        raise ValueError(f"File not found: {path}")
    if path.suffix.lower() not in SOURCE_SUFFIXES:
        raise ValueError(
            f"{path.name} is not a Befunge source file "
            f"(expected {', '.join(SOURCE_SUFFIXES)})")
    return path


def main(argv: list[str] | None = None) -> int:
    parser = _ArgumentParser(
        description="A Befunge-93 interpreter",
        prog="python -m befunge.run",
    )
    parser.add_argument("file", nargs="?", help="Path to a Befunge-93 source file")
    parser.add_argument("-e", "--expr",
                        help="Program text to run instead of a file (\\n separates rows)")
    parser.add_argument("--seed", type=int,
                        help="Seed for the random-direction instruction")
    parser.add_argument("--max-steps", type=int,
                        help="Fault the run after this many steps")
    parser.add_argument("--strict", action="store_true",
                        help="Reject programs larger than 80x25")
    parser.add_argument("--stats", action="store_true",
                        help="Print machine counters to stderr after the run")
    parser.add_argument("-V", "--version", action="version",
                        version=f"%(prog)s {__version__}")
    args = parser.parse_args(argv)

    if not args.file and args.expr is None:
        parser.error("Provide a source file or -e program text")

    host = BefungeHost(seed=args.seed, max_steps=args.max_steps,
                       strict=args.strict)
    try:
        if args.file:
            host.load_file(_resolve_source(args.file))
        else:
            host.load(args.expr.replace("\\n", "\n"))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAULT

    result = host.run()

    if args.stats:
        print(host.machine.stats_summary(), file=sys.stderr, flush=True)
    if not result.ok:
        print(f"Error: {result.fault}", file=sys.stderr, flush=True)
    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
