"""
BefungeHost: high-level interface to the Befunge machine.

Provides program loading (text or file → Playfield), runs to completion,
and packages the outcome as a RunResult with an exit code.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from .console import BufferConsole, Console, StreamConsole
from .machine import BefungeMachine, S_HALTED, STATE_NAMES
from .memory import Playfield

EXIT_OK    = 0
EXIT_FAULT = 1

# Befunge-93 playfield size, enforced only in strict mode.
STRICT_WIDTH  = 80
STRICT_HEIGHT = 25


@dataclass
class RunResult:
    ok: bool
    status: str              # "halted" | "faulted"
    exit_code: int
    fault: str | None = None
    output: str | None = None  # only when the console buffers output
    stack: list[int] = field(default_factory=list)
    stats: dict = field(default_factory=dict)


class BefungeHost:
    """High-level interface to the Befunge machine.

    Args:
        console: Console for program IO. Defaults to stdin/stdout.
        seed: Seed for the random-direction instruction.
        rng: Random source to use instead of a seeded random.Random.
        max_steps: Step budget per run. None means unbounded.
        strict: Reject programs larger than the 80x25 Befunge-93 playfield.
    """

    def __init__(self, console: Console | None = None,
                 seed: int | None = None, rng=None,
                 max_steps: int | None = None, strict: bool = False):
        self.console = console
        self.seed = seed
        self.rng = rng
        self.max_steps = max_steps
        self.strict = strict
        self.source: str | None = None
        self.machine: BefungeMachine | None = None

    # -------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------

    def load(self, text: str) -> Playfield:
        """Check and keep program text. Each run starts from this text."""
        playfield = Playfield.from_text(text)
        if self.strict:
            lines = text.splitlines()
            width = max((len(line) for line in lines), default=0)
            if width > STRICT_WIDTH or len(lines) > STRICT_HEIGHT:
                raise ValueError(
                    f"program is {width}x{len(lines)}, Befunge-93 programs "
                    f"must fit in {STRICT_WIDTH}x{STRICT_HEIGHT}")
        self.source = text
        return playfield

    def load_file(self, path: str | Path) -> Playfield:
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise ValueError(f"{path} is not UTF-8 text: {e.reason}") from e
        except OSError as e:
            raise ValueError(f"cannot read {path}: {e.strerror}") from e
        return self.load(text)

    # -------------------------------------------------------------------
    # Running
    # -------------------------------------------------------------------

    def run(self, input_text: str | None = None) -> RunResult:
        """
        Run the loaded program to completion on a fresh playfield.

        With input_text, IO goes through a BufferConsole holding that
        input, and the result carries the output text.
        """
        if self.source is None:
            raise ValueError("no program loaded")

        if input_text is not None:
            console = BufferConsole(input_text)
        elif self.console is not None:
            console = self.console
        else:
            console = StreamConsole()

        playfield = Playfield.from_text(self.source)
        self.machine = BefungeMachine(
            playfield, console, rng=self.rng, seed=self.seed,
            max_steps=self.max_steps,
        )
        state = self.machine.run()

        ok = state == S_HALTED
        fault = self.machine.fault
        return RunResult(
            ok=ok,
            status=STATE_NAMES[state],
            exit_code=EXIT_OK if ok else EXIT_FAULT,
            fault=str(fault) if fault is not None else None,
            output=console.output if isinstance(console, BufferConsole) else None,
            stack=self.machine.stack.snapshot(),
            stats=self.machine.stats(),
        )


def run_text(text: str, input_text: str = "", **host_kwargs) -> RunResult:
    """Load and run program text with buffered IO."""
    host = BefungeHost(**host_kwargs)
    host.load(text)
    return host.run(input_text)
