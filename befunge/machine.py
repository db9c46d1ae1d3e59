"""
Befunge machine: stepped fetch/dispatch/advance state machine.

Models the Befunge-93 execution engine: a mutable Playfield, an operand
Stack, an instruction pointer with a direction and a string-mode latch,
and a dispatch table mapping cell values to operations.
"""

from __future__ import annotations

import random

from .console import Console, InputFault, OutputFault, StreamConsole
from .memory import (
    UP, DOWN, LEFT, RIGHT,
    InvariantFault, MachineFault, Playfield, Stack,
)

__all__ = [
    "BefungeMachine", "MachineFault", "InvariantFault", "InputFault",
    "OutputFault", "StepLimitExceeded", "S_RUNNING", "S_HALTED", "S_FAULTED",
    "M_COMMAND", "M_STRING", "STATE_NAMES",
]


class StepLimitExceeded(MachineFault):
    """Raised when a run exceeds the configured step budget."""


# ---------------------------------------------------------------------------
# States and modes
# ---------------------------------------------------------------------------

S_RUNNING = 0
S_HALTED  = 1
S_FAULTED = 2

STATE_NAMES = {
    S_RUNNING: "running",
    S_HALTED:  "halted",
    S_FAULTED: "faulted",
}

M_COMMAND = 0
M_STRING  = 1

RANDOM_DIRECTIONS = (UP, DOWN, LEFT, RIGHT)

QUOTE = ord('"')
SPACE = ord(" ")


def _trunc_div(b: int, a: int) -> int:
    """b / a rounded toward zero. a must be non-zero."""
    q = abs(b) // abs(a)
    return q if (b < 0) == (a < 0) else -q


# ---------------------------------------------------------------------------
# Machine
# ---------------------------------------------------------------------------

class BefungeMachine:
    """Stepped Befunge-93 interpreter over a single Playfield."""

    def __init__(self, playfield: Playfield,
                 console: Console | None = None,
                 rng: random.Random | None = None,
                 seed: int | None = None,
                 max_steps: int | None = None):
        self.playfield = playfield
        self.console = console if console is not None else StreamConsole()
        # Anything with randrange() will do.
        self.rng = rng if rng is not None else random.Random(seed)
        self.max_steps = max_steps

        self.stack = Stack()
        self.col = 0
        self.row = 0
        self.direction = RIGHT
        self.mode = M_COMMAND
        self.state = S_RUNNING
        self.fault: MachineFault | None = None

        self._ops = self._build_dispatch()

        # --- Counters ---
        self.steps = 0
        self.puts = 0
        self.gets = 0
        self.io_reads = 0
        self.io_writes = 0

    def _build_dispatch(self) -> dict:
        ops = {
            "+": self._op_add,
            "-": self._op_sub,
            "*": self._op_mul,
            "/": self._op_div,
            "%": self._op_mod,
            "!": self._op_not,
            "`": self._op_greater,
            ">": lambda: self._go(RIGHT),
            "<": lambda: self._go(LEFT),
            "^": lambda: self._go(UP),
            "v": lambda: self._go(DOWN),
            "?": self._op_random,
            "_": self._op_branch_horizontal,
            "|": self._op_branch_vertical,
            '"': self._op_string,
            ":": self.stack.peek_duplicate,
            "\\": self.stack.swap_top_two,
            "$": self.stack.discard,
            ".": self._op_out_int,
            ",": self._op_out_char,
            "#": self._op_bridge,
            "p": self._op_put,
            "g": self._op_get,
            "&": self._op_in_int,
            "~": self._op_in_char,
            "@": self._op_halt,
        }
        table = {ord(ch): fn for ch, fn in ops.items()}
        for digit in range(10):
            table[ord("0") + digit] = lambda v=digit: self.stack.push(v)
        return table

    # -------------------------------------------------------------------
    # State machine
    # -------------------------------------------------------------------

    def tick(self) -> bool:
        """Execute one cell and advance. Returns True if still running."""
        if self.state != S_RUNNING:
            return False
        try:
            self._step()
        except MachineFault as e:
            self.fault = e
            self.state = S_FAULTED
        return self.state == S_RUNNING

    def _step(self):
        self.steps += 1
        if self.max_steps is not None and self.steps > self.max_steps:
            raise StepLimitExceeded(f"step limit of {self.max_steps} exceeded")

        cell = self.playfield.get(self.col, self.row)

        if self.mode == M_STRING:
            if cell == QUOTE:
                self.mode = M_COMMAND
            else:
                blank = self.playfield.is_blank(self.col, self.row)
                self.stack.push(SPACE if blank else cell)
        else:
            handler = self._ops.get(cell)
            # Unknown cells, blank padding and space included, are no-ops.
            if handler is not None:
                handler()

        if self.state == S_RUNNING:
            self._advance()

    def _advance(self):
        self.col, self.row = self.playfield.step(self.col, self.row, self.direction)

    def run(self) -> int:
        """Run until halted or faulted. Returns the final state."""
        while self.tick():
            pass
        return self.state

    # -------------------------------------------------------------------
    # Arithmetic / logic
    # -------------------------------------------------------------------

    def _pop_pair(self) -> tuple[int, int]:
        """Pop a then b; b was pushed first and is the left operand."""
        a = self.stack.pop()
        b = self.stack.pop()
        return a, b

    def _op_add(self):
        a, b = self._pop_pair()
        self.stack.push(b + a)

    def _op_sub(self):
        a, b = self._pop_pair()
        self.stack.push(b - a)

    def _op_mul(self):
        a, b = self._pop_pair()
        self.stack.push(b * a)

    def _op_div(self):
        a, b = self._pop_pair()
        self.stack.push(0 if a == 0 else _trunc_div(b, a))

    def _op_mod(self):
        a, b = self._pop_pair()
        self.stack.push(0 if a == 0 else b - a * _trunc_div(b, a))

    def _op_not(self):
        self.stack.push(1 if self.stack.pop() == 0 else 0)

    def _op_greater(self):
        a, b = self._pop_pair()
        self.stack.push(1 if b > a else 0)

    # -------------------------------------------------------------------
    # Control flow
    # -------------------------------------------------------------------

    def _go(self, direction: int):
        self.direction = direction

    def _op_random(self):
        self.direction = RANDOM_DIRECTIONS[self.rng.randrange(4)]

    def _op_branch_horizontal(self):
        self.direction = RIGHT if self.stack.pop() == 0 else LEFT

    def _op_branch_vertical(self):
        self.direction = DOWN if self.stack.pop() == 0 else UP

    def _op_bridge(self):
        # Step over the next cell; the regular advance follows.
        self._advance()

    def _op_string(self):
        self.mode = M_STRING

    def _op_halt(self):
        self.state = S_HALTED

    # -------------------------------------------------------------------
    # Self-modification
    # -------------------------------------------------------------------

    def _op_put(self):
        y = self.stack.pop()
        x = self.stack.pop()
        value = self.stack.pop()
        col, row = self.playfield.wrap(x, y)
        self.playfield.set(col, row, value)
        self.puts += 1

    def _op_get(self):
        y = self.stack.pop()
        x = self.stack.pop()
        col, row = self.playfield.wrap(x, y)
        value = self.playfield.get(col, row)
        self.stack.push(0 if self.playfield.is_blank(col, row) else value)
        self.gets += 1

    # -------------------------------------------------------------------
    # IO
    # -------------------------------------------------------------------

    def _op_out_int(self):
        self.console.write_int(self.stack.pop())
        self.io_writes += 1

    def _op_out_char(self):
        self.console.write_char(self.stack.pop())
        self.io_writes += 1

    def _op_in_int(self):
        value = self.console.read_int()
        self.stack.push(0 if value is None else value)
        self.io_reads += 1

    def _op_in_char(self):
        value = self.console.read_char()
        self.stack.push(-1 if value is None else value)
        self.io_reads += 1

    # -------------------------------------------------------------------
    # Counters
    # -------------------------------------------------------------------

    def reset_counters(self):
        self.steps = 0
        self.puts = 0
        self.gets = 0
        self.io_reads = 0
        self.io_writes = 0

    def stats(self) -> dict:
        return {
            "steps": self.steps,
            "puts": self.puts,
            "gets": self.gets,
            "io_reads": self.io_reads,
            "io_writes": self.io_writes,
            "stack_depth": len(self.stack),
            "stack_peak": self.stack.peak,
        }

    def stats_summary(self) -> str:
        s = self.stats()
        return (
            f"Steps: {s['steps']}\n"
            f"Playfield: {s['gets']} gets/{s['puts']} puts\n"
            f"IO: {s['io_reads']} reads/{s['io_writes']} writes\n"
            f"Stack: depth {s['stack_depth']}, peak {s['stack_peak']}"
        )
