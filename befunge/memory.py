"""
Storage primitives for the Befunge machine.

Models the two stores the machine owns: the Playfield (a fixed-size,
mutable grid of instruction cells) and the operand Stack.
"""

from __future__ import annotations

import numpy as np


# Value of grid positions beyond the end of a short line. The Playfield
# also marks those positions blank, so a stored -1 stays distinct.
EMPTY = -1

# Stack cells are signed two's complement of this width.
CELL_BITS = 64

UP    = 0
DOWN  = 1
LEFT  = 2
RIGHT = 3

# (dcol, drow) per direction
DELTAS = {
    UP:    (0, -1),
    DOWN:  (0, 1),
    LEFT:  (-1, 0),
    RIGHT: (1, 0),
}


class MachineFault(RuntimeError):
    """Base for faults that stop a run."""


class InvariantFault(MachineFault):
    """Grid access outside its bounds. An engine bug, never a user error."""


def to_cell(value: int) -> int:
    """Wrap an integer into a signed CELL_BITS cell."""
    mask = (1 << CELL_BITS) - 1
    value &= mask
    if value >> (CELL_BITS - 1):
        value -= 1 << CELL_BITS
    return value


class Playfield:
    """
    Fixed-size program grid, indexed (col, row).

    Width is the longest source line, height the number of lines. Cells
    past the end of a short line hold EMPTY. Dimensions never change.
    """

    def __init__(self, lines: list[str]):
        width = max((len(line) for line in lines), default=0)
        height = len(lines)
        if width == 0 or height == 0:
            # Nothing to execute, but the pointer still needs a cell.
            width, height = 1, 1
        self.width = width
        self.height = height
        self.cells = np.full((height, width), EMPTY, dtype=np.int64)
        self.blank = np.ones((height, width), dtype=bool)
        for row, line in enumerate(lines):
            for col, ch in enumerate(line):
                self.cells[row, col] = ord(ch)
                self.blank[row, col] = False

    @classmethod
    def from_text(cls, text: str) -> Playfield:
        return cls(text.splitlines())

    def dimensions(self) -> tuple[int, int]:
        return (self.width, self.height)

    def in_bounds(self, col: int, row: int) -> bool:
        return 0 <= col < self.width and 0 <= row < self.height

    def get(self, col: int, row: int) -> int:
        if not self.in_bounds(col, row):
            raise InvariantFault(
                f"read at ({col}, {row}) outside {self.width}x{self.height} playfield")
        return int(self.cells[row, col])

    def set(self, col: int, row: int, value: int):
        if not self.in_bounds(col, row):
            raise InvariantFault(
                f"write at ({col}, {row}) outside {self.width}x{self.height} playfield")
        self.cells[row, col] = to_cell(value)
        self.blank[row, col] = False

    def is_blank(self, col: int, row: int) -> bool:
        """True for padding that no source character or write has filled."""
        return bool(self.blank[row, col])

    def wrap(self, col: int, row: int) -> tuple[int, int]:
        """Reduce arbitrary coordinates onto the torus."""
        return (col % self.width, row % self.height)

    def step(self, col: int, row: int, direction: int) -> tuple[int, int]:
        """One cell in `direction`, wrapping at the edges."""
        dcol, drow = DELTAS[direction]
        return self.wrap(col + dcol, row + drow)

    def rows(self) -> list[str]:
        """Render the current grid as text lines (blank cells shown as space)."""
        out = []
        for row in range(self.height):
            chars = []
            for value in self.cells[row]:
                value = int(value)
                if not 0 <= value <= 0x10FFFF:
                    chars.append(" ")
                else:
                    chars.append(chr(value))
            out.append("".join(chars).rstrip())
        return out


class Stack:
    """Operand stack. Popping an empty stack yields 0."""

    def __init__(self):
        self.data: list[int] = []
        self.peak = 0

    def push(self, value: int):
        self.data.append(to_cell(value))
        if len(self.data) > self.peak:
            self.peak = len(self.data)

    def pop(self) -> int:
        return self.data.pop() if self.data else 0

    def peek(self) -> int:
        return self.data[-1] if self.data else 0

    def discard(self):
        if self.data:
            self.data.pop()

    def peek_duplicate(self):
        value = self.pop()
        self.push(value)
        self.push(value)

    def swap_top_two(self):
        a = self.pop()
        b = self.pop()
        self.push(a)
        self.push(b)

    def snapshot(self) -> list[int]:
        """Bottom-to-top copy of the contents."""
        return list(self.data)

    def __len__(self) -> int:
        return len(self.data)
