"""
Console adapters: the machine's synchronous character/number I/O.

The machine only talks to the Console interface. StreamConsole wraps
real text streams (stdin/stdout); BufferConsole keeps everything in
memory, for tests and for hosts that want the output as a string.
"""

from __future__ import annotations

import collections
import sys

from .memory import MachineFault, to_cell


class InputFault(MachineFault):
    """The console could not supply the next input character."""


class OutputFault(MachineFault):
    """The console could not accept a write."""


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


class Console:
    """
    Base adapter. Subclasses provide _getc() and write_text().

    Reads return None at end-of-input; the machine decides what to push.
    """

    def __init__(self):
        self._pending: str | None = None

    # -------------------------------------------------------------------
    # Subclass hooks
    # -------------------------------------------------------------------

    def _getc(self) -> str:
        """Next input character, or '' at end-of-input."""
        raise NotImplementedError

    def write_text(self, text: str):
        raise NotImplementedError

    # -------------------------------------------------------------------
    # Input
    # -------------------------------------------------------------------

    def _take(self) -> str:
        if self._pending is not None:
            ch, self._pending = self._pending, None
            return ch
        return self._getc()

    def read_char(self) -> int | None:
        ch = self._take()
        if ch == "":
            return None
        return ord(ch)

    def read_int(self) -> int | None:
        """
        Read an optionally signed decimal integer.

        Skips anything before the first digit; the character that ends
        the number stays unread for the next input instruction.
        """
        sign = 1
        ch = self._take()
        while True:
            if ch == "":
                return None
            if _is_digit(ch):
                break
            if ch == "-":
                ch = self._take()
                if _is_digit(ch):
                    sign = -1
                    break
                continue
            ch = self._take()

        # Accumulate in cell width; any run of digits stays a valid cell.
        value = 0
        while ch != "" and _is_digit(ch):
            value = to_cell(value * 10 + ord(ch) - ord("0"))
            ch = self._take()
        if ch != "":
            self._pending = ch
        return to_cell(sign * value)

    # -------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------

    def write_int(self, value: int):
        self.write_text(f"{value} ")

    def write_char(self, code: int):
        try:
            ch = chr(code)
        except (ValueError, OverflowError) as e:
            raise OutputFault(f"cannot write {code} as a character") from e
        self.write_text(ch)


class StreamConsole(Console):
    """Console over text streams. Flushes after every write."""

    def __init__(self, stdin=None, stdout=None):
        super().__init__()
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout

    def _getc(self) -> str:
        try:
            return self.stdin.read(1)
        except (OSError, ValueError) as e:
            raise InputFault(f"input read failed: {e}") from e

    def write_text(self, text: str):
        try:
            self.stdout.write(text)
            self.stdout.flush()
        except (OSError, ValueError) as e:
            raise OutputFault(f"output write failed: {e}") from e


class BufferConsole(Console):
    """In-memory console: queued input, collected output."""

    def __init__(self, input_text: str = ""):
        super().__init__()
        self.input: collections.deque[str] = collections.deque(input_text)
        self.chunks: list[str] = []

    def feed(self, text: str):
        """Append characters to the pending input."""
        self.input.extend(text)

    def _getc(self) -> str:
        return self.input.popleft() if self.input else ""

    def write_text(self, text: str):
        self.chunks.append(text)

    @property
    def output(self) -> str:
        return "".join(self.chunks)

    def drain(self) -> str:
        """Return everything written so far and clear it."""
        out = self.output
        self.chunks.clear()
        return out
