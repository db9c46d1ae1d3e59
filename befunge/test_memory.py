"""
Tests for the Playfield grid and the operand Stack.
"""

from __future__ import annotations

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from befunge.memory import (
    EMPTY, UP, DOWN, LEFT, RIGHT, CELL_BITS,
    InvariantFault, Playfield, Stack, to_cell,
)


# ---------------------------------------------------------------------------
# Playfield loading
# ---------------------------------------------------------------------------

def test_playfield_dimensions():
    pf = Playfield.from_text("lwkwkl\ndhdhde\n333ddd")
    assert pf.dimensions() == (6, 3)
    assert pf.get(0, 0) == ord("l")
    assert pf.get(5, 1) == ord("e")
    assert pf.get(2, 2) == ord("3")


def test_playfield_single_row_and_column():
    assert Playfield.from_text("lwkwkl").dimensions() == (6, 1)
    assert Playfield.from_text("l\nw\nk\nw\nk\nl").dimensions() == (1, 6)


def test_short_rows_are_padded_with_empty():
    pf = Playfield.from_text("ldd\nwwe\ng")
    assert pf.dimensions() == (3, 3)
    assert pf.get(0, 2) == ord("g")
    assert pf.get(1, 2) == EMPTY
    assert pf.get(2, 2) == EMPTY


def test_spaces_in_source_are_real_cells():
    pf = Playfield.from_text("a b")
    assert pf.get(1, 0) == ord(" ")


def test_trailing_newline_and_crlf():
    assert Playfield.from_text("ab\ncd\n").dimensions() == (2, 2)
    pf = Playfield.from_text("ab\r\ncd\r\n")
    assert pf.dimensions() == (2, 2)
    assert pf.get(1, 1) == ord("d")


def test_empty_program_is_one_empty_cell():
    pf = Playfield.from_text("")
    assert pf.dimensions() == (1, 1)
    assert pf.get(0, 0) == EMPTY


def test_out_of_range_access_is_an_invariant_fault():
    pf = Playfield.from_text("abc")
    with pytest.raises(InvariantFault):
        pf.get(3, 0)
    with pytest.raises(InvariantFault):
        pf.get(0, -1)
    with pytest.raises(InvariantFault):
        pf.set(0, 1, 65)


# ---------------------------------------------------------------------------
# Playfield mutation and addressing
# ---------------------------------------------------------------------------

def test_set_then_get_roundtrip():
    pf = Playfield.from_text("....\n....\n..")
    for col in range(4):
        for row in range(3):
            for code in (0, 32, 64, 126, 255, 0x263A, -5):
                pf.set(col, row, code)
                assert pf.get(col, row) == code


def test_blank_marks_only_unfilled_padding():
    pf = Playfield.from_text("ab\nc")
    assert not pf.is_blank(0, 1)
    assert pf.is_blank(1, 1)
    pf.set(1, 1, EMPTY)
    assert not pf.is_blank(1, 1)
    assert pf.get(1, 1) == -1
    assert Playfield.from_text("").is_blank(0, 0)


def test_wrap_reduces_coordinates_onto_torus():
    pf = Playfield.from_text("abcd\nefgh\nijkl")
    assert pf.wrap(4, 0) == (0, 0)
    assert pf.wrap(-1, 0) == (3, 0)
    assert pf.wrap(9, -4) == (1, 2)


def test_step_wraps_in_all_directions():
    pf = Playfield.from_text("abcd\nefgh\nijkl")
    for row in range(3):
        assert pf.step(3, row, RIGHT) == (0, row)
        assert pf.step(0, row, LEFT) == (3, row)
    for col in range(4):
        assert pf.step(col, 2, DOWN) == (col, 0)
        assert pf.step(col, 0, UP) == (col, 2)
    assert pf.step(1, 1, RIGHT) == (2, 1)
    assert pf.step(1, 1, UP) == (1, 0)


def test_rows_renders_current_grid():
    pf = Playfield.from_text("ab\nc")
    pf.set(1, 1, ord("@"))
    assert pf.rows() == ["ab", "c@"]
    pf.set(0, 0, EMPTY)
    assert pf.rows() == [" b", "c@"]


# ---------------------------------------------------------------------------
# Stack
# ---------------------------------------------------------------------------

def test_pop_on_empty_stack_yields_zero():
    s = Stack()
    assert s.pop() == 0
    s.push(7)
    assert s.pop() == 7
    for _ in range(5):
        assert s.pop() == 0
    assert len(s) == 0


def test_duplicate():
    s = Stack()
    s.push(3)
    s.peek_duplicate()
    assert s.snapshot() == [3, 3]

    empty = Stack()
    empty.peek_duplicate()
    assert empty.snapshot() == [0, 0]


def test_swap_top_two():
    s = Stack()
    s.push(1)
    s.push(2)
    s.swap_top_two()
    assert s.snapshot() == [2, 1]

    single = Stack()
    single.push(5)
    single.swap_top_two()
    assert single.snapshot() == [5, 0]


def test_discard_and_peek():
    s = Stack()
    s.discard()
    assert s.peek() == 0
    s.push(1)
    s.push(2)
    s.discard()
    assert s.peek() == 1
    assert s.snapshot() == [1]


def test_peak_tracks_high_water_mark():
    s = Stack()
    for v in range(4):
        s.push(v)
    s.pop()
    s.pop()
    assert s.peak == 4


def test_cells_wrap_to_signed_width():
    top = 1 << (CELL_BITS - 1)
    assert to_cell(top - 1) == top - 1
    assert to_cell(top) == -top
    assert to_cell(-1) == -1
    s = Stack()
    s.push(1 << CELL_BITS)
    assert s.pop() == 0
