"""
Tests for the command-line runner.
"""

from __future__ import annotations

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from befunge.run import main, __version__

EXAMPLES = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))),
                        "examples")


def test_runs_example_file(capsys):
    code = main([os.path.join(EXAMPLES, "hello.bf")])
    out, err = capsys.readouterr()
    assert code == 0
    assert out == "Hello, World!\n"
    assert err == ""


def test_expression(capsys):
    assert main(["-e", "12+.@"]) == 0
    assert capsys.readouterr().out == "3 "


def test_expression_rows(capsys):
    assert main(["-e", "v\\n1\\n.\\n@"]) == 0
    assert capsys.readouterr().out == "1 "


def test_file_not_found(capsys):
    assert main(["non_existent.bf"]) == 1
    assert "File not found" in capsys.readouterr().err


def test_wrong_extension(tmp_path, capsys):
    source = tmp_path / "program.txt"
    source.write_text("@")
    assert main([str(source)]) == 1
    assert "not a Befunge source file" in capsys.readouterr().err


def test_strict_size_check(tmp_path, capsys):
    source = tmp_path / "wide.b93"
    source.write_text("@" + " " * 90)
    assert main(["--strict", str(source)]) == 1
    assert "80x25" in capsys.readouterr().err
    assert main([str(source)]) == 0


def test_fault_exit_status(capsys):
    assert main(["--max-steps", "10", "-e", ">"]) == 1
    err = capsys.readouterr().err
    assert err.startswith("Error: step limit of 10 exceeded")


def test_stats(capsys):
    assert main(["--stats", "-e", "@"]) == 0
    assert "Steps: 1" in capsys.readouterr().err


def test_seed_is_accepted(capsys):
    assert main(["--seed", "1", "--max-steps", "50", "-e", "?@"]) == 0


def test_version(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--version"])
    assert exc.value.code == 0
    assert __version__ in capsys.readouterr().out


def test_requires_program(capsys):
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 1
    assert "error" in capsys.readouterr().err


def test_bad_argument_exit_status(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--seed", "abc", "-e", "@"])
    assert exc.value.code == 1
    assert "--seed" in capsys.readouterr().err
