import json

import pytest

from cli import build_argparser, main

CUBE_PUZZLE = {
    "name": "cube",
    "target": {"layers": [["##", "##"], ["##", "##"]]},
    "pieces": [{"name": "T", "cells": [[0, 0, 0], [1, 0, 0], [0, 1, 0], [0, 0, 1]], "count": 2}],
}


@pytest.fixture
def cube_file(tmp_path):
    path = tmp_path / "cube.json"
    path.write_text(json.dumps(CUBE_PUZZLE))
    return str(path)


def test_first_and_count_are_exclusive():
    with pytest.raises(SystemExit):
        build_argparser().parse_args(["p.json", "--first", "--count"])


def test_lists_every_packing(cube_file, capsys):
    assert main([cube_file, "--max-seconds", "0"]) == 0
    out = capsys.readouterr().out
    assert out.count("# solution") == 4
    assert "cube: 4 packing(s)" in out


def test_first_with_layers(cube_file, capsys):
    assert main([cube_file, "--first", "--layers"]) == 0
    out = capsys.readouterr().out
    assert out.count("# solution") == 1
    assert "z=0" in out and "z=1" in out


def test_count(cube_file, capsys):
    assert main([cube_file, "--count"]) == 0
    assert capsys.readouterr().out.strip() == "cube: 4 packing(s)"


def test_unsolvable_exits_one(tmp_path, capsys):
    payload = dict(CUBE_PUZZLE, pieces=[dict(CUBE_PUZZLE["pieces"][0], count=1)])
    path = tmp_path / "short.json"
    path.write_text(json.dumps(payload))
    assert main([str(path)]) == 1
    assert "Proven infeasible" in capsys.readouterr().out


def test_bad_input_exits_two(tmp_path, capsys):
    path = tmp_path / "bad.json"
    path.write_text("{}")
    assert main([str(path)]) == 2
    assert capsys.readouterr().err.startswith("Bad puzzle: ")


def test_out_writes_file(cube_file, tmp_path, capsys):
    out_path = tmp_path / "out" / "found.txt"
    assert main([cube_file, "--first", "--out", str(out_path)]) == 0
    assert out_path.read_text(encoding="utf-8").startswith("# solution 1")


def test_crosscheck(cube_file, capsys):
    pytest.importorskip("ortools")
    assert main([cube_file, "--count", "--crosscheck"]) == 0
    captured = capsys.readouterr()
    assert "cp-sat: 4 packing(s)" in captured.out
    assert "disagrees" not in captured.err
