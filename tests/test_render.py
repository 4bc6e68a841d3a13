from models import Piece, Position
from render import (
    format_piece,
    format_position,
    format_solution,
    piece_labels,
    render_layers,
    solution_to_dict,
)
from solver.backtracking import Solution


def _two_tripods(names=(None, None)):
    a = Piece([Position(0, 0, 0), Position(1, 0, 0), Position(0, 1, 0), Position(0, 0, 1)], names[0])
    b = Piece([Position(1, 1, 0), Position(1, 0, 1), Position(0, 1, 1), Position(1, 1, 1)], names[1])
    return Solution((a, b))


def test_text_forms():
    solution = _two_tripods()
    assert format_position(Position(0, 1, 2)) == "(0, 1, 2)"
    assert format_piece(solution.pieces[0]) == "[(0, 0, 0)(0, 0, 1)(0, 1, 0)(1, 0, 0)]"
    assert format_solution(solution) == str(solution)
    assert format_solution(solution).startswith("<[") and format_solution(solution).endswith("]>")


def test_labels_prefer_piece_names():
    assert piece_labels(_two_tripods()) == ["A", "B"]
    assert piece_labels(_two_tripods(("tripod", None))) == ["t", "B"]


def test_render_layers_three_dimensional():
    text = render_layers(_two_tripods())
    assert text == "z=0\nAA\nAB\n\nz=1\nAB\nBB"


def test_render_layers_two_dimensional():
    solution = Solution((
        Piece([Position(0, 0), Position(1, 0)], "D"),
        Piece([Position(0, 1), Position(0, 2)], "E"),
    ))
    assert render_layers(solution) == "DD\nE.\nE."


def test_render_empty_solution():
    assert render_layers(Solution.empty()) == ""


def test_solution_to_dict():
    solution = Solution((Piece([Position(1, 0), Position(0, 0)], "D"),))
    assert solution_to_dict(solution) == [{"name": "D", "cells": [[0, 0], [1, 0]]}]
