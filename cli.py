# cli.py: command line driver for the packing solver
from __future__ import annotations

import argparse
import os
import sys
from typing import List, Optional

from io_files import load_puzzle_file, write_solutions
from puzzles import Puzzle
from render import render_layers
from solver.backtracking import Solution
from solver.orchestrator import count_puzzle, solve_puzzle


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="polycube-packer",
        description=(
            "Exact packing of polycube / polyomino pieces into a target region.\n\n"
            "Examples:\n"
            "  polycube-packer examples/tripod_cube.json\n"
            "  polycube-packer examples/tripod_cube.json --first --layers\n"
            "  polycube-packer examples/tripod_cube.json --count --crosscheck\n"
            "  polycube-packer examples/soma_cube.json --max-seconds 30 --out soma.txt\n"
        ),
        formatter_class=argparse.RawTextHelpFormatter,
    )
    p.add_argument("puzzle", help="Path to puzzle JSON (target + pieces)")

    mode = p.add_mutually_exclusive_group()
    mode.add_argument("--first", action="store_true",
                      help="Stop after the first packing.")
    mode.add_argument("--count", action="store_true",
                      help="Only count packings; nothing is printed per solution.")

    p.add_argument("--max-solutions", type=int, default=None, metavar="N",
                   help="Stop after N packings (default: PC_MAX_SOLUTIONS, 0 = all).")
    p.add_argument("--max-seconds", type=float, default=None, metavar="S",
                   help="Wall-clock budget for the search (default: PC_MAX_SECONDS, 0 = none).")
    p.add_argument("--out", default=None, metavar="PATH",
                   help="Also write the packings to PATH.")
    p.add_argument("--layers", action="store_true",
                   help="Print an ASCII view of each packing, one block per z layer.")
    p.add_argument("--crosscheck", action="store_true",
                   help="Re-solve with OR-Tools CP-SAT and compare the results.")
    return p


def _print_solutions(solutions: List[Solution], layers: bool) -> None:
    for idx, solution in enumerate(solutions, start=1):
        print(f"# solution {idx}")
        print(solution)
        if layers:
            print(render_layers(solution))
        print()


def _crosscheck_count(puzzle: Puzzle, count: int, complete: bool, max_seconds: Optional[float]) -> None:
    from solver.cp_sat import count_exact_covers

    cp_count, cp_complete, cp_reason = count_exact_covers(puzzle.target, puzzle.bag, max_seconds)
    print(f"cp-sat: {cp_count} packing(s)" + ("" if cp_complete else f" ({cp_reason})"))
    if complete and cp_complete and cp_count != count:
        print(f"cp-sat disagrees: backtracking={count} cp-sat={cp_count}", file=sys.stderr)


def _crosscheck_first(puzzle: Puzzle, ok: bool, max_seconds: Optional[float]) -> None:
    from solver.cp_sat import try_pack_exact_cover

    cp_ok, cp_solution, cp_reason = try_pack_exact_cover(puzzle.target, puzzle.bag, max_seconds)
    if cp_ok:
        print(f"cp-sat: {cp_solution}")
    else:
        print(f"cp-sat: {cp_reason}")
    if cp_ok != ok and cp_reason is not None and "timebox" not in cp_reason:
        print(f"cp-sat disagrees: backtracking ok={ok} cp-sat ok={cp_ok}", file=sys.stderr)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_argparser().parse_args(argv)

    puzzle, err = load_puzzle_file(args.puzzle)
    if err or puzzle is None:
        print(err or f"Bad puzzle: nothing parsed from {args.puzzle}", file=sys.stderr)
        return 2

    if args.count:
        count, complete, reason, _meta = count_puzzle(puzzle, max_seconds=args.max_seconds)
        line = f"{puzzle.name}: {count} packing(s)"
        if not complete:
            line += f" (incomplete: {reason})"
        print(line)
        if args.crosscheck:
            _crosscheck_count(puzzle, count, complete, args.max_seconds)
        return 0 if count > 0 else 1

    max_solutions = 1 if args.first else args.max_solutions
    ok, solutions, reason, meta = solve_puzzle(
        puzzle, max_solutions=max_solutions, max_seconds=args.max_seconds
    )
    _print_solutions(solutions, args.layers)
    summary = f"{puzzle.name}: {len(solutions)} packing(s) in {meta.get('elapsed', 0.0):.2f}s"
    if reason:
        summary += f" ({reason})"
    print(summary)

    if args.out:
        path = write_solutions(solutions, os.getcwd(), layers=True, out=args.out)
        print(f"wrote {path}")

    if args.crosscheck:
        _crosscheck_first(puzzle, ok, args.max_seconds)

    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
