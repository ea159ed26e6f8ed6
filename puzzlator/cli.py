"""
Puzzlator CLI - Command-line interface for the puzzle engine.

Usage:
    puzzlator generate <kind>      Generate a puzzle (sudoku4x4, spatial, pattern)
    puzzlator solve <file>         Solve a saved sudoku snapshot
    puzzlator validate <file>      Validate a generated puzzle JSON file
"""

import argparse
import random
import sys

from .config import Settings, configure_logging
from .engine_core import Difficulty
from .errors import PuzzlatorError


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Puzzlator - Puzzle generation and solving engine",
        prog="puzzlator",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Generate command
    generate_parser = subparsers.add_parser("generate", help="Generate a puzzle")
    generate_parser.add_argument("kind", choices=["sudoku4x4", "spatial", "pattern"])
    generate_parser.add_argument(
        "--difficulty", "-d",
        default="medium",
        choices=[d.value for d in Difficulty],
    )
    generate_parser.add_argument("--subtype", help="Pattern type for pattern puzzles")
    generate_parser.add_argument("--seed", type=int, help="Random seed")

    # Solve command
    solve_parser = subparsers.add_parser("solve", help="Solve a sudoku snapshot")
    solve_parser.add_argument("snapshot_file", help="Path to a serialized sudoku")

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Validate a generated puzzle")
    validate_parser.add_argument("puzzle_file", help="Path to generated puzzle JSON")

    args = parser.parse_args(argv)
    configure_logging()

    if args.command == "generate":
        cmd_generate(args)
    elif args.command == "solve":
        cmd_solve(args)
    elif args.command == "validate":
        cmd_validate(args)
    else:
        parser.print_help()
        sys.exit(1)


def _read(path: str) -> str:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except FileNotFoundError:
        print(f"Error: File not found: {path}")
        sys.exit(1)


def cmd_generate(args):
    """Generate a puzzle locally and print it as JSON."""
    from .generator import GenerationRequest, PuzzleGenerator

    rng = random.Random(args.seed) if args.seed is not None else None
    generator = PuzzleGenerator(Settings.from_env(), rng=rng)
    request = GenerationRequest(
        kind=args.kind,
        difficulty=args.difficulty,
        subtype=args.subtype,
        use_cache=False,
    )

    try:
        puzzle = generator.generate(request)
    except PuzzlatorError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print(puzzle.model_dump_json(indent=2))


def cmd_solve(args):
    """Solve a serialized sudoku and print the solution grid."""
    from .puzzles.sudoku import ConstraintGrid

    data = _read(args.snapshot_file)
    sudoku = ConstraintGrid()
    try:
        sudoku.deserialize(data)
    except PuzzlatorError as e:
        print(f"Error: {e}")
        sys.exit(1)

    solution = sudoku.solve()
    if solution is None:
        print("No solution")
        sys.exit(1)

    for row in solution:
        print(" ".join(str(value) for value in row))


def cmd_validate(args):
    """Validate a generated puzzle."""
    from pydantic import ValidationError
    from .generator import GeneratedPuzzle, validate_generated

    print(f"Validating: {args.puzzle_file}")
    data = _read(args.puzzle_file)
    try:
        puzzle = GeneratedPuzzle.model_validate_json(data)
    except ValidationError as e:
        print(f"Error: not a generated puzzle ({e.error_count()} problem(s))")
        sys.exit(1)

    result = validate_generated(puzzle)

    if result.warnings:
        print("\nWarnings:")
        for w in result.warnings:
            print(f"  - {w}")

    if result.errors:
        print("\nErrors:")
        for e in result.errors:
            print(f"  - {e}")
        sys.exit(1)

    print("Valid")


if __name__ == "__main__":
    main()
