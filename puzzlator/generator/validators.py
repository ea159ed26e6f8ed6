"""
Generated Puzzle Validation - Structural checks on generated puzzles.

Validates that:
1. Required fields are present for the puzzle kind
2. Sudoku grids are 4x4, hold only 1-4 or None and have no duplicates
3. Sudoku solutions are complete and agree with every clue
4. Pattern sequences have exactly one gap and come with an answer
5. Spatial puzzles place every shape exactly once

Clue counts outside the usual range for a difficulty are warnings only.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any

from ..engine_core import Difficulty
from ..puzzles.registry import PuzzleKind
from ..puzzles.sudoku.grid import GRID_SIZE, BOX_SIZE, VALUES
from .models import GeneratedPuzzle


@dataclass
class ValidationResult:
    """Result of validation, with errors and warnings."""
    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


CLUE_RANGE = {
    Difficulty.EASY: (8, 10),
    Difficulty.MEDIUM: (6, 8),
    Difficulty.HARD: (5, 6),
    Difficulty.EXPERT: (4, 5),
}


def validate_generated(puzzle: GeneratedPuzzle) -> ValidationResult:
    """Validate a generated puzzle according to its kind."""
    errors: list[str] = []
    warnings: list[str] = []

    if puzzle.kind == PuzzleKind.SUDOKU:
        _validate_sudoku(puzzle, errors, warnings)
    elif puzzle.kind == PuzzleKind.PATTERN:
        _validate_pattern(puzzle, errors)
    elif puzzle.kind == PuzzleKind.SPATIAL:
        _validate_spatial(puzzle, errors)

    return ValidationResult(valid=not errors, errors=errors, warnings=warnings)


# =============================================================================
# Sudoku
# =============================================================================

def _is_square_grid(grid: Any) -> bool:
    return (
        isinstance(grid, list)
        and len(grid) == GRID_SIZE
        and all(isinstance(row, list) and len(row) == GRID_SIZE for row in grid)
    )


def _validate_sudoku(puzzle: GeneratedPuzzle, errors: list[str], warnings: list[str]):
    grid = puzzle.puzzle.get("grid")
    grid_ok = False

    if not isinstance(grid, list):
        errors.append("Missing or invalid grid")
    elif not _is_square_grid(grid):
        errors.append("Grid must be 4x4")
    else:
        grid_ok = True
        for i, row in enumerate(grid):
            for j, value in enumerate(row):
                if value is not None and value not in VALUES:
                    errors.append(f"Invalid value at position ({i},{j}): {value}")

        for label, groups in _groups():
            for n, cells in enumerate(groups, start=1):
                values = [grid[r][c] for r, c in cells if grid[r][c] in VALUES]
                if len(set(values)) != len(values):
                    errors.append(f"Duplicate values in {label} {n}")

        clues = sum(1 for row in grid for value in row if value is not None)
        low, high = CLUE_RANGE[puzzle.difficulty]
        if not low <= clues <= high:
            warnings.append(
                f"Clue count {clues} not in expected range {low}-{high} "
                f"for {puzzle.difficulty.value}"
            )

    solution = puzzle.solution.get("grid")
    if not _is_square_grid(solution):
        errors.append("Missing or invalid solution")
        return

    for i, row in enumerate(solution):
        for j, value in enumerate(row):
            if value not in VALUES:
                errors.append(f"Invalid solution value at ({i},{j})")

    if grid_ok:
        for i in range(GRID_SIZE):
            for j in range(GRID_SIZE):
                clue = grid[i][j]
                if clue is not None and clue != solution[i][j]:
                    errors.append(f"Solution doesn't match clue at ({i},{j})")


def _groups() -> list[tuple[str, list[list[tuple[int, int]]]]]:
    rows = [[(r, c) for c in range(GRID_SIZE)] for r in range(GRID_SIZE)]
    cols = [[(r, c) for r in range(GRID_SIZE)] for c in range(GRID_SIZE)]
    boxes = [
        [(br + r, bc + c) for r in range(BOX_SIZE) for c in range(BOX_SIZE)]
        for br in range(0, GRID_SIZE, BOX_SIZE)
        for bc in range(0, GRID_SIZE, BOX_SIZE)
    ]
    return [("row", rows), ("column", cols), ("box", boxes)]


# =============================================================================
# Pattern
# =============================================================================

def _validate_pattern(puzzle: GeneratedPuzzle, errors: list[str]):
    data = puzzle.puzzle
    if not any(key in data for key in ("sequence", "shapes", "matrix")):
        errors.append("Missing pattern data")

    sequence = data.get("sequence")
    if isinstance(sequence, list):
        gaps = sum(1 for item in sequence if item is None)
        if gaps != 1:
            errors.append(f"Expected exactly 1 missing element, found {gaps}")

    if puzzle.solution.get("answer") in (None, ""):
        errors.append("Missing solution answer")
    if not puzzle.solution.get("explanation"):
        errors.append("Missing solution explanation")


# =============================================================================
# Spatial
# =============================================================================

def _validate_spatial(puzzle: GeneratedPuzzle, errors: list[str]):
    shapes = puzzle.puzzle.get("shapes")
    if not isinstance(shapes, list):
        errors.append("Missing or invalid shapes")

    grid = puzzle.puzzle.get("grid")
    if not isinstance(grid, dict) or not grid.get("width") or not grid.get("height"):
        errors.append("Missing or invalid grid dimensions")

    placements = puzzle.solution.get("placements")
    if not isinstance(placements, list):
        errors.append("Missing solution placements")
    elif isinstance(shapes, list) and len(placements) != len(shapes):
        errors.append("Not all shapes are placed in solution")
