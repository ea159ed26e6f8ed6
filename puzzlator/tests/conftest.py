"""
Pytest fixtures for Puzzlator tests.
"""

import random

import pytest

from ..puzzles.sudoku import ConstraintGrid


class FakeClock:
    """Manually advanced clock (seconds)."""

    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


SOLVED_GRID = [
    [1, 2, 3, 4],
    [3, 4, 1, 2],
    [2, 1, 4, 3],
    [4, 3, 2, 1],
]

OPEN_GRID = [
    [1, None, 3, None],
    [None, 4, None, 2],
    [2, None, 4, None],
    [None, 3, None, 1],
]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(42)


@pytest.fixture
def sudoku(rng, clock) -> ConstraintGrid:
    """A medium sudoku loaded with OPEN_GRID (8 blanks)."""
    puzzle = ConstraintGrid("medium", rng=rng, clock=clock)
    puzzle.load_puzzle(OPEN_GRID)
    return puzzle


def fill_solution(puzzle: ConstraintGrid):
    """Enter the solution into every empty cell."""
    solution = puzzle.solution
    for row, col in puzzle.state.empty_cells():
        result = puzzle.make_move(row, col, solution[row][col])
        assert result.success, result.error
