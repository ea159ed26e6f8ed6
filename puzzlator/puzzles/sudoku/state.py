"""
Sudoku State - Cells, moves and the complete 4x4 puzzle state.

The grid invariant: among non-empty cells no value repeats in a row,
column or 2x2 box. Locked cells are the clues and never change.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any

from ...engine_core import Difficulty, PuzzleStatus, TimerSnapshot


@dataclass
class Cell:
    """A single grid cell. value is 1..4 or None when empty."""
    row: int
    col: int
    value: int | None = None
    locked: bool = False  # Clue cells can't be edited


@dataclass
class Move:
    """A player move. value None clears the cell."""
    row: int
    col: int
    value: int | None
    timestamp: float | None = None


@dataclass
class SudokuHint:
    """
    Candidate values for one cell.

    difficulty = 5 - len(possible_values): the fewer legal values,
    the more informative the cell.
    """
    row: int
    col: int
    possible_values: list[int]
    difficulty: int


@dataclass
class SudokuState:
    """
    Complete puzzle state.

    moves is the accepted move history, oldest first; undo pops from it.
    """
    id: str
    difficulty: Difficulty
    status: PuzzleStatus = PuzzleStatus.NOT_STARTED
    grid: list[list[Cell]] = field(default_factory=list)
    moves: list[Move] = field(default_factory=list)
    hints_used: int = 0
    start_time: float | None = None
    end_time: float | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def values(self) -> list[list[int | None]]:
        """Plain value matrix (a fresh copy)."""
        return [[cell.value for cell in row] for row in self.grid]

    def empty_cells(self) -> list[tuple[int, int]]:
        return [
            (cell.row, cell.col)
            for row in self.grid
            for cell in row
            if cell.value is None
        ]

    @property
    def clue_count(self) -> int:
        return sum(1 for row in self.grid for cell in row if cell.locked)


@dataclass
class SudokuSnapshot:
    """Everything serialize() persists."""
    state: SudokuState
    solution: list[list[int]] | None = None
    timer: TimerSnapshot = field(default_factory=TimerSnapshot)
