"""
Sudoku - 4x4 constraint grid puzzle.
"""

from .state import Cell, Move, SudokuHint, SudokuState, SudokuSnapshot
from .grid import ConstraintGrid, find_violations

__all__ = [
    "Cell",
    "Move",
    "SudokuHint",
    "SudokuState",
    "SudokuSnapshot",
    "ConstraintGrid",
    "find_violations",
]
