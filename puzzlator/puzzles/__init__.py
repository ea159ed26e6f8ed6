"""
Puzzles - The three puzzle kernels.

- sudoku: ConstraintGrid, a 4x4 Sudoku
- spatial: ShapeFitEngine, polyomino placement
- pattern: SequenceEngine, rule-governed sequences

Each kernel is a synchronous in-memory state object. They do not depend
on each other; registry.PuzzleKind tags them for generic dispatch.
"""

from .sudoku import ConstraintGrid
from .spatial import ShapeFitEngine
from .pattern import SequenceEngine
from .registry import PuzzleKind, Puzzle, KERNELS, create_puzzle, kind_of, hints_used

__all__ = [
    "ConstraintGrid",
    "ShapeFitEngine",
    "SequenceEngine",
    "PuzzleKind",
    "Puzzle",
    "KERNELS",
    "create_puzzle",
    "kind_of",
    "hints_used",
]
