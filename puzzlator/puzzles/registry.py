"""
Puzzle Registry - The tag that tells the three kernels apart.

The kernels share no base class: their states and move APIs differ.
Code that needs to handle "any puzzle" switches on PuzzleKind instead.
"""

from __future__ import annotations
from enum import Enum
from typing import Any, Union

from ..engine_core import Difficulty
from .sudoku import ConstraintGrid
from .spatial import ShapeFitEngine
from .pattern import SequenceEngine

Puzzle = Union[ConstraintGrid, ShapeFitEngine, SequenceEngine]


class PuzzleKind(str, Enum):
    SUDOKU = "sudoku4x4"
    SPATIAL = "spatial"
    PATTERN = "pattern"


KERNELS: dict[PuzzleKind, type] = {
    PuzzleKind.SUDOKU: ConstraintGrid,
    PuzzleKind.SPATIAL: ShapeFitEngine,
    PuzzleKind.PATTERN: SequenceEngine,
}


def create_puzzle(
    kind: PuzzleKind | str,
    difficulty: Difficulty | str = Difficulty.MEDIUM,
    **options: Any,
) -> Puzzle:
    """
    Build a kernel instance.

    options go to the kernel constructor (rng, clock, pattern_type for
    pattern puzzles, verify_packing for spatial ones).
    """
    return KERNELS[PuzzleKind(kind)](difficulty, **options)


def kind_of(puzzle: Puzzle) -> PuzzleKind:
    for kind, kernel in KERNELS.items():
        if isinstance(puzzle, kernel):
            return kind
    raise TypeError(f"Not a puzzle kernel: {type(puzzle).__name__}")


def hints_used(puzzle: Puzzle) -> int:
    """Hint counter; the pattern kernel keeps it outside its state."""
    if isinstance(puzzle, SequenceEngine):
        return puzzle.hints_used
    return puzzle.state.hints_used
