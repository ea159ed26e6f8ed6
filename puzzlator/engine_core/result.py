"""
Move results and scoring parameters.

MoveResult is the structured failure channel: kernels return it for
routine rule violations instead of raising, so the UI can branch on
success and show the error text directly.
"""

from __future__ import annotations
from dataclasses import dataclass

from .difficulty import Difficulty


@dataclass
class MoveResult:
    """
    Result of attempting a move.

    error is human-readable (shown to the player);
    error_code is machine-readable (for branching and analytics).
    """
    success: bool
    error: str | None = None
    error_code: str | None = None

    @classmethod
    def ok(cls) -> MoveResult:
        """Create a success result."""
        return cls(success=True)

    @classmethod
    def failure(cls, error: str, error_code: str | None = None) -> MoveResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code)


@dataclass
class ScoreParams:
    """
    Inputs to calculate_score().

    Kernels fill this from their own counters when the caller passes None.
    """
    time_elapsed: int
    hints_used: int
    difficulty: Difficulty
    move_count: int = 0
    error_count: int = 0
