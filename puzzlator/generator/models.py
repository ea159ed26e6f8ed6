"""
Generation Models - Request and result shapes for puzzle generation.

These are pydantic models because they cross a trust boundary: generated
puzzles arrive as JSON from a completion client and must be parsed before
the validators look at their contents.
"""

from __future__ import annotations
from typing import Any, Optional
import json
import uuid

from pydantic import BaseModel, Field

from ..engine_core import Difficulty
from ..puzzles.registry import PuzzleKind


class PerformanceMetrics(BaseModel):
    """Recent results for the player, used to tune prompts."""
    average_time: float = Field(..., ge=0, description="Average solve time in seconds")
    success_rate: float = Field(..., ge=0, le=1)
    hints_used: float = Field(0.0, ge=0, description="Average hints per puzzle")


class GenerationRequest(BaseModel):
    kind: PuzzleKind
    difficulty: Difficulty = Difficulty.MEDIUM
    subtype: Optional[str] = None
    user_level: Optional[int] = None
    previous_performance: Optional[PerformanceMetrics] = None
    constraints: dict[str, Any] = Field(default_factory=dict)
    use_cache: bool = True
    allow_fallback: bool = True

    def cache_key(self) -> str:
        """Stable key over the fields that change what gets generated."""
        key = self.model_dump(
            mode="json",
            include={"kind", "difficulty", "subtype", "user_level", "constraints"},
        )
        return json.dumps(key, sort_keys=True)


class GeneratedPuzzle(BaseModel):
    """
    A generated puzzle in exchange form.

    puzzle/solution/hints keep the per-kind JSON layout used in prompts:
    - sudoku4x4: puzzle.grid (None for blanks), solution.grid
    - pattern: puzzle.sequence (one None), solution.answer/explanation
    - spatial: puzzle.shapes, puzzle.grid.width/height, solution.placements
    """
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    kind: PuzzleKind
    difficulty: Difficulty
    puzzle: dict[str, Any]
    solution: dict[str, Any]
    hints: list[dict[str, Any]] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)
