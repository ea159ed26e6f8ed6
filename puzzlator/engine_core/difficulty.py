"""
Difficulty and lifecycle enums shared by every puzzle kernel.
"""

from enum import Enum


class Difficulty(Enum):
    """Difficulty tiers. Each kernel maps these to its own parameters."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXPERT = "expert"

    @property
    def is_advanced(self) -> bool:
        """Hard and expert unlock extra rules (rotation, fibonacci, ...)."""
        return self in {Difficulty.HARD, Difficulty.EXPERT}


class PuzzleStatus(Enum):
    """Lifecycle of a single puzzle instance."""
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ABANDONED = "abandoned"
