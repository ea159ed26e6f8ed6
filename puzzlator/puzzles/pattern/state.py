"""
Pattern State - Sequence, hidden positions and hints.

Invariant: hidden_indices never contains 0 or 1, and revealed_indices
is a subset of hidden_indices.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum

from ...engine_core import Difficulty, TimerSnapshot
from .rules import PatternItem, PatternType, Rule


@dataclass
class PatternState:
    pattern: list[PatternItem] = field(default_factory=list)
    hidden_indices: list[int] = field(default_factory=list)
    revealed_indices: list[int] = field(default_factory=list)
    rules: list[Rule] = field(default_factory=list)
    completed: bool = False
    pattern_type: PatternType = PatternType.NUMERIC

    def visible_pattern(self) -> list[PatternItem | None]:
        """The sequence as the player sees it (unrevealed holes as None)."""
        hidden = set(self.hidden_indices) - set(self.revealed_indices)
        return [None if i in hidden else item for i, item in enumerate(self.pattern)]


class HintType(Enum):
    PATTERN_TYPE = "pattern-type"
    RULE = "rule"
    VALUE = "value"


@dataclass
class PatternHint:
    type: HintType
    message: str
    possible_values: list[PatternItem] | None = None


@dataclass
class PatternSnapshot:
    id: str
    difficulty: Difficulty
    state: PatternState
    attempts: int = 0
    mistakes: int = 0
    hints_used: int = 0
    attempts_by_index: dict[int, int] = field(default_factory=dict)
    timer: TimerSnapshot = field(default_factory=TimerSnapshot)
