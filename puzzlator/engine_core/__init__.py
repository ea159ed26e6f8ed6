"""
Engine Core - Value types shared by every puzzle kernel.

The kernels themselves share no runtime; they only agree on:
1. Difficulty tiers and lifecycle status
2. The MoveResult failure channel
3. ScoreParams for calculate_score()
4. The play timer
5. The snapshot codec behind serialize()/deserialize()
"""

from .difficulty import Difficulty, PuzzleStatus
from .result import MoveResult, ScoreParams
from .timer import PuzzleTimer, TimerSnapshot
from .codec import SnapshotCodec

__all__ = [
    "Difficulty",
    "PuzzleStatus",
    "MoveResult",
    "ScoreParams",
    "PuzzleTimer",
    "TimerSnapshot",
    "SnapshotCodec",
]
