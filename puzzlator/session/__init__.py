"""
Session Module - Tracks puzzle play-throughs.

A session represents one play-through of one puzzle:
- Created with a freshly generated kernel
- Saved to and restored from the snapshot store
- Ended with a recorded outcome (scored when completed, else abandoned)

Recorded outcomes drive difficulty progression for each user.

PuzzleKind is the tag that lets one manager handle all three kernels.
"""

from ..puzzles.registry import PuzzleKind, create_puzzle
from .manager import SessionManager, Session
from .progression import (
    PerformanceSummary,
    Recommendation,
    Thresholds,
    Trend,
    THRESHOLDS,
    level_to_difficulty,
    progression_points,
    recommend,
    should_unlock_next,
    summarize,
)
from .store import SnapshotStore, ScoreRecorder, ScoreRecord

__all__ = [
    "PuzzleKind",
    "create_puzzle",
    "SessionManager",
    "Session",
    "PerformanceSummary",
    "Recommendation",
    "Thresholds",
    "Trend",
    "THRESHOLDS",
    "level_to_difficulty",
    "progression_points",
    "recommend",
    "should_unlock_next",
    "summarize",
    "SnapshotStore",
    "ScoreRecorder",
    "ScoreRecord",
]
