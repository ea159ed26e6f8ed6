"""
Session Storage - In-memory snapshot store and score recorder.

The engine only needs save/load by key and an append-only outcome log.
Both live in process memory.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from ..engine_core import Difficulty
from ..puzzles.registry import PuzzleKind


class SnapshotStore:
    """
    Serialized puzzles keyed by (user_id, puzzle_id).

    Usage:
        store = SnapshotStore()
        store.save("alice", session_id, puzzle.serialize())
        data = store.load("alice", session_id)
    """

    def __init__(self):
        self._snapshots: dict[tuple[str, str], str] = {}

    def save(self, user_id: str, puzzle_id: str, data: str):
        self._snapshots[(user_id, puzzle_id)] = data

    def load(self, user_id: str, puzzle_id: str) -> str | None:
        return self._snapshots.get((user_id, puzzle_id))

    def delete(self, user_id: str, puzzle_id: str):
        self._snapshots.pop((user_id, puzzle_id), None)

    def list_for_user(self, user_id: str) -> list[str]:
        return [pid for (uid, pid) in self._snapshots if uid == user_id]

    def __len__(self) -> int:
        return len(self._snapshots)


@dataclass
class ScoreRecord:
    """
    One ended puzzle. Abandoned puzzles are kept with completed=False and
    a score of 0 so success rates can be computed from the log.
    """
    user_id: str
    puzzle_id: str
    kind: PuzzleKind
    difficulty: Difficulty
    score: int
    time_elapsed: int
    hints_used: int
    recorded_at: float
    completed: bool = True


class ScoreRecorder:
    """Append-only log of puzzle outcomes."""

    def __init__(self):
        self._records: list[ScoreRecord] = []

    def record(self, record: ScoreRecord) -> ScoreRecord:
        self._records.append(record)
        return record

    def records_for(self, user_id: str, completed_only: bool = False) -> list[ScoreRecord]:
        return [
            r for r in self._records
            if r.user_id == user_id and (r.completed or not completed_only)
        ]

    def top_scores(
        self,
        kind: Optional[PuzzleKind] = None,
        difficulty: Optional[Difficulty] = None,
        limit: int = 10,
    ) -> list[ScoreRecord]:
        """
        Highest completed scores first, optionally filtered by kind and
        difficulty.

        Ties go to the earlier submission.
        """
        records = [
            r for r in self._records
            if r.completed
            and (kind is None or r.kind == kind)
            and (difficulty is None or r.difficulty == difficulty)
        ]
        records.sort(key=lambda r: (-r.score, r.recorded_at))
        return records[:limit]

    def __len__(self) -> int:
        return len(self._records)
