"""
Session Manager - Creates and tracks puzzle sessions.

LIFECYCLE:
1. create_session() builds a kernel for the requested kind
2. The caller plays through session.puzzle directly
3. save_session() serializes the puzzle into the snapshot store
4. restore_session() rebuilds a session from a stored snapshot
5. end_session() removes it and records the outcome: the score for a
   completed puzzle, an abandoned entry otherwise

Sessions live in memory only. The snapshot store is the persistence seam.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable
import logging
import time
import uuid

from ..config import Settings
from ..engine_core import Difficulty, PuzzleStatus
from ..errors import SessionNotFoundError, SnapshotError
from ..puzzles.registry import Puzzle, PuzzleKind, create_puzzle, hints_used
from ..puzzles.sudoku import ConstraintGrid
from .progression import Recommendation, recommend
from .store import ScoreRecord, ScoreRecorder, SnapshotStore

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """
    One play-through of one puzzle.

    kind tags which kernel puzzle is; callers switch on it rather than on
    the kernel class.
    """
    session_id: str
    kind: PuzzleKind
    puzzle: Puzzle
    user_id: str
    created_at: float
    last_active_at: float = 0.0
    metadata: dict[str, Any] = field(default_factory=dict)

    def is_active(self) -> bool:
        """Not yet completed (or abandoned)."""
        if isinstance(self.puzzle, ConstraintGrid):
            return self.puzzle.state.status in {PuzzleStatus.NOT_STARTED, PuzzleStatus.IN_PROGRESS}
        return not self.puzzle.is_complete()


class SessionManager:
    """
    Manages puzzle sessions.

    Responsibilities:
    - Create sessions for any puzzle kind
    - Save and restore them through the snapshot store
    - Record outcomes (scores for completed puzzles)
    - Recommend a difficulty from those outcomes
    - Clean up idle sessions

    Usage:
        manager = SessionManager()
        session = manager.create_session("sudoku4x4", "easy", user_id="alice")
        session.puzzle.make_move(0, 1, 3)
        manager.save_session(session.session_id)
        record = manager.end_session(session.session_id)
    """

    def __init__(
        self,
        store: SnapshotStore | None = None,
        recorder: ScoreRecorder | None = None,
        settings: Settings | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store or SnapshotStore()
        self.recorder = recorder or ScoreRecorder()
        self.settings = settings or Settings()
        self.clock = clock
        self._sessions: dict[str, Session] = {}

    def create_session(
        self,
        kind: PuzzleKind | str,
        difficulty: Difficulty | str = Difficulty.MEDIUM,
        user_id: str = "anonymous",
        **options: Any,
    ) -> Session:
        """
        Create a session with a freshly generated puzzle.

        options go to the kernel (rng, pattern_type, verify_packing, ...).
        """
        kind = PuzzleKind(kind)
        if kind == PuzzleKind.SPATIAL:
            options.setdefault("verify_packing", self.settings.verify_packing)
        options.setdefault("clock", self.clock)

        puzzle = create_puzzle(kind, difficulty, **options)
        return self._register(str(uuid.uuid4()), kind, puzzle, user_id)

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID, marking it as recently used."""
        session = self._sessions.get(session_id)
        if session:
            session.last_active_at = self.clock()
        return session

    def list_active_sessions(self) -> list[str]:
        """IDs of sessions whose puzzle is still being played."""
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active()
        ]

    def save_session(self, session_id: str) -> str:
        """Serialize the session's puzzle into the store. Returns the data."""
        session = self._require(session_id)
        data = session.puzzle.serialize()
        self.store.save(session.user_id, session_id, data)
        logger.debug("Saved %s session %s for %s", session.kind.value, session_id, session.user_id)
        return data

    def restore_session(
        self,
        user_id: str,
        session_id: str,
        kind: PuzzleKind | str,
    ) -> Session:
        """
        Rebuild a session from the store.

        Raises:
            SessionNotFoundError: nothing stored under (user_id, session_id)
            SnapshotError: the stored data is malformed
        """
        data = self.store.load(user_id, session_id)
        if data is None:
            raise SessionNotFoundError(
                "No saved session",
                context={"user_id": user_id, "session_id": session_id},
            )

        kind = PuzzleKind(kind)
        puzzle = create_puzzle(kind, clock=self.clock)
        try:
            puzzle.deserialize(data)
        except SnapshotError:
            logger.warning("Stored session %s for %s is malformed", session_id, user_id)
            raise

        return self._register(session_id, kind, puzzle, user_id)

    def end_session(self, session_id: str, reason: str = "completed") -> ScoreRecord | None:
        """
        End a session and remove it from memory.

        A completed puzzle gets its score recorded (returned). Anything else
        is abandoned: it is logged with completed=False and a score of 0
        for progression, and None is returned.
        """
        session = self._sessions.pop(session_id, None)
        if session is None:
            return None

        puzzle = session.puzzle
        if puzzle.is_complete():
            record = self.recorder.record(self._outcome(session, completed=True))
            logger.info(
                "Session %s completed: %s %s scored %d",
                session_id, session.kind.value, puzzle.difficulty.value, record.score,
            )
            return record

        if isinstance(puzzle, ConstraintGrid):
            puzzle.abandon()
        else:
            puzzle.stop_timer()
        self.recorder.record(self._outcome(session, completed=False))
        logger.info("Session %s ended (%s)", session_id, reason)
        return None

    def recommend_difficulty(
        self,
        user_id: str,
        current: Difficulty | str,
        kind: PuzzleKind | str | None = None,
    ) -> Recommendation:
        """Difficulty recommendation from the user's recorded outcomes."""
        return recommend(
            current,
            self.recorder.records_for(user_id),
            PuzzleKind(kind) if kind is not None else None,
        )

    def cleanup_stale_sessions(self, max_age_seconds: float | None = None) -> int:
        """
        End sessions idle for longer than max_age_seconds.

        Returns the number of sessions removed.
        """
        if max_age_seconds is None:
            max_age_seconds = self.settings.session_max_age_seconds

        now = self.clock()
        stale = [
            sid for sid, session in self._sessions.items()
            if now - session.last_active_at > max_age_seconds
        ]
        for session_id in stale:
            self.end_session(session_id, reason="stale")
        return len(stale)

    def _register(self, session_id: str, kind: PuzzleKind, puzzle: Puzzle, user_id: str) -> Session:
        now = self.clock()
        session = Session(
            session_id=session_id,
            kind=kind,
            puzzle=puzzle,
            user_id=user_id,
            created_at=now,
            last_active_at=now,
        )
        self._sessions[session_id] = session
        return session

    def _outcome(self, session: Session, completed: bool) -> ScoreRecord:
        puzzle = session.puzzle
        return ScoreRecord(
            user_id=session.user_id,
            puzzle_id=session.session_id,
            kind=session.kind,
            difficulty=puzzle.difficulty,
            score=puzzle.calculate_score() if completed else 0,
            time_elapsed=puzzle.get_elapsed_time(),
            hints_used=hints_used(puzzle),
            recorded_at=self.clock(),
            completed=completed,
        )

    def _require(self, session_id: str) -> Session:
        session = self.get_session(session_id)
        if session is None:
            raise SessionNotFoundError("Session not found", context={"session_id": session_id})
        return session
