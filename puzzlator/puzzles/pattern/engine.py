"""
SequenceEngine - Fill the holes in a rule-governed sequence.

Difficulty sets the sequence length (6/8/10/12) and how many positions
are hidden (2/3/4/5). The first two elements are never hidden.

Hints escalate with the number of attempts made on an index:
- no attempts: the pattern type
- 1-2 attempts: the governing rule in words
- 3+ attempts: the answer mixed with decoys
"""

from __future__ import annotations
from copy import deepcopy
from typing import Callable
import logging
import math
import random
import time
import uuid

from ...engine_core import Difficulty, ScoreParams, PuzzleTimer, SnapshotCodec
from .rules import (
    PatternItem,
    PatternType,
    Rule,
    RuleType,
    apply_rule,
    apply_fibonacci_rule,
    apply_alternating_rule,
    build_rules,
    build_sequence,
    describe_rule,
)
from .state import HintType, PatternHint, PatternState, PatternSnapshot

logger = logging.getLogger(__name__)

PATTERN_LENGTH = {
    Difficulty.EASY: 6,
    Difficulty.MEDIUM: 8,
    Difficulty.HARD: 10,
    Difficulty.EXPERT: 12,
}

HIDDEN_COUNT = {
    Difficulty.EASY: 2,
    Difficulty.MEDIUM: 3,
    Difficulty.HARD: 4,
    Difficulty.EXPERT: 5,
}

FIRST_HIDEABLE_INDEX = 2
VALUE_HINT_THRESHOLD = 3

BASE_SCORE = 1000
MAX_TIME_PENALTY = 500
DIFFICULTY_MULTIPLIER = {
    Difficulty.EASY: 1.0,
    Difficulty.MEDIUM: 1.5,
    Difficulty.HARD: 2.0,
    Difficulty.EXPERT: 2.5,
}
PERFECT_BONUS = 1.2

_CODEC = SnapshotCodec(PatternSnapshot)


class SequenceEngine:
    """
    Pattern-matching puzzle kernel.

    Usage:
        engine = SequenceEngine("easy", pattern_type="shapes")
        for index in engine.state.hidden_indices:
            engine.validate_answer(index, guess(index))

        if engine.is_complete():
            score = engine.calculate_score()
    """

    def __init__(
        self,
        difficulty: Difficulty | str = Difficulty.MEDIUM,
        pattern_type: PatternType | str = PatternType.NUMERIC,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.id = str(uuid.uuid4())
        self.difficulty = Difficulty(difficulty)
        self.rng = rng or random.Random()
        self.clock = clock
        self.timer = PuzzleTimer(clock)

        self.state = PatternState()
        self.attempts = 0
        self.mistakes = 0
        self.hints_used = 0
        self.attempts_by_index: dict[int, int] = {}

        self.generate_pattern(pattern_type, self.difficulty)

    # =========================================================================
    # Generation
    # =========================================================================

    def generate_pattern(
        self,
        pattern_type: PatternType | str,
        difficulty: Difficulty | str | None = None,
    ):
        """Replace the current sequence with a freshly generated one."""
        pattern_type = PatternType(pattern_type)
        if difficulty is not None:
            self.difficulty = Difficulty(difficulty)

        rules = build_rules(pattern_type, self.difficulty)
        pattern = build_sequence(pattern_type, rules, PATTERN_LENGTH[self.difficulty])

        self.state = PatternState(
            pattern=pattern,
            rules=rules,
            pattern_type=pattern_type,
            hidden_indices=self._select_hidden_indices(len(pattern)),
        )
        logger.debug(
            "Generated %s %s pattern with %d hidden",
            self.difficulty.value, pattern_type.value, len(self.state.hidden_indices),
        )

    def load_pattern(
        self,
        pattern: list[PatternItem],
        rules: list[Rule],
        pattern_type: PatternType | str = PatternType.NUMERIC,
        hidden_indices: list[int] | None = None,
    ):
        """
        Install an explicit sequence.

        hidden_indices must all lie in [2, len(pattern)); when omitted they
        are chosen at random for the current difficulty.
        """
        if hidden_indices is None:
            hidden = self._select_hidden_indices(len(pattern))
        else:
            for index in hidden_indices:
                if not FIRST_HIDEABLE_INDEX <= index < len(pattern):
                    raise ValueError(
                        f"Hidden index {index} must be between {FIRST_HIDEABLE_INDEX} "
                        f"and {len(pattern) - 1}"
                    )
            hidden = sorted(set(hidden_indices))

        self.state = PatternState(
            pattern=list(pattern),
            rules=list(rules),
            pattern_type=PatternType(pattern_type),
            hidden_indices=hidden,
        )
        self.attempts = 0
        self.mistakes = 0
        self.attempts_by_index = {}

    def _select_hidden_indices(self, length: int) -> list[int]:
        available = list(range(FIRST_HIDEABLE_INDEX, length))
        count = min(HIDDEN_COUNT[self.difficulty], len(available))
        return sorted(self.rng.sample(available, count))

    # =========================================================================
    # Rules
    # =========================================================================

    def apply_rule(self, value: PatternItem, rule: Rule) -> PatternItem:
        return apply_rule(value, rule)

    def apply_fibonacci_rule(self, sequence: list[int], index: int) -> int:
        return apply_fibonacci_rule(sequence, index)

    def apply_alternating_rule(self, index: int, rule: Rule) -> PatternItem:
        return apply_alternating_rule(index, rule)

    # =========================================================================
    # Answers
    # =========================================================================

    def validate_answer(self, index: int, answer: PatternItem) -> bool:
        """
        Check a guess for one position.

        A correct guess on a hidden index reveals it; a wrong guess counts
        as a mistake. Completion is set once and never cleared.
        """
        if not 0 <= index < len(self.state.pattern):
            raise IndexError(f"Index {index} is outside the pattern")

        self.attempts += 1
        self.attempts_by_index[index] = self.attempts_by_index.get(index, 0) + 1

        # True == 1 in Python; a bool never matches a numeric item
        is_correct = not isinstance(answer, bool) and answer == self.state.pattern[index]
        if not is_correct:
            self.mistakes += 1
            return False

        if index in self.state.hidden_indices and index not in self.state.revealed_indices:
            self.state.revealed_indices.append(index)

        if not self.state.completed and set(self.state.revealed_indices) >= set(self.state.hidden_indices):
            self.state.completed = True
            self.timer.stop()
            logger.debug("Pattern %s completed after %d attempts", self.id, self.attempts)

        return True

    def get_attempts(self) -> int:
        return self.attempts

    def get_mistakes(self) -> int:
        return self.mistakes

    def is_complete(self) -> bool:
        return self.state.completed

    def get_state(self) -> PatternState:
        return deepcopy(self.state)

    # =========================================================================
    # Hints
    # =========================================================================

    def get_hint(self, index: int | None = None) -> PatternHint:
        """Hint for index, escalating with attempts made on it. Free to query."""
        attempts = self.attempts_by_index.get(index, 0) if index is not None else 0

        if attempts == 0:
            return PatternHint(
                type=HintType.PATTERN_TYPE,
                message=(
                    f"This is a {self.state.pattern_type.value} pattern. "
                    "Look for the relationship between consecutive elements."
                ),
            )

        if attempts < VALUE_HINT_THRESHOLD:
            rule = self.state.rules[0]
            return PatternHint(
                type=HintType.RULE,
                message=f"Think about the mathematical relationship: {describe_rule(rule)}",
            )

        correct = self.state.pattern[index]
        possible = [correct] + self._decoys(correct)
        self.rng.shuffle(possible)
        return PatternHint(
            type=HintType.VALUE,
            message="The answer is one of these values:",
            possible_values=possible,
        )

    def _decoys(self, correct: PatternItem) -> list[PatternItem]:
        if isinstance(correct, int):
            return [correct + 1, correct - 1]

        for rule in self.state.rules:
            if rule.type == RuleType.ALTERNATING and rule.values and correct in rule.values:
                return [v for v in rule.values if v != correct][:2]
        return []

    def use_hint(self):
        self.hints_used += 1

    # =========================================================================
    # Timer
    # =========================================================================

    def start_timer(self):
        self.timer.start()

    def stop_timer(self):
        self.timer.stop()

    def pause_timer(self):
        self.timer.pause()

    def resume_timer(self):
        self.timer.resume()

    def get_elapsed_time(self) -> int:
        return self.timer.elapsed()

    def reset(self):
        """New sequence of the same type and difficulty, counters cleared."""
        self.attempts = 0
        self.mistakes = 0
        self.hints_used = 0
        self.attempts_by_index = {}
        self.timer.reset()
        self.generate_pattern(self.state.pattern_type, self.difficulty)

    # =========================================================================
    # Scoring
    # =========================================================================

    def calculate_score(self, params: ScoreParams | None = None) -> int:
        """
        1000 minus time (2/s, capped at 500), 50 per mistake and 100 per
        hint, times the difficulty multiplier. Any mistake caps the score
        at 999; a run with no mistakes and no hints earns a 1.2x bonus.
        """
        if params is None:
            params = ScoreParams(
                time_elapsed=self.get_elapsed_time(),
                hints_used=self.hints_used,
                difficulty=self.difficulty,
                error_count=self.mistakes,
            )

        score = (
            BASE_SCORE
            - min(MAX_TIME_PENALTY, params.time_elapsed * 2)
            - params.error_count * 50
            - params.hints_used * 100
        )
        score *= DIFFICULTY_MULTIPLIER[Difficulty(params.difficulty)]

        if params.error_count > 0:
            score = min(score, BASE_SCORE - 1)

        if params.error_count == 0 and params.hints_used == 0:
            score *= PERFECT_BONUS

        return max(0, math.floor(score + 0.5))

    # =========================================================================
    # Persistence
    # =========================================================================

    def serialize(self) -> str:
        return _CODEC.dumps(
            PatternSnapshot(
                id=self.id,
                difficulty=self.difficulty,
                state=self.state,
                attempts=self.attempts,
                mistakes=self.mistakes,
                hints_used=self.hints_used,
                attempts_by_index=self.attempts_by_index,
                timer=self.timer.snapshot(),
            )
        )

    def deserialize(self, data: str):
        snapshot = _CODEC.loads(data)
        self.id = snapshot.id
        self.difficulty = snapshot.difficulty
        self.state = snapshot.state
        self.attempts = snapshot.attempts
        self.mistakes = snapshot.mistakes
        self.hints_used = snapshot.hints_used
        self.attempts_by_index = dict(snapshot.attempts_by_index)
        self.timer.restore(snapshot.timer)
