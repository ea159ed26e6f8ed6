"""
Difficulty Progression - Recommends a difficulty from a player's history.

From the player's score records (completed and abandoned):
1. summarize() computes success rate, average time, hints per puzzle,
   the current completion streak and a recent trend
2. recommend() scores that summary against the thresholds of the current
   difficulty and moves one tier up, one tier down, or stays
3. progression_points() / should_unlock_next() turn single results into
   points and decide when the next tier opens

The summary converts to the PerformanceMetrics that generation prompts use.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional
import logging

from ..engine_core import Difficulty
from ..generator.models import PerformanceMetrics
from ..puzzles.registry import PuzzleKind
from .store import ScoreRecord

logger = logging.getLogger(__name__)

TIERS = [Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD, Difficulty.EXPERT]

TREND_WINDOW = 10
MIN_TREND_SAMPLES = 6

# Points available when scoring a summary against a tier
MAX_SCORE = 8


class Trend(Enum):
    IMPROVING = "improving"
    STABLE = "stable"
    STRUGGLING = "struggling"


@dataclass(frozen=True)
class Thresholds:
    """What "playing at this level" looks like. Times are in seconds."""
    min_success_rate: float
    max_success_rate: float
    min_average_time: float
    max_average_time: float
    min_hints: float
    max_hints: float


THRESHOLDS = {
    Difficulty.EASY: Thresholds(0.9, 1.0, 0, 180, 0, 0.5),
    Difficulty.MEDIUM: Thresholds(0.75, 0.95, 120, 420, 0, 1.5),
    Difficulty.HARD: Thresholds(0.6, 0.85, 300, 900, 0.5, 3),
    Difficulty.EXPERT: Thresholds(0.4, 0.7, 600, 1800, 1, 5),
}

# (points, completed puzzles) needed at a tier before the next one opens
UNLOCK_REQUIREMENTS = {
    Difficulty.EASY: (100, 10),
    Difficulty.MEDIUM: (500, 20),
    Difficulty.HARD: (1500, 30),
    Difficulty.EXPERT: (5000, 50),
}

COMPLETION_POINTS = 10
NO_HINT_BONUS = 5
SPEED_BONUS = 3
SPEED_FACTOR = 0.8


@dataclass
class PerformanceSummary:
    success_rate: float = 0.0
    average_time: float = 0.0
    hints_per_puzzle: float = 0.0
    streak: int = 0
    trend: Trend = Trend.STABLE
    puzzles: int = 0

    def to_metrics(self) -> PerformanceMetrics:
        """Prompt-facing form of this summary."""
        return PerformanceMetrics(
            average_time=self.average_time,
            success_rate=self.success_rate,
            hints_used=self.hints_per_puzzle,
        )


@dataclass
class Recommendation:
    current: Difficulty
    recommended: Difficulty
    confidence: float
    reason: str
    summary: PerformanceSummary

    @property
    def changed(self) -> bool:
        return self.recommended != self.current


def _success_rate(records: list[ScoreRecord]) -> float:
    if not records:
        return 0.0
    return sum(1 for r in records if r.completed) / len(records)


def _average_time(records: list[ScoreRecord]) -> float:
    times = [r.time_elapsed for r in records if r.completed]
    return sum(times) / len(times) if times else 0.0


def summarize(
    records: Iterable[ScoreRecord],
    kind: Optional[PuzzleKind] = None,
) -> PerformanceSummary:
    """
    Summarize a player's results, optionally for one puzzle kind.

    - success_rate: completed / all results
    - average_time: mean time of completed results only
    - hints_per_puzzle: hints over all results
    - streak: completed results in a row, newest first
    - trend: compares the older and newer halves of the last ten results
      (needs at least six)
    """
    history = sorted(
        (r for r in records if kind is None or r.kind == kind),
        key=lambda r: r.recorded_at,
    )
    if not history:
        return PerformanceSummary()

    streak = 0
    for record in reversed(history):
        if not record.completed:
            break
        streak += 1

    return PerformanceSummary(
        success_rate=_success_rate(history),
        average_time=_average_time(history),
        hints_per_puzzle=sum(r.hints_used for r in history) / len(history),
        streak=streak,
        trend=_trend(history[-TREND_WINDOW:]),
        puzzles=len(history),
    )


def _trend(recent: list[ScoreRecord]) -> Trend:
    if len(recent) < MIN_TREND_SAMPLES:
        return Trend.STABLE

    middle = len(recent) // 2
    older, newer = recent[:middle], recent[middle:]
    success_change = _success_rate(newer) - _success_rate(older)
    time_change = _average_time(newer) - _average_time(older)

    if success_change > 0.1 or (success_change > 0 and time_change < -30):
        return Trend.IMPROVING
    if success_change < -0.1 or time_change > 60:
        return Trend.STRUGGLING
    return Trend.STABLE


def _score_against(summary: PerformanceSummary, limits: Thresholds) -> tuple[int, list[str]]:
    score = 0
    reasons = []

    if summary.success_rate >= limits.min_success_rate:
        score += 3
        if summary.success_rate >= limits.max_success_rate:
            reasons.append("High success rate")
    else:
        reasons.append("Low success rate")

    if limits.min_average_time <= summary.average_time <= limits.max_average_time:
        score += 2
    elif summary.average_time < limits.min_average_time:
        reasons.append("Completing puzzles very quickly")
    else:
        reasons.append("Taking longer than expected")

    if summary.hints_per_puzzle <= limits.max_hints:
        score += 2
        if summary.hints_per_puzzle <= limits.min_hints:
            reasons.append("Minimal hint usage")
    else:
        reasons.append("Heavy hint usage")

    if summary.trend == Trend.IMPROVING:
        score += 1
        reasons.append("Recent improvement")
    elif summary.trend == Trend.STRUGGLING:
        reasons.append("Recent struggles")

    return score, reasons


def recommend(
    current: Difficulty | str,
    records: Iterable[ScoreRecord],
    kind: Optional[PuzzleKind] = None,
) -> Recommendation:
    """
    Recommend the next difficulty.

    Moves up one tier when confidence is above 0.8 and the success rate
    above 0.85; down one tier when confidence is below 0.4 or the success
    rate below 0.5. Never leaves the easy..expert range.
    """
    current = Difficulty(current)
    summary = summarize(records, kind)
    score, reasons = _score_against(summary, THRESHOLDS[current])
    confidence = score / MAX_SCORE

    index = TIERS.index(current)
    if confidence > 0.8 and summary.success_rate > 0.85:
        index = min(index + 1, len(TIERS) - 1)
    elif confidence < 0.4 or summary.success_rate < 0.5:
        index = max(index - 1, 0)

    recommendation = Recommendation(
        current=current,
        recommended=TIERS[index],
        confidence=confidence,
        reason=", ".join(reasons) or "Performance matches current level",
        summary=summary,
    )
    if recommendation.changed:
        logger.info(
            "Recommending %s -> %s (confidence %.2f): %s",
            current.value, recommendation.recommended.value, confidence, recommendation.reason,
        )
    return recommendation


def progression_points(record: ScoreRecord, expected_time: float = 300) -> int:
    """Points for one result: completion, plus bonuses for no hints and speed."""
    if not record.completed:
        return 0

    points = COMPLETION_POINTS
    if record.hints_used == 0:
        points += NO_HINT_BONUS
    if record.time_elapsed < expected_time * SPEED_FACTOR:
        points += SPEED_BONUS
    return points


def should_unlock_next(current: Difficulty | str, total_points: int, puzzles_completed: int) -> bool:
    points, puzzles = UNLOCK_REQUIREMENTS[Difficulty(current)]
    return total_points >= points and puzzles_completed >= puzzles


def level_to_difficulty(level: int) -> Difficulty:
    """Starting difficulty for a player level."""
    if level < 5:
        return Difficulty.EASY
    if level < 10:
        return Difficulty.MEDIUM
    if level < 20:
        return Difficulty.HARD
    return Difficulty.EXPERT
