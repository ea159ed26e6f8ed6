"""
Tests for difficulty progression.

Tests:
- Performance summaries (success rate, time, hints, streak, trend)
- Difficulty recommendations against per-tier thresholds
- Progression points, unlocks and level mapping
"""

import pytest

from ..engine_core import Difficulty
from ..generator import PerformanceMetrics
from ..session import (
    PerformanceSummary,
    PuzzleKind,
    ScoreRecord,
    Trend,
    level_to_difficulty,
    progression_points,
    recommend,
    should_unlock_next,
    summarize,
)


def _history(*results, kind=PuzzleKind.SUDOKU, difficulty=Difficulty.MEDIUM):
    """Records from (completed, time, hints) tuples, oldest first."""
    return [
        ScoreRecord(
            user_id="alice",
            puzzle_id=f"p{at}",
            kind=kind,
            difficulty=difficulty,
            score=100 if completed else 0,
            time_elapsed=time_elapsed,
            hints_used=hints,
            recorded_at=1000.0 + at,
            completed=completed,
        )
        for at, (completed, time_elapsed, hints) in enumerate(results)
    ]


class TestSummary:
    """Tests for summarize."""

    def test_empty_history(self):
        summary = summarize([])
        assert summary == PerformanceSummary()
        assert summary.trend == Trend.STABLE

    def test_mixed_results(self):
        """Time averages completed results only; hints average everything."""
        summary = summarize(_history((True, 120, 1), (True, 180, 0), (False, 60, 2)))
        assert summary.success_rate == pytest.approx(2 / 3)
        assert summary.average_time == 150
        assert summary.hints_per_puzzle == 1
        assert summary.streak == 0
        assert summary.puzzles == 3

    def test_streak_counts_newest_completions(self):
        summary = summarize(_history((True, 60, 0), (False, 60, 0), (True, 60, 0), (True, 60, 0)))
        assert summary.streak == 2

    def test_records_sorted_by_time(self):
        """Input order does not matter; recorded_at does."""
        records = _history((False, 60, 0), (True, 60, 0))
        assert summarize(reversed(records)).streak == 1

    def test_filter_by_kind(self):
        records = _history((True, 100, 0)) + _history((False, 0, 0), kind=PuzzleKind.PATTERN)
        assert summarize(records, PuzzleKind.SUDOKU).success_rate == 1.0
        assert summarize(records, PuzzleKind.PATTERN).success_rate == 0.0
        assert summarize(records).puzzles == 2

    def test_improving_trend(self):
        records = _history(
            (False, 300, 0), (True, 250, 0), (False, 280, 0),
            (True, 180, 0), (True, 150, 0), (True, 120, 0),
        )
        assert summarize(records).trend == Trend.IMPROVING

    def test_struggling_trend(self):
        records = _history(
            (True, 120, 0), (True, 150, 0), (True, 180, 0),
            (False, 280, 0), (True, 250, 0), (False, 300, 0),
        )
        assert summarize(records).trend == Trend.STRUGGLING

    def test_slower_is_struggling(self):
        """Same success rate but more than a minute slower on average."""
        records = _history(*[(True, 100, 0)] * 3, *[(True, 200, 0)] * 3)
        assert summarize(records).trend == Trend.STRUGGLING

    def test_trend_needs_six_results(self):
        records = _history((False, 300, 0), (False, 300, 0), (True, 100, 0), (True, 100, 0), (True, 100, 0))
        assert summarize(records).trend == Trend.STABLE

    def test_trend_uses_last_ten(self):
        """Old failures outside the window do not affect the trend."""
        records = _history(*[(False, 60, 0)] * 5, *[(True, 200, 0)] * 10)
        assert summarize(records).trend == Trend.STABLE

    def test_to_metrics(self):
        metrics = summarize(_history((True, 120, 1), (False, 60, 2))).to_metrics()
        assert isinstance(metrics, PerformanceMetrics)
        assert metrics.success_rate == 0.5
        assert metrics.average_time == 120
        assert metrics.hints_used == 1.5


class TestRecommend:
    """Tests for recommend."""

    def test_strong_player_moves_up(self):
        records = _history(*[(True, 300, 0)] * 10)
        result = recommend("medium", records)

        assert result.recommended == Difficulty.HARD
        assert result.changed
        assert result.confidence == pytest.approx(7 / 8)
        assert result.reason == "High success rate, Minimal hint usage"

    def test_fast_player_without_time_points_stays(self):
        """Too quick for the tier costs the time points, so no promotion."""
        records = _history(*[(True, 100, 0)] * 10)
        result = recommend(Difficulty.MEDIUM, records)

        assert result.recommended == Difficulty.MEDIUM
        assert not result.changed
        assert result.confidence == pytest.approx(5 / 8)
        assert "Completing puzzles very quickly" in result.reason

    def test_struggling_player_moves_down(self):
        records = _history(*[(i % 3 == 0, 1200, 4) for i in range(10)], difficulty=Difficulty.HARD)
        result = recommend("hard", records)

        assert result.summary.success_rate == pytest.approx(0.4)
        assert result.recommended == Difficulty.MEDIUM
        assert "Low success rate" in result.reason
        assert "Taking longer than expected" in result.reason
        assert "Heavy hint usage" in result.reason

    def test_improvement_adds_confidence(self):
        records = _history(
            (False, 300, 0), (True, 250, 0), (False, 280, 0),
            (True, 180, 0), (True, 150, 0), (True, 120, 0),
        )
        result = recommend("easy", records)
        assert "Recent improvement" in result.reason
        assert "Low success rate" in result.reason

    def test_no_reasons(self):
        """Inside every band: confident, but not successful enough to move up."""
        records = _history((False, 300, 1), *[(True, 300, 1)] * 3)
        result = recommend("medium", records)
        assert result.reason == "Performance matches current level"
        assert result.confidence == pytest.approx(7 / 8)
        assert result.recommended == Difficulty.MEDIUM

    def test_clamped_at_extremes(self):
        assert recommend("easy", []).recommended == Difficulty.EASY
        strong = _history(*[(True, 900, 1)] * 10, difficulty=Difficulty.EXPERT)
        assert recommend("expert", strong).recommended == Difficulty.EXPERT


class TestPoints:
    """Tests for progression points and unlocks."""

    @pytest.mark.parametrize("completed,time_elapsed,hints,expected", [
        (True, 300, 2, 10),
        (True, 300, 0, 15),
        (True, 100, 1, 13),
        (True, 100, 0, 18),
        (False, 100, 0, 0),
    ])
    def test_progression_points(self, completed, time_elapsed, hints, expected):
        [record] = _history((completed, time_elapsed, hints))
        assert progression_points(record) == expected

    def test_expected_time(self):
        [record] = _history((True, 500, 1))
        assert progression_points(record, expected_time=1000) == 13

    def test_should_unlock_next(self):
        assert not should_unlock_next("easy", 50, 5)
        assert not should_unlock_next("easy", 150, 5)
        assert should_unlock_next(Difficulty.EASY, 150, 12)
        assert not should_unlock_next("medium", 150, 12)

    @pytest.mark.parametrize("level,expected", [
        (1, Difficulty.EASY),
        (4, Difficulty.EASY),
        (5, Difficulty.MEDIUM),
        (10, Difficulty.HARD),
        (19, Difficulty.HARD),
        (20, Difficulty.EXPERT),
    ])
    def test_level_to_difficulty(self, level, expected):
        assert level_to_difficulty(level) == expected
