"""
Tests for the sequence puzzle kernel.

Tests:
- Rule application helpers
- Sequence generation per type and difficulty
- Answer validation and completion
- Escalating hints
- Scoring, reset and serialization
"""

import random

import pytest

from ..engine_core import Difficulty, ScoreParams
from ..errors import SnapshotError
from ..puzzles.pattern import (
    HintType,
    Operation,
    PatternType,
    Rule,
    RuleType,
    SequenceEngine,
    apply_alternating_rule,
    apply_fibonacci_rule,
    apply_rule,
    build_rules,
)


@pytest.fixture
def engine(clock):
    """Easy numeric sequence 1, 3, 5, 7, 9, 11 with 7 and 11 hidden."""
    engine = SequenceEngine("easy", rng=random.Random(3), clock=clock)
    engine.load_pattern(
        [1, 3, 5, 7, 9, 11],
        [Rule(RuleType.ARITHMETIC, Operation.ADD, 2)],
        hidden_indices=[3, 5],
    )
    return engine


def _engine(difficulty, pattern_type):
    return SequenceEngine(difficulty, pattern_type=pattern_type, rng=random.Random(0))


class TestRules:
    """Tests for the rule helpers."""

    @pytest.mark.parametrize("rule,value,expected", [
        (Rule(RuleType.ARITHMETIC, Operation.ADD, 3), 4, 7),
        (Rule(RuleType.ARITHMETIC, Operation.SUBTRACT, 3), 4, 1),
        (Rule(RuleType.ARITHMETIC, Operation.DIVIDE, 2), 7, 3),
        (Rule(RuleType.GEOMETRIC, Operation.MULTIPLY, 3), 4, 12),
        (Rule(RuleType.GEOMETRIC, Operation.DIVIDE, 2), 9, 4),
        (Rule(RuleType.ARITHMETIC, Operation.ADD, 3), "circle", "circle"),
        (Rule(RuleType.FIBONACCI), 5, 5),
    ])
    def test_apply_rule(self, rule, value, expected):
        assert apply_rule(value, rule) == expected

    def test_fibonacci(self):
        assert apply_fibonacci_rule([1, 1, 2, 3], 4) == 5
        assert apply_fibonacci_rule([1, 1, 2, 3], 2) == 2
        assert apply_fibonacci_rule([1, 1, 2, 3], 0) == 1
        assert apply_fibonacci_rule([], 0) == 1

    def test_alternating(self):
        rule = Rule(RuleType.ALTERNATING, values=["a", "b", "c"])
        assert apply_alternating_rule(4, rule) == "b"
        assert apply_alternating_rule(4, Rule(RuleType.ALTERNATING)) == 4

    def test_advanced_rules(self):
        """Hard patterns carry a second positional rule, except fibonacci."""
        assert [r.type for r in build_rules(PatternType.ARITHMETIC, Difficulty.HARD)] == [
            RuleType.ARITHMETIC, RuleType.CUSTOM,
        ]
        assert [r.type for r in build_rules(PatternType.SHAPES, Difficulty.EXPERT)] == [
            RuleType.ALTERNATING, RuleType.CUSTOM,
        ]
        assert [r.type for r in build_rules(PatternType.NUMERIC, Difficulty.HARD)] == [
            RuleType.FIBONACCI,
        ]


class TestGeneration:
    """Tests for generated sequences."""

    @pytest.mark.parametrize("difficulty,length,hidden", [
        ("easy", 6, 2),
        ("medium", 8, 3),
        ("hard", 10, 4),
        ("expert", 12, 5),
    ])
    def test_length_and_hidden_count(self, difficulty, length, hidden):
        engine = SequenceEngine(difficulty, rng=random.Random(1))
        assert len(engine.state.pattern) == length
        assert len(engine.state.hidden_indices) == hidden
        assert engine.state.hidden_indices == sorted(engine.state.hidden_indices)
        assert min(engine.state.hidden_indices) >= 2

    @pytest.mark.parametrize("difficulty,pattern_type,expected", [
        ("easy", "numeric", [1, 3, 5, 7, 9, 11]),
        ("medium", "arithmetic", [1, 4, 7, 10, 13, 16, 19, 22]),
        ("hard", "numeric", [1, 1, 2, 3, 5, 8, 13, 21, 34, 55]),
        ("easy", "geometric", [1, 2, 4, 8, 16, 32]),
        ("medium", "geometric", [1, 3, 9, 27, 81, 243, 729, 2187]),
        ("easy", "shapes", ["circle", "square", "triangle"] * 2),
        ("easy", "colors", ["red", "blue", "green"] * 2),
        ("easy", "mixed", [1, "A", 3, "A", 5, "A"]),
        ("hard", "mixed", [1, "A", 3, "B", 5, "C", 7, "A", 9, "B"]),
    ])
    def test_sequences(self, difficulty, pattern_type, expected):
        assert _engine(difficulty, pattern_type).state.pattern == expected

    def test_visible_pattern_hides_holes(self, engine):
        assert engine.state.visible_pattern() == [1, 3, 5, None, 9, None]

    @pytest.mark.parametrize("hidden", [[1], [6], [0, 3]])
    def test_load_pattern_rejects_bad_hidden(self, engine, hidden):
        with pytest.raises(ValueError):
            engine.load_pattern([1, 2, 3, 4, 5, 6], [Rule(RuleType.ARITHMETIC, Operation.ADD, 1)], hidden_indices=hidden)


class TestAnswers:
    """Tests for validate_answer."""

    def test_correct_answer_reveals(self, engine):
        assert engine.validate_answer(3, 7)
        assert engine.state.revealed_indices == [3]
        assert not engine.is_complete()
        assert engine.get_attempts() == 1
        assert engine.get_mistakes() == 0

    def test_repeat_answer_reveals_once(self, engine):
        engine.validate_answer(3, 7)
        engine.validate_answer(3, 7)
        assert engine.state.revealed_indices == [3]

    def test_wrong_answer_counts_mistake(self, engine):
        assert not engine.validate_answer(5, 10)
        assert engine.get_mistakes() == 1
        assert engine.state.revealed_indices == []

    def test_bool_answer_is_wrong(self, engine):
        """True == 1 in Python, but a bool never matches a number."""
        assert not engine.validate_answer(0, True)
        assert engine.get_mistakes() == 1
        assert engine.validate_answer(0, 1)

    def test_visible_index_does_not_reveal(self, engine):
        """Correctly naming a shown element does nothing to completion."""
        assert engine.validate_answer(0, 1)
        assert engine.state.revealed_indices == []

    def test_completion(self, engine, clock):
        """Revealing every hidden index completes once and stops the timer."""
        engine.start_timer()
        clock.advance(15)
        engine.validate_answer(3, 7)
        engine.validate_answer(5, 11)

        assert engine.is_complete()
        assert engine.state.visible_pattern() == [1, 3, 5, 7, 9, 11]

        clock.advance(60)
        assert not engine.validate_answer(5, 12)
        assert engine.is_complete()
        assert engine.get_elapsed_time() == 15

    def test_index_out_of_range(self, engine):
        with pytest.raises(IndexError):
            engine.validate_answer(6, 1)
        assert engine.get_attempts() == 0

    def test_string_answers(self, clock):
        engine = SequenceEngine("easy", pattern_type="shapes", rng=random.Random(1), clock=clock)
        for index in engine.state.hidden_indices:
            assert engine.validate_answer(index, engine.state.pattern[index])
        assert engine.is_complete()


class TestHints:
    """Tests for escalating hints."""

    def test_pattern_type_hint(self, engine):
        hint = engine.get_hint(3)
        assert hint.type == HintType.PATTERN_TYPE
        assert "numeric" in hint.message

    def test_rule_hint_after_attempt(self, engine):
        engine.validate_answer(3, 8)
        hint = engine.get_hint(3)
        assert hint.type == HintType.RULE
        assert hint.message.endswith("each element increases by a constant value")

    def test_value_hint_after_three_attempts(self, engine):
        for guess in (8, 9, 10):
            engine.validate_answer(3, guess)
        hint = engine.get_hint(3)
        assert hint.type == HintType.VALUE
        assert sorted(hint.possible_values) == [6, 7, 8]

    def test_value_hint_for_shapes(self, clock):
        engine = SequenceEngine("easy", pattern_type="shapes", rng=random.Random(1), clock=clock)
        for _ in range(3):
            engine.validate_answer(2, "hexagon")
        hint = engine.get_hint(2)
        assert sorted(hint.possible_values) == ["circle", "square", "triangle"]

    def test_hints_are_free_until_used(self, engine):
        engine.get_hint(3)
        assert engine.hints_used == 0
        engine.use_hint()
        assert engine.hints_used == 1


class TestScoreResetSerialization:
    """Tests for scoring, reset and snapshots."""

    @pytest.mark.parametrize("params,expected", [
        (ScoreParams(time_elapsed=0, hints_used=0, difficulty=Difficulty.MEDIUM), 1800),
        (ScoreParams(time_elapsed=100, hints_used=1, difficulty=Difficulty.EASY, error_count=2), 600),
        (ScoreParams(time_elapsed=0, hints_used=0, difficulty=Difficulty.EXPERT, error_count=1), 999),
        (ScoreParams(time_elapsed=1000, hints_used=20, difficulty=Difficulty.HARD), 0),
    ])
    def test_score(self, engine, params, expected):
        assert engine.calculate_score(params) == expected

    def test_score_from_counters(self, engine, clock):
        engine.start_timer()
        clock.advance(50)
        engine.validate_answer(3, 8)
        # (1000 - 100 - 50) * 1.0
        assert engine.calculate_score() == 850

    def test_reset_keeps_type(self, clock):
        engine = SequenceEngine("medium", pattern_type="colors", rng=random.Random(2), clock=clock)
        engine.validate_answer(2, "purple")
        engine.use_hint()
        engine.reset()

        assert engine.state.pattern_type == PatternType.COLORS
        assert engine.get_attempts() == 0
        assert engine.get_mistakes() == 0
        assert engine.hints_used == 0

    def test_round_trip(self, engine, clock):
        engine.start_timer()
        engine.validate_answer(3, 7)
        engine.validate_answer(5, 4)
        clock.advance(9)

        restored = SequenceEngine(clock=clock)
        restored.deserialize(engine.serialize())

        assert restored.id == engine.id
        assert restored.state == engine.state
        assert restored.attempts_by_index == {3: 1, 5: 1}
        assert restored.get_mistakes() == 1
        assert restored.get_elapsed_time() == 9

    def test_malformed(self, engine):
        with pytest.raises(SnapshotError):
            engine.deserialize("{}")
