"""
Pattern - Rule-governed sequence puzzle.
"""

from .rules import (
    PatternItem,
    PatternType,
    RuleType,
    Operation,
    Rule,
    apply_rule,
    apply_fibonacci_rule,
    apply_alternating_rule,
    build_rules,
    build_sequence,
    describe_rule,
)
from .state import HintType, PatternHint, PatternState, PatternSnapshot
from .engine import SequenceEngine

__all__ = [
    "PatternItem",
    "PatternType",
    "RuleType",
    "Operation",
    "Rule",
    "apply_rule",
    "apply_fibonacci_rule",
    "apply_alternating_rule",
    "build_rules",
    "build_sequence",
    "describe_rule",
    "HintType",
    "PatternHint",
    "PatternState",
    "PatternSnapshot",
    "SequenceEngine",
]
