"""
Pattern Rules - How each element of a sequence follows from the ones before.

Rule kinds:
- arithmetic: value (op) constant, e.g. +3
- geometric: value * constant
- fibonacci: sum of the two previous elements
- alternating: cycle through a fixed list of values
- custom: positional rule carried for harder puzzles; it does not
  change the generated values
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Union

from ...engine_core import Difficulty

PatternItem = Union[int, str]


class PatternType(Enum):
    NUMERIC = "numeric"
    ARITHMETIC = "arithmetic"
    GEOMETRIC = "geometric"
    SHAPES = "shapes"
    COLORS = "colors"
    MIXED = "mixed"


class RuleType(Enum):
    ARITHMETIC = "arithmetic"
    GEOMETRIC = "geometric"
    FIBONACCI = "fibonacci"
    ALTERNATING = "alternating"
    CUSTOM = "custom"


class Operation(Enum):
    ADD = "add"
    SUBTRACT = "subtract"
    MULTIPLY = "multiply"
    DIVIDE = "divide"


@dataclass
class Rule:
    type: RuleType
    operation: Operation | None = None
    value: int | None = None
    values: list[PatternItem] | None = None


SEED = 1

SHAPE_VALUES: list[PatternItem] = ["circle", "square", "triangle"]
COLOR_VALUES: list[PatternItem] = ["red", "blue", "green"]
MIXED_VALUES: list[PatternItem] = ["A", "B", "C"]

ARITHMETIC_STEP = {
    Difficulty.EASY: 2,
    Difficulty.MEDIUM: 3,
    Difficulty.HARD: 5,
    Difficulty.EXPERT: 5,
}


# =============================================================================
# Rule application
# =============================================================================

def apply_rule(value: PatternItem, rule: Rule) -> PatternItem:
    """
    Next value under an arithmetic or geometric rule.

    Non-numeric values and other rule kinds pass through unchanged.
    Division floors.
    """
    if not isinstance(value, int) or rule.operation is None or not rule.value:
        return value

    if rule.type == RuleType.ARITHMETIC:
        if rule.operation == Operation.ADD:
            return value + rule.value
        if rule.operation == Operation.SUBTRACT:
            return value - rule.value
        if rule.operation == Operation.MULTIPLY:
            return value * rule.value
        if rule.operation == Operation.DIVIDE:
            return value // rule.value

    if rule.type == RuleType.GEOMETRIC:
        if rule.operation == Operation.MULTIPLY:
            return value * rule.value
        if rule.operation == Operation.DIVIDE:
            return value // rule.value

    return value


def apply_fibonacci_rule(sequence: list[int], index: int) -> int:
    """
    Fibonacci value at index.

    Indices 0 and 1 return the existing element (or 1). Past the end of
    the sequence, returns the next value after the last two elements.
    """
    if index < 2:
        return sequence[index] if index < len(sequence) else 1
    if index >= len(sequence):
        return sequence[-1] + sequence[-2]
    return sequence[index - 1] + sequence[index - 2]


def apply_alternating_rule(index: int, rule: Rule) -> PatternItem:
    if rule.values:
        return rule.values[index % len(rule.values)]
    return index


def describe_rule(rule: Rule) -> str:
    """Plain-words description used by hints and generated explanations."""
    if rule.type == RuleType.ARITHMETIC:
        return "each element increases by a constant value"
    if rule.type == RuleType.GEOMETRIC:
        return "each element is multiplied by a constant value"
    if rule.type == RuleType.FIBONACCI:
        return "each element is the sum of the two previous elements"
    if rule.type == RuleType.ALTERNATING:
        return "the pattern alternates between specific values"
    return "each element depends on its position"


# =============================================================================
# Generation
# =============================================================================

def build_rules(pattern_type: PatternType, difficulty: Difficulty) -> list[Rule]:
    """Governing rules for a pattern type at a difficulty."""
    rules: list[Rule] = []

    if pattern_type in {PatternType.NUMERIC, PatternType.ARITHMETIC}:
        rules.append(Rule(RuleType.ARITHMETIC, Operation.ADD, ARITHMETIC_STEP[difficulty]))
    elif pattern_type == PatternType.GEOMETRIC:
        step = 2 if difficulty == Difficulty.EASY else 3
        rules.append(Rule(RuleType.GEOMETRIC, Operation.MULTIPLY, step))
    elif pattern_type == PatternType.SHAPES:
        rules.append(Rule(RuleType.ALTERNATING, values=list(SHAPE_VALUES)))
    elif pattern_type == PatternType.COLORS:
        rules.append(Rule(RuleType.ALTERNATING, values=list(COLOR_VALUES)))
    elif pattern_type == PatternType.MIXED:
        rules.append(Rule(RuleType.ARITHMETIC, Operation.ADD, 2))
        if difficulty.is_advanced:
            rules.append(Rule(RuleType.ALTERNATING, values=list(MIXED_VALUES)))

    # Fibonacci replaces everything for hard numeric patterns
    if difficulty.is_advanced and pattern_type == PatternType.NUMERIC:
        rules = [Rule(RuleType.FIBONACCI)]

    if difficulty.is_advanced and len(rules) == 1 and rules[0].type != RuleType.FIBONACCI:
        rules.append(Rule(RuleType.CUSTOM))

    return rules


def _find_rule(rules: list[Rule], rule_type: RuleType) -> Rule | None:
    for rule in rules:
        if rule.type == rule_type:
            return rule
    return None


def build_sequence(pattern_type: PatternType, rules: list[Rule], length: int) -> list[PatternItem]:
    """Generate length elements from the seed by applying rules."""
    primary = rules[0]

    if pattern_type == PatternType.MIXED:
        return _build_mixed(rules, length)

    if primary.type == RuleType.FIBONACCI:
        sequence: list[int] = [SEED, SEED]
        while len(sequence) < length:
            sequence.append(apply_fibonacci_rule(sequence, len(sequence)))
        return list(sequence[:length])

    if primary.type == RuleType.ALTERNATING:
        return [apply_alternating_rule(i, primary) for i in range(length)]

    sequence = []
    current: PatternItem = SEED
    for _ in range(length):
        sequence.append(current)
        current = apply_rule(current, primary)
    return sequence


def _build_mixed(rules: list[Rule], length: int) -> list[PatternItem]:
    """Numbers at even positions, letters at odd positions."""
    numeric = _find_rule(rules, RuleType.ARITHMETIC)
    letters = _find_rule(rules, RuleType.ALTERNATING)

    sequence: list[PatternItem] = []
    for i in range(length):
        if i % 2 == 0:
            if i == 0:
                sequence.append(SEED)
            elif numeric is not None:
                sequence.append(apply_rule(sequence[i - 2], numeric))
            else:
                sequence.append(i + 1)
        elif letters is not None:
            sequence.append(letters.values[(i // 2) % len(letters.values)])
        else:
            sequence.append("A")
    return sequence
