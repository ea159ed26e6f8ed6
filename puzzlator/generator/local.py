"""
Local Generation - Build generated puzzles from the kernels, no client needed.

Used as the fallback when the completion client is missing or fails, and
by the CLI. Output uses the same exchange layout as client-generated
puzzles, so it passes the same validators.
"""

from __future__ import annotations
from datetime import datetime, timezone
from typing import Any
import random
import time

from ..engine_core import Difficulty
from ..errors import GenerationError
from ..puzzles.registry import PuzzleKind
from ..puzzles.sudoku import ConstraintGrid
from ..puzzles.spatial import ShapeFitEngine
from ..puzzles.pattern import SequenceEngine, PatternType, Rule, RuleType, Operation, describe_rule
from .models import GenerationRequest, GeneratedPuzzle

ESTIMATED_TIME = {
    PuzzleKind.SUDOKU: {Difficulty.EASY: 120, Difficulty.MEDIUM: 240, Difficulty.HARD: 360, Difficulty.EXPERT: 480},
    PuzzleKind.PATTERN: {Difficulty.EASY: 60, Difficulty.MEDIUM: 120, Difficulty.HARD: 180, Difficulty.EXPERT: 240},
    PuzzleKind.SPATIAL: {Difficulty.EASY: 90, Difficulty.MEDIUM: 180, Difficulty.HARD: 300, Difficulty.EXPERT: 420},
}

DIFFICULTY_SCORE = {
    Difficulty.EASY: 2.5,
    Difficulty.MEDIUM: 5,
    Difficulty.HARD: 7.5,
    Difficulty.EXPERT: 9,
}

SUDOKU_TECHNIQUES = {
    Difficulty.EASY: ["scanning", "single candidates"],
    Difficulty.MEDIUM: ["scanning", "single candidates", "hidden singles"],
    Difficulty.HARD: ["scanning", "single candidates", "hidden singles", "naked pairs"],
    Difficulty.EXPERT: ["scanning", "single candidates", "hidden singles", "naked pairs", "pointing pairs"],
}


def generate_local(request: GenerationRequest, rng: random.Random | None = None) -> GeneratedPuzzle:
    """Generate a puzzle for request using the matching kernel."""
    rng = rng or random.Random()
    started = time.perf_counter()

    if request.kind == PuzzleKind.SUDOKU:
        puzzle, solution, hints, extra = _local_sudoku(request.difficulty, rng)
    elif request.kind == PuzzleKind.PATTERN:
        puzzle, solution, hints, extra = _local_pattern(request.difficulty, request.subtype, rng)
    elif request.kind == PuzzleKind.SPATIAL:
        puzzle, solution, hints, extra = _local_spatial(request.difficulty, rng)
    else:
        raise GenerationError(f"Local generation not implemented for {request.kind}")

    metadata = {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "generation_time_ms": int((time.perf_counter() - started) * 1000),
        "model": "local",
        "generated_locally": True,
        "estimated_time": ESTIMATED_TIME[request.kind][request.difficulty],
        "difficulty_score": DIFFICULTY_SCORE[request.difficulty],
        **extra,
    }

    return GeneratedPuzzle(
        kind=request.kind,
        difficulty=request.difficulty,
        puzzle=puzzle,
        solution=solution,
        hints=hints,
        metadata=metadata,
    )


# =============================================================================
# Sudoku
# =============================================================================

def _local_sudoku(difficulty: Difficulty, rng: random.Random):
    sudoku = ConstraintGrid(difficulty, rng=rng)
    grid = [
        [cell.value if cell.locked else None for cell in row]
        for row in sudoku.state.grid
    ]
    clues = sum(1 for row in grid for value in row if value is not None)

    puzzle = {"grid": grid, "difficulty": difficulty.value, "clues": clues}
    solution = {"grid": sudoku.solution}
    extra = {"techniques": list(SUDOKU_TECHNIQUES[difficulty])}
    return puzzle, solution, sudoku_hints(grid), extra


def sudoku_hints(grid: list[list[int | None]]) -> list[dict[str, Any]]:
    """A row with one blank, then a column with one or two blanks."""
    hints = []

    for i, row in enumerate(grid):
        if sum(1 for value in row if value is None) == 1:
            hints.append({
                "level": "basic",
                "text": f"Look at row {i + 1}. Which number is missing?",
                "target": f"row-{i + 1}",
            })
            break

    for j in range(len(grid[0]) if grid else 0):
        blanks = sum(1 for row in grid if row[j] is None)
        if blanks in (1, 2):
            hints.append({
                "level": "intermediate",
                "text": f"Check column {j + 1}. What numbers are already there?",
                "target": f"col-{j + 1}",
            })
            break

    return hints


# =============================================================================
# Pattern
# =============================================================================

def describe_rule_short(rule: Rule) -> str:
    """Compact rule label, e.g. "add 3" or "alternating"."""
    if rule.type in {RuleType.ARITHMETIC, RuleType.GEOMETRIC} and rule.operation:
        if rule.operation == Operation.MULTIPLY:
            return f"multiply by {rule.value}"
        if rule.operation == Operation.DIVIDE:
            return f"divide by {rule.value}"
        return f"{rule.operation.value} {rule.value}"
    return rule.type.value


def _local_pattern(difficulty: Difficulty, subtype: str | None, rng: random.Random):
    try:
        pattern_type = PatternType(subtype or PatternType.NUMERIC.value)
    except ValueError as e:
        raise GenerationError(f"Unknown pattern subtype: {subtype}") from e

    engine = SequenceEngine(difficulty, pattern_type=pattern_type, rng=rng)
    rule = engine.state.rules[0]
    gap = rng.choice(engine.state.hidden_indices)

    sequence = list(engine.state.pattern)
    answer = sequence[gap]
    sequence[gap] = None

    description = describe_rule(rule)
    puzzle = {
        "sequence": sequence,
        "type": pattern_type.value,
        "rule": describe_rule_short(rule),
    }
    solution = {
        "answer": answer,
        "explanation": description[0].upper() + description[1:],
    }
    hints = [
        {"level": "basic", "text": "Look at the relationship between consecutive elements"},
        {"level": "intermediate", "text": f"Think about it: {description}"},
    ]
    return puzzle, solution, hints, {"category": rule.type.value}


# =============================================================================
# Spatial
# =============================================================================

def _local_spatial(difficulty: Difficulty, rng: random.Random):
    engine = ShapeFitEngine(difficulty, rng=rng, verify_packing=True)
    placements = engine.find_solution()
    if placements is None:
        raise GenerationError("Generated shapes could not be packed", context={"difficulty": difficulty.value})

    shapes = engine.state.shapes_to_place
    index_of = {shape.id: i for i, shape in enumerate(shapes)}
    size = engine.state.grid_size

    puzzle = {
        "shapes": [
            {
                "id": shape.id,
                "blocks": [[b.x, b.y] for b in shape.blocks],
                "color": shape.color,
            }
            for shape in shapes
        ],
        "grid": {"width": size, "height": size},
        "allow_rotation": engine.state.allow_rotation,
        "difficulty": difficulty.value,
        "objective": "fill",
    }
    solution = {
        "placements": [
            {
                "shape": index_of[p.shape.id],
                "position": {"x": p.x, "y": p.y},
                "rotation": p.rotation,
            }
            for p in placements
        ],
        "filled": sum(shape.size for shape in shapes),
    }

    rotations = sum(1 for p in placements if p.rotation)
    hints = [{"level": "basic", "text": "Start with the largest shape"}]
    if rotations:
        hints.append({"level": "intermediate", "text": "Some shapes need to be rotated"})

    return puzzle, solution, hints, {"rotations_required": rotations}
