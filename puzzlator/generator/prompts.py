"""
Generation Prompts - Prompts for completion-based puzzle generation.

One system/user prompt pair per puzzle kind. User prompts describe the
exact JSON layout expected back (the GeneratedPuzzle exchange form).
Placeholders are {difficulty} and {subtype}; they are substituted with
str.replace because the templates contain literal JSON braces.
"""

from __future__ import annotations
from dataclasses import dataclass

from ..puzzles.registry import PuzzleKind
from .models import GenerationRequest


@dataclass
class PromptTemplates:
    """
    Collection of prompts for puzzle generation.

    Each kind has:
    - A system prompt with the generation rules and difficulty guidelines
    - A user prompt with the output format
    """

    @staticmethod
    def sudoku_system() -> str:
        return """
You are an expert Sudoku puzzle generator. Generate 4x4 Sudoku puzzles that are:
1. Valid (each row, column, and 2x2 box contains numbers 1-4 exactly once)
2. Have a unique solution
3. Appropriate for the requested difficulty level
4. Solvable using logical deduction without guessing

Difficulty guidelines:
- Easy: 8-10 given numbers, solvable with basic scanning
- Medium: 6-8 given numbers, requires some logic
- Hard: 5-6 given numbers, requires advanced techniques
- Expert: 4-5 given numbers, requires complex logic chains

Always return a JSON object with the puzzle grid, solution grid, and metadata.
"""

    @staticmethod
    def sudoku_user() -> str:
        return """
Generate a {difficulty} 4x4 Sudoku puzzle. Use null for empty cells.

Output as JSON:
{
    "puzzle": {"grid": [[1, null, 3, null], ...], "difficulty": "{difficulty}", "clues": number},
    "solution": {"grid": [[1, 2, 3, 4], ...]},
    "metadata": {"estimated_time": seconds, "techniques": ["string"], "difficulty_score": number},
    "hints": [{"level": "basic", "text": "string", "target": "row-1"}]
}
"""

    @staticmethod
    def pattern_system() -> str:
        return """
You are an expert pattern puzzle generator. Create pattern recognition puzzles that:
1. Have a clear, logical rule
2. Are appropriate for the difficulty level
3. Have exactly one correct answer

Pattern types:
- Numeric: arithmetic sequences, geometric sequences, Fibonacci-like
- Shapes: repeating cycles of shapes
- Colors: repeating cycles of colors
- Mixed: combining multiple pattern types
"""

    @staticmethod
    def pattern_user() -> str:
        return """
Generate a {difficulty} pattern puzzle of type: {subtype}.

Output as JSON:
{
    "puzzle": {"sequence": [array with exactly one null], "type": "{subtype}", "rule": "string"},
    "solution": {"answer": value, "explanation": "string"},
    "metadata": {"category": "string"},
    "hints": [{"level": "basic", "text": "string"}]
}
"""

    @staticmethod
    def spatial_system() -> str:
        return """
You are an expert spatial puzzle generator. Create shape-fitting puzzles that:
1. Use tetromino-like shapes given as block coordinates
2. Fit inside the grid without overlapping
3. Are solvable with the given shapes
4. Test spatial reasoning and rotation skills

Difficulty guidelines:
- Easy: 2-3 simple shapes, no rotation, 4x4 grid
- Medium: 3-4 tetrominoes, no rotation, 5x5 grid
- Hard: 4-5 shapes, rotation allowed, 6x6 grid
- Expert: 5-7 shapes including complex ones, rotation allowed, 8x8 grid
"""

    @staticmethod
    def spatial_user() -> str:
        return """
Generate a {difficulty} spatial puzzle.

Output as JSON:
{
    "puzzle": {
        "shapes": [{"id": "shape-0", "blocks": [[0, 0], [1, 0]], "color": "#FF6B6B"}],
        "grid": {"width": number, "height": number},
        "difficulty": "{difficulty}",
        "objective": "fill"
    },
    "solution": {
        "placements": [{"shape": 0, "position": {"x": 0, "y": 0}, "rotation": 0}],
        "filled": number
    },
    "metadata": {"estimated_time": seconds, "rotations_required": number},
    "hints": [{"level": "basic", "text": "string"}]
}
"""


TEMPLATES = {
    PuzzleKind.SUDOKU: (PromptTemplates.sudoku_system, PromptTemplates.sudoku_user),
    PuzzleKind.PATTERN: (PromptTemplates.pattern_system, PromptTemplates.pattern_user),
    PuzzleKind.SPATIAL: (PromptTemplates.spatial_system, PromptTemplates.spatial_user),
}


def build_system_prompt(request: GenerationRequest) -> str:
    """System prompt plus player level, performance and constraints."""
    prompt = TEMPLATES[request.kind][0]().strip()

    if request.user_level is not None:
        prompt += f"\n\nThe user is at level {request.user_level}."

    perf = request.previous_performance
    if perf is not None:
        prompt += "\n\nUser performance metrics:"
        prompt += f"\n- Average solving time: {perf.average_time:g} seconds"
        prompt += f"\n- Success rate: {round(perf.success_rate * 100)}%"
        prompt += f"\n- Average hints used: {perf.hints_used:.1f}"

        if perf.success_rate > 0.9 and perf.hints_used < 0.5:
            prompt += "\n\nThe user is performing very well. Consider making the puzzle slightly more challenging."
        elif perf.success_rate < 0.5:
            prompt += "\n\nThe user is struggling. Consider making the puzzle slightly easier."

    if request.constraints:
        prompt += "\n\nAdditional constraints:"
        for key, value in request.constraints.items():
            prompt += f"\n- {key}: {value}"

    return prompt


def build_user_prompt(request: GenerationRequest) -> str:
    prompt = TEMPLATES[request.kind][1]().strip()
    prompt = prompt.replace("{difficulty}", request.difficulty.value)
    return prompt.replace("{subtype}", request.subtype or "numeric")
