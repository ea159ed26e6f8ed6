"""
Generator - Produces ready-made puzzles in exchange (JSON) form.

The generator:
1. Takes a GenerationRequest (kind, difficulty, player context)
2. Asks a pluggable completion client for a puzzle
3. Validates the result and caches it by request
4. Falls back to the local kernels when the client is missing or fails
"""

from .models import GenerationRequest, GeneratedPuzzle, PerformanceMetrics
from .cache import PuzzleCache, CacheEntry
from .validators import ValidationResult, validate_generated
from .local import generate_local
from .prompts import PromptTemplates, build_system_prompt, build_user_prompt
from .client import CompletionClient
from .generator import PuzzleGenerator

__all__ = [
    "GenerationRequest",
    "GeneratedPuzzle",
    "PerformanceMetrics",
    "PuzzleCache",
    "CacheEntry",
    "ValidationResult",
    "validate_generated",
    "generate_local",
    "PromptTemplates",
    "build_system_prompt",
    "build_user_prompt",
    "CompletionClient",
    "PuzzleGenerator",
]
