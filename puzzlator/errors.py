"""
Puzzlator Error Hierarchy

All custom exceptions inherit from PuzzlatorError so callers can catch
engine failures in one place.

Constraint violations in the Sudoku kernel are NOT exceptions: they are
returned as MoveResult failures because callers branch on them routinely.
Exceptions are reserved for programmer errors (placing without checking,
removing a shape that was never placed) and for broken inputs (corrupt
snapshots, unusable generated puzzles).
"""

from __future__ import annotations
from typing import Any

__all__ = [
    "PuzzlatorError",
    "PlacementError",
    "ShapeNotFoundError",
    "SnapshotError",
    "GenerationError",
    "GeneratedPuzzleInvalid",
    "CompletionError",
    "SessionNotFoundError",
]


class PuzzlatorError(Exception):
    """
    Base exception for all Puzzlator errors.

    Attributes:
        code: Machine-readable error code
        message: Human-readable description
        context: Extra details for debugging
    """
    code: str = "PUZZLATOR_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"[{self.code}] {self.message} ({ctx})"
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


# =============================================================================
# Kernel errors
# =============================================================================


class PlacementError(PuzzlatorError):
    """A shape was placed without a successful can_place_shape() check."""
    code: str = "INVALID_PLACEMENT"


class ShapeNotFoundError(PuzzlatorError):
    """A shape id is not placed (remove) or not in the pool."""
    code: str = "SHAPE_NOT_FOUND"


class SnapshotError(PuzzlatorError):
    """A serialized puzzle string could not be parsed."""
    code: str = "MALFORMED_SNAPSHOT"


# =============================================================================
# Generation errors
# =============================================================================


class GenerationError(PuzzlatorError):
    """Puzzle generation failed and no fallback was available."""
    code: str = "GENERATION_FAILED"


class GeneratedPuzzleInvalid(GenerationError):
    """
    A generated puzzle failed validation.

    Not retried: the same prompt is likely to fail the same way.
    """
    code: str = "INVALID_PUZZLE"

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message, context={"errors": errors or []})
        self.errors = errors or []


class CompletionError(GenerationError):
    """
    The completion client failed.

    status_code mirrors the upstream HTTP status when there is one;
    429 triggers backoff before the next attempt.
    """
    code: str = "COMPLETION_ERROR"

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message, context={"status_code": status_code} if status_code else None)
        self.status_code = status_code


# =============================================================================
# Session errors
# =============================================================================


class SessionNotFoundError(PuzzlatorError):
    """Session does not exist or has expired."""
    code: str = "SESSION_NOT_FOUND"
