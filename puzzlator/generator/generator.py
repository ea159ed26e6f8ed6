"""
Puzzle Generator - Generated puzzles with caching, retries and local fallback.

The generator:
1. Returns a cached puzzle for the same request if one is fresh
2. Asks the completion client, up to max_retries times
   - rate limits (429) back off exponentially, capped at 10 seconds
     (no wait after the final attempt)
   - a response that fails validation is NOT retried
3. Validates and caches a good response
4. Falls back to local (kernel-based) generation
5. Raises the last error if nothing worked

The client is optional: without one, every request goes straight to the
local fallback.
"""

from __future__ import annotations
from datetime import datetime, timezone
from typing import Callable
import json
import logging
import random
import time

from pydantic import ValidationError

from ..config import Settings
from ..errors import CompletionError, GeneratedPuzzleInvalid, GenerationError
from .cache import PuzzleCache
from .client import CompletionClient
from .local import generate_local
from .models import GenerationRequest, GeneratedPuzzle
from .prompts import build_system_prompt, build_user_prompt
from .validators import validate_generated

logger = logging.getLogger(__name__)

RATE_LIMIT_STATUS = 429
BASE_BACKOFF_SECONDS = 1.0
MAX_BACKOFF_SECONDS = 10.0


class PuzzleGenerator:
    """
    Generates puzzles from a completion client, with local fallback.

    Usage:
        generator = PuzzleGenerator(Settings.from_env(), client=my_client)
        puzzle = generator.generate(GenerationRequest(kind="sudoku4x4", difficulty="hard"))
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: CompletionClient | None = None,
        cache: PuzzleCache | None = None,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
        rng: random.Random | None = None,
        fallback_enabled: bool = True,
    ):
        self.settings = settings or Settings()
        self.client = client
        self.clock = clock
        self.sleep = sleep
        self.rng = rng or random.Random()
        self.fallback_enabled = fallback_enabled
        self.max_retries = self.settings.max_retries

        if cache is None and self.settings.cache_size > 0:
            cache = PuzzleCache(
                max_entries=self.settings.cache_size,
                ttl_seconds=self.settings.cache_ttl_seconds,
                clock=clock,
            )
        self.cache = cache

    def generate(self, request: GenerationRequest) -> GeneratedPuzzle:
        """
        Generate a puzzle for request.

        Raises:
            GenerationError (or a subclass) when the client and the
            fallback both fail, or the fallback is disabled.
        """
        cache_key = request.cache_key()

        if request.use_cache and self.cache is not None:
            cached = self.cache.get(cache_key)
            if cached is not None:
                logger.debug("Cache hit for %s", cache_key)
                return cached

        last_error: GenerationError | None = None

        if self.client is not None:
            for attempt in range(self.max_retries):
                try:
                    puzzle = self._generate_with_client(request)

                    validation = validate_generated(puzzle)
                    if not validation.valid:
                        raise GeneratedPuzzleInvalid("Invalid puzzle generated", validation.errors)
                    for warning in validation.warnings:
                        logger.info("Generated puzzle %s: %s", puzzle.id, warning)

                    if self.cache is not None:
                        self.cache.put(cache_key, puzzle)
                    return puzzle

                except GeneratedPuzzleInvalid as e:
                    last_error = e
                    logger.warning("Generated puzzle rejected: %s", e)
                    break

                except CompletionError as e:
                    last_error = e
                    if e.status_code == RATE_LIMIT_STATUS and attempt + 1 < self.max_retries:
                        delay = min(BASE_BACKOFF_SECONDS * 2 ** attempt, MAX_BACKOFF_SECONDS)
                        logger.warning("Rate limited, retrying in %.1fs", delay)
                        self.sleep(delay)
                        continue
                    logger.warning("Completion attempt %d/%d failed: %s", attempt + 1, self.max_retries, e)

        if request.allow_fallback and self.fallback_enabled:
            try:
                puzzle = generate_local(request, self.rng)
                logger.info("Generated %s puzzle locally", request.kind.value)
                return puzzle
            except GenerationError as e:
                logger.error("Local generation failed: %s", e)
                last_error = last_error or e

        raise last_error or GenerationError("Failed to generate puzzle")

    def pregenerate(self, requests: list[GenerationRequest]) -> list[GeneratedPuzzle]:
        """Generate (and cache) puzzles ahead of time."""
        return [
            self.generate(request.model_copy(update={"use_cache": True}))
            for request in requests
        ]

    def clear_cache(self):
        if self.cache is not None:
            self.cache.clear()

    def cache_size(self) -> int:
        return len(self.cache) if self.cache is not None else 0

    def _generate_with_client(self, request: GenerationRequest) -> GeneratedPuzzle:
        started = self.clock()
        response = self.client.complete(
            build_system_prompt(request),
            build_user_prompt(request),
        )
        if not response:
            raise CompletionError("Empty response from completion client")

        try:
            parsed = json.loads(response)
        except json.JSONDecodeError as e:
            raise GeneratedPuzzleInvalid("Invalid response format", [str(e)]) from e
        if not isinstance(parsed, dict):
            raise GeneratedPuzzleInvalid("Invalid response format", ["response is not a JSON object"])

        extra = parsed.get("metadata")
        metadata = {
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "generation_time_ms": int((self.clock() - started) * 1000),
            "model": self.client.name,
            **(extra if isinstance(extra, dict) else {}),
        }

        try:
            return GeneratedPuzzle(
                kind=request.kind,
                difficulty=request.difficulty,
                puzzle=parsed.get("puzzle") or {},
                solution=parsed.get("solution") or {},
                hints=parsed.get("hints") or [],
                metadata=metadata,
            )
        except ValidationError as e:
            raise GeneratedPuzzleInvalid(
                "Invalid response format",
                [err["msg"] for err in e.errors()],
            ) from e
