"""
Configuration - Environment-driven settings.

All settings come from PUZZLATOR_* environment variables with sane
defaults, so the engine runs with no configuration at all.

    PUZZLATOR_ENV               development | production
    PUZZLATOR_LOG_LEVEL         DEBUG, INFO, WARNING, ...
    PUZZLATOR_CACHE_SIZE        max generated puzzles kept in memory
    PUZZLATOR_CACHE_TTL         seconds a cached puzzle stays fresh
    PUZZLATOR_MAX_RETRIES       completion attempts per generation
    PUZZLATOR_SESSION_MAX_AGE   seconds before an idle session is stale
    PUZZLATOR_VERIFY_PACKING    1 to run the packing search on spatial batches
"""

from __future__ import annotations
from dataclasses import dataclass
import logging
import os

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class Settings:
    """Runtime settings for the engine."""
    env: str = "development"
    log_level: str = "INFO"
    cache_size: int = 100
    cache_ttl_seconds: float = 3600.0
    max_retries: int = 3
    session_max_age_seconds: int = 3600
    verify_packing: bool = False

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from PUZZLATOR_* environment variables."""
        return cls(
            env=os.getenv("PUZZLATOR_ENV", "development"),
            log_level=os.getenv("PUZZLATOR_LOG_LEVEL", "INFO").upper(),
            cache_size=int(os.getenv("PUZZLATOR_CACHE_SIZE", "100")),
            cache_ttl_seconds=float(os.getenv("PUZZLATOR_CACHE_TTL", "3600")),
            max_retries=int(os.getenv("PUZZLATOR_MAX_RETRIES", "3")),
            session_max_age_seconds=int(os.getenv("PUZZLATOR_SESSION_MAX_AGE", "3600")),
            verify_packing=_env_bool("PUZZLATOR_VERIFY_PACKING", False),
        )

    @property
    def is_production(self) -> bool:
        return self.env == "production"


def configure_logging(settings: Settings | None = None):
    """Configure root logging once for command-line use."""
    settings = settings or Settings.from_env()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format=LOG_FORMAT,
    )
