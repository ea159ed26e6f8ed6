"""
Completion Client - Interface to a text-completion backend.

The generator only needs "send a system and user prompt, get text back".
Concrete clients wrap whatever API is in use and translate its failures
into CompletionError, carrying the HTTP status when there is one.
"""

from __future__ import annotations
from abc import ABC, abstractmethod


class CompletionClient(ABC):
    """
    Abstract completion backend.

    Implementations must:
    - Return the raw response text (expected to be a JSON object)
    - Raise CompletionError on transport or API failures
    """

    name: str = "completion"

    @abstractmethod
    def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Return the completion text for the prompts."""
        pass
