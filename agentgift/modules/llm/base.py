from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Sequence


class ProviderNotConfigured(RuntimeError):
    """Raised when the selected provider has no credentials."""


class ChatCompletionProvider(ABC):
    """Contract shared by the concierge's chat completion backends."""

    @abstractmethod
    def generate(
        self,
        messages: Sequence[dict[str, Any]],
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Return the assistant reply for a message history."""

    @abstractmethod
    def name(self) -> str:
        """Provider identifier stored with each reply."""
