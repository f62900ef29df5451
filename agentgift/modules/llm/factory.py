from __future__ import annotations

import logging
from functools import lru_cache

from agentgift.core.config import settings

from .base import ChatCompletionProvider, ProviderNotConfigured
from .openai_provider import OpenAIChatProvider

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _cached_provider(provider_name: str) -> ChatCompletionProvider:
    logger.info("Initialising chat completion provider: %s", provider_name)
    if provider_name in {"openai", "gpt", "openai_chat"}:
        return OpenAIChatProvider()
    raise ValueError(f"Unsupported LLM provider: {provider_name}")


def get_chat_provider() -> ChatCompletionProvider:
    """Return the configured provider; raises ProviderNotConfigured without credentials."""
    if not settings.OPENAI_API_KEY:
        raise ProviderNotConfigured("OPENAI_API_KEY is not configured")
    return _cached_provider((settings.LLM_PROVIDER or "openai").lower())
