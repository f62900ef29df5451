from __future__ import annotations

import logging
from typing import Any, Sequence

from openai import OpenAI, OpenAIError

from agentgift.core.config import settings

from .base import ChatCompletionProvider, ProviderNotConfigured

logger = logging.getLogger(__name__)


def build_openai_client(api_key: str | None = None) -> OpenAI:
    key = api_key or settings.OPENAI_API_KEY
    if not key:
        raise ProviderNotConfigured("OPENAI_API_KEY is not configured")
    return OpenAI(
        api_key=key,
        base_url=str(settings.OPENAI_BASE_URL) if settings.OPENAI_BASE_URL else None,
        organization=settings.OPENAI_ORG,
        project=settings.OPENAI_PROJECT,
    )


class OpenAIChatProvider(ChatCompletionProvider):
    """Gift concierge replies through the OpenAI Chat Completions API."""

    def __init__(self, client: OpenAI | None = None) -> None:
        self._client = client or build_openai_client()
        self._model = settings.OPENAI_MODEL or "gpt-4o-mini"

    def name(self) -> str:
        return f"openai:{self._model}"

    def generate(
        self,
        messages: Sequence[dict[str, Any]],
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        payload: dict[str, Any] = {
            "model": self._model,
            "messages": list(messages),
            "temperature": settings.OPENAI_TEMPERATURE if temperature is None else temperature,
        }
        if max_tokens:
            payload["max_tokens"] = max_tokens

        try:
            response = self._client.chat.completions.create(**payload)
        except OpenAIError:
            logger.exception("OpenAI chat completion failed (model=%s)", self._model)
            raise

        return response.choices[0].message.content or ""
