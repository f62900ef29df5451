from __future__ import annotations

import io
import logging

import requests
from openai import OpenAIError
from requests import RequestException

from agentgift.core.config import settings
from agentgift.modules.llm import ProviderNotConfigured
from agentgift.modules.llm.openai_provider import build_openai_client

logger = logging.getLogger(__name__)

VOICE_SETTINGS = {"stability": 0.5, "similarity_boost": 0.5}


class VoiceUpstreamError(RuntimeError):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ElevenLabsClient:
    """Text-to-speech through the ElevenLabs REST API."""

    def __init__(self, api_key: str | None = None, base_url: str | None = None, timeout: int | None = None) -> None:
        self.api_key = api_key if api_key is not None else settings.ELEVENLABS_API_KEY
        self.base_url = (base_url or settings.ELEVENLABS_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.ELEVENLABS_TIMEOUT_SECONDS
        self.model_id = settings.ELEVENLABS_MODEL_ID
        self.session = requests.Session()

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def synthesize(self, text: str, voice_id: str) -> bytes:
        if not self.api_key:
            raise ProviderNotConfigured("ElevenLabs API key not configured")
        try:
            response = self.session.post(
                f"{self.base_url}/v1/text-to-speech/{voice_id}",
                json={"text": text, "model_id": self.model_id, "voice_settings": VOICE_SETTINGS},
                headers={"Accept": "audio/mpeg", "xi-api-key": self.api_key},
                timeout=self.timeout,
            )
        except RequestException as exc:
            logger.error("ElevenLabs request failed: %s", exc)
            raise VoiceUpstreamError("Failed to generate speech") from exc
        if not response.ok:
            logger.error("ElevenLabs API error %s: %s", response.status_code, response.text[:500])
            raise VoiceUpstreamError("Failed to generate speech", response.status_code)
        return response.content


class WhisperTranscriber:
    """Speech-to-text through the OpenAI audio transcription endpoint."""

    def __init__(self, api_key: str | None = None) -> None:
        self.api_key = api_key if api_key is not None else settings.whisper_api_key
        self.model = settings.WHISPER_MODEL

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def transcribe(self, filename: str, content: bytes) -> str:
        if not self.api_key:
            raise ProviderNotConfigured("Whisper API key not configured")
        client = build_openai_client(self.api_key)
        buffer = io.BytesIO(content)
        buffer.name = filename or "audio.webm"
        try:
            result = client.audio.transcriptions.create(model=self.model, file=buffer)
        except OpenAIError as exc:
            logger.error("Whisper transcription failed: %s", exc)
            raise VoiceUpstreamError("Failed to transcribe audio") from exc
        return result.text


def get_tts_client() -> ElevenLabsClient:
    return ElevenLabsClient()


def get_transcriber() -> WhisperTranscriber:
    return WhisperTranscriber()
