from __future__ import annotations

from typing import List

from pydantic import AnyUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="", case_sensitive=False)

    # Core
    DATABASE_URL: str
    ALLOWED_ORIGINS: str | None = "*"
    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"

    # Auth
    AUTH_TOKEN_SECRET: str
    AUTH_TOKEN_TTL_SECONDS: int = 86400
    AUTH_COOKIE_NAME: str = "agentgift_session"
    AUTH_COOKIE_SECURE: bool = False

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True

    # OpenAI (concierge chat, transcription)
    OPENAI_API_KEY: str | None = None
    OPENAI_BASE_URL: AnyUrl | str | None = None
    OPENAI_ORG: str | None = None
    OPENAI_PROJECT: str | None = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_TEMPERATURE: float = 0.7
    LLM_PROVIDER: str = "openai"
    WHISPER_API_KEY: str | None = None
    WHISPER_MODEL: str = "whisper-1"
    CONCIERGE_MAX_HISTORY_MESSAGES: int = 12

    # ElevenLabs (speech synthesis)
    ELEVENLABS_API_KEY: str | None = None
    ELEVENLABS_BASE_URL: str = "https://api.elevenlabs.io"
    ELEVENLABS_DEFAULT_VOICE_ID: str | None = None
    ELEVENLABS_MODEL_ID: str = "eleven_monolingual_v1"
    ELEVENLABS_TIMEOUT_SECONDS: int = 60

    # Outbound webhooks
    MAKE_WEBHOOK_URL: AnyUrl | str | None = None
    DISCORD_WEBHOOK_URL: AnyUrl | str | None = None
    WEBHOOK_TIMEOUT_SECONDS: int = 10

    # Payments (reported by config-check only)
    STRIPE_SECRET_KEY: str | None = None
    STRIPE_WEBHOOK_SECRET: str | None = None

    # Misc
    DEBUGPY: int | None = None

    # Default administrator bootstrap
    ADMIN_EMAIL: str | None = None
    ADMIN_PASSWORD: str | None = None
    ADMIN_FULL_NAME: str | None = None

    @property
    def cors_origins(self) -> List[str]:
        if not self.ALLOWED_ORIGINS:
            return []
        raw = self.ALLOWED_ORIGINS
        if isinstance(raw, str):
            return [o.strip() for o in raw.split(",") if o.strip()]
        return list(raw)

    @property
    def is_dev(self) -> bool:
        try:
            return bool(int(self.DEBUGPY or 0))
        except (TypeError, ValueError):
            return False

    @property
    def whisper_api_key(self) -> str | None:
        return self.WHISPER_API_KEY or self.OPENAI_API_KEY


settings = Settings()  # type: ignore[call-arg]
