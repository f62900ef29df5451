from __future__ import annotations

from pydantic import BaseModel


class HealthStatus(BaseModel):
    status: str
    timestamp: str
    version: str
    services: dict[str, str]


class ConfigCheck(BaseModel):
    """Which optional integrations are configured. Values are never included."""

    openai: bool
    whisper: bool
    elevenlabs: bool
    elevenlabs_default_voice: bool
    make_webhook: bool
    discord_webhook: bool
    stripe: bool
    stripe_webhook: bool
    admin_bootstrap: bool
