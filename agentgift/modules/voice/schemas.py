from __future__ import annotations

from pydantic import BaseModel, Field


class SpeechRequest(BaseModel):
    text: str | None = Field(default=None, max_length=5000)
    voice_id: str | None = None


class TranscriptionResponse(BaseModel):
    text: str
    success: bool = True
