from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class RevealRequest(BaseModel):
    occasion_type: str = Field(min_length=1, max_length=100)
    emotional_state: str = Field(min_length=1, max_length=100)
    recent_life_event: str | None = Field(default=None, max_length=500)
    gift_frequency: str | None = None
    preferred_format: str | None = None


class Affirmation(BaseModel):
    text: str
    icon: str


class GiftSuggestion(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    gift_name: str
    reasoning: str
    emotional_benefit: str
    gift_url: str
    price: str
    category: str
    confidence: int


class RevealResponse(BaseModel):
    success: bool
    revelation_id: str
    affirmations: list[Affirmation]
    gift_suggestion: GiftSuggestion


class SaveRequest(BaseModel):
    action: Literal["save_vault", "send_friend"] = "save_vault"


class SaveResponse(BaseModel):
    success: bool
    xp_awarded: int
    message: str


class SerendipitySessionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    occasion_type: str
    emotional_state: str
    gift_name: str
    gift_reasoning: str | None = None
    emotional_benefit: str | None = None
    confidence_score: int
    affirmations: list[Affirmation]
    is_saved: bool
    last_action: str | None = None
    created_at: datetime
