from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelIn(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StartSessionRequest(_CamelIn):
    hunt_name: str = Field(min_length=1, max_length=150)
    season: str = Field(min_length=1, max_length=50)
    participation_type: str | None = None
    delivery_medium: str | None = None
    tone_style: str | None = None


class SubmitAnswerRequest(_CamelIn):
    session_id: str
    clue_id: str
    answer: str = Field(max_length=2000)
    is_correct: bool = False
    xp_earned: int = Field(default=0, ge=0, le=500)
    time_spent: int = Field(default=0, ge=0)


class CompleteRequest(_CamelIn):
    session_id: str
    completed: bool = True
    completion_time: int | None = Field(default=None, ge=0)
    success_score: int | None = Field(default=None, ge=0, le=100)
    badges: list[str] = []


class HuntSessionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    hunt_name: str
    season: str
    participation_type: str | None = None
    delivery_medium: str | None = None
    tone_style: str | None = None
    current_clue: int
    total_xp: int
    is_active: bool
    completed: bool
    time_remaining: int
    completion_time: int | None = None
    success_score: int | None = None
    start_time: datetime
    completed_at: datetime | None = None


class ClueAnswerRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    session_id: str
    clue_id: str
    answer: str
    is_correct: bool
    xp_earned: int
    time_spent: int
    submitted_at: datetime


class SessionEnvelope(BaseModel):
    success: bool = True
    session: HuntSessionRead | None


class AnswerEnvelope(BaseModel):
    success: bool = True
    clue_answer: ClueAnswerRead
    session: HuntSessionRead


class CompleteEnvelope(BaseModel):
    success: bool = True
    session: HuntSessionRead
    badges_awarded: list[str]
    xp_awarded: int


class HuntLeaderboardRow(BaseModel):
    rank: int
    user_id: str
    name: str
    hunt_name: str
    season: str
    xp_earned: int
    completion_time: int | None = None
    success_score: int | None = None
    badges_earned: int
