from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class XpProgress(BaseModel):
    level: int
    xp: int
    xp_into_level: int
    xp_for_next_level: int
    progress_percent: float


class BadgeRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    slug: str
    name: str
    description: str | None = None
    emoji: str | None = None
    xp_reward: int


class EarnedBadge(BadgeRead):
    awarded_at: datetime


class GamificationProfile(BaseModel):
    user_id: str
    tier: str
    progress: XpProgress
    badges: list[EarnedBadge]


class LeaderboardRow(BaseModel):
    rank: int
    user_id: str
    name: str
    xp: int
    level: int
    tier: str
