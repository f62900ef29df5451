from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from agentgift.core.database import Base, new_id, utcnow


class GhostHuntSession(Base):
    __tablename__ = "ghost_hunt_sessions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("user_profiles.id", ondelete="CASCADE"), index=True
    )
    hunt_name: Mapped[str] = mapped_column(String(150))
    season: Mapped[str] = mapped_column(String(50), index=True)
    user_tier: Mapped[str | None] = mapped_column(String(50), default=None)
    participation_type: Mapped[str | None] = mapped_column(String(50), default=None)
    delivery_medium: Mapped[str | None] = mapped_column(String(50), default=None)
    tone_style: Mapped[str | None] = mapped_column(String(50), default=None)

    current_clue: Mapped[int] = mapped_column(Integer, default=0)
    total_xp: Mapped[int] = mapped_column(Integer, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    completed: Mapped[bool] = mapped_column(Boolean, default=False)
    # Seconds
    time_remaining: Mapped[int] = mapped_column(Integer, default=1200)
    completion_time: Mapped[int | None] = mapped_column(Integer, default=None)
    success_score: Mapped[int | None] = mapped_column(Integer, default=None)

    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class GhostHuntClueAnswer(Base):
    __tablename__ = "ghost_hunt_clue_answers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    session_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("ghost_hunt_sessions.id", ondelete="CASCADE"), index=True
    )
    clue_id: Mapped[str] = mapped_column(String(100))
    answer: Mapped[str] = mapped_column(Text)
    is_correct: Mapped[bool] = mapped_column(Boolean, default=False)
    xp_earned: Mapped[int] = mapped_column(Integer, default=0)
    time_spent: Mapped[int] = mapped_column(Integer, default=0)
    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class GhostHuntLeaderboardEntry(Base):
    __tablename__ = "ghost_hunt_leaderboard"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("user_profiles.id", ondelete="CASCADE"), index=True
    )
    session_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("ghost_hunt_sessions.id", ondelete="CASCADE"), unique=True
    )
    hunt_name: Mapped[str] = mapped_column(String(150))
    season: Mapped[str] = mapped_column(String(50), index=True)
    xp_earned: Mapped[int] = mapped_column(Integer, default=0)
    success_score: Mapped[int | None] = mapped_column(Integer, default=None)
    completion_time: Mapped[int | None] = mapped_column(Integer, default=None)
    badges_earned: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
