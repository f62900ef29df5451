from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from agentgift.core.database import Base, JSONType, new_id, utcnow


class SerendipitySession(Base):
    __tablename__ = "serendipity_sessions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("user_profiles.id", ondelete="CASCADE"), index=True
    )
    occasion_type: Mapped[str] = mapped_column(String(100))
    emotional_state: Mapped[str] = mapped_column(String(100))
    recent_life_event: Mapped[str | None] = mapped_column(Text, default=None)
    gift_frequency: Mapped[str | None] = mapped_column(String(100), default=None)
    preferred_format: Mapped[str | None] = mapped_column(String(100), default=None)

    gift_name: Mapped[str] = mapped_column(String(200))
    gift_reasoning: Mapped[str | None] = mapped_column(Text, default=None)
    emotional_benefit: Mapped[str | None] = mapped_column(Text, default=None)
    confidence_score: Mapped[int] = mapped_column(Integer, default=0)
    affirmations: Mapped[list] = mapped_column(JSONType, default=list)

    is_saved: Mapped[bool] = mapped_column(Boolean, default=False)
    last_action: Mapped[str | None] = mapped_column(String(50), default=None)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
