from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from agentgift.modules.users.models import User
from .models import GhostHuntClueAnswer, GhostHuntLeaderboardEntry, GhostHuntSession


class GhostHuntRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_session(self, session_id: str) -> Optional[GhostHuntSession]:
        return self.db.get(GhostHuntSession, session_id)

    def active_session(self, user_id: str) -> Optional[GhostHuntSession]:
        stmt = (
            select(GhostHuntSession)
            .where(GhostHuntSession.user_id == user_id, GhostHuntSession.is_active.is_(True))
            .order_by(GhostHuntSession.created_at.desc())
        )
        return self.db.scalars(stmt).first()

    def count_sessions_since(self, user_id: str, since: datetime) -> int:
        stmt = select(func.count(GhostHuntSession.id)).where(
            GhostHuntSession.user_id == user_id, GhostHuntSession.created_at >= since
        )
        return int(self.db.scalar(stmt) or 0)

    def count_active(self) -> int:
        stmt = select(func.count(GhostHuntSession.id)).where(GhostHuntSession.is_active.is_(True))
        return int(self.db.scalar(stmt) or 0)

    def answers(self, session_id: str) -> list[GhostHuntClueAnswer]:
        stmt = (
            select(GhostHuntClueAnswer)
            .where(GhostHuntClueAnswer.session_id == session_id)
            .order_by(GhostHuntClueAnswer.submitted_at.asc())
        )
        return list(self.db.scalars(stmt))

    def leaderboard(self, season: str | None, limit: int) -> list[tuple[GhostHuntLeaderboardEntry, User]]:
        stmt = select(GhostHuntLeaderboardEntry, User).join(User, User.id == GhostHuntLeaderboardEntry.user_id)
        if season:
            stmt = stmt.where(GhostHuntLeaderboardEntry.season == season)
        stmt = stmt.order_by(
            GhostHuntLeaderboardEntry.xp_earned.desc(),
            GhostHuntLeaderboardEntry.completion_time.asc().nulls_last(),
        ).limit(limit)
        return [(entry, user) for entry, user in self.db.execute(stmt).all()]
