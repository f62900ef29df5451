from __future__ import annotations

import logging
from datetime import datetime, time, timezone

from sqlalchemy.orm import Session

from agentgift.core.database import utcnow
from agentgift.modules.access.tiers import FREE_AGENT
from agentgift.modules.gamification.service import GamificationService
from agentgift.modules.users.models import User
from agentgift.modules.users.service import UsersService
from .models import GhostHuntClueAnswer, GhostHuntLeaderboardEntry, GhostHuntSession
from .repository import GhostHuntRepository
from .schemas import CompleteRequest, HuntLeaderboardRow, StartSessionRequest, SubmitAnswerRequest


logger = logging.getLogger(__name__)


class GhostHuntService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = GhostHuntRepository(db)

    def start_session(self, user: User, data: StartSessionRequest, now: datetime | None = None) -> GhostHuntSession:
        if self.repo.active_session(user.id):
            raise ValueError("You already have an active hunt session")
        now = now or utcnow()
        if user.tier == FREE_AGENT:
            start_of_day = datetime.combine(now.date(), time.min, tzinfo=timezone.utc)
            if self.repo.count_sessions_since(user.id, start_of_day) >= 1:
                raise ValueError("Free tier users can only play one hunt per day")

        session = GhostHuntSession(
            user_id=user.id,
            hunt_name=data.hunt_name,
            season=data.season,
            user_tier=user.tier,
            participation_type=data.participation_type,
            delivery_medium=data.delivery_medium,
            tone_style=data.tone_style,
            start_time=now,
            created_at=now,
        )
        self.db.add(session)
        self.db.commit()
        self.db.refresh(session)
        logger.info("Ghost hunt %s started by %s (%s)", session.id, user.id, session.season)
        return session

    def active_session(self, user: User) -> GhostHuntSession | None:
        return self.repo.active_session(user.id)

    def _owned_session(self, user: User, session_id: str) -> GhostHuntSession:
        session = self.repo.get_session(session_id)
        if session is None or session.user_id != user.id:
            raise LookupError("Hunt session not found")
        return session

    def submit_answer(self, user: User, data: SubmitAnswerRequest) -> tuple[GhostHuntClueAnswer, GhostHuntSession]:
        session = self._owned_session(user, data.session_id)
        if not session.is_active:
            raise ValueError("Hunt session is no longer active")

        answer = GhostHuntClueAnswer(
            session_id=session.id,
            clue_id=data.clue_id,
            answer=data.answer,
            is_correct=data.is_correct,
            xp_earned=data.xp_earned if data.is_correct else 0,
            time_spent=data.time_spent,
        )
        self.db.add(answer)
        session.current_clue = (session.current_clue or 0) + 1
        if data.is_correct:
            session.total_xp = (session.total_xp or 0) + data.xp_earned
        self.db.commit()
        self.db.refresh(answer)
        self.db.refresh(session)
        return answer, session

    def list_answers(self, user: User, session_id: str) -> list[GhostHuntClueAnswer]:
        self._owned_session(user, session_id)
        return self.repo.answers(session_id)

    def complete(self, user: User, data: CompleteRequest) -> tuple[GhostHuntSession, list[str], int]:
        """Close the hunt, grant badges and XP, and record the leaderboard entry."""
        session = self._owned_session(user, data.session_id)
        if not session.is_active:
            raise ValueError("Hunt session already completed")

        session.is_active = False
        session.completed = data.completed
        session.completion_time = data.completion_time
        session.success_score = data.success_score
        session.completed_at = utcnow()

        gamification = GamificationService(self.db)
        awarded = [
            slug
            for slug in dict.fromkeys(data.badges)
            if gamification.award_badge(user, slug, create_missing=True, commit=False)
        ]
        xp = UsersService(self.db).award_xp(
            user, session.total_xp or 0, f"Ghost hunt completed: {session.hunt_name}", commit=False
        )
        self.db.add(
            GhostHuntLeaderboardEntry(
                user_id=user.id,
                session_id=session.id,
                hunt_name=session.hunt_name,
                season=session.season,
                xp_earned=session.total_xp or 0,
                success_score=data.success_score,
                completion_time=data.completion_time,
                badges_earned=len(awarded),
            )
        )
        self.db.commit()
        self.db.refresh(session)
        logger.info("Ghost hunt %s completed by %s (+%s XP, badges=%s)", session.id, user.id, xp, awarded)
        return session, awarded, xp

    def leaderboard(self, season: str | None = None, limit: int = 10) -> list[HuntLeaderboardRow]:
        return [
            HuntLeaderboardRow(
                rank=index,
                user_id=entry.user_id,
                name=u.full_name or u.email.split("@")[0],
                hunt_name=entry.hunt_name,
                season=entry.season,
                xp_earned=entry.xp_earned,
                completion_time=entry.completion_time,
                success_score=entry.success_score,
                badges_earned=entry.badges_earned,
            )
            for index, (entry, u) in enumerate(self.repo.leaderboard(season, limit), start=1)
        ]
