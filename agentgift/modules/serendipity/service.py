from __future__ import annotations

import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from agentgift.modules.access.tiers import FREE_AGENT
from agentgift.modules.gamification.service import GamificationService
from agentgift.modules.users.models import User
from agentgift.modules.users.service import UsersService
from .catalog import generate_affirmations, generate_gift_suggestion
from .models import SerendipitySession
from .schemas import RevealRequest, RevealResponse, SaveResponse


logger = logging.getLogger(__name__)

FREE_DAILY_REVEALS = 1
REVEAL_XP = 2
SAVE_XP = 5
FIRST_REVEAL_BADGE = "first-reveal"
SAVE_MESSAGES = {
    "save_vault": "Gift saved to your vault!",
    "send_friend": "Gift shared with your friend!",
}


class DailyLimitReached(Exception):
    pass


class SerendipityService:
    def __init__(self, db: Session):
        self.db = db
        self.users = UsersService(db)

    @staticmethod
    def _reveals_today(user: User, today: date) -> int:
        if user.serendipity_usage_date != today:
            return 0
        return user.serendipity_used_today or 0

    def reveal(self, user: User, data: RevealRequest, today: date | None = None) -> RevealResponse:
        today = today or date.today()
        used = self._reveals_today(user, today)
        if user.tier == FREE_AGENT and used >= FREE_DAILY_REVEALS:
            raise DailyLimitReached("Daily limit reached. Upgrade to Pro for unlimited revelations.")

        affirmations = generate_affirmations(data.emotional_state, data.occasion_type)
        suggestion = generate_gift_suggestion(
            data.occasion_type,
            data.emotional_state,
            data.recent_life_event,
            data.gift_frequency,
            data.preferred_format,
        )
        revelation = SerendipitySession(
            user_id=user.id,
            occasion_type=data.occasion_type,
            emotional_state=data.emotional_state,
            recent_life_event=data.recent_life_event,
            gift_frequency=data.gift_frequency,
            preferred_format=data.preferred_format,
            gift_name=suggestion.gift_name,
            gift_reasoning=suggestion.reasoning,
            emotional_benefit=suggestion.emotional_benefit,
            confidence_score=suggestion.confidence,
            affirmations=[a.model_dump() for a in affirmations],
        )
        self.db.add(revelation)
        user.serendipity_used_today = used + 1
        user.serendipity_usage_date = today
        self.db.add(user)
        if user.tier != FREE_AGENT:
            self.users.award_xp(user, REVEAL_XP, "Serendipity revelation completed", commit=False)
            GamificationService(self.db).award_badge(user, FIRST_REVEAL_BADGE, create_missing=True, commit=False)
        self.db.commit()
        self.db.refresh(revelation)
        logger.info("Serendipity reveal %s for %s (%s)", revelation.id, user.id, suggestion.gift_name)
        return RevealResponse(
            success=True,
            revelation_id=revelation.id,
            affirmations=affirmations,
            gift_suggestion=suggestion,
        )

    def list_sessions(self, user: User, limit: int = 50) -> list[SerendipitySession]:
        stmt = (
            select(SerendipitySession)
            .where(SerendipitySession.user_id == user.id)
            .order_by(SerendipitySession.created_at.desc())
            .limit(limit)
        )
        return list(self.db.scalars(stmt))

    def save(self, user: User, session_id: str, action: str = "save_vault") -> SaveResponse:
        revelation = self.db.get(SerendipitySession, session_id)
        if revelation is None or revelation.user_id != user.id:
            raise LookupError("Revelation not found")

        revelation.is_saved = revelation.is_saved or action == "save_vault"
        revelation.last_action = action
        self.db.add(revelation)
        xp_awarded = 0
        if user.tier != FREE_AGENT:
            reason = "Saved serendipity gift to vault" if action == "save_vault" else "Shared serendipity gift with friend"
            xp_awarded = self.users.award_xp(user, SAVE_XP, reason, commit=False)
        self.db.commit()
        if action == "send_friend" and user.tier != FREE_AGENT:
            GamificationService(self.db).award_badge(user, "soul-gifter", create_missing=True)
        return SaveResponse(
            success=True,
            xp_awarded=xp_awarded,
            message=SAVE_MESSAGES.get(action, "Gift saved!"),
        )
