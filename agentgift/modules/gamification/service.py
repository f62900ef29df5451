from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from agentgift.modules.users.models import User
from agentgift.modules.users.repository import UsersRepository
from agentgift.modules.users.service import XP_PER_LEVEL, UsersService, level_for_xp
from .models import Badge, UserBadge
from .repository import GamificationRepository
from .schemas import EarnedBadge, GamificationProfile, LeaderboardRow, XpProgress


logger = logging.getLogger(__name__)


def xp_progress(xp: int) -> XpProgress:
    xp = max(0, xp or 0)
    level = level_for_xp(xp)
    into_level = xp - (level - 1) * XP_PER_LEVEL
    return XpProgress(
        level=level,
        xp=xp,
        xp_into_level=into_level,
        xp_for_next_level=XP_PER_LEVEL - into_level,
        progress_percent=round(into_level * 100 / XP_PER_LEVEL, 1),
    )


def _badge_name(slug: str) -> str:
    return slug.replace("-", " ").replace("_", " ").title()


class GamificationService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = GamificationRepository(db)
        self.users = UsersService(db)

    def profile(self, user: User) -> GamificationProfile:
        earned = [
            EarnedBadge(
                slug=badge.slug,
                name=badge.name,
                description=badge.description,
                emoji=badge.emoji,
                xp_reward=badge.xp_reward,
                awarded_at=user_badge.awarded_at,
            )
            for user_badge, badge in self.repo.list_user_badges(user.id)
        ]
        return GamificationProfile(user_id=user.id, tier=user.tier, progress=xp_progress(user.xp), badges=earned)

    def award_badge(self, user: User, slug: str, *, create_missing: bool = False, commit: bool = True) -> bool:
        """Grant a badge once. Returns False when the user already holds it."""
        badge = self.repo.get_badge(slug)
        if badge is None:
            if not create_missing:
                raise LookupError(f"Badge '{slug}' not found")
            badge = self.repo.add_badge(Badge(slug=slug, name=_badge_name(slug)))
        if self.repo.get_user_badge(user.id, badge.id):
            return False

        self.db.add(UserBadge(user_id=user.id, badge_id=badge.id))
        badges = list(user.badges or [])
        if slug not in badges:
            badges.append(slug)
            user.badges = badges
        self.users.award_xp(user, badge.xp_reward, f"Badge earned: {badge.name}", commit=False)
        if commit:
            try:
                self.db.commit()
            except IntegrityError:
                # Concurrent award of the same badge.
                self.db.rollback()
                return False
            self.db.refresh(user)
        logger.info("Badge %s awarded to %s", slug, user.id)
        return True

    def leaderboard(self, limit: int = 10) -> list[LeaderboardRow]:
        users = UsersRepository(self.db).top_by_xp(limit)
        return [
            LeaderboardRow(
                rank=index,
                user_id=u.id,
                name=u.full_name or u.email.split("@")[0],
                xp=u.xp or 0,
                level=u.level or 1,
                tier=u.tier,
            )
            for index, u in enumerate(users, start=1)
        ]
