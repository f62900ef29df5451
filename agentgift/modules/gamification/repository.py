from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from .models import Badge, UserBadge


class GamificationRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_badge(self, slug: str) -> Optional[Badge]:
        return self.db.scalar(select(Badge).where(Badge.slug == slug))

    def list_badges(self) -> list[Badge]:
        return list(self.db.scalars(select(Badge).order_by(Badge.name)))

    def add_badge(self, badge: Badge) -> Badge:
        self.db.add(badge)
        self.db.flush()
        return badge

    def get_user_badge(self, user_id: str, badge_id: str) -> Optional[UserBadge]:
        stmt = select(UserBadge).where(UserBadge.user_id == user_id, UserBadge.badge_id == badge_id)
        return self.db.scalar(stmt)

    def list_user_badges(self, user_id: str) -> list[tuple[UserBadge, Badge]]:
        stmt = (
            select(UserBadge, Badge)
            .join(Badge, Badge.id == UserBadge.badge_id)
            .where(UserBadge.user_id == user_id)
            .order_by(UserBadge.awarded_at)
        )
        return [(ub, b) for ub, b in self.db.execute(stmt).all()]
