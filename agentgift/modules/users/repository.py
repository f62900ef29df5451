from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .models import CreditTransaction, User, XpLog


class UsersRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: str) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(func.lower(User.email) == email.strip().lower())
        return self.db.scalar(stmt)

    def list_by_tiers(self, tiers: Sequence[str], search: str | None = None, limit: int = 50) -> list[User]:
        stmt = select(User).where(User.tier.in_(list(tiers)), User.is_active.is_(True))
        if search:
            stmt = stmt.where(func.lower(User.email).contains(search.strip().lower()))
        stmt = stmt.order_by(User.email).limit(limit)
        return list(self.db.scalars(stmt))

    def top_by_xp(self, limit: int = 10) -> list[User]:
        stmt = (
            select(User)
            .where(User.is_active.is_(True))
            .order_by(User.xp.desc(), User.created_at.asc())
            .limit(limit)
        )
        return list(self.db.scalars(stmt))

    def count_by_tier(self) -> dict[str, int]:
        stmt = select(User.tier, func.count(User.id)).group_by(User.tier)
        return {tier: count for tier, count in self.db.execute(stmt).all()}

    def total_xp(self) -> int:
        return int(self.db.scalar(select(func.coalesce(func.sum(User.xp), 0))) or 0)

    def count_created_since(self, since: datetime) -> int:
        stmt = select(func.count(User.id)).where(User.created_at >= since)
        return int(self.db.scalar(stmt) or 0)

    def create(self, user: User) -> User:
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    # Ledgers --------------------------------------------------------------
    def add_credit_transaction(self, entry: CreditTransaction) -> None:
        self.db.add(entry)

    def add_xp_log(self, entry: XpLog) -> None:
        self.db.add(entry)

    def recent_credit_transactions(self, user_id: str, limit: int = 20) -> list[CreditTransaction]:
        stmt = (
            select(CreditTransaction)
            .where(CreditTransaction.user_id == user_id)
            .order_by(CreditTransaction.created_at.desc())
            .limit(limit)
        )
        return list(self.db.scalars(stmt))

    def total_credits_spent(self) -> int:
        stmt = select(func.coalesce(func.sum(CreditTransaction.amount), 0)).where(CreditTransaction.amount < 0)
        return abs(int(self.db.scalar(stmt) or 0))
