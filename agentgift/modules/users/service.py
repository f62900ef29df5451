from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from agentgift.core.security import get_password_hash, verify_password
from agentgift.modules.access.tiers import TIER_LEVELS
from .models import CreditTransaction, User, XpLog
from .repository import UsersRepository
from .schemas import AdminUserUpdate, UserCreate


logger = logging.getLogger(__name__)

XP_PER_LEVEL = 150
# 2 credits spent = 1 XP
CREDITS_PER_XP = 2


def level_for_xp(xp: int) -> int:
    return max(0, xp) // XP_PER_LEVEL + 1


class UsersService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = UsersRepository(db)

    def register_user(self, data: UserCreate, is_admin: bool = False) -> User:
        existing = self.repo.get_by_email(data.email)
        if existing:
            raise ValueError("Email already registered")
        user = User(
            email=data.email.lower(),
            full_name=data.full_name,
            hashed_password=get_password_hash(data.password),
            is_active=True,
            is_admin=is_admin,
            team_id=data.team_id,
            team_name=data.team_name,
        )
        return self.repo.create(user)

    def authenticate(self, email: str, password: str) -> User | None:
        user = self.repo.get_by_email(email)
        if not user:
            return None
        if not verify_password(password, user.hashed_password):
            return None
        return user

    def is_admin(self, user_id: str) -> bool:
        user = self.repo.get_by_id(user_id)
        return bool(user and user.is_active and user.is_admin)

    def award_xp(self, user: User, amount: int, reason: str, *, commit: bool = True) -> int:
        """Add XP to a profile and recompute its level. Returns the XP actually added."""
        if amount <= 0:
            return 0
        user.xp = (user.xp or 0) + amount
        user.level = level_for_xp(user.xp)
        self.db.add(user)
        self.repo.add_xp_log(XpLog(user_id=user.id, xp_amount=amount, reason=reason))
        if commit:
            self.db.commit()
            self.db.refresh(user)
        logger.debug("Awarded %s XP to %s (%s)", amount, user.id, reason)
        return amount

    def deduct_credits(self, user: User, amount: int, reason: str) -> bool:
        if amount < 0:
            raise ValueError("Credit amount must be positive")
        if (user.credits or 0) < amount:
            return False
        try:
            user.credits = (user.credits or 0) - amount
            self.db.add(user)
            self.repo.add_credit_transaction(
                CreditTransaction(
                    user_id=user.id,
                    amount=-amount,
                    reason=reason,
                    balance_after=user.credits,
                )
            )
            self.award_xp(user, amount // CREDITS_PER_XP, f"Credits spent: {reason}", commit=False)
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.exception("Failed to deduct %s credits from %s", amount, user.id)
            return False
        self.db.refresh(user)
        return True

    def admin_update(self, user_id: str, data: AdminUserUpdate) -> User:
        user = self.repo.get_by_id(user_id)
        if not user:
            raise LookupError("User not found")
        if data.tier is not None:
            if data.tier not in TIER_LEVELS:
                raise ValueError(f"Unknown tier '{data.tier}'")
            user.tier = data.tier
        if data.credits is not None:
            user.credits = data.credits
        if data.is_admin is not None:
            user.is_admin = data.is_admin
        if data.is_active is not None:
            user.is_active = data.is_active
        if data.team_id is not None:
            user.team_id = data.team_id or None
        if data.team_name is not None:
            user.team_name = data.team_name or None
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user
