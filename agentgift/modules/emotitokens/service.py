"""EmotiTokens: monthly recognition tokens that employees send each other."""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from agentgift.modules.gamification.service import GamificationService
from agentgift.modules.users.models import User
from agentgift.modules.users.repository import UsersRepository
from agentgift.modules.users.service import UsersService
from .models import EmotiTokenBalance, EmotiTokenTransaction, EmotiTokenType
from .schemas import (
    BalanceOverview,
    EmployeeRead,
    SendTokenResult,
    TokenBalanceRead,
    TokenLeaderboardRow,
    TokenTransactionRead,
)


logger = logging.getLogger(__name__)

EMPLOYEE_TIERS = ("premium_spy", "pro_agent", "agent_00g", "admin", "super_admin")
MESSAGE_MIN_LENGTH = 5
MESSAGE_MAX_LENGTH = 200
KIND_SOUL_BADGE = "kind-soul"

DEFAULT_TOKEN_TYPES = [
    {
        "token_name": "compassion",
        "display_name": "Compassion Token",
        "emoji": "💝",
        "description": "Recognize acts of kindness and empathy",
        "color_hex": "#ec4899",
        "xp_value": 10,
        "monthly_allocation": 50,
    },
    {
        "token_name": "wisdom",
        "display_name": "Wisdom Token",
        "emoji": "🧠",
        "description": "Acknowledge great insights and knowledge sharing",
        "color_hex": "#8b5cf6",
        "xp_value": 15,
        "monthly_allocation": 30,
    },
    {
        "token_name": "energy",
        "display_name": "Energy Token",
        "emoji": "⚡",
        "description": "Celebrate enthusiasm and motivation",
        "color_hex": "#10b981",
        "xp_value": 8,
        "monthly_allocation": 40,
    },
]


def current_month(now: datetime | None = None) -> str:
    return (now or datetime.now(timezone.utc)).strftime("%Y-%m")


def days_until_reset(now: datetime | None = None) -> int:
    now = now or datetime.now(timezone.utc)
    if now.month == 12:
        next_month = now.replace(year=now.year + 1, month=1, day=1, hour=0, minute=0, second=0, microsecond=0)
    else:
        next_month = now.replace(month=now.month + 1, day=1, hour=0, minute=0, second=0, microsecond=0)
    return math.ceil((next_month - now).total_seconds() / 86400)


def is_employee(user: User) -> bool:
    return user.tier in EMPLOYEE_TIERS


def ensure_default_token_types(db: Session) -> int:
    existing = set(db.scalars(select(EmotiTokenType.token_name)))
    created = 0
    for defaults in DEFAULT_TOKEN_TYPES:
        if defaults["token_name"] in existing:
            continue
        db.add(EmotiTokenType(**defaults))
        created += 1
    if created:
        db.commit()
        logger.info("Seeded %s EmotiToken types", created)
    return created


class EmotiTokensService:
    def __init__(self, db: Session):
        self.db = db
        self.users = UsersService(db)

    def token_types(self) -> list[EmotiTokenType]:
        return list(self.db.scalars(select(EmotiTokenType).order_by(EmotiTokenType.token_name)))

    def initialize_monthly_tokens(self, user: User, month: str) -> list[EmotiTokenBalance]:
        """Create this month's balances that are still missing. Safe to call repeatedly."""
        balances = {
            b.token_type_id: b
            for b in self.db.scalars(
                select(EmotiTokenBalance).where(
                    EmotiTokenBalance.user_id == user.id, EmotiTokenBalance.month_year == month
                )
            )
        }
        for token_type in self.token_types():
            if token_type.id in balances:
                continue
            balance = EmotiTokenBalance(
                user_id=user.id,
                token_type_id=token_type.id,
                month_year=month,
                balance=token_type.monthly_allocation,
                allocated=token_type.monthly_allocation,
            )
            self.db.add(balance)
            balances[token_type.id] = balance
        self.db.flush()
        return list(balances.values())

    def send_token(
        self,
        sender: User,
        receiver_email: str | None,
        token_type: str | None,
        message: str | None,
        amount: int = 1,
    ) -> SendTokenResult:
        if not receiver_email or not token_type or not message:
            raise ValueError("Missing required fields")
        if not MESSAGE_MIN_LENGTH <= len(message) <= MESSAGE_MAX_LENGTH:
            raise ValueError("Message must be between 5 and 200 characters")
        if not is_employee(sender):
            raise PermissionError("Employee access required")

        receiver = UsersRepository(self.db).get_by_email(receiver_email)
        if receiver is None:
            raise LookupError("Receiver not found")
        if not is_employee(receiver):
            raise ValueError("Receiver must be an employee")
        if receiver.id == sender.id:
            raise ValueError("Nice try, but emotional inflation is real.")

        token = self.db.scalar(select(EmotiTokenType).where(EmotiTokenType.token_name == token_type))
        if token is None:
            raise ValueError(f"Unknown token type '{token_type}'")

        month = current_month()
        try:
            self.initialize_monthly_tokens(sender, month)
            self.initialize_monthly_tokens(receiver, month)
            balance = self.db.scalar(
                select(EmotiTokenBalance)
                .where(
                    EmotiTokenBalance.user_id == sender.id,
                    EmotiTokenBalance.token_type_id == token.id,
                    EmotiTokenBalance.month_year == month,
                )
                .with_for_update()
            )
            if balance is None or balance.balance < amount:
                raise ValueError("Insufficient token balance")

            xp_awarded = token.xp_value * amount
            balance.balance -= amount
            transaction = EmotiTokenTransaction(
                sender_id=sender.id,
                receiver_id=receiver.id,
                token_type_id=token.id,
                amount=amount,
                message=message,
                xp_awarded=xp_awarded,
                month_year=month,
            )
            self.db.add(transaction)
            self.users.award_xp(receiver, xp_awarded, f"Received {token.display_name}", commit=False)
            GamificationService(self.db).award_badge(sender, KIND_SOUL_BADGE, create_missing=True, commit=False)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info("%s sent %s %s token(s) to %s", sender.id, amount, token.token_name, receiver.id)
        return SendTokenResult(
            success=True,
            message=f"{token.emoji} {token.display_name} sent to {receiver.email}!",
            xp_awarded=xp_awarded,
            transaction_id=transaction.id,
        )

    def _transactions(self, user: User, *, sent: bool, limit: int = 20) -> list[TokenTransactionRead]:
        own_col = EmotiTokenTransaction.sender_id if sent else EmotiTokenTransaction.receiver_id
        other_col = EmotiTokenTransaction.receiver_id if sent else EmotiTokenTransaction.sender_id
        stmt = (
            select(EmotiTokenTransaction, User.email)
            .join(User, User.id == other_col)
            .where(own_col == user.id)
            .order_by(EmotiTokenTransaction.created_at.desc())
            .limit(limit)
        )
        return [
            TokenTransactionRead(
                id=tx.id,
                token_name=tx.token_type.token_name,
                display_name=tx.token_type.display_name,
                emoji=tx.token_type.emoji,
                amount=tx.amount,
                message=tx.message,
                xp_awarded=tx.xp_awarded,
                counterpart_email=email,
                created_at=tx.created_at,
            )
            for tx, email in self.db.execute(stmt).all()
        ]

    def balance_overview(self, user: User, now: datetime | None = None) -> BalanceOverview:
        month = current_month(now)
        balances = self.initialize_monthly_tokens(user, month)
        self.db.commit()
        return BalanceOverview(
            balances=[TokenBalanceRead.model_validate(b) for b in balances],
            sent_tokens=self._transactions(user, sent=True),
            received_tokens=self._transactions(user, sent=False),
            current_month=month,
            days_until_reset=days_until_reset(now),
        )

    def leaderboard(self, month: str | None = None, limit: int = 20) -> list[TokenLeaderboardRow]:
        month = month or current_month()
        sent = dict(
            self.db.execute(
                select(EmotiTokenTransaction.sender_id, func.sum(EmotiTokenTransaction.amount))
                .where(EmotiTokenTransaction.month_year == month)
                .group_by(EmotiTokenTransaction.sender_id)
            ).all()
        )
        received = dict(
            self.db.execute(
                select(EmotiTokenTransaction.receiver_id, func.sum(EmotiTokenTransaction.amount))
                .where(EmotiTokenTransaction.month_year == month)
                .group_by(EmotiTokenTransaction.receiver_id)
            ).all()
        )
        user_ids = set(sent) | set(received)
        if not user_ids:
            return []
        users = {u.id: u for u in self.db.scalars(select(User).where(User.id.in_(user_ids)))}
        rows = []
        for user_id in user_ids:
            total_sent = int(sent.get(user_id) or 0)
            total_received = int(received.get(user_id) or 0)
            u = users.get(user_id)
            rows.append(
                {
                    "user_id": user_id,
                    "name": (u.full_name or u.email.split("@")[0]) if u else "Unknown agent",
                    "total_sent": total_sent,
                    "total_received": total_received,
                    "net_impact": total_sent + total_received,
                }
            )
        rows.sort(key=lambda r: (-r["net_impact"], -r["total_received"], r["user_id"]))
        return [TokenLeaderboardRow(rank=i, **row) for i, row in enumerate(rows[:limit], start=1)]

    def search_employees(self, search: str | None = None, limit: int = 50) -> list[EmployeeRead]:
        users = UsersRepository(self.db).list_by_tiers(EMPLOYEE_TIERS, search=search, limit=limit)
        return [EmployeeRead.model_validate(u) for u in users]
