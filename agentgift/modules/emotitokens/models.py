from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from agentgift.core.database import Base, new_id, utcnow


class EmotiTokenType(Base):
    __tablename__ = "emoti_token_types"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    token_name: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    display_name: Mapped[str] = mapped_column(String(100))
    emoji: Mapped[str] = mapped_column(String(16))
    description: Mapped[str | None] = mapped_column(Text, default=None)
    color_hex: Mapped[str] = mapped_column(String(7), default="#000000")
    xp_value: Mapped[int] = mapped_column(Integer, default=0)
    monthly_allocation: Mapped[int] = mapped_column(Integer, default=0)


class EmotiTokenBalance(Base):
    __tablename__ = "emoti_token_balances"
    __table_args__ = (
        UniqueConstraint("user_id", "token_type_id", "month_year", name="uq_emoti_token_balances_user_type_month"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("user_profiles.id", ondelete="CASCADE"), index=True
    )
    token_type_id: Mapped[str] = mapped_column(String(36), ForeignKey("emoti_token_types.id", ondelete="CASCADE"))
    month_year: Mapped[str] = mapped_column(String(7), index=True)
    balance: Mapped[int] = mapped_column(Integer, default=0)
    allocated: Mapped[int] = mapped_column(Integer, default=0)

    token_type: Mapped[EmotiTokenType] = relationship(lazy="joined")


class EmotiTokenTransaction(Base):
    __tablename__ = "emoti_token_transactions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    sender_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("user_profiles.id", ondelete="CASCADE"), index=True
    )
    receiver_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("user_profiles.id", ondelete="CASCADE"), index=True
    )
    token_type_id: Mapped[str] = mapped_column(String(36), ForeignKey("emoti_token_types.id", ondelete="CASCADE"))
    amount: Mapped[int] = mapped_column(Integer, default=1)
    message: Mapped[str] = mapped_column(Text)
    xp_awarded: Mapped[int] = mapped_column(Integer, default=0)
    month_year: Mapped[str] = mapped_column(String(7), index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)

    token_type: Mapped[EmotiTokenType] = relationship(lazy="joined")
