from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from agentgift.core.database import Base, new_id, utcnow


class VaultItem(Base):
    __tablename__ = "vault_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(String(200))
    description: Mapped[str | None] = mapped_column(Text, default=None)
    tier: Mapped[str] = mapped_column(String(20), default="common", index=True)
    image_url: Mapped[str | None] = mapped_column(String(500), default=None)
    starting_bid: Mapped[int] = mapped_column(Integer, default=0)
    current_bid: Mapped[int] = mapped_column(Integer, default=0)
    ends_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    bids: Mapped[list["VaultBid"]] = relationship(
        back_populates="item", cascade="all, delete-orphan", order_by="VaultBid.bid_amount.desc()"
    )


class VaultBid(Base):
    __tablename__ = "vault_bids"
    __table_args__ = (UniqueConstraint("item_id", "team_id", name="uq_vault_bids_item_team"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    item_id: Mapped[str] = mapped_column(String(36), ForeignKey("vault_items.id", ondelete="CASCADE"), index=True)
    team_id: Mapped[str] = mapped_column(String(100), index=True)
    team_name: Mapped[str | None] = mapped_column(String(150), default=None)
    user_id: Mapped[str] = mapped_column(String(36))
    user_name: Mapped[str | None] = mapped_column(String(200), default=None)
    bid_amount: Mapped[int] = mapped_column(Integer)
    message: Mapped[str | None] = mapped_column(Text, default=None)
    is_current_winner: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    item: Mapped[VaultItem] = relationship(back_populates="bids")


class VaultCoinBalance(Base):
    __tablename__ = "vault_coin_balances"

    team_id: Mapped[str] = mapped_column(String(100), primary_key=True)
    balance: Mapped[int] = mapped_column(Integer, default=0)
    total_earned: Mapped[int] = mapped_column(Integer, default=0)
    total_spent: Mapped[int] = mapped_column(Integer, default=0)
    is_qualified: Mapped[bool] = mapped_column(Boolean, default=False)
    min_xp_met: Mapped[bool] = mapped_column(Boolean, default=False)
    event_participation_count: Mapped[int] = mapped_column(Integer, default=0)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class VaultCoinTransaction(Base):
    __tablename__ = "vault_coin_transactions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    team_id: Mapped[str] = mapped_column(String(100), index=True)
    amount: Mapped[int] = mapped_column(Integer)
    source: Mapped[str] = mapped_column(String(100))
    source_id: Mapped[str | None] = mapped_column(String(100), default=None)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    user_id: Mapped[str | None] = mapped_column(String(36), default=None)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
