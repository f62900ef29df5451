from __future__ import annotations

from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from .models import VaultBid, VaultCoinBalance, VaultCoinTransaction, VaultItem


class VaultRepository:
    def __init__(self, db: Session):
        self.db = db

    # Items ------------------------------------------------------------------
    def get_item(self, item_id: str, *, for_update: bool = False) -> Optional[VaultItem]:
        stmt = select(VaultItem).where(VaultItem.id == item_id)
        if for_update:
            stmt = stmt.with_for_update()
        return self.db.scalar(stmt)

    def list_items(self, tier: str | None = None) -> list[VaultItem]:
        stmt = select(VaultItem).options(selectinload(VaultItem.bids)).order_by(VaultItem.created_at)
        if tier:
            stmt = stmt.where(VaultItem.tier == tier)
        return list(self.db.scalars(stmt))

    def active_items(self) -> list[VaultItem]:
        stmt = select(VaultItem).where(VaultItem.is_active.is_(True))
        return list(self.db.scalars(stmt))

    def add_item(self, item: VaultItem) -> VaultItem:
        self.db.add(item)
        self.db.commit()
        self.db.refresh(item)
        return item

    # Bids -------------------------------------------------------------------
    def bids_for_item(self, item_id: str) -> list[VaultBid]:
        stmt = select(VaultBid).where(VaultBid.item_id == item_id).order_by(VaultBid.bid_amount.desc())
        return list(self.db.scalars(stmt))

    def team_bid(self, item_id: str, team_id: str) -> Optional[VaultBid]:
        stmt = select(VaultBid).where(VaultBid.item_id == item_id, VaultBid.team_id == team_id)
        return self.db.scalar(stmt)

    def count_bids(self) -> int:
        return int(self.db.scalar(select(func.count(VaultBid.id))) or 0)

    def all_bids(self) -> list[VaultBid]:
        return list(self.db.scalars(select(VaultBid)))

    # Coins ------------------------------------------------------------------
    def get_balance(self, team_id: str) -> Optional[VaultCoinBalance]:
        return self.db.get(VaultCoinBalance, team_id)

    def list_balances(self) -> list[VaultCoinBalance]:
        return list(self.db.scalars(select(VaultCoinBalance)))

    def recent_transactions(self, team_id: str, limit: int = 20) -> list[VaultCoinTransaction]:
        stmt = (
            select(VaultCoinTransaction)
            .where(VaultCoinTransaction.team_id == team_id)
            .order_by(VaultCoinTransaction.created_at.desc())
            .limit(limit)
        )
        return list(self.db.scalars(stmt))
