"""AgentVault team auctions.

Teams bid VibeCoins on vault items. Each team holds at most one bid per item;
bidding again edits that bid. The highest bid is the only current winner.
Coins are checked against the bid but not deducted while the auction runs.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime

from sqlalchemy.orm import Session

from agentgift.core.database import as_utc, utcnow
from agentgift.modules.gamification.service import GamificationService
from agentgift.modules.users.repository import UsersRepository
from .models import VaultBid, VaultCoinBalance, VaultCoinTransaction, VaultItem
from .repository import VaultRepository
from .schemas import (
    AuctionStatus,
    BidOutcome,
    CoinBalanceRead,
    TeamCoins,
    TeamStanding,
    VaultBidRead,
    VaultItemCreate,
    VaultItemRead,
)


logger = logging.getLogger(__name__)

TIER_MIN_BIDS = {"common": 10, "uncommon": 50, "rare": 200}
VAULT_BIDDER_BADGE = "vault-bidder"
HOT_ITEM_BID_COUNT = 3
TOP_BIDS_SHOWN = 5


def _item_view(item: VaultItem) -> VaultItemRead:
    bids = sorted(item.bids, key=lambda b: b.bid_amount, reverse=True)
    winner = next((b for b in bids if b.is_current_winner), None)
    last_bid = max(bids, key=lambda b: as_utc(b.updated_at or b.created_at), default=None)
    view = VaultItemRead.model_validate(item)
    return view.model_copy(
        update={
            "bid_count": len(bids),
            "top_bids": [VaultBidRead.model_validate(b) for b in bids[:TOP_BIDS_SHOWN]],
            "current_winner": VaultBidRead.model_validate(winner) if winner else None,
            "is_hot": len(bids) >= HOT_ITEM_BID_COUNT,
            "last_bid_time": (last_bid.updated_at or last_bid.created_at) if last_bid else None,
        }
    )


def _is_open(item: VaultItem, now: datetime) -> bool:
    if not item.is_active:
        return False
    ends_at = as_utc(item.ends_at)
    return ends_at is None or ends_at > now


class AgentVaultService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = VaultRepository(db)

    def list_items(self, tier: str | None = None) -> list[VaultItemRead]:
        if tier == "all":
            tier = None
        return [_item_view(item) for item in self.repo.list_items(tier)]

    def create_item(self, data: VaultItemCreate) -> VaultItemRead:
        item = VaultItem(**data.model_dump())
        item.current_bid = data.starting_bid
        item = self.repo.add_item(item)
        logger.info("Vault item %s created (%s)", item.id, item.tier)
        return _item_view(item)

    def place_team_bid(
        self,
        item_id: str,
        team_id: str,
        team_name: str | None,
        bid_amount: int,
        user_id: str,
        user_name: str | None = None,
        message: str | None = None,
    ) -> BidOutcome:
        """Place or edit a team's bid in one transaction.

        Business refusals come back as ``success=False`` with an error string.
        """
        now = utcnow()
        item = self.repo.get_item(item_id, for_update=True)
        if item is None:
            return BidOutcome(success=False, error="Item not found")
        if not _is_open(item, now):
            return BidOutcome(success=False, error="Auction for this item has ended")

        minimum = TIER_MIN_BIDS.get(item.tier, 0)
        if bid_amount < minimum:
            return BidOutcome(success=False, error=f"Minimum bid for {item.tier} items is {minimum} VibeCoins")

        bids = self.repo.bids_for_item(item.id)
        top = bids[0].bid_amount if bids else item.starting_bid
        if bid_amount <= top:
            return BidOutcome(success=False, error=f"Bid must be higher than the current top bid of {top}")

        balance = self.repo.get_balance(team_id)
        available = balance.balance if balance else 0
        if available < bid_amount:
            return BidOutcome(success=False, error="Insufficient VibeCoins")

        try:
            for bid in bids:
                bid.is_current_winner = False
            existing = next((b for b in bids if b.team_id == team_id), None)
            is_edit = existing is not None
            if existing is None:
                existing = VaultBid(item_id=item.id, team_id=team_id)
                self.db.add(existing)
                bids.append(existing)
            existing.team_name = team_name or existing.team_name
            existing.user_id = user_id
            existing.user_name = user_name
            existing.bid_amount = bid_amount
            existing.message = message
            existing.is_current_winner = True
            existing.updated_at = now
            item.current_bid = bid_amount
            bidder = UsersRepository(self.db).get_by_id(user_id)
            if bidder is not None:
                GamificationService(self.db).award_badge(bidder, VAULT_BIDDER_BADGE, create_missing=True, commit=False)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            "Team %s %s bid of %s on vault item %s",
            team_id,
            "edited" if is_edit else "placed",
            bid_amount,
            item.id,
        )
        return BidOutcome(success=True, is_edit=is_edit, new_top_bid=bid_amount, bid_count=len(bids))

    def award_vibe_coins(
        self,
        team_id: str,
        amount: int,
        source: str,
        source_id: str | None = None,
        description: str | None = None,
        user_id: str | None = None,
    ) -> VaultCoinBalance:
        if amount <= 0:
            raise ValueError("Amount must be positive")
        balance = self.repo.get_balance(team_id)
        if balance is None:
            balance = VaultCoinBalance(
                team_id=team_id,
                balance=0,
                total_earned=0,
                total_spent=0,
                event_participation_count=0,
            )
            self.db.add(balance)
        balance.balance = (balance.balance or 0) + amount
        balance.total_earned = (balance.total_earned or 0) + amount
        balance.event_participation_count = (balance.event_participation_count or 0) + 1
        self.db.add(
            VaultCoinTransaction(
                team_id=team_id,
                amount=amount,
                source=source,
                source_id=source_id,
                description=description,
                user_id=user_id,
            )
        )
        self.db.commit()
        self.db.refresh(balance)
        logger.info("Awarded %s VibeCoins to team %s from %s", amount, team_id, source)
        return balance

    def get_team_coins(self, team_id: str) -> TeamCoins:
        balance = self.repo.get_balance(team_id)
        return TeamCoins(
            balance=CoinBalanceRead.model_validate(balance) if balance else CoinBalanceRead(),
            transactions=self.repo.recent_transactions(team_id, limit=20),
        )

    def leaderboard(self) -> list[TeamStanding]:
        teams: dict[str, dict] = {}
        for bid in self.repo.all_bids():
            row = teams.setdefault(
                bid.team_id,
                {"team_id": bid.team_id, "team_name": bid.team_name, "total_bids": 0, "items_winning": 0},
            )
            row["total_bids"] += 1
            if bid.is_current_winner:
                row["items_winning"] += 1
            if bid.team_name:
                row["team_name"] = bid.team_name
        balances = {b.team_id: b.balance for b in self.repo.list_balances()}
        ordered = sorted(teams.values(), key=lambda r: (-r["items_winning"], -r["total_bids"], r["team_id"]))
        return [
            TeamStanding(rank=index, coin_balance=balances.get(row["team_id"], 0), **row)
            for index, row in enumerate(ordered, start=1)
        ]

    def auction_status(self) -> AuctionStatus:
        now = utcnow()
        open_items = [item for item in self.repo.active_items() if _is_open(item, now)]
        closing = [as_utc(item.ends_at) for item in open_items if item.ends_at is not None]
        next_close = min(closing) if closing else None
        return AuctionStatus(
            is_live=bool(open_items),
            phase="active" if open_items else "closed",
            active_items=len(open_items),
            next_closing_at=next_close,
            seconds_remaining=math.ceil((next_close - now).total_seconds()) if next_close else None,
        )
