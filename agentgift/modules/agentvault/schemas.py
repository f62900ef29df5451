from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


VaultTier = Literal["common", "uncommon", "rare"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class BidRequest(_CamelModel):
    # Optional so the route can answer with its own "Missing required fields" error.
    item_id: str | None = Field(default=None, alias="itemId")
    team_id: str | None = Field(default=None, alias="teamId")
    team_name: str | None = Field(default=None, alias="teamName")
    bid_amount: int | None = Field(default=None, alias="bidAmount")
    message: str | None = Field(default=None, max_length=500)
    user_id: str | None = Field(default=None, alias="userId")
    user_name: str | None = Field(default=None, alias="userName")


class BidOutcome(BaseModel):
    success: bool
    error: str | None = None
    is_edit: bool = False
    new_top_bid: int | None = None
    bid_count: int = 0


class BidResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool
    is_edit: bool
    new_top_bid: int
    bid_count: int
    excitement_message: str
    action_type: Literal["edited", "placed"]


class VaultBidRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    team_id: str
    team_name: str | None = None
    user_name: str | None = None
    bid_amount: int
    message: str | None = None
    is_current_winner: bool
    created_at: datetime
    updated_at: datetime


class VaultItemCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = None
    tier: VaultTier = "common"
    image_url: str | None = None
    starting_bid: int = Field(default=0, ge=0)
    ends_at: datetime | None = None


class VaultItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str | None = None
    tier: str
    image_url: str | None = None
    starting_bid: int
    current_bid: int
    ends_at: datetime | None = None
    is_active: bool
    bid_count: int = 0
    top_bids: list[VaultBidRead] = []
    current_winner: VaultBidRead | None = None
    is_hot: bool = False
    last_bid_time: datetime | None = None


class VaultItemList(BaseModel):
    items: list[VaultItemRead]
    total: int


class CoinAwardRequest(_CamelModel):
    team_id: str | None = Field(default=None, alias="teamId")
    amount: int | None = None
    source: str | None = None
    source_id: str | None = Field(default=None, alias="sourceId")
    description: str | None = None
    user_id: str | None = Field(default=None, alias="userId")


class CoinAwardResponse(BaseModel):
    success: bool
    awarded: int
    source: str


class CoinBalanceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    balance: int = 0
    total_earned: int = 0
    total_spent: int = 0
    is_qualified: bool = False
    min_xp_met: bool = False
    event_participation_count: int = 0


class CoinTransactionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    amount: int
    source: str
    source_id: str | None = None
    description: str | None = None
    user_id: str | None = None
    created_at: datetime


class TeamCoins(BaseModel):
    balance: CoinBalanceRead
    transactions: list[CoinTransactionRead]


class TeamStanding(BaseModel):
    rank: int
    team_id: str
    team_name: str | None = None
    total_bids: int
    items_winning: int
    coin_balance: int


class AuctionStatus(BaseModel):
    is_live: bool
    phase: Literal["active", "closed"]
    active_items: int
    next_closing_at: datetime | None = None
    seconds_remaining: int | None = None
