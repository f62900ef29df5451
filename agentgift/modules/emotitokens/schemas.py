from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class TokenTypeRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    token_name: str
    display_name: str
    emoji: str
    description: str | None = None
    color_hex: str
    xp_value: int
    monthly_allocation: int


class TokenBalanceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    month_year: str
    balance: int
    allocated: int
    token_type: TokenTypeRead


class TokenTransactionRead(BaseModel):
    id: str
    token_name: str
    display_name: str
    emoji: str
    amount: int
    message: str
    xp_awarded: int
    counterpart_email: str | None = None
    created_at: datetime


class BalanceOverview(BaseModel):
    balances: list[TokenBalanceRead]
    sent_tokens: list[TokenTransactionRead]
    received_tokens: list[TokenTransactionRead]
    current_month: str
    days_until_reset: int


class SendTokenRequest(BaseModel):
    receiver_email: str | None = None
    token_type: str | None = None
    message: str | None = None
    amount: int = Field(default=1, ge=1, le=10)


class SendTokenResult(BaseModel):
    success: bool
    message: str
    xp_awarded: int
    transaction_id: str


class TokenLeaderboardRow(BaseModel):
    rank: int
    user_id: str
    name: str
    total_sent: int
    total_received: int
    net_impact: int


class EmployeeRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    full_name: str | None = None
    tier: str
    created_at: datetime
