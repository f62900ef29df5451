from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class UserBase(BaseModel):
    email: EmailStr
    full_name: str | None = None


class UserCreate(UserBase):
    password: str = Field(min_length=8, max_length=256)
    team_id: str | None = Field(default=None, max_length=100)
    team_name: str | None = Field(default=None, max_length=150)


class AdminUserUpdate(BaseModel):
    tier: str | None = None
    credits: int | None = Field(default=None, ge=0)
    is_admin: bool | None = None
    is_active: bool | None = None
    team_id: str | None = None
    team_name: str | None = None


class UserRead(UserBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    is_active: bool
    is_admin: bool
    tier: str
    credits: int
    xp: int
    level: int
    badges: list[str] = []
    prestige_level: str | None = None
    team_id: str | None = None
    team_name: str | None = None


class CreditTransactionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    amount: int
    reason: str
    balance_after: int
    created_at: datetime


class CreditsOverview(BaseModel):
    credits: int
    transactions: list[CreditTransactionRead]
