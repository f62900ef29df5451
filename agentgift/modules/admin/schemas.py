from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class FeatureBase(BaseModel):
    name: str = Field(min_length=1, max_length=150)
    slug: str = Field(min_length=1, max_length=100)
    description: str | None = None
    route_path: str | None = Field(default=None, max_length=255)
    required_tier: str = "free_agent"
    credit_cost: int = Field(default=0, ge=0)
    is_active: bool = True
    show_on_dashboard: bool = False
    sort_order: int = 0


class FeatureCreate(FeatureBase):
    pass


class FeatureUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=150)
    description: str | None = None
    route_path: str | None = Field(default=None, max_length=255)
    required_tier: str | None = None
    credit_cost: int | None = Field(default=None, ge=0)
    is_active: bool | None = None
    show_on_dashboard: bool | None = None
    sort_order: int | None = None


class FeatureRead(FeatureBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: datetime
    updated_at: datetime


class FeatureDeleted(BaseModel):
    id: str
    deleted: bool = True


ReportRange = Literal["weekly", "monthly", "seasonal"]


class UsageReport(BaseModel):
    range: ReportRange
    since: datetime
    generated_at: datetime
    total_users: int
    new_users: int
    users_by_tier: dict[str, int]
    total_xp: int
    credits_spent: int
    emotitoken_transactions: int
    vault_bids: int
    active_ghost_hunts: int


class DiscordReportResult(BaseModel):
    success: bool = True
    report: UsageReport


class SyncTablesResult(BaseModel):
    status: str = "ok"
    created_tables: list[str]
    total_known_tables: list[str]
