from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class FeatureAccessResult(BaseModel):
    has_access: bool
    reason: str | None = None
    required_tier: str | None = None
    can_trial: bool = False
    usage_remaining: int | None = None


class FeatureAccessEntry(FeatureAccessResult):
    feature: str
    description: str
    upgrade_url: str | None = None


class FeatureAccessRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    feature: str | None = None
    action: str = "check"
    is_trial: bool = Field(default=False, alias="isTrial")


class AccessCheckResult(BaseModel):
    access_granted: bool
    fallback_reason: str | None = None
    credits_left: int | None = None
    upgrade_required: bool = False
    required_tier: str | None = None
    current_tier: str | None = None
    credits_needed: int | None = None
