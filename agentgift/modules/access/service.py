from __future__ import annotations

import logging
from typing import Sequence

from sqlalchemy.orm import Session

from agentgift.modules.users.models import User
from agentgift.modules.users.service import UsersService
from .schemas import AccessCheckResult, FeatureAccessResult
from .tiers import FEATURE_ACCESS, FEATURE_CONFIGS, has_tier_access


logger = logging.getLogger(__name__)


def check_feature_access(
    user_tier: str,
    feature: str,
    trial_features_used: Sequence[str] = (),
    feature_usage: dict[str, int] | None = None,
) -> FeatureAccessResult:
    rule = FEATURE_ACCESS.get(feature)
    if rule is None:
        raise ValueError(f"Unknown feature '{feature}'")
    usage = feature_usage or {}

    if has_tier_access(user_tier, rule.required_tier):
        if rule.usage_limit:
            current = int(usage.get(feature, 0) or 0)
            if current >= rule.usage_limit:
                return FeatureAccessResult(
                    has_access=False,
                    reason="usage_limit_exceeded",
                    required_tier=rule.required_tier,
                    usage_remaining=0,
                )
            return FeatureAccessResult(has_access=True, usage_remaining=rule.usage_limit - current)
        return FeatureAccessResult(has_access=True)

    return FeatureAccessResult(
        has_access=False,
        reason="tier_insufficient",
        required_tier=rule.required_tier,
        can_trial=can_try_feature_once(feature, trial_features_used),
    )


def can_try_feature_once(feature: str, trial_features_used: Sequence[str] = ()) -> bool:
    rule = FEATURE_ACCESS.get(feature)
    if rule is None:
        return False
    return rule.trial_allowed and feature not in trial_features_used


def get_upgrade_url(target_tier: str | None = None) -> str:
    base_url = "/pricing"
    if target_tier:
        return f"{base_url}?tier={target_tier}"
    return base_url


def check_user_access(user: User | None, feature_name: str) -> AccessCheckResult:
    if user is None:
        return AccessCheckResult(access_granted=False, fallback_reason="no_auth")

    config = FEATURE_CONFIGS.get(feature_name)
    if config is None or not config.enabled:
        return AccessCheckResult(access_granted=False, fallback_reason="feature_disabled")

    credits = user.credits or 0
    if not has_tier_access(user.tier, config.required_tier):
        return AccessCheckResult(
            access_granted=False,
            fallback_reason="insufficient_tier",
            credits_left=credits,
            upgrade_required=True,
            required_tier=config.required_tier,
            current_tier=user.tier,
        )
    if credits < config.credits_needed:
        return AccessCheckResult(
            access_granted=False,
            fallback_reason="insufficient_credits",
            credits_left=credits,
            credits_needed=config.credits_needed,
        )
    return AccessCheckResult(access_granted=True, credits_left=credits, current_tier=user.tier)


class FeatureAccessService:
    def __init__(self, db: Session):
        self.db = db
        self.users = UsersService(db)

    def check(self, user: User, feature: str) -> FeatureAccessResult:
        return check_feature_access(
            user.tier,
            feature,
            user.trial_features_used or [],
            user.feature_usage or {},
        )

    def record_feature_usage(self, user: User, feature: str, is_trial: bool = False) -> None:
        # JSON columns only notice reassignment, not in-place mutation.
        usage = dict(user.feature_usage or {})
        usage[feature] = int(usage.get(feature, 0) or 0) + 1
        user.feature_usage = usage
        trials = list(user.trial_features_used or [])
        if is_trial and feature not in trials:
            trials.append(feature)
            user.trial_features_used = trials
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        logger.info("Recorded usage of %s for %s (trial=%s)", feature, user.id, is_trial)

    def use(self, user: User, feature: str, is_trial: bool = False) -> FeatureAccessResult:
        result = self.check(user, feature)
        if not result.has_access and not is_trial:
            raise PermissionError("Access denied")
        if is_trial and not result.can_trial:
            raise PermissionError("Trial not available")
        self.record_feature_usage(user, feature, is_trial=is_trial)
        return result

    def consume_credits(self, user: User, feature_name: str) -> AccessCheckResult:
        result = check_user_access(user, feature_name)
        if not result.access_granted:
            return result
        config = FEATURE_CONFIGS[feature_name]
        if config.credits_needed and not self.users.deduct_credits(user, config.credits_needed, config.name):
            return AccessCheckResult(
                access_granted=False,
                fallback_reason="insufficient_credits",
                credits_left=user.credits or 0,
                credits_needed=config.credits_needed,
            )
        return check_user_access(user, feature_name).model_copy(
            update={"access_granted": True, "credits_left": user.credits or 0, "fallback_reason": None}
        )
