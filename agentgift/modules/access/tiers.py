"""Subscription tiers and the static feature access tables."""

from __future__ import annotations

from dataclasses import dataclass


FREE_AGENT = "free_agent"
PREMIUM_SPY = "premium_spy"
PRO_AGENT = "pro_agent"
AGENT_00G = "agent_00g"
SMALL_BIZ = "small_biz"
ENTERPRISE = "enterprise"

# Higher number = higher tier
TIER_LEVELS: dict[str, int] = {
    FREE_AGENT: 0,
    PREMIUM_SPY: 1,
    PRO_AGENT: 2,
    AGENT_00G: 3,
    SMALL_BIZ: 4,
    ENTERPRISE: 5,
}

TIER_NAMES: dict[str, str] = {
    FREE_AGENT: "Free Agent",
    PREMIUM_SPY: "Premium Spy",
    PRO_AGENT: "Pro Agent",
    AGENT_00G: "Agent 00G",
    SMALL_BIZ: "Small Business",
    ENTERPRISE: "Enterprise",
}


def tier_level(tier: str | None) -> int:
    return TIER_LEVELS.get(tier or "", 0)


def has_tier_access(user_tier: str | None, required_tier: str) -> bool:
    return tier_level(user_tier) >= tier_level(required_tier)


@dataclass(frozen=True)
class FeatureRule:
    required_tier: str
    trial_allowed: bool
    description: str
    usage_limit: int | None = None


FEATURE_ACCESS: dict[str, FeatureRule] = {
    # Core
    "ai_recommendations": FeatureRule(FREE_AGENT, False, "AI-powered gift recommendations", usage_limit=5),
    "gift_history": FeatureRule(FREE_AGENT, False, "Track your gift-giving history"),
    "basic_personality": FeatureRule(FREE_AGENT, False, "Basic personality analysis"),
    # Premium
    "advanced_personality": FeatureRule(PREMIUM_SPY, True, "Advanced personality insights"),
    "occasion_tracker": FeatureRule(PREMIUM_SPY, True, "Never miss important occasions"),
    "wishlist_creator": FeatureRule(PREMIUM_SPY, False, "Create and manage wishlists"),
    # Pro
    "unlimited_recommendations": FeatureRule(PRO_AGENT, False, "Unlimited AI recommendations"),
    "budget_optimizer": FeatureRule(PRO_AGENT, True, "Smart budget allocation"),
    "sentiment_analysis": FeatureRule(PRO_AGENT, True, "Analyze recipient emotions"),
    "custom_categories": FeatureRule(PRO_AGENT, False, "Create custom gift categories"),
    "photo_analysis": FeatureRule(PRO_AGENT, True, "Analyze photos for preferences"),
    # Agent 00G
    "gift_concierge": FeatureRule(AGENT_00G, True, "Personal gift concierge service"),
    "custom_ai_training": FeatureRule(AGENT_00G, False, "Train AI on your preferences"),
    "delivery_coordination": FeatureRule(AGENT_00G, False, "Coordinate gift deliveries"),
    "voice_assistant": FeatureRule(AGENT_00G, True, "Voice-powered recommendations"),
    # Business
    "team_collaboration": FeatureRule(SMALL_BIZ, True, "Collaborate with team members"),
    "analytics_dashboard": FeatureRule(SMALL_BIZ, False, "Advanced analytics and insights"),
    "api_access": FeatureRule(SMALL_BIZ, False, "API access for integrations"),
    "custom_branding": FeatureRule(SMALL_BIZ, False, "Custom branding options"),
    "sso_integration": FeatureRule(SMALL_BIZ, False, "Single sign-on integration"),
    # Enterprise
    "unlimited_users": FeatureRule(ENTERPRISE, False, "Unlimited team members"),
    "custom_integrations": FeatureRule(ENTERPRISE, False, "Custom system integrations"),
    "dedicated_support": FeatureRule(ENTERPRISE, False, "Dedicated support team"),
    "custom_sla": FeatureRule(ENTERPRISE, False, "Custom service level agreement"),
    "advanced_security": FeatureRule(ENTERPRISE, False, "Advanced security features"),
}


@dataclass(frozen=True)
class CreditFeature:
    name: str
    required_tier: str
    credits_needed: int
    enabled: bool = True


FEATURE_CONFIGS: dict[str, CreditFeature] = {
    "gift-gut-check": CreditFeature("Gift Gut Check", FREE_AGENT, 1),
    "agent-gifty": CreditFeature("Agent Gifty", PREMIUM_SPY, 2),
    "ai-companion": CreditFeature("AI Companion", AGENT_00G, 5),
    "gift-campaigns": CreditFeature("Gift Campaigns", PRO_AGENT, 3),
    "reminder-scheduler": CreditFeature("Smart Reminders", PRO_AGENT, 1),
    "social-proof-verifier": CreditFeature("Social Participation", PREMIUM_SPY, 0),
}
