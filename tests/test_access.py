import pytest

from agentgift.modules.access.service import (
    can_try_feature_once,
    check_feature_access,
    check_user_access,
    get_upgrade_url,
)
from agentgift.modules.access.tiers import FEATURE_ACCESS, TIER_LEVELS, has_tier_access


class TestTierTable:
    def test_tiers_are_ordered(self):
        ordered = sorted(TIER_LEVELS, key=TIER_LEVELS.get)
        assert ordered == ["free_agent", "premium_spy", "pro_agent", "agent_00g", "small_biz", "enterprise"]

    @pytest.mark.parametrize(
        "user_tier,required,expected",
        [
            ("enterprise", "free_agent", True),
            ("pro_agent", "pro_agent", True),
            ("premium_spy", "pro_agent", False),
            ("unknown", "premium_spy", False),
            (None, "free_agent", True),
        ],
    )
    def test_has_tier_access(self, user_tier, required, expected):
        assert has_tier_access(user_tier, required) is expected


class TestCheckFeatureAccess:
    def test_usage_limit_counts_down(self):
        result = check_feature_access("free_agent", "ai_recommendations", feature_usage={"ai_recommendations": 3})
        assert result.has_access
        assert result.usage_remaining == 2

    def test_usage_limit_exhausted(self):
        result = check_feature_access("free_agent", "ai_recommendations", feature_usage={"ai_recommendations": 5})
        assert not result.has_access
        assert result.reason == "usage_limit_exceeded"
        assert result.usage_remaining == 0

    def test_insufficient_tier_offers_trial_once(self):
        result = check_feature_access("free_agent", "gift_concierge")
        assert not result.has_access
        assert result.reason == "tier_insufficient"
        assert result.required_tier == "agent_00g"
        assert result.can_trial

        used = check_feature_access("free_agent", "gift_concierge", trial_features_used=["gift_concierge"])
        assert not used.can_trial

    def test_no_trial_for_locked_features(self):
        assert not check_feature_access("premium_spy", "api_access").can_trial
        assert not can_try_feature_once("api_access")

    def test_unknown_feature(self):
        with pytest.raises(ValueError):
            check_feature_access("enterprise", "time_travel")
        assert not can_try_feature_once("time_travel")

    def test_upgrade_url(self):
        assert get_upgrade_url() == "/pricing"
        assert get_upgrade_url("pro_agent") == "/pricing?tier=pro_agent"


class TestCheckUserAccess:
    def test_no_user(self):
        assert check_user_access(None, "agent-gifty").fallback_reason == "no_auth"

    def test_unknown_feature_is_disabled(self, make_user):
        result = check_user_access(make_user(), "does-not-exist")
        assert result.fallback_reason == "feature_disabled"

    def test_insufficient_tier(self, make_user):
        result = check_user_access(make_user("free_agent", credits=10), "ai-companion")
        assert not result.access_granted
        assert result.fallback_reason == "insufficient_tier"
        assert result.upgrade_required
        assert result.required_tier == "agent_00g"
        assert result.current_tier == "free_agent"

    def test_insufficient_credits(self, make_user):
        result = check_user_access(make_user("agent_00g", credits=4), "ai-companion")
        assert result.fallback_reason == "insufficient_credits"
        assert result.credits_needed == 5
        assert result.credits_left == 4

    def test_granted(self, make_user):
        result = check_user_access(make_user("pro_agent", credits=3), "gift-campaigns")
        assert result.access_granted
        assert result.credits_left == 3


class TestFeatureAccessRoutes:
    def test_list_every_feature(self, client, make_user, auth_headers):
        resp = client.get("/feature-access", headers=auth_headers(make_user("premium_spy")))
        assert resp.status_code == 200
        rows = {row["feature"]: row for row in resp.json()}
        assert set(rows) == set(FEATURE_ACCESS)
        assert rows["occasion_tracker"]["has_access"] is True
        assert rows["occasion_tracker"]["upgrade_url"] is None
        assert rows["budget_optimizer"]["upgrade_url"] == "/pricing?tier=pro_agent"

    def test_single_feature(self, client, make_user, auth_headers):
        resp = client.get(
            "/feature-access", params={"feature": "gift_concierge"}, headers=auth_headers(make_user())
        )
        assert resp.status_code == 200
        assert resp.json()["can_trial"] is True

    def test_unknown_feature_query(self, client, make_user, auth_headers):
        resp = client.get("/feature-access", params={"feature": "nope"}, headers=auth_headers(make_user()))
        assert resp.status_code == 400

    def test_post_requires_feature(self, client, make_user, auth_headers):
        resp = client.post("/feature-access", json={"action": "check"}, headers=auth_headers(make_user()))
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Feature name required"

    def test_post_invalid_action(self, client, make_user, auth_headers):
        resp = client.post(
            "/feature-access", json={"feature": "gift_history", "action": "explode"}, headers=auth_headers(make_user())
        )
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Invalid action"

    def test_use_records_usage(self, client, db, make_user, auth_headers):
        user = make_user()
        headers = auth_headers(user)
        resp = client.post("/feature-access", json={"feature": "ai_recommendations", "action": "use"}, headers=headers)
        assert resp.status_code == 200
        db.refresh(user)
        assert user.feature_usage == {"ai_recommendations": 1}

    def test_use_without_access_is_forbidden(self, client, make_user, auth_headers):
        resp = client.post(
            "/feature-access", json={"feature": "gift_concierge", "action": "use"}, headers=auth_headers(make_user())
        )
        assert resp.status_code == 403
        assert resp.json()["detail"] == "Access denied"

    def test_trial_is_single_use(self, client, db, make_user, auth_headers):
        user = make_user()
        headers = auth_headers(user)
        body = {"feature": "gift_concierge", "action": "use", "isTrial": True}
        first = client.post("/feature-access", json=body, headers=headers)
        assert first.status_code == 200
        db.refresh(user)
        assert user.trial_features_used == ["gift_concierge"]

        second = client.post("/feature-access", json=body, headers=headers)
        assert second.status_code == 403
        assert second.json()["detail"] == "Trial not available"

    def test_trial_refused_when_tier_already_grants(self, client, db, make_user, auth_headers):
        user = make_user("agent_00g")
        body = {"feature": "gift_concierge", "action": "use", "isTrial": True}
        resp = client.post("/feature-access", json=body, headers=auth_headers(user))
        assert resp.status_code == 403
        assert resp.json()["detail"] == "Trial not available"
        db.refresh(user)
        assert not user.feature_usage


class TestCreditRoutes:
    def test_check_credits(self, client, make_user, auth_headers):
        resp = client.get("/feature-access/credits/agent-gifty", headers=auth_headers(make_user("premium_spy", credits=1)))
        assert resp.status_code == 200
        assert resp.json()["fallback_reason"] == "insufficient_credits"

    def test_consume_deducts_and_awards_xp(self, client, db, make_user, auth_headers):
        user = make_user("agent_00g", credits=12)
        resp = client.post("/feature-access/credits/ai-companion/consume", headers=auth_headers(user))
        assert resp.status_code == 200
        assert resp.json()["access_granted"] is True
        assert resp.json()["credits_left"] == 7

        db.refresh(user)
        assert user.credits == 7
        # 5 credits spent -> 2 XP
        assert user.xp == 2

        ledger = client.get("/users/me/credits", headers=auth_headers(user)).json()
        assert ledger["credits"] == 7
        assert ledger["transactions"][0]["amount"] == -5
        assert ledger["transactions"][0]["balance_after"] == 7

    def test_consume_refusal_is_payment_required(self, client, make_user, auth_headers):
        resp = client.post("/feature-access/credits/ai-companion/consume", headers=auth_headers(make_user("agent_00g")))
        assert resp.status_code == 402
        assert resp.json()["detail"]["fallback_reason"] == "insufficient_credits"

    def test_free_feature_consumes_nothing(self, client, db, make_user, auth_headers):
        user = make_user("premium_spy", credits=2)
        resp = client.post("/feature-access/credits/social-proof-verifier/consume", headers=auth_headers(user))
        assert resp.status_code == 200
        db.refresh(user)
        assert user.credits == 2
