import pytest

from agentgift.main import app
from agentgift.modules.admin.schemas import UsageReport
from agentgift.modules.admin.service import discord_report_payload
from agentgift.modules.notifications.webhooks import DiscordWebhookClient, WebhookDeliveryError, get_discord_client


NEW_FEATURE = {
    "name": "Holiday Countdown",
    "slug": "Holiday Countdown",
    "description": "Daily reminders until the big day",
    "route_path": "/features/holiday-countdown",
    "required_tier": "pro_agent",
    "credit_cost": 2,
}


class RecordingDiscord(DiscordWebhookClient):
    def __init__(self, error: Exception | None = None) -> None:
        super().__init__(url="https://discord.example.com/hook")
        self.error = error
        self.sent: list[dict] = []

    def send(self, payload):
        if self.error is not None:
            raise self.error
        self.sent.append(payload)


@pytest.fixture
def admin_headers(admin, auth_headers):
    return auth_headers(admin)


class TestFeatureRegistry:
    def test_seeded_features_are_listed_in_order(self, client, admin_headers):
        rows = client.get("/admin/features", headers=admin_headers).json()
        assert [r["slug"] for r in rows] == [
            "gift-gut-check",
            "agent-gifty",
            "ai-companion",
            "gift-campaigns",
            "reminder-scheduler",
            "social-proof-verifier",
        ]
        assert rows[2]["credit_cost"] == 5
        assert rows[2]["required_tier"] == "agent_00g"

    def test_create_update_delete(self, client, admin_headers):
        created = client.post("/admin/features", json=NEW_FEATURE, headers=admin_headers)
        assert created.status_code == 201
        feature = created.json()
        assert feature["slug"] == "holiday-countdown"
        assert feature["is_active"] is True

        updated = client.put(
            f"/admin/features/{feature['id']}",
            json={"credit_cost": 4, "is_active": False, "name": "  Countdown  "},
            headers=admin_headers,
        ).json()
        assert updated["credit_cost"] == 4
        assert updated["is_active"] is False
        assert updated["name"] == "Countdown"
        assert updated["required_tier"] == "pro_agent"

        deleted = client.delete(f"/admin/features/{feature['id']}", headers=admin_headers)
        assert deleted.json() == {"id": feature["id"], "deleted": True}
        slugs = [r["slug"] for r in client.get("/admin/features", headers=admin_headers).json()]
        assert "holiday-countdown" not in slugs

    def test_duplicate_slug(self, client, admin_headers):
        resp = client.post("/admin/features", json={**NEW_FEATURE, "slug": "agent-gifty"}, headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json()["detail"] == "A feature with this slug already exists"

    def test_unknown_tier(self, client, admin_headers):
        resp = client.post("/admin/features", json={**NEW_FEATURE, "required_tier": "double_agent"}, headers=admin_headers)
        assert resp.status_code == 400

    def test_missing_feature(self, client, admin_headers):
        assert client.put("/admin/features/nope", json={"credit_cost": 1}, headers=admin_headers).status_code == 404
        assert client.delete("/admin/features/nope", headers=admin_headers).status_code == 404

    def test_negative_cost_rejected(self, client, admin_headers):
        resp = client.post("/admin/features", json={**NEW_FEATURE, "credit_cost": -1}, headers=admin_headers)
        assert resp.status_code == 422

    def test_requires_admin(self, client, make_user, auth_headers):
        assert client.get("/admin/features").status_code == 401
        assert client.get("/admin/features", headers=auth_headers(make_user("enterprise"))).status_code == 403


class TestReports:
    def test_usage_report_counts_users(self, client, admin_headers, make_user):
        make_user("pro_agent", xp=40)
        make_user("free_agent", xp=10)
        report = client.get("/admin/reports", params={"range": "monthly"}, headers=admin_headers).json()
        assert report["range"] == "monthly"
        assert report["total_users"] == 3
        assert report["new_users"] == 3
        assert report["users_by_tier"] == {"enterprise": 1, "pro_agent": 1, "free_agent": 1}
        assert report["total_xp"] == 50
        assert report["vault_bids"] == 0
        assert report["active_ghost_hunts"] == 0

    def test_unknown_range(self, client, admin_headers):
        assert client.get("/admin/reports", params={"range": "daily"}, headers=admin_headers).status_code == 422

    def test_report_sent_to_discord(self, client, admin_headers):
        discord = RecordingDiscord()
        app.dependency_overrides[get_discord_client] = lambda: discord
        resp = client.post("/admin/reports/discord", params={"range": "seasonal"}, headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json()["success"] is True
        [payload] = discord.sent
        assert payload["content"] == "AgentGift seasonal report"
        assert payload["embeds"][0]["title"] == "Seasonal platform report"

    def test_discord_not_configured(self, client, admin_headers):
        resp = client.post("/admin/reports/discord", headers=admin_headers)
        assert resp.status_code == 503

    def test_discord_rejection_is_relayed(self, client, admin_headers):
        app.dependency_overrides[get_discord_client] = lambda: RecordingDiscord(WebhookDeliveryError(404, "Unknown Webhook"))
        resp = client.post("/admin/reports/discord", headers=admin_headers)
        assert resp.status_code == 404
        assert resp.json() == {"error": "Unknown Webhook"}

    def test_payload_lists_tiers(self):
        from datetime import datetime, timezone

        now = datetime(2026, 10, 19, tzinfo=timezone.utc)
        report = UsageReport(
            range="weekly",
            since=now,
            generated_at=now,
            total_users=2,
            new_users=1,
            users_by_tier={"pro_agent": 1, "free_agent": 1},
            total_xp=0,
            credits_spent=0,
            emotitoken_transactions=0,
            vault_bids=0,
            active_ghost_hunts=0,
        )
        fields = discord_report_payload(report)["embeds"][0]["fields"]
        assert fields[-1] == {"name": "Users per tier", "value": "free_agent: 1, pro_agent: 1"}


class TestUserAdministration:
    def test_update_tier_and_credits(self, client, db, admin_headers, make_user):
        user = make_user("free_agent")
        resp = client.put(f"/admin/users/{user.id}", json={"tier": "premium_spy", "credits": 25}, headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json()["tier"] == "premium_spy"
        assert resp.json()["credits"] == 25
        db.refresh(user)
        assert user.tier == "premium_spy"

    def test_unknown_user(self, client, admin_headers):
        assert client.put("/admin/users/missing", json={"credits": 1}, headers=admin_headers).status_code == 404

    def test_unknown_tier(self, client, admin_headers, make_user):
        user = make_user()
        resp = client.put(f"/admin/users/{user.id}", json={"tier": "mole"}, headers=admin_headers)
        assert resp.status_code == 400


def test_sync_tables_reports_known_tables(client, admin_headers):
    resp = client.post("/admin/sync-tables", headers=admin_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert data["created_tables"] == []
    assert {"user_profiles", "registered_features", "concierge_sessions"} <= set(data["total_known_tables"])


@pytest.mark.parametrize(
    "method,path,body",
    [
        ("get", "/config-check", None),
        ("post", "/discord-webhook", {"content": "ping"}),
        ("post", "/agentvault/items", {"title": "Crate", "tier": "common"}),
        ("post", "/agentvault/coins", {"teamId": "team-red", "amount": 5, "source": "bonus"}),
    ],
)
def test_admin_limit_covers_every_admin_route(client, admin_headers, method, path, body):
    kwargs = {"headers": admin_headers}
    if body is not None:
        kwargs["json"] = body
    for _ in range(100):
        assert getattr(client, method)(path, **kwargs).status_code != 429
    resp = getattr(client, method)(path, **kwargs)
    assert resp.status_code == 429
    assert resp.headers["X-RateLimit-Limit"] == "100"
