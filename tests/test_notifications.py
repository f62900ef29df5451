from unittest.mock import MagicMock

import pytest
from requests import ConnectionError as RequestsConnectionError
from requests import HTTPError

from agentgift.main import app
from agentgift.modules.notifications.webhooks import (
    DiscordWebhookClient,
    MakeWebhookClient,
    WebhookDeliveryError,
    WebhookNotConfigured,
    get_discord_client,
)


def _response(status_code: int = 200, text: str = "") -> MagicMock:
    response = MagicMock(status_code=status_code, text=text, ok=status_code < 400)
    if status_code >= 400:
        response.raise_for_status.side_effect = HTTPError(f"{status_code} error")
    return response


class TestMakeWebhook:
    def test_payload_shape(self):
        payload = MakeWebhookClient.build_payload("message", {"text": "hi"})
        assert payload["type"] == "message"
        assert payload["data"] == {"text": "hi"}
        assert payload["userId"] == "system"
        assert "T" in payload["timestamp"]

    def test_trigger_posts_event(self):
        client = MakeWebhookClient(url="https://hook.example.com/make")
        client.session = MagicMock()
        client.session.post.return_value = _response()

        assert client.gift_search("cozy socks", user_id="u-1") is True
        args, kwargs = client.session.post.call_args
        assert args[0] == "https://hook.example.com/make"
        assert kwargs["json"]["type"] == "gift_search"
        assert kwargs["json"]["data"] == {"query": "cozy socks"}
        assert kwargs["json"]["userId"] == "u-1"
        assert kwargs["headers"]["User-Agent"] == "AgentGift-API/1.0"

    def test_unconfigured_is_skipped(self):
        client = MakeWebhookClient(url="")
        client.session = MagicMock()
        assert client.feature_usage("ghost_hunt") is False
        client.session.post.assert_not_called()

    @pytest.mark.parametrize("failure", ["status", "network"])
    def test_failures_never_raise(self, failure):
        client = MakeWebhookClient(url="https://hook.example.com/make")
        client.session = MagicMock()
        if failure == "status":
            client.session.post.return_value = _response(500)
        else:
            client.session.post.side_effect = RequestsConnectionError("down")
        assert client.trigger("message", {"text": "hi"}) is False


class TestDiscordClient:
    def test_missing_url(self):
        with pytest.raises(WebhookNotConfigured):
            DiscordWebhookClient(url="").send({"content": "hi"})

    def test_non_ok_response(self):
        client = DiscordWebhookClient(url="https://discord.example.com/hook")
        client.session = MagicMock()
        client.session.post.return_value = _response(400, "Invalid embed")
        with pytest.raises(WebhookDeliveryError) as exc:
            client.send({"content": "hi"})
        assert exc.value.status_code == 400
        assert exc.value.body == "Invalid embed"


class FakeDiscord(DiscordWebhookClient):
    def __init__(self, error: Exception | None = None) -> None:
        super().__init__(url="https://discord.example.com/hook")
        self.error = error
        self.sent: list[dict] = []

    def send(self, payload):
        if self.error is not None:
            raise self.error
        self.sent.append(payload)


class TestDiscordRoute:
    def _use(self, fake):
        app.dependency_overrides[get_discord_client] = lambda: fake
        return fake

    def test_forwards_payload(self, client, admin, auth_headers):
        fake = self._use(FakeDiscord())
        resp = client.post("/discord-webhook", json={"content": "Weekly report"}, headers=auth_headers(admin))
        assert resp.status_code == 200
        assert resp.json() == {"success": True}
        assert fake.sent == [{"content": "Weekly report"}]

    def test_admin_only(self, client, make_user, auth_headers):
        self._use(FakeDiscord())
        resp = client.post("/discord-webhook", json={"content": "x"}, headers=auth_headers(make_user("enterprise")))
        assert resp.status_code == 403

    def test_not_configured(self, client, admin, auth_headers):
        resp = client.post("/discord-webhook", json={"content": "x"}, headers=auth_headers(admin))
        assert resp.status_code == 503
        assert resp.json()["detail"] == "Missing DISCORD_WEBHOOK_URL environment variable"

    def test_upstream_status_is_relayed(self, client, admin, auth_headers):
        self._use(FakeDiscord(WebhookDeliveryError(429, "You are being rate limited.")))
        resp = client.post("/discord-webhook", json={"content": "x"}, headers=auth_headers(admin))
        assert resp.status_code == 429
        assert resp.json() == {"error": "You are being rate limited."}

    def test_network_failure(self, client, admin, auth_headers):
        self._use(FakeDiscord(RequestsConnectionError("unreachable")))
        resp = client.post("/discord-webhook", json={"content": "x"}, headers=auth_headers(admin))
        assert resp.status_code == 502
