import jwt
import pytest
from starlette.requests import Request

from agentgift.core.config import settings
from agentgift.core.idempotency import IdempotencyCache, get_idempotency_key, is_idempotent_request
from agentgift.core.rate_limit import client_identifier
from agentgift.core.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    session_subject,
    verify_password,
)


def _request(headers: dict[str, str], client: tuple[str, int] | None = ("10.0.0.9", 5050)) -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "headers": [(k.lower().encode(), v.encode()) for k, v in headers.items()],
        "client": client,
    }
    return Request(scope)


class TestSecurity:
    def test_password_hash_round_trip(self):
        hashed = get_password_hash("s3cret-password")
        assert hashed != "s3cret-password"
        assert verify_password("s3cret-password", hashed)
        assert not verify_password("wrong-password", hashed)

    def test_access_token_carries_subject(self):
        token = create_access_token(subject="user-123")
        payload = decode_access_token(token)
        assert payload["sub"] == "user-123"
        assert payload["exp"] > payload["iat"]

    def test_expired_token_is_rejected(self):
        token = create_access_token(subject="user-123", expires_delta=-10)
        with pytest.raises(jwt.ExpiredSignatureError):
            decode_access_token(token)
        assert session_subject(token) is None

    def test_token_signed_with_another_secret_is_rejected(self):
        forged = jwt.encode({"sub": "user-123"}, "not-the-secret", algorithm="HS256")
        assert session_subject(forged) is None

    def test_garbage_token(self):
        assert session_subject("not-a-jwt") is None


class TestIdempotency:
    def test_provided_key_wins(self):
        assert get_idempotency_key("POST", "/agentvault/bid", "client-key") == "client-key"

    def test_derived_key_is_stable_within_a_minute(self):
        first = get_idempotency_key("post", "/agentvault/bid", now=120.0)
        second = get_idempotency_key("POST", "/agentvault/bid", now=179.0)
        assert first == second
        assert len(first) == 16

    def test_derived_key_changes_with_the_minute_and_path(self):
        base = get_idempotency_key("POST", "/agentvault/bid", now=120.0)
        assert get_idempotency_key("POST", "/agentvault/bid", now=180.0) != base
        assert get_idempotency_key("POST", "/emotitokens/send", now=120.0) != base

    @pytest.mark.parametrize("method,expected", [("POST", True), ("put", True), ("PATCH", True), ("GET", False), ("DELETE", False)])
    def test_idempotent_methods(self, method, expected):
        assert is_idempotent_request(method) is expected

    def test_cache_scopes_entries(self):
        cache = IdempotencyCache()
        cache.put("user-a", "key", {"ok": True})
        assert cache.get("user-a", "key") == {"ok": True}
        assert cache.get("user-b", "key") is None

    def test_cache_expires_entries(self):
        cache = IdempotencyCache(ttl_seconds=0)
        cache.put("user-a", "key", 1)
        assert cache.get("user-a", "key") is None

    def test_cache_evicts_when_full(self):
        cache = IdempotencyCache(max_entries=2)
        cache.put("s", "one", 1)
        cache.put("s", "two", 2)
        cache.put("s", "three", 3)
        assert cache.get("s", "three") == 3
        assert sum(cache.get("s", k) is not None for k in ("one", "two")) == 1

    def test_clear(self):
        cache = IdempotencyCache()
        cache.put("s", "k", 1)
        cache.clear()
        assert cache.get("s", "k") is None


class TestClientIdentifier:
    def test_forwarded_for_first_hop(self):
        request = _request({"X-Forwarded-For": "203.0.113.7, 10.0.0.1", "User-Agent": "pytest"})
        assert client_identifier(request) == "203.0.113.7:pytest"

    def test_real_ip_fallback(self):
        request = _request({"X-Real-IP": "198.51.100.4", "User-Agent": "pytest"})
        assert client_identifier(request) == "198.51.100.4:pytest"

    def test_socket_address_and_unknown_agent(self):
        assert client_identifier(_request({})) == "10.0.0.9:unknown"

    def test_no_address_at_all(self):
        assert client_identifier(_request({}, client=None)) == "unknown:unknown"


class TestRateLimit:
    def test_login_is_limited_to_five_per_window(self, client):
        body = {"email": "nobody@agentgift.com", "password": "whatever-password"}
        statuses = [client.post("/auth/login", json=body).status_code for _ in range(5)]
        assert statuses == [401] * 5

        blocked = client.post("/auth/login", json=body)
        assert blocked.status_code == 429
        data = blocked.json()
        assert data["error"] == "Too many requests"
        assert data["retryAfter"] >= 0
        assert blocked.headers["X-RateLimit-Remaining"] == "0"
        assert blocked.headers["X-RateLimit-Limit"] == "5"
        assert "Retry-After" in blocked.headers

    def test_limits_are_per_client(self, client):
        body = {"email": "nobody@agentgift.com", "password": "whatever-password"}
        for _ in range(5):
            client.post("/auth/login", json=body)
        other = client.post("/auth/login", json=body, headers={"User-Agent": "another-browser"})
        assert other.status_code == 401


def test_settings_loaded_from_environment():
    assert settings.DATABASE_URL == "sqlite://"
    assert settings.cors_origins == ["*"]
    assert settings.whisper_api_key is None
