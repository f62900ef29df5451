from agentgift.core.config import settings
from agentgift.core.security import create_access_token
from agentgift.modules.users.service import UsersService
from conftest import TEST_PASSWORD


class TestRegistration:
    def test_register_creates_free_agent(self, client):
        resp = client.post(
            "/users/register",
            json={"email": "New.Agent@AgentGift.com", "password": "longenough1", "full_name": "New Agent"},
        )
        assert resp.status_code == 201
        data = resp.json()
        assert data["email"] == "new.agent@agentgift.com"
        assert data["tier"] == "free_agent"
        assert data["credits"] == 0
        assert data["level"] == 1
        assert data["is_admin"] is False
        assert "hashed_password" not in data

    def test_duplicate_email_is_rejected(self, client, make_user):
        make_user(email="taken@agentgift.com")
        resp = client.post("/users/register", json={"email": "TAKEN@agentgift.com", "password": "longenough1"})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Email already registered"

    def test_short_password_fails_validation(self, client):
        resp = client.post("/users/register", json={"email": "short@agentgift.com", "password": "short"})
        assert resp.status_code == 422

    def test_signup_rate_limit(self, client):
        for i in range(3):
            client.post("/users/register", json={"email": f"burst{i}@agentgift.com", "password": "longenough1"})
        resp = client.post("/users/register", json={"email": "burst9@agentgift.com", "password": "longenough1"})
        assert resp.status_code == 429


class TestLogin:
    def test_login_returns_token_and_sets_cookie(self, client, make_user):
        user = make_user(email="login@agentgift.com")
        resp = client.post("/auth/login", json={"email": "login@agentgift.com", "password": TEST_PASSWORD})
        assert resp.status_code == 200
        data = resp.json()
        assert data["token_type"] == "bearer"
        assert data["expires_in"] == settings.AUTH_TOKEN_TTL_SECONDS
        assert resp.cookies.get(settings.AUTH_COOKIE_NAME) == data["access_token"]

        me = client.get("/auth/me", headers={"Authorization": f"Bearer {data['access_token']}"})
        assert me.status_code == 200
        assert me.json()["id"] == user.id

    def test_cookie_session_is_accepted(self, client, make_user):
        make_user(email="cookie@agentgift.com")
        client.post("/auth/login", json={"email": "cookie@agentgift.com", "password": TEST_PASSWORD})
        resp = client.get("/users/me")
        assert resp.status_code == 200
        assert resp.json()["email"] == "cookie@agentgift.com"

    def test_wrong_password(self, client, make_user):
        make_user(email="wrong@agentgift.com")
        resp = client.post("/auth/login", json={"email": "wrong@agentgift.com", "password": "nope-nope"})
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Invalid credentials"

    def test_inactive_user_cannot_login(self, client, make_user):
        make_user(email="gone@agentgift.com", is_active=False)
        resp = client.post("/auth/login", json={"email": "gone@agentgift.com", "password": TEST_PASSWORD})
        assert resp.status_code == 401

    def test_signout_clears_cookie(self, client, make_user):
        make_user(email="bye@agentgift.com")
        client.post("/auth/login", json={"email": "bye@agentgift.com", "password": TEST_PASSWORD})
        resp = client.post("/auth/signout")
        assert resp.status_code == 200
        assert resp.json() == {"success": True}
        assert settings.AUTH_COOKIE_NAME not in client.cookies
        assert client.get("/users/me").status_code == 401


class TestSessionResolution:
    def test_missing_token(self, client):
        resp = client.get("/users/me")
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Not authenticated"

    def test_invalid_token(self, client):
        resp = client.get("/users/me", headers={"Authorization": "Bearer garbage"})
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Invalid token"

    def test_unknown_subject(self, client):
        token = create_access_token(subject="no-such-user")
        resp = client.get("/users/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Inactive or missing user"

    def test_deactivated_user_loses_session(self, client, db, make_user, auth_headers):
        user = make_user()
        headers = auth_headers(user)
        user.is_active = False
        db.commit()
        assert client.get("/users/me", headers=headers).status_code == 401


class TestAdminStatus:
    def test_is_admin_true_for_admin(self, client, admin, auth_headers):
        resp = client.get("/auth/is-admin", headers=auth_headers(admin))
        assert resp.status_code == 200
        assert resp.json() == {"is_admin": True}

    def test_is_admin_false_for_regular_user(self, client, make_user, auth_headers):
        resp = client.get("/auth/is-admin", headers=auth_headers(make_user("pro_agent")))
        assert resp.json() == {"is_admin": False}

    def test_is_admin_fails_closed_without_session(self, client):
        assert client.get("/auth/is-admin").json() == {"is_admin": False}
        bad = client.get("/auth/is-admin", headers={"Authorization": "Bearer garbage"})
        assert bad.status_code == 200
        assert bad.json() == {"is_admin": False}

    def test_admin_wrapper_rejects_non_admins(self, client, make_user, auth_headers):
        resp = client.get("/admin/features", headers=auth_headers(make_user("enterprise")))
        assert resp.status_code == 403
        assert resp.json()["detail"] == "Forbidden"

    def test_admin_wrapper_requires_session(self, client):
        assert client.get("/admin/features").status_code == 401

    def test_inactive_admin_is_forbidden(self, client, db, admin, auth_headers):
        headers = auth_headers(admin)
        admin.is_active = False
        db.commit()
        # Inactive accounts fail session resolution before the role check.
        assert client.get("/admin/features", headers=headers).status_code == 401

    def test_admin_wrapper_reports_failed_role_lookup(self, client, admin, auth_headers, monkeypatch):
        def broken_lookup(self, user_id):
            raise RuntimeError("role table unavailable")

        monkeypatch.setattr(UsersService, "is_admin", broken_lookup)
        resp = client.get("/admin/features", headers=auth_headers(admin))
        assert resp.status_code == 500
        assert resp.json()["detail"] == "Auth check failed"
