from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError

from agentgift.core.database import get_db
from agentgift.main import app


def test_health_reports_database(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "healthy"
    assert data["version"] == "1.0.0"
    assert data["services"] == {"database": "connected", "api": "running"}


def test_health_survives_database_outage(client):
    broken = MagicMock()
    broken.execute.side_effect = OperationalError("SELECT 1", {}, Exception("connection refused"))
    app.dependency_overrides[get_db] = lambda: broken
    data = client.get("/health").json()
    assert data["services"]["database"] == "unavailable"
    broken.rollback.assert_called_once()


def test_config_check_hides_values(client, admin, auth_headers):
    resp = client.get("/config-check", headers=auth_headers(admin))
    assert resp.status_code == 200
    data = resp.json()
    assert set(data.values()) == {False}
    assert "openai" in data and "stripe_webhook" in data


def test_config_check_is_admin_only(client, make_user, auth_headers):
    assert client.get("/config-check", headers=auth_headers(make_user("enterprise"))).status_code == 403
