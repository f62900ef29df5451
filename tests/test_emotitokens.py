from datetime import datetime, timezone

import pytest

from agentgift.modules.emotitokens.service import current_month, days_until_reset, is_employee


def _send(client, headers, receiver_email, token_type="wisdom", message="Thanks for the brilliant idea!", **extra):
    body = {"receiver_email": receiver_email, "token_type": token_type, "message": message, **extra}
    return client.post("/emotitokens/send", json=body, headers=headers)


@pytest.mark.parametrize(
    "now,days",
    [
        (datetime(2026, 10, 31, 12, 0, tzinfo=timezone.utc), 1),
        (datetime(2026, 12, 1, 0, 0, tzinfo=timezone.utc), 31),
        (datetime(2026, 2, 27, 0, 0, tzinfo=timezone.utc), 2),
    ],
)
def test_days_until_reset(now, days):
    assert days_until_reset(now) == days


def test_current_month_format():
    assert current_month(datetime(2026, 3, 9, tzinfo=timezone.utc)) == "2026-03"


def test_employee_tiers(make_user):
    assert is_employee(make_user("premium_spy"))
    assert not is_employee(make_user("free_agent", is_admin=True))
    assert not is_employee(make_user("enterprise", is_admin=True))
    assert not is_employee(make_user("free_agent"))
    assert not is_employee(make_user("enterprise"))


class TestBalance:
    def test_first_visit_allocates_monthly_tokens(self, client, make_user, auth_headers):
        headers = auth_headers(make_user("pro_agent"))
        data = client.get("/emotitokens/balance", headers=headers).json()
        allocations = {b["token_type"]["token_name"]: b["balance"] for b in data["balances"]}
        assert allocations == {"compassion": 50, "wisdom": 30, "energy": 40}
        assert data["current_month"] == current_month()
        assert 1 <= data["days_until_reset"] <= 31

        again = client.get("/emotitokens/balance", headers=headers).json()
        assert len(again["balances"]) == 3


class TestSend:
    def test_send_moves_token_and_awards_receiver_xp(self, client, db, make_user, auth_headers):
        sender = make_user("pro_agent")
        receiver = make_user("premium_spy", email="friend@agentgift.com")
        resp = _send(client, auth_headers(sender), "friend@agentgift.com", amount=2)
        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        assert data["xp_awarded"] == 30
        assert "friend@agentgift.com" in data["message"]

        db.refresh(receiver)
        assert receiver.xp == 30

        balance = client.get("/emotitokens/balance", headers=auth_headers(sender)).json()
        wisdom = next(b for b in balance["balances"] if b["token_type"]["token_name"] == "wisdom")
        assert wisdom["balance"] == 28
        assert balance["sent_tokens"][0]["counterpart_email"] == "friend@agentgift.com"

        received = client.get("/emotitokens/balance", headers=auth_headers(receiver)).json()
        assert received["received_tokens"][0]["amount"] == 2

    def test_first_send_earns_kind_soul_badge(self, client, db, make_user, auth_headers):
        sender = make_user("pro_agent")
        make_user("pro_agent", email="pal@agentgift.com")
        _send(client, auth_headers(sender), "pal@agentgift.com")
        db.refresh(sender)
        assert sender.badges == ["kind-soul"]

    def test_missing_fields(self, client, make_user, auth_headers):
        resp = client.post("/emotitokens/send", json={"token_type": "wisdom"}, headers=auth_headers(make_user("pro_agent")))
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Missing required fields"

    @pytest.mark.parametrize("message", ["hey", "x" * 201])
    def test_message_length(self, client, make_user, auth_headers, message):
        make_user("pro_agent", email="pal@agentgift.com")
        resp = _send(client, auth_headers(make_user("pro_agent")), "pal@agentgift.com", message=message)
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Message must be between 5 and 200 characters"

    def test_non_employee_sender(self, client, make_user, auth_headers):
        make_user("pro_agent", email="pal@agentgift.com")
        resp = _send(client, auth_headers(make_user("free_agent")), "pal@agentgift.com")
        assert resp.status_code == 403

    def test_unknown_receiver(self, client, make_user, auth_headers):
        resp = _send(client, auth_headers(make_user("pro_agent")), "ghost@agentgift.com")
        assert resp.status_code == 404

    def test_admin_flag_does_not_make_an_employee(self, client, make_user, auth_headers):
        make_user("pro_agent", email="pal@agentgift.com")
        boss = make_user("enterprise", email="boss@agentgift.com", is_admin=True)
        resp = _send(client, auth_headers(boss), "pal@agentgift.com")
        assert resp.status_code == 403

        make_user("free_agent", email="ops@agentgift.com", is_admin=True)
        resp = _send(client, auth_headers(make_user("pro_agent")), "ops@agentgift.com")
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Receiver must be an employee"

    def test_non_employee_receiver(self, client, make_user, auth_headers):
        make_user("free_agent", email="civilian@agentgift.com")
        resp = _send(client, auth_headers(make_user("pro_agent")), "civilian@agentgift.com")
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Receiver must be an employee"

    def test_cannot_send_to_self(self, client, make_user, auth_headers):
        me = make_user("pro_agent", email="me@agentgift.com")
        resp = _send(client, auth_headers(me), "me@agentgift.com")
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Nice try, but emotional inflation is real."

    def test_unknown_token_type(self, client, make_user, auth_headers):
        make_user("pro_agent", email="pal@agentgift.com")
        resp = _send(client, auth_headers(make_user("pro_agent")), "pal@agentgift.com", token_type="envy")
        assert resp.status_code == 400

    def test_balance_cannot_go_negative(self, client, make_user, auth_headers):
        sender = make_user("pro_agent")
        make_user("pro_agent", email="pal@agentgift.com")
        headers = auth_headers(sender)
        for _ in range(3):
            assert _send(client, headers, "pal@agentgift.com", amount=10).status_code == 200
        resp = _send(client, headers, "pal@agentgift.com", amount=1)
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Insufficient token balance"

    def test_amount_bounds(self, client, make_user, auth_headers):
        make_user("pro_agent", email="pal@agentgift.com")
        resp = _send(client, auth_headers(make_user("pro_agent")), "pal@agentgift.com", amount=11)
        assert resp.status_code == 422


class TestDirectory:
    def test_leaderboard_for_current_month(self, client, make_user, auth_headers):
        alice = make_user("pro_agent", full_name="Alice")
        make_user("pro_agent", email="bob@agentgift.com", full_name="Bob")
        _send(client, auth_headers(alice), "bob@agentgift.com", amount=3)

        rows = client.get("/emotitokens/leaderboard", headers=auth_headers(alice)).json()
        assert {(r["name"], r["total_sent"], r["total_received"]) for r in rows} == {("Alice", 3, 0), ("Bob", 0, 3)}

        empty = client.get("/emotitokens/leaderboard", params={"month": "1999-01"}, headers=auth_headers(alice))
        assert empty.json() == []

    def test_bad_month_format(self, client, make_user, auth_headers):
        resp = client.get("/emotitokens/leaderboard", params={"month": "May"}, headers=auth_headers(make_user()))
        assert resp.status_code == 422

    def test_employee_search(self, client, make_user, auth_headers):
        make_user("pro_agent", email="dana@agentgift.com")
        make_user("premium_spy", email="dave@agentgift.com")
        make_user("free_agent", email="dan@agentgift.com")
        make_user("enterprise", email="dara@agentgift.com", is_admin=True)
        resp = client.get("/emotitokens/employees", params={"search": "DA"}, headers=auth_headers(make_user()))
        assert [e["email"] for e in resp.json()] == ["dana@agentgift.com", "dave@agentgift.com"]
