import os

# Settings are read at import time, so the test environment goes in first.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTH_TOKEN_SECRET"] = "test-secret-key-for-agentgift-tests-0123456789"
os.environ["RATE_LIMIT_ENABLED"] = "true"
for _key in (
    "OPENAI_API_KEY",
    "WHISPER_API_KEY",
    "ELEVENLABS_API_KEY",
    "ELEVENLABS_DEFAULT_VOICE_ID",
    "MAKE_WEBHOOK_URL",
    "DISCORD_WEBHOOK_URL",
    "STRIPE_SECRET_KEY",
    "STRIPE_WEBHOOK_SECRET",
    "ADMIN_EMAIL",
    "ADMIN_PASSWORD",
):
    os.environ.pop(_key, None)

from typing import Any, Callable, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from agentgift.core.database import Base, SessionLocal, engine
from agentgift.core.rate_limit import limiter
from agentgift.core.security import create_access_token
from agentgift.main import app
from agentgift.modules.admin.bootstrap import ensure_default_features
from agentgift.modules.agentvault.router import bid_replays
from agentgift.modules.emotitokens.service import ensure_default_token_types
from agentgift.modules.gamification.bootstrap import ensure_default_badges
from agentgift.modules.notifications.webhooks import MakeWebhookClient, get_make_client
from agentgift.modules.users.models import User
from agentgift.modules.users.schemas import UserCreate
from agentgift.modules.users.service import UsersService

TEST_PASSWORD = "correct-horse-battery"


class RecordingMakeClient(MakeWebhookClient):
    """Make client that records events instead of posting them."""

    def __init__(self) -> None:
        super().__init__(url="https://hook.make.test/agentgift")
        self.events: list[dict[str, Any]] = []

    def trigger(self, event_type: str, data: dict[str, Any], user_id: str | None = None) -> bool:
        self.events.append(self.build_payload(event_type, data, user_id))
        return True


@pytest.fixture(autouse=True)
def fresh_state() -> Generator[None, None, None]:
    """Rebuild the schema, reseed reference data and reset per-process caches for every test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    with SessionLocal() as db:
        ensure_default_badges(db)
        ensure_default_token_types(db)
        ensure_default_features(db)
    limiter.reset()
    bid_replays.clear()
    app.dependency_overrides.clear()
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def db() -> Generator[Session, None, None]:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def make_events() -> RecordingMakeClient:
    recorder = RecordingMakeClient()
    app.dependency_overrides[get_make_client] = lambda: recorder
    return recorder


@pytest.fixture
def make_user(db: Session) -> Callable[..., User]:
    counter = {"n": 0}

    def _make_user(
        tier: str = "free_agent",
        *,
        email: str | None = None,
        credits: int = 0,
        xp: int = 0,
        is_admin: bool = False,
        is_active: bool = True,
        full_name: str | None = None,
        team_id: str | None = None,
    ) -> User:
        counter["n"] += 1
        user = UsersService(db).register_user(
            UserCreate(
                email=email or f"agent{counter['n']}@agentgift.com",
                password=TEST_PASSWORD,
                full_name=full_name,
                team_id=team_id,
            ),
            is_admin=is_admin,
        )
        user.tier = tier
        user.credits = credits
        user.xp = xp
        user.is_active = is_active
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def auth_headers() -> Callable[[User], dict[str, str]]:
    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(subject=user.id)}"}

    return _headers


@pytest.fixture
def admin(make_user) -> User:
    return make_user("enterprise", email="admin@agentgift.com", is_admin=True)
