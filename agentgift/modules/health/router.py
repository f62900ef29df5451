import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from agentgift.api.deps import require_admin
from agentgift.core.config import settings
from agentgift.core.database import get_db, ping_database, utcnow
from agentgift.core.rate_limit import RATE_LIMITS, limiter
from agentgift.modules.users.models import User
from .schemas import ConfigCheck, HealthStatus


logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthStatus)
def health(db: Annotated[Session, Depends(get_db)]) -> HealthStatus:
    connected = ping_database(db)
    if not connected:
        logger.warning("Health check could not reach the database")
    return HealthStatus(
        status="healthy",
        timestamp=utcnow().isoformat(),
        version=settings.APP_VERSION,
        services={"database": "connected" if connected else "unavailable", "api": "running"},
    )


@router.get("/config-check", response_model=ConfigCheck)
@limiter.limit(RATE_LIMITS["admin"])
def config_check(request: Request, _: Annotated[User, Depends(require_admin)]) -> ConfigCheck:
    """Report which optional integrations are configured. Never echoes secrets."""
    return ConfigCheck(
        openai=bool(settings.OPENAI_API_KEY),
        whisper=bool(settings.whisper_api_key),
        elevenlabs=bool(settings.ELEVENLABS_API_KEY),
        elevenlabs_default_voice=bool(settings.ELEVENLABS_DEFAULT_VOICE_ID),
        make_webhook=bool(settings.MAKE_WEBHOOK_URL),
        discord_webhook=bool(settings.DISCORD_WEBHOOK_URL),
        stripe=bool(settings.STRIPE_SECRET_KEY),
        stripe_webhook=bool(settings.STRIPE_WEBHOOK_SECRET),
        admin_bootstrap=bool(settings.ADMIN_EMAIL and settings.ADMIN_PASSWORD),
    )
