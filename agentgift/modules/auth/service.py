from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from agentgift.core.config import settings
from agentgift.core.security import create_access_token, session_subject
from agentgift.modules.users.service import UsersService
from .schemas import TokenResponse


logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: Session):
        self.db = db
        self.users = UsersService(db)

    def login(self, email: str, password: str) -> TokenResponse | None:
        user = self.users.authenticate(email, password)
        if not user or not user.is_active:
            logger.info("Login refused for %s", email)
            return None
        token = create_access_token(subject=user.id)
        return TokenResponse(access_token=token, expires_in=settings.AUTH_TOKEN_TTL_SECONDS)

    def is_admin_token(self, token: str | None) -> bool:
        """Admin check that fails closed: any problem means "not an admin"."""
        if not token:
            return False
        user_id = session_subject(token)
        if not user_id:
            return False
        try:
            return self.users.is_admin(user_id)
        except Exception:
            logger.exception("Admin lookup failed for %s", user_id)
            self.db.rollback()
            return False
