from __future__ import annotations

import logging

from sqlalchemy import inspect
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from agentgift.core.config import settings
from agentgift.core.security import get_password_hash, verify_password
from .models import User
from .repository import UsersRepository
from .schemas import UserCreate
from .service import UsersService


logger = logging.getLogger(__name__)


def ensure_default_admin(db: Session) -> None:
    """Create or repair the administrator named by ADMIN_EMAIL / ADMIN_PASSWORD."""
    if not inspect(db.get_bind()).has_table(User.__tablename__):
        logger.warning("%s table not ready yet; skipping admin bootstrap", User.__tablename__)
        return

    email = settings.ADMIN_EMAIL
    password = settings.ADMIN_PASSWORD
    if not email or not password:
        logger.info("ADMIN_EMAIL or ADMIN_PASSWORD not set; skipping admin bootstrap")
        return

    existing = UsersRepository(db).get_by_email(email)
    if existing:
        updated = False
        if not existing.is_admin:
            existing.is_admin = True
            updated = True
        if not existing.is_active:
            existing.is_active = True
            updated = True
        if not verify_password(password, existing.hashed_password):
            existing.hashed_password = get_password_hash(password)
            updated = True
        if updated:
            db.add(existing)
            db.commit()
            logger.info("Default admin '%s' updated", existing.email)
        return

    try:
        user = UsersService(db).register_user(
            UserCreate(email=email, password=password, full_name=settings.ADMIN_FULL_NAME),
            is_admin=True,
        )
    except (IntegrityError, ValueError):
        # Another worker created it first.
        db.rollback()
        logger.info("Default admin '%s' already present", email)
        return
    logger.info("Default admin '%s' created", user.email)
