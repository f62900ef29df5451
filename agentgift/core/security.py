from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt
from passlib.context import CryptContext

from .config import settings


TOKEN_ALGORITHM = "HS256"

pwd_context = CryptContext(
    schemes=["argon2", "bcrypt_sha256", "bcrypt"],
    deprecated="auto",
    bcrypt__truncate_error=False,
    bcrypt_sha256__truncate_error=False,
)


def get_password_hash(password: str) -> str:
    # Use Argon2 for new hashes (no 72-byte limit)
    return pwd_context.hash(password, scheme="argon2")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(subject: str | int, expires_delta: Optional[int] = None) -> str:
    expire_seconds = expires_delta or settings.AUTH_TOKEN_TTL_SECONDS
    now = datetime.now(timezone.utc)
    claims: dict[str, Any] = {
        "sub": str(subject),
        "iat": now,
        "exp": now + timedelta(seconds=expire_seconds),
    }
    return jwt.encode(claims, settings.AUTH_TOKEN_SECRET, algorithm=TOKEN_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode a session token; raises ``jwt.PyJWTError`` when invalid or expired."""
    return jwt.decode(token, settings.AUTH_TOKEN_SECRET, algorithms=[TOKEN_ALGORITHM])


def session_subject(token: str) -> str | None:
    try:
        payload = decode_access_token(token)
    except jwt.PyJWTError:
        return None
    sub = payload.get("sub")
    return str(sub) if sub else None
