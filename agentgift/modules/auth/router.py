from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from agentgift.api.deps import bearer_scheme, get_current_user
from agentgift.core.config import settings
from agentgift.core.database import get_db
from agentgift.core.rate_limit import RATE_LIMITS, limiter
from agentgift.modules.users.models import User
from .schemas import AdminStatus, LoginRequest, SessionIdentity, TokenResponse
from .service import AuthService


router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
@limiter.limit(RATE_LIMITS["auth"])
def login(
    request: Request,
    response: Response,
    payload: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
):
    token = AuthService(db).login(payload.email, payload.password)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token.access_token,
        max_age=settings.AUTH_TOKEN_TTL_SECONDS,
        httponly=True,
        secure=settings.AUTH_COOKIE_SECURE,
        samesite="lax",
    )
    return token


@router.post("/signout")
def signout(response: Response):
    response.delete_cookie(key=settings.AUTH_COOKIE_NAME)
    return {"success": True}


@router.get("/me", response_model=SessionIdentity)
def me(current: Annotated[User, Depends(get_current_user)]):
    return SessionIdentity(
        id=current.id,
        email=current.email,
        full_name=current.full_name,
        tier=current.tier,
        is_admin=current.is_admin,
    )


@router.get("/is-admin", response_model=AdminStatus)
def is_admin(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
):
    token = credentials.credentials if credentials is not None else request.cookies.get(settings.AUTH_COOKIE_NAME)
    return AdminStatus(is_admin=AuthService(db).is_admin_token(token))
