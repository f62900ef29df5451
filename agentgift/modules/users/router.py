import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from agentgift.api.deps import get_current_user
from agentgift.core.database import get_db
from agentgift.core.rate_limit import RATE_LIMITS, limiter
from .models import User
from .repository import UsersRepository
from .schemas import CreditsOverview, UserCreate, UserRead
from .service import UsersService


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/register", response_model=UserRead, status_code=status.HTTP_201_CREATED)
@limiter.limit(RATE_LIMITS["signup"])
def register_user(request: Request, data: UserCreate, db: Annotated[Session, Depends(get_db)]):
    svc = UsersService(db)
    try:
        logger.info("Registering user %s", data.email)
        user = svc.register_user(data)
    except ValueError as e:
        logger.info("Registration failed for %s: %s", data.email, e)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    logger.info("User %s registered with id %s", user.email, user.id)
    return user


@router.get("/me", response_model=UserRead)
def read_me(current: Annotated[User, Depends(get_current_user)]):
    return current


@router.get("/me/credits", response_model=CreditsOverview)
def read_my_credits(
    db: Annotated[Session, Depends(get_db)],
    current: Annotated[User, Depends(get_current_user)],
):
    transactions = UsersRepository(db).recent_credit_transactions(current.id)
    return CreditsOverview(credits=current.credits or 0, transactions=transactions)
