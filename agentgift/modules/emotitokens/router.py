from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from agentgift.api.deps import get_current_user
from agentgift.core.database import get_db
from agentgift.modules.users.models import User
from .schemas import BalanceOverview, EmployeeRead, SendTokenRequest, SendTokenResult, TokenLeaderboardRow
from .service import EmotiTokensService


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/emotitokens", tags=["emotitokens"])

DbDep = Annotated[Session, Depends(get_db)]
UserDep = Annotated[User, Depends(get_current_user)]


@router.get("/balance", response_model=BalanceOverview)
def balance(db: DbDep, current: UserDep):
    return EmotiTokensService(db).balance_overview(current)


@router.post("/send", response_model=SendTokenResult)
def send_token(payload: SendTokenRequest, db: DbDep, current: UserDep):
    try:
        return EmotiTokensService(db).send_token(
            current,
            receiver_email=payload.receiver_email,
            token_type=payload.token_type,
            message=payload.message,
            amount=payload.amount,
        )
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/leaderboard", response_model=list[TokenLeaderboardRow])
def leaderboard(
    db: DbDep,
    _: UserDep,
    month: Annotated[str | None, Query(pattern=r"^\d{4}-\d{2}$")] = None,
):
    return EmotiTokensService(db).leaderboard(month)


@router.get("/employees", response_model=list[EmployeeRead])
def employees(
    db: DbDep,
    _: UserDep,
    search: Annotated[str | None, Query(max_length=100)] = None,
):
    return EmotiTokensService(db).search_employees(search)
