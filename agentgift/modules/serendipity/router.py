import logging
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Body, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from agentgift.api.deps import get_current_user
from agentgift.core.database import get_db
from agentgift.core.rate_limit import RATE_LIMITS, limiter
from agentgift.modules.notifications.webhooks import MakeWebhookClient, get_make_client
from agentgift.modules.users.models import User
from .schemas import RevealRequest, RevealResponse, SaveRequest, SaveResponse, SerendipitySessionRead
from .service import DailyLimitReached, SerendipityService


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/serendipity", tags=["serendipity"])

DbDep = Annotated[Session, Depends(get_db)]
UserDep = Annotated[User, Depends(get_current_user)]


@router.post("/reveal", response_model=RevealResponse)
@limiter.limit(RATE_LIMITS["gift_suggestions"])
def reveal(
    request: Request,
    payload: RevealRequest,
    background_tasks: BackgroundTasks,
    db: DbDep,
    current: UserDep,
    make: Annotated[MakeWebhookClient, Depends(get_make_client)],
):
    try:
        result = SerendipityService(db).reveal(current, payload)
    except DailyLimitReached as e:
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=str(e))
    background_tasks.add_task(
        make.gift_search,
        f"{payload.emotional_state} {payload.occasion_type}",
        current.id,
    )
    return result


@router.get("/sessions", response_model=list[SerendipitySessionRead])
def list_sessions(db: DbDep, current: UserDep):
    return SerendipityService(db).list_sessions(current)


@router.post("/sessions/{session_id}/save", response_model=SaveResponse)
def save_session(
    session_id: str,
    db: DbDep,
    current: UserDep,
    payload: Annotated[SaveRequest | None, Body()] = None,
):
    action = payload.action if payload else "save_vault"
    try:
        return SerendipityService(db).save(current, session_id, action)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
