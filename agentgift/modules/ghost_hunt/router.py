from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from agentgift.api.deps import get_current_user
from agentgift.core.database import get_db
from agentgift.modules.users.models import User
from .schemas import (
    AnswerEnvelope,
    ClueAnswerRead,
    CompleteEnvelope,
    CompleteRequest,
    HuntLeaderboardRow,
    SessionEnvelope,
    StartSessionRequest,
    SubmitAnswerRequest,
)
from .service import GhostHuntService


router = APIRouter(prefix="/ghost-hunt", tags=["ghost-hunt"])

DbDep = Annotated[Session, Depends(get_db)]
UserDep = Annotated[User, Depends(get_current_user)]


@router.post("/sessions", response_model=SessionEnvelope, status_code=status.HTTP_201_CREATED)
def start_session(payload: StartSessionRequest, db: DbDep, current: UserDep):
    try:
        session = GhostHuntService(db).start_session(current, payload)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return SessionEnvelope(session=session)


@router.get("/sessions", response_model=SessionEnvelope)
def active_session(db: DbDep, current: UserDep):
    return SessionEnvelope(session=GhostHuntService(db).active_session(current))


@router.post("/clues", response_model=AnswerEnvelope)
def submit_answer(payload: SubmitAnswerRequest, db: DbDep, current: UserDep):
    try:
        answer, session = GhostHuntService(db).submit_answer(current, payload)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return AnswerEnvelope(clue_answer=answer, session=session)


@router.get("/clues", response_model=list[ClueAnswerRead])
def list_answers(
    db: DbDep,
    current: UserDep,
    session_id: Annotated[str | None, Query(alias="sessionId")] = None,
):
    if not session_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Session ID required")
    try:
        return GhostHuntService(db).list_answers(current, session_id)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post("/complete", response_model=CompleteEnvelope)
def complete_hunt(payload: CompleteRequest, db: DbDep, current: UserDep):
    try:
        session, badges, xp = GhostHuntService(db).complete(current, payload)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return CompleteEnvelope(session=session, badges_awarded=badges, xp_awarded=xp)


@router.get("/leaderboard", response_model=list[HuntLeaderboardRow])
def leaderboard(
    db: DbDep,
    season: Annotated[str | None, Query()] = None,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
):
    return GhostHuntService(db).leaderboard(season, limit)
