from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from openai import OpenAIError
from sqlalchemy.orm import Session

from agentgift.api.deps import get_current_user
from agentgift.core.database import get_db
from agentgift.modules.llm import ChatCompletionProvider, ProviderNotConfigured, get_chat_provider
from agentgift.modules.users.models import User
from .repository import ConciergeRepository
from .schemas import (
    ConciergeChatRequest,
    ConciergeChatResponse,
    ConciergeDeleteResponse,
    ConciergeSessionRead,
    ConciergeSessionSummary,
)
from .service import ConciergeAccessDenied, ConciergeService, to_message_read

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/concierge", tags=["concierge"])

DbDep = Annotated[Session, Depends(get_db)]
UserDep = Annotated[User, Depends(get_current_user)]


def chat_provider() -> ChatCompletionProvider:
    try:
        return get_chat_provider()
    except ProviderNotConfigured as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))


@router.post("/chat", response_model=ConciergeChatResponse)
async def chat(
    payload: ConciergeChatRequest,
    db: DbDep,
    current_user: UserDep,
    provider: Annotated[ChatCompletionProvider, Depends(chat_provider)],
) -> ConciergeChatResponse:
    service = ConciergeService(db, provider)
    try:
        return await service.handle_request(user=current_user, payload=payload)
    except ConciergeAccessDenied as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except OpenAIError:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Concierge is unavailable right now")


@router.get("/sessions", response_model=list[ConciergeSessionSummary])
def list_sessions(db: DbDep, current_user: UserDep) -> list[ConciergeSessionSummary]:
    repo = ConciergeRepository(db)
    return [
        ConciergeSessionSummary(
            id=session.id,
            persona=session.persona,
            title=session.title,
            created_at=session.created_at,
            updated_at=session.updated_at,
            message_count=repo.message_count(session.id),
        )
        for session in repo.list_sessions(user_id=current_user.id)
    ]


@router.get("/sessions/{session_id}", response_model=ConciergeSessionRead)
def read_session(session_id: str, db: DbDep, current_user: UserDep) -> ConciergeSessionRead:
    repo = ConciergeRepository(db)
    session = repo.get_session(session_id, user_id=current_user.id)
    if not session:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return ConciergeSessionRead(
        id=session.id,
        persona=session.persona,
        title=session.title,
        created_at=session.created_at,
        updated_at=session.updated_at,
        messages=[to_message_read(m) for m in repo.list_messages(session.id)],
    )


@router.delete("/sessions/{session_id}", response_model=ConciergeDeleteResponse)
def delete_session(session_id: str, db: DbDep, current_user: UserDep) -> ConciergeDeleteResponse:
    deleted = ConciergeRepository(db).delete_session(session_id, user_id=current_user.id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    db.commit()
    return ConciergeDeleteResponse(session_id=session_id, deleted=True)
