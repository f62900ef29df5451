from __future__ import annotations

from typing import Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from .models import ConciergeMessage, ConciergeSession


class ConciergeRepository:
    def __init__(self, db: Session):
        self.db = db

    def create_session(self, *, user_id: str, persona: str) -> ConciergeSession:
        session = ConciergeSession(user_id=user_id, persona=persona)
        self.db.add(session)
        self.db.flush()
        return session

    def get_session(self, session_id: str, *, user_id: str) -> ConciergeSession | None:
        stmt = (
            select(ConciergeSession)
            .where(ConciergeSession.id == session_id, ConciergeSession.user_id == user_id)
            .options(selectinload(ConciergeSession.messages))
        )
        return self.db.scalar(stmt)

    def list_sessions(self, *, user_id: str, limit: int = 50) -> Sequence[ConciergeSession]:
        stmt = (
            select(ConciergeSession)
            .where(ConciergeSession.user_id == user_id)
            .order_by(ConciergeSession.updated_at.desc())
            .limit(limit)
        )
        return list(self.db.scalars(stmt))

    def delete_session(self, session_id: str, *, user_id: str) -> bool:
        session = self.get_session(session_id, user_id=user_id)
        if not session:
            return False
        self.db.delete(session)
        return True

    def add_message(self, *, session_id: str, role: str, content: str, metadata: dict | None) -> ConciergeMessage:
        message = ConciergeMessage(session_id=session_id, role=role, content=content, payload=metadata or {})
        self.db.add(message)
        self.db.flush()
        return message

    def list_messages(self, session_id: str) -> Sequence[ConciergeMessage]:
        stmt = (
            select(ConciergeMessage)
            .where(ConciergeMessage.session_id == session_id)
            .order_by(ConciergeMessage.created_at.asc())
        )
        return list(self.db.scalars(stmt))

    def message_count(self, session_id: str) -> int:
        stmt = select(func.count(ConciergeMessage.id)).where(ConciergeMessage.session_id == session_id)
        return self.db.scalar(stmt) or 0
