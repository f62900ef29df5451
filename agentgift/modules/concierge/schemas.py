from __future__ import annotations

from datetime import datetime
from typing import Any, List, Literal

from pydantic import BaseModel, Field


Persona = Literal["avelyn", "galen", "zola"]


class ConciergeMessageRead(BaseModel):
    id: str
    role: str
    content: str
    created_at: datetime
    metadata: dict[str, Any] | None = None


class ConciergeSessionSummary(BaseModel):
    id: str
    persona: str
    title: str | None = None
    created_at: datetime
    updated_at: datetime
    message_count: int


class ConciergeSessionRead(BaseModel):
    id: str
    persona: str
    title: str | None = None
    created_at: datetime
    updated_at: datetime
    messages: List[ConciergeMessageRead]


class ConciergeChatRequest(BaseModel):
    message: str = Field(min_length=1, max_length=4000)
    session_id: str | None = None
    persona: Persona = "avelyn"


class ConciergeChatResponse(BaseModel):
    session_id: str
    persona: str
    reply: ConciergeMessageRead
    total_messages: int
    used_trial: bool = False


class ConciergeDeleteResponse(BaseModel):
    session_id: str
    deleted: bool
