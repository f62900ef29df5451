from __future__ import annotations

import logging

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from agentgift.core.config import settings
from agentgift.modules.access.service import FeatureAccessService
from agentgift.modules.access.tiers import TIER_NAMES
from agentgift.modules.llm import ChatCompletionProvider
from agentgift.modules.users.models import User
from .models import ConciergeMessage, ConciergeSession
from .repository import ConciergeRepository
from .schemas import ConciergeChatRequest, ConciergeChatResponse, ConciergeMessageRead

logger = logging.getLogger(__name__)

CONCIERGE_FEATURE = "gift_concierge"

PERSONA_PROMPTS = {
    "avelyn": (
        "You are Avelyn, AgentGift's romance and relationships concierge. "
        "You are warm, direct and emotionally expressive. Recommend gifts that make someone's heart skip a beat "
        "and explain the emotional impact of each idea."
    ),
    "galen": (
        "You are Galen, AgentGift's technology concierge. "
        "You favour quality, precision and practical innovation. Recommend gadgets and tech experiences and "
        "explain why each one fits the recipient's habits."
    ),
    "zola": (
        "You are Zola, AgentGift's luxury concierge. "
        "You focus on craftsmanship, heritage and exclusive experiences. Recommend refined gifts and explain "
        "what makes each one special."
    ),
}

GUIDELINES = (
    "Ask at most one clarifying question when the budget, recipient or occasion is unknown. "
    "Suggest two or three concrete gift ideas with an approximate price range. "
    "Keep replies under 200 words."
)


class ConciergeAccessDenied(PermissionError):
    pass


class ConciergeService:
    def __init__(self, db: Session, provider: ChatCompletionProvider):
        self.db = db
        self.repo = ConciergeRepository(db)
        self.access = FeatureAccessService(db)
        self.provider = provider

    def _check_access(self, user: User) -> bool:
        """Return True when this request consumes the user's one-time trial."""
        result = self.access.check(user, CONCIERGE_FEATURE)
        if result.has_access:
            return False
        if result.can_trial:
            return True
        raise ConciergeAccessDenied("Gift concierge requires the Agent 00G tier")

    async def handle_request(self, *, user: User, payload: ConciergeChatRequest) -> ConciergeChatResponse:
        is_trial = self._check_access(user)
        session = self._ensure_session(payload.session_id, user=user, persona=payload.persona)

        if not session.title:
            session.title = payload.message.strip().splitlines()[0][:80]
            self.db.add(session)

        self.repo.add_message(session_id=session.id, role="user", content=payload.message, metadata=None)

        try:
            reply_text = await run_in_threadpool(
                self.provider.generate,
                self._build_prompt_messages(user, session),
                temperature=settings.OPENAI_TEMPERATURE,
            )
            reply = self.repo.add_message(
                session_id=session.id,
                role="assistant",
                content=reply_text,
                metadata={"provider": self.provider.name(), "persona": session.persona},
            )
            session.updated_at = reply.created_at
            self.db.add(session)
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.exception("Concierge conversation failed for %s", user.id)
            raise

        self.access.record_feature_usage(user, CONCIERGE_FEATURE, is_trial=is_trial)
        return ConciergeChatResponse(
            session_id=session.id,
            persona=session.persona,
            reply=to_message_read(reply),
            total_messages=self.repo.message_count(session.id),
            used_trial=is_trial,
        )

    def _ensure_session(self, session_id: str | None, *, user: User, persona: str) -> ConciergeSession:
        if session_id:
            session = self.repo.get_session(session_id, user_id=user.id)
            if session:
                return session
            logger.warning("Concierge session %s not found; starting a new one", session_id)
        return self.repo.create_session(user_id=user.id, persona=persona)

    def _build_prompt_messages(self, user: User, session: ConciergeSession) -> list[dict[str, str]]:
        persona = PERSONA_PROMPTS.get(session.persona, PERSONA_PROMPTS["avelyn"])
        profile = f"The customer is on the {TIER_NAMES.get(user.tier, 'Free Agent')} plan at level {user.level or 1}."
        messages = [{"role": "system", "content": f"{persona} {GUIDELINES} {profile}"}]
        history = self.repo.list_messages(session.id)
        limit = max(1, settings.CONCIERGE_MAX_HISTORY_MESSAGES)
        messages.extend({"role": m.role, "content": m.content} for m in history[-limit:])
        return messages


def to_message_read(message: ConciergeMessage) -> ConciergeMessageRead:
    return ConciergeMessageRead(
        id=message.id,
        role=message.role,
        content=message.content,
        created_at=message.created_at,
        metadata=message.payload or {},
    )
