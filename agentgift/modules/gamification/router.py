from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from agentgift.api.deps import get_current_user
from agentgift.core.database import get_db
from agentgift.modules.users.models import User
from .repository import GamificationRepository
from .schemas import BadgeRead, GamificationProfile, LeaderboardRow
from .service import GamificationService


router = APIRouter(prefix="/gamification", tags=["gamification"])


@router.get("/me", response_model=GamificationProfile)
def my_progress(
    db: Annotated[Session, Depends(get_db)],
    current: Annotated[User, Depends(get_current_user)],
):
    return GamificationService(db).profile(current)


@router.get("/badges", response_model=list[BadgeRead])
def list_badges(db: Annotated[Session, Depends(get_db)]):
    return GamificationRepository(db).list_badges()


@router.get("/leaderboard", response_model=list[LeaderboardRow])
def xp_leaderboard(
    db: Annotated[Session, Depends(get_db)],
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
):
    return GamificationService(db).leaderboard(limit)
