import logging
import random
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, Header, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from agentgift.api.deps import get_current_user, require_admin
from agentgift.core.database import get_db
from agentgift.core.idempotency import IdempotencyCache, get_idempotency_key, is_idempotent_request
from agentgift.core.rate_limit import RATE_LIMITS, limiter
from agentgift.modules.notifications.webhooks import MakeWebhookClient, get_make_client
from agentgift.modules.users.models import User
from .schemas import (
    AuctionStatus,
    BidRequest,
    BidResponse,
    CoinAwardRequest,
    CoinAwardResponse,
    TeamCoins,
    TeamStanding,
    VaultItemCreate,
    VaultItemList,
    VaultItemRead,
)
from .service import AgentVaultService


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/agentvault", tags=["agentvault"])

DbDep = Annotated[Session, Depends(get_db)]

EXCITEMENT_MESSAGES = [
    "🔥 The competition heats up! Another team enters the fray!",
    "⚡ Bold move! The leaderboard is shifting!",
    "🎯 Direct hit! This item is getting serious attention!",
    "🚀 The bidding war intensifies! Who will claim victory?",
    "💎 A worthy challenger appears! The stakes are rising!",
]

bid_replays = IdempotencyCache()


@router.post("/bid", response_model=BidResponse)
@limiter.limit(RATE_LIMITS["api"])
def place_bid(
    request: Request,
    payload: BidRequest,
    background_tasks: BackgroundTasks,
    db: DbDep,
    current: Annotated[User, Depends(get_current_user)],
    make: Annotated[MakeWebhookClient, Depends(get_make_client)],
    idempotency_key: Annotated[str | None, Header(alias="Idempotency-Key")] = None,
):
    if not payload.item_id or not payload.team_id or not payload.bid_amount or not payload.user_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing required fields")

    # Only client-supplied keys are replayed.
    replay_key = None
    if idempotency_key and is_idempotent_request(request.method):
        replay_key = get_idempotency_key(request.method, request.url.path, idempotency_key)
        replay = bid_replays.get(current.id, replay_key)
        if replay is not None:
            logger.info("Replaying bid for key %s", replay_key)
            return replay

    try:
        outcome = AgentVaultService(db).place_team_bid(
            item_id=payload.item_id,
            team_id=payload.team_id,
            team_name=payload.team_name,
            bid_amount=payload.bid_amount,
            user_id=payload.user_id,
            user_name=payload.user_name,
            message=payload.message or None,
        )
    except Exception:
        logger.exception("AgentVault bid error")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to place bid")

    if not outcome.success:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=outcome.error)

    response = BidResponse(
        success=True,
        is_edit=outcome.is_edit,
        new_top_bid=outcome.new_top_bid,
        bid_count=outcome.bid_count,
        excitement_message=random.choice(EXCITEMENT_MESSAGES),
        action_type="edited" if outcome.is_edit else "placed",
    )
    if replay_key:
        bid_replays.put(current.id, replay_key, response)
    background_tasks.add_task(
        make.feature_usage,
        "agentvault_bid",
        current.id,
        {"itemId": payload.item_id, "teamId": payload.team_id, "bidAmount": payload.bid_amount},
    )
    return response


@router.get("/items", response_model=VaultItemList)
def list_items(db: DbDep, tier: Annotated[str | None, Query()] = None):
    items = AgentVaultService(db).list_items(tier)
    return VaultItemList(items=items, total=len(items))


@router.post("/items", response_model=VaultItemRead, status_code=status.HTTP_201_CREATED)
@limiter.limit(RATE_LIMITS["admin"])
def create_item(
    request: Request,
    data: VaultItemCreate,
    db: DbDep,
    _: Annotated[User, Depends(require_admin)],
):
    return AgentVaultService(db).create_item(data)


@router.get("/coins", response_model=TeamCoins)
def team_coins(
    db: DbDep,
    _: Annotated[User, Depends(get_current_user)],
    team_id: Annotated[str | None, Query(alias="teamId")] = None,
):
    if not team_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing teamId")
    return AgentVaultService(db).get_team_coins(team_id)


@router.post("/coins", response_model=CoinAwardResponse)
@limiter.limit(RATE_LIMITS["admin"])
def award_coins(
    request: Request,
    payload: CoinAwardRequest,
    db: DbDep,
    _: Annotated[User, Depends(require_admin)],
):
    if not payload.team_id or not payload.amount or not payload.source:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing required fields")
    try:
        AgentVaultService(db).award_vibe_coins(
            team_id=payload.team_id,
            amount=payload.amount,
            source=payload.source,
            source_id=payload.source_id,
            description=payload.description,
            user_id=payload.user_id,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return CoinAwardResponse(success=True, awarded=payload.amount, source=payload.source)


@router.get("/leaderboard", response_model=list[TeamStanding])
def team_leaderboard(db: DbDep):
    return AgentVaultService(db).leaderboard()


@router.get("/status", response_model=AuctionStatus)
def auction_status(db: DbDep):
    return AgentVaultService(db).auction_status()
