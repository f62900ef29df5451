import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse
from requests import RequestException
from sqlalchemy.orm import Session

from agentgift.api.deps import require_admin
from agentgift.core.database import get_db
from agentgift.core.rate_limit import RATE_LIMITS, limiter
from agentgift.modules.notifications.webhooks import (
    DiscordWebhookClient,
    WebhookDeliveryError,
    WebhookNotConfigured,
    get_discord_client,
)
from agentgift.modules.users.models import User
from agentgift.modules.users.schemas import AdminUserUpdate, UserRead
from agentgift.modules.users.service import UsersService
from .bootstrap import run_bootstraps, sync_tables
from .schemas import (
    DiscordReportResult,
    FeatureCreate,
    FeatureDeleted,
    FeatureRead,
    FeatureUpdate,
    ReportRange,
    SyncTablesResult,
    UsageReport,
)
from .service import AdminService, discord_report_payload


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])

DbDep = Annotated[Session, Depends(get_db)]
AdminDep = Annotated[User, Depends(require_admin)]


@router.get("/features", response_model=list[FeatureRead])
@limiter.limit(RATE_LIMITS["admin"])
def list_features(request: Request, db: DbDep, _: AdminDep):
    return AdminService(db).list_features()


@router.post("/features", response_model=FeatureRead, status_code=status.HTTP_201_CREATED)
@limiter.limit(RATE_LIMITS["admin"])
def create_feature(request: Request, payload: FeatureCreate, db: DbDep, _: AdminDep):
    try:
        return AdminService(db).create_feature(payload)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.put("/features/{feature_id}", response_model=FeatureRead)
@limiter.limit(RATE_LIMITS["admin"])
def update_feature(request: Request, feature_id: str, payload: FeatureUpdate, db: DbDep, _: AdminDep):
    try:
        return AdminService(db).update_feature(feature_id, payload)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.delete("/features/{feature_id}", response_model=FeatureDeleted)
@limiter.limit(RATE_LIMITS["admin"])
def delete_feature(request: Request, feature_id: str, db: DbDep, _: AdminDep):
    try:
        AdminService(db).delete_feature(feature_id)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return FeatureDeleted(id=feature_id)


@router.get("/reports", response_model=UsageReport)
@limiter.limit(RATE_LIMITS["admin"])
def usage_report(
    request: Request,
    db: DbDep,
    _: AdminDep,
    range_: Annotated[ReportRange, Query(alias="range")] = "weekly",
):
    return AdminService(db).usage_report(range_)


@router.post("/reports/discord", response_model=DiscordReportResult)
@limiter.limit(RATE_LIMITS["admin"])
def send_report_to_discord(
    request: Request,
    db: DbDep,
    _: AdminDep,
    client: Annotated[DiscordWebhookClient, Depends(get_discord_client)],
    range_: Annotated[ReportRange, Query(alias="range")] = "weekly",
):
    report = AdminService(db).usage_report(range_)
    try:
        client.send(discord_report_payload(report))
    except WebhookNotConfigured as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    except WebhookDeliveryError as e:
        return JSONResponse(status_code=e.status_code, content={"error": e.body})
    except RequestException as e:
        logger.exception("Discord report delivery failed")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    return DiscordReportResult(report=report)


@router.put("/users/{user_id}", response_model=UserRead)
@limiter.limit(RATE_LIMITS["admin"])
def update_user(request: Request, user_id: str, payload: AdminUserUpdate, db: DbDep, admin: AdminDep):
    try:
        user = UsersService(db).admin_update(user_id, payload)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    logger.info("Admin %s updated user %s", admin.id, user_id)
    return user


@router.post("/sync-tables", response_model=SyncTablesResult)
@limiter.limit(RATE_LIMITS["admin"])
def sync_tables_route(request: Request, db: DbDep, _: AdminDep):
    """Ensure all discovered models have their tables created and rerun bootstraps."""
    engine = db.get_bind()
    if engine is None:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Database engine unavailable")
    created, known = sync_tables(engine)
    run_bootstraps(db)
    return SyncTablesResult(created_tables=created, total_known_tables=known)
