from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from agentgift.api.deps import get_current_user
from agentgift.core.database import get_db
from agentgift.modules.users.models import User
from .schemas import AccessCheckResult, FeatureAccessEntry, FeatureAccessRequest, FeatureAccessResult
from .service import FeatureAccessService, check_user_access, get_upgrade_url
from .tiers import FEATURE_ACCESS


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/feature-access", tags=["feature-access"])


DbDep = Annotated[Session, Depends(get_db)]
UserDep = Annotated[User, Depends(get_current_user)]


def _entry(feature: str, result: FeatureAccessResult) -> FeatureAccessEntry:
    return FeatureAccessEntry(
        feature=feature,
        description=FEATURE_ACCESS[feature].description,
        upgrade_url=None if result.has_access else get_upgrade_url(result.required_tier),
        **result.model_dump(),
    )


@router.get("", response_model=list[FeatureAccessEntry] | FeatureAccessEntry)
def list_feature_access(
    db: DbDep,
    current: UserDep,
    feature: Annotated[str | None, Query()] = None,
):
    svc = FeatureAccessService(db)
    if feature:
        try:
            return _entry(feature, svc.check(current, feature))
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return [_entry(name, svc.check(current, name)) for name in FEATURE_ACCESS]


@router.post("", response_model=FeatureAccessResult)
def feature_access_action(payload: FeatureAccessRequest, db: DbDep, current: UserDep):
    if not payload.feature:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Feature name required")
    svc = FeatureAccessService(db)
    try:
        if payload.action == "check":
            return svc.check(current, payload.feature)
        if payload.action == "use":
            return svc.use(current, payload.feature, is_trial=payload.is_trial)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid action")


@router.get("/credits/{feature_name}", response_model=AccessCheckResult)
def credit_access(feature_name: str, current: UserDep):
    return check_user_access(current, feature_name)


@router.post("/credits/{feature_name}/consume", response_model=AccessCheckResult)
def consume_feature_credits(feature_name: str, db: DbDep, current: UserDep):
    result = FeatureAccessService(db).consume_credits(current, feature_name)
    if not result.access_granted:
        logger.info("Credit access refused for %s on %s: %s", current.id, feature_name, result.fallback_reason)
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail=result.model_dump(),
        )
    return result
