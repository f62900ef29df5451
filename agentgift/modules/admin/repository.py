from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from agentgift.modules.emotitokens.models import EmotiTokenTransaction
from .models import RegisteredFeature


class AdminRepository:
    def __init__(self, db: Session):
        self.db = db

    def list_features(self) -> list[RegisteredFeature]:
        stmt = select(RegisteredFeature).order_by(RegisteredFeature.sort_order, RegisteredFeature.name)
        return list(self.db.scalars(stmt))

    def get_feature(self, feature_id: str) -> Optional[RegisteredFeature]:
        return self.db.get(RegisteredFeature, feature_id)

    def get_feature_by_slug(self, slug: str) -> Optional[RegisteredFeature]:
        return self.db.scalar(select(RegisteredFeature).where(RegisteredFeature.slug == slug))

    def add_feature(self, feature: RegisteredFeature) -> RegisteredFeature:
        self.db.add(feature)
        self.db.commit()
        self.db.refresh(feature)
        return feature

    def delete_feature(self, feature: RegisteredFeature) -> None:
        self.db.delete(feature)
        self.db.commit()

    def count_token_transactions_since(self, since: datetime) -> int:
        stmt = select(func.count(EmotiTokenTransaction.id)).where(EmotiTokenTransaction.created_at >= since)
        return int(self.db.scalar(stmt) or 0)
