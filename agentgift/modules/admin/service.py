from __future__ import annotations

import logging
import re
from datetime import timedelta

from sqlalchemy.orm import Session

from agentgift.core.database import utcnow
from agentgift.modules.access.tiers import TIER_LEVELS
from agentgift.modules.agentvault.repository import VaultRepository
from agentgift.modules.ghost_hunt.repository import GhostHuntRepository
from agentgift.modules.users.repository import UsersRepository
from .models import RegisteredFeature
from .repository import AdminRepository
from .schemas import FeatureCreate, FeatureUpdate, ReportRange, UsageReport

logger = logging.getLogger(__name__)

REPORT_WINDOWS: dict[str, timedelta] = {
    "weekly": timedelta(days=7),
    "monthly": timedelta(days=30),
    "seasonal": timedelta(days=90),
}


def _slugify(value: str) -> str:
    slug = re.sub(r"[^a-zA-Z0-9]+", "-", value.strip().lower()).strip("-")
    return slug or value.strip().lower()


def _check_tier(tier: str) -> None:
    if tier not in TIER_LEVELS:
        raise ValueError(f"Unknown tier '{tier}'")


class AdminService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = AdminRepository(db)

    # ---- Feature registry ----
    def list_features(self) -> list[RegisteredFeature]:
        return self.repo.list_features()

    def create_feature(self, data: FeatureCreate) -> RegisteredFeature:
        slug = _slugify(data.slug)
        if self.repo.get_feature_by_slug(slug):
            raise ValueError("A feature with this slug already exists")
        _check_tier(data.required_tier)
        feature = RegisteredFeature(**data.model_dump(exclude={"slug", "name"}), slug=slug, name=data.name.strip())
        persisted = self.repo.add_feature(feature)
        logger.info("Registered feature %s", slug)
        return persisted

    def update_feature(self, feature_id: str, data: FeatureUpdate) -> RegisteredFeature:
        feature = self.repo.get_feature(feature_id)
        if not feature:
            raise LookupError("Feature not found")
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if "required_tier" in changes:
            _check_tier(changes["required_tier"])
        if "name" in changes:
            changes["name"] = changes["name"].strip()
        for field, value in changes.items():
            setattr(feature, field, value)
        return self.repo.add_feature(feature)

    def delete_feature(self, feature_id: str) -> None:
        feature = self.repo.get_feature(feature_id)
        if not feature:
            raise LookupError("Feature not found")
        self.repo.delete_feature(feature)
        logger.info("Removed feature %s", feature.slug)

    # ---- Reports ----
    def usage_report(self, range_: ReportRange = "weekly") -> UsageReport:
        """Platform totals plus signups and EmotiToken activity inside the window."""
        now = utcnow()
        since = now - REPORT_WINDOWS[range_]
        users = UsersRepository(self.db)
        by_tier = users.count_by_tier()
        return UsageReport(
            range=range_,
            since=since,
            generated_at=now,
            total_users=sum(by_tier.values()),
            new_users=users.count_created_since(since),
            users_by_tier=by_tier,
            total_xp=users.total_xp(),
            credits_spent=users.total_credits_spent(),
            emotitoken_transactions=self.repo.count_token_transactions_since(since),
            vault_bids=VaultRepository(self.db).count_bids(),
            active_ghost_hunts=GhostHuntRepository(self.db).count_active(),
        )


def discord_report_payload(report: UsageReport) -> dict:
    tiers = ", ".join(f"{tier}: {count}" for tier, count in sorted(report.users_by_tier.items())) or "none"
    return {
        "content": f"AgentGift {report.range} report",
        "embeds": [
            {
                "title": f"{report.range.capitalize()} platform report",
                "timestamp": report.generated_at.isoformat(),
                "fields": [
                    {"name": "Total users", "value": str(report.total_users), "inline": True},
                    {"name": "New users", "value": str(report.new_users), "inline": True},
                    {"name": "XP distributed", "value": str(report.total_xp), "inline": True},
                    {"name": "Credits spent", "value": str(report.credits_spent), "inline": True},
                    {"name": "EmotiTokens sent", "value": str(report.emotitoken_transactions), "inline": True},
                    {"name": "Vault bids", "value": str(report.vault_bids), "inline": True},
                    {"name": "Active ghost hunts", "value": str(report.active_ghost_hunts), "inline": True},
                    {"name": "Users per tier", "value": tiers},
                ],
            }
        ],
    }
