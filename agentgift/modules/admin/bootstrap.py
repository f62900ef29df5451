from __future__ import annotations

import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from agentgift.core.database import Base
from agentgift.core.module_loader import import_all_models
from agentgift.modules.access.tiers import FEATURE_CONFIGS
from agentgift.modules.emotitokens.service import ensure_default_token_types
from agentgift.modules.gamification.bootstrap import ensure_default_badges
from agentgift.modules.users.bootstrap import ensure_default_admin
from .models import RegisteredFeature
from .repository import AdminRepository


logger = logging.getLogger(__name__)


def ensure_default_features(db: Session) -> int:
    """Mirror the credit-priced features into the registry so admins can manage them."""
    repo = AdminRepository(db)
    created = 0
    for order, (slug, config) in enumerate(FEATURE_CONFIGS.items()):
        if repo.get_feature_by_slug(slug):
            continue
        db.add(
            RegisteredFeature(
                slug=slug,
                name=config.name,
                required_tier=config.required_tier,
                credit_cost=config.credits_needed,
                is_active=config.enabled,
                sort_order=order,
            )
        )
        created += 1
    if created:
        db.commit()
        logger.info("Seeded %s registered features", created)
    return created


def run_bootstraps(db: Session) -> None:
    ensure_default_admin(db)
    ensure_default_badges(db)
    ensure_default_token_types(db)
    ensure_default_features(db)


def sync_tables(engine: Engine) -> tuple[list[str], list[str]]:
    """Create every discovered table that is missing. Returns (created, known)."""
    import_all_models()
    before = set(inspect(engine).get_table_names())
    Base.metadata.create_all(bind=engine, checkfirst=True)
    after = set(inspect(engine).get_table_names())
    return sorted(after - before), sorted(after)
