from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from .models import Badge
from .repository import GamificationRepository


logger = logging.getLogger(__name__)


DEFAULT_BADGES = [
    {"slug": "first-reveal", "name": "First Reveal", "emoji": "✨", "xp_reward": 10,
     "description": "Opened your first Serendipity reveal"},
    {"slug": "ghost-hunter", "name": "Ghost Hunter", "emoji": "👻", "xp_reward": 25,
     "description": "Completed a Ghost Hunt"},
    {"slug": "speed-demon", "name": "Speed Demon", "emoji": "⚡", "xp_reward": 15,
     "description": "Finished a Ghost Hunt with time to spare"},
    {"slug": "vault-bidder", "name": "Vault Bidder", "emoji": "💎", "xp_reward": 10,
     "description": "Placed a bid in the AgentVault"},
    {"slug": "kind-soul", "name": "Kind Soul", "emoji": "💝", "xp_reward": 10,
     "description": "Sent your first EmotiToken"},
]


def ensure_default_badges(db: Session) -> int:
    repo = GamificationRepository(db)
    created = 0
    for defaults in DEFAULT_BADGES:
        if repo.get_badge(defaults["slug"]):
            continue
        repo.add_badge(Badge(**defaults))
        created += 1
    if created:
        db.commit()
        logger.info("Seeded %s default badges", created)
    return created
