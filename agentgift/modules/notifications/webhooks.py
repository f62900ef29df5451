"""Outbound webhook clients (Make automation scenarios and Discord)."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

import requests
from requests import RequestException

from agentgift.core.config import settings


logger = logging.getLogger(__name__)

USER_AGENT = "AgentGift-API/1.0"
MAKE_EVENT_TYPES = {"message", "tts", "gift_search", "feature_usage"}


class WebhookNotConfigured(RuntimeError):
    pass


class WebhookDeliveryError(RuntimeError):
    def __init__(self, status_code: int, body: str):
        super().__init__(f"Webhook delivery failed with status {status_code}")
        self.status_code = status_code
        self.body = body


class MakeWebhookClient:
    def __init__(self, url: str | None = None, timeout: int | None = None) -> None:
        configured = url if url is not None else settings.MAKE_WEBHOOK_URL
        self.url = str(configured) if configured else None
        self.timeout = timeout or settings.WEBHOOK_TIMEOUT_SECONDS
        self.session = requests.Session()

    @staticmethod
    def build_payload(event_type: str, data: dict[str, Any], user_id: str | None = None) -> dict[str, Any]:
        return {
            "type": event_type,
            "data": data,
            "userId": user_id or "system",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    def trigger(self, event_type: str, data: dict[str, Any], user_id: str | None = None) -> bool:
        """Deliver one event. Never raises; returns whether delivery succeeded."""
        if event_type not in MAKE_EVENT_TYPES:
            logger.warning("Unknown Make event type %s", event_type)
        if not self.url:
            logger.warning("MAKE_WEBHOOK_URL not configured, skipping webhook trigger")
            return False
        payload = self.build_payload(event_type, data, user_id)
        try:
            response = self.session.post(
                self.url,
                json=payload,
                headers={"User-Agent": USER_AGENT},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except RequestException as exc:
            logger.error("Failed to trigger Make webhook for %s: %s", event_type, exc)
            return False
        logger.info("Make webhook triggered for %s", event_type)
        return True

    def gift_search(self, query: str, user_id: str | None = None) -> bool:
        return self.trigger("gift_search", {"query": query}, user_id)

    def feature_usage(self, feature_id: str, user_id: str | None = None, metadata: dict[str, Any] | None = None) -> bool:
        return self.trigger("feature_usage", {"featureId": feature_id, "metadata": metadata}, user_id)


class DiscordWebhookClient:
    def __init__(self, url: str | None = None, timeout: int | None = None) -> None:
        configured = url if url is not None else settings.DISCORD_WEBHOOK_URL
        self.url = str(configured) if configured else None
        self.timeout = timeout or settings.WEBHOOK_TIMEOUT_SECONDS
        self.session = requests.Session()

    def send(self, payload: dict[str, Any]) -> None:
        if not self.url:
            raise WebhookNotConfigured("Missing DISCORD_WEBHOOK_URL environment variable")
        response = self.session.post(
            self.url,
            json=payload,
            headers={"User-Agent": USER_AGENT},
            timeout=self.timeout,
        )
        if not response.ok:
            raise WebhookDeliveryError(response.status_code, response.text)
        logger.info("Discord webhook delivered (%s)", response.status_code)


def get_make_client() -> MakeWebhookClient:
    return MakeWebhookClient()


def get_discord_client() -> DiscordWebhookClient:
    return DiscordWebhookClient()
