from __future__ import annotations

import hashlib
import threading
import time
from typing import Any

IDEMPOTENT_METHODS = {"POST", "PUT", "PATCH"}


def get_idempotency_key(
    method: str,
    path: str,
    provided_key: str | None = None,
    now: float | None = None,
) -> str:
    """Return the client's key, or derive one from the request inside a one-minute bucket."""
    if provided_key:
        return provided_key
    minute = int((now if now is not None else time.time()) // 60)
    raw = f"{method.upper()}:{path}:{minute}"
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()[:16]


def is_idempotent_request(method: str) -> bool:
    return method.upper() in IDEMPOTENT_METHODS


class IdempotencyCache:
    """Best-effort, per-process replay cache for JSON results."""

    def __init__(self, ttl_seconds: float = 600.0, max_entries: int = 2048) -> None:
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._entries: dict[tuple[str, str], tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, scope: str, key: str) -> Any | None:
        now = time.monotonic()
        with self._lock:
            entry = self._entries.get((scope, key))
            if entry is None:
                return None
            stored_at, value = entry
            if now - stored_at > self.ttl_seconds:
                self._entries.pop((scope, key), None)
                return None
            return value

    def put(self, scope: str, key: str, value: Any) -> None:
        now = time.monotonic()
        with self._lock:
            if len(self._entries) >= self.max_entries:
                self._evict(now)
            self._entries[(scope, key)] = (now, value)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _evict(self, now: float) -> None:
        expired = [k for k, (stored_at, _) in self._entries.items() if now - stored_at > self.ttl_seconds]
        for k in expired:
            del self._entries[k]
        while len(self._entries) >= self.max_entries:
            oldest = min(self._entries, key=lambda k: self._entries[k][0])
            del self._entries[oldest]
