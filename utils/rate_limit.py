"""
Fixed-window, per-client request limiter kept in process memory.
"""
from __future__ import annotations

import threading
import time

from flask import current_app, request

from blog_api.errors import RateLimited

WINDOW_SECONDS = 60


class RateLimiter:
    def __init__(self, window_seconds: int = WINDOW_SECONDS):
        self.window_seconds = window_seconds
        self._hits: dict[str, tuple[int, int]] = {}
        self._lock = threading.Lock()

    def hit(self, identifier: str, limit: int, now: float | None = None) -> bool:
        """Record one request; return False once the window's limit is exceeded."""
        window = int((now if now is not None else time.time()) // self.window_seconds)
        with self._lock:
            start, count = self._hits.get(identifier, (window, 0))
            if start != window:
                start, count = window, 0
            count += 1
            self._hits[identifier] = (start, count)
        return count <= limit

    def reset(self, identifier: str | None = None):
        with self._lock:
            if identifier is None:
                self._hits.clear()
            else:
                self._hits.pop(identifier, None)


def init_rate_limiting(app):
    limiter = RateLimiter()
    app.extensions["rate_limiter"] = limiter

    @app.before_request
    def enforce_rate_limit():
        if not current_app.config.get("RATELIMIT_ENABLED"):
            return None
        limit = current_app.config.get("RATELIMIT_PER_MINUTE", 60)
        if not limiter.hit(request.remote_addr or "unknown", limit):
            raise RateLimited()
        return None

    return limiter
