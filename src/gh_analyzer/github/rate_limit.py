"""Rate limit tracking from GitHub response headers."""

from __future__ import annotations

from datetime import datetime, timezone

import httpx
from loguru import logger

from ..models import RateLimitStatus


class RateLimitMonitor:
    """Remember the quota reported by the last response.

    Purely observational: a single warning is logged once the remaining
    quota drops below ``threshold``. Requests are never delayed.
    """

    def __init__(self, threshold: int = 10) -> None:
        self._threshold = threshold
        self._remaining: int | None = None
        self._limit: int | None = None
        self._reset_at: datetime | None = None
        self._warned = False

    def update(self, response: httpx.Response) -> None:
        remaining = response.headers.get("X-RateLimit-Remaining")
        limit = response.headers.get("X-RateLimit-Limit")
        reset = response.headers.get("X-RateLimit-Reset")
        try:
            if remaining is not None:
                self._remaining = int(remaining)
            if limit is not None:
                self._limit = int(limit)
            if reset is not None:
                self._reset_at = datetime.fromtimestamp(float(reset), tz=timezone.utc)
        except (ValueError, OverflowError, OSError) as exc:
            logger.debug("Ignoring malformed rate limit header: {}", exc)
            return

        if self.is_low and not self._warned:
            self._warned = True
            logger.warning(
                "Low rate limit remaining ({}), resets at {}",
                self._remaining,
                self._reset_at.isoformat() if self._reset_at else "unknown",
            )

    @property
    def is_low(self) -> bool:
        return self._remaining is not None and self._remaining < self._threshold

    def snapshot(self) -> RateLimitStatus | None:
        """Return the last observed quota, if every header has been seen."""
        if self._remaining is None or self._limit is None or self._reset_at is None:
            return None
        return RateLimitStatus(
            remaining=self._remaining, limit=self._limit, reset_at=self._reset_at
        )


def parse_rate_limit(payload: dict) -> RateLimitStatus:
    """Build a RateLimitStatus from a ``GET /rate_limit`` body."""
    core = payload["resources"]["core"]
    return RateLimitStatus(
        remaining=int(core["remaining"]),
        limit=int(core["limit"]),
        reset_at=datetime.fromtimestamp(int(core["reset"]), tz=timezone.utc),
    )
