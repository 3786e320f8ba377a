"""Tests for the rate limit monitor."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from loguru import logger

from gh_analyzer.github.rate_limit import RateLimitMonitor, parse_rate_limit


def _make_response(
    remaining: str | None = None, reset: str | None = None, limit: str | None = None
) -> MagicMock:
    headers = {}
    if remaining is not None:
        headers["X-RateLimit-Remaining"] = remaining
    if reset is not None:
        headers["X-RateLimit-Reset"] = reset
    if limit is not None:
        headers["X-RateLimit-Limit"] = limit
    resp = MagicMock()
    resp.headers = headers
    return resp


def test_snapshot_reads_limit_and_reset_headers():
    monitor = RateLimitMonitor()
    monitor.update(_make_response(remaining="4321", limit="5000", reset="1700000000"))
    status = monitor.snapshot()
    assert status.limit == 5000
    assert status.remaining == 4321
    assert status.reset_at == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)


def test_response_without_quota_headers_keeps_previous_snapshot():
    monitor = RateLimitMonitor()
    monitor.update(_make_response(remaining="7", limit="60", reset="1700000000"))
    monitor.update(_make_response())
    assert monitor.snapshot().remaining == 7
    assert monitor.is_low is True


@pytest.mark.parametrize(
    "headers",
    [
        {"remaining": "n/a"},
        {"remaining": "5", "limit": "sixty"},
        {"remaining": "5", "limit": "60", "reset": "soon"},
    ],
)
def test_malformed_headers_do_not_raise(headers):
    warnings = []
    sink_id = logger.add(warnings.append, level="WARNING")
    try:
        monitor = RateLimitMonitor()
        monitor.update(_make_response(**headers))
    finally:
        logger.remove(sink_id)
    assert monitor.snapshot() is None
    assert warnings == []


def test_is_low_below_threshold():
    monitor = RateLimitMonitor(threshold=10)
    monitor.update(_make_response(remaining="9"))
    assert monitor.is_low is True


def test_not_low_at_threshold():
    monitor = RateLimitMonitor(threshold=10)
    monitor.update(_make_response(remaining="10"))
    assert monitor.is_low is False


def test_warns_only_once():
    warnings = []
    sink_id = logger.add(warnings.append, level="WARNING")
    try:
        monitor = RateLimitMonitor(threshold=10)
        monitor.update(_make_response(remaining="5"))
        monitor.update(_make_response(remaining="4"))
    finally:
        logger.remove(sink_id)
    assert len(warnings) == 1
    assert "Low rate limit" in warnings[0]


def test_snapshot_requires_all_headers():
    monitor = RateLimitMonitor()
    monitor.update(_make_response(remaining="50"))
    assert monitor.snapshot() is None

    monitor.update(_make_response(remaining="50", limit="60", reset="1700000000"))
    status = monitor.snapshot()
    assert status.remaining == 50
    assert status.limit == 60


def test_parse_rate_limit():
    status = parse_rate_limit(
        {"resources": {"core": {"remaining": 3, "limit": 60, "reset": 1700000000}}}
    )
    assert status.remaining == 3
    assert status.limit == 60
    assert status.is_low is True


def test_parse_rate_limit_missing_core():
    with pytest.raises(KeyError):
        parse_rate_limit({"resources": {}})
