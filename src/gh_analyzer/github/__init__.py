"""GitHub REST API access."""

from .client import GitHubClient, NullObserver, ProgressObserver
from .rate_limit import RateLimitMonitor

__all__ = ["GitHubClient", "NullObserver", "ProgressObserver", "RateLimitMonitor"]
