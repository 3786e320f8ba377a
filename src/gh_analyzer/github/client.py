"""Async GitHub REST API client."""

from __future__ import annotations

from types import TracebackType
from typing import Any, Callable, Protocol, TypeVar

import httpx
from loguru import logger

from .. import __version__
from ..errors import (
    ApiError,
    AuthFailed,
    NotFound,
    PartialDataUnavailable,
    RateLimited,
    TransportError,
)
from ..models import (
    Account,
    Commit,
    LanguageBreakdown,
    Lookup,
    RateLimitStatus,
    Repository,
)
from .rate_limit import RateLimitMonitor, parse_rate_limit

API_URL = "https://api.github.com"
DEFAULT_TIMEOUT = 30.0
REPOS_PAGE_SIZE = 100

T = TypeVar("T")


class ProgressObserver(Protocol):
    """Receives progress notifications for each API operation."""

    def start(self, message: str) -> None: ...

    def update(self, message: str) -> None: ...

    def succeed(self, message: str) -> None: ...

    def fail(self, message: str) -> None: ...

    def warn(self, message: str) -> None: ...


class NullObserver:
    def start(self, message: str) -> None:
        pass

    def update(self, message: str) -> None:
        pass

    def succeed(self, message: str) -> None:
        pass

    def fail(self, message: str) -> None:
        pass

    def warn(self, message: str) -> None:
        pass


def language_percentages(raw: dict[str, int]) -> LanguageBreakdown:
    """Convert language byte counts into percentages rounded to 2 decimals."""
    total = sum(raw.values())
    if total <= 0:
        return {}
    return {language: round(count / total * 100, 2) for language, count in raw.items()}


class GitHubClient:
    def __init__(
        self,
        token: str | None = None,
        *,
        base_url: str = API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        observer: ProgressObserver | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": f"gh-analyzer/{__version__}",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )
        self._observer: ProgressObserver = observer or NullObserver()
        self._rate_limit = RateLimitMonitor()

    # -- context manager ---------------------------------------------------

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    @property
    def rate_limit(self) -> RateLimitStatus | None:
        """Quota reported by the most recent response, if any."""
        return self._rate_limit.snapshot()

    # -- public API ---------------------------------------------------------

    async def get_account(self, handle: str) -> Account:
        self._observer.start(f"Fetching user information for {handle}")
        try:
            data = await self._get(f"/users/{handle}")
            account = _decode(Account.from_api, data, f"user {handle}")
        except ApiError:
            self._observer.fail(f"Failed to fetch user: {handle}")
            raise
        self._observer.succeed(f"Found user: {account.name or handle}")
        return account

    async def list_account_repos(self, handle: str) -> list[Repository]:
        """Fetch every public repository of ``handle``, most recently updated first.

        Pages are requested one after another until a page comes back with
        fewer than ``REPOS_PAGE_SIZE`` items.
        """
        self._observer.start(f"Fetching repositories for {handle}")
        repos: list[Repository] = []
        page = 1
        try:
            while True:
                data = await self._get(
                    f"/users/{handle}/repos",
                    params={
                        "type": "public",
                        "sort": "updated",
                        "direction": "desc",
                        "per_page": REPOS_PAGE_SIZE,
                        "page": page,
                    },
                )
                repos.extend(
                    _decode(Repository.from_api, raw, f"repositories of {handle}")
                    for raw in data
                )
                logger.debug("Fetched page {} of {} repos ({} items)", page, handle, len(data))
                self._observer.update(
                    f"Fetching repositories for {handle} ({len(repos)} found)"
                )
                if len(data) < REPOS_PAGE_SIZE:
                    break
                page += 1
        except ApiError:
            self._observer.fail(f"Failed to fetch repositories for: {handle}")
            raise
        self._observer.succeed(f"Found {len(repos)} repositories for {handle}")
        return repos

    async def get_repository(self, owner: str, repo: str) -> Repository:
        self._observer.start(f"Fetching repository details for {owner}/{repo}")
        try:
            data = await self._get(f"/repos/{owner}/{repo}")
            repository = _decode(Repository.from_api, data, f"repository {owner}/{repo}")
        except ApiError:
            self._observer.fail(f"Failed to fetch repository: {owner}/{repo}")
            raise
        self._observer.succeed(f"Found repository: {repository.full_name}")
        return repository

    async def get_languages(self, owner: str, repo: str) -> Lookup[LanguageBreakdown]:
        """Language share of ``owner/repo``; an empty mapping on failure."""
        self._observer.start(f"Analyzing languages for {owner}/{repo}")
        try:
            data = await self._get(f"/repos/{owner}/{repo}/languages")
            languages = _decode(language_percentages, data, f"languages of {owner}/{repo}")
        except ApiError as exc:
            self._observer.fail(f"Failed to fetch languages for: {owner}/{repo}")
            logger.debug("Languages unavailable for {}/{}: {}", owner, repo, exc)
            return Lookup(value={}, error=PartialDataUnavailable(str(exc)))
        self._observer.succeed(f"Analyzed {len(languages)} languages")
        return Lookup(value=languages)

    async def get_latest_commit(self, owner: str, repo: str) -> Lookup[Commit | None]:
        """Most recent commit on the default branch, if it can be retrieved."""
        try:
            data = await self._get(
                f"/repos/{owner}/{repo}/commits", params={"per_page": 1, "page": 1}
            )
            commit = _decode(
                lambda items: Commit.from_api(items[0]) if items else None,
                data,
                f"commits of {owner}/{repo}",
            )
        except ApiError as exc:
            self._observer.warn(f"Could not fetch latest commit for {owner}/{repo}")
            logger.debug("Latest commit unavailable for {}/{}: {}", owner, repo, exc)
            return Lookup(value=None, error=PartialDataUnavailable(str(exc)))
        return Lookup(value=commit)

    async def get_rate_limit(self) -> RateLimitStatus | None:
        """Current core quota, or None when it cannot be read."""
        try:
            data = await self._get("/rate_limit")
            return _decode(parse_rate_limit, data, "rate limit")
        except ApiError as exc:
            self._observer.warn("Could not fetch rate limit information")
            logger.debug("Rate limit check failed: {}", exc)
            return None

    # ------------------------------------------------------------------

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        logger.debug("GET {} {}", path, params or "")
        try:
            resp = await self._client.get(path, params=params)
        except httpx.HTTPError as exc:
            raise TransportError(f"Request to {path} failed: {exc}", url=path) from exc

        self._rate_limit.update(resp)
        status = resp.status_code
        if status == 404:
            raise NotFound("Repository or user not found", status=status, url=path)
        if status == 401:
            raise AuthFailed(
                "Authentication failed. Please check your GitHub token.",
                status=status,
                url=path,
            )
        if status in (403, 429):
            raise RateLimited(
                "Rate limit exceeded or access forbidden", status=status, url=path
            )
        if resp.is_error:
            raise TransportError(f"API error: HTTP {status}", status=status, url=path)

        try:
            return resp.json()
        except ValueError as exc:
            raise TransportError(
                f"Invalid JSON from {path}", status=status, url=path
            ) from exc


def _decode(factory: Callable[[Any], T], data: Any, what: str) -> T:
    """Apply ``factory`` to a response body, turning shape errors into TransportError."""
    try:
        return factory(data)
    except (KeyError, IndexError, TypeError, AttributeError, ValueError) as exc:
        raise TransportError(f"Unexpected response shape for {what}: {exc!r}") from exc
