"""Data models for gh-analyzer."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Generic, TypeVar

from .errors import PartialDataUnavailable

T = TypeVar("T")

LanguageBreakdown = dict[str, float]


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp as returned by the GitHub API."""
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@dataclass(frozen=True)
class Identifier:
    owner: str
    repo: str
    valid: bool


@dataclass(frozen=True)
class Account:
    """Snapshot of a GitHub user or organization profile."""

    login: str
    name: str | None
    bio: str | None
    location: str | None
    email: str | None
    blog: str | None
    company: str | None
    public_repos: int
    followers: int
    following: int
    created_at: str

    @classmethod
    def from_api(cls, raw: dict) -> Account:
        return cls(
            login=raw["login"],
            name=raw.get("name"),
            bio=raw.get("bio"),
            location=raw.get("location"),
            email=raw.get("email"),
            blog=raw.get("blog"),
            company=raw.get("company"),
            public_repos=raw.get("public_repos", 0),
            followers=raw.get("followers", 0),
            following=raw.get("following", 0),
            created_at=raw["created_at"],
        )


@dataclass(frozen=True)
class Repository:
    """Snapshot of a GitHub repository as returned by the REST API."""

    name: str
    full_name: str
    description: str | None
    html_url: str
    stargazers_count: int
    forks_count: int
    open_issues_count: int
    pushed_at: str
    created_at: str
    updated_at: str
    license_name: str | None
    topics: tuple[str, ...]
    size: int
    default_branch: str
    fork: bool
    owner_login: str

    @classmethod
    def from_api(cls, raw: dict) -> Repository:
        license_info = raw.get("license") or {}
        full_name = raw["full_name"]
        owner = (raw.get("owner") or {}).get("login") or full_name.split("/", 1)[0]
        return cls(
            name=raw["name"],
            full_name=full_name,
            description=raw.get("description"),
            html_url=raw["html_url"],
            stargazers_count=raw.get("stargazers_count", 0),
            forks_count=raw.get("forks_count", 0),
            open_issues_count=raw.get("open_issues_count", 0),
            # pushed_at is null for repositories that never received a push
            pushed_at=raw.get("pushed_at") or raw["updated_at"],
            created_at=raw["created_at"],
            updated_at=raw["updated_at"],
            license_name=license_info.get("name") or None,
            topics=tuple(raw.get("topics") or ()),
            size=raw.get("size", 0),
            default_branch=raw.get("default_branch", ""),
            fork=bool(raw.get("fork", False)),
            owner_login=owner,
        )


@dataclass(frozen=True)
class Commit:
    sha: str
    committer_date: str

    @classmethod
    def from_api(cls, raw: dict) -> Commit:
        return cls(sha=raw["sha"], committer_date=raw["commit"]["committer"]["date"])


@dataclass(frozen=True)
class Lookup(Generic[T]):
    """Result of a best-effort lookup.

    ``ok`` separates "the origin answered" from "the request failed"; both
    carry a usable ``value`` (the fallback on failure).
    """

    value: T
    error: PartialDataUnavailable | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class RateLimitStatus:
    remaining: int
    limit: int
    reset_at: datetime

    @property
    def is_low(self) -> bool:
        return self.remaining < 10


@dataclass
class RepositoryAnalysis:
    name: str
    full_name: str
    description: str | None
    url: str
    stars: int
    forks: int
    open_issues: int
    last_commit_date: str
    languages: LanguageBreakdown
    created_at: str
    updated_at: str
    license: str | None
    topics: list[str]
    size: int
    default_branch: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class UserAnalysis:
    username: str
    name: str | None
    bio: str | None
    location: str | None
    email: str | None
    blog: str | None
    company: str | None
    public_repos: int
    followers: int
    following: int
    created_at: str
    repositories: list[RepositoryAnalysis] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        del data["skipped"]
        return data
