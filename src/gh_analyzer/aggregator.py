"""Combine GitHub API results into repository and user analyses."""

from __future__ import annotations

import asyncio
from datetime import datetime

from loguru import logger

from .errors import SubAnalysisSkipped
from .github.client import GitHubClient
from .models import (
    Commit,
    LanguageBreakdown,
    Repository,
    RepositoryAnalysis,
    UserAnalysis,
    parse_timestamp,
)

MIN_REPOS = 1
MAX_REPOS = 50
DEFAULT_MAX_REPOS = 10


def build_repository_analysis(
    repository: Repository,
    languages: LanguageBreakdown,
    latest_commit: Commit | None,
) -> RepositoryAnalysis:
    """Merge one repository with its language share and latest commit."""
    return RepositoryAnalysis(
        name=repository.name,
        full_name=repository.full_name,
        description=repository.description,
        url=repository.html_url,
        stars=repository.stargazers_count,
        forks=repository.forks_count,
        open_issues=repository.open_issues_count,
        last_commit_date=(
            latest_commit.committer_date if latest_commit else repository.pushed_at
        ),
        languages=dict(languages),
        created_at=repository.created_at,
        updated_at=repository.updated_at,
        license=repository.license_name,
        topics=list(repository.topics),
        size=repository.size,
        default_branch=repository.default_branch,
    )


def _rank_key(repo: Repository) -> tuple[int, datetime]:
    return (repo.stargazers_count, parse_timestamp(repo.updated_at))


def select_repositories(repos: list[Repository], max_repos: int) -> list[Repository]:
    """Drop forks, rank by stars then most recent update, keep the top ``max_repos``."""
    candidates = [r for r in repos if not r.fork]
    candidates.sort(key=_rank_key, reverse=True)
    return candidates[:max_repos]


def validate_max_repos(max_repos: int) -> int:
    if not MIN_REPOS <= max_repos <= MAX_REPOS:
        raise ValueError(
            f"Invalid number of repositories ({max_repos}). "
            f"Must be between {MIN_REPOS} and {MAX_REPOS}."
        )
    return max_repos


async def analyze_repository(
    client: GitHubClient, owner: str, repo: str
) -> RepositoryAnalysis:
    """Analyze a single repository.

    The repository, its languages and its latest commit are fetched
    concurrently. Only a failure to fetch the repository itself propagates.
    """
    repository, languages, latest_commit = await asyncio.gather(
        client.get_repository(owner, repo),
        client.get_languages(owner, repo),
        client.get_latest_commit(owner, repo),
    )
    return build_repository_analysis(repository, languages.value, latest_commit.value)


async def _resolve(client: GitHubClient, repository: Repository) -> RepositoryAnalysis:
    owner, name = repository.owner_login, repository.name
    languages = await client.get_languages(owner, name)
    latest_commit = await client.get_latest_commit(owner, name)
    return build_repository_analysis(repository, languages.value, latest_commit.value)


async def analyze_user(
    client: GitHubClient,
    handle: str,
    max_repos: int = DEFAULT_MAX_REPOS,
    concurrency: int = 1,
) -> UserAnalysis:
    """Analyze an account and its top non-fork repositories.

    A repository that cannot be resolved is skipped with a warning; the
    result may therefore hold fewer than ``max_repos`` entries. Lower ranked
    repositories are not used to fill the gap.
    """
    validate_max_repos(max_repos)
    if concurrency < 1:
        raise ValueError(f"concurrency must be at least 1, got {concurrency}")

    account, repos = await asyncio.gather(
        client.get_account(handle),
        client.list_account_repos(handle),
    )

    selected = select_repositories(repos, max_repos)
    logger.info(
        "Analyzing top {} of {} repositories for {}", len(selected), len(repos), handle
    )

    semaphore = asyncio.Semaphore(concurrency)

    async def _guarded(repository: Repository) -> RepositoryAnalysis | SubAnalysisSkipped:
        async with semaphore:
            try:
                return await _resolve(client, repository)
            except Exception as exc:
                return SubAnalysisSkipped(repository.full_name, exc)

    outcomes = await asyncio.gather(*(_guarded(r) for r in selected))

    analyses: list[RepositoryAnalysis] = []
    skipped: list[str] = []
    for outcome in outcomes:
        if isinstance(outcome, SubAnalysisSkipped):
            logger.warning("{}", outcome)
            skipped.append(outcome.full_name)
        else:
            analyses.append(outcome)

    return UserAnalysis(
        username=account.login,
        name=account.name,
        bio=account.bio,
        location=account.location,
        email=account.email,
        blog=account.blog,
        company=account.company,
        public_repos=account.public_repos,
        followers=account.followers,
        following=account.following,
        created_at=account.created_at,
        repositories=analyses,
        skipped=skipped,
    )
