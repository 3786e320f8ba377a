"""Tests for the aggregator module."""

from __future__ import annotations

from unittest.mock import AsyncMock

import httpx
import pytest

from gh_analyzer.aggregator import (
    analyze_repository,
    analyze_user,
    build_repository_analysis,
    select_repositories,
)
from gh_analyzer.errors import NotFound, PartialDataUnavailable
from gh_analyzer.github.client import GitHubClient
from gh_analyzer.models import Account, Commit, Lookup, Repository, UserAnalysis


def _repo(name: str, stars: int = 0, updated_at: str = "2024-01-01T00:00:00Z", **kwargs) -> Repository:
    defaults = dict(
        name=name,
        full_name=f"octocat/{name}",
        description=f"{name} description",
        html_url=f"https://github.com/octocat/{name}",
        stargazers_count=stars,
        forks_count=1,
        open_issues_count=2,
        pushed_at="2024-02-01T00:00:00Z",
        created_at="2020-01-01T00:00:00Z",
        updated_at=updated_at,
        license_name="MIT License",
        topics=("cli",),
        size=42,
        default_branch="main",
        fork=False,
        owner_login="octocat",
    )
    defaults.update(kwargs)
    return Repository(**defaults)


def _account() -> Account:
    return Account(
        login="octocat",
        name="The Octocat",
        bio=None,
        location="San Francisco",
        email=None,
        blog="https://github.blog",
        company="@github",
        public_repos=4,
        followers=10,
        following=1,
        created_at="2011-01-25T18:44:36Z",
    )


@pytest.fixture
def mock_client():
    client = AsyncMock(spec=GitHubClient)
    client.get_repository.return_value = _repo("hello", stars=5)
    client.get_languages.return_value = Lookup(value={"Python": 75.0, "Shell": 25.0})
    client.get_latest_commit.return_value = Lookup(
        value=Commit(sha="abc", committer_date="2024-03-01T00:00:00Z")
    )
    client.get_account.return_value = _account()
    client.list_account_repos.return_value = [
        _repo("five", stars=5),
        _repo("twenty-old", stars=20, updated_at="2023-01-01T00:00:00Z"),
        _repo("twenty-new", stars=20, updated_at="2024-06-01T00:00:00Z"),
        _repo("one", stars=1),
    ]
    return client


@pytest.mark.asyncio
async def test_analyze_repository(mock_client):
    analysis = await analyze_repository(mock_client, "octocat", "hello")

    assert analysis.name == "hello"
    assert analysis.full_name == "octocat/hello"
    assert analysis.url == "https://github.com/octocat/hello"
    assert analysis.stars == 5
    assert analysis.languages == {"Python": 75.0, "Shell": 25.0}
    assert analysis.last_commit_date == "2024-03-01T00:00:00Z"
    assert analysis.license == "MIT License"
    assert analysis.topics == ["cli"]
    mock_client.get_repository.assert_awaited_once_with("octocat", "hello")
    mock_client.get_languages.assert_awaited_once_with("octocat", "hello")
    mock_client.get_latest_commit.assert_awaited_once_with("octocat", "hello")


@pytest.mark.asyncio
async def test_analyze_repository_falls_back_to_pushed_at(mock_client):
    mock_client.get_latest_commit.return_value = Lookup(
        value=None, error=PartialDataUnavailable("boom")
    )
    analysis = await analyze_repository(mock_client, "octocat", "hello")
    assert analysis.last_commit_date == "2024-02-01T00:00:00Z"


@pytest.mark.asyncio
async def test_analyze_repository_languages_failure(mock_client):
    """A failed languages lookup still yields a complete analysis."""
    mock_client.get_languages.return_value = Lookup(
        value={}, error=PartialDataUnavailable("transport error")
    )
    analysis = await analyze_repository(mock_client, "octocat", "hello")
    assert analysis.languages == {}
    assert analysis.stars == 5
    assert analysis.last_commit_date == "2024-03-01T00:00:00Z"
    assert analysis.default_branch == "main"


@pytest.mark.asyncio
async def test_analyze_repository_not_found_propagates(mock_client):
    mock_client.get_repository.side_effect = NotFound("missing", status=404)
    with pytest.raises(NotFound):
        await analyze_repository(mock_client, "octocat", "missing")


@pytest.mark.asyncio
async def test_analyze_repository_is_idempotent(mock_client):
    first = await analyze_repository(mock_client, "octocat", "hello")
    second = await analyze_repository(mock_client, "octocat", "hello")
    assert first == second


def test_build_repository_analysis_without_license():
    analysis = build_repository_analysis(_repo("x", license_name=None), {}, None)
    assert analysis.license is None
    assert analysis.last_commit_date == "2024-02-01T00:00:00Z"


def test_select_repositories_orders_by_stars_then_update():
    repos = [
        _repo("five", stars=5),
        _repo("twenty-old", stars=20, updated_at="2023-01-01T00:00:00Z"),
        _repo("twenty-new", stars=20, updated_at="2024-06-01T00:00:00Z"),
        _repo("one", stars=1),
    ]
    names = [r.name for r in select_repositories(repos, 10)]
    assert names == ["twenty-new", "twenty-old", "five", "one"]


def test_select_repositories_excludes_forks_and_truncates():
    repos = [
        _repo("forked", stars=100, fork=True),
        _repo("a", stars=3),
        _repo("b", stars=2),
        _repo("c", stars=1),
    ]
    names = [r.name for r in select_repositories(repos, 2)]
    assert names == ["a", "b"]


@pytest.mark.asyncio
async def test_analyze_user(mock_client):
    analysis = await analyze_user(mock_client, "octocat", max_repos=3)

    assert analysis.username == "octocat"
    assert analysis.name == "The Octocat"
    assert analysis.public_repos == 4
    assert [r.name for r in analysis.repositories] == ["twenty-new", "twenty-old", "five"]
    assert analysis.skipped == []
    assert mock_client.get_languages.await_count == 3
    assert mock_client.get_latest_commit.await_count == 3


@pytest.mark.asyncio
async def test_analyze_user_skips_failed_repository(mock_client):
    """A repository that fails to resolve is skipped, not backfilled."""

    async def languages_side_effect(owner, repo):
        if repo == "twenty-old":
            raise RuntimeError("API error")
        return Lookup(value={"Go": 100.0})

    mock_client.get_languages.side_effect = languages_side_effect

    analysis = await analyze_user(mock_client, "octocat", max_repos=2)

    assert [r.name for r in analysis.repositories] == ["twenty-new"]
    assert analysis.skipped == ["octocat/twenty-old"]


@pytest.mark.asyncio
async def test_analyze_user_with_concurrency_keeps_order(mock_client):
    analysis = await analyze_user(mock_client, "octocat", max_repos=4, concurrency=3)
    assert [r.name for r in analysis.repositories] == [
        "twenty-new", "twenty-old", "five", "one",
    ]


@pytest.mark.asyncio
async def test_analyze_user_account_failure_propagates(mock_client):
    mock_client.get_account.side_effect = NotFound("missing", status=404)
    with pytest.raises(NotFound):
        await analyze_user(mock_client, "ghost")


@pytest.mark.asyncio
@pytest.mark.parametrize("max_repos", [0, 51, -1])
async def test_analyze_user_rejects_max_repos_before_any_call(mock_client, max_repos):
    with pytest.raises(ValueError):
        await analyze_user(mock_client, "octocat", max_repos=max_repos)
    mock_client.get_account.assert_not_called()
    mock_client.list_account_repos.assert_not_called()


@pytest.mark.asyncio
async def test_analyze_user_empty_account(mock_client):
    mock_client.list_account_repos.return_value = []
    analysis = await analyze_user(mock_client, "octocat")
    assert analysis.repositories == []


def test_user_analysis_to_dict_keeps_nulls_and_drops_skipped():
    analysis = UserAnalysis(
        username="octocat", name=None, bio=None, location=None, email=None,
        blog=None, company=None, public_repos=0, followers=0, following=0,
        created_at="2011-01-25T18:44:36Z", skipped=["octocat/x"],
    )
    data = analysis.to_dict()
    assert data["name"] is None
    assert "bio" in data
    assert "skipped" not in data
    assert data["repositories"] == []


@pytest.mark.asyncio
async def test_analyze_repository_over_http_survives_languages_outage():
    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.endswith("/languages"):
            raise httpx.ConnectError("connection reset", request=request)
        if path.endswith("/commits"):
            return httpx.Response(200, json=[
                {"sha": "abc", "commit": {"committer": {"date": "2024-03-01T00:00:00Z"}}},
            ])
        return httpx.Response(200, json={
            "name": "hello",
            "full_name": "octocat/hello",
            "description": None,
            "html_url": "https://github.com/octocat/hello",
            "stargazers_count": 7,
            "forks_count": 1,
            "open_issues_count": 0,
            "pushed_at": "2024-02-01T00:00:00Z",
            "created_at": "2020-01-01T00:00:00Z",
            "updated_at": "2024-02-02T00:00:00Z",
            "license": None,
            "topics": [],
            "size": 12,
            "default_branch": "main",
            "fork": False,
            "owner": {"login": "octocat"},
        })

    async with GitHubClient(transport=httpx.MockTransport(handler)) as client:
        analysis = await analyze_repository(client, "octocat", "hello")

    assert analysis.languages == {}
    assert analysis.stars == 7
    assert analysis.last_commit_date == "2024-03-01T00:00:00Z"
