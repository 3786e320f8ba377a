"""Run an analysis end to end: fetch, aggregate, render, export."""

from __future__ import annotations

from rich.console import Console

from .aggregator import (
    DEFAULT_MAX_REPOS,
    analyze_repository,
    analyze_user,
    validate_max_repos,
)
from .config import Settings
from .formatting import sanitize_filename, timestamped_filename
from .github.client import GitHubClient
from .models import RateLimitStatus, RepositoryAnalysis, UserAnalysis
from .renderer import (
    ConsoleProgress,
    render_rate_limit,
    render_repository,
    render_user,
    save_json,
    save_markdown,
)

OUTPUT_FORMATS = ("console", "json", "md")


def _client(settings: Settings, progress: ConsoleProgress | None = None) -> GitHubClient:
    return GitHubClient(
        settings.github_token or None,
        base_url=settings.api_url,
        timeout=settings.timeout,
        observer=progress,
    )


def _export(
    analysis: RepositoryAnalysis | UserAnalysis,
    *,
    output_format: str,
    output_file: str | None,
    prefix: str,
    console: Console,
) -> None:
    if output_format == "console":
        if isinstance(analysis, UserAnalysis):
            render_user(analysis, console=console)
        else:
            render_repository(analysis, console=console)

    if output_file or output_format != "console":
        extension = "md" if output_format == "md" else "json"
        filename = output_file or timestamped_filename(sanitize_filename(prefix), extension)
        if output_format == "md":
            save_markdown(analysis, filename)
        else:
            save_json(analysis, filename)


async def _show_rate_limit(client: GitHubClient, console: Console) -> None:
    status = await client.get_rate_limit()
    if status is not None:
        render_rate_limit(status, console=console)


async def run_repository(
    owner: str,
    repo: str,
    settings: Settings,
    output_format: str = "console",
    output_file: str | None = None,
    console: Console | None = None,
) -> RepositoryAnalysis:
    console = console or Console()
    progress = ConsoleProgress(Console(stderr=True, no_color=console.no_color))
    try:
        async with _client(settings, progress) as client:
            if settings.github_token:
                await _show_rate_limit(client, console)
            console.print(f"[blue]🔍 Analyzing repository: {owner}/{repo}[/blue]\n")
            analysis = await analyze_repository(client, owner, repo)
    finally:
        progress.stop()

    _export(
        analysis,
        output_format=output_format,
        output_file=output_file,
        prefix=f"{owner}-{repo}",
        console=console,
    )
    return analysis


async def run_user(
    handle: str,
    settings: Settings,
    max_repos: int = DEFAULT_MAX_REPOS,
    concurrency: int = 1,
    output_format: str = "console",
    output_file: str | None = None,
    console: Console | None = None,
) -> UserAnalysis:
    validate_max_repos(max_repos)
    console = console or Console()
    progress = ConsoleProgress(Console(stderr=True, no_color=console.no_color))
    try:
        async with _client(settings, progress) as client:
            if settings.github_token:
                await _show_rate_limit(client, console)
            console.print(f"[blue]🔍 Analyzing user: {handle}[/blue]\n")
            analysis = await analyze_user(
                client, handle, max_repos=max_repos, concurrency=concurrency
            )
    finally:
        progress.stop()

    _export(
        analysis,
        output_format=output_format,
        output_file=output_file,
        prefix=handle,
        console=console,
    )
    return analysis


async def run_rate_limit(
    settings: Settings, console: Console | None = None
) -> RateLimitStatus | None:
    console = console or Console()
    async with _client(settings) as client:
        status = await client.get_rate_limit()
    if status is None:
        console.print("[yellow]⚠️  Could not fetch rate limit information[/yellow]")
    else:
        render_rate_limit(status, console=console)
    return status
