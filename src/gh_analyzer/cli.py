"""CLI entry point for gh-analyzer."""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Coroutine
from typing import Any

import click
from loguru import logger
from rich.console import Console
from rich.markup import escape

from . import __version__
from .aggregator import DEFAULT_MAX_REPOS, MAX_REPOS, MIN_REPOS
from .config import Settings
from .errors import AnalyzerError, InvalidIdentifier
from .orchestrator import OUTPUT_FORMATS, run_rate_limit, run_repository, run_user
from .parser import looks_like_account_handle, parse_identifier

EXAMPLES = """\
Examples:

\b
  # Analyze a repository
  $ gh-analyzer repo facebook/react
  $ gh-analyzer repo https://github.com/microsoft/vscode

\b
  # Analyze a user
  $ gh-analyzer user octocat --repos 5

\b
  # Auto-detect and analyze
  $ gh-analyzer analyze facebook/react
  $ gh-analyzer analyze octocat

\b
  # Save results to file
  $ gh-analyzer repo facebook/react --output json --save react-analysis.json
  $ gh-analyzer user octocat --output md --save octocat-report.md

\b
Environment variables:
  GITHUB_TOKEN       personal access token for higher rate limits
  GITHUB_API_URL     REST API base URL (default https://api.github.com)
  GITHUB_HOST        host accepted in repository URLs (default github.com)
"""

_REPO_FORMATS = [
    "https://github.com/owner/repo",
    "git@github.com:owner/repo.git",
    "owner/repo",
]


class _InterceptHandler(logging.Handler):
    """Route stdlib logging (httpx, httpcore) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1
        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def _setup_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else "WARNING",
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
    )

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.DEBUG if verbose else logging.WARNING)


def _output_options(f):
    f = click.option(
        "--token", "-t", default=None, help="GitHub personal access token (or GITHUB_TOKEN)."
    )(f)
    f = click.option("--save", "-s", "output_file", default=None, help="Save results to file.")(f)
    f = click.option(
        "--output",
        "-o",
        "output_format",
        type=click.Choice(OUTPUT_FORMATS),
        default="console",
        show_default=True,
        help="Output format.",
    )(f)
    return f


def _repos_option(f):
    return click.option(
        "--repos",
        "-r",
        "max_repos",
        type=click.IntRange(MIN_REPOS, MAX_REPOS),
        default=DEFAULT_MAX_REPOS,
        show_default=True,
        help="Maximum number of repositories to analyze.",
    )(f)


def _concurrency_option(f):
    return click.option(
        "--concurrency",
        type=click.IntRange(min=1),
        default=1,
        show_default=True,
        help="Repositories resolved in parallel during user analysis.",
    )(f)


def _settings(ctx: click.Context, token: str | None) -> Settings:
    settings: Settings = ctx.obj["settings"]
    if token:
        settings.github_token = token
    if not settings.github_token:
        console: Console = ctx.obj["console"]
        console.print("[yellow]⚠️  No GitHub token provided. Rate limiting may apply.[/yellow]")
        console.print("   Set GITHUB_TOKEN environment variable or use --token flag", style="dim")
    return settings


def _execute(ctx: click.Context, coro: Coroutine[Any, Any, Any], failure: str) -> None:
    console: Console = ctx.obj["console"]
    try:
        asyncio.run(coro)
    except AnalyzerError as exc:
        console.print(f"\n[red]❌ Error {failure}: {escape(str(exc))}[/red]")
        ctx.exit(1)
    console.print("\n[green]✅ Analysis completed successfully![/green]")


def _invalid_repository(ctx: click.Context, text: str) -> None:
    console: Console = ctx.obj["console"]
    console.print(f"[red]❌ {escape(str(InvalidIdentifier(text)))}[/red]")
    console.print("\n[yellow]💡 Supported formats:[/yellow]")
    for example in _REPO_FORMATS:
        console.print(f"   • {example}")
    ctx.exit(1)


@click.group(epilog=EXAMPLES)
@click.version_option(__version__, prog_name="gh-analyzer")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--no-color", is_flag=True, help="Disable colored output.")
@click.pass_context
def main(ctx: click.Context, verbose: bool, no_color: bool) -> None:
    """Analyze GitHub repositories and users."""
    _setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = Settings.from_env()
    ctx.obj["console"] = Console(no_color=no_color or None)


@main.command()
@click.argument("repo_url")
@_output_options
@click.pass_context
def repo(
    ctx: click.Context,
    repo_url: str,
    output_format: str,
    output_file: str | None,
    token: str | None,
) -> None:
    """Analyze a specific GitHub repository (URL or owner/repo)."""
    console: Console = ctx.obj["console"]
    console.print("[bold blue]🔍 GitHub Repository Analyzer[/bold blue]\n")

    settings = ctx.obj["settings"]
    identifier = parse_identifier(repo_url, host=settings.host)
    if not identifier.valid:
        _invalid_repository(ctx, repo_url)

    settings = _settings(ctx, token)
    _execute(
        ctx,
        run_repository(
            identifier.owner,
            identifier.repo,
            settings,
            output_format=output_format,
            output_file=output_file,
            console=console,
        ),
        "analyzing repository",
    )


@main.command()
@click.argument("username")
@_repos_option
@_concurrency_option
@_output_options
@click.pass_context
def user(
    ctx: click.Context,
    username: str,
    max_repos: int,
    concurrency: int,
    output_format: str,
    output_file: str | None,
    token: str | None,
) -> None:
    """Analyze a GitHub user and their top repositories."""
    console: Console = ctx.obj["console"]
    console.print("[bold blue]🔍 GitHub User Analyzer[/bold blue]\n")

    if not looks_like_account_handle(username):
        console.print(f"[red]❌ Invalid GitHub username: {escape(username)}[/red]")
        console.print(
            "\n[yellow]💡 Username should only contain letters, numbers, and hyphens[/yellow]"
        )
        ctx.exit(1)

    settings = _settings(ctx, token)
    _execute(
        ctx,
        run_user(
            username.strip(),
            settings,
            max_repos=max_repos,
            concurrency=concurrency,
            output_format=output_format,
            output_file=output_file,
            console=console,
        ),
        "analyzing user",
    )


@main.command()
@click.argument("target")
@_repos_option
@_concurrency_option
@_output_options
@click.pass_context
def analyze(
    ctx: click.Context,
    target: str,
    max_repos: int,
    concurrency: int,
    output_format: str,
    output_file: str | None,
    token: str | None,
) -> None:
    """Auto-detect a repository reference or a username and analyze it."""
    console: Console = ctx.obj["console"]
    console.print("[bold blue]🔍 GitHub Auto-Analyzer[/bold blue]\n")

    settings = ctx.obj["settings"]
    identifier = parse_identifier(target, host=settings.host)
    if identifier.valid:
        console.print("[cyan]🔍 Detected: Repository URL[/cyan]\n")
        coro = run_repository(
            identifier.owner,
            identifier.repo,
            _settings(ctx, token),
            output_format=output_format,
            output_file=output_file,
            console=console,
        )
    elif looks_like_account_handle(target):
        console.print("[cyan]🔍 Detected: GitHub Username[/cyan]\n")
        coro = run_user(
            target.strip(),
            _settings(ctx, token),
            max_repos=max_repos,
            concurrency=concurrency,
            output_format=output_format,
            output_file=output_file,
            console=console,
        )
    else:
        console.print(
            f'[red]❌ Could not determine if "{escape(target)}" is a repository URL or username[/red]'
        )
        console.print("\n[yellow]💡 Supported formats:[/yellow]")
        console.print("   Repository: owner/repo, https://github.com/owner/repo")
        console.print("   Username: valid GitHub username")
        ctx.exit(1)

    _execute(ctx, coro, "during analysis")


@main.command("rate-limit")
@click.option("--token", "-t", default=None, help="GitHub personal access token (or GITHUB_TOKEN).")
@click.pass_context
def rate_limit(ctx: click.Context, token: str | None) -> None:
    """Check GitHub API rate limit status."""
    console: Console = ctx.obj["console"]
    settings: Settings = ctx.obj["settings"]
    if token:
        settings.github_token = token
    if not settings.github_token:
        console.print("[red]❌ GitHub token required for rate limit check[/red]")
        console.print("   Set GITHUB_TOKEN environment variable or use --token flag", style="dim")
        ctx.exit(1)

    try:
        asyncio.run(run_rate_limit(settings, console=console))
    except AnalyzerError as exc:
        console.print(f"[red]❌ Error checking rate limit: {escape(str(exc))}[/red]")
        ctx.exit(1)
