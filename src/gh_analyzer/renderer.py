"""Rich-based terminal rendering with JSON/Markdown export."""

from __future__ import annotations

import json
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.status import Status
from rich.table import Table
from rich.text import Text

from .formatting import (
    format_date,
    format_file_size,
    format_number,
    format_relative_time,
    language_bar,
    sorted_languages,
)
from .markdown import repository_markdown, user_markdown
from .models import RateLimitStatus, RepositoryAnalysis, UserAnalysis


class ConsoleProgress:
    """Spinner-style progress reporting for GitHubClient operations."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console(stderr=True)
        self._status: Status | None = None

    def start(self, message: str) -> None:
        if self._status is None:
            self._status = self._console.status(message)
            self._status.start()
        else:
            self._status.update(message)

    def update(self, message: str) -> None:
        self.start(message)

    def succeed(self, message: str) -> None:
        self._console.print(f"[green]✅ {message}[/green]")

    def fail(self, message: str) -> None:
        self._console.print(f"[red]❌ {message}[/red]")

    def warn(self, message: str) -> None:
        self._console.print(f"[yellow]⚠️  {message}[/yellow]")

    def stop(self) -> None:
        if self._status is not None:
            self._status.stop()
            self._status = None


def _stats_table() -> Table:
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("label", style="dim")
    table.add_column("value", style="bold")
    return table


def render_repository(analysis: RepositoryAnalysis, console: Console | None = None) -> None:
    """Render a RepositoryAnalysis to the terminal using rich."""
    console = console or Console()

    console.print(Panel(
        Text(f"📁 {analysis.full_name}", justify="center"),
        style="bold blue",
    ))
    console.print(analysis.description or "No description available", style="dim", markup=False)
    console.print(f"🔗 {analysis.url}", style="dim", markup=False)
    console.print()

    console.print("[bold yellow]📊 Statistics[/bold yellow]")
    stats = _stats_table()
    stats.add_row("⭐ Stars", format_number(analysis.stars))
    stats.add_row("🍴 Forks", format_number(analysis.forks))
    stats.add_row("🐛 Open Issues", format_number(analysis.open_issues))
    stats.add_row("📦 Size", format_file_size(analysis.size * 1024))
    stats.add_row("📄 License", analysis.license or "No license")
    stats.add_row("🌿 Default Branch", analysis.default_branch)
    console.print(stats)
    console.print()

    console.print("[bold yellow]📅 Dates[/bold yellow]")
    dates = _stats_table()
    dates.add_row("Created", format_date(analysis.created_at))
    dates.add_row("Updated", format_date(analysis.updated_at))
    dates.add_row(
        "Last Commit",
        f"{format_date(analysis.last_commit_date)} "
        f"({format_relative_time(analysis.last_commit_date)})",
    )
    console.print(dates)
    console.print()

    if analysis.languages:
        console.print("[bold yellow]💻 Languages[/bold yellow]")
        lang_table = Table(show_header=True, header_style="bold")
        lang_table.add_column("Language")
        lang_table.add_column("Percentage", justify="right")
        for language, percentage in sorted_languages(analysis.languages):
            lang_table.add_row(language, f"{percentage:.2f}%")
        console.print(lang_table)
        console.print(language_bar(analysis.languages))
        console.print()

    if analysis.topics:
        console.print("[bold yellow]🏷️  Topics[/bold yellow]")
        topics = Text()
        for topic in analysis.topics:
            topics.append(f" {topic} ", style="white on blue")
            topics.append(" ")
        console.print(topics)
        console.print()


def render_user(analysis: UserAnalysis, console: Console | None = None) -> None:
    """Render a UserAnalysis to the terminal using rich."""
    console = console or Console()

    console.print(Panel(
        Text(f"👤 {analysis.name or analysis.username}\n@{analysis.username}", justify="center"),
        style="bold blue",
    ))
    if analysis.bio:
        console.print(analysis.bio, style="dim", markup=False)
    console.print()

    if analysis.skipped:
        console.print(
            f"[bold yellow]Warning:[/bold yellow] Skipped "
            f"{len(analysis.skipped)} repo(s): {', '.join(analysis.skipped)}"
        )
        console.print()

    console.print("[bold yellow]📊 GitHub Statistics[/bold yellow]")
    stats = _stats_table()
    stats.add_row("📚 Public Repositories", format_number(analysis.public_repos))
    stats.add_row("👥 Followers", format_number(analysis.followers))
    stats.add_row("👤 Following", format_number(analysis.following))
    stats.add_row("📅 Member Since", format_date(analysis.created_at))
    if analysis.location:
        stats.add_row("📍 Location", analysis.location)
    if analysis.company:
        stats.add_row("🏢 Company", analysis.company)
    if analysis.blog:
        stats.add_row("🌐 Blog", analysis.blog)
    console.print(stats)
    console.print()

    if analysis.repositories:
        console.print(
            f"[bold yellow]📁 Top {len(analysis.repositories)} Repositories[/bold yellow]"
        )
        repo_table = Table(show_header=True, header_style="bold")
        repo_table.add_column("#", justify="right")
        repo_table.add_column("Repo")
        repo_table.add_column("Stars", justify="right")
        repo_table.add_column("Languages")
        repo_table.add_column("Description", style="dim")

        for i, repo in enumerate(analysis.repositories, 1):
            top = ", ".join(lang for lang, _ in sorted_languages(repo.languages)[:3])
            description = repo.description or ""
            if len(description) > 80:
                description = description[:80] + "..."
            repo_table.add_row(
                str(i),
                repo.name,
                format_number(repo.stars),
                top or "-",
                description,
            )
        console.print(repo_table)
        console.print()


def render_rate_limit(status: RateLimitStatus, console: Console | None = None) -> None:
    console = console or Console()
    console.print("[blue]📊 Rate Limit Status:[/blue]")
    console.print(f"   Remaining: {status.remaining}/{status.limit}", style="dim")
    console.print(
        f"   Reset: {status.reset_at.astimezone():%Y-%m-%d %H:%M:%S}", style="dim"
    )
    if status.is_low:
        console.print(
            f"[yellow]⚠️  Warning: Low rate limit remaining ({status.remaining})[/yellow]"
        )


def _write_to_file(content: str, output_file: str) -> Path:
    """Write content to a file, creating parent directories as needed."""
    path = Path(output_file).resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def save_json(analysis: RepositoryAnalysis | UserAnalysis, output_file: str) -> Path:
    """Write an analysis as a JSON document."""
    content = json.dumps(analysis.to_dict(), indent=2, ensure_ascii=False)
    path = _write_to_file(content, output_file)
    Console().print(f"[green]✅ Data saved to: {path}[/green]")
    return path


def save_markdown(analysis: RepositoryAnalysis | UserAnalysis, output_file: str) -> Path:
    """Write a Markdown report for an analysis."""
    if isinstance(analysis, UserAnalysis):
        content = user_markdown(analysis)
    else:
        content = repository_markdown(analysis)
    path = _write_to_file(content, output_file)
    Console().print(f"[green]✅ Report saved to: {path}[/green]")
    return path
