"""Markdown reports for repository and user analyses."""

from __future__ import annotations

from datetime import datetime

from .formatting import format_date, format_file_size, format_number, sorted_languages
from .models import RepositoryAnalysis, UserAnalysis


def _footer(generated_at: datetime | None) -> str:
    generated_at = generated_at or datetime.now()
    return (
        "---\n\n"
        f"*Report generated by gh-analyzer on {generated_at:%Y-%m-%d %H:%M:%S}*\n"
    )


def _topics(topics: list[str]) -> str:
    return " ".join(f"`{t}`" for t in topics)


def repository_markdown(
    analysis: RepositoryAnalysis, generated_at: datetime | None = None
) -> str:
    if analysis.languages:
        languages = "\n".join(
            f"- **{lang}**: {pct:.2f}%"
            for lang, pct in sorted_languages(analysis.languages)
        )
    else:
        languages = "No language data available"

    lines = [
        f"# {analysis.name}",
        "",
        "## Repository Information",
        "",
        f"- **Full Name**: {analysis.full_name}",
        f"- **Description**: {analysis.description or 'No description available'}",
        f"- **URL**: [{analysis.url}]({analysis.url})",
        f"- **Created**: {format_date(analysis.created_at)}",
        f"- **Last Updated**: {format_date(analysis.updated_at)}",
        f"- **Last Commit**: {format_date(analysis.last_commit_date)}",
        "",
        "## Repository Statistics",
        "",
        "| Metric | Value |",
        "|--------|-------|",
        f"| ⭐ Stars | {format_number(analysis.stars)} |",
        f"| 🍴 Forks | {format_number(analysis.forks)} |",
        f"| 🐛 Open Issues | {format_number(analysis.open_issues)} |",
        f"| 📦 Size | {format_file_size(analysis.size * 1024)} |",
        f"| 📄 License | {analysis.license or 'No license'} |",
        f"| 🌿 Default Branch | {analysis.default_branch} |",
        "",
        "## Programming Languages",
        "",
        languages,
        "",
        "## Topics",
        "",
        _topics(analysis.topics) if analysis.topics else "No topics specified",
        "",
        _footer(generated_at),
    ]
    return "\n".join(lines)


def _repository_entry(index: int, repo: RepositoryAnalysis) -> str:
    if repo.languages:
        top = ", ".join(
            f"{lang} ({pct:.1f}%)" for lang, pct in sorted_languages(repo.languages)[:3]
        )
    else:
        top = "No language data"

    lines = [
        f"### {index}. [{repo.name}]({repo.url})",
        "",
        repo.description or "No description available",
        "",
        f"- ⭐ **Stars**: {format_number(repo.stars)}",
        f"- 🍴 **Forks**: {format_number(repo.forks)}",
        f"- 🐛 **Open Issues**: {format_number(repo.open_issues)}",
        f"- 🗓️ **Last Updated**: {format_date(repo.updated_at)}",
        f"- 📄 **License**: {repo.license or 'No license'}",
        "",
        f"**Languages**: {top}",
    ]
    if repo.topics:
        lines += ["", f"**Topics**: {_topics(repo.topics)}"]
    lines.append("")
    return "\n".join(lines)


def user_markdown(analysis: UserAnalysis, generated_at: datetime | None = None) -> str:
    if analysis.repositories:
        repositories = "\n".join(
            _repository_entry(i, repo) for i, repo in enumerate(analysis.repositories, 1)
        )
    else:
        repositories = "No repositories found\n"

    lines = [
        f"# {analysis.name or analysis.username}",
        "",
        "## User Information",
        "",
        f"- **Username**: [@{analysis.username}](https://github.com/{analysis.username})",
        f"- **Name**: {analysis.name or 'Not specified'}",
        f"- **Bio**: {analysis.bio or 'No bio available'}",
        f"- **Location**: {analysis.location or 'Not specified'}",
        f"- **Company**: {analysis.company or 'Not specified'}",
        f"- **Blog**: {analysis.blog or 'Not specified'}",
        f"- **Email**: {analysis.email or 'Not specified'}",
        f"- **Member Since**: {format_date(analysis.created_at)}",
        "",
        "## GitHub Statistics",
        "",
        "| Metric | Value |",
        "|--------|-------|",
        f"| 📚 Public Repositories | {format_number(analysis.public_repos)} |",
        f"| 👥 Followers | {format_number(analysis.followers)} |",
        f"| 👤 Following | {format_number(analysis.following)} |",
        "",
        "## Top Repositories",
        "",
        repositories,
        _footer(generated_at),
    ]
    return "\n".join(lines)
