"""Formatting helpers shared by the console and Markdown renderers."""

from __future__ import annotations

import math
import re
from datetime import datetime, timezone

from rich.text import Text

from .models import LanguageBreakdown, parse_timestamp

_SIZE_UNITS = ["B", "KB", "MB", "GB"]

_INTERVALS = [
    ("year", 31_536_000),
    ("month", 2_592_000),
    ("day", 86_400),
    ("hour", 3_600),
    ("minute", 60),
]

_BAR_COLORS = ["red", "green", "yellow", "blue", "magenta", "cyan", "white"]


def format_number(n: int) -> str:
    return f"{n:,}"


def format_file_size(num_bytes: int) -> str:
    if num_bytes <= 0:
        return "0 B"
    i = min(int(math.log(num_bytes, 1024)), len(_SIZE_UNITS) - 1)
    return f"{num_bytes / 1024 ** i:.2f} {_SIZE_UNITS[i]}"


def format_date(value: str) -> str:
    """``2024-03-05T10:00:00Z`` -> ``March 5, 2024``."""
    date = parse_timestamp(value)
    return f"{date:%B} {date.day}, {date.year}"


def format_relative_time(value: str, now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    seconds = int((now - parse_timestamp(value)).total_seconds())
    if seconds < 60:
        return "just now"
    for label, length in _INTERVALS:
        count = seconds // length
        if count > 0:
            return f"{count} {label}{'s' if count != 1 else ''} ago"
    return "just now"


def sorted_languages(languages: LanguageBreakdown) -> list[tuple[str, float]]:
    return sorted(languages.items(), key=lambda item: item[1], reverse=True)


def language_bar(languages: LanguageBreakdown, width: int = 50) -> Text:
    """One coloured block per language, padded with light shade to ``width``."""
    bar = Text()
    used = 0
    for i, (_, percentage) in enumerate(languages.items()):
        segment = round(percentage / 100 * width)
        used += segment
        bar.append("█" * segment, style=_BAR_COLORS[i % len(_BAR_COLORS)])
    if used < width:
        bar.append("░" * (width - used), style="bright_black")
    return bar


def timestamped_filename(prefix: str, extension: str, today: datetime | None = None) -> str:
    today = today or datetime.now(timezone.utc)
    return f"{prefix}-{today:%Y-%m-%d}.{extension}"


def sanitize_filename(name: str) -> str:
    cleaned = re.sub(r"[^a-zA-Z0-9.-]", "_", name)
    cleaned = re.sub(r"_+", "_", cleaned)
    return cleaned.strip("_")
