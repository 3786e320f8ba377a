"""Parsing of repository references and account handles."""

from __future__ import annotations

import re

from .models import Identifier

_INVALID = Identifier(owner="", repo="", valid=False)

_HANDLE_RE = re.compile(r"^[A-Za-z0-9]+(?:-[A-Za-z0-9]+)*$")
_MAX_HANDLE_LENGTH = 39


def _patterns(host: str) -> list[re.Pattern[str]]:
    h = re.escape(host)
    return [
        re.compile(rf"^https?://{h}/([^/\s]+)/([^/\s]+?)(?:\.git)?(?:/.*)?$"),
        re.compile(rf"^git@{h}:([^/\s]+)/([^/\s]+?)(?:\.git)?$"),
        re.compile(r"^([^/\s]+)/([^/\s]+)$"),
    ]


def parse_identifier(text: str, host: str = "github.com") -> Identifier:
    """Extract an owner/repo pair from a URL, an SSH remote or ``owner/repo``.

    Returns an invalid ``Identifier`` instead of raising when nothing matches.
    """
    cleaned = text.strip().rstrip("/")
    for pattern in _patterns(host):
        match = pattern.match(cleaned)
        if match:
            owner, repo = (part.strip() for part in match.groups())
            if not owner or not repo:
                return _INVALID
            return Identifier(owner=owner, repo=repo, valid=True)
    return _INVALID


def looks_like_account_handle(text: str) -> bool:
    """Return True if ``text`` could be a GitHub user or organization login."""
    cleaned = text.strip()
    if "/" in cleaned or "http" in cleaned or "git@" in cleaned:
        return False
    return len(cleaned) <= _MAX_HANDLE_LENGTH and bool(_HANDLE_RE.match(cleaned))
