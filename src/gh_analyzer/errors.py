"""Exception hierarchy for gh-analyzer."""

from __future__ import annotations


class AnalyzerError(Exception):
    """Base class for every error the analyzer reports to the user."""


class InvalidIdentifier(AnalyzerError):
    """Input is neither a repository reference nor an account handle."""

    def __init__(self, text: str) -> None:
        super().__init__(f"Invalid repository URL, owner/repo or username: {text!r}")
        self.text = text


class ApiError(AnalyzerError):
    """A GitHub API request failed."""

    def __init__(self, message: str, *, status: int | None = None, url: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.url = url


class NotFound(ApiError):
    pass


class AuthFailed(ApiError):
    pass


class RateLimited(ApiError):
    pass


class TransportError(ApiError):
    pass


class PartialDataUnavailable(AnalyzerError):
    """A satellite lookup (languages, latest commit) could not be completed.

    Never raised out of the client; it is carried by a failed ``Lookup``.
    """


class SubAnalysisSkipped(AnalyzerError):
    """One candidate repository of a user analysis could not be resolved."""

    def __init__(self, full_name: str, cause: BaseException) -> None:
        super().__init__(f"Skipping repository {full_name}: {cause}")
        self.full_name = full_name
        self.cause = cause
