"""gh-analyzer: summarize GitHub repositories and user profiles."""

__version__ = "1.0.0"
