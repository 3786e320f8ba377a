from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .github.client import API_URL, DEFAULT_TIMEOUT


@dataclass
class Settings:
    github_token: str = ""
    api_url: str = API_URL
    host: str = "github.com"
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_env(cls) -> Settings:
        load_dotenv()

        return cls(
            github_token=os.environ.get("GITHUB_TOKEN", ""),
            api_url=os.environ.get("GITHUB_API_URL", API_URL),
            host=os.environ.get("GITHUB_HOST", "github.com"),
            timeout=float(os.environ.get("GH_ANALYZER_TIMEOUT", DEFAULT_TIMEOUT)),
        )
