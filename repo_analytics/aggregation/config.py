"""Central configuration constants for the repository aggregation engine."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional, Tuple, Union

SECRETS_FILENAME = "local_secrets.json"


def read_github_token(secrets_path: Optional[Union[str, Path]] = None) -> Optional[str]:
    """Token from the gitignored secrets file, falling back to the GITHUB_TOKEN env var.

    The file is `LOCAL_SECRETS_FILE` when set, else `local_secrets.json` at the
    project root. A missing or malformed file is treated as holding no token.
    """
    candidate = Path(
        secrets_path
        or os.getenv("LOCAL_SECRETS_FILE")
        or Path(__file__).resolve().parents[2] / SECRETS_FILENAME
    ).expanduser()
    token = None
    if candidate.is_file():
        try:
            with candidate.open("r", encoding="utf-8") as handle:
                secrets = json.load(handle)
        except (OSError, json.JSONDecodeError):
            secrets = None
        if isinstance(secrets, dict):
            token = secrets.get("github_token")
    return token or os.getenv("GITHUB_TOKEN") or None


GITHUB_TOKEN: Optional[str] = read_github_token()
USER_AGENT = "repo-analytics-aggregation/1.0"
BASE_URL = "https://api.github.com"
GRAPHQL_URL = "https://api.github.com/graphql"
PER_PAGE = 100
TOPIC_PAGE_SIZE = 50
REQUEST_TIMEOUT = int(os.getenv("REQUEST_TIMEOUT", "90"))
ABUSE_MAX_ATTEMPTS = int(os.getenv("ABUSE_MAX_ATTEMPTS", "5"))
BACKOFF_BASE_SEC = 2
# GitHub renamed its abuse detection to "secondary rate limit"; both bodies are seen in the wild.
ABUSE_DETECTION_MARKERS: Tuple[str, ...] = (
    "You have triggered an abuse detection mechanism",
    "You have exceeded a secondary rate limit",
)
GIT_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

__all__ = [
    "SECRETS_FILENAME",
    "read_github_token",
    "GITHUB_TOKEN",
    "USER_AGENT",
    "BASE_URL",
    "GRAPHQL_URL",
    "PER_PAGE",
    "TOPIC_PAGE_SIZE",
    "REQUEST_TIMEOUT",
    "ABUSE_MAX_ATTEMPTS",
    "BACKOFF_BASE_SEC",
    "ABUSE_DETECTION_MARKERS",
    "GIT_TIMESTAMP_FORMAT",
]
