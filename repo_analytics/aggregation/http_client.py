"""HTTP and GraphQL helpers shared by every aggregation round trip.

Each call runs the blocking `requests` round trip in a worker thread so the
awaiting task is suspended while other aggregation requests keep running.
Retrying is not done here; see `rate_limit.with_abuse_retry`.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

import requests

from .config import BASE_URL, GITHUB_TOKEN, GRAPHQL_URL, REQUEST_TIMEOUT, USER_AGENT
from .errors import GraphQLRequestError, GraphQLResponseError, NotFoundError
from .query import GraphQLQuery

logger = logging.getLogger(__name__)

def auth_headers() -> Dict[str, str]:
    """Return the Authorization header for the configured token, if any."""
    if GITHUB_TOKEN:
        return {"Authorization": f"Bearer {GITHUB_TOKEN}"}
    return {}


def github_headers() -> Dict[str, str]:
    """Headers sent with every request, plus Authorization when a token is configured."""
    return {
        "Accept": "application/vnd.github+json",
        "User-Agent": USER_AGENT,
        **auth_headers(),
    }


def error_message(resp: requests.Response) -> str:
    """Extract GitHub's error message from a response, falling back to raw text."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return (resp.text or "")[:300]


def log_http_error(resp: requests.Response, url: str) -> None:
    """Log a short, human-readable message when GitHub returns an error."""
    logger.error("HTTP %s for %s -> %s", resp.status_code, url, error_message(resp))


def _raise_for_status(resp: requests.Response, url: str) -> None:
    if 200 <= resp.status_code < 300:
        return
    log_http_error(resp, url)
    message = error_message(resp)
    if resp.status_code == 404:
        raise NotFoundError(f"{url}: {message}")
    raise GraphQLRequestError(
        f"HTTP {resp.status_code} for {url}: {message}",
        status_code=resp.status_code,
        body=resp.text or "",
        url=url,
    )


async def run_graphql_query(query: GraphQLQuery) -> Dict[str, Any]:
    """Execute one GraphQL query and return its `data` object."""
    headers = {"Content-Type": "application/json", **github_headers()}
    resp = await asyncio.to_thread(
        requests.post,
        GRAPHQL_URL,
        json=query.payload(),
        headers=headers,
        timeout=REQUEST_TIMEOUT,
    )
    _raise_for_status(resp, GRAPHQL_URL)

    data = resp.json()
    errors = [err for err in (data.get("errors") or []) if isinstance(err, dict)]
    if errors:
        messages = ", ".join(str(err.get("message")) for err in errors)
        if any(err.get("type") == "NOT_FOUND" for err in errors):
            raise NotFoundError(messages)
        raise GraphQLResponseError(f"GraphQL error: {messages}", errors)
    return data.get("data") or {}


async def request_json(path: str, params: Optional[Dict[str, Any]] = None) -> Any:
    """GET a REST path relative to BASE_URL and return the decoded body."""
    url = f"{BASE_URL}{path}"
    resp = await asyncio.to_thread(
        requests.get,
        url,
        params=params,
        headers=github_headers(),
        timeout=REQUEST_TIMEOUT,
    )
    _raise_for_status(resp, url)
    return resp.json()


__all__ = [
    "auth_headers",
    "github_headers",
    "error_message",
    "log_http_error",
    "run_graphql_query",
    "request_json",
]
