"""Exception taxonomy raised by the aggregation engine."""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class AggregationError(RuntimeError):
    """Base class for every failure surfaced by the aggregation engine."""


class GraphQLRequestError(AggregationError):
    """GitHub answered with a non-success HTTP status."""

    def __init__(self, message: str, *, status_code: int, body: str, url: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.url = url


class GraphQLResponseError(AggregationError):
    """GitHub answered 200 but the payload carries GraphQL errors."""

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class NotFoundError(AggregationError):
    """An owner, repository, branch or team does not exist upstream."""


class CommitNotFoundError(NotFoundError):
    """The branch exists but holds no commit at or before the requested instant."""


class StaleIndexError(AggregationError):
    """A batched file path is missing at the requested reference."""

    def __init__(self, path: str, repository: str) -> None:
        super().__init__(
            f"File {path} not found when reading file contents for repo {repository}. "
            "This is likely the result of a stale file list cache for the repository"
        )
        self.path = path
        self.repository = repository


class PaginationError(AggregationError):
    """Upstream reported more pages without advancing the cursor."""


__all__ = [
    "AggregationError",
    "GraphQLRequestError",
    "GraphQLResponseError",
    "NotFoundError",
    "CommitNotFoundError",
    "StaleIndexError",
    "PaginationError",
]
