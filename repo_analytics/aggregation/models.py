"""Immutable records produced by the aggregation engine."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Optional


class OwnerType(Enum):
    """Kind of account owning a repository; values match GraphQL `__typename`."""

    USER = "User"
    ORGANIZATION = "Organization"

    @property
    def root_field(self) -> str:
        """GraphQL root field used to address repositories of this owner kind."""
        return "user" if self is OwnerType.USER else "organization"


class RepositoryPermission(Enum):
    READ = "READ"
    TRIAGE = "TRIAGE"
    WRITE = "WRITE"
    MAINTAIN = "MAINTAIN"
    ADMIN = "ADMIN"


@dataclass(frozen=True)
class RepositorySourceRepository:
    name: str
    url: str
    pushed_at: Optional[dt.datetime]
    created_at: Optional[dt.datetime]
    default_branch_name: Optional[str]
    branch_names: FrozenSet[str] = field(default_factory=frozenset)
    topic_names: FrozenSet[str] = field(default_factory=frozenset)
    project_count: int = 0
    issue_count: int = 0
    pull_request_count: int = 0


@dataclass(frozen=True)
class RepositorySummary:
    url: str
    created_at: Optional[dt.datetime]
    updated_at: Optional[dt.datetime]


@dataclass(frozen=True)
class RepositorySourceSnapshot:
    """State of a repository resolved as of a requested instant."""

    closest_commit_id: str
    closest_commit_pushed_date: Optional[dt.datetime]
    closest_commit_committed_date: Optional[dt.datetime]
    closest_commit_tree_id: str


@dataclass(frozen=True)
class TeamRepositoryConnection:
    repository_name: str
    team_permissions: RepositoryPermission


@dataclass(frozen=True)
class RepositoryFile:
    name: str
    full_path: str


__all__ = [
    "OwnerType",
    "RepositoryPermission",
    "RepositorySourceRepository",
    "RepositorySummary",
    "RepositorySourceSnapshot",
    "TeamRepositoryConnection",
    "RepositoryFile",
]
