"""Translate raw GitHub GraphQL/REST payloads into aggregation records."""

from __future__ import annotations

import datetime as dt
import posixpath
from typing import Any, Dict, Iterable, List, Optional

from .errors import CommitNotFoundError, NotFoundError
from .models import (
    OwnerType,
    RepositoryFile,
    RepositoryPermission,
    RepositorySourceRepository,
    RepositorySourceSnapshot,
    RepositorySummary,
    TeamRepositoryConnection,
)
from .pagination import Cursor, NestedPage, PageResult


def parse_github_timestamp(raw: Optional[str]) -> Optional[dt.datetime]:
    """Parse an ISO-8601 GitHub timestamp into an aware UTC datetime."""
    if not raw:
        return None
    return dt.datetime.fromisoformat(raw.replace("Z", "+00:00")).astimezone(dt.timezone.utc)


def _nodes(connection: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [node for node in ((connection or {}).get("nodes") or []) if node]


def _total_count(connection: Optional[Dict[str, Any]]) -> int:
    return int((connection or {}).get("totalCount") or 0)


def map_cursor(connection: Optional[Dict[str, Any]]) -> Cursor:
    page_info = (connection or {}).get("pageInfo") or {}
    return Cursor(
        end_cursor=page_info.get("endCursor"),
        has_next_page=bool(page_info.get("hasNextPage")),
    )


def map_owner_type(data: Dict[str, Any], login: str) -> OwnerType:
    owner = data.get("repositoryOwner")
    if not owner:
        raise NotFoundError(f"Could not resolve to a user or organization with the login '{login}'")
    return OwnerType(owner["__typename"])


def owner_root(data: Dict[str, Any], owner_type: OwnerType, login: str) -> Dict[str, Any]:
    """Return the user/organization node of a response, which share one shape."""
    root = data.get(owner_type.root_field)
    if not root:
        raise NotFoundError(f"Could not resolve to a {owner_type.value} with the login '{login}'")
    return root


def repository_node(parent: Dict[str, Any], repository: str) -> Dict[str, Any]:
    node = parent.get("repository")
    if not node:
        raise NotFoundError(f"Could not resolve to a Repository with the name '{repository}'")
    return node


def map_branch_page(node: Dict[str, Any]) -> PageResult[str]:
    refs = node.get("refs")
    return PageResult([ref["name"] for ref in _nodes(refs) if ref.get("name")], map_cursor(refs))


def map_repository(node: Dict[str, Any], extra_branch_names: Iterable[str] = ()) -> RepositorySourceRepository:
    branch_names = set(map_branch_page(node).items)
    branch_names.update(extra_branch_names)
    topic_names = {
        (topic_node.get("topic") or {}).get("name")
        for topic_node in _nodes(node.get("repositoryTopics"))
    }
    topic_names.discard(None)
    return RepositorySourceRepository(
        name=node["name"],
        url=node["url"],
        pushed_at=parse_github_timestamp(node.get("pushedAt")),
        created_at=parse_github_timestamp(node.get("createdAt")),
        default_branch_name=(node.get("defaultBranchRef") or {}).get("name"),
        branch_names=frozenset(branch_names),
        topic_names=frozenset(topic_names),
        project_count=_total_count(node.get("projects")),
        issue_count=_total_count(node.get("issues")),
        pull_request_count=_total_count(node.get("pullRequests")),
    )


def map_repository_summary(node: Dict[str, Any]) -> RepositorySummary:
    return RepositorySummary(
        url=node["url"],
        created_at=parse_github_timestamp(node.get("createdAt")),
        updated_at=parse_github_timestamp(node.get("pushedAt")),
    )


def map_repository_summaries(owner: Dict[str, Any]) -> PageResult[RepositorySummary]:
    repositories = owner.get("repositories") or {}
    return PageResult(
        [map_repository_summary(node) for node in _nodes(repositories)],
        map_cursor(repositories),
    )


def map_source_snapshot(repository: Dict[str, Any],
                        branch: str,
                        as_of: Optional[dt.datetime]) -> Optional[RepositorySourceSnapshot]:
    """Map a commit-history lookup; None means the repository has no commits at all."""
    if repository.get("isEmpty"):
        return None
    commit = repository.get("commitHistory")
    if not commit:
        raise NotFoundError(f"Could not resolve branch '{branch}'")
    nodes = _nodes(commit.get("history"))
    if not nodes:
        raise CommitNotFoundError(f"No commit on '{branch}' at or before {as_of.isoformat() if as_of else 'now'}")
    closest = nodes[0]
    return RepositorySourceSnapshot(
        closest_commit_id=closest["id"],
        closest_commit_pushed_date=parse_github_timestamp(closest.get("pushedDate")),
        closest_commit_committed_date=parse_github_timestamp(closest.get("committedDate")),
        closest_commit_tree_id=(closest.get("tree") or {})["oid"],
    )


def map_team_repository_edges(connection: Optional[Dict[str, Any]]) -> PageResult[TeamRepositoryConnection]:
    edges = [edge for edge in ((connection or {}).get("edges") or []) if edge]
    connections = [
        TeamRepositoryConnection(
            repository_name=edge["repository"]["name"],
            team_permissions=RepositoryPermission(edge["permission"]),
        )
        for edge in edges
        if edge.get("repository")
    ]
    return PageResult(connections, map_cursor(connection))


def map_teams_page(organization: Dict[str, Any]) -> PageResult[NestedPage[TeamRepositoryConnection]]:
    teams = organization.get("teams") or {}
    return PageResult(
        [NestedPage(team["name"], map_team_repository_edges(team.get("repositoryEdges")), team.get("slug"))
         for team in _nodes(teams)],
        map_cursor(teams),
    )


def team_node(organization: Dict[str, Any], team_slug: str) -> Dict[str, Any]:
    team = organization.get("team")
    if team is None:
        raise NotFoundError(f"Could not resolve to a Team with the slug '{team_slug}'")
    return team


def dedupe_connections(connections: Iterable[TeamRepositoryConnection]) -> List[TeamRepositoryConnection]:
    seen: Dict[str, TeamRepositoryConnection] = {}
    for connection in connections:
        seen.setdefault(connection.repository_name, connection)
    return list(seen.values())


def map_file_contents(repository: Dict[str, Any], aliases: List[str]) -> List[Optional[Dict[str, Any]]]:
    """Return the aliased blob nodes in alias order; missing or non-blob entries become None."""
    out: List[Optional[Dict[str, Any]]] = []
    for alias in aliases:
        blob = repository.get(alias)
        out.append(blob if blob and "text" in blob else None)
    return out


def map_tree_files(tree: Dict[str, Any]) -> List[RepositoryFile]:
    return [
        RepositoryFile(name=posixpath.basename(entry["path"]), full_path=entry["path"])
        for entry in (tree.get("tree") or [])
        if entry.get("type") == "blob" and entry.get("path")
    ]


__all__ = [
    "parse_github_timestamp",
    "map_cursor",
    "map_owner_type",
    "owner_root",
    "repository_node",
    "map_branch_page",
    "map_repository",
    "map_repository_summary",
    "map_repository_summaries",
    "map_source_snapshot",
    "map_team_repository_edges",
    "map_teams_page",
    "team_node",
    "dedupe_connections",
    "map_file_contents",
    "map_tree_files",
]
