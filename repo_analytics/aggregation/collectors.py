"""Repository-source operations: metadata, summaries, snapshots, teams and files.

Every GraphQL round trip goes through `_query`, which applies the abuse guard.
Owner-scoped operations accept an optional `owner_type`; when omitted the
owner is probed once and the matching user/organization query is used.
"""

from __future__ import annotations

import base64
import datetime as dt
import logging
from typing import Dict, List, Optional, Sequence, Tuple
from urllib.parse import quote

from .config import PER_PAGE
from .errors import GraphQLRequestError, NotFoundError, StaleIndexError
from .http_client import request_json, run_graphql_query
from .mappers import (
    dedupe_connections,
    map_branch_page,
    map_file_contents,
    map_owner_type,
    map_repository,
    map_repository_summaries,
    map_repository_summary,
    map_source_snapshot,
    map_team_repository_edges,
    map_teams_page,
    map_tree_files,
    owner_root,
    repository_node,
    team_node,
)
from .models import (
    OwnerType,
    RepositoryFile,
    RepositorySourceRepository,
    RepositorySourceSnapshot,
    RepositorySummary,
    TeamRepositoryConnection,
)
from .pagination import NestedPage, PageResult, walk_nested_pages, walk_pages
from .query import (
    GraphQLQuery,
    commit_history_query,
    file_alias,
    file_contents_query,
    owner_type_query,
    repository_branches_query,
    repository_query,
    repository_summaries_query,
    repository_summary_query,
    team_repositories_query,
    teams_query,
)
from .rate_limit import with_abuse_retry

logger = logging.getLogger(__name__)

EMPTY_REPOSITORY_MESSAGE = "Git Repository is empty."


async def _query(query: GraphQLQuery) -> Dict:
    return await with_abuse_retry(lambda: run_graphql_query(query))


async def read_owner_type(owner: str) -> OwnerType:
    data = await _query(owner_type_query(owner))
    return map_owner_type(data, owner)


async def _resolve_owner_type(owner: str, owner_type: Optional[OwnerType]) -> OwnerType:
    return owner_type if owner_type is not None else await read_owner_type(owner)


async def read_repository(owner: str, name: str) -> RepositorySourceRepository:
    """Read repository metadata, walking the branch list past its first page if needed."""
    data = await _query(repository_query(owner, name))
    node = repository_node(data, f"{owner}/{name}")

    first_branches = map_branch_page(node)
    extra_branches: List[str] = []
    if first_branches.cursor.has_next_page:
        async def fetch_branches(after: Optional[str], page_size: int) -> PageResult[str]:
            page_data = await _query(repository_branches_query(owner, name, after, page_size))
            return map_branch_page(repository_node(page_data, f"{owner}/{name}"))

        extra_branches = await walk_pages(fetch_branches, start_cursor=first_branches.cursor.end_cursor)

    return map_repository(node, extra_branches)


async def read_repository_summary(owner: str,
                                  name: str,
                                  owner_type: Optional[OwnerType] = None) -> RepositorySummary:
    owner_type = await _resolve_owner_type(owner, owner_type)
    data = await _query(repository_summary_query(owner_type, owner, name))
    return map_repository_summary(repository_node(owner_root(data, owner_type, owner), name))


async def read_repository_summaries(owner: str,
                                    take: int = PER_PAGE,
                                    end_cursor: Optional[str] = None,
                                    owner_type: Optional[OwnerType] = None) -> PageResult[RepositorySummary]:
    """Return one page of an owner's repositories, most recently pushed first."""
    owner_type = await _resolve_owner_type(owner, owner_type)
    data = await _query(repository_summaries_query(owner_type, owner, take, end_cursor))
    return map_repository_summaries(owner_root(data, owner_type, owner))


async def read_all_repository_summaries(owner: str,
                                        owner_type: Optional[OwnerType] = None) -> List[RepositorySummary]:
    owner_type = await _resolve_owner_type(owner, owner_type)

    async def fetch(after: Optional[str], page_size: int) -> PageResult[RepositorySummary]:
        return await read_repository_summaries(owner, page_size, after, owner_type)

    return await walk_pages(fetch)


async def read_source_snapshot(owner: str,
                               name: str,
                               branch: str,
                               as_of: Optional[dt.datetime] = None,
                               owner_type: Optional[OwnerType] = None) -> Optional[RepositorySourceSnapshot]:
    """Resolve the closest commit at or before `as_of` (the branch tip when omitted).

    Returns None for an empty repository. Raises CommitNotFoundError when the
    branch has commits but none old enough.
    """
    owner_type = await _resolve_owner_type(owner, owner_type)
    data = await _query(commit_history_query(owner_type, owner, name, branch, as_of))
    repository = repository_node(owner_root(data, owner_type, owner), name)
    return map_source_snapshot(repository, branch, as_of)


async def read_team_to_repositories_map(organization: str) -> Dict[str, List[TeamRepositoryConnection]]:
    """Map every team in an organization to the repositories it can access.

    Team names are assumed unique within the organization; they key the map.
    """
    logger.debug("Reading team information for organization %s", organization)

    async def fetch_teams(after: Optional[str],
                          page_size: int) -> PageResult[NestedPage[TeamRepositoryConnection]]:
        if after:
            logger.debug("Reading additional team information for organization %s", organization)
        data = await _query(teams_query(organization, after, page_size))
        return map_teams_page(owner_root(data, OwnerType.ORGANIZATION, organization))

    async def fetch_team_repositories(team_slug: str,
                                      after: Optional[str],
                                      page_size: int) -> PageResult[TeamRepositoryConnection]:
        logger.debug("Reading additional repository information for team %s", team_slug)
        data = await _query(team_repositories_query(organization, team_slug, after, page_size))
        team = team_node(owner_root(data, OwnerType.ORGANIZATION, organization), team_slug)
        return map_team_repository_edges(team.get("repositoryEdges"))

    teams = await walk_nested_pages(fetch_teams, fetch_team_repositories)
    logger.debug("Finished reading team information for organization %s", organization)
    return {name: dedupe_connections(connections) for name, connections in teams.items()}


async def get_multiple_file_contents(owner: str,
                                     name: str,
                                     git_ref: str,
                                     paths: Sequence[str]) -> List[Tuple[str, Optional[str]]]:
    """Read several files at one reference in a single round trip, in input order.

    Raises StaleIndexError naming the first path missing at `git_ref`; no
    partial result is returned.
    """
    if not paths:
        return []

    data = await _query(file_contents_query(owner, name, git_ref, paths))
    repository = repository_node(data, f"{owner}/{name}")
    blobs = map_file_contents(repository, [file_alias(index) for index in range(1, len(paths) + 1)])

    contents: List[Tuple[str, Optional[str]]] = []
    for path, blob in zip(paths, blobs):
        if blob is None:
            raise StaleIndexError(path, f"{owner}/{name}")
        contents.append((path, blob.get("text")))
    return contents


async def read_files(owner: str, name: str, git_ref: str) -> List[RepositoryFile]:
    """List every blob under a reference via the recursive git tree API."""
    path = f"/repos/{quote(owner, safe='')}/{quote(name, safe='')}/git/trees/{quote(git_ref, safe='')}"
    try:
        tree = await request_json(path, {"recursive": "1"})
    except GraphQLRequestError as exc:
        if exc.status_code == 409 and EMPTY_REPOSITORY_MESSAGE in exc.body:
            return []
        raise

    files = map_tree_files(tree or {})
    if (tree or {}).get("truncated"):
        logger.warning("file tree truncated for %s/%s@%s; returned %d files", owner, name, git_ref, len(files))
    return files


async def read_file_content(owner: str, name: str, path: str, git_ref: str) -> Optional[str]:
    """Read one file through the REST contents API; None when the path is absent."""
    url_path = f"/repos/{quote(owner, safe='')}/{quote(name, safe='')}/contents/{quote(path)}"
    try:
        payload = await request_json(url_path, {"ref": git_ref})
    except NotFoundError:
        return None

    if not isinstance(payload, dict) or payload.get("type") != "file":
        return None
    content = payload.get("content") or ""
    if payload.get("encoding") == "base64":
        return base64.b64decode(content).decode("utf-8", errors="replace")
    return content


__all__ = [
    "read_owner_type",
    "read_repository",
    "read_repository_summary",
    "read_repository_summaries",
    "read_all_repository_summaries",
    "read_source_snapshot",
    "read_team_to_repositories_map",
    "get_multiple_file_contents",
    "read_files",
    "read_file_content",
]
