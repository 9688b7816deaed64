"""Tests for repo_analytics.aggregation.mappers covering response translation.

Run with:
    pytest tests/test_mappers.py --maxfail=1 -v --cov=repo_analytics.aggregation.mappers --cov-report=term-missing
"""

import datetime as dt

import pytest

from repo_analytics.aggregation import mappers
from repo_analytics.aggregation.errors import CommitNotFoundError, NotFoundError
from repo_analytics.aggregation.models import OwnerType, RepositoryPermission, TeamRepositoryConnection


def _repository_node(**overrides):
    node = {
        "name": "svc",
        "url": "https://github.com/acme/svc",
        "pushedAt": "2023-05-01T12:00:00Z",
        "createdAt": "2019-01-01T00:00:00Z",
        "defaultBranchRef": {"name": "main"},
        "refs": {"nodes": [{"name": "main"}, {"name": "dev"}, {"name": "main"}],
                 "pageInfo": {"endCursor": None, "hasNextPage": False}},
        "projects": {"totalCount": 1},
        "issues": {"totalCount": 7},
        "pullRequests": {"totalCount": 3},
        "repositoryTopics": {"nodes": [{"topic": {"name": "api"}}, {"topic": {"name": "api"}}]},
    }
    node.update(overrides)
    return node


def test_parse_github_timestamp():
    parsed = mappers.parse_github_timestamp("2023-05-01T12:00:00Z")
    assert parsed == dt.datetime(2023, 5, 1, 12, tzinfo=dt.timezone.utc)
    assert mappers.parse_github_timestamp(None) is None


def test_map_repository_dedupes_and_counts():
    repo = mappers.map_repository(_repository_node(), ["release"])
    assert repo.branch_names == frozenset({"main", "dev", "release"})
    assert repo.topic_names == frozenset({"api"})
    assert repo.default_branch_name == "main"
    assert (repo.project_count, repo.issue_count, repo.pull_request_count) == (1, 7, 3)


def test_map_repository_absent_collections_become_empty():
    repo = mappers.map_repository(_repository_node(
        defaultBranchRef=None, refs=None, repositoryTopics=None, projects=None,
    ))
    assert repo.default_branch_name is None
    assert repo.branch_names == frozenset()
    assert repo.topic_names == frozenset()
    assert repo.project_count == 0


def test_map_owner_type_and_missing_owner():
    assert mappers.map_owner_type({"repositoryOwner": {"__typename": "User"}}, "x") is OwnerType.USER
    with pytest.raises(NotFoundError):
        mappers.map_owner_type({"repositoryOwner": None}, "ghost")


def test_owner_root_missing_raises():
    with pytest.raises(NotFoundError):
        mappers.owner_root({"organization": None}, OwnerType.ORGANIZATION, "acme")


def test_map_source_snapshot_states():
    commit = {
        "id": "C_1", "pushedDate": None, "committedDate": "2020-02-02T00:00:00Z",
        "tree": {"oid": "tree1"},
    }
    snapshot = mappers.map_source_snapshot(
        {"isEmpty": False, "commitHistory": {"history": {"nodes": [commit]}}}, "main", None)
    assert snapshot.closest_commit_id == "C_1"
    assert snapshot.closest_commit_tree_id == "tree1"
    assert snapshot.closest_commit_pushed_date is None

    assert mappers.map_source_snapshot({"isEmpty": True, "commitHistory": None}, "main", None) is None

    with pytest.raises(CommitNotFoundError):
        mappers.map_source_snapshot(
            {"isEmpty": False, "commitHistory": {"history": {"nodes": []}}},
            "main", dt.datetime(2000, 1, 1))

    with pytest.raises(NotFoundError) as excinfo:
        mappers.map_source_snapshot({"isEmpty": False, "commitHistory": None}, "nope", None)
    assert not isinstance(excinfo.value, CommitNotFoundError)


def test_map_teams_page_and_dedupe():
    organization = {"teams": {
        "nodes": [{
            "name": "core",
            "slug": "core-team",
            "repositoryEdges": {
                "edges": [
                    {"permission": "ADMIN", "repository": {"name": "a"}},
                    {"permission": "READ", "repository": {"name": "b"}},
                ],
                "pageInfo": {"endCursor": "r1", "hasNextPage": True},
            },
        }],
        "pageInfo": {"endCursor": "t1", "hasNextPage": True},
    }}
    page = mappers.map_teams_page(organization)
    assert page.cursor.end_cursor == "t1" and page.cursor.has_next_page
    team = page.items[0]
    assert team.key == "core"
    assert team.handle == "core-team"
    assert team.first_page.items[0] == TeamRepositoryConnection("a", RepositoryPermission.ADMIN)
    assert team.first_page.cursor.end_cursor == "r1"

    deduped = mappers.dedupe_connections([
        TeamRepositoryConnection("a", RepositoryPermission.ADMIN),
        TeamRepositoryConnection("a", RepositoryPermission.READ),
        TeamRepositoryConnection("b", RepositoryPermission.WRITE),
    ])
    assert [c.repository_name for c in deduped] == ["a", "b"]
    assert deduped[0].team_permissions is RepositoryPermission.ADMIN


def test_team_node_requires_resolved_team():
    organization = {"team": {"name": "Core", "repositoryEdges": None}}
    assert mappers.team_node(organization, "core")["name"] == "Core"
    with pytest.raises(NotFoundError, match="core"):
        mappers.team_node({"team": None}, "core")


def test_map_file_contents_marks_missing_entries():
    repository = {"file1": {"text": "one"}, "file2": None, "file3": {}}
    assert mappers.map_file_contents(repository, ["file1", "file2", "file3", "file4"]) == [
        {"text": "one"}, None, None, None,
    ]


def test_map_tree_files_keeps_blobs():
    files = mappers.map_tree_files({"tree": [
        {"type": "blob", "path": "src/app/main.py"},
        {"type": "tree", "path": "src"},
    ]})
    assert [(f.name, f.full_path) for f in files] == [("main.py", "src/app/main.py")]
