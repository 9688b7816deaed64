"""GraphQL query builders for every query shape the aggregation engine issues.

Caller-supplied values (logins, repository names, refs, paths, cursors,
instants) only ever travel as GraphQL variables. The single piece of text
substituted into a query is the owner root field, taken from `OwnerType`.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .config import GIT_TIMESTAMP_FORMAT, PER_PAGE, TOPIC_PAGE_SIZE
from .models import OwnerType


@dataclass(frozen=True)
class GraphQLQuery:
    text: str
    variables: Dict[str, Any] = field(default_factory=dict)

    def payload(self) -> Dict[str, Any]:
        return {"query": self.text, "variables": self.variables}


OWNER_TYPE_QUERY = """
query OwnerType($login: String!) {
  repositoryOwner(login: $login) {
    __typename
  }
}
"""

REPOSITORY_QUERY = """
query Repository($owner: String!, $name: String!, $branchCount: Int!, $topicCount: Int!) {
  repository(owner: $owner, name: $name) {
    name
    url
    pushedAt
    createdAt
    defaultBranchRef {
      name
    }
    refs(first: $branchCount, refPrefix: "refs/heads/") {
      nodes {
        name
      }
      pageInfo {
        endCursor
        hasNextPage
      }
    }
    projects {
      totalCount
    }
    issues {
      totalCount
    }
    pullRequests {
      totalCount
    }
    repositoryTopics(first: $topicCount) {
      nodes {
        topic {
          name
        }
      }
    }
  }
}
"""

REPOSITORY_BRANCHES_QUERY = """
query RepositoryBranches($owner: String!, $name: String!, $first: Int!, $after: String) {
  repository(owner: $owner, name: $name) {
    refs(first: $first, after: $after, refPrefix: "refs/heads/") {
      nodes {
        name
      }
      pageInfo {
        endCursor
        hasNextPage
      }
    }
  }
}
"""

REPOSITORY_SUMMARY_QUERY = """
query RepositorySummary($login: String!, $name: String!) {
  %(root)s(login: $login) {
    repository(name: $name) {
      url
      createdAt
      pushedAt
    }
  }
}
"""

REPOSITORY_SUMMARIES_QUERY = """
query RepositorySummaries($login: String!, $first: Int!, $after: String) {
  %(root)s(login: $login) {
    repositories(first: $first, after: $after, orderBy: {field: PUSHED_AT, direction: DESC}) {
      nodes {
        url
        createdAt
        pushedAt
      }
      pageInfo {
        endCursor
        hasNextPage
      }
    }
  }
}
"""

COMMIT_HISTORY_QUERY = """
query CommitHistory($login: String!, $name: String!, $branch: String!, $asOf: GitTimestamp) {
  %(root)s(login: $login) {
    repository(name: $name) {
      isEmpty
      commitHistory: object(expression: $branch) {
        ... on Commit {
          history(first: 1, until: $asOf) {
            nodes {
              id
              message
              pushedDate
              committedDate
              tree {
                oid
              }
            }
          }
        }
      }
    }
  }
}
"""

_TEAM_REPOSITORY_EDGES = """
        repositoryEdges: repositories(first: $repositoriesFirst, after: $repositoriesAfter) {
          edges {
            permission
            repository: node {
              name
            }
          }
          pageInfo {
            endCursor
            hasNextPage
          }
        }
"""

TEAMS_QUERY = """
query Teams($login: String!, $first: Int!, $after: String, $repositoriesFirst: Int!, $repositoriesAfter: String) {
  organization(login: $login) {
    teams(first: $first, after: $after, orderBy: {field: NAME, direction: ASC}) {
      nodes {
        name
        slug
%(edges)s
      }
      pageInfo {
        endCursor
        hasNextPage
      }
    }
  }
}
""" % {"edges": _TEAM_REPOSITORY_EDGES}

TEAM_REPOSITORIES_QUERY = """
query TeamRepositories($login: String!, $slug: String!, $repositoriesFirst: Int!, $repositoriesAfter: String) {
  organization(login: $login) {
    team(slug: $slug) {
      name
%(edges)s
    }
  }
}
""" % {"edges": _TEAM_REPOSITORY_EDGES}

FILE_CONTENTS_QUERY = """
query FileContents($owner: String!, $name: String!%(declarations)s) {
  repository(owner: $owner, name: $name) {
%(selections)s
  }
}
"""

_FILE_SELECTION = """    %(alias)s: object(expression: $%(variable)s) {
      ... on Blob {
        text
      }
    }"""


def git_timestamp(value: dt.datetime) -> str:
    """Format an instant as a GitTimestamp; naive values are taken as UTC."""
    if value.tzinfo is not None:
        value = value.astimezone(dt.timezone.utc)
    return value.strftime(GIT_TIMESTAMP_FORMAT)


def file_alias(index: int) -> str:
    """Alias for the 1-indexed position of a path in a batched file query."""
    return f"file{index}"


def owner_type_query(login: str) -> GraphQLQuery:
    return GraphQLQuery(OWNER_TYPE_QUERY, {"login": login})


def repository_query(owner: str, name: str) -> GraphQLQuery:
    return GraphQLQuery(
        REPOSITORY_QUERY,
        {"owner": owner, "name": name, "branchCount": PER_PAGE, "topicCount": TOPIC_PAGE_SIZE},
    )


def repository_branches_query(owner: str, name: str, after: Optional[str], first: int = PER_PAGE) -> GraphQLQuery:
    return GraphQLQuery(
        REPOSITORY_BRANCHES_QUERY,
        {"owner": owner, "name": name, "first": first, "after": after},
    )


def repository_summary_query(owner_type: OwnerType, login: str, name: str) -> GraphQLQuery:
    text = REPOSITORY_SUMMARY_QUERY % {"root": owner_type.root_field}
    return GraphQLQuery(text, {"login": login, "name": name})


def repository_summaries_query(owner_type: OwnerType,
                               login: str,
                               first: int,
                               after: Optional[str]) -> GraphQLQuery:
    text = REPOSITORY_SUMMARIES_QUERY % {"root": owner_type.root_field}
    return GraphQLQuery(text, {"login": login, "first": first, "after": after})


def commit_history_query(owner_type: OwnerType,
                         login: str,
                         name: str,
                         branch: str,
                         as_of: Optional[dt.datetime]) -> GraphQLQuery:
    text = COMMIT_HISTORY_QUERY % {"root": owner_type.root_field}
    return GraphQLQuery(
        text,
        {
            "login": login,
            "name": name,
            "branch": branch,
            "asOf": git_timestamp(as_of) if as_of is not None else None,
        },
    )


def teams_query(organization: str, after: Optional[str], first: int = PER_PAGE) -> GraphQLQuery:
    return GraphQLQuery(
        TEAMS_QUERY,
        {
            "login": organization,
            "first": first,
            "after": after,
            "repositoriesFirst": PER_PAGE,
            "repositoriesAfter": None,
        },
    )


def team_repositories_query(organization: str,
                            team_slug: str,
                            after: Optional[str],
                            first: int = PER_PAGE) -> GraphQLQuery:
    """Continue one team's repository connection, addressing the team by slug."""
    return GraphQLQuery(
        TEAM_REPOSITORIES_QUERY,
        {
            "login": organization,
            "slug": team_slug,
            "repositoriesFirst": first,
            "repositoriesAfter": after,
        },
    )


def file_contents_query(owner: str, name: str, git_ref: str, paths: Sequence[str]) -> GraphQLQuery:
    """Request every path in one round trip, one aliased `object` per path.

    GraphQL rejects sibling fields sharing a name, so each path gets the alias
    `file<N>` for its 1-indexed position.
    """
    declarations: List[str] = []
    selections: List[str] = []
    variables: Dict[str, Any] = {"owner": owner, "name": name}
    for index, path in enumerate(paths, start=1):
        variable = f"expression{index}"
        declarations.append(f", ${variable}: String!")
        selections.append(_FILE_SELECTION % {"alias": file_alias(index), "variable": variable})
        variables[variable] = f"{git_ref}:{path}"

    text = FILE_CONTENTS_QUERY % {
        "declarations": "".join(declarations),
        "selections": "\n".join(selections),
    }
    return GraphQLQuery(text, variables)


__all__ = [
    "GraphQLQuery",
    "git_timestamp",
    "file_alias",
    "owner_type_query",
    "repository_query",
    "repository_branches_query",
    "repository_summary_query",
    "repository_summaries_query",
    "commit_history_query",
    "teams_query",
    "team_repositories_query",
    "file_contents_query",
]
