"""Aggregation engine reading repository state from GitHub."""

from .collectors import (
    get_multiple_file_contents,
    read_all_repository_summaries,
    read_file_content,
    read_files,
    read_owner_type,
    read_repository,
    read_repository_summaries,
    read_repository_summary,
    read_source_snapshot,
    read_team_to_repositories_map,
)

__all__ = [
    "get_multiple_file_contents",
    "read_all_repository_summaries",
    "read_file_content",
    "read_files",
    "read_owner_type",
    "read_repository",
    "read_repository_summaries",
    "read_repository_summary",
    "read_source_snapshot",
    "read_team_to_repositories_map",
]
