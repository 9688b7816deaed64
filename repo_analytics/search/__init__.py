"""Search-side helpers: dependency filter compilation and search requests."""

from .filters import ParsedDependencyFilter, RangeSpecifier, matches_dependencies, parse_dependency_filter
from .query import RepositorySearch, build_repository_search

__all__ = [
    "ParsedDependencyFilter",
    "RangeSpecifier",
    "matches_dependencies",
    "parse_dependency_filter",
    "RepositorySearch",
    "build_repository_search",
]
