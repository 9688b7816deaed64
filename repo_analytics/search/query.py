"""Search request assembled from raw query parameters."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from .filters import ParsedDependencyFilter, parse_dependency_filters


@dataclass(frozen=True)
class RepositorySearch:
    """Criteria handed to the search store; every set field must match."""

    type_name: Optional[str] = None
    implementation_name: Optional[str] = None
    dependencies: List[ParsedDependencyFilter] = field(default_factory=list)
    has_continuous_delivery: Optional[bool] = None
    as_of: Optional[dt.datetime] = None
    topic: Optional[str] = None
    team: Optional[str] = None


def build_repository_search(*,
                            type_name: Optional[str] = None,
                            implementation_name: Optional[str] = None,
                            dependencies: Optional[Iterable[str]] = None,
                            has_continuous_delivery: Optional[bool] = None,
                            as_of: Optional[dt.datetime] = None,
                            topic: Optional[str] = None,
                            team: Optional[str] = None) -> RepositorySearch:
    return RepositorySearch(
        type_name=type_name,
        implementation_name=implementation_name,
        dependencies=parse_dependency_filters(dependencies or []),
        has_continuous_delivery=has_continuous_delivery,
        as_of=as_of,
        topic=topic,
        team=team,
    )


__all__ = ["RepositorySearch", "build_repository_search"]
