"""Tests for repo_analytics.search.query covering search request assembly.

Run with:
    pytest tests/test_search_query.py --maxfail=1 -v --cov=repo_analytics.search.query --cov-report=term-missing
"""

import datetime as dt

from repo_analytics.search import RangeSpecifier, build_repository_search


def test_build_repository_search_compiles_dependencies():
    as_of = dt.datetime(2022, 1, 1, tzinfo=dt.timezone.utc)
    search = build_repository_search(
        type_name="Service",
        dependencies=["Newtonsoft.Json", "Serilog:>=2"],
        has_continuous_delivery=True,
        as_of=as_of,
        topic="payments",
        team="core",
    )
    assert [d.name for d in search.dependencies] == ["Newtonsoft.Json", "Serilog"]
    assert search.dependencies[1].range_specifier is RangeSpecifier.GREATER_THAN_OR_EQUAL_TO
    assert search.has_continuous_delivery is True
    assert (search.topic, search.team, search.as_of) == ("payments", "core", as_of)
    assert search.implementation_name is None


def test_build_repository_search_without_dependencies():
    search = build_repository_search()
    assert search.dependencies == []
    assert search.type_name is None
