"""Dependency filter compiler for repository search.

A filter is one of four flavors:

1. Just a name: `.NET Framework`
2. A name and an exact version, separated by `:`: `.NET Framework:4.6.2`
3. A name and a partial version: `.NET Framework:4.6` matches `4.6.1`, `4.6.2`, ...
4. A name and a version with a range specifier: `.NET Framework:>=4` matches `4.x.x`, `5.x.x`, ...

Flavors 2 and 3 are the same prefix rule. A leading run of non-word
characters that is not one of `>=`, `>`, `<=`, `<` stays part of the version
text, so e.g. `~1.2` prefix-matches nothing that does not start with `~1.2`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Tuple

RANGE_SPECIFIER_RE = re.compile(r"^[^\w]+")
VERSION_RE = re.compile(r"^v?(\d+(?:\.\d+)*)")


class RangeSpecifier(Enum):
    UNSPECIFIED = "unspecified"
    GREATER_THAN = ">"
    GREATER_THAN_OR_EQUAL_TO = ">="
    LESS_THAN = "<"
    LESS_THAN_OR_EQUAL_TO = "<="


_RANGE_SPECIFIERS = {
    specifier.value: specifier
    for specifier in RangeSpecifier
    if specifier is not RangeSpecifier.UNSPECIFIED
}


@dataclass(frozen=True)
class ParsedDependencyFilter:
    name: str
    version: Optional[str] = None
    range_specifier: RangeSpecifier = RangeSpecifier.UNSPECIFIED

    def __post_init__(self) -> None:
        if self.version is None and self.range_specifier is not RangeSpecifier.UNSPECIFIED:
            raise ValueError("a range specifier requires a version")

    def matches(self, name: str, version: Optional[str]) -> bool:
        """True when a dependency `(name, version)` satisfies this filter."""
        if name != self.name:
            return False
        if self.version is None:
            return True
        if version is None:
            return False
        if self.range_specifier is RangeSpecifier.UNSPECIFIED:
            return version.startswith(self.version)
        return _compare(version, self.version, self.range_specifier)


def parse_version(text: str) -> Optional[Tuple[int, ...]]:
    """Numeric components of a version; pre-release/build suffixes are dropped."""
    match = VERSION_RE.match(text.strip())
    if not match:
        return None
    return tuple(int(part) for part in match.group(1).split("."))


def _pad(left: Tuple[int, ...], right: Tuple[int, ...]) -> Tuple[Tuple[int, ...], Tuple[int, ...]]:
    width = max(len(left), len(right))
    return left + (0,) * (width - len(left)), right + (0,) * (width - len(right))


def _compare(target: str, bound: str, specifier: RangeSpecifier) -> bool:
    target_parts = parse_version(target)
    bound_parts = parse_version(bound)
    if target_parts is None or bound_parts is None:
        return False
    target_parts, bound_parts = _pad(target_parts, bound_parts)
    if specifier is RangeSpecifier.GREATER_THAN:
        return target_parts > bound_parts
    if specifier is RangeSpecifier.GREATER_THAN_OR_EQUAL_TO:
        return target_parts >= bound_parts
    if specifier is RangeSpecifier.LESS_THAN:
        return target_parts < bound_parts
    return target_parts <= bound_parts


def parse_dependency_filter(raw: str) -> ParsedDependencyFilter:
    """Compile one `name[:[op]version]` filter string."""
    parts = raw.split(":")
    name = parts[0]
    version = parts[1] if len(parts) == 2 else None

    if version is None or not version.strip():
        return ParsedDependencyFilter(name)

    specifier = RangeSpecifier.UNSPECIFIED
    match = RANGE_SPECIFIER_RE.match(version)
    if match and match.group(0) in _RANGE_SPECIFIERS:
        specifier = _RANGE_SPECIFIERS[match.group(0)]
        version = version[match.end():]
    return ParsedDependencyFilter(name, version, specifier)


def parse_dependency_filters(raws: Iterable[str]) -> List[ParsedDependencyFilter]:
    return [parse_dependency_filter(raw) for raw in raws]


def matches_dependencies(filters: Iterable[ParsedDependencyFilter],
                         dependencies: Iterable[Tuple[str, Optional[str]]]) -> bool:
    """AND semantics: every filter must be satisfied by some dependency."""
    dependencies = list(dependencies)
    return all(
        any(dependency_filter.matches(name, version) for name, version in dependencies)
        for dependency_filter in filters
    )


__all__ = [
    "RangeSpecifier",
    "ParsedDependencyFilter",
    "parse_version",
    "parse_dependency_filter",
    "parse_dependency_filters",
    "matches_dependencies",
]
