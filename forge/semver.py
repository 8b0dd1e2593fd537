"""Minimal semantic-version parsing used for bumps and manifest merges."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

_SEMVER_PATTERN = re.compile(
    r"^v?(\d+)\.(\d+)\.(\d+)(?:-([0-9A-Za-z.-]+))?(?:\+([0-9A-Za-z.-]+))?$"
)
_RANGE_PREFIX = re.compile(r"^(?:\^|~|>=|<=|>|<|=)\s*")

LATEST = "latest"


@dataclass(frozen=True)
class SemanticVersion:
    """A parsed ``MAJOR.MINOR.PATCH[-PRERELEASE][+BUILD]`` version."""

    major: int
    minor: int
    patch: int
    prerelease: Optional[str] = None
    build: Optional[str] = field(default=None, compare=False)

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += f"-{self.prerelease}"
        if self.build:
            text += f"+{self.build}"
        return text

    def sort_key(self) -> Tuple[object, ...]:
        # Releases sort after any prerelease of the same core version.
        if self.prerelease is None:
            pre: Tuple[object, ...] = (1,)
        else:
            pre = (0,) + tuple(_identifier_key(part) for part in self.prerelease.split("."))
        return (self.major, self.minor, self.patch, pre)

    def __lt__(self, other: "SemanticVersion") -> bool:
        return self.sort_key() < other.sort_key()

    def bump_patch(self) -> "SemanticVersion":
        if self.prerelease:
            # 1.2.3-beta.1 -> 1.2.3, matching npm's `semver.inc(v, "patch")`.
            return SemanticVersion(self.major, self.minor, self.patch)
        return SemanticVersion(self.major, self.minor, self.patch + 1)


def _identifier_key(part: str) -> Tuple[int, Union[int, str]]:
    if part.isdigit():
        return (0, int(part))
    return (1, part)


def parse_version(text: str) -> SemanticVersion:
    """Parse an exact semantic version, raising ``ValueError`` when malformed."""
    match = _SEMVER_PATTERN.match(text.strip())
    if not match:
        raise ValueError(f"Invalid semantic version: {text!r}")
    return SemanticVersion(
        major=int(match.group(1)),
        minor=int(match.group(2)),
        patch=int(match.group(3)),
        prerelease=match.group(4),
        build=match.group(5),
    )


def coerce_version(text: str) -> Optional[SemanticVersion]:
    """Parse a dependency specifier such as ``^18.2.0`` leniently."""
    stripped = _RANGE_PREFIX.sub("", text.strip())
    try:
        return parse_version(stripped)
    except ValueError:
        return None


def is_valid(text: str) -> bool:
    try:
        parse_version(text)
    except ValueError:
        return False
    return True


def bump_patch(text: str) -> Optional[str]:
    """Return ``text`` with its patch number incremented, or None if unparsable."""
    try:
        version = parse_version(text)
    except ValueError:
        return None
    return str(version.bump_patch())


def prefer_version(current: str, candidate: str) -> str:
    """Pick the winner between two declared versions of the same dependency.

    ``latest`` beats any pinned specifier; otherwise the higher semantic
    version wins. Specifiers that do not parse lose to ones that do and are
    ordered lexically among themselves so the result never depends on
    iteration order.
    """
    if current == candidate:
        return current
    if LATEST in (current, candidate):
        return LATEST
    current_version = coerce_version(current)
    candidate_version = coerce_version(candidate)
    if current_version is not None and candidate_version is not None:
        if candidate_version.sort_key() == current_version.sort_key():
            return min(current, candidate)
        return candidate if current_version < candidate_version else current
    if current_version is not None:
        return current
    if candidate_version is not None:
        return candidate
    return max(current, candidate)


__all__ = [
    "LATEST",
    "SemanticVersion",
    "bump_patch",
    "coerce_version",
    "is_valid",
    "parse_version",
    "prefer_version",
]
