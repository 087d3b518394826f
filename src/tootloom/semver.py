# tootloom/semver.py
"""Lenient semantic versions, as reported by Mastodon servers.

Only major, minor and patch are interpreted. Pre-release and build suffixes
(`4.4.0-nightly.2025-05-24`, `3.5.19-qoto`) are ignored, so two versions that
differ only there compare equal.
"""

import re
from functools import total_ordering

_SEPARATORS = re.compile(r"[.+-]")
_NUMBER = re.compile(r"[0-9]+")


def _component(parts: list[str], index: int, default: int) -> int:
    if index < len(parts) and _NUMBER.fullmatch(parts[index]):
        return int(parts[index])
    return default


@total_ordering
class SemanticVersion:
    """A version string split into major, minor and patch numbers.

    A string whose first component is not a number (e.g. `"v1.2.3"`) gives
    `major == -1` and `valid is False`. Missing or non-numeric minor and
    patch components default to 0.

    Attributes:
        source: The string the version was parsed from.
        major: Major version, or -1 if it could not be parsed.
        minor: Minor version.
        patch: Patch version.
    """

    __slots__ = ("source", "major", "minor", "patch")

    def __init__(self, source: str):
        parts = _SEPARATORS.split(source)
        self.source = source
        self.major = _component(parts, 0, -1)
        self.minor = _component(parts, 1, 0)
        self.patch = _component(parts, 2, 0)

    @property
    def valid(self) -> bool:
        return self.major > -1

    def _key(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: "SemanticVersion") -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def __repr__(self) -> str:
        return f"SemanticVersion({self.source!r})"
