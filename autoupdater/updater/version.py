"""Version tag parsing and comparison.

Release tags are free-form strings ("v1.2.3", "release-2.0.1-beta").
VersionTag pulls a (major, minor, patch) triple out of them and the
compare functions below give the default release ordering.
"""

import re
from dataclasses import dataclass
from typing import Callable, Optional

# Comparator over two tag strings with cmp semantics:
# negative if a < b, zero if equal, positive if a > b.
Comparator = Callable[[str, str], int]

LENIENT_PATTERN = re.compile(r"(\d+)\.(\d+)\.(\d+)")
# Letter runs are any Unicode letters; digits are ASCII only
STRICT_PATTERN = re.compile(r"[^\W\d_]*([0-9]+)\.([0-9]+)\.([0-9]+)[^\W\d_]*")


@dataclass(frozen=True, order=True)
class VersionTag:
    """A semantic version triple extracted from a tag string."""
    major: int
    minor: int
    patch: int

    @classmethod
    def parse(cls, text: str, strict: bool = False) -> Optional["VersionTag"]:
        """
        Parse a tag string into a VersionTag.

        Args:
            text: Tag string, e.g. "v1.2.3" or "1.2.3-pre"
            strict: Require the whole string to be an optional letter run,
                three dot-separated integers and an optional letter run.
                Otherwise the first "N.N.N" found anywhere is used.

        Returns:
            VersionTag, or None if no integer triple was recognized
        """
        if not text:
            return None

        if strict:
            match = STRICT_PATTERN.fullmatch(text)
        else:
            match = LENIENT_PATTERN.search(text)

        if match is None:
            return None

        major, minor, patch = (int(group) for group in match.groups())
        return cls(major, minor, patch)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


def _compare_parsed(a: Optional[VersionTag], b: Optional[VersionTag]) -> int:
    # Unparseable tags are incomparable; report them as equal so that
    # sorting never fails.
    if a is None or b is None:
        return 0
    return (a > b) - (a < b)


def compare_versions(a: str, b: str) -> int:
    """
    Compare two tag strings by their version triple.

    Returns -1, 0 or 1. If either tag cannot be parsed the result is 0.
    """
    return _compare_parsed(VersionTag.parse(a), VersionTag.parse(b))


def strict_compare_versions(a: str, b: str) -> int:
    """Like compare_versions, but only accepts strictly formatted tags."""
    return _compare_parsed(
        VersionTag.parse(a, strict=True),
        VersionTag.parse(b, strict=True),
    )
