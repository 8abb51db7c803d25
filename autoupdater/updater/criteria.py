"""Release selection criteria.

SelectionCriteria is supplied once by the caller and decides which
fetched releases are candidates for an update.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional

from autoupdater.updater.release import Release


@dataclass(frozen=True)
class SelectionCriteria:
    """Caller's release selection criteria.

    Every criterion left as None is skipped. An empty string is still a
    requirement and only matches an empty field.
    """
    allow_prerelease: bool = False
    required_branch: Optional[str] = None
    required_tag: Optional[str] = None
    required_asset_name: Optional[str] = None
    baseline_version: Optional[str] = None

    def matches(self, release: Release) -> bool:
        """Return True if the release passes all criteria."""
        if release.is_prerelease and not self.allow_prerelease:
            return False
        if self.required_tag is not None and release.tag != self.required_tag:
            return False
        if self.required_branch is not None and release.branch != self.required_branch:
            return False
        if (
            self.required_asset_name is not None
            and not release.has_asset(self.required_asset_name)
        ):
            return False
        return True

    def filter(self, releases: Iterable[Release]) -> List[Release]:
        """Keep matching releases, preserving their order."""
        return [release for release in releases if self.matches(release)]

    def __str__(self) -> str:
        parts = [f"prerelease={'yes' if self.allow_prerelease else 'no'}"]
        if self.required_branch is not None:
            parts.append(f"branch={self.required_branch}")
        if self.required_tag is not None:
            parts.append(f"tag={self.required_tag}")
        if self.required_asset_name is not None:
            parts.append(f"asset={self.required_asset_name}")
        if self.baseline_version is not None:
            parts.append(f"current={self.baseline_version}")
        return ", ".join(parts)
