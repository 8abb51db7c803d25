"""Release data models for autoupdater.

Defines the release and asset records produced by a release backend.
Both are frozen: a fetched release is never modified afterwards.
"""

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class ReleaseAsset:
    """Represents a downloadable file attached to a release."""
    name: str
    download_url: str
    size: int = 0
    content_type: str = ""

    @classmethod
    def from_api_response(cls, data: dict) -> "ReleaseAsset":
        """
        Create ReleaseAsset from GitHub API response.

        The API "url" is preferred over "browser_download_url" because it
        works with token authentication for private repositories when
        requested with "Accept: application/octet-stream".
        """
        return cls(
            name=data.get("name") or "",
            download_url=data.get("url") or data.get("browser_download_url") or "",
            size=data.get("size") or 0,
            content_type=data.get("content_type") or "",
        )

    def __str__(self) -> str:
        return f"{self.name} ({self.download_url})"


@dataclass(frozen=True)
class Release:
    """Represents a tagged release with its assets."""
    tag: str
    branch: str
    display_name: str
    is_prerelease: bool
    assets: Tuple[ReleaseAsset, ...] = ()
    body: str = ""

    def has_asset(self, name: str) -> bool:
        """Check if release has an asset with exactly this name."""
        return any(asset.name == name for asset in self.assets)

    def get_asset(self, name: str) -> Optional[ReleaseAsset]:
        """Get asset by name."""
        for asset in self.assets:
            if asset.name == name:
                return asset
        return None

    @classmethod
    def from_api_response(cls, data: dict) -> "Release":
        """Create Release from GitHub API response."""
        assets = tuple(
            ReleaseAsset.from_api_response(a)
            for a in data.get("assets") or []
        )

        return cls(
            tag=data.get("tag_name") or "",
            branch=data.get("target_commitish") or "",
            display_name=data.get("name") or "",
            is_prerelease=bool(data.get("prerelease", False)),
            assets=assets,
            body=data.get("body") or "",
        )

    def __str__(self) -> str:
        lines = [
            f"Tag: {self.tag}",
            f"Branch: {self.branch}",
            f"Name: {self.display_name}",
            f"Prerelease: {self.is_prerelease}",
            "Assets:",
        ]
        lines.extend(f"  {asset}" for asset in self.assets)
        if self.body:
            lines.append("Notes:")
            lines.extend(f"  {line}" for line in self.body.splitlines())
        return "\n".join(lines)
