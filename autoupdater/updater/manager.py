"""Update manager.

Wires a release backend, the resolver, the downloader and the replacer
into the check / download / install sequence used by applications.
"""

import shutil
from pathlib import Path
from typing import List, Optional

from autoupdater.updater.backend import ReleaseBackend
from autoupdater.updater.criteria import SelectionCriteria
from autoupdater.updater.downloader import AssetDownloader, ProgressCallback
from autoupdater.updater.exceptions import AssetNotFoundError
from autoupdater.updater.release import Release, ReleaseAsset
from autoupdater.updater.replacer import PathLike, replace_current_executable
from autoupdater.updater.resolver import DEFAULT_PER_PAGE, ReleaseResolver
from autoupdater.updater.version import Comparator
from autoupdater.utils.logging import get_logger

logger = get_logger("manager")


class UpdateManager:
    """Checks for, downloads and installs updates of the running program."""

    def __init__(
        self,
        backend: ReleaseBackend,
        criteria: Optional[SelectionCriteria] = None,
        comparator: Optional[Comparator] = None,
        downloader: Optional[AssetDownloader] = None,
        per_page: int = DEFAULT_PER_PAGE,
    ):
        """
        Initialize the manager.

        Args:
            backend: Release source, e.g. GitHubClient
            criteria: Default selection criteria
            comparator: Tag comparator, defaults to compare_versions
            downloader: Asset downloader (a new one is created otherwise)
            per_page: Page size for release listing
        """
        self._backend = backend
        self._criteria = criteria or SelectionCriteria()
        self._comparator = comparator
        self._resolver = ReleaseResolver(backend, per_page=per_page)
        self._downloader = downloader or AssetDownloader(
            session=getattr(backend, "session", None)
        )

    @property
    def criteria(self) -> SelectionCriteria:
        return self._criteria

    @property
    def resolver(self) -> ReleaseResolver:
        return self._resolver

    def list_releases(self, criteria: Optional[SelectionCriteria] = None) -> List[Release]:
        """All releases matching criteria, in fetch order."""
        return self._resolver.list_matching(criteria or self._criteria)

    def latest_release(self, criteria: Optional[SelectionCriteria] = None) -> Release:
        """Newest release matching criteria, ignoring the baseline version."""
        return self._resolver.resolve(criteria or self._criteria, self._comparator)

    def check_for_update(
        self,
        criteria: Optional[SelectionCriteria] = None
    ) -> Optional[Release]:
        """
        Check whether a newer release exists.

        Returns:
            The newer release, or None if the baseline is up to date

        Raises:
            BackendError: If fetching releases fails
            NoMatchingReleaseError: If no release matches
        """
        return self._resolver.get_if_newer(criteria or self._criteria, self._comparator)

    def select_asset(
        self,
        release: Release,
        asset_name: Optional[str] = None
    ) -> ReleaseAsset:
        """
        Pick the asset to install from a release.

        Uses asset_name if given, then the criteria's required asset name,
        and otherwise the first asset of the release.

        Raises:
            AssetNotFoundError: If no suitable asset exists
        """
        name = asset_name or self._criteria.required_asset_name
        if name:
            asset = release.get_asset(name)
            if asset is None:
                raise AssetNotFoundError(release.tag, name)
            return asset

        if not release.assets:
            raise AssetNotFoundError(release.tag)
        return release.assets[0]

    def download_asset(
        self,
        asset: ReleaseAsset,
        progress_callback: Optional[ProgressCallback] = None
    ) -> Path:
        """Download an asset with the backend's authorization headers."""
        return self._downloader.download(
            asset,
            headers=self._backend.auth_headers(),
            progress_callback=progress_callback,
        )

    def install(
        self,
        downloaded_path: PathLike,
        current_executable: Optional[PathLike] = None
    ) -> Path:
        """
        Replace the running executable and discard the download directory.

        Returns:
            Path of the backup of the previous executable
        """
        downloaded = Path(downloaded_path)
        try:
            return replace_current_executable(downloaded, current_executable)
        finally:
            # Only directories created by AssetDownloader are discarded
            if downloaded.parent.name.startswith(f"{downloaded.name}_dl"):
                shutil.rmtree(downloaded.parent, ignore_errors=True)

    def update(
        self,
        criteria: Optional[SelectionCriteria] = None,
        asset_name: Optional[str] = None,
        progress_callback: Optional[ProgressCallback] = None,
        current_executable: Optional[PathLike] = None
    ) -> Optional[Release]:
        """
        Run the whole pipeline: check, download and install.

        Returns:
            The installed release, or None if already up to date
        """
        release = self.check_for_update(criteria)
        if release is None:
            return None

        asset = self.select_asset(release, asset_name)
        logger.info(f"Updating to {release.tag} using asset {asset.name}")
        downloaded = self.download_asset(asset, progress_callback)
        self.install(downloaded, current_executable)
        return release

    def close(self) -> None:
        """Clean up resources."""
        self._downloader.close()
        close = getattr(self._backend, "close", None)
        if close:
            close()

    def __enter__(self) -> "UpdateManager":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()
