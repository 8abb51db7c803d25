"""Updater exceptions for autoupdater.

Custom exception hierarchy for release resolution, download and
self-replacement so callers can tell which phase of an update failed.
"""

from pathlib import Path
from typing import Optional, Union


class UpdaterError(Exception):
    """Base exception for all updater errors."""

    def __init__(self, message: str, original_error: Exception = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


class BackendError(UpdaterError):
    """Fetching a page of releases from the hosting service failed."""
    pass


class NoMatchingReleaseError(UpdaterError):
    """No fetched release satisfies the selection criteria."""

    def __init__(self, criteria: object = None):
        self.criteria = criteria
        message = "Failed to find a release matching requirements"
        if criteria is not None:
            message = f"{message} ({criteria})"
        super().__init__(message)


class HttpStatusError(UpdaterError):
    """Download response status was not 200 OK."""

    def __init__(self, status_code: int, url: str = ""):
        self.status_code = status_code
        self.url = url
        message = f"HTTP response code {status_code}"
        if url:
            message = f"{message} for {url}"
        super().__init__(message)


class DownloadError(UpdaterError):
    """Transport failure while streaming an asset."""

    def __init__(self, asset_name: str, original_error: Exception = None):
        self.asset_name = asset_name
        message = f"Failed to download '{asset_name}'"
        super().__init__(message, original_error)


class FilesystemError(UpdaterError):
    """A filesystem operation of the download or replace phase failed."""

    def __init__(
        self,
        operation: str,
        path: Optional[Union[str, Path]] = None,
        original_error: Exception = None
    ):
        self.operation = operation
        self.path = path
        message = f"Failed to {operation}"
        if path is not None:
            message = f"{message} '{path}'"
        super().__init__(message, original_error)


class AssetNotFoundError(UpdaterError):
    """Release has no asset that can be installed."""

    def __init__(self, tag: str, asset_name: Optional[str] = None):
        self.tag = tag
        self.asset_name = asset_name
        if asset_name:
            message = f"Release {tag} has no asset named '{asset_name}'"
        else:
            message = f"Release {tag} has no assets"
        super().__init__(message)
