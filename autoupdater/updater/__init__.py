"""Updater module for release resolution and self-replacement.

This module handles the update pipeline:
- VersionTag: tag parsing and the default comparator
- SelectionCriteria: release filter
- ReleaseResolver: paginated fetch and newest-release selection
- GitHubClient: GitHub release backend
- AssetDownloader: streamed asset download with progress
- replace_current_executable: swap of the running binary
- UpdateManager: facade over the whole pipeline
"""

from .version import VersionTag, Comparator, compare_versions, strict_compare_versions
from .release import Release, ReleaseAsset
from .criteria import SelectionCriteria
from .backend import ReleaseBackend
from .exceptions import (
    UpdaterError,
    BackendError,
    NoMatchingReleaseError,
    HttpStatusError,
    DownloadError,
    FilesystemError,
    AssetNotFoundError,
)
from .github_client import (
    GitHubClient,
    GitHubError,
    GitHubConnectionError,
    GitHubRateLimitError,
    GitHubNotFoundError,
)
from .resolver import ReleaseResolver
from .downloader import AssetDownloader, ProgressCallback
from .replacer import replace_current_executable, rollback, cleanup_old
from .manager import UpdateManager

__all__ = [
    # Versions
    "VersionTag",
    "Comparator",
    "compare_versions",
    "strict_compare_versions",
    # Release models
    "Release",
    "ReleaseAsset",
    "SelectionCriteria",
    "ReleaseBackend",
    # Errors
    "UpdaterError",
    "BackendError",
    "NoMatchingReleaseError",
    "HttpStatusError",
    "DownloadError",
    "FilesystemError",
    "AssetNotFoundError",
    # GitHub backend
    "GitHubClient",
    "GitHubError",
    "GitHubConnectionError",
    "GitHubRateLimitError",
    "GitHubNotFoundError",
    # Pipeline
    "ReleaseResolver",
    "AssetDownloader",
    "ProgressCallback",
    "replace_current_executable",
    "rollback",
    "cleanup_old",
    "UpdateManager",
]
