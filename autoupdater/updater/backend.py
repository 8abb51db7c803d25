"""Release backend interface.

Any object with a matching fetch_page method can serve releases to the
resolver: the GitHub client, another hosting service, or a test stub.
"""

from typing import Dict, List, Protocol

from autoupdater.updater.release import Release


class ReleaseBackend(Protocol):
    """Protocol for services that list releases page by page."""

    def fetch_page(self, page: int, per_page: int) -> List[Release]:
        """
        Fetch one page of releases.

        Pages are numbered from 1. An empty list signals the end of
        pagination. Implementations raise BackendError on failure.
        """
        ...

    def auth_headers(self) -> Dict[str, str]:
        """Headers needed to download this backend's assets."""
        ...
