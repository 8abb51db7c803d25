"""Release resolution.

Fetches every release from a backend, keeps those matching the caller's
criteria and picks the newest one according to a tag comparator.
"""

from functools import cmp_to_key
from typing import List, Optional

from autoupdater.updater.backend import ReleaseBackend
from autoupdater.updater.criteria import SelectionCriteria
from autoupdater.updater.exceptions import NoMatchingReleaseError
from autoupdater.updater.release import Release
from autoupdater.updater.version import Comparator, compare_versions
from autoupdater.utils.logging import get_logger

logger = get_logger("resolver")

# Largest page size GitHub accepts
DEFAULT_PER_PAGE = 100


class ReleaseResolver:
    """Selects releases from a backend.

    The resolver keeps no state between calls; every operation fetches
    the full release list again.
    """

    def __init__(self, backend: ReleaseBackend, per_page: int = DEFAULT_PER_PAGE):
        """
        Initialize the resolver.

        Args:
            backend: Source of release pages
            per_page: Page size requested from the backend
        """
        if per_page < 1:
            raise ValueError(f"per_page must be positive, got {per_page}")
        self._backend = backend
        self._per_page = per_page

    @property
    def backend(self) -> ReleaseBackend:
        return self._backend

    def fetch_all(self) -> List[Release]:
        """
        Fetch every release, page by page, until an empty page.

        Returns:
            All releases in request order

        Raises:
            BackendError: If any page request fails. Nothing is returned
                in that case, pages fetched so far are discarded.
        """
        releases: List[Release] = []
        page = 1
        while True:
            batch = self._backend.fetch_page(page, self._per_page)
            if not batch:
                break
            releases.extend(batch)
            page += 1

        logger.info(f"Fetched {len(releases)} releases in {page} requests")
        return releases

    def list_matching(self, criteria: SelectionCriteria) -> List[Release]:
        """Fetch all releases and keep those matching criteria, in fetch order."""
        return criteria.filter(self.fetch_all())

    @staticmethod
    def sort_releases(
        releases: List[Release],
        comparator: Optional[Comparator] = None
    ) -> List[Release]:
        """
        Sort releases ascending by tag.

        The sort is stable: releases whose tags compare equal (including
        tags that cannot be parsed) keep their fetch order.
        """
        compare = comparator or compare_versions
        return sorted(
            releases,
            key=cmp_to_key(lambda a, b: compare(a.tag, b.tag)),
        )

    def resolve(
        self,
        criteria: SelectionCriteria,
        comparator: Optional[Comparator] = None
    ) -> Release:
        """
        Find the newest release matching criteria.

        Args:
            criteria: Release selection criteria
            comparator: Tag comparator, defaults to compare_versions

        Returns:
            The last release after an ascending sort. Among releases whose
            tags compare equal to that one, the earliest fetched is returned.

        Raises:
            BackendError: If fetching fails
            NoMatchingReleaseError: If no release matches
        """
        compare = comparator or compare_versions
        matching = self.list_matching(criteria)
        if not matching:
            logger.info(f"No release matches criteria: {criteria}")
            raise NoMatchingReleaseError(criteria)

        ordered = self.sort_releases(matching, compare)
        latest = ordered[-1]
        # Step back over the trailing run of equal tags; the sort is stable
        # so its first element is the earliest fetched
        for release in reversed(ordered[:-1]):
            if compare(release.tag, latest.tag) != 0:
                break
            latest = release

        logger.info(
            f"Resolved release {latest.tag} from {len(matching)} candidates"
        )
        return latest

    def get_if_newer(
        self,
        criteria: SelectionCriteria,
        comparator: Optional[Comparator] = None
    ) -> Optional[Release]:
        """
        Get the newest matching release if it is newer than the baseline.

        Without a baseline version in criteria, the resolved release is
        always returned.

        Returns:
            The release, or None if it is not strictly newer

        Raises:
            BackendError: If fetching fails
            NoMatchingReleaseError: If no release matches
        """
        compare = comparator or compare_versions
        latest = self.resolve(criteria, compare)

        baseline = criteria.baseline_version
        if baseline is None:
            return latest

        if compare(latest.tag, baseline) > 0:
            logger.info(f"Release {latest.tag} is newer than {baseline}")
            return latest

        logger.info(f"Current version {baseline} is up to date (latest {latest.tag})")
        return None
