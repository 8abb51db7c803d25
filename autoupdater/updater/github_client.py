"""GitHub API client for release listings.

Implements the ReleaseBackend protocol on top of the GitHub REST API
(github.com or a GitHub Enterprise host).
"""

from typing import Dict, List, Optional

import requests

from autoupdater.updater.exceptions import BackendError
from autoupdater.updater.release import Release
from autoupdater.utils.logging import get_logger

logger = get_logger("github_client")


# GitHub API constants
DEFAULT_API_HOST = "api.github.com"
USER_AGENT = "python-requests/autoupdater"

# Request timeout in seconds
REQUEST_TIMEOUT = 30


class GitHubError(BackendError):
    """Base exception for GitHub API errors."""
    pass


class GitHubConnectionError(GitHubError):
    """Raised when unable to connect to GitHub."""
    pass


class GitHubRateLimitError(GitHubError):
    """Raised when GitHub rate limit is exceeded."""
    pass


class GitHubNotFoundError(GitHubError):
    """Raised when repository is not found."""
    pass


def releases_url(owner: str, repo: str, api_host: str = DEFAULT_API_HOST) -> str:
    """Build the releases listing URL for a repository."""
    return f"https://{api_host}/repos/{owner}/{repo}/releases"


class GitHubClient:
    """Release backend for a single GitHub repository."""

    def __init__(
        self,
        owner: str,
        repo: str,
        api_host: Optional[str] = None,
        auth_token: Optional[str] = None,
        timeout: int = REQUEST_TIMEOUT,
        ca_bundle: Optional[str] = None,
    ):
        """
        Initialize GitHub client.

        Args:
            owner: Repository owner (user or organization)
            repo: Repository name
            api_host: API host, defaults to api.github.com
            auth_token: Optional token sent as "Authorization: token ..."
            timeout: Request timeout in seconds
            ca_bundle: Optional CA bundle file or directory for TLS
                verification, passed to the session instead of relying
                on process environment variables
        """
        self._owner = owner
        self._repo = repo
        self._api_host = api_host or DEFAULT_API_HOST
        self._auth_token = auth_token
        self._timeout = timeout
        self._session = requests.Session()
        self._session.headers.update({
            "Accept": "application/vnd.github+json",
            "User-Agent": USER_AGENT,
        })
        self._session.headers.update(self.auth_headers())
        if ca_bundle:
            self._session.verify = ca_bundle

    @property
    def releases_url(self) -> str:
        """Releases listing URL for the configured repository."""
        return releases_url(self._owner, self._repo, self._api_host)

    @property
    def session(self) -> requests.Session:
        """Underlying HTTP session, shared with the asset downloader."""
        return self._session

    def auth_headers(self) -> Dict[str, str]:
        """Authorization header for API and asset requests, if a token is set."""
        if self._auth_token:
            return {"Authorization": f"token {self._auth_token}"}
        return {}

    def _make_request(self, url: str, params: Optional[dict] = None):
        """
        Make a GET request to GitHub API.

        Args:
            url: Full URL to request
            params: Optional query parameters

        Returns:
            Decoded JSON response

        Raises:
            GitHubConnectionError: If unable to connect
            GitHubRateLimitError: If rate limit exceeded
            GitHubNotFoundError: If resource not found
            GitHubError: For other errors
        """
        try:
            logger.debug(f"Making request to: {url} {params or ''}")
            response = self._session.get(url, params=params, timeout=self._timeout)

            if response.status_code == 200:
                return response.json()
            elif response.status_code == 404:
                raise GitHubNotFoundError(f"Resource not found: {url}")
            elif response.status_code in (403, 429):
                # Check for rate limiting
                if (
                    response.status_code == 429
                    or "rate limit" in response.text.lower()
                ):
                    raise GitHubRateLimitError("GitHub API rate limit exceeded")
                raise GitHubError(f"Access denied: {response.text}")
            else:
                raise GitHubError(
                    f"GitHub API error {response.status_code}: {response.text}"
                )

        except requests.exceptions.Timeout as e:
            logger.error("GitHub request timed out")
            raise GitHubConnectionError(
                "Request timed out connecting to GitHub", e
            )
        except requests.exceptions.ConnectionError as e:
            logger.error(f"GitHub connection error: {e}")
            raise GitHubConnectionError(
                "Unable to connect to GitHub. Check your internet connection.", e
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"GitHub request error: {e}")
            raise GitHubError("Request failed", e)
        except ValueError as e:
            # Body was not valid JSON
            logger.error(f"Invalid GitHub response: {e}")
            raise GitHubError("Invalid JSON in GitHub response", e)

    def fetch_page(self, page: int, per_page: int) -> List[Release]:
        """
        Fetch one page of releases, newest first.

        Args:
            page: Page number, starting at 1
            per_page: Releases per page (GitHub caps this at 100)

        Returns:
            List of Release objects, empty past the last page

        Raises:
            GitHubError: If the request or response is invalid
        """
        data = self._make_request(
            self.releases_url,
            params={"per_page": per_page, "page": page},
        )

        if not isinstance(data, list):
            raise GitHubError(
                f"Unexpected releases payload of type {type(data).__name__}"
            )

        try:
            releases = [Release.from_api_response(r) for r in data]
        except (AttributeError, TypeError) as e:
            raise GitHubError("Malformed release record", e)

        logger.debug(f"Page {page}: {len(releases)} releases")
        return releases

    def close(self) -> None:
        """Close the HTTP session."""
        self._session.close()

    def __enter__(self) -> "GitHubClient":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()
