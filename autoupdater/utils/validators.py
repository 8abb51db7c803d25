"""Input validators for autoupdater.

Provides validation functions for user inputs like repository names,
API hosts and numeric limits.
"""

import re
from typing import Optional, Tuple


# GitHub owner: alphanumerics and single hyphens, max 39 chars
OWNER_PATTERN = re.compile(r'^(?!-)[A-Za-z0-9-]{1,39}(?<!-)$')

# Repository name: alphanumerics, '.', '_' and '-'
REPO_PATTERN = re.compile(r'^[A-Za-z0-9._-]{1,100}$')

# Hostname pattern (simplified), optional port
HOSTNAME_PATTERN = re.compile(
    r'^(?=.{1,253}(?::\d+)?$)(?!-)[A-Za-z0-9-]{1,63}(?<!-)(\.[A-Za-z0-9-]{1,63})*(?::\d{1,5})?$'
)


def validate_owner(owner: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a repository owner name.

    Args:
        owner: Owner string to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not owner or not owner.strip():
        return False, "Repository owner is required"

    owner = owner.strip()

    if OWNER_PATTERN.match(owner):
        return True, None

    return False, f"Invalid repository owner: {owner}"


def validate_repo(repo: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a repository name.

    Args:
        repo: Repository name to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not repo or not repo.strip():
        return False, "Repository name is required"

    repo = repo.strip()

    if repo in (".", "..") or not REPO_PATTERN.match(repo):
        return False, f"Invalid repository name: {repo}"

    return True, None


def validate_api_host(host: str) -> Tuple[bool, Optional[str]]:
    """
    Validate an API host such as api.github.com or ghe.example.com/api/v3.

    Args:
        host: Host string to validate, with an optional path

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not host or not host.strip():
        return False, "API host is required"

    host = host.strip()
    if "://" in host:
        return False, f"API host must not include a scheme: {host}"

    hostname = host.split("/", 1)[0]
    if HOSTNAME_PATTERN.match(hostname):
        return True, None

    return False, f"Invalid API host: {host}"


def validate_per_page(per_page: int) -> Tuple[bool, Optional[str]]:
    """
    Validate a release page size.

    Args:
        per_page: Releases requested per page

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(per_page, int):
        try:
            per_page = int(per_page)
        except (ValueError, TypeError):
            return False, "Page size must be a number"

    if per_page < 1 or per_page > 100:
        return False, f"Page size must be between 1 and 100, got {per_page}"

    return True, None


def validate_timeout(timeout: int) -> Tuple[bool, Optional[str]]:
    """
    Validate a timeout value in seconds.

    Args:
        timeout: Timeout in seconds

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(timeout, int):
        try:
            timeout = int(timeout)
        except (ValueError, TypeError):
            return False, "Timeout must be a number"

    if timeout < 5 or timeout > 300:
        return False, f"Timeout must be between 5 and 300 seconds, got {timeout}"

    return True, None
