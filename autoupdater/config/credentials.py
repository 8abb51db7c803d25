"""Secure token storage for autoupdater.

Uses the system keyring (Windows Credential Manager, macOS Keychain,
Linux Secret Service) to store API tokens for private repositories.
"""

from typing import Optional

import keyring
from keyring.errors import KeyringError


class CredentialManager:
    """API token storage using system keyring."""

    SERVICE_NAME = "autoupdater"

    def _make_key(self, api_host: str, owner: str) -> str:
        """
        Create a unique key for the token.

        Args:
            api_host: API host, e.g. api.github.com
            owner: Repository owner

        Returns:
            Unique key string
        """
        return f"{api_host}:{owner}"

    def save_token(self, api_host: str, owner: str, token: str) -> bool:
        """
        Save an API token securely.

        Returns:
            True if saved successfully, False otherwise
        """
        try:
            keyring.set_password(self.SERVICE_NAME, self._make_key(api_host, owner), token)
            return True
        except KeyringError:
            return False

    def get_token(self, api_host: str, owner: str) -> Optional[str]:
        """
        Retrieve a saved token.

        Returns:
            Token string or None if not found
        """
        try:
            return keyring.get_password(self.SERVICE_NAME, self._make_key(api_host, owner))
        except KeyringError:
            return None

    def delete_token(self, api_host: str, owner: str) -> bool:
        """
        Remove a saved token.

        Returns:
            True if deleted successfully, False otherwise
        """
        try:
            keyring.delete_password(self.SERVICE_NAME, self._make_key(api_host, owner))
            return True
        except KeyringError:
            return False
