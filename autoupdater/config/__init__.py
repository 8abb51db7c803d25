"""Configuration module for autoupdater.

This module handles updater settings and credentials:
- SettingsManager: JSON-based settings persistence
- CredentialManager: Secure API token storage via keyring
- Paths: Application data directories
- UpdaterSettings: Settings dataclass
"""
