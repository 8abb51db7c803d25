"""Updater settings management for autoupdater.

Provides UpdaterSettings dataclass and SettingsManager for persistence.
"""

import json
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional

from autoupdater.config.paths import get_settings_path
from autoupdater.updater.criteria import SelectionCriteria


@dataclass
class UpdaterSettings:
    """Update source and selection settings that persist between runs."""

    # Release source
    owner: str = ""
    repo: str = ""
    api_host: str = "api.github.com"

    # Selection
    allow_prerelease: bool = False
    branch: Optional[str] = None
    asset_name: Optional[str] = None

    # Network
    timeout: int = 30
    per_page: int = 100
    ca_bundle: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert settings to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "UpdaterSettings":
        """Create settings from dictionary, ignoring unknown keys."""
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in valid_fields}
        return cls(**filtered)

    def to_criteria(
        self,
        baseline_version: Optional[str] = None,
        required_tag: Optional[str] = None
    ) -> SelectionCriteria:
        """Build selection criteria from these settings."""
        return SelectionCriteria(
            allow_prerelease=self.allow_prerelease,
            required_branch=self.branch,
            required_tag=required_tag,
            required_asset_name=self.asset_name,
            baseline_version=baseline_version,
        )


class SettingsManager:
    """Manages updater settings persistence."""

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize settings manager.

        Args:
            config_path: Optional custom path, defaults to platform standard
        """
        self._config_path = config_path or get_settings_path()

    @property
    def config_path(self) -> Path:
        """Path to settings file."""
        return self._config_path

    def load(self) -> UpdaterSettings:
        """
        Load settings from disk.

        Returns:
            UpdaterSettings instance (defaults if file not found)
        """
        if not self._config_path.exists():
            return UpdaterSettings()

        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return UpdaterSettings.from_dict(data)
        except (json.JSONDecodeError, IOError, TypeError, AttributeError):
            # Invalid or unreadable file, use defaults
            return UpdaterSettings()

    def save(self, settings: UpdaterSettings) -> None:
        """
        Persist settings to disk.

        Args:
            settings: Settings to save
        """
        # Ensure parent directory exists
        self._config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(self._config_path, "w", encoding="utf-8") as f:
            json.dump(settings.to_dict(), f, indent=2)
