"""
Settings manager for persistent configuration.

Stores the stamping flags (enabled, verbose, fail-on-error) and the
backup of a version file overwritten during a build in a single JSON
file, <config_dir>/settings.json. Stored values override environment
variables.
"""

import json
import os
from pathlib import Path
from typing import Optional, Dict, Any
from loguru import logger

DEFAULT_CONFIG_DIR_NAME = '.project_version'


def _env_bool(env_key: str, default: bool) -> bool:
    value = os.environ.get(env_key, '').strip().lower()
    if value in ('true', '1', 'yes'):
        return True
    if value in ('false', '0', 'no'):
        return False
    return default


class SettingsManager:
    """Manages persistent settings stored in a JSON file."""

    def __init__(self, config_dir: str = None):
        if config_dir is None:
            config_dir = os.environ.get('PROJECT_VERSION_CONFIG_DIR') or os.path.join(os.getcwd(), DEFAULT_CONFIG_DIR_NAME)
        self.config_dir = Path(config_dir)
        self.settings_file = self.config_dir / 'settings.json'
        self._settings: Dict[str, Any] = {}
        self._load()

    def _load(self) -> None:
        """Load settings from file."""
        if self.settings_file.exists():
            try:
                with open(self.settings_file, 'r') as f:
                    self._settings = json.load(f)
                logger.debug(f"Loaded settings from {self.settings_file}")
            except (OSError, ValueError) as e:
                logger.error(f"Failed to load settings: {e}")
                self._settings = {}
        else:
            self._settings = {}

    def _save(self) -> None:
        """Save settings to file."""
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(self.settings_file, 'w') as f:
                json.dump(self._settings, f, indent=2)
            logger.debug(f"Saved settings to {self.settings_file}")
        except OSError as e:
            logger.error(f"Failed to save settings: {e}")
            raise

    def get(self, key: str, default: Any = None) -> Any:
        """Get a setting value."""
        return self._settings.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set a setting value and save."""
        self._settings[key] = value
        self._save()

    def has_key(self, key: str) -> bool:
        """Check whether a setting is stored."""
        return key in self._settings

    def get_all(self) -> Dict[str, Any]:
        """Get all settings."""
        return self._settings.copy()

    def update(self, settings: Dict[str, Any]) -> None:
        """Update multiple settings at once."""
        self._settings.update(settings)
        self._save()

    def delete(self, key: str) -> None:
        """Delete a setting."""
        if key in self._settings:
            del self._settings[key]
            self._save()

    # Stamping flags: stored value > environment variable > default
    @property
    def enabled(self) -> bool:
        """Inject the git version during builds (off by default)."""
        if self.has_key('enabled'):
            return bool(self.get('enabled'))
        return _env_bool('PROJECT_VERSION_ENABLED', False)

    @enabled.setter
    def enabled(self, value: bool) -> None:
        self.set('enabled', bool(value))

    @property
    def verbose(self) -> bool:
        """Log version injection and reversion."""
        if self.has_key('verbose'):
            return bool(self.get('verbose'))
        return _env_bool('PROJECT_VERSION_VERBOSE', True)

    @verbose.setter
    def verbose(self, value: bool) -> None:
        self.set('verbose', bool(value))

    @property
    def fail_on_error(self) -> bool:
        """Fail the build if the version cannot be read from git."""
        if self.has_key('fail_on_error'):
            return bool(self.get('fail_on_error'))
        return _env_bool('PROJECT_VERSION_FAIL_ON_ERROR', False)

    @fail_on_error.setter
    def fail_on_error(self, value: bool) -> None:
        self.set('fail_on_error', bool(value))


# Global instance
_settings_manager: Optional[SettingsManager] = None


def get_settings_manager(config_dir: str = None) -> SettingsManager:
    """Get the global settings manager instance.

    If config_dir is provided and different from current instance,
    creates a new instance with the new config_dir.
    """
    global _settings_manager
    if _settings_manager is None:
        _settings_manager = SettingsManager(config_dir)
    elif config_dir is not None and str(_settings_manager.config_dir) != str(Path(config_dir)):
        _settings_manager = SettingsManager(config_dir)
    return _settings_manager


def reset_settings_manager() -> None:
    """Reset the global settings manager. Used for testing."""
    global _settings_manager
    _settings_manager = None
