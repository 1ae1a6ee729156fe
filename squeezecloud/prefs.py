"""
Persisted plugin preferences.

Holds the live ``apiKey`` and ``playmethod`` settings. Values are read on
every resolution, so a change made through ``set`` applies to the next
track without a restart.
"""

import logging
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)

PREF_API_KEY = "apiKey"
PREF_PLAYMETHOD = "playmethod"

DEFAULT_PREFS: dict[str, Any] = {
    PREF_API_KEY: "",
    PREF_PLAYMETHOD: "stream",
}


class PreferencesError(Exception):
    """Preferences file could not be read or written."""

    pass


class Preferences:
    """
    Key/value preferences, optionally backed by a YAML file.

    Usage:
        prefs = Preferences(Path("prefs.yaml"))
        prefs.init(DEFAULT_PREFS)
        prefs.set("playmethod", "download")
    """

    def __init__(self, path: Optional[Path] = None):
        """
        Initialize preferences.

        Args:
            path: YAML file to load from and persist to (memory only if None)
        """
        self._path = path
        self._values: dict[str, Any] = self._load()

    @property
    def path(self) -> Optional[Path]:
        """Backing file, if any."""
        return self._path

    def init(self, defaults: dict[str, Any]) -> None:
        """Set defaults for keys that have no stored value."""
        changed = False
        for key, value in defaults.items():
            if key not in self._values:
                self._values[key] = value
                changed = True
        if changed:
            self._save()

    def get(self, key: str, default: Any = None) -> Any:
        """Get a preference value."""
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set and persist a preference value."""
        self._values[key] = value
        logger.debug(f"Preference {key} updated")
        self._save()

    def as_dict(self) -> dict[str, Any]:
        """Copy of all stored values."""
        return dict(self._values)

    def _load(self) -> dict[str, Any]:
        if self._path is None or not self._path.exists():
            return {}
        try:
            with open(self._path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise PreferencesError(f"Error parsing preferences: {e}")
        except IOError as e:
            raise PreferencesError(f"Error reading preferences: {e}")
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise PreferencesError(f"Preferences file must contain a mapping: {self._path}")
        return data

    def _save(self) -> None:
        if self._path is None:
            return
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._path, "w") as f:
                yaml.safe_dump(self._values, f, default_flow_style=False)
        except IOError as e:
            raise PreferencesError(f"Error writing preferences: {e}")
