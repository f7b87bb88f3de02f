"""Persistence of per-extension view settings."""

import json
import logging
import threading
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from marrow.models import AllSettings, ViewSettings

logger = logging.getLogger(__name__)

TOC_WIDTH = 200.0


class SettingsStore:
    """Thread-safe store for the settings shared by every open view.

    Settings are keyed by file extension and saved as JSON. A missing or
    unreadable file yields the defaults; failed writes are logged and
    otherwise ignored so they never interrupt viewing.
    """

    def __init__(self, path: Path | str):
        """Initialize settings store.

        Args:
            path: Location of the settings JSON file
        """
        self.path = Path(path)
        self._lock = threading.Lock()
        self._settings = self._load()

    def _load(self) -> AllSettings:
        try:
            return AllSettings.model_validate_json(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return AllSettings()
        except (OSError, UnicodeDecodeError, ValidationError) as e:
            logger.warning("Ignoring unreadable settings file %s: %s", self.path, e)
            return AllSettings()

    def get(self, extension: str) -> ViewSettings:
        """Get a copy of the settings for a file extension."""
        with self._lock:
            return self._settings.get_for_extension(extension).model_copy()

    def set(self, extension: str, settings: ViewSettings) -> None:
        """Store settings for a file extension and save them to disk."""
        with self._lock:
            self._settings.set_for_extension(extension, settings)
            self._save()

    def snapshot(self) -> AllSettings:
        """Copy of everything currently stored."""
        with self._lock:
            return self._settings.model_copy(deep=True)

    def _save(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(self._settings.model_dump(), f, indent=2)
        except OSError as e:
            logger.warning("Could not save settings to %s: %s", self.path, e)


def window_size(settings: ViewSettings) -> tuple[float, float]:
    """Window size for a view, widened to make room for a visible TOC."""
    width = settings.window_width + (TOC_WIDTH if settings.toc_visible else 0.0)
    return width, settings.window_height


_store: Optional[SettingsStore] = None


def get_settings_store(path: Optional[Path | str] = None) -> SettingsStore:
    """Get or create the process-wide settings store.

    Args:
        path: Settings file location (defaults to the configured path)

    Returns:
        SettingsStore: The shared store
    """
    global _store
    if _store is None:
        if path is None:
            from marrow.config import get_config

            path = get_config().resolved_settings_path()
        _store = SettingsStore(path)
    return _store
