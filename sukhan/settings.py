"""
Persisted learner preferences.
"""

import logging
from typing import Any, Dict

from pydantic import ValidationError

from .constants import SETTINGS_KEY
from .db.store import PersistentStore
from .exceptions import StorageError
from .models import PronunciationDisplay, UserSettings

logger = logging.getLogger(__name__)


class SettingsStore:
    def __init__(self, store: PersistentStore, key: str = SETTINGS_KEY):
        self.store = store
        self.key = key

    def _load_raw(self) -> Dict[str, Any]:
        try:
            raw = self.store.get(self.key)
        except StorageError as e:
            logger.warning(f"Could not read settings, using defaults: {e}")
            return {}
        return raw if isinstance(raw, dict) else {}

    def get_settings(self) -> UserSettings:
        """Stored settings merged over the defaults."""
        try:
            return UserSettings.model_validate(self._load_raw())
        except ValidationError as e:
            logger.warning(f"Stored settings are malformed, using defaults: {e}")
            return UserSettings()

    def save_settings(self, **changes: Any) -> UserSettings:
        """
        Merge `changes` (field names) into the current settings and persist.

        Raises:
            ValidationError: If a changed value is invalid.
        """
        merged = self.get_settings().model_dump(by_alias=False)
        merged.update(changes)
        settings = UserSettings.model_validate(merged)
        self.store.set(self.key, settings.model_dump(mode="json", by_alias=True))
        return settings

    def get_pronunciation_display(self) -> PronunciationDisplay:
        return self.get_settings().pronunciation_display

    def set_pronunciation_display(self, value: PronunciationDisplay) -> None:
        self.save_settings(pronunciation_display=value)
