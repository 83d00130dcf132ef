"""
Per-user language preference records kept by the API.

Records live in memory for the lifetime of the process, keyed by the
session's user id.
"""

from datetime import datetime
from typing import Dict, Optional

from simplymedi.localization.catalog import SUPPORTED_LANGUAGES, is_rtl
from simplymedi.models.schemas import (
    TextDirection,
    UserLanguagePreferences,
    UserLanguagePreferencesUpdate,
)
from simplymedi.utils.logger import get_logger

logger = get_logger("user_preferences")

LANGUAGE_FIELDS = ("primary_language", "interface_language", "report_language", "chat_language")


class UserPreferenceStore:
    """In-memory store of UserLanguagePreferences."""

    def __init__(self):
        self._records: Dict[str, UserLanguagePreferences] = {}

    def get(self, user_id: str) -> Optional[UserLanguagePreferences]:
        return self._records.get(user_id)

    def update(self, user_id: str, changes: UserLanguagePreferencesUpdate) -> UserLanguagePreferences:
        """
        Apply the fields set in `changes` to a user's record, creating it
        with defaults first if needed.

        The text direction follows the interface language unless the
        update sets it explicitly.

        Raises:
            ValueError: A language field names an unsupported language
        """
        update = changes.model_dump(exclude_unset=True, exclude_none=True)

        for field in LANGUAGE_FIELDS:
            language = update.get(field)
            if language is not None and language not in SUPPORTED_LANGUAGES:
                raise ValueError(f"Unsupported language for {field}: {language}")

        for language in update.get("secondary_languages", []):
            if language not in SUPPORTED_LANGUAGES:
                raise ValueError(f"Unsupported secondary language: {language}")

        if "interface_language" in update and "text_direction" not in update:
            update["text_direction"] = (
                TextDirection.RTL if is_rtl(update["interface_language"]) else TextDirection.LTR
            )

        current = self._records.get(user_id) or UserLanguagePreferences()
        record = current.model_copy(update={**update, "updated_at": datetime.utcnow()})
        record = UserLanguagePreferences.model_validate(record.model_dump())
        self._records[user_id] = record

        logger.info("Language preferences updated", fields=sorted(update))
        return record


# Module-level singleton
_store_instance: Optional[UserPreferenceStore] = None


def get_user_preference_store() -> UserPreferenceStore:
    """Get or create singleton preference store instance."""
    global _store_instance
    if _store_instance is None:
        _store_instance = UserPreferenceStore()
    return _store_instance
