"""
Durable client-side storage for SimplyMedi.

A small string key/value store with the same contract as browser
localStorage. The file-backed store survives process restarts; the
in-memory store is used for tests and throwaway sessions.
"""

import json
from pathlib import Path
from typing import Dict, Optional, Union

from simplymedi.config import settings
from simplymedi.utils.logger import get_logger

logger = get_logger("storage")


# Storage keys
PREFERRED_LANGUAGE_KEY = "preferredLanguage"
SELECTED_LANGUAGE_KEY = "selectedLanguage"
LANGUAGE_PREFERENCES_KEY = "languagePreferences"
ACCESS_TOKEN_KEY = "accessToken"
REFRESH_TOKEN_KEY = "refreshToken"


class MemoryStorage:
    """In-process key/value storage."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = str(value)

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def clear(self) -> None:
        self._items.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._items

    def __len__(self) -> int:
        return len(self._items)


class JsonFileStorage(MemoryStorage):
    """
    Key/value storage persisted to a JSON file.

    Every mutation rewrites the file. A missing file starts empty; a
    malformed or unreadable file is logged and treated as empty so a
    corrupted store never prevents the client from starting.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path is not None else settings.storage_file
        super().__init__(self._load())

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Storage file unreadable, starting empty", path=str(self.path), error=str(e))
            return {}

        if not isinstance(data, dict):
            logger.warning("Storage file is not an object, starting empty", path=str(self.path))
            return {}

        return {str(k): str(v) for k, v in data.items()}

    def _flush(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                json.dumps(self._items, ensure_ascii=False, indent=2),
                encoding="utf-8"
            )
        except OSError as e:
            logger.error("Failed to persist storage", path=str(self.path), error=str(e))

    def set_item(self, key: str, value: str) -> None:
        super().set_item(key, value)
        self._flush()

    def remove_item(self, key: str) -> None:
        super().remove_item(key)
        self._flush()

    def clear(self) -> None:
        super().clear()
        self._flush()
