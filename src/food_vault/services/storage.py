"""Key-value persistence abstractions."""

import json
import logging
from dataclasses import dataclass, field
from typing import Protocol

from food_vault.domain.errors import PersistenceWriteFailure

_logger = logging.getLogger(__name__)

CACHED_CSV_KEY = "cached_csv_content"
CUSTOM_FOODS_KEY = "customFoods"
USER_DATA_KEY = "userData"
DIARY_KEY_PREFIX = "foodEntries_"


class KeyValueStore(Protocol):
    """String-keyed store of string values."""

    def get(self, key: str) -> str | None:
        """Return the stored value, if present."""

    def set(self, key: str, value: str) -> None:
        """Store a value under a key."""

    def remove(self, key: str) -> None:
        """Remove a key if present."""


@dataclass
class InMemoryKeyValueStore(KeyValueStore):
    """Process-local key-value store."""

    values: dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value

    def remove(self, key: str) -> None:
        self.values.pop(key, None)


def read_json_list(store: KeyValueStore, key: str) -> list[dict[str, object]]:
    """Read a JSON array of objects, treating bad data as empty."""
    try:
        raw = store.get(key)
    except Exception:
        _logger.exception("Failed to read %s", key)
        return []
    if not raw:
        return []
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError:
        _logger.warning("Ignoring corrupt JSON stored under %s", key)
        return []
    if not isinstance(payload, list):
        _logger.warning("Expected a JSON array under %s, got %s", key, type(payload))
        return []
    return [item for item in payload if isinstance(item, dict)]


def write_json(store: KeyValueStore, key: str, payload: object) -> None:
    """Serialize and store a payload, wrapping store errors."""
    try:
        store.set(key, json.dumps(payload))
    except Exception as exc:
        raise PersistenceWriteFailure(key, exc) from exc
