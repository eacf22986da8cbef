"""Cache for raw dataset content."""

import logging
from dataclasses import dataclass

from food_vault.domain.errors import PersistenceWriteFailure, SourceUnavailable
from food_vault.services.storage import CACHED_CSV_KEY, KeyValueStore

_logger = logging.getLogger(__name__)


@dataclass
class ContentCache:
    """Raw dataset text kept verbatim under a single store key."""

    store: KeyValueStore
    key: str = CACHED_CSV_KEY

    def get(self) -> str:
        """Return cached content or raise SourceUnavailable."""
        try:
            content = self.store.get(self.key)
        except Exception as exc:
            raise SourceUnavailable(f"Could not read cache: {exc}") from exc
        if not content:
            raise SourceUnavailable("Cache is empty")
        return content

    def set(self, content: str) -> None:
        """Store content, logging rather than raising on failure."""
        try:
            self.store.set(self.key, content)
        except Exception:
            _logger.exception("Could not cache dataset content")
            return
        _logger.info("Cached dataset content (length=%s)", len(content))

    def invalidate(self) -> None:
        """Drop the cached content."""
        try:
            self.store.remove(self.key)
        except Exception as exc:
            raise PersistenceWriteFailure(self.key, exc) from exc
