"""User-authored foods kept apart from the bundled dataset."""

import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime

from food_vault.domain.errors import FoodNotFound, PersistenceWriteFailure
from food_vault.domain.foods import CUSTOM_CATEGORY, FoodRecord
from food_vault.services.diary import DiaryService
from food_vault.services.normalizer import food_from_dict
from food_vault.services.storage import (
    CUSTOM_FOODS_KEY,
    KeyValueStore,
    read_json_list,
    write_json,
)

_logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def timestamp_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


@dataclass
class CustomFoodService:
    """CRUD over the custom-foods list stored under one key."""

    store: KeyValueStore
    diary_service: DiaryService
    clock: Callable[[], datetime] = field(default=_utc_now)

    def list_foods(self) -> list[FoodRecord]:
        """Return every custom food, backfilling missing ids."""
        rows = read_json_list(self.store, CUSTOM_FOODS_KEY)
        created_ms = timestamp_ms(self.clock())
        backfilled = False
        for index, row in enumerate(rows):
            if not row.get("id"):
                row["id"] = f"custom_{index}_{created_ms}"
                backfilled = True
        if backfilled:
            try:
                write_json(self.store, CUSTOM_FOODS_KEY, rows)
            except PersistenceWriteFailure:
                _logger.exception("Could not persist backfilled custom food ids")
        return [food_from_dict(row, is_custom=True) for row in rows]

    def add_food(self, payload: dict[str, object]) -> FoodRecord:
        """Create a custom food in the Custom category."""
        rows = read_json_list(self.store, CUSTOM_FOODS_KEY)
        food_id = self._new_id({str(row.get("id")) for row in rows})
        food = food_from_dict(
            {**payload, "id": food_id, "category": CUSTOM_CATEGORY}, is_custom=True
        )
        if not food.name:
            raise ValueError("Custom foods need a name")
        rows.append(food.to_dict())
        write_json(self.store, CUSTOM_FOODS_KEY, rows)
        _logger.info("Added custom food %s (%s)", food.name, food.id)
        return food

    def add_foods(self, foods: list[FoodRecord]) -> None:
        """Append pre-built records, keeping their ids and categories."""
        rows = read_json_list(self.store, CUSTOM_FOODS_KEY)
        rows.extend(replace(food, is_custom=True).to_dict() for food in foods)
        write_json(self.store, CUSTOM_FOODS_KEY, rows)
        _logger.info("Appended %s custom foods", len(foods))

    def delete_food(
        self, food_id: str, *, also_remove_from_diary: bool = False
    ) -> FoodRecord:
        """Delete a custom food, optionally clearing same-named diary entries.

        The diary cascade matches on name, not id, and only touches
        today's log.
        """
        rows = read_json_list(self.store, CUSTOM_FOODS_KEY)
        target = next((row for row in rows if str(row.get("id")) == food_id), None)
        if target is None:
            raise FoodNotFound(f"No custom food with id {food_id}")
        remaining = [row for row in rows if str(row.get("id")) != food_id]
        write_json(self.store, CUSTOM_FOODS_KEY, remaining)
        deleted = food_from_dict(target, is_custom=True)
        _logger.info("Deleted custom food %s (%s)", deleted.name, food_id)
        if also_remove_from_diary:
            self.diary_service.remove_by_name(deleted.name)
        return deleted

    def is_in_todays_diary(self, name: str) -> bool:
        """Whether today's diary has an entry with this name."""
        return self.diary_service.has_entry_named(name)

    def _new_id(self, taken: set[str]) -> str:
        food_id = str(timestamp_ms(self.clock()))
        while food_id in taken:
            food_id = f"{timestamp_ms(self.clock())}_{secrets.token_hex(3)}"
        return food_id
