"""Daily food diary backed by the key-value store."""

import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime

from food_vault.domain.diary import DiaryEntry, MacroTotals
from food_vault.domain.errors import FoodNotFound
from food_vault.domain.foods import FoodRecord
from food_vault.services.normalizer import normalize_text, parse_number
from food_vault.services.storage import (
    DIARY_KEY_PREFIX,
    KeyValueStore,
    read_json_list,
    write_json,
)

_logger = logging.getLogger(__name__)


def diary_key(day: date) -> str:
    """Return the store key for a calendar day."""
    return f"{DIARY_KEY_PREFIX}{day.isoformat()}"


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class DiaryService:
    """Logs foods into per-day diary lists."""

    store: KeyValueStore
    clock: Callable[[], datetime] = field(default=_utc_now)

    def today(self) -> date:
        return self.clock().astimezone(UTC).date()

    def log_food(self, food: FoodRecord, servings: float = 1) -> DiaryEntry:
        """Append a scaled entry for a food to today's diary."""
        if servings < 1:
            raise ValueError("servings must be at least 1")
        now = self.clock()
        key = diary_key(now.astimezone(UTC).date())
        entries = read_json_list(self.store, key)
        entry = DiaryEntry(
            id=_entry_id(now, {str(row.get("id")) for row in entries}),
            food_id=food.id,
            name=food.name,
            category=food.category,
            serving=food.serving,
            portion=food.quantity,
            servings=servings,
            calories=_scale(food.calories, servings),
            carbohydrates=_scale(food.carbohydrates, servings),
            protein=_scale(food.protein, servings),
            fats=_scale(food.fats, servings),
            timestamp=now,
        )
        entries.append(entry.to_dict())
        write_json(self.store, key, entries)
        _logger.info("Logged %s x%s to %s", food.name, servings, key)
        return entry

    def list_entries(self, day: date | None = None) -> list[DiaryEntry]:
        """Return the entries for a day (today by default)."""
        key = diary_key(day or self.today())
        return [_parse_entry(row) for row in read_json_list(self.store, key)]

    def delete_entry(self, entry_id: str, day: date | None = None) -> None:
        """Remove one entry by id."""
        key = diary_key(day or self.today())
        entries = read_json_list(self.store, key)
        remaining = [row for row in entries if str(row.get("id")) != entry_id]
        if len(remaining) == len(entries):
            raise FoodNotFound(f"No diary entry {entry_id} under {key}")
        write_json(self.store, key, remaining)

    def remove_by_name(self, name: str, day: date | None = None) -> int:
        """Remove every entry with the given name and return how many went."""
        key = diary_key(day or self.today())
        entries = read_json_list(self.store, key)
        if not entries:
            return 0
        remaining = [row for row in entries if row.get("name") != name]
        removed = len(entries) - len(remaining)
        if removed:
            write_json(self.store, key, remaining)
            _logger.info(
                "Removed %s diary entries named %s from %s", removed, name, key
            )
        return removed

    def has_entry_named(self, name: str, day: date | None = None) -> bool:
        key = diary_key(day or self.today())
        return any(row.get("name") == name for row in read_json_list(self.store, key))

    def daily_totals(self, day: date | None = None) -> MacroTotals:
        """Sum the macros logged for a day."""
        entries = self.list_entries(day)
        return MacroTotals(
            calories=round(sum(entry.calories for entry in entries), 2),
            carbohydrates=round(sum(entry.carbohydrates for entry in entries), 2),
            protein=round(sum(entry.protein for entry in entries), 2),
            fats=round(sum(entry.fats for entry in entries), 2),
            entry_count=len(entries),
        )


def _entry_id(moment: datetime, taken: set[str]) -> str:
    base = str(int(moment.timestamp() * 1000))
    entry_id = base
    while entry_id in taken:
        entry_id = f"{base}_{secrets.token_hex(3)}"
    return entry_id


def _scale(value: float, servings: float) -> float:
    return round(value * servings, 2)


def _parse_entry(row: dict[str, object]) -> DiaryEntry:
    """Parse a stored diary row, tolerating legacy key names."""
    timestamp_raw = row.get("timestamp")
    try:
        timestamp = datetime.fromisoformat(str(timestamp_raw).replace("Z", "+00:00"))
    except ValueError:
        timestamp = datetime.fromtimestamp(0, tz=UTC)
    servings = parse_number(row.get("quantity")) or 1.0
    return DiaryEntry(
        id=str(row.get("id", "")),
        food_id=str(row.get("foodId", "")),
        name=str(row.get("name", "")),
        category=str(row.get("category", "")),
        serving=normalize_text(row.get("serving")),
        portion=normalize_text(row.get("portion")),
        servings=servings,
        calories=parse_number(row.get("calories")),
        carbohydrates=parse_number(row.get("carbohydrates", row.get("carbs"))),
        protein=parse_number(row.get("protein")),
        fats=parse_number(row.get("fats", row.get("fat"))),
        timestamp=timestamp,
    )
