"""Import externally obtained spreadsheets as custom foods."""

import csv
import io
import logging
import math
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from openpyxl import load_workbook

from food_vault.domain.errors import ImportFailed
from food_vault.domain.foods import FoodRecord
from food_vault.services.normalizer import (
    normalize_category,
    normalize_text,
    parse_number,
)

if TYPE_CHECKING:
    from food_vault.services.catalog import CatalogService

_logger = logging.getLogger(__name__)

IMPORT_ALIASES: dict[str, tuple[str, ...]] = {
    "name": ("name", "food_name"),
    "category": ("category",),
    "calories": ("calories",),
    "protein": ("protein",),
    "carbohydrates": ("carbs", "carbohydrates"),
    "fats": ("fat",),
    "serving_size": ("servingsize", "serving_size"),
}

DISH_NAME_COLUMN = "dish name"
DEFAULT_IMPORT_QUANTITY = "100g"

_DISH_KEYWORDS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("soup", "stock"), "Soup"),
    (("sandwich",), "Snacks"),
    (("tea", "coffee", "drink", "lassi"), "Beverages"),
    (("paratha", "chapati", "porridge"), "Breakfast"),
)

_LEADING_INT = re.compile(r"\s*[+-]?\d+")


@dataclass(frozen=True)
class ImportResult:
    """Outcome of an import."""

    count: int
    message: str


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def read_table(filename: str, data: bytes) -> list[dict[str, object]]:
    """Read the first sheet of an .xlsx file, or a UTF-8 CSV, into dicts."""
    if filename.lower().endswith((".xlsx", ".xlsm")):
        try:
            workbook = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
        except Exception as exc:
            raise ImportFailed(f"Could not open workbook {filename}: {exc}") from exc
        try:
            rows = list(workbook.worksheets[0].iter_rows(values_only=True))
        finally:
            workbook.close()
        if not rows:
            return []
        headers = ["" if cell is None else str(cell).strip() for cell in rows[0]]
        return [
            {
                header: value
                for header, value in zip(headers, row, strict=False)
                if header and value is not None
            }
            for row in rows[1:]
            if any(value is not None for value in row)
        ]

    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ImportFailed(f"{filename} is not UTF-8 text") from exc
    reader = csv.DictReader(io.StringIO(text))
    return [
        {key.strip(): value for key, value in row.items() if key}
        for row in reader
        if any(
            value.strip() for value in row.values() if isinstance(value, str)
        )
    ]


def parse_whole_number(raw: object) -> float:
    """Parse the leading integer of a value; negatives and junk become 0."""
    if raw is None:
        return 0.0
    if isinstance(raw, int | float) and not isinstance(raw, bool):
        return float(max(int(raw), 0))
    match = _LEADING_INT.match(str(raw))
    if not match:
        return 0.0
    return float(max(int(match.group()), 0))


def _round_half_up(value: float) -> float:
    return float(math.floor(value + 0.5))


def categorize_dish(name: str) -> str:
    """Guess a category from keywords in a dish name."""
    lowered = name.lower()
    for keywords, category in _DISH_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return category
    return "Lunch"


def transform_rows(
    rows: list[dict[str, object]], created_at: datetime
) -> list[FoodRecord]:
    """Convert imported rows to custom food records."""
    if not rows:
        return []
    created_ms = int(created_at.timestamp() * 1000)
    headers = {key.lower() for row in rows for key in row}
    if DISH_NAME_COLUMN in headers:
        return [
            _dish_row(_lowered(row), f"imported_{created_ms}_{index}")
            for index, row in enumerate(rows)
        ]
    return [
        _generic_row(_lowered(row), f"imported_{created_ms}_{index}")
        for index, row in enumerate(rows)
    ]


def _lowered(row: dict[str, object]) -> dict[str, object]:
    return {str(key).strip().lower(): value for key, value in row.items()}


def _first(row: dict[str, object], aliases: tuple[str, ...]) -> object:
    for alias in aliases:
        value = row.get(alias)
        if value not in (None, ""):
            return value
    return None


def _generic_row(row: dict[str, object], food_id: str) -> FoodRecord:
    name = str(_first(row, IMPORT_ALIASES["name"]) or "").strip() or "Unknown Food"
    serving_size = _first(row, IMPORT_ALIASES["serving_size"])
    return FoodRecord(
        id=food_id,
        name=name,
        category=normalize_category(_first(row, IMPORT_ALIASES["category"])),
        serving=normalize_text(None),
        quantity=normalize_text(serving_size or DEFAULT_IMPORT_QUANTITY),
        calories=parse_whole_number(_first(row, IMPORT_ALIASES["calories"])),
        carbohydrates=parse_whole_number(_first(row, IMPORT_ALIASES["carbohydrates"])),
        protein=parse_whole_number(_first(row, IMPORT_ALIASES["protein"])),
        fats=parse_whole_number(_first(row, IMPORT_ALIASES["fats"])),
        is_custom=True,
    )


def _dish_row(row: dict[str, object], food_id: str) -> FoodRecord:
    name = str(row.get(DISH_NAME_COLUMN) or "").strip() or "Unknown Food"
    return FoodRecord(
        id=food_id,
        name=name,
        category=categorize_dish(name),
        serving=normalize_text(None),
        quantity=DEFAULT_IMPORT_QUANTITY,
        calories=_round_half_up(parse_number(row.get("calories (kcal)"))),
        carbohydrates=_round_half_up(parse_number(row.get("carbohydrates (g)"))),
        protein=_round_half_up(parse_number(row.get("protein (g)"))),
        fats=_round_half_up(parse_number(row.get("fats (g)"))),
        is_custom=True,
    )


@dataclass
class FoodImporter:
    """Reads uploaded spreadsheets and adds their rows to the catalog."""

    catalog_service: "CatalogService"
    clock: Callable[[], datetime] = field(default=_utc_now)

    async def import_file(self, filename: str, data: bytes) -> ImportResult:
        """Import a spreadsheet and rebuild the catalog."""
        rows = read_table(filename, data)
        foods = transform_rows(rows, self.clock())
        if not foods:
            return ImportResult(count=0, message=f"No foods found in {filename}")
        await self.catalog_service.add_imported_foods(foods)
        _logger.info("Imported %s foods from %s", len(foods), filename)
        return ImportResult(
            count=len(foods),
            message=f"Successfully imported {len(foods)} food items",
        )
