"""Field normalization from raw cells to typed food records."""

import math
import re
from collections.abc import Mapping

from food_vault.domain.foods import NOT_SPECIFIED, OTHER_CATEGORY, FoodRecord, RawRow

CATEGORY_SYNONYMS: dict[str, str] = {
    "beverage": "Beverages",
    "beverages": "Beverages",
    "drink": "Beverages",
    "drinks": "Beverages",
    "snack": "Snacks",
    "snacks": "Snacks",
    "vegetable": "Vegetables",
    "vegetables": "Vegetables",
    "veggie": "Vegetables",
    "veggies": "Vegetables",
    "grain": "Grains",
    "grains": "Grains",
    "cereal": "Grains",
    "cereals": "Grains",
    "protein": "Protein",
    "proteins": "Protein",
    "meat": "Protein",
    "meats": "Protein",
    "dairy": "Dairy",
    "milk": "Dairy",
    "fruit": "Fruits",
    "fruits": "Fruits",
    "dessert": "Desserts",
    "desserts": "Desserts",
    "sweet": "Desserts",
    "sweets": "Desserts",
}

CANONICAL_CATEGORIES = frozenset(CATEGORY_SYNONYMS.values())

_NON_NUMERIC = re.compile(r"[^0-9.]")
_LEADING_DECIMAL = re.compile(r"\d*\.?\d*")


def parse_number(raw: object) -> float:
    """Coerce a raw cell into a non-negative float, defaulting to 0."""
    if raw is None or isinstance(raw, bool):
        return 0.0
    if isinstance(raw, int | float):
        value = float(raw)
        return value if math.isfinite(value) and value >= 0 else 0.0
    cleaned = _NON_NUMERIC.sub("", str(raw))
    prefix = _LEADING_DECIMAL.match(cleaned).group()
    try:
        value = float(prefix)
    except ValueError:
        return 0.0
    if not math.isfinite(value):
        return 0.0
    return value


def normalize_category(raw: object) -> str:
    """Return the canonical label for a raw category string."""
    text = "" if raw is None else str(raw).strip()
    canonical = CATEGORY_SYNONYMS.get(text.lower())
    if canonical:
        return canonical
    if text and text != NOT_SPECIFIED:
        return text
    return OTHER_CATEGORY


def normalize_text(raw: object) -> str:
    """Trim a descriptor, using the '-' sentinel when empty."""
    text = "" if raw is None else str(raw).strip()
    return text or NOT_SPECIFIED


def normalize_row(
    row: RawRow, record_id: str, *, is_custom: bool = False
) -> FoodRecord:
    """Map one parsed row to a food record. Never raises."""
    return FoodRecord(
        id=record_id,
        name=str(row.get("name", "")).strip(),
        category=normalize_category(row.get("category")),
        serving=normalize_text(row.get("serving")),
        quantity=normalize_text(row.get("quantity")),
        calories=parse_number(row.get("calories")),
        carbohydrates=parse_number(row.get("carbohydrates")),
        protein=parse_number(row.get("protein")),
        fats=parse_number(row.get("fats")),
        is_custom=is_custom,
    )


def normalize_rows(rows: list[RawRow]) -> list[FoodRecord]:
    """Normalize dataset rows, numbering ids by row position."""
    return [normalize_row(row, str(index)) for index, row in enumerate(rows, start=1)]


def food_from_dict(payload: Mapping[str, object], *, is_custom: bool) -> FoodRecord:
    """Build a record from stored JSON, accepting legacy key names."""

    def pick(*keys: str) -> object:
        for key in keys:
            value = payload.get(key)
            if value is not None and value != "":
                return value
        return None

    return FoodRecord(
        id=str(payload.get("id") or ""),
        name=str(pick("name") or "").strip(),
        category=normalize_category(pick("category")),
        serving=normalize_text(pick("serving")),
        quantity=normalize_text(pick("quantity", "servingSize")),
        calories=parse_number(pick("calories")),
        carbohydrates=parse_number(pick("carbohydrates", "carbs")),
        protein=parse_number(pick("protein")),
        fats=parse_number(pick("fats", "fat")),
        is_custom=is_custom,
    )
