"""Tabular record parsing for nutrition datasets."""

import csv
import io
import logging

from food_vault.domain.errors import MissingRequiredColumn
from food_vault.domain.foods import NOT_SPECIFIED, RawRow

_logger = logging.getLogger(__name__)

COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "name": ("Dish Name", "Name"),
    "category": ("Category",),
    "serving": ("Serving",),
    "quantity": ("Quantity",),
    "calories": ("Calories (kcal)", "Calories"),
    "carbohydrates": ("Carbohydrates (g)", "Carbohydrates"),
    "protein": ("Protein (g)", "Protein"),
    "fats": ("Fats (g)", "Fats"),
}


def resolve_columns(headers: list[str]) -> dict[str, int]:
    """Map each logical column to the index of its first matching header.

    Logical columns with no matching header are left out. Raises
    MissingRequiredColumn when the name column cannot be found.
    """
    cleaned = [header.strip().lstrip("\ufeff").strip().lower() for header in headers]
    indices: dict[str, int] = {}
    for column, aliases in COLUMN_ALIASES.items():
        wanted = {alias.lower() for alias in aliases}
        for index, header in enumerate(cleaned):
            if header in wanted:
                indices[column] = index
                break
    if "name" not in indices:
        raise MissingRequiredColumn(headers)
    return indices


def parse_rows(content: str) -> list[RawRow]:
    """Parse delimited text into raw rows keyed by logical column."""
    rows = [row for row in csv.reader(io.StringIO(content)) if row]
    if not rows:
        raise MissingRequiredColumn([])

    indices = resolve_columns(rows[0])
    records: list[RawRow] = []
    for row in rows[1:]:
        name_index = indices["name"]
        name = row[name_index].strip() if name_index < len(row) else ""
        if not name:
            continue
        record: RawRow = {}
        for column, index in indices.items():
            cell = row[index].strip() if index < len(row) else ""
            record[column] = cell or NOT_SPECIFIED
        records.append(record)

    _logger.debug(
        "Parsed %s rows from %s data lines (columns=%s)",
        len(records),
        len(rows) - 1,
        sorted(indices),
    )
    return records
