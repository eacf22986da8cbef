"""Domain models for catalog foods."""

from dataclasses import dataclass

NOT_SPECIFIED = "-"
ALL_CATEGORY = "All"
CUSTOM_CATEGORY = "Custom"
OTHER_CATEGORY = "Other"

# Logical column name -> raw cell text, as produced by the tabular parser.
RawRow = dict[str, str]


@dataclass(frozen=True)
class FoodRecord:
    """A single catalog entry with macros for its stated quantity."""

    id: str
    name: str
    category: str
    serving: str
    quantity: str
    calories: float
    carbohydrates: float
    protein: float
    fats: float
    is_custom: bool = False

    @property
    def description(self) -> str:
        return f"{self.name} - {self.category} ({self.quantity})"

    @property
    def has_serving(self) -> bool:
        return bool(self.serving) and self.serving != NOT_SPECIFIED

    def to_dict(self) -> dict[str, object]:
        """Serialize to the JSON shape kept in the key-value store."""
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "serving": self.serving,
            "quantity": self.quantity,
            "calories": self.calories,
            "carbohydrates": self.carbohydrates,
            "protein": self.protein,
            "fats": self.fats,
            "description": self.description,
            "isCustom": self.is_custom,
        }
