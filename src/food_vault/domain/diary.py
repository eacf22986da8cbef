"""Diary domain models."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class DiaryEntry:
    """A food logged at a point in time, scaled by servings."""

    id: str
    food_id: str
    name: str
    category: str
    serving: str
    portion: str
    servings: float
    calories: float
    carbohydrates: float
    protein: float
    fats: float
    timestamp: datetime

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "foodId": self.food_id,
            "name": self.name,
            "category": self.category,
            "serving": self.serving,
            "portion": self.portion,
            "quantity": self.servings,
            "calories": self.calories,
            "carbohydrates": self.carbohydrates,
            "protein": self.protein,
            "fats": self.fats,
            "carbs": self.carbohydrates,
            "fat": self.fats,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class MacroTotals:
    """Summed macros for a day of diary entries."""

    calories: float
    carbohydrates: float
    protein: float
    fats: float
    entry_count: int
