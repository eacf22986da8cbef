"""Merged catalog of dataset and custom foods."""

import asyncio
import logging
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field, replace

from food_vault.domain.foods import (
    ALL_CATEGORY,
    CUSTOM_CATEGORY,
    OTHER_CATEGORY,
    FoodRecord,
)
from food_vault.services.custom_foods import CustomFoodService
from food_vault.services.normalizer import normalize_category
from food_vault.services.sources import CatalogSource, CatalogSourceResolver

_logger = logging.getLogger(__name__)


def sort_foods(foods: Iterable[FoodRecord]) -> list[FoodRecord]:
    """Foods with a serving first, then by name ignoring case."""
    return sorted(
        foods,
        key=lambda food: (
            not food.has_serving,
            food.name.casefold(),
            food.name,
            food.id,
        ),
    )


def build_categories(foods: Iterable[FoodRecord]) -> list[str]:
    """Category facets: All, Custom, alphabetical rest, Other last."""
    found = {food.category for food in foods if food.category}
    rest = sorted(found - {ALL_CATEGORY, CUSTOM_CATEGORY, OTHER_CATEGORY})
    categories = [ALL_CATEGORY, CUSTOM_CATEGORY, *rest]
    if OTHER_CATEGORY in found:
        categories.append(OTHER_CATEGORY)
    return categories


def merge_catalog(
    custom_foods: list[FoodRecord], dataset_foods: list[FoodRecord]
) -> list[FoodRecord]:
    """Combine custom and dataset foods with unique ids, sorted."""
    merged: list[FoodRecord] = []
    seen: set[str] = set()
    for food in [*custom_foods, *dataset_foods]:
        food_id = food.id
        suffix = 1
        while food_id in seen:
            suffix += 1
            food_id = f"{food.id}_{suffix}"
        if food_id != food.id:
            _logger.warning("Duplicate food id %s renamed to %s", food.id, food_id)
        seen.add(food_id)
        merged.append(
            replace(food, id=food_id, category=normalize_category(food.category))
        )
    return sort_foods(merged)


@dataclass(frozen=True)
class CatalogView:
    """Immutable, queryable snapshot of the merged catalog."""

    foods: list[FoodRecord]
    categories: list[str]
    source: CatalogSource

    @classmethod
    def build(
        cls,
        custom_foods: list[FoodRecord],
        dataset_foods: list[FoodRecord],
        source: CatalogSource,
    ) -> "CatalogView":
        foods = merge_catalog(custom_foods, dataset_foods)
        return cls(foods=foods, categories=build_categories(foods), source=source)

    def filter_by_category(self, category: str) -> list[FoodRecord]:
        """Filter by facet; All keeps everything, Custom keeps custom foods."""
        if category == ALL_CATEGORY:
            matches = self.foods
        elif category == CUSTOM_CATEGORY:
            matches = [food for food in self.foods if food.is_custom]
        else:
            matches = [food for food in self.foods if food.category == category]
        return sort_foods(matches)

    def search(self, text: str) -> list[FoodRecord]:
        """Case-insensitive substring match on name."""
        return _search(self.foods, text)

    def query(self, category: str = ALL_CATEGORY, text: str = "") -> list[FoodRecord]:
        """Filter by category, then by search text."""
        return _search(self.filter_by_category(category), text)

    def lookup_by_id(self, food_id: str) -> FoodRecord | None:
        return next((food for food in self.foods if food.id == food_id), None)

    def category_counts(self) -> dict[str, int]:
        return dict(Counter(food.category for food in self.foods))


def _search(foods: list[FoodRecord], text: str) -> list[FoodRecord]:
    needle = text.strip().lower()
    if not needle:
        return sort_foods(foods)
    return sort_foods(food for food in foods if needle in food.name.lower())


@dataclass
class CatalogService:
    """Owns the catalog view and rebuilds it on every change."""

    resolver: CatalogSourceResolver
    custom_food_service: CustomFoodService
    _view: CatalogView | None = field(default=None, init=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False)

    async def rebuild(self) -> CatalogView:
        """Resolve the dataset, reload custom foods, and merge."""
        async with self._lock:
            resolved = await self.resolver.resolve()
            custom_foods = self.custom_food_service.list_foods()
            view = CatalogView.build(custom_foods, resolved.records, resolved.source)
            self._view = view
        _logger.info(
            "Catalog rebuilt: %s foods (%s custom, source=%s), categories=%s",
            len(view.foods),
            len(custom_foods),
            resolved.source,
            view.categories,
        )
        _logger.debug("Category distribution: %s", view.category_counts())
        return view

    async def view(self) -> CatalogView:
        """Return the current view, building it on first use."""
        if self._view is None:
            return await self.rebuild()
        return self._view

    async def refresh(self) -> CatalogView:
        """Drop the cached dataset content and rebuild from sources."""
        self.resolver.cache.invalidate()
        _logger.info("Dataset cache cleared for refresh")
        return await self.rebuild()

    async def add_custom_food(self, payload: dict[str, object]) -> FoodRecord:
        try:
            return self.custom_food_service.add_food(payload)
        finally:
            await self.rebuild()

    async def delete_custom_food(
        self, food_id: str, *, also_remove_from_diary: bool = False
    ) -> FoodRecord:
        """Delete a custom food; the view is rebuilt even if the cascade fails."""
        try:
            return self.custom_food_service.delete_food(
                food_id, also_remove_from_diary=also_remove_from_diary
            )
        finally:
            await self.rebuild()

    async def add_imported_foods(self, foods: list[FoodRecord]) -> None:
        try:
            self.custom_food_service.add_foods(foods)
        finally:
            await self.rebuild()
