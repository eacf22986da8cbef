"""FastAPI application factory."""

import base64
import binascii
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date

from fastapi import FastAPI, HTTPException, Request, status

from food_vault.api.models import CustomFoodCreate, DiaryEntryCreate, FoodImportRequest
from food_vault.app_logging import configure_logging
from food_vault.containers import AppContainer
from food_vault.domain.diary import DiaryEntry
from food_vault.domain.errors import FoodNotFound, ImportFailed, PersistenceWriteFailure
from food_vault.domain.foods import ALL_CATEGORY, FoodRecord


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await app.state.container.catalog_service.rebuild()
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    def _container(request: Request) -> AppContainer:
        return request.app.state.container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/foods")
    async def list_foods(
        request: Request, category: str = ALL_CATEGORY, q: str = ""
    ) -> dict[str, object]:
        """Return catalog foods filtered by category and search text."""
        view = await _container(request).catalog_service.view()
        foods = view.query(category, q)
        return {"foods": [_food_payload(food) for food in foods], "count": len(foods)}

    @app.get("/foods/{food_id}")
    async def food_detail(food_id: str, request: Request) -> dict[str, object]:
        """Return one catalog food."""
        view = await _container(request).catalog_service.view()
        food = view.lookup_by_id(food_id)
        if food is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return _food_payload(food)

    @app.get("/categories")
    async def list_categories(request: Request) -> dict[str, object]:
        """Return the ordered category facets."""
        view = await _container(request).catalog_service.view()
        return {"categories": view.categories}

    @app.post("/foods/refresh")
    async def refresh_foods(request: Request) -> dict[str, object]:
        """Clear the dataset cache and reload the catalog."""
        try:
            view = await _container(request).catalog_service.refresh()
        except PersistenceWriteFailure as exc:
            logger.exception("Refresh failed")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to reload data: {exc}",
            ) from exc
        return {"status": "ok", "count": len(view.foods), "source": view.source}

    @app.get("/custom-foods")
    async def list_custom_foods(request: Request) -> dict[str, object]:
        """Return the user's custom foods."""
        foods = _container(request).custom_food_service.list_foods()
        return {"foods": [_food_payload(food) for food in foods]}

    @app.post("/custom-foods", status_code=status.HTTP_201_CREATED)
    async def create_custom_food(
        payload: CustomFoodCreate, request: Request
    ) -> dict[str, object]:
        """Create a custom food and rebuild the catalog."""
        try:
            food = await _container(request).catalog_service.add_custom_food(
                payload.model_dump(exclude_none=True)
            )
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except PersistenceWriteFailure as exc:
            logger.exception("Failed to save custom food")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to save food",
            ) from exc
        return _food_payload(food)

    @app.delete("/custom-foods/{food_id}")
    async def delete_custom_food(
        food_id: str, request: Request, also_remove_from_diary: bool = False
    ) -> dict[str, str]:
        """Delete a custom food and optionally today's same-named entries."""
        try:
            await _container(request).catalog_service.delete_custom_food(
                food_id, also_remove_from_diary=also_remove_from_diary
            )
        except FoodNotFound as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND) from exc
        except PersistenceWriteFailure as exc:
            logger.exception("Failed to delete custom food %s", food_id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to delete food",
            ) from exc
        return {"status": "ok"}

    @app.get("/custom-foods/{food_id}/in-diary")
    async def custom_food_in_diary(food_id: str, request: Request) -> dict[str, bool]:
        """Whether a custom food appears in today's diary by name."""
        state_container = _container(request)
        view = await state_container.catalog_service.view()
        food = view.lookup_by_id(food_id)
        if food is None or not food.is_custom:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        in_diary = state_container.custom_food_service.is_in_todays_diary(food.name)
        return {"in_diary": in_diary}

    @app.post("/custom-foods/import")
    async def import_custom_foods(
        payload: FoodImportRequest, request: Request
    ) -> dict[str, object]:
        """Import a CSV or XLSX spreadsheet as custom foods."""
        try:
            data = base64.b64decode(payload.content_base64, validate=True)
        except binascii.Error as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="content_base64 is not valid base64",
            ) from exc
        try:
            result = await _container(request).food_importer.import_file(
                payload.filename, data
            )
        except ImportFailed as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
            ) from exc
        except PersistenceWriteFailure as exc:
            logger.exception("Failed to save imported foods")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to save imported foods",
            ) from exc
        return {"count": result.count, "message": result.message}

    @app.get("/diary")
    async def list_diary(
        request: Request, day: date | None = None
    ) -> dict[str, object]:
        """Return diary entries and totals for a day."""
        diary_service = _container(request).diary_service
        entries = diary_service.list_entries(day)
        totals = diary_service.daily_totals(day)
        return {
            "entries": [_entry_payload(entry) for entry in entries],
            "totals": {
                "calories": totals.calories,
                "carbohydrates": totals.carbohydrates,
                "protein": totals.protein,
                "fats": totals.fats,
                "entry_count": totals.entry_count,
            },
        }

    @app.post("/diary", status_code=status.HTTP_201_CREATED)
    async def log_food(
        payload: DiaryEntryCreate, request: Request
    ) -> dict[str, object]:
        """Log a catalog food into today's diary."""
        state_container = _container(request)
        view = await state_container.catalog_service.view()
        food = view.lookup_by_id(payload.food_id)
        if food is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        try:
            entry = state_container.diary_service.log_food(food, payload.servings)
        except PersistenceWriteFailure as exc:
            logger.exception("Failed to log %s", food.name)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to add food to diary",
            ) from exc
        return _entry_payload(entry)

    @app.delete("/diary/{entry_id}")
    async def delete_diary_entry(
        entry_id: str, request: Request, day: date | None = None
    ) -> dict[str, str]:
        """Remove a diary entry."""
        try:
            _container(request).diary_service.delete_entry(entry_id, day)
        except FoodNotFound as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND) from exc
        except PersistenceWriteFailure as exc:
            logger.exception("Failed to delete diary entry %s", entry_id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to delete diary entry",
            ) from exc
        return {"status": "ok"}

    return app


def _food_payload(food: FoodRecord) -> dict[str, object]:
    return {**food.to_dict(), "hasServing": food.has_serving}


def _entry_payload(entry: DiaryEntry) -> dict[str, object]:
    return entry.to_dict()
