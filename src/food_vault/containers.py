"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

from supabase import create_client

from food_vault.adapters.asset_loader import DEFAULT_ASSET_PATH, FileAssetLoader
from food_vault.adapters.dataset_client import HttpxDatasetClient
from food_vault.adapters.supabase_kv_store import SupabaseKeyValueStore
from food_vault.config import Settings, parse_candidate_paths
from food_vault.services.cache import ContentCache
from food_vault.services.catalog import CatalogService
from food_vault.services.custom_foods import CustomFoodService
from food_vault.services.diary import DiaryService
from food_vault.services.importer import FoodImporter
from food_vault.services.sources import CatalogSourceResolver
from food_vault.services.storage import InMemoryKeyValueStore, KeyValueStore


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    store: KeyValueStore
    diary_service: DiaryService
    custom_food_service: CustomFoodService
    catalog_service: CatalogService
    food_importer: FoodImporter
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    store: KeyValueStore
    if resolved_settings.uses_supabase:
        supabase_client = create_client(
            resolved_settings.supabase_url, resolved_settings.supabase_service_key
        )
        store = SupabaseKeyValueStore(supabase_client, table=resolved_settings.kv_table)
    else:
        store = InMemoryKeyValueStore()

    asset_path = (
        Path(resolved_settings.dataset_asset_path)
        if resolved_settings.dataset_asset_path
        else DEFAULT_ASSET_PATH
    )
    dataset_client = None
    if resolved_settings.dataset_base_url:
        dataset_client = HttpxDatasetClient.create(
            base_url=resolved_settings.dataset_base_url,
            candidate_paths=parse_candidate_paths(
                resolved_settings.dataset_candidate_paths
            ),
            timeout_seconds=resolved_settings.dataset_fetch_timeout_seconds,
        )
    resolver = CatalogSourceResolver(
        cache=ContentCache(store),
        asset_loader=FileAssetLoader(asset_path),
        dataset_client=dataset_client,
    )
    diary_service = DiaryService(store)
    custom_food_service = CustomFoodService(store, diary_service)
    catalog_service = CatalogService(resolver, custom_food_service)
    food_importer = FoodImporter(catalog_service)

    async def close_resources() -> None:
        if dataset_client is not None:
            await dataset_client.close()

    return AppContainer(
        settings=resolved_settings,
        store=store,
        diary_service=diary_service,
        custom_food_service=custom_food_service,
        catalog_service=catalog_service,
        food_importer=food_importer,
        close_resources=close_resources,
    )
