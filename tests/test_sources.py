"""Tests for dataset source resolution."""

import asyncio

import httpx
import pytest

from food_vault.adapters.asset_loader import FileAssetLoader
from food_vault.adapters.dataset_client import HttpxDatasetClient
from food_vault.domain.errors import SourceUnavailable
from food_vault.services.cache import ContentCache
from food_vault.services.sources import (
    SAMPLE_CSV,
    CatalogSource,
    CatalogSourceResolver,
    parse_catalog,
)
from food_vault.services.storage import CACHED_CSV_KEY
from tests.conftest import DATASET_CSV, FakeAssetLoader, FlakyKeyValueStore

REMOTE_CSV = "Name,Calories\nRemote Rice,210\n"


def test_asset_content_is_parsed_and_cached(resolver, store, dataset_client) -> None:
    resolved = asyncio.run(resolver.resolve())

    assert resolved.source is CatalogSource.ASSET
    assert [food.name for food in resolved.records] == [
        "Rice",
        "Iced tea",
        "Apple",
        "Mystery Stew",
    ]
    assert [food.id for food in resolved.records] == ["1", "2", "3", "4"]
    assert store.values[CACHED_CSV_KEY] == DATASET_CSV
    assert dataset_client.calls == 0


def test_cache_is_used_before_asset(resolver, store, asset_loader) -> None:
    store.values[CACHED_CSV_KEY] = REMOTE_CSV

    resolved = asyncio.run(resolver.resolve())

    assert resolved.source is CatalogSource.CACHE
    assert resolved.records[0].name == "Remote Rice"
    assert asset_loader.calls == 0
    assert store.writes == []


def test_remote_is_tried_when_asset_missing(
    resolver, store, asset_loader, dataset_client
) -> None:
    asset_loader.content = None
    dataset_client.content = REMOTE_CSV

    resolved = asyncio.run(resolver.resolve())

    assert resolved.source is CatalogSource.REMOTE
    assert store.values[CACHED_CSV_KEY] == REMOTE_CSV


def test_missing_name_column_falls_back_to_next_source(
    resolver, store, asset_loader, dataset_client
) -> None:
    asset_loader.content = "Food,Calories\nRice,200\n"
    dataset_client.content = REMOTE_CSV

    resolved = asyncio.run(resolver.resolve())

    assert resolved.source is CatalogSource.REMOTE
    assert resolved.records[0].name == "Remote Rice"


def test_corrupt_cache_is_purged_and_asset_used(resolver, store) -> None:
    store.values[CACHED_CSV_KEY] = "garbage without header"

    resolved = asyncio.run(resolver.resolve())

    assert resolved.source is CatalogSource.ASSET
    assert store.values[CACHED_CSV_KEY] == DATASET_CSV


def test_zero_records_purges_cache_and_uses_sample(
    resolver, store, dataset_client
) -> None:
    store.values[CACHED_CSV_KEY] = "Dish Name,Calories\n,200\n  ,100\n"
    dataset_client.content = REMOTE_CSV

    resolved = asyncio.run(resolver.resolve())

    assert resolved.source is CatalogSource.SAMPLE
    assert CACHED_CSV_KEY not in store.values
    assert dataset_client.calls == 0


def test_sample_is_never_cached(resolver, store, asset_loader) -> None:
    asset_loader.content = None

    resolved = asyncio.run(resolver.resolve())

    assert resolved.source is CatalogSource.SAMPLE
    assert len(resolved.records) == 10
    assert CACHED_CSV_KEY not in store.values


def test_falls_back_to_sample_when_every_source_fails() -> None:
    class BrokenAssetLoader(FakeAssetLoader):
        def read_text(self) -> str:
            raise OSError("asset bundle corrupted")

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404)

    client = HttpxDatasetClient(
        base_url="https://app.test/",
        candidate_paths=["/assets/FoodSheet.csv", "/assets/foodsheet.csv"],
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )
    resolver = CatalogSourceResolver(
        cache=ContentCache(FlakyKeyValueStore()),
        asset_loader=BrokenAssetLoader(),
        dataset_client=client,
    )

    resolved = asyncio.run(resolver.resolve())

    assert resolved.source is CatalogSource.SAMPLE
    assert len(resolved.records) >= 1


def test_unreadable_store_still_resolves(asset_loader) -> None:
    store = FlakyKeyValueStore(fail_reads=True, fail_writes=True)
    resolver = CatalogSourceResolver(
        cache=ContentCache(store), asset_loader=asset_loader
    )

    resolved = asyncio.run(resolver.resolve())

    assert resolved.source is CatalogSource.ASSET
    assert len(resolved.records) == 4


def test_sample_parses_to_ten_records() -> None:
    records = parse_catalog(SAMPLE_CSV)

    assert len(records) == 10
    assert records[0].name == "Rice"
    assert records[0].calories == 200


def test_file_asset_loader_reads_bundled_dataset() -> None:
    records = parse_catalog(FileAssetLoader().read_text())

    assert len(records) > 20
    assert all(record.name for record in records)


def test_file_asset_loader_missing_file(tmp_path) -> None:
    loader = FileAssetLoader(tmp_path / "absent.csv")

    with pytest.raises(SourceUnavailable):
        loader.read_text()


def test_content_cache_round_trip_and_invalidate(store) -> None:
    cache = ContentCache(store)

    with pytest.raises(SourceUnavailable):
        cache.get()
    cache.set(REMOTE_CSV)
    assert cache.get() == REMOTE_CSV
    cache.invalidate()
    assert CACHED_CSV_KEY not in store.values
