"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import pytest

from food_vault.adapters.asset_loader import AssetLoader
from food_vault.adapters.dataset_client import DatasetClient
from food_vault.config import Settings
from food_vault.containers import AppContainer
from food_vault.domain.errors import SourceUnavailable
from food_vault.services.cache import ContentCache
from food_vault.services.catalog import CatalogService
from food_vault.services.custom_foods import CustomFoodService
from food_vault.services.diary import DiaryService
from food_vault.services.importer import FoodImporter
from food_vault.services.sources import CatalogSourceResolver
from food_vault.services.storage import InMemoryKeyValueStore

DATASET_CSV = (
    "Dish Name,Category,Serving,Quantity,Calories (kcal),Carbohydrates (g),"
    "Protein (g),Fats (g)\n"
    "Rice,Grains,Bowl,1 cup,200,45,4,0.5\n"
    "Iced tea,beverage,-,100g,10.34,2.7,0.03,0.01\n"
    "Apple,fruit,Piece,1 medium,95,25,0.5,0.3\n"
    "Mystery Stew,,-,100g,120,10,8,4\n"
)


@dataclass
class FlakyKeyValueStore(InMemoryKeyValueStore):
    """Key-value store whose writes and removals can be made to fail."""

    fail_writes: bool = False
    fail_reads: bool = False
    fail_write_prefix: str | None = None
    writes: list[str] = field(default_factory=list)

    def get(self, key: str) -> str | None:
        if self.fail_reads:
            raise OSError("storage offline")
        return super().get(key)

    def set(self, key: str, value: str) -> None:
        if self.fail_writes or self._blocked(key):
            raise OSError("disk full")
        self.writes.append(key)
        super().set(key, value)

    def remove(self, key: str) -> None:
        if self.fail_writes or self._blocked(key):
            raise OSError("disk full")
        super().remove(key)

    def _blocked(self, key: str) -> bool:
        return bool(self.fail_write_prefix) and key.startswith(self.fail_write_prefix)


@dataclass
class FakeAssetLoader(AssetLoader):
    """Asset loader returning fixed text or raising."""

    content: str | None = DATASET_CSV
    calls: int = 0

    def read_text(self) -> str:
        self.calls += 1
        if self.content is None:
            raise SourceUnavailable("asset missing")
        return self.content


@dataclass
class FakeDatasetClient(DatasetClient):
    """Remote dataset client returning fixed text or raising."""

    content: str | None = None
    calls: int = 0

    async def fetch_text(self) -> str:
        self.calls += 1
        if self.content is None:
            raise SourceUnavailable("no remote dataset")
        return self.content


@dataclass
class SteppingClock:
    """Clock that advances one millisecond per call."""

    current: datetime = field(
        default_factory=lambda: datetime(2025, 7, 30, 12, 0, tzinfo=UTC)
    )

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + timedelta(milliseconds=1)
        return value


@pytest.fixture
def store() -> FlakyKeyValueStore:
    return FlakyKeyValueStore()


@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock()


@pytest.fixture
def asset_loader() -> FakeAssetLoader:
    return FakeAssetLoader()


@pytest.fixture
def dataset_client() -> FakeDatasetClient:
    return FakeDatasetClient()


@pytest.fixture
def resolver(
    store: FlakyKeyValueStore,
    asset_loader: FakeAssetLoader,
    dataset_client: FakeDatasetClient,
) -> CatalogSourceResolver:
    return CatalogSourceResolver(
        cache=ContentCache(store),
        asset_loader=asset_loader,
        dataset_client=dataset_client,
    )


@pytest.fixture
def diary_service(store: FlakyKeyValueStore, clock: SteppingClock) -> DiaryService:
    return DiaryService(store, clock=clock)


@pytest.fixture
def custom_food_service(
    store: FlakyKeyValueStore, diary_service: DiaryService, clock: SteppingClock
) -> CustomFoodService:
    return CustomFoodService(store, diary_service, clock=clock)


@pytest.fixture
def catalog_service(
    resolver: CatalogSourceResolver, custom_food_service: CustomFoodService
) -> CatalogService:
    return CatalogService(resolver, custom_food_service)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url=None,
        supabase_service_key=None,
        dataset_base_url=None,
    )


@pytest.fixture
def container(
    settings: Settings,
    store: FlakyKeyValueStore,
    diary_service: DiaryService,
    custom_food_service: CustomFoodService,
    catalog_service: CatalogService,
    clock: SteppingClock,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        store=store,
        diary_service=diary_service,
        custom_food_service=custom_food_service,
        catalog_service=catalog_service,
        food_importer=FoodImporter(catalog_service, clock=clock),
        close_resources=close_resources,
    )
