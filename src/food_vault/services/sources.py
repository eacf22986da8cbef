"""Resolve the bundled dataset from the best available source."""

import logging
from dataclasses import dataclass
from enum import StrEnum

from food_vault.adapters.asset_loader import AssetLoader
from food_vault.adapters.dataset_client import DatasetClient
from food_vault.domain.errors import (
    MissingRequiredColumn,
    PersistenceWriteFailure,
    SourceUnavailable,
    ZeroRecordsParsed,
)
from food_vault.domain.foods import FoodRecord
from food_vault.services.cache import ContentCache
from food_vault.services.normalizer import normalize_rows
from food_vault.services.tabular import parse_rows

_logger = logging.getLogger(__name__)

SAMPLE_CSV = """\
Dish Name,Category,Serving,Quantity,Calories (kcal),Carbohydrates (g),Protein (g),Fats (g)
Rice,Grains,Bowl,1 cup,200,45,4,0.5
Chicken Curry,Protein,Plate,1 serving,300,10,30,15
Vegetable Salad,Vegetables,Bowl,1 bowl,50,10,3,2
Chapati,Grains,Piece,1 piece,120,25,3,1
Dal Tadka,Protein,Bowl,1 bowl,180,20,12,6
Paneer Butter Masala,Protein,Plate,100g,265,8,18,20
Biryani,Mixed,Plate,1 plate,400,50,15,18
Samosa,Snacks,Piece,1 piece,150,18,3,8
Mango Lassi,Beverages,Glass,1 glass,120,20,8,4
Masala Chai,Beverages,Cup,1 cup,50,8,2,2"""


class CatalogSource(StrEnum):
    """Where dataset content came from."""

    CACHE = "cache"
    ASSET = "asset"
    REMOTE = "remote"
    SAMPLE = "sample"


@dataclass(frozen=True)
class ResolvedCatalog:
    """Parsed dataset records and their origin."""

    records: list[FoodRecord]
    source: CatalogSource


def parse_catalog(content: str) -> list[FoodRecord]:
    """Parse and normalize dataset text.

    Raises MissingRequiredColumn for an unusable header and
    ZeroRecordsParsed when non-empty content yields nothing.
    """
    records = normalize_rows(parse_rows(content))
    if not records and content.strip():
        raise ZeroRecordsParsed(f"No records in content of length {len(content)}")
    return records


def sample_catalog() -> ResolvedCatalog:
    """Return the static sample dataset."""
    return ResolvedCatalog(
        records=parse_catalog(SAMPLE_CSV), source=CatalogSource.SAMPLE
    )


@dataclass
class CatalogSourceResolver:
    """Tries cache, bundled asset, remote fetch, then the static sample."""

    cache: ContentCache
    asset_loader: AssetLoader
    dataset_client: DatasetClient | None = None

    async def resolve(self) -> ResolvedCatalog:
        """Return dataset records; never raises."""
        for source in (CatalogSource.CACHE, CatalogSource.ASSET, CatalogSource.REMOTE):
            try:
                content = await self._read(source)
            except SourceUnavailable as exc:
                _logger.info("Dataset source %s unavailable: %s", source, exc)
                continue
            except Exception:
                _logger.exception("Dataset source %s failed", source)
                continue

            try:
                records = parse_catalog(content)
            except MissingRequiredColumn as exc:
                _logger.warning("Dataset from %s is unusable: %s", source, exc)
                if source is CatalogSource.CACHE:
                    self._purge_cache()
                continue
            except ZeroRecordsParsed as exc:
                _logger.error("Dataset from %s parsed to nothing: %s", source, exc)
                self._purge_cache()
                break
            except Exception:
                _logger.exception("Dataset from %s could not be parsed", source)
                self._purge_cache()
                break

            if source is not CatalogSource.CACHE:
                self.cache.set(content)
            _logger.info("Loaded %s foods from %s", len(records), source)
            return ResolvedCatalog(records=records, source=source)

        _logger.warning("Falling back to the sample dataset")
        return sample_catalog()

    async def _read(self, source: CatalogSource) -> str:
        if source is CatalogSource.CACHE:
            return self.cache.get()
        if source is CatalogSource.ASSET:
            content = self.asset_loader.read_text()
        else:
            if self.dataset_client is None:
                raise SourceUnavailable("No remote dataset configured")
            content = await self.dataset_client.fetch_text()
        if not content.strip():
            raise SourceUnavailable(f"{source} returned empty content")
        return content

    def _purge_cache(self) -> None:
        try:
            self.cache.invalidate()
        except PersistenceWriteFailure:
            _logger.exception("Could not clear cached dataset content")
        else:
            _logger.info("Cleared cached dataset content")
