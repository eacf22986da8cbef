"""Bundled dataset asset access."""

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from food_vault.domain.errors import SourceUnavailable

DEFAULT_ASSET_PATH = Path(__file__).resolve().parents[1] / "assets" / "FoodSheet.csv"


class AssetLoader(Protocol):
    """Interface for reading the shipped dataset."""

    def read_text(self) -> str:
        """Return the dataset text or raise SourceUnavailable."""


@dataclass
class FileAssetLoader(AssetLoader):
    """Reads the dataset from a file on disk."""

    path: Path = DEFAULT_ASSET_PATH

    def read_text(self) -> str:
        """Read the asset as UTF-8 text."""
        try:
            return self.path.read_text(encoding="utf-8-sig")
        except OSError as exc:
            raise SourceUnavailable(f"Asset not readable: {self.path}") from exc
