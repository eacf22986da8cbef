"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

DEFAULT_CANDIDATE_PATHS = (
    "/assets/FoodSheet.csv,/assets/foodsheet.csv,./assets/FoodSheet.csv,"
    "../assets/FoodSheet.csv"
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str | None = None
    supabase_service_key: str | None = None
    kv_table: str = "kv_store"
    dataset_asset_path: str | None = None
    dataset_base_url: str | None = None
    dataset_candidate_paths: str = DEFAULT_CANDIDATE_PATHS
    dataset_fetch_timeout_seconds: float = 15
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def uses_supabase(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_key)


def parse_candidate_paths(raw: str | None) -> list[str]:
    """Parse the comma-separated list of remote dataset paths."""
    if raw is None:
        return []
    paths: list[str] = []
    for chunk in raw.split(","):
        value = chunk.strip()
        if value and value not in paths:
            paths.append(value)
    return paths
