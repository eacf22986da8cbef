"""HTTP client for fetching the dataset from static web paths."""

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from food_vault.domain.errors import SourceUnavailable

_logger = logging.getLogger(__name__)


class DatasetClient(Protocol):
    """Interface for remote dataset retrieval."""

    async def fetch_text(self) -> str:
        """Return dataset text from the first path that responds."""


@dataclass
class HttpxDatasetClient(DatasetClient):
    """HTTPX-backed client trying candidate paths in order."""

    base_url: str
    candidate_paths: list[str]
    http_client: httpx.AsyncClient
    timeout_seconds: float = 15

    @classmethod
    def create(
        cls, base_url: str, candidate_paths: list[str], timeout_seconds: float = 15
    ) -> "HttpxDatasetClient":
        """Create a dataset client with a managed httpx session."""
        return cls(
            base_url=base_url,
            candidate_paths=candidate_paths,
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def fetch_text(self) -> str:
        """GET each candidate path sequentially; first success wins."""
        base = httpx.URL(self.base_url)
        for path in self.candidate_paths:
            url = base.join(path)
            try:
                response = await self.http_client.get(url, timeout=self.timeout_seconds)
            except httpx.HTTPError as exc:
                _logger.warning("Dataset fetch failed for %s: %s", url, exc)
                continue
            if response.is_success:
                _logger.info(
                    "Loaded dataset from %s (length=%s)", url, len(response.text)
                )
                return response.text
            _logger.info("Dataset path %s returned %s", url, response.status_code)
        raise SourceUnavailable(f"No dataset at {self.base_url}")

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
