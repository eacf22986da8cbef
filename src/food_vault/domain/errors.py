"""Error taxonomy for catalog ingestion and persistence."""


class FoodVaultError(Exception):
    """Base class for food vault errors."""


class MissingRequiredColumn(FoodVaultError):
    """Raised when the header row has no recognizable name column."""

    def __init__(self, headers: list[str]) -> None:
        super().__init__(f"Could not find a name column in headers: {headers}")
        self.headers = headers


class ZeroRecordsParsed(FoodVaultError):
    """Raised when non-empty content yields no records."""


class SourceUnavailable(FoodVaultError):
    """Raised when a dataset source has nothing usable to offer."""


class PersistenceWriteFailure(FoodVaultError):
    """Raised when the key-value store rejects a write."""

    def __init__(self, key: str, cause: Exception | None = None) -> None:
        super().__init__(f"Failed to write '{key}': {cause}")
        self.key = key


class FoodNotFound(FoodVaultError):
    """Raised when a food or diary entry id is unknown."""


class ImportFailed(FoodVaultError):
    """Raised when an uploaded spreadsheet cannot be read."""
