"""Error types raised by the AI events sync pipeline."""
from typing import Optional


class SyncError(Exception):
    """Base class for all pipeline errors."""


class ConfigError(SyncError):
    """Required connection settings are missing or malformed."""


class FetchError(SyncError):
    """The listing page could not be retrieved."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NetworkError(FetchError):
    """Transport-level failure before any HTTP status was received."""


class BlockParseError(SyncError):
    """A single candidate block could not be extracted or normalized."""


class DeleteError(SyncError):
    """Clearing old records from the store failed."""


class InsertError(SyncError):
    """Persisting a single record failed."""

    def __init__(self, message: str, external_url: Optional[str] = None):
        super().__init__(message)
        self.external_url = external_url


class CriticalError(SyncError):
    """Unexpected failure that aborts the whole run."""
