"""Runtime configuration for the AI events sync."""
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from errors import ConfigError

DEFAULT_SOURCE_URL = "https://www.aiakce.cz/seznam/"
DEFAULT_TABLE_NAME = "events"
DEFAULT_REGION = "eu-central-1"

REQUIRED_SETTINGS = ("STORE_ENDPOINT_URL", "STORE_ACCESS_KEY")


@dataclass(frozen=True)
class Config:
    """Validated settings passed into the pipeline entry point."""
    store_endpoint_url: str
    access_key_id: str
    secret_access_key: str
    region: str = DEFAULT_REGION
    table_name: str = DEFAULT_TABLE_NAME
    source_url: str = DEFAULT_SOURCE_URL
    request_timeout: Optional[float] = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Config":
        """
        Build configuration from environment variables.

        Args:
            environ: Mapping to read settings from (default: os.environ)

        Returns:
            Config instance

        Raises:
            ConfigError: If a required setting is missing or malformed
        """
        if environ is None:
            environ = os.environ

        missing = [
            name for name in REQUIRED_SETTINGS
            if not environ.get(name, '').strip()
        ]
        if missing:
            raise ConfigError(
                f"Missing required settings: {', '.join(missing)}"
            )

        access_key_id, secret_access_key = _split_credential(
            environ['STORE_ACCESS_KEY'].strip()
        )

        return cls(
            store_endpoint_url=environ['STORE_ENDPOINT_URL'].strip(),
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            region=environ.get('STORE_REGION') or DEFAULT_REGION,
            table_name=environ.get('TABLE_NAME') or DEFAULT_TABLE_NAME,
            source_url=environ.get('SOURCE_URL') or DEFAULT_SOURCE_URL,
            request_timeout=_parse_timeout(environ.get('REQUEST_TIMEOUT')),
            log_level=environ.get('LOG_LEVEL') or 'INFO',
        )


def _split_credential(credential: str) -> tuple[str, str]:
    """Split a `<key-id>:<secret>` credential into its two parts."""
    key_id, sep, secret = credential.partition(':')
    if not sep or not key_id or not secret:
        raise ConfigError(
            "STORE_ACCESS_KEY must have the form <key-id>:<secret>"
        )
    return key_id, secret


def _parse_timeout(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    try:
        timeout = float(value)
    except ValueError:
        raise ConfigError(f"REQUEST_TIMEOUT must be a number, got {value!r}")
    if timeout <= 0:
        raise ConfigError(f"REQUEST_TIMEOUT must be positive, got {value!r}")
    return timeout
