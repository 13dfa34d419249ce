"""Entry point for the AI events calendar sync."""
import json
import logging
import os
import sys
import time
from typing import Mapping, Optional

from config import Config
from errors import ConfigError, CriticalError, FetchError, SyncError
from processor.event_processor import EventProcessor
from processor.models import SyncResult
from scraper.aiakce_calendar import AIAkceCalendarScraper
from storage.dynamodb_manager import DynamoDBManager

logger = logging.getLogger(__name__)

# Attributes every LogRecord has; anything else came in through `extra`
_RESERVED_ATTRS = set(vars(logging.makeLogRecord({}))) | {'message', 'asctime'}


class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        for key, value in vars(record).items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = value

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure logging with JSON formatter.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


def run_sync(config: Config) -> SyncResult:
    """
    Run one fetch, extract, normalize and sync pass.

    Args:
        config: Validated run configuration

    Returns:
        SyncResult of the storage phase

    Raises:
        FetchError: If the listing page cannot be retrieved
        CriticalError: On any unexpected failure
    """
    try:
        scraper = AIAkceCalendarScraper(
            source_url=config.source_url,
            timeout=config.request_timeout
        )
        processor = EventProcessor()
        dynamodb_manager = DynamoDBManager.from_config(config)

        listings = scraper.fetch_events()

        process_result = processor.process_listings(listings)
        logger.info(
            f"Normalized {len(process_result.records)} events",
            extra={
                'listings': len(listings),
                'skipped': process_result.skipped
            }
        )

        return dynamodb_manager.sync_events(process_result.records)

    except SyncError:
        raise
    except Exception as e:
        raise CriticalError(f"Unexpected failure during sync: {e}") from e


def main(environ: Optional[Mapping[str, str]] = None) -> int:
    """
    Run the sync and map its outcome to a process exit code.

    Args:
        environ: Settings mapping (default: os.environ)

    Returns:
        0 on success, 1 on any fatal error
    """
    if environ is None:
        environ = os.environ

    setup_logging(environ.get('LOG_LEVEL') or 'INFO')

    try:
        config = Config.from_env(environ)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    start_time = time.time()
    logger.info(
        "Sync started",
        extra={'source_url': config.source_url, 'table_name': config.table_name}
    )

    try:
        sync_result = run_sync(config)
    except FetchError as e:
        logger.error(
            f"Failed to fetch calendar page: {e}",
            extra={'error_type': type(e).__name__, 'status_code': e.status_code},
            exc_info=True
        )
        return 1
    except SyncError as e:
        logger.critical(
            f"Sync failed: {e}",
            extra={'error_type': type(e).__name__},
            exc_info=True
        )
        return 1

    duration = round(time.time() - start_time, 2)

    if sync_result.failed and not sync_result.persisted:
        logger.error(
            "No events could be saved to the store",
            extra={'failed': sync_result.failed, 'duration_seconds': duration}
        )
        return 1

    logger.info(
        f"Sync completed: {sync_result.persisted} events saved",
        extra={
            'persisted': sync_result.persisted,
            'failed': sync_result.failed,
            'deleted': sync_result.deleted,
            'duration_seconds': duration
        }
    )
    return 0


if __name__ == '__main__':
    sys.exit(main())
