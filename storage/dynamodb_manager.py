"""DynamoDB manager for event storage operations."""
import logging
from datetime import date, timedelta
from typing import List, Optional

import boto3
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import BotoCoreError, ClientError

from config import Config
from errors import DeleteError, InsertError
from processor.models import EventRecord, SyncResult

logger = logging.getLogger(__name__)


class DynamoDBManager:
    """Manager for the events table, keyed on external_url."""

    def __init__(self, table_name: str, endpoint_url: Optional[str] = None,
                 region_name: Optional[str] = None,
                 aws_access_key_id: Optional[str] = None,
                 aws_secret_access_key: Optional[str] = None):
        """
        Initialize DynamoDB client and table reference.

        Args:
            table_name: Name of the DynamoDB table
            endpoint_url: Store endpoint URL
            region_name: AWS region of the table
            aws_access_key_id: Access key id of the store credential
            aws_secret_access_key: Secret of the store credential
        """
        self.table_name = table_name
        self.dynamodb = boto3.resource(
            'dynamodb',
            endpoint_url=endpoint_url,
            region_name=region_name,
            aws_access_key_id=aws_access_key_id,
            aws_secret_access_key=aws_secret_access_key
        )
        self.table = self.dynamodb.Table(table_name)
        logger.info(f"Initialized DynamoDBManager for table: {table_name}")

    @classmethod
    def from_config(cls, config: Config) -> 'DynamoDBManager':
        """Build a manager from validated run configuration."""
        return cls(
            table_name=config.table_name,
            endpoint_url=config.store_endpoint_url,
            region_name=config.region,
            aws_access_key_id=config.access_key_id,
            aws_secret_access_key=config.secret_access_key
        )

    def sync_events(self, records: List[EventRecord],
                    today: Optional[date] = None) -> SyncResult:
        """
        Replace stale store contents with the records of this run.

        Events dated before yesterday are deleted, then every record is
        upserted by external_url. Neither phase aborts the run: a failed
        delete is logged and a failed record is counted.

        Args:
            records: Normalized records from this run
            today: Reference date for the stale cutoff (default: today)

        Returns:
            SyncResult with persisted, failed and deleted counts
        """
        errors = []

        if not records:
            logger.info("No events to sync, leaving store untouched")
            return SyncResult(persisted=0, failed=0, deleted=0, errors=errors)

        cutoff = (today or date.today()) - timedelta(days=1)
        deleted_count = 0
        try:
            deleted_count = self.delete_events_before(cutoff.isoformat())
        except DeleteError as e:
            logger.warning(f"Failed to delete old events: {e}")
            errors.append(str(e))

        persisted_count = 0
        failed_count = 0
        for record in records:
            try:
                self.put_event(record)
            except InsertError as e:
                logger.error(str(e))
                errors.append(str(e))
                failed_count += 1
                continue

            persisted_count += 1
            logger.info(f"Saved event: {record.title}")

        logger.info(
            f"Sync complete: {persisted_count} persisted, {failed_count} "
            f"failed, {deleted_count} deleted"
        )

        return SyncResult(
            persisted=persisted_count,
            failed=failed_count,
            deleted=deleted_count,
            errors=errors
        )

    def delete_events_before(self, cutoff_date: str) -> int:
        """
        Delete events whose event_date is strictly before the cutoff.

        Args:
            cutoff_date: ISO 8601 date (YYYY-MM-DD)

        Returns:
            Count of deleted events

        Raises:
            DeleteError: If scanning or deleting fails
        """
        try:
            items = self._scan(filter_expression=Attr('event_date').lt(cutoff_date))
            with self.table.batch_writer() as writer:
                for item in items:
                    writer.delete_item(
                        Key={'external_url': item['external_url']}
                    )
        except (BotoCoreError, ClientError) as e:
            raise DeleteError(
                f"Error deleting events before {cutoff_date}: {e}"
            ) from e

        logger.info(f"Deleted {len(items)} events dated before {cutoff_date}")
        return len(items)

    def put_event(self, record: EventRecord) -> None:
        """
        Insert or overwrite one event keyed on its external_url.

        Raises:
            InsertError: If the write fails
        """
        try:
            self.table.put_item(Item=self._event_record_to_item(record))
        except (BotoCoreError, ClientError) as e:
            raise InsertError(
                f"Error saving event '{record.title}': {e}",
                external_url=record.external_url
            ) from e

    def _scan(self, filter_expression=None) -> List[dict]:
        """Scan the table, following pagination."""
        scan_kwargs = {}
        if filter_expression is not None:
            scan_kwargs['FilterExpression'] = filter_expression

        response = self.table.scan(**scan_kwargs)
        items = response.get('Items', [])

        while 'LastEvaluatedKey' in response:
            response = self.table.scan(
                ExclusiveStartKey=response['LastEvaluatedKey'],
                **scan_kwargs
            )
            items.extend(response.get('Items', []))

        return items

    def _event_record_to_item(self, record: EventRecord) -> dict:
        """
        Convert EventRecord object to DynamoDB item.

        Args:
            record: EventRecord object

        Returns:
            DynamoDB item dictionary
        """
        item = {
            'external_url': record.external_url,
            'title': record.title,
            'event_date': record.event_date,
            'location': record.location,
            'city': record.city,
            'description': record.description,
            'event_type': record.event_type.value,
            'is_online': record.is_online,
            'updated_at': record.updated_at
        }

        # Add optional fields if present
        if record.event_time:
            item['event_time'] = record.event_time
        if record.image_url:
            item['image_url'] = record.image_url
        if record.price:
            item['price'] = record.price

        return item
