"""Event processor for normalizing scraped listings into event records."""
import logging
import re
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional, Tuple

from errors import BlockParseError
from processor.models import EventRecord, EventType, Listing, ProcessResult

logger = logging.getLogger(__name__)


UNSPECIFIED = 'unspecified'
ONLINE_CITY = 'Online'

# Evaluated in order, first matching keyword wins
EVENT_TYPE_RULES: Tuple[Tuple[Tuple[str, ...], EventType], ...] = (
    (('konference', 'conference'), EventType.CONFERENCE),
    (('workshop',), EventType.WORKSHOP),
    (('webinář', 'webinar'), EventType.WEBINAR),
)

TRAILING_LOCALITY = re.compile(r',\s*([^,]+?)\s*$')


class EventProcessor:
    """Processor for validating and normalizing scraped listings."""

    MAX_TITLE_LENGTH = 255
    MAX_LOCATION_LENGTH = 255
    MAX_DESCRIPTION_LENGTH = 500
    FALLBACK_DAYS_AHEAD = 7

    DATE_FORMATS = [
        '%Y-%m-%d %H:%M:%S',  # ISO-like with space
        '%Y-%m-%d %H:%M',
        '%d.%m.%Y %H:%M',     # Czech format
        '%d. %m. %Y %H:%M',
        '%d.%m.%Y',
        '%d. %m. %Y',
        '%B %d, %Y %I:%M %p', # Full month name with time
        '%B %d, %Y',
        '%b %d, %Y',
        '%m/%d/%Y',
    ]

    def process_listings(self, listings: List[Listing],
                         now: Optional[datetime] = None) -> ProcessResult:
        """
        Normalize raw listings into event records.

        Listings without a title or external URL are skipped. A listing that
        fails to normalize is recorded in the result errors and skipped.

        Args:
            listings: Raw Listing objects from the scraper
            now: Instant of the processing pass (default: current local time)

        Returns:
            ProcessResult with records, skipped count and error messages
        """
        if now is None:
            now = datetime.now().astimezone()
        updated_at = now.astimezone(timezone.utc).isoformat()
        fallback_date = now.date() + timedelta(days=self.FALLBACK_DAYS_AHEAD)

        result = ProcessResult()

        for listing in listings:
            if not self._has_required_fields(listing):
                result.skipped += 1
                continue

            try:
                record = self._process_single_listing(
                    listing, updated_at, fallback_date
                )
            except BlockParseError as e:
                logger.warning(str(e))
                result.skipped += 1
                result.errors.append(str(e))
                continue

            result.records.append(record)

        logger.info(
            f"Processed {len(result.records)} valid events out of "
            f"{len(listings)} listings ({result.skipped} skipped)"
        )
        return result

    def _has_required_fields(self, listing: Listing) -> bool:
        if not listing.title or not listing.title.strip():
            logger.info("Skipping listing without title")
            return False

        if not listing.external_url or not listing.external_url.strip():
            logger.info(f"Skipping listing '{listing.title}' without URL")
            return False

        return True

    def _process_single_listing(self, listing: Listing, updated_at: str,
                                fallback_date: date) -> EventRecord:
        """
        Normalize a single listing that passed the required-field gate.

        Raises:
            BlockParseError: If any field cannot be normalized
        """
        try:
            title = listing.title.strip()
            venue = (listing.venue or '').strip()
            address = (listing.address or '').strip()

            event_date, event_time = self.parse_date_time(
                listing.date_text, fallback_date
            )
            event_type = self.classify_event_type(title)
            city = self.infer_city(venue, address)
            is_online = self.infer_online(venue, address, city, event_type)

            if not city:
                city = ONLINE_CITY if is_online else UNSPECIFIED

            location = venue or address or UNSPECIFIED
            description = (listing.description or '').strip()

            return EventRecord(
                title=title[:self.MAX_TITLE_LENGTH],
                event_date=event_date,
                event_time=event_time,
                location=location[:self.MAX_LOCATION_LENGTH],
                city=city,
                description=description[:self.MAX_DESCRIPTION_LENGTH],
                external_url=listing.external_url.strip(),
                image_url=listing.image_url or None,
                price=listing.price or None,
                event_type=event_type,
                is_online=is_online,
                updated_at=updated_at
            )
        except (AttributeError, TypeError, ValueError) as e:
            raise BlockParseError(
                f"Failed to normalize listing '{listing.title}': {e}"
            ) from e

    def parse_date_time(self, date_text: Optional[str],
                        fallback_date: date) -> Tuple[str, Optional[str]]:
        """
        Derive the ISO date and HH:MM time of an event.

        Unparseable or missing dates fall back to ``fallback_date`` with no
        time, so every record carries a date.

        Args:
            date_text: datetime attribute or rendered date text
            fallback_date: Date used when parsing fails

        Returns:
            Tuple of (event_date, event_time)
        """
        parsed = self._parse_datetime(date_text) if date_text else None

        if parsed is None:
            if date_text:
                logger.info(
                    f"Unparseable date {date_text!r}, using {fallback_date}"
                )
            return fallback_date.isoformat(), None

        return parsed.date().isoformat(), parsed.strftime('%H:%M')

    def _parse_datetime(self, date_text: str) -> Optional[datetime]:
        date_text = date_text.strip()

        try:
            return datetime.fromisoformat(date_text)
        except ValueError:
            pass

        for fmt in self.DATE_FORMATS:
            try:
                return datetime.strptime(date_text, fmt)
            except ValueError:
                continue

        return None

    @staticmethod
    def infer_city(venue: str, address: str) -> str:
        """
        Infer the city from the venue name or the address.

        The venue name wins and gives its text before the first comma. The
        address gives its segment after the last comma.

        Returns:
            City name or empty string
        """
        if venue:
            return venue.split(',')[0].strip()

        if address:
            match = TRAILING_LOCALITY.search(address)
            if match:
                return match.group(1).strip()

        return ''

    @staticmethod
    def classify_event_type(title: str) -> EventType:
        """Classify an event by keywords in its title."""
        title_lower = title.lower()

        for keywords, event_type in EVENT_TYPE_RULES:
            if any(keyword in title_lower for keyword in keywords):
                return event_type

        return EventType.MEETUP

    @staticmethod
    def infer_online(venue: str, address: str, city: str,
                     event_type: EventType) -> bool:
        """Decide whether an event takes place online."""
        location_lower = f"{venue} {address}".lower()
        return (
            'online' in location_lower or
            event_type == EventType.WEBINAR or
            city.lower() == 'online'
        )
