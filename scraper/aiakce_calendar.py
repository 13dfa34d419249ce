"""Calendar scraper for the aiakce.cz AI events listing."""
import logging
from typing import List, Optional, Sequence
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup
from bs4.element import Tag

from config import DEFAULT_SOURCE_URL
from errors import BlockParseError, FetchError, NetworkError
from processor.models import Listing

logger = logging.getLogger(__name__)


BROWSER_HEADERS = {
    'User-Agent': (
        'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
        '(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36'
    ),
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
    'Accept-Language': 'cs-CZ,cs;q=0.9,en;q=0.8',
}

EVENT_ROW_SELECTOR = '.tribe-events-calendar-list__event-row'
# Diagnostic only, never contributes records
DIAGNOSTIC_SELECTOR = 'article.tribe-events-calendar-list__event'

# Ordered selector strategies per field, first non-empty match wins
TITLE_LINK_SELECTORS = (
    '.tribe-events-calendar-list__event-title-link',
    '.tribe-events-calendar-list__event-title a',
)
DATE_SELECTORS = (
    '.tribe-event-date-start',
    '.tribe-events-calendar-list__event-date-tag-datetime',
    'time.tribe-events-calendar-list__event-datetime',
)
VENUE_SELECTORS = (
    '.tribe-events-calendar-list__event-venue-title',
    '.tribe-venue',
)
ADDRESS_SELECTORS = (
    '.tribe-events-calendar-list__event-venue-address',
    '.tribe-address',
)
DESCRIPTION_SELECTORS = (
    '.tribe-events-calendar-list__event-description',
    '.tribe-events-list-event-description',
)
IMAGE_SELECTORS = (
    '.tribe-events-calendar-list__event-featured-image img',
    'img.tribe-events-calendar-list__event-featured-image',
)
PRICE_SELECTORS = (
    '.tribe-events-c-small-cta__price',
    '.tribe-events-cost',
)


class AIAkceCalendarScraper:
    """Scraper for the aiakce.cz event list page."""

    def __init__(self, source_url: str = DEFAULT_SOURCE_URL,
                 timeout: Optional[float] = None):
        """
        Initialize the calendar scraper.

        Args:
            source_url: Listing page to fetch
            timeout: HTTP timeout in seconds (default: transport default)
        """
        self.source_url = source_url
        self.timeout = timeout

    def fetch_events(self) -> List[Listing]:
        """
        Fetch the listing page and extract raw listings from it.

        Returns:
            List of Listing objects, one per parseable block

        Raises:
            FetchError: If the page cannot be retrieved
        """
        html_content = self.fetch_page()
        listings = self.parse_listings(html_content)
        logger.info(f"Extracted {len(listings)} listings from calendar")
        return listings

    def fetch_page(self) -> str:
        """
        Fetch the raw listing markup with a single GET request.

        Returns:
            HTML content as string

        Raises:
            FetchError: On a non-2xx HTTP status
            NetworkError: On a transport-level failure
        """
        logger.info(f"Fetching calendar page {self.source_url}")
        try:
            response = requests.get(
                self.source_url,
                headers=BROWSER_HEADERS,
                timeout=self.timeout
            )
        except requests.RequestException as e:
            raise NetworkError(
                f"Network error fetching {self.source_url}: {e}"
            ) from e

        if not response.ok:
            raise FetchError(
                f"HTTP {response.status_code} fetching {self.source_url}",
                status_code=response.status_code
            )

        html_content = response.text
        logger.info(f"Fetched {len(html_content)} characters of HTML")
        return html_content

    def extract_blocks(self, html_content: str) -> List[Tag]:
        """
        Find candidate event blocks in the listing markup.

        Args:
            html_content: HTML content from the listing page

        Returns:
            List of block elements, empty if the page has none
        """
        soup = BeautifulSoup(html_content, 'html.parser')
        blocks = soup.select(EVENT_ROW_SELECTOR)

        if not blocks:
            self._log_diagnostics(soup)
        else:
            logger.info(f"Found {len(blocks)} event blocks")

        return blocks

    def parse_listings(self, html_content: str) -> List[Listing]:
        """
        Extract a Listing from every candidate block, skipping broken ones.

        Args:
            html_content: HTML content from the listing page

        Returns:
            List of Listing objects
        """
        listings = []

        for index, block in enumerate(self.extract_blocks(html_content)):
            try:
                listings.append(self.parse_block(block))
            except BlockParseError as e:
                logger.warning(f"Skipping event block {index}: {e}")
                continue

        return listings

    def parse_block(self, block: Tag) -> Listing:
        """
        Parse a single event block into a raw Listing.

        Missing fields are left empty; the processor decides whether the
        listing is usable.

        Args:
            block: BeautifulSoup element for one event row

        Returns:
            Listing object

        Raises:
            BlockParseError: If the block markup cannot be read
        """
        try:
            title_link = _first_match(block, TITLE_LINK_SELECTORS)
            href = title_link.get('href') if title_link else None
            image_elem = _first_match(block, IMAGE_SELECTORS)
            image_src = None
            if image_elem:
                image_src = image_elem.get('src') or image_elem.get('data-src')

            return Listing(
                title=_text(title_link),
                external_url=self._absolute(href) or '',
                date_text=_date_value(block),
                venue=_first_text(block, VENUE_SELECTORS),
                address=_first_text(block, ADDRESS_SELECTORS),
                description=_first_text(block, DESCRIPTION_SELECTORS),
                image_url=self._absolute(image_src),
                price=_first_text(block, PRICE_SELECTORS) or None
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise BlockParseError(f"Failed to parse event block: {e}") from e

    def _absolute(self, url: Optional[str]) -> Optional[str]:
        """Resolve a possibly relative URL against the source page."""
        if not url or not url.strip():
            return None
        return urljoin(self.source_url, url.strip())

    def _log_diagnostics(self, soup: BeautifulSoup) -> None:
        """Log what the page does contain when no event rows were found."""
        articles = soup.select(DIAGNOSTIC_SELECTOR)
        links = [
            a['href'] for a in soup.find_all('a', href=True)
            if a['href'].startswith('http')
        ]
        logger.warning(
            f"No event blocks matched {EVENT_ROW_SELECTOR!r}; page has "
            f"{len(articles)} event articles and {len(links)} outbound links"
        )
        for link in links[:5]:
            logger.debug(f"Outbound link: {link}")


def _first_match(block: Tag, selectors: Sequence[str]) -> Optional[Tag]:
    """Return the first element matched by the selector strategies."""
    for selector in selectors:
        elem = block.select_one(selector)
        if elem is not None:
            return elem
    return None


def _first_text(block: Tag, selectors: Sequence[str]) -> str:
    """Return the first non-empty text matched by the selector strategies."""
    for selector in selectors:
        text = _text(block.select_one(selector))
        if text:
            return text
    return ''


def _text(elem: Optional[Tag]) -> str:
    if elem is None:
        return ''
    return ' '.join(elem.get_text(' ', strip=True).split()).replace(' ,', ',')


def _date_value(block: Tag) -> str:
    """
    Return the first non-empty datetime attribute across the date selectors.

    Rendered text of the date elements is used only when none of them
    carries a datetime attribute.
    """
    for selector in DATE_SELECTORS:
        elem = block.select_one(selector)
        if elem is None:
            continue
        value = elem.get('datetime')
        if value and value.strip():
            return value.strip()
    return _first_text(block, DATE_SELECTORS)
