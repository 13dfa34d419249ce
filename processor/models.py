"""Data models for event processing."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class EventType(str, Enum):
    """Category of an event, classified from its title."""
    CONFERENCE = 'conference'
    WORKSHOP = 'workshop'
    WEBINAR = 'webinar'
    MEETUP = 'meetup'


@dataclass
class Listing:
    """Raw listing extracted from one calendar block."""
    title: str
    external_url: str
    date_text: str = ''
    venue: str = ''
    address: str = ''
    description: str = ''
    image_url: Optional[str] = None
    price: Optional[str] = None


@dataclass
class EventRecord:
    """Normalized event as stored in the events table."""
    title: str
    event_date: str
    event_time: Optional[str]
    location: str
    city: str
    description: str
    external_url: str
    image_url: Optional[str]
    price: Optional[str]
    event_type: EventType
    is_online: bool
    updated_at: str


@dataclass
class ProcessResult:
    """Outcome of normalizing a batch of listings."""
    records: list[EventRecord] = field(default_factory=list)
    skipped: int = 0
    errors: list[str] = field(default_factory=list)


@dataclass
class SyncResult:
    """Result of sync operation."""
    persisted: int
    failed: int
    deleted: int
    errors: list[str]
