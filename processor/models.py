"""Data models for event processing."""
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, List, Optional


class Category(Enum):
    """Kind of listing. UNKNOWN is never displayed."""
    EVENT = "event"
    RECRUITMENT = "recruitment"
    UNKNOWN = "unknown"


class OdStatus(Enum):
    """On-duty attendance exemption status."""
    PROVIDED = "provided"
    NOT_PROVIDED = "not_provided"
    NOT_MENTIONED = "not_mentioned"


@dataclass(frozen=True)
class Event:
    """Canonical event normalized from one raw row."""
    name: str
    category: Category = Category.EVENT
    date: Optional[date] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    venue: str = ""
    organizer: str = ""
    description: str = ""
    action_url: Optional[str] = None
    od_status: OdStatus = OdStatus.NOT_MENTIONED
    deadline: Optional[datetime] = None
    created_at: Optional[datetime] = None


@dataclass
class DisplayGroup:
    """Events sharing a calendar date, or one of the sentinel keys."""
    key: str
    events: List[Event]
    heading_date: Optional[date] = None


@dataclass
class CycleResult:
    """Result of one fetch-filter-render cycle."""
    token: int
    now: datetime
    tree: Any
    rows_fetched: int = 0
    events_visible: int = 0
    stale: bool = False
    errors: List[str] = field(default_factory=list)
