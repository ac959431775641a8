"""Declarative render tree produced by the presentation projector."""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from processor.models import Event


class EmptyReason(Enum):
    """Why a section or the whole page has nothing to show."""
    NO_EVENTS = "no_events"
    ALL_EXPIRED = "all_expired"
    LOAD_FAILED = "load_failed"


@dataclass(frozen=True)
class Badge:
    text: str
    css_class: str


@dataclass(frozen=True)
class CalendarAction:
    """Affordance for adding an event to an external calendar."""
    event: Event
    label: str = "Add to Calendar"


@dataclass
class EventCard:
    name: str
    organizer: str = ""
    venue: str = ""
    time_range: str = ""
    description: str = ""
    od_badge: Optional[Badge] = None
    register_url: Optional[str] = None
    calendar: Optional[CalendarAction] = None
    deadline_text: str = ""


@dataclass
class GroupNode:
    key: str
    heading: Optional[str]
    cards: List[EventCard] = field(default_factory=list)


@dataclass
class EmptyState:
    reason: EmptyReason
    title: str
    message: str = ""


@dataclass
class RenderTree:
    """
    Everything a renderer needs for one cycle.

    Either empty_state is set and there are no groups, or groups and
    recruitment carry the content, each with an optional section
    placeholder when that section alone is empty.
    """
    groups: List[GroupNode] = field(default_factory=list)
    recruitment: List[EventCard] = field(default_factory=list)
    empty_state: Optional[EmptyState] = None
    events_placeholder: Optional[EmptyState] = None
    recruitment_placeholder: Optional[EmptyState] = None

    @property
    def is_empty(self) -> bool:
        return self.empty_state is not None
