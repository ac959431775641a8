"""Visibility policy deciding whether an event is still shown."""
import logging
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Optional

from processor.models import Category, Event

logger = logging.getLogger(__name__)

END_OF_DAY = time(23, 59, 59)


@dataclass(frozen=True)
class ExpiryConfig:
    """Tunable windows of the visibility policy."""
    grace_period: timedelta = timedelta(0)
    undated_event_window: timedelta = timedelta(days=3)
    recruitment_window: timedelta = timedelta(days=7)


def _at(day, hh_mm: str) -> datetime:
    hour, minute = hh_mm.split(':')
    return datetime.combine(day, time(int(hour), int(minute)))


def effective_end(event: Event) -> Optional[datetime]:
    """
    Compute the nominal end instant of a dated event.

    Args:
        event: Canonical event

    Returns:
        date at end_time, else at start_time, else at 23:59:59;
        None for undated events
    """
    if event.date is None:
        return None
    clock = event.end_time or event.start_time
    if clock:
        try:
            return _at(event.date, clock)
        except ValueError:
            logger.debug(f"Ignoring malformed time '{clock}' for '{event.name}'")
    return datetime.combine(event.date, END_OF_DAY)


class ExpiryPolicy:
    """
    Fail-closed visibility rules.

    Every rule has the form "visible while now <= cutoff" with a cutoff that
    depends only on the event and the configuration, so an expired event
    never becomes visible again as time advances. The one exception is a
    recruitment without deadline, creation time or date: it is anchored at
    now and therefore always visible.
    """

    def __init__(self, config: Optional[ExpiryConfig] = None):
        self.config = config or ExpiryConfig()

    def is_visible(self, event: Event, now: datetime) -> bool:
        """
        Decide whether the event is shown at the given instant.

        Args:
            event: Canonical event
            now: Instant captured once at the start of the render cycle

        Returns:
            True if the event is still visible
        """
        cutoff = self.cutoff(event, now)
        return cutoff is not None and now <= cutoff

    def cutoff(self, event: Event, now: datetime) -> Optional[datetime]:
        """Return the last visible instant, or None when never visible."""
        if event.category is Category.EVENT:
            return self._event_cutoff(event)
        if event.category is Category.RECRUITMENT:
            return self._recruitment_cutoff(event, now)
        return None

    def _event_cutoff(self, event: Event) -> Optional[datetime]:
        end = effective_end(event)
        if end is not None:
            return end + self.config.grace_period
        if event.created_at is not None:
            return event.created_at + self.config.undated_event_window
        return None

    def _recruitment_cutoff(self, event: Event, now: datetime) -> datetime:
        if event.deadline is not None:
            return event.deadline

        if event.created_at is not None:
            anchor = event.created_at.date()
        elif event.date is not None:
            anchor = event.date
        else:
            anchor = now.date()
        return datetime.combine(anchor, END_OF_DAY) + self.config.recruitment_window
