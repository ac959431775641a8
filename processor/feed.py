"""Render cycle driving one fetch-filter-group-project pass."""
import itertools
import logging
from datetime import datetime, tzinfo
from typing import Optional

from processor.event_processor import EventProcessor
from processor.grouping import group_events
from processor.models import CycleResult
from renderer.nodes import EmptyReason
from renderer.projector import PresentationProjector
from scraper.sheet_source import FetchError

logger = logging.getLogger(__name__)


class EventFeed:
    """
    Runs render cycles against an event source.

    Each cycle captures its own now and receives a token from a monotonically
    increasing counter. A caller that starts overlapping cycles uses
    is_current() to drop results that a newer cycle has superseded.
    """

    def __init__(
        self,
        source,
        processor: Optional[EventProcessor] = None,
        projector: Optional[PresentationProjector] = None,
        tz: Optional[tzinfo] = None
    ):
        """
        Initialize the feed.

        Args:
            source: Object with a fetch_rows() method raising FetchError
            processor: Row processor (default: EventProcessor())
            projector: Presentation projector (default: PresentationProjector())
            tz: Zone of the source sheet; now is read as its wall-clock time
                (default: the host's local zone)
        """
        self.source = source
        self.processor = processor or EventProcessor()
        self.projector = projector or PresentationProjector()
        self.tz = tz
        self._tokens = itertools.count(1)
        self._latest_token = 0

    def is_current(self, token: int) -> bool:
        return token == self._latest_token

    def run_cycle(self, now: Optional[datetime] = None) -> CycleResult:
        """
        Run one complete cycle.

        Args:
            now: Instant used for every visibility decision of the cycle
                (default: the current wall-clock time in the feed's zone)

        Returns:
            CycleResult carrying the render tree
        """
        token = next(self._tokens)
        self._latest_token = token
        now = now or datetime.now(self.tz).replace(tzinfo=None)
        logger.info(f"Starting render cycle {token}")

        try:
            rows = self.source.fetch_rows()
        except FetchError as e:
            logger.error(f"Render cycle {token} could not load events: {e}")
            return CycleResult(
                token=token,
                now=now,
                tree=self.projector.project_failure(),
                stale=not self.is_current(token),
                errors=[str(e)]
            )

        visible = self.processor.process_rows(rows, now)
        reason = EmptyReason.ALL_EXPIRED if rows else EmptyReason.NO_EVENTS
        tree = self.projector.project(group_events(visible), reason=reason)

        stale = not self.is_current(token)
        if stale:
            logger.warning(f"Render cycle {token} superseded by {self._latest_token}")

        return CycleResult(
            token=token,
            now=now,
            tree=tree,
            rows_fetched=len(rows),
            events_visible=len(visible),
            stale=stale
        )
