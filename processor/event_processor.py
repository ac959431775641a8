"""Event processor for normalizing raw rows and filtering expired events."""
import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, List, Mapping, Optional, Sequence

from processor.expiry import ExpiryPolicy
from processor.models import Event
from processor.normalizer import RowNormalizer, is_placeholder_name

logger = logging.getLogger(__name__)


class EventProcessor:
    """Processor turning raw rows into the visible events of one cycle."""

    MAX_NAME_LENGTH = 200
    MAX_DESCRIPTION_LENGTH = 2000

    def __init__(
        self,
        normalizer: Optional[RowNormalizer] = None,
        policy: Optional[ExpiryPolicy] = None
    ):
        """
        Initialize the processor.

        Args:
            normalizer: Row normalizer (default: RowNormalizer())
            policy: Visibility policy (default: ExpiryPolicy())
        """
        self.normalizer = normalizer or RowNormalizer()
        self.policy = policy or ExpiryPolicy()

    def normalize_rows(self, raw_rows: Sequence[Mapping[Any, Any]]) -> List[Event]:
        """
        Normalize raw rows, skipping rows without a usable name.

        Args:
            raw_rows: Raw rows from the event source

        Returns:
            List of canonical Event objects in input order
        """
        events = []

        for index, row in enumerate(raw_rows):
            event = self.normalizer.normalize_row(row)
            if is_placeholder_name(event.name):
                logger.debug(f"Skipping row {index}: no usable name")
                continue
            events.append(self._truncate(event))

        logger.info(
            f"Normalized {len(events)} events out of {len(raw_rows)} rows"
        )
        return events

    def filter_visible(self, events: Sequence[Event], now: datetime) -> List[Event]:
        """
        Keep the events visible at the given instant.

        Each event is evaluated exactly once against the same now.

        Args:
            events: Canonical events
            now: Instant captured at the start of the cycle

        Returns:
            Visible events in input order
        """
        visible = [event for event in events if self.policy.is_visible(event, now)]

        logger.info(
            f"{len(visible)} of {len(events)} events visible at {now.isoformat()}"
        )
        return visible

    def process_rows(
        self,
        raw_rows: Sequence[Mapping[Any, Any]],
        now: datetime
    ) -> List[Event]:
        """
        Normalize raw rows and drop expired events.

        Args:
            raw_rows: Raw rows from the event source
            now: Instant captured at the start of the cycle

        Returns:
            Visible events in input order
        """
        return self.filter_visible(self.normalize_rows(raw_rows), now)

    def _truncate(self, event: Event) -> Event:
        """Truncate free text fields to their maximum length."""
        if (len(event.name) <= self.MAX_NAME_LENGTH
                and len(event.description) <= self.MAX_DESCRIPTION_LENGTH):
            return event
        return replace(
            event,
            name=event.name[:self.MAX_NAME_LENGTH],
            description=event.description[:self.MAX_DESCRIPTION_LENGTH]
        )
