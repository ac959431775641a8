"""Presentation projector turning display groups into a render tree."""
import logging
import re
from datetime import date
from typing import List, Optional, Sequence

from processor.grouping import RECRUITMENT_KEY
from processor.models import DisplayGroup, Event, OdStatus
from renderer.nodes import (
    Badge,
    CalendarAction,
    EmptyReason,
    EmptyState,
    EventCard,
    GroupNode,
    RenderTree,
)

logger = logging.getLogger(__name__)

EMPTY_STATES = {
    EmptyReason.NO_EVENTS: ("No upcoming events", "Check back soon."),
    EmptyReason.ALL_EXPIRED: ("No upcoming events", "You're all caught up."),
    EmptyReason.LOAD_FAILED: (
        "Unable to load events",
        "Please try again later.",
    ),
}

OD_BADGES = {
    OdStatus.PROVIDED: Badge("OD Provided", "od-provided"),
    OdStatus.NOT_PROVIDED: Badge("OD Not Provided", "od-not-provided"),
}

_INLINE_IMAGE = re.compile(
    r'<img\b[^>]*>'               # HTML image tags
    r'|!\[[^\]]*\]\([^)]*\)'      # Markdown images
    r'|\[(?:image|img)[^\]]*\]',  # Spreadsheet placeholders
    re.IGNORECASE,
)


def format_heading(day: date) -> str:
    """Long-form heading such as 'Friday 10 January'."""
    return f"{day:%A} {day.day} {day:%B}"


def format_time_range(start: Optional[str], end: Optional[str]) -> str:
    if not start:
        return ""
    if end:
        return f"{start} – {end}"
    return start


def strip_inline_images(text: str) -> str:
    """Remove inline image markup and collapse the leftover whitespace."""
    stripped = _INLINE_IMAGE.sub(' ', text)
    return re.sub(r'[ \t]{2,}', ' ', stripped).strip()


def empty_state(reason: EmptyReason) -> EmptyState:
    title, message = EMPTY_STATES[reason]
    return EmptyState(reason=reason, title=title, message=message)


class PresentationProjector:
    """Projector producing declarative render trees. Performs no UI work."""

    def project(
        self,
        groups: Sequence[DisplayGroup],
        reason: EmptyReason = EmptyReason.ALL_EXPIRED
    ) -> RenderTree:
        """
        Project ordered display groups into a render tree.

        Args:
            groups: Output of group_events
            reason: Empty state shown when there are no events at all

        Returns:
            RenderTree
        """
        event_groups: List[GroupNode] = []
        recruitment: List[EventCard] = []

        for group in groups:
            if group.key == RECRUITMENT_KEY:
                recruitment.extend(self.recruitment_card(event) for event in group.events)
                continue
            heading = format_heading(group.heading_date) if group.heading_date else None
            event_groups.append(
                GroupNode(
                    key=group.key,
                    heading=heading,
                    cards=[self.event_card(event) for event in group.events],
                )
            )

        if not event_groups and not recruitment:
            logger.info(f"Projecting empty state: {reason.value}")
            return RenderTree(empty_state=empty_state(reason))

        tree = RenderTree(groups=event_groups, recruitment=recruitment)
        if not event_groups:
            tree.events_placeholder = EmptyState(
                reason=reason, title="No upcoming events", message="You're all caught up."
            )
        if not recruitment:
            tree.recruitment_placeholder = EmptyState(
                reason=reason, title="No recruitments right now."
            )

        logger.info(
            f"Projected {len(event_groups)} date groups and "
            f"{len(recruitment)} recruitment cards"
        )
        return tree

    def project_failure(self) -> RenderTree:
        """Render tree for a cycle whose fetch failed."""
        return RenderTree(empty_state=empty_state(EmptyReason.LOAD_FAILED))

    def event_card(self, event: Event) -> EventCard:
        calendar = None
        if event.date is not None and event.start_time:
            calendar = CalendarAction(event=event)

        return EventCard(
            name=event.name,
            organizer=event.organizer,
            venue=event.venue,
            time_range=format_time_range(event.start_time, event.end_time),
            description=strip_inline_images(event.description),
            od_badge=OD_BADGES.get(event.od_status),
            register_url=event.action_url,
            calendar=calendar,
        )

    def recruitment_card(self, event: Event) -> EventCard:
        card = self.event_card(event)
        if event.deadline is not None:
            card.deadline_text = f"Apply by {event.deadline:%d %b, %H:%M}"
        return card
