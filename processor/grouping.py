"""Grouping and ordering of visible events for display."""
from typing import Iterable, List

from processor.models import Category, DisplayGroup, Event

UNDATED_KEY = 'undated'
RECRUITMENT_KEY = 'recruitment'


def _start_time_key(event: Event):
    # Absent start times sort after every HH:MM value
    return (event.start_time is None, event.start_time or '')


def group_events(events: Iterable[Event]) -> List[DisplayGroup]:
    """
    Partition visible events into ordered display groups.

    Dated events are grouped by exact calendar date and the groups are
    ordered ascending; events without a date form one trailing "undated"
    group. Within a group events are ordered by start time, absent start
    times last, ties keeping input order. Recruitment entries follow in a
    single group that preserves input order.

    Args:
        events: Visible events

    Returns:
        List of non-empty DisplayGroup objects
    """
    dated = {}
    undated: List[Event] = []
    recruitment: List[Event] = []

    for event in events:
        if event.category is Category.RECRUITMENT:
            recruitment.append(event)
        elif event.category is Category.EVENT:
            if event.date is None:
                undated.append(event)
            else:
                dated.setdefault(event.date, []).append(event)

    groups = [
        DisplayGroup(
            key=day.isoformat(),
            events=sorted(members, key=_start_time_key),
            heading_date=day,
        )
        for day, members in sorted(dated.items(), key=lambda item: item[0])
    ]

    if undated:
        groups.append(
            DisplayGroup(key=UNDATED_KEY, events=sorted(undated, key=_start_time_key))
        )

    if recruitment:
        groups.append(DisplayGroup(key=RECRUITMENT_KEY, events=recruitment))

    return groups
