"""
Calendar deep links for displayed events.

Google Calendar's template link is the default target. Outlook web and an
inline iCalendar document (opened by Apple Calendar) are offered as
alternates chosen from the client's user agent.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from urllib.parse import quote, urlencode

from processor.models import Event
from processor.normalizer import normalize_time

GOOGLE_CALENDAR_URL = "https://calendar.google.com/calendar/render"
OUTLOOK_CALENDAR_URL = "https://outlook.live.com/calendar/0/deeplink/compose"

PLATFORMS = ('google', 'outlook', 'apple')


@dataclass(frozen=True)
class CalendarDateRange:
    """Start/end stamps in YYYYMMDDTHHMMSS form plus the text fields."""
    start: str
    end: str
    title: str
    description: str
    location: str


def _stamp(day, hour: int, minute: int) -> str:
    return f"{day:%Y%m%d}T{hour:02d}{minute:02d}00"


def format_range(event: Event) -> Optional[CalendarDateRange]:
    """
    Build the canonical date-time range of an event.

    Without an end time the event is assumed to last one hour. The hour
    wraps within 0-23 on the same day; crossing midnight is not handled.

    Args:
        event: Canonical event

    Returns:
        CalendarDateRange, or None when the date or start time is missing
    """
    start = normalize_time(event.start_time)
    if event.date is None or start is None:
        return None

    start_hour, start_minute = (int(part) for part in start.split(':'))
    end = normalize_time(event.end_time)
    if end is not None:
        end_hour, end_minute = (int(part) for part in end.split(':'))
    else:
        end_hour, end_minute = (start_hour + 1) % 24, start_minute

    return CalendarDateRange(
        start=_stamp(event.date, start_hour, start_minute),
        end=_stamp(event.date, end_hour, end_minute),
        title=event.name,
        description=event.description,
        location=event.venue,
    )


def google_calendar_url(date_range: CalendarDateRange) -> str:
    params = {
        'action': 'TEMPLATE',
        'text': date_range.title,
        'dates': f"{date_range.start}/{date_range.end}",
        'details': date_range.description,
        'location': date_range.location,
    }
    return f"{GOOGLE_CALENDAR_URL}?{urlencode(params)}"


def _iso(stamp: str) -> str:
    return datetime.strptime(stamp, '%Y%m%dT%H%M%S').isoformat()


def outlook_calendar_url(date_range: CalendarDateRange) -> str:
    params = {
        'path': '/calendar/action/compose',
        'rru': 'addevent',
        'subject': date_range.title,
        'startdt': _iso(date_range.start),
        'enddt': _iso(date_range.end),
        'body': date_range.description,
        'location': date_range.location,
    }
    return f"{OUTLOOK_CALENDAR_URL}?{urlencode(params)}"


def _ics_escape(text: str) -> str:
    return (
        text.replace("\\", "\\\\").replace("\r\n", "\\n").replace("\n", "\\n").replace(";", "\\;").replace(",", "\\,")
    )


def ics_data_url(date_range: CalendarDateRange) -> str:
    """Return a data: URL holding a single-event iCalendar document."""
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        "PRODID:-//Campus Events Feed//EN",
        "BEGIN:VEVENT",
        f"UID:{date_range.start}-{quote(date_range.title)}@campus-events",
        f"DTSTART:{date_range.start}",
        f"DTEND:{date_range.end}",
        f"SUMMARY:{_ics_escape(date_range.title)}",
    ]
    if date_range.location:
        lines.append(f"LOCATION:{_ics_escape(date_range.location)}")
    if date_range.description:
        lines.append(f"DESCRIPTION:{_ics_escape(date_range.description)}")
    lines.extend(["END:VEVENT", "END:VCALENDAR"])

    # ICS standard uses CRLF
    document = "\r\n".join(lines) + "\r\n"
    return "data:text/calendar;charset=utf-8," + quote(document)


def detect_platform(user_agent: Optional[str]) -> str:
    """
    Pick the calendar provider for a client.

    Args:
        user_agent: Raw User-Agent header, may be None

    Returns:
        "apple", "outlook" or "google"
    """
    agent = (user_agent or '').lower()
    if any(marker in agent for marker in ('iphone', 'ipad', 'macintosh')):
        return 'apple'
    if 'windows' in agent:
        return 'outlook'
    return 'google'


def calendar_link(event: Event, platform: str = 'google') -> Optional[str]:
    """
    Build the calendar deep link of an event for a provider.

    Args:
        event: Canonical event
        platform: One of PLATFORMS; unknown values fall back to Google

    Returns:
        URL string, or None when the event has no date or start time
    """
    date_range = format_range(event)
    if date_range is None:
        return None
    if platform == 'outlook':
        return outlook_calendar_url(date_range)
    if platform == 'apple':
        return ics_data_url(date_range)
    return google_calendar_url(date_range)
