"""Row normalizer mapping raw spreadsheet rows onto canonical events."""
import logging
import re
from datetime import date, datetime, time, tzinfo
from typing import Any, Dict, Mapping, Optional, Sequence

from processor.models import Category, Event, OdStatus

logger = logging.getLogger(__name__)

# Column order of the form-response export, used for positional rows
POSITIONAL_FIELDS = (
    'created_at',
    'name',
    'date',
    'start_time',
    'end_time',
    'venue',
    'organizer',
    'description',
    'action_url',
    'od',
    'category',
    'deadline',
)

FIELD_ALIASES = {
    'name': ('event_name', 'name', 'title'),
    'date': ('event_date', 'date'),
    'start_time': ('start_time', 'start', 'time'),
    'end_time': ('end_time', 'end'),
    'venue': ('venue', 'location'),
    'organizer': ('club', 'organizer', 'organiser', 'host'),
    'description': ('description', 'details'),
    'action_url': ('url', 'link', 'registration_link', 'register'),
    'od': ('od', 'od_status', 'od_provided'),
    'category': ('type', 'category'),
    'deadline': ('deadline', 'apply_by'),
    'created_at': ('created', 'created_at', 'timestamp'),
}

PLACEHOLDER_NAMES = {'', '-', 'n/a', 'na', 'none', 'null', 'tbd'}

_TWELVE_HOUR = re.compile(
    r'^(\d{1,2})(?::(\d{2}))?\s?(am|pm)$', re.IGNORECASE
)
_TWENTY_FOUR_HOUR = re.compile(r'^(\d{1,2}):(\d{2})(?::(\d{2}))?$')
_NO_WORD = re.compile(r'\bno\b')
_YES_WORD = re.compile(r'\byes\b')

DATE_FORMATS = [
    '%Y-%m-%d',      # ISO 8601
    '%m/%d/%Y',      # US format
    '%m-%d-%Y',      # US format with dashes
    '%d-%m-%Y',      # European format with dashes
    '%B %d, %Y',     # Full month name
    '%b %d, %Y',     # Abbreviated month name
    '%d %B %Y',      # Day first, full month name
    '%d %b %Y',      # Day first, abbreviated month name
    '%Y/%m/%d',      # Alternative ISO format
]

TIMESTAMP_FORMATS = [
    '%m/%d/%Y %H:%M:%S',   # Form response timestamp
    '%m/%d/%Y %H:%M',
    '%Y-%m-%d %H:%M:%S',
    '%Y-%m-%d %H:%M',
]


def _clean(value: Any) -> str:
    if value is None:
        return ''
    return str(value).strip()


def _canonical_key(key: Any) -> Any:
    if isinstance(key, str):
        return re.sub(r'[\s\-]+', '_', key.strip().lower())
    return key


def normalize_time(time_str: Any) -> Optional[str]:
    """
    Normalize a time of day to 24-hour format (HH:MM).

    Accepts 24-hour values ("9:05", "19:00", "19:00:00") and 12-hour values
    with a meridiem marker ("7 PM", "7:30pm", "12:00 AM").

    Args:
        time_str: Raw time value

    Returns:
        "HH:MM" string or None if the value cannot be parsed
    """
    text = _clean(time_str)
    if not text:
        return None

    match = _TWELVE_HOUR.match(text)
    if match:
        hour = int(match.group(1))
        minute = int(match.group(2) or 0)
        if not 1 <= hour <= 12 or minute > 59:
            return None
        meridiem = match.group(3).lower()
        if meridiem == 'pm' and hour != 12:
            hour += 12
        if meridiem == 'am' and hour == 12:
            hour = 0
        return f"{hour:02d}:{minute:02d}"

    match = _TWENTY_FOUR_HOUR.match(text)
    if match:
        hour = int(match.group(1))
        minute = int(match.group(2))
        if hour > 23 or minute > 59:
            return None
        return f"{hour:02d}:{minute:02d}"

    return None


def _parse_iso_datetime(text: str, tz: Optional[tzinfo] = None) -> Optional[datetime]:
    if 'T' not in text:
        return None
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        # Spreadsheet web apps serialize sheet-local wall times in UTC
        parsed = parsed.astimezone(tz).replace(tzinfo=None)
    return parsed


def normalize_date(date_str: Any, tz: Optional[tzinfo] = None) -> Optional[date]:
    """
    Normalize a calendar date.

    Args:
        date_str: Date string in various formats, or a date/datetime
        tz: Zone of the source sheet, used for UTC-serialized values
            (default: the host's local zone)

    Returns:
        date object or None if parsing fails
    """
    if isinstance(date_str, datetime):
        if date_str.tzinfo is not None:
            date_str = date_str.astimezone(tz)
        return date_str.date()
    if isinstance(date_str, date):
        return date_str

    text = _clean(date_str)
    if not text:
        return None

    parsed = _parse_iso_datetime(text, tz)
    if parsed:
        return parsed.date()

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    return None


def parse_timestamp(
    value: Any,
    end_of_day: bool = False,
    tz: Optional[tzinfo] = None
) -> Optional[datetime]:
    """
    Parse an absolute timestamp such as a deadline or a creation time.

    Args:
        value: Raw timestamp value
        end_of_day: Resolve date-only values to 23:59:59 instead of midnight
        tz: Zone of the source sheet (default: the host's local zone)

    Returns:
        Naive datetime in the sheet's zone or None if parsing fails
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(tz).replace(tzinfo=None)
        return value

    text = _clean(value)
    if not text:
        return None

    parsed = _parse_iso_datetime(text, tz)
    if parsed:
        return parsed

    for fmt in TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue

    day = normalize_date(text)
    if day is None:
        return None
    return datetime.combine(day, time(23, 59, 59) if end_of_day else time())


def classify_od_status(value: Any) -> OdStatus:
    """Map free-text OD information onto an OdStatus."""
    text = _clean(value).lower()
    if 'not provided' in text or _NO_WORD.search(text):
        return OdStatus.NOT_PROVIDED
    if 'provided' in text or _YES_WORD.search(text):
        return OdStatus.PROVIDED
    return OdStatus.NOT_MENTIONED


def classify_category(value: Any) -> Category:
    """Map a free-text type column onto a Category."""
    text = _clean(value).lower()
    if not text:
        return Category.EVENT
    if 'recruit' in text:
        return Category.RECRUITMENT
    if 'event' in text:
        return Category.EVENT
    return Category.UNKNOWN


def is_placeholder_name(name: Any) -> bool:
    """Return True when a row carries no usable event name."""
    return _clean(name).lower() in PLACEHOLDER_NAMES


class RowNormalizer:
    """Normalizer for raw rows coming from named or positional sources."""

    def __init__(
        self,
        positional_fields: Sequence[str] = POSITIONAL_FIELDS,
        tz: Optional[tzinfo] = None
    ):
        """
        Initialize the normalizer.

        Args:
            positional_fields: Canonical field names for integer-keyed rows
            tz: Zone the sheet is kept in; UTC-serialized dates and
                timestamps are converted to it (default: host local zone)
        """
        self.positional_fields = tuple(positional_fields)
        self.tz = tz

    def normalize_row(self, row: Mapping[Any, Any]) -> Event:
        """
        Normalize one raw row into an Event. Never raises for bad values.

        Args:
            row: Mapping of field names or column positions to raw values

        Returns:
            Event object
        """
        fields = self._extract_fields(row)

        category_raw = fields.get('category')
        category = classify_category(category_raw)
        if category is Category.UNKNOWN:
            logger.debug(f"Unrecognized category '{category_raw}'")

        return Event(
            name=_clean(fields.get('name')),
            category=category,
            date=normalize_date(fields.get('date'), self.tz),
            start_time=normalize_time(fields.get('start_time')),
            end_time=normalize_time(fields.get('end_time')),
            venue=_clean(fields.get('venue')),
            organizer=_clean(fields.get('organizer')),
            description=_clean(fields.get('description')),
            action_url=_clean(fields.get('action_url')) or None,
            od_status=classify_od_status(fields.get('od')),
            deadline=parse_timestamp(fields.get('deadline'), end_of_day=True, tz=self.tz),
            created_at=parse_timestamp(fields.get('created_at'), tz=self.tz),
        )

    def _extract_fields(self, row: Mapping[Any, Any]) -> Dict[str, Any]:
        """Resolve source-specific keys onto canonical field names."""
        canonical = {_canonical_key(key): value for key, value in row.items()}
        fields: Dict[str, Any] = {}

        for position, field_name in enumerate(self.positional_fields):
            if position in canonical:
                fields[field_name] = canonical[position]

        for field_name, aliases in FIELD_ALIASES.items():
            for alias in aliases:
                value = canonical.get(alias)
                if _clean(value):
                    fields[field_name] = value
                    break

        return fields
