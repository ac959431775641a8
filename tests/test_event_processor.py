"""Unit tests for EventProcessor."""
from datetime import datetime
from unittest.mock import Mock

import pytest

from processor.event_processor import EventProcessor
from processor.models import Category, Event


NOW = datetime(2025, 3, 1, 15, 0)


@pytest.fixture
def raw_rows():
    """Rows as returned by the spreadsheet web app."""
    return [
        {'event_name': 'Past Talk', 'event_date': '2025-02-27', 'start_time': '10:00 AM'},
        {'event_name': 'Hackathon', 'event_date': '2025-03-02', 'start_time': '9:00 AM'},
        {'event_name': '', 'event_date': '2025-03-02'},
        {'event_name': 'N/A', 'event_date': '2025-03-02'},
        {
            'event_name': 'Core Team',
            'type': 'recruitment',
            'deadline': '2025-03-10T17:00:00',
        },
    ]


class TestEventProcessor:
    """Test cases for EventProcessor class."""

    def test_normalize_rows_skips_placeholder_names(self, raw_rows):
        processor = EventProcessor()

        events = processor.normalize_rows(raw_rows)

        assert [event.name for event in events] == ['Past Talk', 'Hackathon', 'Core Team']

    def test_process_rows_drops_expired_events(self, raw_rows):
        processor = EventProcessor()

        visible = processor.process_rows(raw_rows, NOW)

        assert [event.name for event in visible] == ['Hackathon', 'Core Team']
        assert visible[1].category is Category.RECRUITMENT

    def test_each_event_evaluated_once_with_same_now(self, raw_rows):
        policy = Mock()
        policy.is_visible.return_value = True
        processor = EventProcessor(policy=policy)

        processor.process_rows(raw_rows, NOW)

        assert policy.is_visible.call_count == 3
        assert all(call.args[1] is NOW for call in policy.is_visible.call_args_list)

    def test_truncates_long_fields(self):
        processor = EventProcessor()

        events = processor.normalize_rows([{'name': 'A' * 300, 'description': 'B' * 3000}])

        assert len(events[0].name) == 200
        assert len(events[0].description) == 2000

    def test_short_fields_untouched(self):
        processor = EventProcessor()
        event = Event(name='Short', description='Fine')

        assert processor._truncate(event) is event

    def test_empty_input(self):
        assert EventProcessor().process_rows([], NOW) == []
