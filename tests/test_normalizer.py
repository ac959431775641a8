"""Unit tests for RowNormalizer."""
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from processor.models import Category, OdStatus
from processor.normalizer import (
    RowNormalizer,
    classify_category,
    classify_od_status,
    is_placeholder_name,
    normalize_date,
    normalize_time,
    parse_timestamp,
)


class TestNormalizeTime:
    """Test cases for time normalization."""

    @pytest.mark.parametrize("raw, expected", [
        ("12:00 AM", "00:00"),
        ("12:30 PM", "12:30"),
        ("1 PM", "13:00"),
        ("7:00PM", "19:00"),
        ("9:30 am", "09:30"),
        ("11 pm", "23:00"),
    ])
    def test_twelve_hour_to_twenty_four_hour(self, raw, expected):
        assert normalize_time(raw) == expected

    def test_twenty_four_hour_passthrough(self):
        assert normalize_time("19:00") == "19:00"
        assert normalize_time("9:05") == "09:05"
        assert normalize_time("19:00:00") == "19:00"

    @pytest.mark.parametrize("raw", ["", None, "noon", "25:00", "13 PM", "7:75 PM", "later"])
    def test_unparseable_time_is_absent(self, raw):
        assert normalize_time(raw) is None


class TestNormalizeDate:
    """Test cases for date normalization."""

    def test_iso_format(self):
        assert normalize_date("2025-01-15") == date(2025, 1, 15)

    def test_us_format(self):
        assert normalize_date("01/15/2025") == date(2025, 1, 15)

    def test_full_month_name(self):
        assert normalize_date("January 15, 2025") == date(2025, 1, 15)

    def test_iso_datetime_from_web_app(self):
        assert normalize_date("2025-01-15T12:00:00") == date(2025, 1, 15)

    def test_invalid_date_is_absent(self):
        assert normalize_date("not-a-date") is None
        assert normalize_date("2025-02-30") is None
        assert normalize_date("") is None


class TestParseTimestamp:
    """Test cases for deadline and creation timestamps."""

    def test_form_response_timestamp(self):
        assert parse_timestamp("03/01/2025 14:05:09") == datetime(2025, 3, 1, 14, 5, 9)

    def test_iso_timestamp(self):
        assert parse_timestamp("2025-03-01T14:05:00") == datetime(2025, 3, 1, 14, 5)

    def test_date_only_deadline_means_end_of_day(self):
        assert parse_timestamp("2025-03-01", end_of_day=True) == datetime(2025, 3, 1, 23, 59, 59)
        assert parse_timestamp("2025-03-01") == datetime(2025, 3, 1)

    def test_garbage_is_absent(self):
        assert parse_timestamp("whenever") is None


class TestClassification:
    """Test cases for OD status and category matching."""

    @pytest.mark.parametrize("raw, expected", [
        ("Provided", OdStatus.PROVIDED),
        ("OD will be provided", OdStatus.PROVIDED),
        ("YES", OdStatus.PROVIDED),
        ("Not Provided", OdStatus.NOT_PROVIDED),
        ("no", OdStatus.NOT_PROVIDED),
        ("", OdStatus.NOT_MENTIONED),
        ("Not mentioned", OdStatus.NOT_MENTIONED),
        (None, OdStatus.NOT_MENTIONED),
    ])
    def test_od_status(self, raw, expected):
        assert classify_od_status(raw) is expected

    @pytest.mark.parametrize("raw, expected", [
        ("", Category.EVENT),
        (None, Category.EVENT),
        ("event", Category.EVENT),
        ("Events", Category.EVENT),
        ("Recruitment", Category.RECRUITMENT),
        ("recruiting", Category.RECRUITMENT),
        ("workshop?", Category.UNKNOWN),
    ])
    def test_category(self, raw, expected):
        assert classify_category(raw) is expected

    def test_placeholder_names(self):
        assert is_placeholder_name("")
        assert is_placeholder_name("  N/A ")
        assert is_placeholder_name("-")
        assert not is_placeholder_name("Hackathon")


class TestRowNormalizer:
    """Test cases for RowNormalizer.normalize_row."""

    def test_named_row_from_web_app(self):
        row = {
            'event_name': 'Robotics Workshop',
            'event_date': '2025-03-01',
            'start_time': '2:00 PM',
            'end_time': '4:30 PM',
            'venue': 'Hall B',
            'club': 'Robotics Club',
            'description': 'Build a line follower',
            'url': 'https://forms.example.com/robotics',
            'od': 'Provided',
            'type': 'event',
            'deadline': '',
            'created': '2025-02-20T10:00:00',
        }

        event = RowNormalizer().normalize_row(row)

        assert event.name == 'Robotics Workshop'
        assert event.category is Category.EVENT
        assert event.date == date(2025, 3, 1)
        assert event.start_time == '14:00'
        assert event.end_time == '16:30'
        assert event.venue == 'Hall B'
        assert event.organizer == 'Robotics Club'
        assert event.action_url == 'https://forms.example.com/robotics'
        assert event.od_status is OdStatus.PROVIDED
        assert event.deadline is None
        assert event.created_at == datetime(2025, 2, 20, 10, 0)

    def test_csv_header_names_are_case_and_space_insensitive(self):
        row = {'Event Name': ' Quiz Night ', 'Event Date': '03/01/2025', 'Start-Time': '18:00'}

        event = RowNormalizer().normalize_row(row)

        assert event.name == 'Quiz Night'
        assert event.date == date(2025, 3, 1)
        assert event.start_time == '18:00'

    def test_positional_row(self):
        row = dict(enumerate([
            '02/20/2025 10:00:00', 'Career Fair', '2025-03-05', '10 AM', '',
            'Main Block', 'Placement Cell', '', '', 'no', 'Recruitment', '2025-03-04',
        ]))

        event = RowNormalizer().normalize_row(row)

        assert event.name == 'Career Fair'
        assert event.category is Category.RECRUITMENT
        assert event.start_time == '10:00'
        assert event.end_time is None
        assert event.od_status is OdStatus.NOT_PROVIDED
        assert event.deadline == datetime(2025, 3, 4, 23, 59, 59)
        assert event.created_at == datetime(2025, 2, 20, 10, 0)

    def test_row_missing_every_optional_field(self):
        event = RowNormalizer().normalize_row({'name': 'Bare'})

        assert event.name == 'Bare'
        assert event.category is Category.EVENT
        assert event.date is None
        assert event.start_time is None
        assert event.end_time is None
        assert event.venue == ''
        assert event.organizer == ''
        assert event.description == ''
        assert event.action_url is None
        assert event.od_status is OdStatus.NOT_MENTIONED
        assert event.deadline is None
        assert event.created_at is None

    def test_empty_row_never_fails(self):
        event = RowNormalizer().normalize_row({})

        assert event.name == ''
        assert event.category is Category.EVENT

    def test_invalid_values_degrade_to_absent(self):
        row = {
            'name': 'Broken',
            'date': '31/31/2025',
            'start_time': 'after lunch',
            'deadline': 'soon',
            'type': 'gala',
        }

        event = RowNormalizer().normalize_row(row)

        assert event.date is None
        assert event.start_time is None
        assert event.deadline is None
        assert event.category is Category.UNKNOWN

    def test_none_values_become_empty(self):
        event = RowNormalizer().normalize_row({'name': 'X', 'venue': None, 'url': None})

        assert event.venue == ''
        assert event.action_url is None


KOLKATA = ZoneInfo('Asia/Kolkata')


class TestSourceTimezone:
    """UTC-serialized web app values are read in the sheet's own zone."""

    def test_utc_serialized_midnight_keeps_sheet_date(self, utc_host):
        # 2025-03-06 00:00 in Kolkata
        assert normalize_date('2025-03-05T18:30:00.000Z', KOLKATA) == date(2025, 3, 6)

    def test_host_zone_used_without_source_zone(self, utc_host):
        assert normalize_date('2025-03-05T18:30:00.000Z') == date(2025, 3, 5)

    def test_timestamp_converted_to_sheet_zone(self, utc_host):
        assert parse_timestamp('2025-03-10T12:29:59Z', tz=KOLKATA) == datetime(2025, 3, 10, 17, 59, 59)

    def test_aware_datetime_converted_to_sheet_zone(self):
        value = datetime(2025, 3, 5, 18, 30, tzinfo=timezone.utc)

        assert parse_timestamp(value, tz=KOLKATA) == datetime(2025, 3, 6, 0, 0)
        assert normalize_date(value, KOLKATA) == date(2025, 3, 6)

    def test_row_normalizer_threads_zone(self, utc_host):
        row = {
            'event_name': 'Hackathon',
            'event_date': '2025-03-05T18:30:00.000Z',
            'created': '2025-03-01T04:30:00.000Z',
            'deadline': '2025-03-04T18:30:00.000Z',
        }

        event = RowNormalizer(tz=KOLKATA).normalize_row(row)

        assert event.date == date(2025, 3, 6)
        assert event.created_at == datetime(2025, 3, 1, 10, 0)
        assert event.deadline == datetime(2025, 3, 5, 0, 0)
