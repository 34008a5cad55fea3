from datetime import datetime

import pytest

from mstodo.dates import (
    DateParseError,
    DateParser,
    DayTooShortError,
    InvalidDateError,
    InvalidDayError,
    InvalidTimeError,
)

from .conftest import day

JAN_2 = datetime(2021, 1, 2)
JAN_2_EVENING = datetime(2021, 1, 2, 20, 13)


@pytest.mark.parametrize("text", [
    "02/Jan/2021",
    "02/JAN/2021",
    "02-Jan-2021",
    "02-JAN-2021",
    "02-Jan-21",
    "02-JAN-21",
    "2/Jan/2021",
    "2/JAN/2021",
    "02/01/2021",
    "2/01/2021",
    "2/01",
    "02-Jan 2021",
    "02-Jan",
    "Jan 02, 2021",
    "Jan 02",
    "Jan 2",
    "January 02, 2021",
])
def test_parse_date_layouts(parser, text):
    assert parser.parse_date(text) == JAN_2


@pytest.mark.parametrize("text", [
    "02/Jan/2021 at 20:13",
    "02/JAN/2021, at 20:13",
    "02-Jan-2021 20:13",
    "02-JAN-2021, 20:13",
    "20:13 02-Jan-21",
    "20:13, 02-JAN-21",
    "2/Jan/2021 at 08:13 PM",
    "2/JAN/2021 at 08:13 pm",
    "02/01/2021 at 08:13PM",
    "2/01/2021 at 08:13pm",
    "2/01, 08:13pm",
    "8:13PM, 02-Jan 2021",
    "8:13pm, 02-Jan",
    "08:13PM on Jan 02, 2021",
    "08:13 pm, on Jan 02",
    "Jan 2 8:13PM",
    "January 02, 2021, 8:13pm",
])
def test_parse_datetime_layouts(parser, text):
    assert parser.parse_datetime(text) == JAN_2_EVENING


def test_layout_without_year_uses_reference_year():
    parser = DateParser(clock=lambda: datetime(2024, 3, 1))
    assert parser.parse_date("29/02") == datetime(2024, 2, 29)


def test_surrounding_whitespace_is_ignored(parser):
    assert parser.parse_date("  02/Jan/2021 ") == JAN_2


@pytest.mark.parametrize("text,expected", [
    ("Monday", day(5, 7)),
    ("mon", day(5, 7)),
    ("Sunday", day(4, 7)),
    ("Saturday", day(10, 7)),
    ("this Monday", day(12, 7)),
    ("this wed", day(7, 7)),
    ("last Mon", day(5, 7)),
    ("last Wednesday", day(30, 6)),
    ("LAST sun", day(4, 7)),
    ("next Wednesday", day(14, 7)),
    ("next fri", day(9, 7)),
])
def test_parse_weekday_phrases(parser, text, expected):
    assert parser.parse_date(text) == expected


@pytest.mark.parametrize("text,expected", [
    ("next Friday at 15:00", datetime(2021, 7, 9, 15, 0)),
    ("last mon at 8:13pm", datetime(2021, 7, 5, 20, 13)),
    ("thursday 9:30 AM", datetime(2021, 7, 8, 9, 30)),
])
def test_parse_weekday_with_time(parser, text, expected):
    assert parser.parse_datetime(text) == expected


def test_weekday_must_lead_the_phrase(parser):
    with pytest.raises(InvalidDayError):
        parser.parse_datetime("3:00 pm on this sun")


@pytest.mark.parametrize("text,error", [
    ("mo", DayTooShortError),
    ("last", DayTooShortError),
    ("next  ", DayTooShortError),
    ("day", InvalidDayError),
    ("garbage", InvalidDayError),
    ("31/02/2021", InvalidDayError),
])
def test_parse_date_errors(parser, text, error):
    with pytest.raises(error):
        parser.parse_date(text)


def test_weekday_errors_are_invalid_dates(parser):
    with pytest.raises(InvalidDateError) as excinfo:
        parser.parse_date("garbage")
    assert excinfo.value.kind == "invalid day"
    assert "garbage" in str(excinfo.value)


def test_datetime_mode_requires_a_time(parser):
    with pytest.raises(InvalidTimeError):
        parser.parse_datetime("last Mon")


@pytest.mark.parametrize("text", ["02/Jan/2021", "Jan 2"])
def test_datetime_mode_reports_missing_time_after_a_fixed_date(parser, text):
    with pytest.raises(InvalidTimeError) as excinfo:
        parser.parse_datetime(text)
    assert excinfo.value.kind == "invalid time"


def test_datetime_mode_rejects_impossible_time(parser):
    with pytest.raises(InvalidTimeError):
        parser.parse_datetime("friday at 25:00")


def test_errors_are_value_errors(parser):
    with pytest.raises(ValueError):
        parser.parse_date("garbage")
    assert issubclass(InvalidTimeError, DateParseError)


def test_clock_is_read_when_parsing():
    ticks = iter([datetime(2021, 7, 7), datetime(2021, 7, 14)])
    parser = DateParser(clock=lambda: next(ticks))
    assert parser.parse_date("mon") == day(5, 7)
    assert parser.parse_date("mon") == day(12, 7)
