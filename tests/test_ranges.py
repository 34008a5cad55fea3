from datetime import datetime, timezone

import pytest

from mstodo.dates import (
    DateRange,
    EmptyFilterError,
    InvalidDayError,
    MissingQualifierError,
    TooManyPartsError,
    matches,
)

from .conftest import day


@pytest.mark.parametrize("text,expected", [
    ("start Monday; end Friday", DateRange(start=day(5, 7), end=day(9, 7))),
    ("end Friday; start Monday", DateRange(start=day(5, 7), end=day(9, 7))),
    ("start Monday", DateRange(start=day(5, 7))),
    ("end Friday", DateRange(end=day(9, 7))),
    ("[START mon ; END fri]", DateRange(start=day(5, 7), end=day(9, 7))),
    ("'start 01/Jul/2021; end 02/Jul/2021'", DateRange(start=day(1, 7), end=day(2, 7))),
])
def test_parse_range(parser, text, expected):
    assert parser.parse_range(text) == expected


def test_parse_range_with_time(parser):
    result = parser.parse_range("start Monday at 8:00; end Friday at 8:13pm", with_time=True)
    assert result == DateRange(start=datetime(2021, 7, 5, 8, 0), end=datetime(2021, 7, 9, 20, 13))


def test_repeated_label_keeps_last_value(parser):
    assert parser.parse_range("start mon; start tue") == DateRange(start=day(6, 7))


@pytest.mark.parametrize("text,error", [
    ("", EmptyFilterError),
    ("  [ ] ", EmptyFilterError),
    ("a;b;c", TooManyPartsError),
    ("monday", MissingQualifierError),
    ("start monday; friday", MissingQualifierError),
    ("start garbage", InvalidDayError),
])
def test_parse_range_errors(parser, text, error):
    with pytest.raises(error):
        parser.parse_range(text)


def test_contains_is_inclusive():
    week = DateRange(start=day(5, 7), end=day(9, 7))
    assert week.contains(day(5, 7))
    assert week.contains(day(9, 7))
    assert week.contains(datetime(2021, 7, 7, 12))
    assert not week.contains(datetime(2021, 7, 9, 0, 1))
    assert not week.contains(day(4, 7))


def test_open_ended_ranges():
    assert DateRange(start=day(5, 7)).contains(day(1, 1, 2030))
    assert DateRange(end=day(5, 7)).contains(day(1, 1, 1990))


def test_missing_candidate_never_matches():
    assert not DateRange(start=day(5, 7)).contains(None)
    assert not DateRange(end=day(5, 7)).contains(None)


def test_inverted_range_matches_nothing():
    inverted = DateRange(start=day(9, 7), end=day(5, 7))
    assert not inverted.contains(day(7, 7))


def test_aware_candidate_is_compared_in_local_time():
    candidate = datetime(2021, 7, 7, 12, tzinfo=timezone.utc)
    local = candidate.astimezone().replace(tzinfo=None)
    assert DateRange(start=local, end=local).contains(candidate)


def test_matches_without_range_accepts_everything():
    assert matches(None, None)
    assert matches(None, day(1, 1))
    assert not matches(DateRange(start=day(5, 7)), None)
