from .errors import (
    DateParseError,
    DayTooShortError,
    EmptyFilterError,
    InvalidDateError,
    InvalidDayError,
    InvalidTimeError,
    MissingQualifierError,
    TooManyPartsError,
)
from .layouts import format_instant
from .parser import Clock, DateParser
from .ranges import DateRange, matches, to_local_naive
from .weekdays import Qualifier, Weekday, resolve_weekday, weekday_of

__all__ = [
    "Clock",
    "DateParseError",
    "DateParser",
    "DateRange",
    "DayTooShortError",
    "EmptyFilterError",
    "InvalidDateError",
    "InvalidDayError",
    "InvalidTimeError",
    "MissingQualifierError",
    "Qualifier",
    "TooManyPartsError",
    "Weekday",
    "format_instant",
    "matches",
    "resolve_weekday",
    "to_local_naive",
    "weekday_of",
]
