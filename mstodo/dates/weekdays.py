"""Weekday arithmetic relative to a reference day."""

from datetime import date, timedelta
from enum import Enum, IntEnum
from typing import Optional

DAYS_IN_WEEK = 7


class Qualifier(str, Enum):
    """Relative word in front of a weekday name"""
    NONE = "none"
    THIS = "this"
    LAST = "last"
    NEXT = "next"

    @classmethod
    def from_word(cls, word: str) -> Optional["Qualifier"]:
        """Return the qualifier spelled by ``word``, or None if it is not one"""
        word = word.lower()
        if word in (cls.THIS.value, cls.LAST.value, cls.NEXT.value):
            return cls(word)
        return None


class Weekday(IntEnum):
    """Days of the week, with weeks starting on Sunday"""
    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6

    @property
    def prefix(self) -> str:
        return self.name[:3].lower()

    @classmethod
    def from_prefix(cls, prefix: str) -> Optional["Weekday"]:
        prefix = prefix[:3].lower()
        for day in cls:
            if day.prefix == prefix:
                return day
        return None


def weekday_of(day: date) -> Weekday:
    # isoweekday() is Monday=1 .. Sunday=7
    return Weekday(day.isoweekday() % DAYS_IN_WEEK)


def floor_mod(value: int, modulus: int = DAYS_IN_WEEK) -> int:
    """Modulo whose result has the sign of the modulus.

    Python's ``%`` already behaves this way; the helper names the intent.
    """
    return value % modulus


def resolve_weekday(qualifier: Qualifier, weekday: Weekday, today: date) -> date:
    """Resolve ``weekday`` to a calendar date relative to ``today``.

    - none: the occurrence in the current week, preferring today or the past
    - this: 0-6 days forward
    - last: 1-7 days back, never today
    - next: 1-7 days forward, never today
    """
    current = weekday_of(today)

    if qualifier == Qualifier.NONE:
        return today + timedelta(days=int(weekday) - int(current))

    if qualifier == Qualifier.THIS:
        return today + timedelta(days=floor_mod(weekday - current))

    if qualifier == Qualifier.LAST:
        back = floor_mod(current - weekday) or DAYS_IN_WEEK
        return today - timedelta(days=back)

    forward = floor_mod(weekday - current) or DAYS_IN_WEEK
    return today + timedelta(days=forward)
