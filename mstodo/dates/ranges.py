"""Date ranges and the filter check applied to each task field."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class DateRange:
    """Inclusive range with optional open ends.

    Start and end are not checked against each other; an inverted range
    simply matches nothing.
    """
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    def contains(self, candidate: Optional[datetime]) -> bool:
        if candidate is None:
            return False

        candidate = to_local_naive(candidate)
        if self.start is not None and candidate < self.start:
            return False
        if self.end is not None and candidate > self.end:
            return False
        return True


def to_local_naive(value: datetime) -> datetime:
    """Convert an aware datetime to naive local time; naive values pass through"""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def matches(date_range: Optional[DateRange], candidate: Optional[datetime]) -> bool:
    """True when no range was requested, otherwise whether ``candidate`` is in it"""
    if date_range is None:
        return True
    return date_range.contains(candidate)
