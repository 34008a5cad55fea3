"""Natural-language date parsing.

``DateParser`` turns strings such as ``"02/Jan/2021"``, ``"next Friday"`` or
``"last mon at 8:13pm"`` into datetimes, and range expressions such as
``"start Monday; end Friday"`` into a ``DateRange``.

All relative arithmetic uses one reference day, read from the injected clock
once per public call.
"""

import logging
import re
from datetime import date, datetime, time
from typing import Callable, Iterable, Optional, Tuple

from .errors import (
    DayTooShortError,
    EmptyFilterError,
    InvalidDayError,
    InvalidTimeError,
    MissingQualifierError,
    TooManyPartsError,
)
from .layouts import DATE_LAYOUTS, Layout, datetime_layouts, parse_clock_time
from .ranges import DateRange
from .weekdays import Qualifier, Weekday, resolve_weekday

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

RANGE_SEPARATOR = ";"
RANGE_CUTSET = "[] '\""
START_LABEL = "start"
END_LABEL = "end"
MAX_RANGE_PARTS = 2
MIN_DAY_LENGTH = 3

TIME_PATTERN = re.compile(r"\d{1,2}:\d{2}(?:\s*[ap]m)?", re.IGNORECASE)


class DateParser:
    """Parse dates, date-times and date ranges against a reference clock"""

    def __init__(self, clock: Clock = datetime.now):
        self.clock = clock

    def today(self) -> date:
        return self.clock().date()

    # --- Single values ---

    def parse_date(self, text: str) -> datetime:
        """Parse a date; the result is at midnight"""
        return self.parse_token(text, want_time=False)

    def parse_datetime(self, text: str) -> datetime:
        """Parse a date with a time of day"""
        return self.parse_token(text, want_time=True)

    def parse_token(self, text: str, want_time: bool, today: Optional[date] = None) -> datetime:
        """Resolve one date token.

        Fixed layouts are tried first. Failing that, the text is read as a
        weekday phrase ("next fri"), and in date+time mode a clock time is
        scanned out of it separately.
        """
        if today is None:
            today = self.today()
        text = text.strip()

        layouts = datetime_layouts() if want_time else DATE_LAYOUTS
        parsed = _first_match(layouts, text, today.year)
        if parsed is not None:
            return parsed

        if want_time and _first_match(DATE_LAYOUTS, text, today.year) is not None:
            raise InvalidTimeError(text, "the date needs a time such as 15:00 or 3:00 pm")

        day = self._parse_weekday_phrase(text, today)
        if not want_time:
            return datetime.combine(day, time())

        return datetime.combine(day, _scan_time(text))

    def _parse_weekday_phrase(self, text: str, today: date) -> date:
        words = text.split()
        qualifier = Qualifier.NONE
        if words:
            found = Qualifier.from_word(words[0])
            if found is not None:
                qualifier = found
                words = words[1:]

        rest = " ".join(words)
        if len(rest) < MIN_DAY_LENGTH:
            raise DayTooShortError(text, f"expected at least {MIN_DAY_LENGTH} characters of a weekday")

        weekday = Weekday.from_prefix(rest)
        if weekday is None:
            raise InvalidDayError(text, f"'{rest[:MIN_DAY_LENGTH]}' is not a weekday")

        resolved = resolve_weekday(qualifier, weekday, today)
        logger.debug(f"Resolved '{text}' as {qualifier.value} {weekday.name.title()}: {resolved}")
        return resolved

    # --- Ranges ---

    def parse_range(self, text: str, with_time: bool = False) -> DateRange:
        """Parse ``"start <token>; end <token>"`` into a DateRange.

        Either side may be omitted and the order is free. A repeated label
        replaces the earlier value.
        """
        if not text.strip(RANGE_CUTSET):
            raise EmptyFilterError(text)

        parts = text.split(RANGE_SEPARATOR)
        if len(parts) > MAX_RANGE_PARTS:
            raise TooManyPartsError(text, f"expected at most {MAX_RANGE_PARTS} parts separated by '{RANGE_SEPARATOR}'")

        today = self.today()
        bounds = {START_LABEL: None, END_LABEL: None}
        for part in parts:
            label, token = _split_label(part)
            bounds[label] = self.parse_token(token, want_time=with_time, today=today)

        return DateRange(start=bounds[START_LABEL], end=bounds[END_LABEL])


def _first_match(layouts: Iterable[Layout], text: str, year: int) -> Optional[datetime]:
    for layout in layouts:
        try:
            return layout.parse(text, year)
        except ValueError:
            continue
    return None


def _scan_time(text: str) -> time:
    match = TIME_PATTERN.search(text)
    if match is None:
        raise InvalidTimeError(text, "expected a time such as 15:00 or 3:00 pm")
    try:
        return parse_clock_time(match.group(0))
    except ValueError:
        raise InvalidTimeError(text, f"'{match.group(0)}' is not a valid time")


def _split_label(part: str) -> Tuple[str, str]:
    part = part.lower().strip(RANGE_CUTSET)
    for label in (START_LABEL, END_LABEL):
        if part.startswith(label):
            return label, part[len(label):].strip()
    raise MissingQualifierError(part, f"each part must begin with '{START_LABEL}' or '{END_LABEL}'")
