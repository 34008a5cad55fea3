"""Accepted textual date and time layouts.

Layouts are ``strptime`` patterns. Month names match in any case and
``%d``/``%m``/``%H``/``%I`` accept one or two digits, so one pattern covers
``02/Jan/2021``, ``2/JAN/2021`` and friends.
"""

import functools
from dataclasses import dataclass
from datetime import datetime, time
from typing import Tuple

YEAR_DIRECTIVES = ("%Y", "%y")


@dataclass(frozen=True)
class Layout:
    pattern: str

    @property
    def has_year(self) -> bool:
        return any(d in self.pattern for d in YEAR_DIRECTIVES)

    def parse(self, text: str, default_year: int) -> datetime:
        """Parse ``text``; raises ValueError when the layout does not match.

        Layouts without a year are parsed with ``default_year`` appended so
        29 February resolves in a leap reference year.
        """
        if self.has_year:
            return datetime.strptime(text, self.pattern)
        return datetime.strptime(f"{text} {default_year}", f"{self.pattern} %Y")


# Four-digit year forms come before two-digit ones
DATE_LAYOUTS: Tuple[Layout, ...] = tuple(Layout(p) for p in (
    "%d/%b/%Y",
    "%d-%b-%Y",
    "%d-%b-%y",
    "%d/%m/%Y",
    "%d/%m/%y",
    "%d-%m-%Y",
    "%d/%m",
    "%d-%b %Y",
    "%d-%b",
    "%d %b %Y",
    "%d %B %Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%b %d",
    "%B %d",
))

TIME_LAYOUTS: Tuple[str, ...] = (
    "%H:%M",
    "%I:%M %p",
    "%I:%M%p",
)

# {d} is the date layout, {t} the time layout
CONNECTIVES: Tuple[str, ...] = (
    "{d} at {t}",
    "{d}, at {t}",
    "{d} {t}",
    "{d}, {t}",
    "{t} {d}",
    "{t}, {d}",
    "{t} on {d}",
    "{t}, on {d}",
)

CANONICAL_DATE = "%d/%b/%Y"
CANONICAL_DATETIME = "%d/%b/%Y at %H:%M"


@functools.lru_cache(maxsize=None)
def datetime_layouts() -> Tuple[Layout, ...]:
    """Every date layout combined with every time layout and connective"""
    return tuple(
        Layout(connective.format(d=date_layout.pattern, t=time_layout))
        for date_layout in DATE_LAYOUTS
        for time_layout in TIME_LAYOUTS
        for connective in CONNECTIVES
    )


def parse_clock_time(text: str) -> time:
    """Parse a time of day using the first time layout that fits"""
    for pattern in TIME_LAYOUTS:
        try:
            return datetime.strptime(text, pattern).time()
        except ValueError:
            continue
    raise ValueError(f"no time layout matches '{text}'")


def format_instant(instant: datetime, with_time: bool = False) -> str:
    """Render ``instant`` in a layout the parser accepts"""
    return instant.strftime(CANONICAL_DATETIME if with_time else CANONICAL_DATE)
