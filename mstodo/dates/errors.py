"""Errors raised by the date parser.

Each error carries a ``kind`` so the CLI can report which stage failed.
"""


class DateParseError(ValueError):
    """Base class for every date parsing failure"""

    kind = "invalid input"

    def __init__(self, text: str, detail: str = ""):
        self.text = text
        self.detail = detail
        message = f"{self.kind} '{text}'"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class EmptyFilterError(DateParseError):
    kind = "empty filter"


class TooManyPartsError(DateParseError):
    kind = "too many parts"


class MissingQualifierError(DateParseError):
    kind = "missing qualifier"


class InvalidDateError(DateParseError):
    kind = "invalid date"


class InvalidTimeError(DateParseError):
    kind = "invalid time"


class InvalidDayError(InvalidDateError):
    kind = "invalid day"


class DayTooShortError(InvalidDateError):
    kind = "day too short"
