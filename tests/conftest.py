from datetime import date, datetime

import pytest

from mstodo.dates import DateParser

# Wednesday
TODAY = datetime(2021, 7, 7, 10, 30)


def day(d: int, m: int, year: int = 2021) -> datetime:
    return datetime(year, m, d)


@pytest.fixture
def parser():
    return DateParser(clock=lambda: TODAY)


@pytest.fixture
def today() -> date:
    return TODAY.date()
