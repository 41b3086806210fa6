"""
Shared fixtures.

The calendar converters here are deterministic stand-ins for lunar-python
so the core can be tested without the library's tables.
"""

from datetime import date

import pytest

from ganzhi.bazi import EARTHLY_BRANCHES, HEAVENLY_STEMS, SEXAGENARY_CYCLE
from ganzhi.errors import CalendarRangeError
from ganzhi.lunar import LunarDate

# 2000-01-01 was a 戊午 day (index 54 of the 60-cycle)
ANCHOR_DATE = date(2000, 1, 1)
ANCHOR_INDEX = 54

# Five Tigers: year stem index -> stem index of the 寅 month
TIGER_START = {0: 2, 5: 2, 1: 4, 6: 4, 2: 6, 7: 6, 3: 8, 8: 8, 4: 0, 9: 0}


class CycleConverter:
    """Day pillar from the 60-day cycle; month branch approximated by calendar month."""

    def __init__(self):
        self.calls = []

    def __call__(self, year, month, day):
        self.calls.append((year, month, day))
        if not 1901 <= year <= 2099:
            raise CalendarRangeError(f"Year {year} out of range")
        d = date(year, month, day)
        day_index = (ANCHOR_INDEX + d.toordinal() - ANCHOR_DATE.toordinal()) % 60
        year_index = (year - 4) % 60
        month_branch = month % 12
        month_stem = (TIGER_START[year_index % 10] + (month_branch - 2) % 12) % 10
        return LunarDate(
            month_label=f"{month}月",
            day_label=f"{day}日",
            is_leap_month=False,
            year_pillar=SEXAGENARY_CYCLE[year_index],
            month_pillar=HEAVENLY_STEMS[month_stem].chinese + EARTHLY_BRANCHES[month_branch].chinese,
            day_pillar=SEXAGENARY_CYCLE[day_index],
        )


class ScriptedConverter:
    """Returns preset day pillars, one per consecutive date from ``start``."""

    def __init__(self, start, day_pillars, year_pillar="甲辰", month_pillar="丙寅"):
        self.start = start
        self.day_pillars = list(day_pillars)
        self.year_pillar = year_pillar
        self.month_pillar = month_pillar

    def __call__(self, year, month, day):
        offset = (date(year, month, day) - self.start).days
        return LunarDate(
            month_label="正月",
            day_label="初一",
            is_leap_month=False,
            year_pillar=self.year_pillar,
            month_pillar=self.month_pillar,
            day_pillar=self.day_pillars[offset],
        )


@pytest.fixture
def cycle_converter():
    return CycleConverter()


@pytest.fixture
def scripted_converter():
    return ScriptedConverter
