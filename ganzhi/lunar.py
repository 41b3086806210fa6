"""
Gregorian -> lunar calendar conversion.

The derivation engine only needs one collaborator: a callable
``convert(year, month, day) -> LunarDate``. ``LunarPythonConverter`` is
the default implementation, built on the lunar-python library. Any other
callable with the same signature (a fixture, a cached service client)
can be passed wherever a converter is accepted.
"""

from dataclasses import dataclass, asdict
from datetime import date
from typing import Callable
import logging

from lunar_python import Solar

from ganzhi.errors import CalendarRangeError

logger = logging.getLogger(__name__)

MIN_YEAR = 1901
MAX_YEAR = 2099


@dataclass(frozen=True)
class LunarDate:
    month_label: str        # e.g. "正月", "闰二月"
    day_label: str          # e.g. "初一"
    is_leap_month: bool
    year_pillar: str        # two-character codes, e.g. "甲辰"
    month_pillar: str
    day_pillar: str
    solar_term: str = ""    # name of the solar term falling on this day, or ""

    def to_dict(self):
        return asdict(self)


LunarConvert = Callable[[int, int, int], LunarDate]


class LunarPythonConverter:
    """
    Converter backed by lunar-python.

    The year pillar changes at 立春 (Start of Spring) rather than at the
    lunar new year; month pillars change on the day of each 节 term.
    """

    def __init__(self, min_year: int = MIN_YEAR, max_year: int = MAX_YEAR):
        self.min_year = min_year
        self.max_year = max_year

    def __call__(self, year: int, month: int, day: int) -> LunarDate:
        try:
            date(year, month, day)
        except (TypeError, ValueError) as exc:
            raise CalendarRangeError(f"Invalid Gregorian date {year}-{month}-{day}") from exc
        if not self.min_year <= year <= self.max_year:
            raise CalendarRangeError(
                f"Year {year} outside supported range {self.min_year}-{self.max_year}"
            )

        try:
            lunar = Solar.fromYmd(year, month, day).getLunar()
        except (ValueError, IndexError, KeyError) as exc:
            raise CalendarRangeError(f"Calendar conversion failed for {year}-{month}-{day}") from exc

        result = LunarDate(
            month_label=f"{lunar.getMonthInChinese()}月",
            day_label=lunar.getDayInChinese(),
            is_leap_month=lunar.getMonth() < 0,
            year_pillar=lunar.getYearInGanZhiByLiChun(),
            month_pillar=lunar.getMonthInGanZhi(),
            day_pillar=lunar.getDayInGanZhi(),
            solar_term=lunar.getJieQi() or "",
        )
        logger.debug("Converted %04d-%02d-%02d -> %s", year, month, day, result)
        return result


def lunar_convert(year: int, month: int, day: int) -> LunarDate:
    """Convert with the default lunar-python converter."""
    return LunarPythonConverter()(year, month, day)
