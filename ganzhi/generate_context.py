"""
Generate the daily context for a profile on a given date.

Orchestrates the chart, today's Ten God relation and the day ranking
into a single JSON-ready payload. Without a usable birth date the chart
is skipped and the relation falls back to a supplied (or default) day
stem.
"""

from datetime import date
from typing import Optional
import logging

from ganzhi.astro_calendar import day_of_week
from ganzhi.bazi import Pillar
from ganzhi.create_chart import BirthMoment, create_chart
from ganzhi.day_ranking import DEFAULT_WINDOW_DAYS, rank_days
from ganzhi.errors import MissingInputError
from ganzhi.lunar import LunarConvert, LunarPythonConverter
from ganzhi.ten_gods import analyze_relation

logger = logging.getLogger(__name__)

DEFAULT_DAY_STEM = "甲"


def generate_daily_context(target_date: date, moment: Optional[BirthMoment] = None,
                           day_stem: Optional[str] = None, event: str = "none",
                           window: int = DEFAULT_WINDOW_DAYS,
                           converter: Optional[LunarConvert] = None) -> dict:
    """
    Build the context payload for ``target_date``.

    Args:
        target_date: the day being read ("today")
        moment: birth data of the profile, if any
        day_stem: reference day stem used when no chart can be derived
        event: event category for the ranking
        window: ranking window in days, starting at ``target_date``
        converter: calendar converter (lunar-python when omitted)
    """
    convert = converter or LunarPythonConverter()

    chart = None
    try:
        if moment is None:
            raise MissingInputError("No birth data supplied")
        chart = create_chart(moment, converter=convert)
        reference_stem = chart.day_master.chinese
    except MissingInputError as exc:
        reference_stem = day_stem or DEFAULT_DAY_STEM
        logger.info("%s; using day stem %s for relation analysis", exc, reference_stem)

    lunar = convert(target_date.year, target_date.month, target_date.day)
    today_pillar = Pillar.from_code(lunar.day_pillar, "day")
    relation = analyze_relation(reference_stem, today_pillar.stem.chinese)

    ranking = rank_days(reference_stem, event=event, start=target_date,
                        window=window, converter=convert)

    return {
        "target_date": target_date.isoformat(),
        "calendar": day_of_week(target_date),
        "lunar": lunar.to_dict(),
        "reference_day_stem": reference_stem,
        "today": {
            "pillar": today_pillar.to_dict(),
            **relation.to_dict(),
        },
        "chart": chart.to_dict() if chart else None,
        "recommendations": ranking.to_dict(),
    }
