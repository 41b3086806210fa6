"""
Day ranking: score a rolling window of upcoming days for a life event.

For each day the calendar converter supplies the day pillar, the Ten God
relation to the reference day stem gives a base rating, and the event's
favorability profile adds a bonus. Days are sorted by score with ties
kept in date order.
"""

from dataclasses import dataclass
from datetime import date
from types import MappingProxyType
from typing import Optional
import logging

from ganzhi.astro_calendar import date_window, day_of_week
from ganzhi.bazi import Pillar
from ganzhi.errors import UnknownEventError
from ganzhi.lunar import LunarConvert, LunarPythonConverter
from ganzhi.ten_gods import Rating, analyze_relation

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 30
TOP_COUNT = 3
NEXT_COUNT = 5

BASE_SCORE = MappingProxyType({
    Rating.FAVORABLE: 2,
    Rating.NEUTRAL: 1,
    Rating.UNFAVORABLE: 0,
})
KEYWORD_BONUS = 2
BRANCH_BONUS = 1


@dataclass(frozen=True)
class EventProfile:
    name: str
    chinese: str
    keywords: tuple = ()      # relation-label fragments, e.g. "财" matches 正财/偏财
    branches: frozenset = frozenset()


EVENT_PROFILES = MappingProxyType({
    "none": EventProfile("none", "通用"),
    "wedding": EventProfile("wedding", "嫁娶", ("财", "官"), frozenset("子午卯酉")),
    "moving": EventProfile("moving", "搬家", ("印", "比"), frozenset("寅辰申戌")),
    "business": EventProfile("business", "开业", ("财", "食"), frozenset("子辰申巳")),
    "travel": EventProfile("travel", "出行", ("食", "印"), frozenset("寅申巳亥")),
    "contract": EventProfile("contract", "签约", ("官", "印"), frozenset("丑辰未戌")),
    "study": EventProfile("study", "考试", ("印", "食"), frozenset("卯巳午")),
    "medical": EventProfile("medical", "求医", ("印",), frozenset("亥子")),
})


def event_profile(name: str) -> EventProfile:
    try:
        return EVENT_PROFILES[name]
    except KeyError:
        raise UnknownEventError(
            f"Unknown event category {name!r}; expected one of {sorted(EVENT_PROFILES)}"
        ) from None


@dataclass(frozen=True)
class DayCandidate:
    day: date
    pillar: Pillar
    relation: str
    rating: Rating
    score: int

    def to_dict(self):
        return {
            **day_of_week(self.day),
            "pillar": self.pillar.code,
            "relation": self.relation,
            "rating": self.rating.value,
            "score": self.score,
        }


@dataclass(frozen=True)
class DayRanking:
    event: EventProfile
    candidates: tuple  # every scored day, in date order
    top: tuple
    next: tuple

    def to_dict(self):
        return {
            "event": self.event.name,
            "event_chinese": self.event.chinese,
            "window_start": self.candidates[0].day.isoformat(),
            "window_days": len(self.candidates),
            "top": [c.to_dict() for c in self.top],
            "next": [c.to_dict() for c in self.next],
        }


def event_bonus(relation: str, branch: str, profile: EventProfile) -> int:
    bonus = 0
    if any(keyword in relation for keyword in profile.keywords):
        bonus += KEYWORD_BONUS
    if branch in profile.branches:
        bonus += BRANCH_BONUS
    return bonus


def score_day(rating: Rating, relation: str, branch: str, profile: EventProfile) -> int:
    """Base rating score (favorable 2, neutral 1, unfavorable 0) plus event bonus."""
    return BASE_SCORE[rating] + event_bonus(relation, branch, profile)


def rank_days(reference_stem: str, event: str = "none", start: Optional[date] = None,
              window: int = DEFAULT_WINDOW_DAYS,
              converter: Optional[LunarConvert] = None) -> DayRanking:
    """
    Rank the ``window`` days starting at ``start`` for an event.

    Args:
        reference_stem: the day stem every day is compared against
        event: key of EVENT_PROFILES
        start: first day of the window (today when omitted)
        window: number of days, at least 1
        converter: calendar converter (lunar-python when omitted)

    Returns:
        DayRanking with the top 3 and the following 5 candidates

    Raises:
        UnknownEventError: for an unknown event category
        CalendarRangeError: when a day in the window cannot be converted
    """
    profile = event_profile(event)
    convert = converter or LunarPythonConverter()
    days = date_window(start or date.today(), window)

    candidates = []
    for day in days:
        lunar = convert(day.year, day.month, day.day)
        pillar = Pillar.from_code(lunar.day_pillar, "day")
        result = analyze_relation(reference_stem, pillar.stem.chinese)
        candidates.append(DayCandidate(
            day=day,
            pillar=pillar,
            relation=result.relation,
            rating=result.rating,
            score=score_day(result.rating, result.relation, pillar.branch.chinese, profile),
        ))

    # sorted() is stable: equal scores stay in date order
    ranked = sorted(candidates, key=lambda c: c.score, reverse=True)
    logger.info("Ranked %d days from %s for %s (best score %d)",
                len(ranked), days[0], profile.name, ranked[0].score)

    return DayRanking(
        event=profile,
        candidates=tuple(candidates),
        top=tuple(ranked[:TOP_COUNT]),
        next=tuple(ranked[TOP_COUNT:TOP_COUNT + NEXT_COUNT]),
    )
