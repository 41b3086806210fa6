"""
Tests for the day ranking engine.
"""

from datetime import date, timedelta

import pytest

from ganzhi.day_ranking import (
    EVENT_PROFILES,
    EventProfile,
    event_bonus,
    rank_days,
    score_day,
)
from ganzhi.errors import CalendarRangeError, UnknownEventError
from ganzhi.ten_gods import Rating

START = date(2024, 3, 1)

# relations as seen from a 甲 day stem, scored for "wedding" (财/官, 子午卯酉)
SCRIPTED_DAYS = [
    "甲子",  # 比肩 neutral 1 + branch 1 = 2
    "己卯",  # 正财 favorable 2 + keyword 2 + branch 1 = 5
    "庚辰",  # 七杀 unfavorable 0
    "辛酉",  # 正官 neutral 1 + keyword 2 + branch 1 = 4
    "戊午",  # 偏财 favorable 2 + keyword 2 + branch 1 = 5
    "丙寅",  # 食神 favorable 2
    "乙丑",  # 劫财 neutral 1 + keyword 2 = 3
    "丁巳",  # 伤官 unfavorable 0 + keyword 官 2 = 2
    "壬申",  # 印星 favorable 2
]


class TestScoring:

    def test_base_scores(self):
        none = EVENT_PROFILES["none"]
        assert score_day(Rating.FAVORABLE, "印星", "子", none) == 2
        assert score_day(Rating.NEUTRAL, "比肩", "子", none) == 1
        assert score_day(Rating.UNFAVORABLE, "七杀", "子", none) == 0

    def test_bonuses_are_additive(self):
        profile = EventProfile("test", "测试", ("财",), frozenset("子"))
        assert event_bonus("正财", "子", profile) == 3
        assert event_bonus("正财", "丑", profile) == 2
        assert event_bonus("正官", "子", profile) == 1
        assert event_bonus("正官", "丑", profile) == 0

    def test_unknown_event(self):
        with pytest.raises(UnknownEventError):
            rank_days("甲", event="coronation", start=START, converter=lambda *a: None)


class TestRanking:

    def test_wedding_ranking(self, scripted_converter):
        converter = scripted_converter(START, SCRIPTED_DAYS)
        ranking = rank_days("甲", event="wedding", start=START,
                            window=len(SCRIPTED_DAYS), converter=converter)

        assert [c.pillar.code for c in ranking.top] == ["己卯", "戊午", "辛酉"]
        assert [c.pillar.code for c in ranking.next] == ["乙丑", "甲子", "丙寅", "丁巳", "壬申"]
        assert [c.score for c in ranking.top] == [5, 5, 4]
        assert [c.score for c in ranking.candidates] == [2, 5, 0, 4, 5, 2, 3, 2, 2]

    def test_no_favored_matches_orders_by_rating_then_date(self, cycle_converter):
        ranking = rank_days("丁", event="none", start=START, converter=cycle_converter)
        assert len(ranking.candidates) == 30

        ordered = sorted(ranking.candidates, key=lambda c: (-c.score, c.day))
        assert list(ranking.top) + list(ranking.next) == ordered[:8]
        for candidate in ranking.candidates:
            assert candidate.score == {
                Rating.FAVORABLE: 2, Rating.NEUTRAL: 1, Rating.UNFAVORABLE: 0,
            }[candidate.rating]

    def test_ranking_is_idempotent(self, cycle_converter):
        first = rank_days("乙", event="business", start=START, converter=cycle_converter)
        second = rank_days("乙", event="business", start=START, converter=cycle_converter)
        assert first == second

    def test_window_covers_consecutive_days(self, cycle_converter):
        rank_days("甲", start=START, window=10, converter=cycle_converter)
        assert cycle_converter.calls == [
            ((START + timedelta(days=i)).year, (START + timedelta(days=i)).month,
             (START + timedelta(days=i)).day)
            for i in range(10)
        ]

    def test_short_window(self, cycle_converter):
        ranking = rank_days("甲", start=START, window=2, converter=cycle_converter)
        assert len(ranking.top) == 2
        assert ranking.next == ()

    def test_invalid_window(self, cycle_converter):
        with pytest.raises(ValueError):
            rank_days("甲", start=START, window=0, converter=cycle_converter)

    def test_conversion_errors_propagate(self, cycle_converter):
        with pytest.raises(CalendarRangeError):
            rank_days("甲", start=date(2099, 12, 20), window=30, converter=cycle_converter)

    def test_to_dict(self, scripted_converter):
        converter = scripted_converter(START, SCRIPTED_DAYS)
        payload = rank_days("甲", event="wedding", start=START,
                            window=len(SCRIPTED_DAYS), converter=converter).to_dict()
        assert payload["event"] == "wedding"
        assert payload["window_days"] == 9
        assert payload["top"][0] == {
            "date": "2024-03-02",
            "day_name": "Saturday",
            "day_number": 5,
            "pillar": "己卯",
            "relation": "正财",
            "rating": "favorable",
            "score": 5,
        }
