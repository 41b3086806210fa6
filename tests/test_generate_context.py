"""
Tests for the daily context payload.
"""

from datetime import date, time

from ganzhi.create_chart import BirthMoment
from ganzhi.generate_context import DEFAULT_DAY_STEM, generate_daily_context

TARGET = date(2024, 3, 1)


def birth(**overrides):
    values = dict(
        date=date(1990, 3, 15), time=time(10, 30), timezone="Asia/Shanghai",
        longitude=120.0, latitude=30.0,
    )
    values.update(overrides)
    return BirthMoment(**values)


class TestDailyContext:

    def test_with_chart(self, cycle_converter):
        context = generate_daily_context(TARGET, moment=birth(), event="travel",
                                         converter=cycle_converter)
        assert context["reference_day_stem"] == "己"
        assert context["chart"]["day_master"]["stem"] == "己"
        assert context["recommendations"]["event"] == "travel"
        assert len(context["recommendations"]["top"]) == 3
        assert len(context["recommendations"]["next"]) == 5
        assert context["calendar"]["day_name"] == "Friday"

    def test_today_relation(self, cycle_converter):
        context = generate_daily_context(TARGET, moment=birth(), converter=cycle_converter)
        today_stem = context["today"]["pillar"]["stem"]["chinese"]
        assert context["today"]["pillar"]["position"] == "day"
        assert context["today"]["rating"] in {"favorable", "neutral", "unfavorable"}
        assert today_stem in context["today"]["pillar"]["code"]

    def test_missing_birth_data_uses_supplied_stem(self, cycle_converter):
        context = generate_daily_context(TARGET, moment=None, day_stem="丁",
                                         converter=cycle_converter)
        assert context["chart"] is None
        assert context["reference_day_stem"] == "丁"

    def test_missing_birth_date_uses_default_stem(self, cycle_converter):
        context = generate_daily_context(TARGET, moment=birth(date=None),
                                         converter=cycle_converter)
        assert context["chart"] is None
        assert context["reference_day_stem"] == DEFAULT_DAY_STEM

    def test_window(self, cycle_converter):
        context = generate_daily_context(TARGET, day_stem="甲", window=5,
                                         converter=cycle_converter)
        assert context["recommendations"]["window_days"] == 5
        assert context["recommendations"]["window_start"] == "2024-03-01"
