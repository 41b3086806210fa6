"""
Tests for ShenSha marker matching.
"""

import random

import pytest

from ganzhi.bazi import FourPillars, Pillar
from ganzhi.shensha import RULES, ShenSha, describe_shensha, find_shensha


def chart(year, month, day, hour=None):
    return FourPillars(
        year=Pillar.from_code(year, "year"),
        month=Pillar.from_code(month, "month"),
        day=Pillar.from_code(day, "day") if day else None,
        hour=Pillar.from_code(hour, "hour") if hour else None,
    )


# no rule fires for this chart
QUIET = chart("庚午", "癸未", "壬申", "丙午")


class TestRules:

    def test_quiet_chart(self):
        assert find_shensha(QUIET) == frozenset()

    def test_nobleman_for_ding_day(self):
        result = find_shensha(chart("甲子", "乙丑", "丁未", "庚子"))
        assert "Nobleman" in result

    def test_nobleman_needs_a_target_branch(self):
        assert "Nobleman" not in find_shensha(chart("甲子", "丙寅", "丁卯", "庚子"))

    @pytest.mark.parametrize("pillars,label", [
        (chart("癸酉", "甲寅", "丙子"), "Peach Blossom"),       # 申子辰 -> 酉
        (chart("甲寅", "丁卯", "丙子"), "Traveling Horse"),     # 申子辰 -> 寅
        (chart("丙戌", "丁卯", "甲午"), "Canopy"),              # 寅午戌 -> 戌
        (chart("丙寅", "丁酉", "甲子"), "Fortune"),             # 甲 -> 寅
        (chart("丁卯", "丁酉", "甲子"), "Blade"),               # 甲 -> 卯
        (chart("甲子", "己巳", "丙戌"), "Literary Star"),       # year 甲 -> 巳
        (chart("乙丑", "丙寅", "丙子", "甲午"), "General Star"),  # month 寅 -> 午
        (chart("乙丑", "戊午", "甲子"), "Rosy Romance"),        # 甲 -> 午
    ])
    def test_single_rule(self, pillars, label):
        assert label in find_shensha(pillars)

    def test_triad_falls_back_to_year_branch(self):
        pillars = chart("甲子", "己酉", None)
        assert "Peach Blossom" in find_shensha(pillars)

    def test_hour_branch_counts(self):
        without_hour = chart("乙丑", "丙寅", "甲子")
        with_hour = chart("乙丑", "丙寅", "甲子", "庚午")
        assert "Rosy Romance" not in find_shensha(without_hour)
        assert "Rosy Romance" in find_shensha(with_hour)


class TestSetSemantics:

    def test_duplicates_collapse(self):
        # 子 appears in all four pillars
        result = find_shensha(chart("丙子", "庚子", "戊子", "壬子"))
        assert isinstance(result, frozenset)
        assert len(result) == len(set(result))

    def test_order_independent(self):
        pillars = chart("甲子", "乙丑", "丁未", "庚子")
        expected = find_shensha(pillars)
        rng = random.Random(7)
        for _ in range(20):
            rules = list(RULES)
            rng.shuffle(rules)
            assert find_shensha(pillars, rules=rules) == expected

    def test_every_marker_has_a_rule(self):
        assert {marker for marker, _ in RULES} == set(ShenSha)


class TestDescribe:

    def test_describe(self):
        described = describe_shensha({"Nobleman", "Canopy", "Bogus"})
        assert list(described) == ["Canopy", "Nobleman"]
        assert described["Nobleman"]["chinese"] == "天乙贵人"
