"""
ShenSha (神煞) symbolic markers found by pattern-matching the pillars.

Each marker is one independent rule: look up a target branch (or two)
from a fixed table keyed by a stem or by a branch triad, then test
whether it appears among the chart's branches. Rules do not depend on
each other, so the result is simply the set of labels that fired.
"""

from enum import Enum
from types import MappingProxyType
from typing import Callable, Iterable, Optional
import logging

from ganzhi.bazi import FourPillars, Pillar

logger = logging.getLogger(__name__)


class ShenSha(Enum):
    NOBLEMAN = ("Nobleman", "天乙贵人")
    PEACH_BLOSSOM = ("Peach Blossom", "桃花")
    TRAVELING_HORSE = ("Traveling Horse", "驿马")
    CANOPY = ("Canopy", "华盖")
    FORTUNE = ("Fortune", "禄神")
    BLADE = ("Blade", "羊刃")
    LITERARY_STAR = ("Literary Star", "文昌")
    GENERAL_STAR = ("General Star", "将星")
    ROSY_ROMANCE = ("Rosy Romance", "红艳")

    def __init__(self, label, chinese):
        self.label = label
        self.chinese = chinese


DESCRIPTIONS = MappingProxyType({
    ShenSha.NOBLEMAN: "Help from benefactors; obstacles ease.",
    ShenSha.PEACH_BLOSSOM: "Charm and popularity; romance.",
    ShenSha.TRAVELING_HORSE: "Movement, travel, change of post.",
    ShenSha.CANOPY: "Solitude, spirituality, the arts.",
    ShenSha.FORTUNE: "Steady income and provision.",
    ShenSha.BLADE: "Drive and boldness; prone to rashness.",
    ShenSha.LITERARY_STAR: "Study, writing, examinations.",
    ShenSha.GENERAL_STAR: "Leadership and authority.",
    ShenSha.ROSY_ROMANCE: "Passion and affairs of the heart.",
})


# ============================================================
# LOOKUP TABLES
# ============================================================

# The four three-harmony frames
TRIADS = ("申子辰", "寅午戌", "亥卯未", "巳酉丑")

TRIAD_OF = MappingProxyType({branch: triad for triad in TRIADS for branch in triad})

NOBLEMAN_BRANCHES = MappingProxyType({
    "甲": ("丑", "未"), "戊": ("丑", "未"), "庚": ("丑", "未"),
    "乙": ("子", "申"), "己": ("子", "申"),
    "丙": ("亥", "酉"), "丁": ("丑", "未"),
    "壬": ("卯", "巳"), "癸": ("卯", "巳"),
    "辛": ("寅", "午"),
})

PEACH_BLOSSOM_BRANCH = MappingProxyType({
    "申子辰": "酉", "寅午戌": "卯", "亥卯未": "子", "巳酉丑": "午",
})

TRAVELING_HORSE_BRANCH = MappingProxyType({
    "申子辰": "寅", "寅午戌": "申", "亥卯未": "巳", "巳酉丑": "亥",
})

CANOPY_BRANCH = MappingProxyType({
    "申子辰": "辰", "寅午戌": "戌", "亥卯未": "未", "巳酉丑": "丑",
})

GENERAL_STAR_BRANCH = MappingProxyType({
    "申子辰": "子", "寅午戌": "午", "亥卯未": "卯", "巳酉丑": "酉",
})

FORTUNE_BRANCH = MappingProxyType({
    "甲": "寅", "乙": "卯", "丙": "巳", "丁": "午", "戊": "巳",
    "己": "午", "庚": "申", "辛": "酉", "壬": "亥", "癸": "子",
})

BLADE_BRANCH = MappingProxyType({
    "甲": "卯", "乙": "辰", "丙": "午", "丁": "未", "戊": "午",
    "己": "未", "庚": "酉", "辛": "戌", "壬": "子", "癸": "丑",
})

LITERARY_STAR_BRANCH = MappingProxyType({
    "甲": "巳", "乙": "午", "丙": "申", "丁": "酉", "戊": "申",
    "己": "酉", "庚": "亥", "辛": "子", "壬": "寅", "癸": "卯",
})

ROSY_ROMANCE_BRANCH = MappingProxyType({
    "甲": "午", "乙": "午", "丙": "寅", "丁": "未", "戊": "辰",
    "己": "辰", "庚": "戌", "辛": "酉", "壬": "子", "癸": "申",
})


# ============================================================
# RULES
# ============================================================

def _stem(pillar: Optional[Pillar]) -> Optional[str]:
    return pillar.stem.chinese if pillar is not None else None


def _triad(pillar: Optional[Pillar]) -> Optional[str]:
    if pillar is None:
        return None
    return TRIAD_OF.get(pillar.branch.chinese)


def _anchor_triad(pillars: FourPillars) -> Optional[str]:
    # day branch decides; year branch when the day is unavailable
    return _triad(pillars.day) or _triad(pillars.year)


def _present(target: Optional[str], pillars: FourPillars) -> bool:
    return target is not None and target in pillars.branches


def _nobleman(pillars: FourPillars) -> bool:
    targets = NOBLEMAN_BRANCHES.get(_stem(pillars.day), ())
    return any(t in pillars.branches for t in targets)


def _peach_blossom(pillars: FourPillars) -> bool:
    return _present(PEACH_BLOSSOM_BRANCH.get(_anchor_triad(pillars)), pillars)


def _traveling_horse(pillars: FourPillars) -> bool:
    return _present(TRAVELING_HORSE_BRANCH.get(_anchor_triad(pillars)), pillars)


def _canopy(pillars: FourPillars) -> bool:
    return _present(CANOPY_BRANCH.get(_anchor_triad(pillars)), pillars)


def _fortune(pillars: FourPillars) -> bool:
    return _present(FORTUNE_BRANCH.get(_stem(pillars.day)), pillars)


def _blade(pillars: FourPillars) -> bool:
    return _present(BLADE_BRANCH.get(_stem(pillars.day)), pillars)


def _literary_star(pillars: FourPillars) -> bool:
    return _present(LITERARY_STAR_BRANCH.get(_stem(pillars.year)), pillars)


def _general_star(pillars: FourPillars) -> bool:
    return _present(GENERAL_STAR_BRANCH.get(_triad(pillars.month)), pillars)


def _rosy_romance(pillars: FourPillars) -> bool:
    return _present(ROSY_ROMANCE_BRANCH.get(_stem(pillars.day)), pillars)


RULES: tuple[tuple[ShenSha, Callable[[FourPillars], bool]], ...] = (
    (ShenSha.NOBLEMAN, _nobleman),
    (ShenSha.PEACH_BLOSSOM, _peach_blossom),
    (ShenSha.TRAVELING_HORSE, _traveling_horse),
    (ShenSha.CANOPY, _canopy),
    (ShenSha.FORTUNE, _fortune),
    (ShenSha.BLADE, _blade),
    (ShenSha.LITERARY_STAR, _literary_star),
    (ShenSha.GENERAL_STAR, _general_star),
    (ShenSha.ROSY_ROMANCE, _rosy_romance),
)


def find_shensha(pillars: FourPillars, rules=RULES) -> frozenset:
    """
    Evaluate every marker rule against the pillars.

    Returns:
        frozenset of marker labels (e.g. {"Nobleman", "Canopy"}); empty
        when nothing fires
    """
    fired = frozenset(marker.label for marker, rule in rules if rule(pillars))
    logger.debug("ShenSha for %s: %s", [p.code for p in pillars.present()], sorted(fired))
    return fired


def describe_shensha(labels: Iterable[str]) -> dict:
    """Label -> {"chinese", "description"} for the given marker labels."""
    by_label = {m.label: m for m in ShenSha}
    described = {}
    for label in sorted(labels):
        marker = by_label.get(label)
        if marker is None:
            continue
        described[label] = {
            "chinese": marker.chinese,
            "description": DESCRIPTIONS[marker],
        }
    return described
