"""
Stem/branch tables and the pillar-level computations built on them.

Handles:
- Heavenly stem and earthly branch definitions (element, polarity, pinyin)
- Pillar parsing and the 60-combination sexagenary cycle
- Hour pillar derivation (Five Rats table)
- Five-element proportion with largest-remainder rounding

Everything here is a pure function of its arguments. Lookup tables are
immutable mappings so rule code stays declarative.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Optional, Sequence
import logging
import math

from ganzhi.errors import InvalidPillarError

logger = logging.getLogger(__name__)


# ============================================================
# FUNDAMENTAL DATA STRUCTURES
# ============================================================

class Polarity(Enum):
    YANG = "yang"
    YIN = "yin"


class Element(Enum):
    METAL = "metal"
    WOOD = "wood"
    WATER = "water"
    FIRE = "fire"
    EARTH = "earth"

    @property
    def chinese(self) -> str:
        return ELEMENT_CHINESE[self]


ELEMENT_CHINESE = MappingProxyType({
    Element.METAL: "金",
    Element.WOOD: "木",
    Element.WATER: "水",
    Element.FIRE: "火",
    Element.EARTH: "土",
})

# Output order of every element distribution
ELEMENT_ORDER = (Element.METAL, Element.WOOD, Element.WATER, Element.FIRE, Element.EARTH)


@dataclass(frozen=True)
class HeavenlyStem:
    chinese: str
    pinyin: str
    element: Element
    polarity: Polarity
    index: int  # 0-9 in the cycle

    def __str__(self):
        return f"{self.chinese} {self.pinyin} ({self.polarity.value} {self.element.value})"


@dataclass(frozen=True)
class EarthlyBranch:
    chinese: str
    pinyin: str
    animal: str
    element: Element
    polarity: Polarity
    index: int  # 0-11 in the cycle

    def __str__(self):
        return f"{self.chinese} {self.pinyin} ({self.animal})"


@dataclass(frozen=True)
class Pillar:
    stem: HeavenlyStem
    branch: EarthlyBranch
    position: str  # "year", "month", "day", "hour"

    @property
    def code(self) -> str:
        return self.stem.chinese + self.branch.chinese

    def __str__(self):
        return f"{self.code} ({self.stem.polarity.value} {self.stem.element.value} {self.branch.animal})"

    @classmethod
    def from_code(cls, code: str, position: str) -> "Pillar":
        """
        Parse a two-character pillar code such as "甲子".

        Raises:
            InvalidPillarError: if the code is not exactly one known stem
                followed by one known branch.
        """
        if not isinstance(code, str) or len(code) != 2:
            raise InvalidPillarError(f"Pillar code must be two characters, got {code!r}")
        stem_symbol, branch_symbol = code
        if stem_symbol not in STEM_BY_CHINESE or branch_symbol not in BRANCH_BY_CHINESE:
            raise InvalidPillarError(f"Not a stem/branch pair: {code!r}")
        return cls(
            stem=STEM_BY_CHINESE[stem_symbol],
            branch=BRANCH_BY_CHINESE[branch_symbol],
            position=position,
        )

    def to_dict(self):
        return {
            "position": self.position,
            "code": self.code,
            "stem": {
                "chinese": self.stem.chinese,
                "pinyin": self.stem.pinyin,
                "element": self.stem.element.value,
                "polarity": self.stem.polarity.value,
            },
            "branch": {
                "chinese": self.branch.chinese,
                "pinyin": self.branch.pinyin,
                "animal": self.branch.animal,
                "element": self.branch.element.value,
                "polarity": self.branch.polarity.value,
            },
            "description": str(self),
        }


@dataclass(frozen=True)
class FourPillars:
    year: Pillar
    month: Pillar
    day: Pillar
    hour: Optional[Pillar] = None  # absent when the birth time is unknown

    def present(self) -> list[Pillar]:
        return [p for p in (self.year, self.month, self.day, self.hour) if p is not None]

    @property
    def branches(self) -> frozenset:
        return frozenset(p.branch.chinese for p in self.present())

    def to_dict(self):
        return {
            "year": self.year.to_dict(),
            "month": self.month.to_dict(),
            "day": self.day.to_dict(),
            "hour": self.hour.to_dict() if self.hour else None,
        }


# ============================================================
# STEM AND BRANCH DEFINITIONS
# ============================================================

HEAVENLY_STEMS = (
    HeavenlyStem("甲", "Jia", Element.WOOD, Polarity.YANG, 0),
    HeavenlyStem("乙", "Yi", Element.WOOD, Polarity.YIN, 1),
    HeavenlyStem("丙", "Bing", Element.FIRE, Polarity.YANG, 2),
    HeavenlyStem("丁", "Ding", Element.FIRE, Polarity.YIN, 3),
    HeavenlyStem("戊", "Wu", Element.EARTH, Polarity.YANG, 4),
    HeavenlyStem("己", "Ji", Element.EARTH, Polarity.YIN, 5),
    HeavenlyStem("庚", "Geng", Element.METAL, Polarity.YANG, 6),
    HeavenlyStem("辛", "Xin", Element.METAL, Polarity.YIN, 7),
    HeavenlyStem("壬", "Ren", Element.WATER, Polarity.YANG, 8),
    HeavenlyStem("癸", "Gui", Element.WATER, Polarity.YIN, 9),
)

# Earth owns the four storage branches (丑 辰 未 戌)
EARTHLY_BRANCHES = (
    EarthlyBranch("子", "Zi", "Rat", Element.WATER, Polarity.YANG, 0),
    EarthlyBranch("丑", "Chou", "Ox", Element.EARTH, Polarity.YIN, 1),
    EarthlyBranch("寅", "Yin", "Tiger", Element.WOOD, Polarity.YANG, 2),
    EarthlyBranch("卯", "Mao", "Rabbit", Element.WOOD, Polarity.YIN, 3),
    EarthlyBranch("辰", "Chen", "Dragon", Element.EARTH, Polarity.YANG, 4),
    EarthlyBranch("巳", "Si", "Snake", Element.FIRE, Polarity.YIN, 5),
    EarthlyBranch("午", "Wu", "Horse", Element.FIRE, Polarity.YANG, 6),
    EarthlyBranch("未", "Wei", "Goat", Element.EARTH, Polarity.YIN, 7),
    EarthlyBranch("申", "Shen", "Monkey", Element.METAL, Polarity.YANG, 8),
    EarthlyBranch("酉", "You", "Rooster", Element.METAL, Polarity.YIN, 9),
    EarthlyBranch("戌", "Xu", "Dog", Element.EARTH, Polarity.YANG, 10),
    EarthlyBranch("亥", "Hai", "Pig", Element.WATER, Polarity.YIN, 11),
)

# Lookup helpers
STEM_BY_CHINESE = MappingProxyType({s.chinese: s for s in HEAVENLY_STEMS})
BRANCH_BY_CHINESE = MappingProxyType({b.chinese: b for b in EARTHLY_BRANCHES})
STEM_BY_PINYIN = MappingProxyType({s.pinyin: s for s in HEAVENLY_STEMS})
BRANCH_BY_ANIMAL = MappingProxyType({b.animal: b for b in EARTHLY_BRANCHES})

STEM_ELEMENT = MappingProxyType({s.chinese: s.element for s in HEAVENLY_STEMS})
BRANCH_ELEMENT = MappingProxyType({b.chinese: b.element for b in EARTHLY_BRANCHES})

# 甲子, 乙丑, ... 癸亥: stem and branch advance in lock-step, period lcm(10, 12)
SEXAGENARY_CYCLE = tuple(
    HEAVENLY_STEMS[i % 10].chinese + EARTHLY_BRANCHES[i % 12].chinese for i in range(60)
)


def stem_for(symbol: str) -> HeavenlyStem:
    """Stem lookup that falls back to 甲 (first row) on a miss."""
    stem = STEM_BY_CHINESE.get(symbol)
    if stem is None:
        logger.debug("Unknown stem %r, falling back to %s", symbol, HEAVENLY_STEMS[0].chinese)
        return HEAVENLY_STEMS[0]
    return stem


def branch_for(symbol: str) -> EarthlyBranch:
    """Branch lookup that falls back to 子 (first row) on a miss."""
    branch = BRANCH_BY_CHINESE.get(symbol)
    if branch is None:
        logger.debug("Unknown branch %r, falling back to %s", symbol, EARTHLY_BRANCHES[0].chinese)
        return EARTHLY_BRANCHES[0]
    return branch


def cycle_pillar(index: int, position: str) -> Pillar:
    """Pillar at a position of the 60-cycle (index taken mod 60)."""
    return Pillar.from_code(SEXAGENARY_CYCLE[index % 60], position)


# ============================================================
# HOUR PILLAR (五鼠遁 Five Rats Escape)
# ============================================================

# Each pair of day stems shares one 12-slot progression. The stems wrap
# after 10 slots, so slots 10 and 11 repeat the first two stems of the row.
FIVE_RATS_GROUPS = MappingProxyType({
    "甲己": "甲乙丙丁戊己庚辛壬癸甲乙",
    "乙庚": "丙丁戊己庚辛壬癸甲乙丙丁",
    "丙辛": "戊己庚辛壬癸甲乙丙丁戊己",
    "丁壬": "庚辛壬癸甲乙丙丁戊己庚辛",
    "戊癸": "壬癸甲乙丙丁戊己庚辛壬癸",
})

# 10 x 12: day stem -> hour stem for each two-hour slot
HOUR_STEM_TABLE = MappingProxyType({
    day_stem: tuple(row)
    for group, row in FIVE_RATS_GROUPS.items()
    for day_stem in group
})


def hour_branch_index(hour: int) -> int:
    """
    Two-hour slot for a local hour.

    23:00-00:59 = Zi (Rat)      = slot 0
    01:00-02:59 = Chou (Ox)     = slot 1
    ...
    21:00-22:59 = Hai (Pig)     = slot 11
    """
    return ((hour + 1) % 24) // 2


def hour_pillar(day_stem: str, hour: int) -> Pillar:
    """
    Compute the Hour Pillar from the day stem and local hour.

    IMPORTANT: pass the solar-time-corrected hour when correction is on.

    Args:
        day_stem: chinese symbol of the day's heavenly stem; an unknown
            symbol uses the 甲/己 row
        hour: hour in 24h format (taken mod 24)
    """
    slot = hour_branch_index(hour % 24)
    row = HOUR_STEM_TABLE.get(day_stem)
    if row is None:
        logger.debug("Unknown day stem %r for hour pillar, using first Five Rats row", day_stem)
        row = HOUR_STEM_TABLE[HEAVENLY_STEMS[0].chinese]

    return Pillar(
        stem=STEM_BY_CHINESE[row[slot]],
        branch=EARTHLY_BRANCHES[slot],
        position="hour",
    )


# ============================================================
# ELEMENT DISTRIBUTION
# ============================================================

DEFAULT_STEM_WEIGHT = 0.6
DEFAULT_BRANCH_WEIGHT = 0.4


@dataclass(frozen=True)
class ElementWeights:
    stem: float = DEFAULT_STEM_WEIGHT
    branch: float = DEFAULT_BRANCH_WEIGHT

    def __post_init__(self):
        if not (math.isfinite(self.stem) and math.isfinite(self.branch)):
            raise ValueError(f"Element weights must be finite, got {self}")
        if self.stem < 0 or self.branch < 0:
            raise ValueError(f"Element weights must be non-negative, got {self}")
        if self.stem + self.branch <= 0:
            raise ValueError("Element weights must have a positive sum")


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def largest_remainder(raw: Sequence[float], total: int = 100) -> list[int]:
    """
    Round a vector of shares to integers that sum to exactly ``total``.

    Each share is rounded half-up, then the rounding difference is handed
    out one unit at a time in order of descending fractional part (ties
    keep input order), cycling through that order as often as needed.
    A decrement never takes a value below zero; that entry is skipped.

    Raises:
        ValueError: if ``total`` is negative
    """
    if total < 0:
        raise ValueError(f"Cannot apportion a negative total, got {total}")
    rounded = [_round_half_up(v) for v in raw]
    if not rounded:
        return rounded

    diff = total - sum(rounded)
    order = sorted(range(len(raw)), key=lambda i: raw[i] - math.floor(raw[i]), reverse=True)
    step = 1 if diff > 0 else -1

    i = 0
    while diff != 0:
        k = order[i % len(order)]
        if step > 0 or rounded[k] > 0:
            rounded[k] += step
            diff -= step
        i += 1

    return rounded


def element_distribution(pillars: Iterable[Optional[Pillar]],
                         weights: ElementWeights = ElementWeights()) -> dict:
    """
    Percentage of each element across the given pillars.

    Stems count ``weights.stem`` and branches ``weights.branch`` toward
    their element. Missing pillars (None) contribute nothing.

    Returns:
        dict of element value -> integer percentage, in ELEMENT_ORDER,
        summing to exactly 100
    """
    acc = {e: 0.0 for e in ELEMENT_ORDER}
    for pillar in pillars:
        if pillar is None:
            continue
        acc[pillar.stem.element] += weights.stem
        acc[pillar.branch.element] += weights.branch

    total = sum(acc.values()) or 1
    raw = [acc[e] / total * 100 for e in ELEMENT_ORDER]
    percentages = largest_remainder(raw)

    return {e.value: pct for e, pct in zip(ELEMENT_ORDER, percentages)}
