"""
Ten Gods (十神) relation between a reference day stem and a queried stem.

The relation is decided by element relationship + polarity match, in the
same way a natal Day Master relates to any other stem. The full 10x10
table is built once at import and exposed read-only.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from ganzhi.bazi import Element, HEAVENLY_STEMS, HeavenlyStem


class Rating(Enum):
    FAVORABLE = "favorable"
    NEUTRAL = "neutral"
    UNFAVORABLE = "unfavorable"


# Production cycle: Wood → Fire → Earth → Metal → Water → Wood
PRODUCTION_CYCLE = MappingProxyType({
    Element.WOOD: Element.FIRE,
    Element.FIRE: Element.EARTH,
    Element.EARTH: Element.METAL,
    Element.METAL: Element.WATER,
    Element.WATER: Element.WOOD,
})

# Control cycle: Wood → Earth → Water → Fire → Metal → Wood
CONTROL_CYCLE = MappingProxyType({
    Element.WOOD: Element.EARTH,
    Element.EARTH: Element.WATER,
    Element.WATER: Element.FIRE,
    Element.FIRE: Element.METAL,
    Element.METAL: Element.WOOD,
})

# (relationship, same_polarity): relation label
# Both resource relations (正印 / 偏印) are reported as the seal star 印星.
TEN_GODS = MappingProxyType({
    ("same", True): "比肩",
    ("same", False): "劫财",
    ("produces_me", True): "印星",
    ("produces_me", False): "印星",
    ("i_produce", True): "食神",
    ("i_produce", False): "伤官",
    ("i_control", True): "偏财",
    ("i_control", False): "正财",
    ("controls_me", True): "七杀",
    ("controls_me", False): "正官",
})

NEUTRAL_RELATION = "平"

# seal, output and wealth help; injury and the attacking authority hurt
RATING_BY_RELATION = MappingProxyType({
    "印星": Rating.FAVORABLE,
    "食神": Rating.FAVORABLE,
    "正财": Rating.FAVORABLE,
    "偏财": Rating.FAVORABLE,
    "伤官": Rating.UNFAVORABLE,
    "七杀": Rating.UNFAVORABLE,
})

ADVICE = MappingProxyType({
    "比肩": "宜与同辈协作，守成为上",
    "劫财": "谨慎理财，避免冲动消费",
    "食神": "宜表达创作，享受生活",
    "伤官": "言行宜收敛，避免口舌是非",
    "正财": "宜稳健经营，收入可期",
    "偏财": "宜把握机遇，留意意外之财",
    "七杀": "压力较大，避免冒险决策",
    "正官": "宜遵守规则，处理公务",
    "印星": "宜学习进修，易得贵人相助",
    NEUTRAL_RELATION: "平稳之日，按部就班即可",
})


def element_relationship(day_master_element: Element, other_element: Element) -> str:
    """Determine the elemental relationship from the reference stem's perspective."""
    if day_master_element == other_element:
        return "same"
    elif PRODUCTION_CYCLE[other_element] == day_master_element:
        return "produces_me"
    elif PRODUCTION_CYCLE[day_master_element] == other_element:
        return "i_produce"
    elif CONTROL_CYCLE[day_master_element] == other_element:
        return "i_control"
    elif CONTROL_CYCLE[other_element] == day_master_element:
        return "controls_me"
    else:
        raise ValueError(f"No valid relationship between {day_master_element} and {other_element}")


def ten_god(day_master: HeavenlyStem, other: HeavenlyStem) -> str:
    """Relation label of ``other`` as seen from ``day_master``."""
    relationship = element_relationship(day_master.element, other.element)
    same_polarity = (day_master.polarity == other.polarity)
    return TEN_GODS[(relationship, same_polarity)]


# (reference stem, queried stem) -> relation label
RELATION_TABLE = MappingProxyType({
    (ref.chinese, other.chinese): ten_god(ref, other)
    for ref in HEAVENLY_STEMS
    for other in HEAVENLY_STEMS
})


@dataclass(frozen=True)
class RelationResult:
    relation: str
    rating: Rating
    advice: str

    def to_dict(self):
        return {
            "relation": self.relation,
            "rating": self.rating.value,
            "advice": self.advice,
        }


def rate_relation(relation: str) -> Rating:
    return RATING_BY_RELATION.get(relation, Rating.NEUTRAL)


def advisory(relation: str) -> str:
    hint = ADVICE.get(relation, ADVICE[NEUTRAL_RELATION])
    return f"今日逢{relation}：{hint}"


def analyze_relation(reference_stem: str, query_stem: str) -> RelationResult:
    """
    Classify how the queried day stem relates to the reference day stem.

    Args:
        reference_stem: e.g. the day stem of a birth chart
        query_stem: e.g. the day stem of today

    Returns:
        RelationResult; pairs outside the table give the neutral relation
    """
    relation = RELATION_TABLE.get((reference_stem, query_stem), NEUTRAL_RELATION)
    return RelationResult(
        relation=relation,
        rating=rate_relation(relation),
        advice=advisory(relation),
    )
