"""
Chart creation library.

Turns a BirthMoment into the four pillars, day master, element
distribution and ShenSha markers. When true solar time is requested
the civil time is corrected first, so the day and hour pillars come
from the corrected timestamp.

Timezone is taken from the moment, or auto-detected from coordinates
when the moment carries none.

Usage from Python:
    from ganzhi.create_chart import BirthMoment, create_chart
    chart = create_chart(BirthMoment(
        date=date(1990, 3, 15), time=time(10, 30), timezone="Asia/Shanghai",
        longitude=116.4, latitude=39.9, use_true_solar_time=True,
    ))
"""

from dataclasses import dataclass
from datetime import date as date_type, datetime, time as time_type
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
import logging

from timezonefinder import TimezoneFinder

from ganzhi.astro_calendar import SolarTimeCorrection, is_valid_geo, solar_time_correction
from ganzhi.bazi import ElementWeights, FourPillars, Pillar, element_distribution, hour_pillar
from ganzhi.errors import MissingInputError
from ganzhi.lunar import LunarConvert, LunarDate, LunarPythonConverter
from ganzhi.shensha import describe_shensha, find_shensha

logger = logging.getLogger(__name__)

_tf = None


def _timezone_finder() -> TimezoneFinder:
    global _tf
    if _tf is None:
        _tf = TimezoneFinder()
    return _tf


@dataclass(frozen=True)
class BirthMoment:
    date: Optional[date_type]
    time: Optional[time_type]
    timezone: Optional[str]
    longitude: float
    latitude: float
    use_true_solar_time: bool = False


@dataclass(frozen=True)
class Chart:
    moment: BirthMoment
    timezone: str
    effective_time: Optional[datetime]   # None when the birth time is unknown
    correction: Optional[SolarTimeCorrection]
    lunar: LunarDate
    pillars: FourPillars
    elements: dict
    shensha: frozenset

    @property
    def day_master(self):
        return self.pillars.day.stem

    def to_dict(self):
        dm = self.day_master
        return {
            "birth_date": self.moment.date.isoformat(),
            "birth_time_clock": self.moment.time.strftime("%H:%M") if self.moment.time else None,
            "birth_time_effective": self.effective_time.strftime("%H:%M") if self.effective_time else None,
            "timezone": self.timezone,
            "location": {
                "latitude": self.moment.latitude,
                "longitude": self.moment.longitude,
            },
            "true_solar_time": self.correction.to_dict() if self.correction else None,
            "lunar": self.lunar.to_dict(),
            "day_master": {
                "stem": dm.chinese,
                "pinyin": dm.pinyin,
                "element": dm.element.value,
                "polarity": dm.polarity.value,
                "description": str(dm),
            },
            "pillars": self.pillars.to_dict(),
            "element_distribution": self.elements,
            "shensha": describe_shensha(self.shensha),
        }


def timezone_for(latitude: float, longitude: float) -> str:
    """
    IANA zone name for a coordinate.

    Raises:
        MissingInputError: if the coordinate is invalid or maps to no zone
    """
    if not is_valid_geo(longitude, latitude):
        raise MissingInputError(f"Cannot determine timezone for ({latitude}, {longitude})")
    tz_name = _timezone_finder().timezone_at(lat=latitude, lng=longitude)
    if tz_name is None:
        raise MissingInputError(f"Could not determine timezone for ({latitude}, {longitude})")
    return tz_name


def resolve_timezone(moment: BirthMoment) -> str:
    """
    Zone name from the moment, or detected from its coordinates.

    Raises:
        MissingInputError: if the given zone is unknown, or none can be
            detected
    """
    if moment.timezone:
        try:
            ZoneInfo(moment.timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise MissingInputError(f"Unknown timezone {moment.timezone!r}") from exc
        return moment.timezone
    tz_name = timezone_for(moment.latitude, moment.longitude)
    logger.info("Auto-detected timezone %s for (%s, %s)", tz_name, moment.latitude, moment.longitude)
    return tz_name


def effective_birth_time(moment: BirthMoment, tz_name: str,
                         method: str = "approx") -> tuple[datetime, Optional[SolarTimeCorrection]]:
    """
    Wall-clock birth time in the zone, shifted to true solar time when the
    moment asks for it and its coordinates are usable.

    Returns:
        (effective datetime, correction or None)
    """
    civil = datetime.combine(moment.date, moment.time, tzinfo=ZoneInfo(tz_name))
    if not moment.use_true_solar_time:
        return civil, None
    if not is_valid_geo(moment.longitude, moment.latitude):
        logger.warning("Skipping true solar time: coordinates out of range (%s, %s)",
                       moment.latitude, moment.longitude)
        return civil, None

    correction = solar_time_correction(civil, moment.longitude, method)
    return correction.corrected, correction


def create_chart(moment: BirthMoment, converter: Optional[LunarConvert] = None,
                 weights: ElementWeights = ElementWeights(),
                 eot_method: str = "approx") -> Chart:
    """
    Derive the full chart for a birth moment.

    Args:
        moment: birth data; a missing time leaves the hour pillar empty
        converter: calendar converter (lunar-python when omitted)
        weights: stem/branch weights for the element distribution
        eot_method: "approx" or "ephemeris" equation of time

    Raises:
        MissingInputError: if the birth date is absent, or no timezone
            can be resolved
        CalendarRangeError: if the converter rejects the date
    """
    if moment.date is None:
        raise MissingInputError("Birth date is required to derive a chart")

    convert = converter or LunarPythonConverter()
    tz_name = resolve_timezone(moment)

    effective, correction = None, None
    day = moment.date
    if moment.time is not None:
        effective, correction = effective_birth_time(moment, tz_name, eot_method)
        day = effective.date()
    else:
        logger.info("Birth time unknown: hour pillar omitted")

    lunar = convert(day.year, day.month, day.day)
    day_pillar = Pillar.from_code(lunar.day_pillar, "day")
    pillars = FourPillars(
        year=Pillar.from_code(lunar.year_pillar, "year"),
        month=Pillar.from_code(lunar.month_pillar, "month"),
        day=day_pillar,
        hour=hour_pillar(day_pillar.stem.chinese, effective.hour) if effective else None,
    )

    return Chart(
        moment=moment,
        timezone=tz_name,
        effective_time=effective,
        correction=correction,
        lunar=lunar,
        pillars=pillars,
        elements=element_distribution(pillars.present(), weights),
        shensha=find_shensha(pillars),
    )
