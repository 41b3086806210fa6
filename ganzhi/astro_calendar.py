"""
Calendar and solar-time utilities.

Handles day-of-week lookup, date windows, the equation of time,
standard meridians and the true-solar-time correction applied before
hour pillars are derived.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Union
import logging
import math
import swisseph as swe

logger = logging.getLogger(__name__)

# Point Swiss Ephemeris to data files (falls back to the built-in
# Moshier ephemeris when the directory is absent)
_ephe_path = str(Path(__file__).parent.parent / "ephe")
swe.set_ephe_path(_ephe_path)


def day_of_week(day: Union[date, str]) -> dict:
    """
    Returns day of week info for a given date.

    Args:
        day: date/datetime object or ISO format string (YYYY-MM-DD)

    Returns:
        dict with 'date', 'day_name', 'day_number' (0=Monday, 6=Sunday)
    """
    if isinstance(day, str):
        day = date.fromisoformat(day)

    return {
        "date": day.strftime("%Y-%m-%d"),
        "day_name": day.strftime("%A"),
        "day_number": day.weekday(),  # 0=Monday, 6=Sunday
    }


def date_window(start: Union[date, str], days: int) -> list[date]:
    """
    ``days`` consecutive dates beginning with ``start``.

    Raises:
        ValueError: if ``days`` is less than 1
    """
    if isinstance(start, str):
        start = date.fromisoformat(start)
    if days < 1:
        raise ValueError(f"Window must cover at least one day, got {days}")

    return [start + timedelta(days=i) for i in range(days)]


def is_valid_geo(longitude: float, latitude: float) -> bool:
    """True when both coordinates are finite and inside their ranges."""
    try:
        return -180.0 <= longitude <= 180.0 and -90.0 <= latitude <= 90.0
    except TypeError:
        return False


# ============================================================
# EQUATION OF TIME
# ============================================================

def day_of_year(moment: Union[date, datetime]) -> int:
    """1-based ordinal day of the (civil) date."""
    return moment.timetuple().tm_yday


def equation_of_time(n: int) -> float:
    """
    Equation of time in minutes for day-of-year ``n``.

    EoT = 9.87 sin(2B) - 7.53 cos(B) - 1.5 sin(B), B = 2π(n - 81) / 364.
    Positive values mean the sundial runs ahead of mean time.
    """
    b = 2 * math.pi * (n - 81) / 364
    return 9.87 * math.sin(2 * b) - 7.53 * math.cos(b) - 1.5 * math.sin(b)


def ephemeris_equation_of_time(moment: datetime) -> float:
    """
    Equation of time in minutes at an aware instant, from Swiss Ephemeris.

    Args:
        moment: timezone-aware datetime
    """
    utc = moment.astimezone(timezone.utc)
    hour = utc.hour + utc.minute / 60 + utc.second / 3600
    jd = swe.julday(utc.year, utc.month, utc.day, hour)
    # swe.time_equ returns LAT - LMT in days
    return swe.time_equ(jd) * 1440.0


# ============================================================
# MERIDIAN / LONGITUDE CORRECTION
# ============================================================

def standard_meridian(moment: datetime) -> float:
    """
    Standard meridian (degrees, east positive) of the zone in effect at
    an aware instant: 15° per hour of UTC offset, so UTC+8 -> 120°E.
    """
    offset = moment.utcoffset()
    if offset is None:
        raise ValueError(f"Datetime must be timezone-aware: {moment!r}")
    return 15.0 * offset.total_seconds() / 3600


def lmt_correction(longitude: float, standard_meridian: float = 120.0) -> float:
    """
    Calculate Local Mean Time correction in minutes.

    Each degree east of the zone's meridian puts local noon 4 minutes
    earlier on the clock.

    Args:
        longitude: location longitude in degrees (east positive)
        standard_meridian: timezone standard meridian (120.0 for China/CST)

    Returns:
        Correction in minutes (negative = subtract from clock time)

    Example:
        Nanning (108.37°E): correction = (108.37 - 120.0) * 4 = -46.52 min
    """
    return (longitude - standard_meridian) * 4.0


@dataclass(frozen=True)
class SolarTimeCorrection:
    civil: datetime
    day_of_year: int
    equation_of_time_minutes: float
    standard_meridian: float
    longitude_minutes: float

    @property
    def total_minutes(self) -> float:
        return self.equation_of_time_minutes + self.longitude_minutes

    @property
    def corrected(self) -> datetime:
        return self.civil + timedelta(minutes=self.total_minutes)

    def to_dict(self):
        return {
            "civil_time": self.civil.isoformat(),
            "true_solar_time": self.corrected.isoformat(),
            "day_of_year": self.day_of_year,
            "equation_of_time_minutes": round(self.equation_of_time_minutes, 2),
            "standard_meridian": self.standard_meridian,
            "longitude_minutes": round(self.longitude_minutes, 2),
            "total_minutes": round(self.total_minutes, 2),
        }


def solar_time_correction(civil: datetime, longitude: float,
                          method: str = "approx") -> SolarTimeCorrection:
    """
    Compute the true-solar-time correction for a civil timestamp.

    Args:
        civil: timezone-aware civil (wall clock) datetime
        longitude: observer longitude in degrees (east positive)
        method: "approx" for the closed-form equation of time,
            "ephemeris" for the Swiss Ephemeris value

    Returns:
        SolarTimeCorrection; ``.corrected`` is the true solar time. The
        correction is not clamped.
    """
    n = day_of_year(civil)
    if method == "approx":
        eot = equation_of_time(n)
    elif method == "ephemeris":
        eot = ephemeris_equation_of_time(civil)
    else:
        raise ValueError(f"Unknown equation-of-time method: {method!r}")

    meridian = standard_meridian(civil)
    correction = SolarTimeCorrection(
        civil=civil,
        day_of_year=n,
        equation_of_time_minutes=eot,
        standard_meridian=meridian,
        longitude_minutes=lmt_correction(longitude, meridian),
    )
    logger.debug("True solar time correction %.2f min (EoT %.2f, meridian %.1f)",
                 correction.total_minutes, eot, meridian)
    return correction


def true_solar_time(civil: datetime, longitude: float, method: str = "approx") -> datetime:
    """Civil timestamp shifted to true solar time."""
    return solar_time_correction(civil, longitude, method).corrected
