"""
CLI wrapper for create_chart() and generate_daily_context().

Usage:
    python -m ganzhi.run chart --birth-date YYYY-MM-DD [--birth-time HH:MM] \
        --latitude LAT --longitude LON [--timezone ZONE] [--true-solar-time]
    python -m ganzhi.run context --date YYYY-MM-DD [--day-stem STEM | birth options] \
        [--event EVENT] [--window DAYS]
"""

from datetime import date, datetime
import argparse
import json
import logging
import sys

from ganzhi.bazi import ElementWeights, STEM_BY_CHINESE
from ganzhi.create_chart import BirthMoment, create_chart
from ganzhi.day_ranking import DEFAULT_WINDOW_DAYS, EVENT_PROFILES
from ganzhi.errors import GanzhiError
from ganzhi.generate_context import generate_daily_context

logger = logging.getLogger("ganzhi")


def _iso_date(value):
    return date.fromisoformat(value)


def _clock_time(value):
    return datetime.strptime(value, "%H:%M").time()


def _add_birth_arguments(parser, required):
    parser.add_argument("--birth-date", required=required, dest="birth_date", type=_iso_date)
    parser.add_argument("--birth-time", dest="birth_time", type=_clock_time, default=None)
    parser.add_argument("--timezone", default=None, help="IANA zone; detected from coordinates if omitted")
    parser.add_argument("--latitude", type=float, required=required, default=None)
    parser.add_argument("--longitude", type=float, required=required, default=None)
    parser.add_argument("--true-solar-time", dest="true_solar_time", action="store_true")


def build_parser():
    parser = argparse.ArgumentParser(description="Derive ganzhi pillars and daily guidance.")
    parser.add_argument("--log-level", dest="log_level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    sub = parser.add_subparsers(dest="command", required=True)

    chart = sub.add_parser("chart", help="Compute a birth chart.")
    _add_birth_arguments(chart, required=True)
    chart.add_argument("--stem-weight", dest="stem_weight", type=float, default=0.6)
    chart.add_argument("--branch-weight", dest="branch_weight", type=float, default=0.4)
    chart.add_argument("--eot", dest="eot_method", default="approx", choices=["approx", "ephemeris"])

    context = sub.add_parser("context", help="Daily relation and recommended days.")
    _add_birth_arguments(context, required=False)
    context.add_argument("--date", type=_iso_date, default=None, help="Target date (default: today)")
    context.add_argument("--day-stem", dest="day_stem", default=None, choices=sorted(STEM_BY_CHINESE))
    context.add_argument("--event", default="none", choices=sorted(EVENT_PROFILES))
    context.add_argument("--window", type=int, default=DEFAULT_WINDOW_DAYS)

    return parser


def _moment_from_args(args):
    return BirthMoment(
        date=args.birth_date,
        time=args.birth_time,
        timezone=args.timezone,
        longitude=args.longitude,
        latitude=args.latitude,
        use_true_solar_time=args.true_solar_time,
    )


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if args.birth_date and (args.latitude is None or args.longitude is None):
        parser.error("--latitude and --longitude are required with --birth-date")
    if args.longitude is not None and not -180.0 <= args.longitude <= 180.0:
        parser.error(f"--longitude must be within [-180, 180], got {args.longitude}")
    if args.latitude is not None and not -90.0 <= args.latitude <= 90.0:
        parser.error(f"--latitude must be within [-90, 90], got {args.latitude}")

    try:
        if args.command == "chart":
            try:
                weights = ElementWeights(stem=args.stem_weight, branch=args.branch_weight)
            except ValueError as exc:
                parser.error(str(exc))
            result = create_chart(_moment_from_args(args), weights=weights,
                                  eot_method=args.eot_method).to_dict()
        else:
            if args.window < 1:
                parser.error(f"--window must be at least 1, got {args.window}")
            result = generate_daily_context(
                target_date=args.date or date.today(),
                moment=_moment_from_args(args) if args.birth_date else None,
                day_stem=args.day_stem,
                event=args.event,
                window=args.window,
            )
    except GanzhiError as exc:
        logger.debug("Derivation failed", exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
