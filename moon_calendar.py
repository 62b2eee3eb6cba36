"""Print the new, quarter and full moons of one or more years.

Usage:
    python moon_calendar.py [year | start-end | y1,y2,...] [--offset HOURS]
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime, timedelta
from typing import List, Optional, Sequence

from lunar import LunarCalculationError, load_limits, lunations

LOGGER = logging.getLogger("moon-calendar")

COLUMNS = ("new", "first quarter", "full", "last quarter")


def parse_year_arguments(arg: str) -> List[int]:
    """Parse a single year, a ``start-end`` range or a comma separated list."""

    years: List[int] = []
    parts = [p.strip() for p in arg.split(',') if p.strip()]
    if not parts:
        raise ValueError("empty year argument")

    for part in parts:
        if '-' in part:
            start_str, end_str = part.split('-', 1)
            start = int(start_str)
            end = int(end_str)
            if end < start:
                raise ValueError(f"range {part} ends before it starts")
            years.extend(range(start, end + 1))
        else:
            years.append(int(part))

    # Drop duplicates, keep input order.
    return list(dict.fromkeys(years))


def format_year(year: int, offset_hours: float = 0.0) -> List[str]:
    offset = timedelta(hours=offset_hours)
    lines = [f"{year}  (UTC{offset_hours:+g})", "  lunation  " + "  ".join(f"{c:<16}" for c in COLUMNS)]
    for month in lunations(year, utc_offset=offset, limits=load_limits()):
        stamps = [m.to_datetime().strftime("%Y-%m-%d %H:%M") for m in month.as_tuple()[:4]]
        lines.append(f"  {month.lunation:>8}  " + "  ".join(f"{s:<16}" for s in stamps))
    return lines


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Lunar phase calendar")
    parser.add_argument('years', nargs='?', default=None, help='year, start-end range or comma list (default: current year)')
    parser.add_argument('--offset', type=float, default=0.0, help='UTC offset in hours for the printed times')
    parser.add_argument('--verbose', action='store_true', help='log engine debug events')
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    ns = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if ns.verbose else logging.WARNING, format="%(message)s")

    if not -24.0 <= ns.offset <= 24.0:
        print("offset must be within ±24 hours", file=sys.stderr)
        return 1
    try:
        years = parse_year_arguments(ns.years) if ns.years else [datetime.now().year]
    except ValueError as exc:
        print(f"invalid year argument: {exc}", file=sys.stderr)
        return 1

    try:
        for idx, year in enumerate(years):
            if idx:
                print()
            print("\n".join(format_year(year, ns.offset)))
    except (LunarCalculationError, ValueError) as exc:
        LOGGER.error(json.dumps({"event": "calendar_failed", "error": str(exc)}))
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
