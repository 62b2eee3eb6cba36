"""Dates of new, quarter and full moons around a given instant."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np

from .config import DEFAULT_LIMITS, IterationLimits
from .constants import ORBIT
from .errors import InvalidPhaseSelectorError, NonConvergenceError
from .timescale import Moment, MomentLike, as_moment, civil_year_month

__all__ = [
    "PhaseSelector",
    "LunarMonthKeyDates",
    "mean_phase",
    "true_phase",
    "phasehunt",
    "lunations",
]

LOGGER = logging.getLogger(__name__)

# 1900 January 0.5, origin of the lunation count.
LUNATION_EPOCH = 2_415_020.0
MEAN_NEW_MOON_EPOCH = 2_415_020.75933
LUNATIONS_PER_YEAR = 12.3685
SEED_OFFSET_DAYS = 45.0
SELECTOR_TOLERANCE = 0.01


class PhaseSelector(float, Enum):
    """Fraction of a lunation at which each principal phase occurs."""

    NEW = 0.0
    FIRST_QUARTER = 0.25
    FULL = 0.5
    LAST_QUARTER = 0.75


# Columns: coefficient (days), multipliers of M, M' and F.
_NEW_FULL_TERMS = np.array(
    [
        [0.0021, 2, 0, 0],
        [-0.4068, 0, 1, 0],
        [0.0161, 0, 2, 0],
        [-0.0004, 0, 3, 0],
        [0.0104, 0, 0, 2],
        [-0.0051, 1, 1, 0],
        [-0.0074, 1, -1, 0],
        [0.0004, 1, 0, 2],
        [-0.0004, -1, 0, 2],
        [-0.0006, 0, 1, 2],
        [0.0010, 0, -1, 2],
        [0.0005, 1, 2, 0],
    ]
)

_QUARTER_TERMS = np.array(
    [
        [0.0021, 2, 0, 0],
        [-0.6280, 0, 1, 0],
        [0.0089, 0, 2, 0],
        [-0.0004, 0, 3, 0],
        [0.0079, 0, 0, 2],
        [-0.0119, 1, 1, 0],
        [-0.0047, 1, -1, 0],
        [0.0003, 1, 0, 2],
        [-0.0004, -1, 0, 2],
        [-0.0006, 0, 1, 2],
        [0.0021, 0, -1, 2],
        [0.0003, 1, 2, 0],
        [0.0004, 1, -2, 0],
        [-0.0003, 2, 1, 0],
    ]
)


@dataclass(frozen=True)
class LunarMonthKeyDates:
    """Principal phases of one lunation.

    ``moon_end`` is the new moon that starts the following lunation.
    ``lunation`` counts new moons since 1900 January.
    """

    moon_start: Moment
    first_quarter: Moment
    moon_full: Moment
    last_quarter: Moment
    moon_end: Moment
    lunation: int

    def as_tuple(self) -> Tuple[Moment, Moment, Moment, Moment, Moment]:
        return (
            self.moon_start,
            self.first_quarter,
            self.moon_full,
            self.last_quarter,
            self.moon_end,
        )

    def contains(self, moment: Moment) -> bool:
        return self.moon_start.julian_date <= moment.julian_date < self.moon_end.julian_date


def _dsin(angle_deg: float) -> float:
    return math.sin(math.radians(angle_deg))


def _series(terms: np.ndarray, m: float, mprime: float, f: float) -> float:
    arguments = terms[:, 1:] @ np.array([m, mprime, f])
    return float(np.dot(terms[:, 0], np.sin(np.radians(arguments))))


def mean_phase(julian_date: float, k: float) -> float:
    """Mean Julian date of the new moon of lunation *k*.

    *julian_date* only seeds the secular terms and should lie near the
    lunation. Fractional *k* gives the mean time of intermediate phases.
    """

    # Julian centuries from 1900 January 0.5.
    t = (julian_date - LUNATION_EPOCH) / 36_525
    t2 = t * t
    t3 = t2 * t
    return (
        MEAN_NEW_MOON_EPOCH
        + ORBIT.synodic_month * k
        + 0.0001178 * t2
        - 0.000000155 * t3
        + 0.00033 * _dsin(166.56 + 132.87 * t - 0.009173 * t2)
    )


def _validate_selector(selector: float) -> float:
    for candidate in PhaseSelector:
        if abs(selector - candidate.value) < SELECTOR_TOLERANCE:
            return candidate.value
    raise InvalidPhaseSelectorError(selector)


def true_phase(k: float, selector: float) -> Moment:
    """Corrected time of the phase *selector* within lunation *k*.

    Parameters
    ----------
    k:
        Lunation index, counted from the new moon of 1900 January.
    selector:
        One of ``0.0`` (new), ``0.25`` (first quarter), ``0.5`` (full) or
        ``0.75`` (last quarter), within ``0.01``.

    Raises
    ------
    InvalidPhaseSelectorError
        If *selector* is not one of the four principal phases.
    """

    selected = _validate_selector(selector)
    k = k + selected
    t = k / 1236.85  # Julian centuries from 1900 January 0.5.
    t2 = t * t
    t3 = t2 * t

    pt = (
        MEAN_NEW_MOON_EPOCH
        + ORBIT.synodic_month * k
        + 0.0001178 * t2
        - 0.000000155 * t3
        + 0.00033 * _dsin(166.56 + 132.87 * t - 0.009173 * t2)
    )

    m = 359.2242 + 29.10535608 * k - 0.0000333 * t2 - 0.00000347 * t3
    mprime = 306.0253 + 385.81691806 * k + 0.0107306 * t2 + 0.00001236 * t3
    f = 21.2964 + 390.67050646 * k - 0.0016528 * t2 - 0.00000239 * t3

    if selected in (PhaseSelector.NEW.value, PhaseSelector.FULL.value):
        pt += (0.1734 - 0.000393 * t) * _dsin(m) + _series(_NEW_FULL_TERMS, m, mprime, f)
    else:
        pt += (0.1721 - 0.0004 * t) * _dsin(m) + _series(_QUARTER_TERMS, m, mprime, f)
        # Both periodic terms are sines; the published quarter dates depend on it.
        corr = 0.0028 - 0.0004 * _dsin(m) + 0.0003 * _dsin(mprime)
        pt += corr if selected < PhaseSelector.FULL.value else -corr

    return Moment(pt)


def _bracket(julian_date: float, max_iterations: int) -> int:
    """Return the lunation index whose mean new moon precedes *julian_date*."""

    adate = julian_date - SEED_OFFSET_DAYS
    year, month = civil_year_month(adate)
    k1 = math.floor((year + (month - 1) * (1.0 / 12.0) - 1900) * LUNATIONS_PER_YEAR)

    adate = nt1 = mean_phase(adate, k1)
    for iteration in range(1, max_iterations + 1):
        adate += ORBIT.synodic_month
        k2 = k1 + 1
        nt2 = mean_phase(adate, k2)
        if nt1 <= julian_date < nt2:
            LOGGER.debug(
                json.dumps(
                    {
                        "event": "lunation_bracketed",
                        "julian_date": julian_date,
                        "lunation": k1,
                        "iterations": iteration,
                    }
                )
            )
            return k1
        nt1 = nt2
        k1 = k2

    LOGGER.error(
        json.dumps(
            {
                "event": "phasehunt_non_convergence",
                "julian_date": julian_date,
                "iterations": max_iterations,
            }
        )
    )
    raise NonConvergenceError("phasehunt", max_iterations)


def phasehunt(
    moment: Optional[MomentLike] = None,
    *,
    limits: Optional[IterationLimits] = None,
) -> LunarMonthKeyDates:
    """Find the principal phases of the lunation containing *moment*.

    *moment* defaults to now in the host's local offset. Every returned
    :class:`Moment` carries the UTC offset of *moment*.
    """

    limits = limits or DEFAULT_LIMITS
    when = as_moment(moment, local=True)
    k1 = _bracket(when.julian_date, limits.hunt)

    dates = _key_dates(k1)
    # The bracket uses mean new moons; the corrected ones can fall either
    # side of an instant that lies within hours of a new moon.
    if when.julian_date < dates[0].julian_date:
        k1 -= 1
        dates = _key_dates(k1)
    elif when.julian_date >= dates[-1].julian_date:
        k1 += 1
        dates = _key_dates(k1)

    return LunarMonthKeyDates(
        *(date.with_offset(when.utc_offset) for date in dates),
        lunation=k1,
    )


def _key_dates(k: int) -> List[Moment]:
    return [
        true_phase(k, PhaseSelector.NEW),
        true_phase(k, PhaseSelector.FIRST_QUARTER),
        true_phase(k, PhaseSelector.FULL),
        true_phase(k, PhaseSelector.LAST_QUARTER),
        true_phase(k + 1, PhaseSelector.NEW),
    ]


def lunations(
    year: int,
    *,
    utc_offset: timedelta = timedelta(0),
    limits: Optional[IterationLimits] = None,
) -> List[LunarMonthKeyDates]:
    """Every lunation whose new moon falls in civil *year* at *utc_offset*."""

    tz = timezone(utc_offset)
    start = Moment.from_datetime(datetime(year, 1, 1, tzinfo=tz))
    end = Moment.from_datetime(datetime(year + 1, 1, 1, tzinfo=tz))

    months: List[LunarMonthKeyDates] = []
    month = phasehunt(start, limits=limits)
    while month.moon_start.julian_date < end.julian_date:
        if month.moon_start.julian_date >= start.julian_date:
            months.append(month)
        following = Moment(month.moon_end.julian_date, utc_offset)
        month = phasehunt(following, limits=limits)
    return months
