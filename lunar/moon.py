"""Instantaneous phase, illumination, age and size of the Moon."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Dict, Optional

from .config import DEFAULT_LIMITS, IterationLimits
from .constants import ORBIT
from .orbits import lunar_position, solar_position
from .timescale import MomentLike, as_moment

__all__ = ["PhaseSnapshot", "phase"]


@dataclass(frozen=True)
class PhaseSnapshot:
    """State of the Moon at one instant.

    ``phase`` is the fraction of the synodic month elapsed (0 new, 0.5 full)
    and ``illumination`` the illuminated fraction of the disc. Distances are
    in kilometers, angles in degrees, ``age_days`` in days since new moon.
    """

    phase: float
    illumination: float
    age_days: float
    distance_km: float
    angular_diameter_deg: float
    sun_distance_km: float
    sun_angular_diameter_deg: float
    ecliptic_longitude_deg: float
    ecliptic_latitude_deg: float
    parallax_deg: float

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


def phase(
    moment: Optional[MomentLike] = None,
    *,
    limits: Optional[IterationLimits] = None,
) -> PhaseSnapshot:
    """Compute the Moon's phase state at *moment* (default: now, UTC).

    *moment* may be a :class:`~lunar.timescale.Moment` or a timezone-aware
    datetime.
    """

    limits = limits or DEFAULT_LIMITS
    when = as_moment(moment)
    day = when.julian_date - ORBIT.epoch

    sun = solar_position(day, max_iterations=limits.kepler)
    moon = lunar_position(day, sun)

    # Age of the Moon in degrees.
    age_angle = moon.true_longitude_deg - sun.longitude_deg
    illumination = (1 - math.cos(math.radians(age_angle))) / 2
    fraction = (age_angle % 360.0) / 360.0
    if fraction >= 1.0:
        fraction = 0.0

    return PhaseSnapshot(
        phase=fraction,
        illumination=illumination,
        age_days=ORBIT.synodic_month * fraction,
        distance_km=moon.distance_km,
        angular_diameter_deg=moon.angular_diameter_deg,
        sun_distance_km=sun.distance_km,
        sun_angular_diameter_deg=sun.angular_size_deg,
        ecliptic_longitude_deg=moon.ecliptic_longitude_deg,
        ecliptic_latitude_deg=moon.ecliptic_latitude_deg,
        parallax_deg=moon.parallax_deg,
    )
