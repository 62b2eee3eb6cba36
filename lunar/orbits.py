"""Geocentric Sun and Moon positions from the 1980.0 orbital elements."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass

from .constants import ORBIT, OrbitalConstants
from .errors import NonConvergenceError

__all__ = [
    "SolarPosition",
    "LunarPosition",
    "kepler",
    "solar_position",
    "lunar_position",
]

LOGGER = logging.getLogger(__name__)

KEPLER_TOLERANCE = 1e-6


@dataclass(frozen=True)
class SolarPosition:
    """Sun's geocentric position for one instant."""

    longitude_deg: float
    distance_km: float
    angular_size_deg: float
    mean_anomaly_deg: float


@dataclass(frozen=True)
class LunarPosition:
    """Moon's geocentric position for one instant."""

    true_longitude_deg: float  # In the orbit plane, after the variation.
    ecliptic_longitude_deg: float
    ecliptic_latitude_deg: float
    distance_km: float
    angular_diameter_deg: float
    parallax_deg: float


def _dsin(angle_deg: float) -> float:
    return math.sin(math.radians(angle_deg))


def _dcos(angle_deg: float) -> float:
    return math.cos(math.radians(angle_deg))


def kepler(mean_anomaly_deg: float, eccentricity: float, max_iterations: int = 100) -> float:
    """Solve Kepler's equation ``E - e sin E = M`` by Newton-Raphson.

    Parameters
    ----------
    mean_anomaly_deg:
        Mean anomaly ``M`` in degrees.
    eccentricity:
        Orbital eccentricity, ``0 <= e < 1``.
    max_iterations:
        Ceiling on Newton steps.

    Returns
    -------
    float
        Eccentric anomaly ``E`` in radians.

    Raises
    ------
    NonConvergenceError
        If the residual is still above ``1e-6`` after *max_iterations* steps.
    """

    if not 0.0 <= eccentricity < 1.0:
        raise ValueError(f"Eccentricity must be within [0, 1): {eccentricity}")
    m = math.radians(mean_anomaly_deg)
    e = m
    for _ in range(max_iterations):
        delta = e - eccentricity * math.sin(e) - m
        e -= delta / (1.0 - eccentricity * math.cos(e))
        if abs(delta) <= KEPLER_TOLERANCE:
            return e
    LOGGER.error(
        json.dumps(
            {
                "event": "kepler_non_convergence",
                "mean_anomaly_deg": mean_anomaly_deg,
                "eccentricity": eccentricity,
                "iterations": max_iterations,
            }
        )
    )
    raise NonConvergenceError("kepler", max_iterations)


def solar_position(
    day: float,
    constants: OrbitalConstants = ORBIT,
    max_iterations: int = 100,
) -> SolarPosition:
    """Sun's ecliptic longitude, distance and size *day* days after the epoch."""

    ecc = constants.earth_eccentricity
    n = ((360.0 / 365.2422) * day) % 360.0
    # Mean anomaly, from perigee to epoch co-ordinates.
    m = (n + constants.sun_longitude_at_epoch - constants.sun_longitude_at_perigee) % 360.0
    ec = kepler(m, ecc, max_iterations)
    true_anomaly = 2.0 * math.degrees(math.atan(math.sqrt((1 + ecc) / (1 - ecc)) * math.tan(ec / 2.0)))
    longitude = (true_anomaly + constants.sun_longitude_at_perigee) % 360.0
    # Orbital distance factor.
    factor = (1 + ecc * _dcos(true_anomaly)) / (1 - ecc * ecc)
    return SolarPosition(
        longitude_deg=longitude,
        distance_km=constants.sun_semi_major_axis_km / factor,
        angular_size_deg=factor * constants.sun_angular_size,
        mean_anomaly_deg=m,
    )


def lunar_position(
    day: float,
    sun: SolarPosition,
    constants: OrbitalConstants = ORBIT,
) -> LunarPosition:
    """Moon's position *day* days after the epoch.

    The mean orbit is corrected for evection, the annual equation, the
    equation of the centre and the variation, the last referenced against
    the Sun's longitude in *sun*.
    """

    sun_longitude = sun.longitude_deg
    sun_anomaly = sun.mean_anomaly_deg

    ml = (13.1763966 * day + constants.moon_mean_longitude) % 360.0
    mm = (ml - 0.1114041 * day - constants.moon_perigee_longitude) % 360.0
    mn = (constants.moon_node_longitude - 0.0529539 * day) % 360.0

    evection = 1.2739 * _dsin(2 * (ml - sun_longitude) - mm)
    annual = 0.1858 * _dsin(sun_anomaly)
    a3 = 0.37 * _dsin(sun_anomaly)
    anomaly = mm + evection - annual - a3

    centre = 6.2886 * _dsin(anomaly)
    a4 = 0.214 * _dsin(2 * anomaly)
    longitude = ml + evection + centre - annual + a4

    variation = 0.6583 * _dsin(2 * (longitude - sun_longitude))
    true_longitude = longitude + variation

    node = mn - 0.16 * _dsin(sun_anomaly)
    y = _dsin(true_longitude - node) * _dcos(constants.moon_inclination)
    x = _dcos(true_longitude - node)
    ecliptic_longitude = (math.degrees(math.atan2(y, x)) + node) % 360.0
    ecliptic_latitude = math.degrees(
        math.asin(_dsin(true_longitude - node) * _dsin(constants.moon_inclination))
    )

    ecc = constants.moon_eccentricity
    distance = (constants.moon_semi_major_axis_km * (1 - ecc * ecc)) / (
        1 + ecc * _dcos(anomaly + centre)
    )
    fraction = distance / constants.moon_semi_major_axis_km
    return LunarPosition(
        true_longitude_deg=true_longitude,
        ecliptic_longitude_deg=ecliptic_longitude,
        ecliptic_latitude_deg=ecliptic_latitude,
        distance_km=distance,
        angular_diameter_deg=constants.moon_angular_size / fraction,
        parallax_deg=constants.moon_parallax / fraction,
    )
