"""Orbital elements of the Sun and Moon at epoch 1980 January 0.0."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["OrbitalConstants", "ORBIT"]


@dataclass(frozen=True)
class OrbitalConstants:
    """Read-only table of the constants used by the analytic model.

    Angles are in degrees, distances in kilometers, times in days.
    """

    epoch: float = 2_444_238.5  # 1980 January 0.0, Julian date.

    # Sun's apparent orbit.
    sun_longitude_at_epoch: float = 278.833540
    sun_longitude_at_perigee: float = 282.596403
    earth_eccentricity: float = 0.016718
    sun_semi_major_axis_km: float = 1.495985e8
    sun_angular_size: float = 0.533128  # At semi-major axis distance.

    # Moon's orbit.
    moon_mean_longitude: float = 64.975464
    moon_perigee_longitude: float = 349.383063
    moon_node_longitude: float = 151.950429
    moon_inclination: float = 5.145396
    moon_eccentricity: float = 0.054900
    moon_angular_size: float = 0.5181  # At semi-major axis distance.
    moon_semi_major_axis_km: float = 384_401.0
    moon_parallax: float = 0.9507  # At semi-major axis distance.

    synodic_month: float = 29.53058868


ORBIT = OrbitalConstants()
