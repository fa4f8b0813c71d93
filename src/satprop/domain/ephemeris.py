# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Analytical Sun and Moon ephemerides.

Both bodies are computed in geocentric ecliptic coordinates from the
low-precision series of Meeus "Astronomical Algorithms" (Ch. 25 and a
truncated Ch. 47), then rotated into the equatorial frame about the
vernal equinox axis. Accuracy is about 1 arcminute for the Sun and
0.5 deg for the Moon.
"""
from dataclasses import dataclass
from datetime import datetime, timezone

import numpy as np

AU_METERS: float = 1.495978707e11

_J2000 = datetime(2000, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
_SECONDS_PER_CENTURY = 36525.0 * 86400.0

# Mean obliquity at J2000 and its linear drift (deg, deg per century)
_OBLIQUITY_J2000_DEG = 23.4393
_OBLIQUITY_RATE_DEG = -0.01300

# Fundamental arguments, (deg at J2000, deg per century):
# D elongation, M solar anomaly, M' lunar anomaly, F argument of latitude
_D = (297.8502, 445267.1115)
_M = (357.5291, 35999.0503)
_M_PRIME = (134.9634, 477198.8676)
_F = (93.2721, 483202.0175)
_MOON_MEAN_LONGITUDE = (218.3165, 481267.8813)
_SUN_MEAN_LONGITUDE = (280.4665, 36000.7698)

# Leading periodic terms, rows of (amplitude, D, M, M', F) multipliers
_MOON_LONGITUDE_TERMS = np.array([
    (6.289, 0, 0, 1, 0),
    (-1.274, 2, 0, -1, 0),
    (0.658, 2, 0, 0, 0),
    (-0.214, 0, 0, 2, 0),
    (-0.186, 0, 1, 0, 0),
    (0.114, 0, 0, 0, 2),
])
_MOON_LATITUDE_TERMS = np.array([
    (5.128, 0, 0, 0, 1),
    (0.281, 0, 0, 1, 1),
    (-0.278, 0, 0, 1, -1),
    (-0.173, 2, 0, 0, -1),
])
_MOON_DISTANCE_TERMS_KM = np.array([
    (-20905.0, 0, 0, 1, 0),
    (-3699.0, 2, 0, -1, 0),
    (-2956.0, 2, 0, 0, 0),
    (570.0, 0, 0, 2, 0),
])
_MOON_MEAN_DISTANCE_KM = 385001.0


@dataclass(frozen=True)
class EphemerisPosition:
    """Geocentric position of a body at a given epoch."""
    position_eci_m: tuple[float, float, float]
    distance_m: float

    @property
    def declination_rad(self) -> float:
        return float(np.arcsin(self.position_eci_m[2] / self.distance_m))


def julian_centuries_j2000(epoch: datetime) -> float:
    """Julian centuries since J2000.0 (2000-01-01 12:00:00 UTC)."""
    return (epoch - _J2000).total_seconds() / _SECONDS_PER_CENTURY


def _angle_deg(coefficients: tuple[float, float], t: float) -> float:
    return (coefficients[0] + coefficients[1] * t) % 360.0


def _ecliptic_to_equatorial(
    longitude_rad: float, latitude_rad: float, distance_m: float, t: float,
) -> EphemerisPosition:
    """Rotate an ecliptic direction about +X by the mean obliquity."""
    eps = np.radians(_OBLIQUITY_J2000_DEG + _OBLIQUITY_RATE_DEG * t)
    cos_lat = np.cos(latitude_rad)
    ecliptic = np.array([
        cos_lat * np.cos(longitude_rad),
        cos_lat * np.sin(longitude_rad),
        np.sin(latitude_rad),
    ])
    rotation = np.array([
        [1.0, 0.0, 0.0],
        [0.0, np.cos(eps), -np.sin(eps)],
        [0.0, np.sin(eps), np.cos(eps)],
    ])
    x, y, z = distance_m * (rotation @ ecliptic)
    return EphemerisPosition(
        position_eci_m=(float(x), float(y), float(z)),
        distance_m=float(distance_m),
    )


def _periodic_series(terms: np.ndarray, arguments_rad: np.ndarray, kernel) -> float:
    phases = terms[:, 1:] @ arguments_rad
    return float(terms[:, 0] @ kernel(phases))


def sun_position_eci(epoch: datetime) -> EphemerisPosition:
    """Low-precision analytical solar ephemeris.

    Args:
        epoch: UTC datetime.

    Returns:
        EphemerisPosition in the Earth-centered equatorial frame.
    """
    t = julian_centuries_j2000(epoch)
    mean_anomaly = np.radians(_angle_deg(_M, t))

    # Equation of center, truncated after the second harmonic
    longitude_deg = (_angle_deg(_SUN_MEAN_LONGITUDE, t)
                     + 1.9146 * np.sin(mean_anomaly)
                     + 0.0200 * np.sin(2.0 * mean_anomaly))
    distance_au = (1.00014
                   - 0.01671 * np.cos(mean_anomaly)
                   - 0.00014 * np.cos(2.0 * mean_anomaly))

    return _ecliptic_to_equatorial(
        float(np.radians(longitude_deg)), 0.0, float(distance_au) * AU_METERS, t,
    )


def moon_position_eci(epoch: datetime) -> EphemerisPosition:
    """Analytical lunar ephemeris from the leading periodic terms.

    Args:
        epoch: UTC datetime.

    Returns:
        EphemerisPosition in the Earth-centered equatorial frame.
    """
    t = julian_centuries_j2000(epoch)
    arguments = np.radians([
        _angle_deg(_D, t), _angle_deg(_M, t), _angle_deg(_M_PRIME, t), _angle_deg(_F, t),
    ])

    longitude_deg = (_angle_deg(_MOON_MEAN_LONGITUDE, t)
                     + _periodic_series(_MOON_LONGITUDE_TERMS, arguments, np.sin))
    latitude_deg = _periodic_series(_MOON_LATITUDE_TERMS, arguments, np.sin)
    distance_km = (_MOON_MEAN_DISTANCE_KM
                   + _periodic_series(_MOON_DISTANCE_TERMS_KM, arguments, np.cos))

    return _ecliptic_to_equatorial(
        float(np.radians(longitude_deg)),
        float(np.radians(latitude_deg)),
        distance_km * 1000.0,
        t,
    )
