# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Celestial body handles: gravitational parameter, gravity model, ephemeris.

Bodies are immutable and shared by reference between contributors.
Physical constants live on the body instances built by the factories
below; nothing in the dynamics reads them from module globals.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

import numpy as np

from satprop.domain.ephemeris import moon_position_eci, sun_position_eci
from satprop.domain.errors import (
    InvalidConfigurationError,
    NumericalDivergenceError,
    UndefinedModelError,
)

EARTH_NAME = "Earth"
MOON_NAME = "Moon"
SUN_NAME = "Sun"

# Gravitational parameters (m³/s²)
_MU_EARTH = 3.986004418e14   # EGM2008
_MU_MOON = 4.9028e12         # IAU 2015 / DE440
_MU_SUN = 1.32712440041e20   # IAU 2015 / IERS 2010

# Equatorial radii (m)
_R_EARTH = 6_378_137.0
_R_MOON = 1_737_400.0
_R_SUN = 695_700_000.0

_J2_EARTH = 1.08263e-3


class GravityModel(Enum):
    """Gravitational model carried by a celestial body."""
    UNDEFINED = "Undefined"
    SPHERICAL = "Spherical"
    J2 = "J2"


Ephemeris = Callable[[datetime], tuple[float, float, float]]


def _origin(epoch: datetime) -> tuple[float, float, float]:
    return (0.0, 0.0, 0.0)


def _sun_position(epoch: datetime) -> tuple[float, float, float]:
    return sun_position_eci(epoch).position_eci_m


def _moon_position(epoch: datetime) -> tuple[float, float, float]:
    return moon_position_eci(epoch).position_eci_m


@dataclass(frozen=True)
class CelestialBody:
    """A body that can pull on a satellite.

    Attributes:
        name: Unique body name within an environment.
        gravitational_parameter: mu (m³/s²).
        equatorial_radius: Equatorial radius (m).
        gravity_model: Which gravity model is available.
        j2: Unnormalized J2 coefficient, used by GravityModel.J2.
        ephemeris: Position (m, GCRF, Earth-centered) at an epoch.
    """
    name: str
    gravitational_parameter: float
    equatorial_radius: float
    gravity_model: GravityModel = GravityModel.SPHERICAL
    j2: float = 0.0
    ephemeris: Ephemeris = _origin

    def __post_init__(self) -> None:
        if not self.name:
            raise InvalidConfigurationError("Celestial body name must not be empty")
        if self.gravitational_parameter <= 0:
            raise InvalidConfigurationError(
                f"Gravitational parameter must be positive, got {self.gravitational_parameter}"
            )
        if self.equatorial_radius <= 0:
            raise InvalidConfigurationError(
                f"Equatorial radius must be positive, got {self.equatorial_radius}"
            )

    def is_gravity_defined(self) -> bool:
        return self.gravity_model is not GravityModel.UNDEFINED

    def position_at(self, epoch: datetime) -> tuple[float, float, float]:
        """Body position in GCRF (m) at the given epoch."""
        return self.ephemeris(epoch)

    def gravitational_acceleration(
        self, relative_position: tuple[float, float, float],
    ) -> tuple[float, float, float]:
        """Acceleration (m/s²) at a position relative to the body center.

        Point mass: a = -mu * r / |r|^3. The J2 model adds the zonal
        oblateness term in the body's equatorial frame (assumed aligned
        with GCRF).
        """
        if self.gravity_model is GravityModel.UNDEFINED:
            raise UndefinedModelError("Gravitational Model")

        pos = np.array(relative_position, dtype=np.float64)
        r2 = float(np.dot(pos, pos))
        if r2 == 0.0:
            raise NumericalDivergenceError(
                f"Gravity of {self.name} is singular at the body center"
            )
        r = float(np.sqrt(r2))
        mu = self.gravitational_parameter
        a = (-mu / (r2 * r)) * pos

        if self.gravity_model is GravityModel.J2 and self.j2 != 0.0:
            re = self.equatorial_radius
            coeff = -1.5 * self.j2 * mu * re * re / (r2 * r2 * r)
            z2_r2 = pos[2] * pos[2] / r2
            a = a + coeff * np.array([
                pos[0] * (1.0 - 5.0 * z2_r2),
                pos[1] * (1.0 - 5.0 * z2_r2),
                pos[2] * (3.0 - 5.0 * z2_r2),
            ])

        return (float(a[0]), float(a[1]), float(a[2]))


def earth_spherical() -> CelestialBody:
    """Earth as a point mass at the GCRF origin."""
    return CelestialBody(
        name=EARTH_NAME,
        gravitational_parameter=_MU_EARTH,
        equatorial_radius=_R_EARTH,
        gravity_model=GravityModel.SPHERICAL,
    )


def earth(
    gravity_model: GravityModel = GravityModel.J2,
    gravitational_parameter: Optional[float] = None,
) -> CelestialBody:
    """Earth with a selectable gravity model (J2 by default)."""
    return CelestialBody(
        name=EARTH_NAME,
        gravitational_parameter=(
            _MU_EARTH if gravitational_parameter is None else gravitational_parameter
        ),
        equatorial_radius=_R_EARTH,
        gravity_model=gravity_model,
        j2=_J2_EARTH,
    )


def moon_spherical() -> CelestialBody:
    """Moon as a point mass on the analytical lunar ephemeris."""
    return CelestialBody(
        name=MOON_NAME,
        gravitational_parameter=_MU_MOON,
        equatorial_radius=_R_MOON,
        gravity_model=GravityModel.SPHERICAL,
        ephemeris=_moon_position,
    )


def sun_spherical() -> CelestialBody:
    """Sun as a point mass on the analytical solar ephemeris."""
    return CelestialBody(
        name=SUN_NAME,
        gravitational_parameter=_MU_SUN,
        equatorial_radius=_R_SUN,
        gravity_model=GravityModel.SPHERICAL,
        ephemeris=_sun_position,
    )
