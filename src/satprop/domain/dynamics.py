# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""State-derivative contributors and their aggregation.

Each contributor returns one additive term of dx/dt for a state vector
laid out as (x, y, z, vx, vy, vz, ...). get_dynamical_equations() sums
the terms, in the order given, into the right-hand side consumed by the
numerical solver.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional, Protocol, Sequence, runtime_checkable

import numpy as np

from satprop.domain.celestial import EARTH_NAME
from satprop.domain.errors import (
    DimensionMismatchError,
    InvalidConfigurationError,
    UndefinedModelError,
)
from satprop.ports import CelestialBodyProvider

logger = logging.getLogger(__name__)

StateVector = tuple[float, ...]
DerivativeFunction = Callable[[float, StateVector], StateVector]

_TRANSLATIONAL_DIMENSION = 6


# --- Types ---

@runtime_checkable
class StateDerivativeContributor(Protocol):
    """Structural typing port for pluggable derivative contributions."""

    def compute_contribution(
        self,
        state_vector: Sequence[float],
        epoch: datetime,
    ) -> StateVector: ...


def _require_translational(state_vector: Sequence[float], source: str) -> int:
    n = len(state_vector)
    if n < _TRANSLATIONAL_DIMENSION:
        raise DimensionMismatchError(_TRANSLATIONAL_DIMENSION, n, source)
    return n


def _velocity_slot(
    state_vector: Sequence[float],
    acceleration: tuple[float, float, float],
) -> StateVector:
    """(0, 0, 0, ax, ay, az) padded with zeros to the state dimension."""
    padding = (0.0,) * (len(state_vector) - _TRANSLATIONAL_DIMENSION)
    return (0.0, 0.0, 0.0) + acceleration + padding


def _require_gravity(celestial: CelestialBodyProvider) -> None:
    if not celestial.is_gravity_defined():
        raise UndefinedModelError("Gravitational Model")


# --- Contributors ---

@dataclass(frozen=True)
class PositionDerivative:
    """Kinematic term: the derivative of position is velocity."""
    name: str = "Position Derivative"

    def is_defined(self) -> bool:
        return True

    def compute_contribution(
        self,
        state_vector: Sequence[float],
        epoch: datetime,
    ) -> StateVector:
        n = _require_translational(state_vector, self.name)
        vx, vy, vz = (float(v) for v in state_vector[3:6])
        return (vx, vy, vz) + (0.0,) * (n - 3)


@dataclass(frozen=True)
class CentralBodyGravity:
    """Gravitational acceleration of the body the state is centered on.

    Uses whatever model the body carries (point mass or J2). Raises
    UndefinedModelError at construction if the body has no gravity model.
    """
    celestial: CelestialBodyProvider
    name: Optional[str] = None

    def __post_init__(self) -> None:
        _require_gravity(self.celestial)
        if self.name is None:
            object.__setattr__(
                self, "name", f"Central Body Gravity [{self.celestial.name}]",
            )

    def is_defined(self) -> bool:
        return self.celestial.is_gravity_defined()

    def compute_contribution(
        self,
        state_vector: Sequence[float],
        epoch: datetime,
    ) -> StateVector:
        _require_translational(state_vector, self.name)
        position = (float(state_vector[0]), float(state_vector[1]), float(state_vector[2]))
        acceleration = self.celestial.gravitational_acceleration(position)
        return _velocity_slot(state_vector, acceleration)


@dataclass(frozen=True)
class ThirdBodyGravity:
    """Differential (tidal) pull of a body other than the central body.

    a = mu * ((r_b - r) / |r_b - r|^3 - r_b / |r_b|^3)

    where r_b is the perturbing body's position relative to the central
    body. The second term is the pull on the central body itself, which
    the non-inertial, central-body-centered frame must remove.

    Args:
        celestial: Perturbing body.
        central_body: Body the state is centered on. None means Earth.
        name: Optional display name.
    """
    celestial: CelestialBodyProvider
    central_body: Optional[CelestialBodyProvider] = None
    name: Optional[str] = None

    def __post_init__(self) -> None:
        _require_gravity(self.celestial)
        central_name = (self.central_body.name if self.central_body is not None
                        else EARTH_NAME)
        if self.celestial.name == central_name:
            raise InvalidConfigurationError(
                f"Cannot calculate third body acceleration for the {central_name}: "
                f"it is the central body"
            )
        if self.name is None:
            object.__setattr__(
                self, "name", f"Third Body Gravity [{self.celestial.name}]",
            )

    def is_defined(self) -> bool:
        return self.celestial.is_gravity_defined()

    def compute_contribution(
        self,
        state_vector: Sequence[float],
        epoch: datetime,
    ) -> StateVector:
        _require_translational(state_vector, self.name)

        rb = np.array(self.celestial.position_at(epoch), dtype=np.float64)
        if self.central_body is not None:
            rb = rb - np.array(self.central_body.position_at(epoch), dtype=np.float64)
        rs = np.array(state_vector[0:3], dtype=np.float64)
        d_vec = rb - rs

        d_mag = float(np.linalg.norm(d_vec))
        rb_mag = float(np.linalg.norm(rb))

        mu = self.celestial.gravitational_parameter
        a_vec = mu * (d_vec / (d_mag * d_mag * d_mag) - rb / (rb_mag * rb_mag * rb_mag))

        return _velocity_slot(
            state_vector, (float(a_vec[0]), float(a_vec[1]), float(a_vec[2])),
        )


# --- Aggregation ---

def _contributor_name(contributor: StateDerivativeContributor) -> str:
    return getattr(contributor, "name", None) or type(contributor).__name__


def get_dynamical_equations(
    contributors: Sequence[StateDerivativeContributor],
    epoch: datetime,
) -> DerivativeFunction:
    """Sum contributors into one derivative function f(t, x) -> dx/dt.

    t is an offset in seconds from epoch. The output starts at zero and
    each contribution is added in the order given. Contributor errors
    propagate to the caller unchanged.

    Raises:
        InvalidConfigurationError: contributors is empty.
        DimensionMismatchError: (at call time) a contribution's length
            differs from len(x).
    """
    contributors = tuple(contributors)
    if not contributors:
        raise InvalidConfigurationError(
            "At least one contributor is required to build dynamical equations"
        )

    logger.debug(
        "Dynamical equations at %s: %s",
        epoch.isoformat(),
        ", ".join(_contributor_name(c) for c in contributors),
    )

    def deriv_fn(t_s: float, x: Sequence[float]) -> StateVector:
        current_epoch = epoch + timedelta(seconds=t_s)
        n = len(x)
        dxdt = np.zeros(n)
        for contributor in contributors:
            contribution = contributor.compute_contribution(x, current_epoch)
            if len(contribution) != n:
                raise DimensionMismatchError(n, len(contribution), _contributor_name(contributor))
            dxdt += np.asarray(contribution, dtype=np.float64)
        return tuple(float(v) for v in dxdt)

    return deriv_fn
