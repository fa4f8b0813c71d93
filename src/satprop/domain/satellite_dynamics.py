# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Generic satellite dynamics bound to an environment and a reference state.

Currently wired to Earth central-body gravity only. Atmospheric drag
and solar radiation pressure are extension points: SatelliteSystem
already carries the coefficients they need.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Sequence

import numpy as np

from satprop.domain.celestial import EARTH_NAME
from satprop.domain.dynamics import (
    CentralBodyGravity,
    DerivativeFunction,
    PositionDerivative,
    StateDerivativeContributor,
    StateVector,
    get_dynamical_equations,
)
from satprop.domain.environment import Environment
from satprop.domain.errors import InvalidConfigurationError
from satprop.domain.state import State


@dataclass(frozen=True)
class SatelliteSystem:
    """Physical properties of a satellite."""
    mass_kg: float
    cross_sectional_area_m2: float
    drag_coefficient: float = 2.2
    reflectivity_coefficient: float = 1.2

    def __post_init__(self) -> None:
        if self.mass_kg <= 0:
            raise InvalidConfigurationError(f"Mass must be positive, got {self.mass_kg}")
        if self.cross_sectional_area_m2 < 0:
            raise InvalidConfigurationError(
                f"Cross-sectional area must be non-negative, got {self.cross_sectional_area_m2}"
            )
        if self.drag_coefficient < 0:
            raise InvalidConfigurationError(
                f"Drag coefficient must be non-negative, got {self.drag_coefficient}"
            )
        if self.reflectivity_coefficient < 0:
            raise InvalidConfigurationError(
                f"Reflectivity coefficient must be non-negative, got {self.reflectivity_coefficient}"
            )

    @property
    def area_to_mass_ratio(self) -> float:
        return self.cross_sectional_area_m2 / self.mass_kg


class SatelliteDynamics:
    """Satellite subject to forces from its environment.

    Parameters
    ----------
    environment : Environment
        Bodies available to the dynamics. Must contain Earth.
    satellite_system : SatelliteSystem
        Mass, area and coefficients of the satellite.
    state : State
        Reference state; its epoch anchors the dynamical equations.
    """

    def __init__(
        self,
        environment: Environment,
        satellite_system: SatelliteSystem,
        state: State,
    ) -> None:
        self._environment = environment
        self._satellite_system = satellite_system
        self._state = state
        self._contributors: tuple[StateDerivativeContributor, ...] = (
            PositionDerivative(),
            CentralBodyGravity(environment.access_celestial_object_with_name(EARTH_NAME)),
        )

    @property
    def environment(self) -> Environment:
        return self._environment

    @property
    def satellite_system(self) -> SatelliteSystem:
        return self._satellite_system

    @property
    def state(self) -> State:
        return self._state

    @property
    def contributors(self) -> tuple[StateDerivativeContributor, ...]:
        return self._contributors

    def set_state(self, state: State) -> None:
        """Replace the reference state (and with it the equations' epoch)."""
        self._state = state

    def is_defined(self) -> bool:
        return all(c.is_defined() for c in self._contributors)

    def compute_contribution(
        self,
        state_vector: Sequence[float],
        epoch: datetime,
    ) -> StateVector:
        """Sum of the wired contributors, so the whole model can be nested."""
        total = np.zeros(len(state_vector))
        for contributor in self._contributors:
            total += np.asarray(
                contributor.compute_contribution(state_vector, epoch), dtype=np.float64,
            )
        return tuple(float(v) for v in total)

    def get_dynamical_equations(self) -> DerivativeFunction:
        """Derivative function f(t, x), t in seconds from the state epoch."""
        return get_dynamical_equations(self._contributors, self._state.epoch)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SatelliteDynamics):
            return NotImplemented
        return (self._environment == other._environment
                and self._satellite_system == other._satellite_system
                and self._state == other._state)

    def __repr__(self) -> str:
        return (f"SatelliteDynamics(satellite_system={self._satellite_system!r}, "
                f"state={self._state!r})")
