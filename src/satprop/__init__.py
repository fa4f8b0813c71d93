# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
satprop: satellite state propagation with composable dynamics and
event-terminated numerical integration.
"""

from satprop.domain.celestial import (
    CelestialBody,
    GravityModel,
    earth,
    earth_spherical,
    moon_spherical,
    sun_spherical,
)
from satprop.domain.dynamics import (
    CentralBodyGravity,
    PositionDerivative,
    StateDerivativeContributor,
    ThirdBodyGravity,
    get_dynamical_equations,
)
from satprop.domain.environment import Environment
from satprop.domain.errors import (
    ConditionContractError,
    DimensionMismatchError,
    InvalidConfigurationError,
    NumericalDivergenceError,
    SatpropError,
    UndefinedModelError,
)
from satprop.domain.event_condition import (
    ConjunctiveCondition,
    Criteria,
    EventCondition,
    RealEventCondition,
)
from satprop.domain.numerical_solver import (
    ConditionSolution,
    LogType,
    NumericalSolver,
    NumericalSolverConfig,
    StepperType,
)
from satprop.domain.satellite_dynamics import SatelliteDynamics, SatelliteSystem
from satprop.domain.state import State

__version__ = "0.1.0"

__all__ = [
    "CelestialBody",
    "CentralBodyGravity",
    "ConditionContractError",
    "ConditionSolution",
    "ConjunctiveCondition",
    "Criteria",
    "DimensionMismatchError",
    "Environment",
    "EventCondition",
    "GravityModel",
    "InvalidConfigurationError",
    "LogType",
    "NumericalDivergenceError",
    "NumericalSolver",
    "NumericalSolverConfig",
    "PositionDerivative",
    "RealEventCondition",
    "SatelliteDynamics",
    "SatelliteSystem",
    "SatpropError",
    "State",
    "StateDerivativeContributor",
    "StepperType",
    "ThirdBodyGravity",
    "UndefinedModelError",
    "earth",
    "earth_spherical",
    "get_dynamical_equations",
    "moon_spherical",
    "sun_spherical",
]
