# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Port interfaces for celestial bodies and the environment that holds them.
"""
from datetime import datetime
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class CelestialBodyProvider(Protocol):
    """Port for a body with a gravitational parameter and an ephemeris."""

    name: str
    gravitational_parameter: float
    gravity_model: Any

    def is_gravity_defined(self) -> bool:
        """False when the body's gravitational model is undefined."""
        ...

    def position_at(self, epoch: datetime) -> tuple[float, float, float]:
        """Body position (m) in the propagation frame at an epoch."""
        ...

    def gravitational_acceleration(
        self, relative_position: tuple[float, float, float],
    ) -> tuple[float, float, float]:
        """Acceleration (m/s²) at a position relative to the body center."""
        ...


@runtime_checkable
class EnvironmentProvider(Protocol):
    """Port for read-only access to the bodies of a propagation."""

    @property
    def central_body(self) -> CelestialBodyProvider:
        """The body the state is centered on."""
        ...

    def celestial_names(self) -> tuple[str, ...]:
        """Names of all available bodies."""
        ...

    def access_celestial_object_with_name(self, name: str) -> CelestialBodyProvider:
        """Look up a body by name."""
        ...
