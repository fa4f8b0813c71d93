# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Read-only collection of celestial bodies with a designated central body."""

from typing import Iterable, Optional

from satprop.domain.celestial import (
    EARTH_NAME,
    CelestialBody,
    earth_spherical,
    moon_spherical,
    sun_spherical,
)
from satprop.domain.errors import InvalidConfigurationError


class Environment:
    """Celestial bodies available to a propagation.

    The environment is never mutated by the dynamics; contributors only
    look bodies up by name.
    """

    def __init__(
        self,
        bodies: Iterable[CelestialBody],
        central_body_name: str = EARTH_NAME,
    ) -> None:
        self._bodies: dict[str, CelestialBody] = {}
        for body in bodies:
            if body.name in self._bodies:
                raise InvalidConfigurationError(
                    f"Duplicate celestial object name: {body.name!r}"
                )
            self._bodies[body.name] = body
        if central_body_name not in self._bodies:
            raise InvalidConfigurationError(
                f"Central body {central_body_name!r} is not part of the environment"
            )
        self._central_body_name = central_body_name

    @classmethod
    def default(cls) -> "Environment":
        """Earth (central), Moon and Sun, all spherical."""
        return cls([earth_spherical(), moon_spherical(), sun_spherical()])

    @property
    def central_body(self) -> CelestialBody:
        return self._bodies[self._central_body_name]

    def celestial_names(self) -> tuple[str, ...]:
        return tuple(self._bodies)

    def has_object_with_name(self, name: str) -> bool:
        return name in self._bodies

    def access_celestial_object_with_name(self, name: str) -> CelestialBody:
        body: Optional[CelestialBody] = self._bodies.get(name)
        if body is None:
            raise InvalidConfigurationError(
                f"No celestial object named {name!r} in environment"
            )
        return body

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Environment):
            return NotImplemented
        return (self._bodies == other._bodies
                and self._central_body_name == other._central_body_name)

    def __repr__(self) -> str:
        names = ", ".join(self._bodies)
        return f"Environment([{names}], central={self._central_body_name!r})"
