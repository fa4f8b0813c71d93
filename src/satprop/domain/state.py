# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Immutable time-stamped state vector."""

from dataclasses import dataclass
from datetime import datetime, timedelta

from satprop.domain.errors import InvalidConfigurationError


@dataclass(frozen=True)
class State:
    """Fixed-dimension real vector at an epoch, in a named reference frame.

    The first six components are conventionally position (m) and
    velocity (m/s). Extra components are carried through untouched by
    contributors that do not know about them.
    """
    vector: tuple[float, ...]
    epoch: datetime
    frame: str = "GCRF"

    def __post_init__(self) -> None:
        vector = tuple(float(v) for v in self.vector)
        if not vector:
            raise InvalidConfigurationError("State vector must not be empty")
        if self.epoch.tzinfo is None:
            raise InvalidConfigurationError("State epoch must be timezone-aware")
        object.__setattr__(self, "vector", vector)

    @property
    def dimension(self) -> int:
        return len(self.vector)

    @property
    def position(self) -> tuple[float, float, float]:
        x, y, z = self.vector[0:3]
        return (x, y, z)

    @property
    def velocity(self) -> tuple[float, float, float]:
        vx, vy, vz = self.vector[3:6]
        return (vx, vy, vz)

    def with_vector(self, vector: tuple[float, ...], offset_s: float = 0.0) -> "State":
        """New state in the same frame, offset_s seconds after this one."""
        return State(
            vector=vector,
            epoch=self.epoch + timedelta(seconds=offset_s),
            frame=self.frame,
        )
