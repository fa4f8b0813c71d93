# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Port interfaces for the collaborators the dynamics consume.

Domain implementations live in satprop.domain.celestial and
satprop.domain.environment; any object with the same shape works.
"""
from satprop.ports.celestial import CelestialBodyProvider, EnvironmentProvider

__all__ = ["CelestialBodyProvider", "EnvironmentProvider"]
