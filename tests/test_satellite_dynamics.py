# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Tests for the satellite system and the satellite dynamics model."""
from datetime import datetime, timedelta, timezone

import pytest

from satprop.domain.celestial import MOON_NAME, earth_spherical, moon_spherical
from satprop.domain.dynamics import (
    CentralBodyGravity,
    PositionDerivative,
    get_dynamical_equations,
)
from satprop.domain.environment import Environment
from satprop.domain.errors import InvalidConfigurationError
from satprop.domain.satellite_dynamics import SatelliteDynamics, SatelliteSystem
from satprop.domain.state import State


_VECTOR = (7_000_000.0, 0.0, 0.0, 0.0, 7546.05, 0.0)


@pytest.fixture
def epoch():
    return datetime(2021, 3, 20, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def system():
    return SatelliteSystem(mass_kg=100.0, cross_sectional_area_m2=1.0)


@pytest.fixture
def dynamics(epoch, system):
    return SatelliteDynamics(Environment.default(), system, State(_VECTOR, epoch))


class TestSatelliteSystem:

    def test_defaults(self, system):
        assert system.drag_coefficient == 2.2
        assert system.reflectivity_coefficient == 1.2

    def test_area_to_mass(self, system):
        assert system.area_to_mass_ratio == pytest.approx(0.01)

    @pytest.mark.parametrize("kwargs", [
        {"mass_kg": 0.0, "cross_sectional_area_m2": 1.0},
        {"mass_kg": 10.0, "cross_sectional_area_m2": -1.0},
        {"mass_kg": 10.0, "cross_sectional_area_m2": 1.0, "drag_coefficient": -0.1},
        {"mass_kg": 10.0, "cross_sectional_area_m2": 1.0, "reflectivity_coefficient": -0.1},
    ])
    def test_validation(self, kwargs):
        with pytest.raises(InvalidConfigurationError):
            SatelliteSystem(**kwargs)


class TestSatelliteDynamics:

    def test_is_defined(self, dynamics):
        assert dynamics.is_defined()

    def test_wires_position_and_earth_gravity(self, dynamics):
        kinds = [type(c) for c in dynamics.contributors]
        assert kinds == [PositionDerivative, CentralBodyGravity]
        assert dynamics.contributors[1].celestial is dynamics.environment.central_body

    def test_equations_match_manual_wiring(self, dynamics, epoch):
        manual = get_dynamical_equations(
            [PositionDerivative(), CentralBodyGravity(earth_spherical())], epoch,
        )
        assert dynamics.get_dynamical_equations()(10.0, _VECTOR) == manual(10.0, _VECTOR)

    def test_compute_contribution_matches_equations(self, dynamics, epoch):
        assert dynamics.compute_contribution(_VECTOR, epoch) == (
            dynamics.get_dynamical_equations()(0.0, _VECTOR)
        )

    def test_compute_contribution_is_pure(self, dynamics, epoch):
        first = dynamics.compute_contribution(_VECTOR, epoch)
        second = dynamics.compute_contribution(_VECTOR, epoch)
        assert first == second

    def test_nested_as_contributor(self, dynamics, epoch):
        nested = get_dynamical_equations([dynamics], epoch)
        assert nested(0.0, _VECTOR) == dynamics.get_dynamical_equations()(0.0, _VECTOR)

    def test_set_state_moves_epoch(self, dynamics, epoch):
        later = State(_VECTOR, epoch + timedelta(hours=1))
        dynamics.set_state(later)
        assert dynamics.state is later

    def test_requires_earth(self, epoch, system):
        env = Environment([moon_spherical()], central_body_name=MOON_NAME)
        with pytest.raises(InvalidConfigurationError):
            SatelliteDynamics(env, system, State(_VECTOR, epoch))

    def test_equality(self, dynamics, epoch, system):
        other = SatelliteDynamics(Environment.default(), system, State(_VECTOR, epoch))
        assert dynamics == other
        other.set_state(State(_VECTOR, epoch + timedelta(seconds=1)))
        assert dynamics != other

    def test_repr(self, dynamics):
        assert "SatelliteDynamics" in repr(dynamics)
