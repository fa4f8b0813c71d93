# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Tests for bisection on a boolean transition."""
import pytest

from satprop.domain.errors import ConditionContractError, InvalidConfigurationError
from satprop.domain.root_solver import RootSolverSolution, bisection


class TestBisection:

    def test_forward_bracket(self):
        solution = bisection(lambda t: t >= 0.3, 0.0, 1.0, tolerance=1e-9)
        assert isinstance(solution, RootSolverSolution)
        assert solution.root == pytest.approx(0.3, abs=1e-9)
        assert solution.has_converged
        assert solution.iteration_count > 0

    def test_root_on_satisfied_side(self):
        solution = bisection(lambda t: t > 0.3, 0.0, 1.0, tolerance=1e-9)
        assert solution.root > 0.3

    def test_backward_bracket(self):
        """Upper end below lower end when integrating backward."""
        solution = bisection(lambda t: t <= -0.3, 0.0, -1.0, tolerance=1e-9)
        assert solution.root == pytest.approx(-0.3, abs=1e-9)
        assert solution.root <= -0.3

    def test_iteration_count_matches_halvings(self):
        solution = bisection(lambda t: t >= 0.5, 0.0, 1.0, tolerance=1.0 / 1024.0)
        assert solution.iteration_count == 10

    def test_not_converged_when_iterations_exhausted(self):
        solution = bisection(lambda t: t >= 0.3, 0.0, 1.0, tolerance=1e-12, max_iterations=5)
        assert not solution.has_converged
        assert solution.iteration_count == 5
        assert solution.root >= 0.3

    def test_satisfied_at_lower_end(self):
        with pytest.raises(ConditionContractError):
            bisection(lambda t: True, 0.0, 1.0, tolerance=1e-6)

    def test_not_satisfied_at_upper_end(self):
        with pytest.raises(ConditionContractError):
            bisection(lambda t: False, 0.0, 1.0, tolerance=1e-6)

    def test_contract_error_is_configuration_error(self):
        assert issubclass(ConditionContractError, InvalidConfigurationError)
