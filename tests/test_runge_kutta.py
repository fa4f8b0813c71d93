# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Tests for Runge-Kutta stepping kernels and step-size control."""
import math

import pytest

from satprop.domain.runge_kutta import (
    CASH_KARP_54,
    DORMAND_PRINCE_54,
    EmbeddedStep,
    embedded_rk_step,
    error_norm,
    new_step_size,
    rk4_step,
)


def _decay(t, y):
    return (-y[0],)


def _cubic_in_time(t, y):
    return (t ** 3,)


# ── RK4 ───────────────────────────────────────────────────────────

class TestRK4Step:

    def test_exponential_decay_matches_taylor_polynomial(self):
        """RK4 on y' = -y reproduces the 4th-order Taylor polynomial."""
        h = 0.1
        t_new, y_new = rk4_step(0.0, (1.0,), h, _decay)
        expected = 1.0 - h + h ** 2 / 2.0 - h ** 3 / 6.0 + h ** 4 / 24.0
        assert t_new == pytest.approx(h)
        assert y_new[0] == pytest.approx(expected, abs=1e-15)

    def test_exact_for_cubic_quadrature(self):
        _, y_new = rk4_step(0.0, (0.0,), 2.0, _cubic_in_time)
        assert y_new[0] == pytest.approx(4.0, abs=1e-12)

    def test_backward_step(self):
        t_new, y_new = rk4_step(1.0, (math.exp(-1.0),), -0.1, _decay)
        assert t_new == pytest.approx(0.9)
        assert y_new[0] == pytest.approx(math.exp(-0.9), rel=1e-6)

    def test_returns_float_tuple(self):
        _, y_new = rk4_step(0.0, (1.0, 2.0), 0.1, lambda t, y: (0.0, 0.0))
        assert y_new == (1.0, 2.0)
        assert isinstance(y_new, tuple)


# ── Tableaus ──────────────────────────────────────────────────────

@pytest.mark.parametrize("tableau", [CASH_KARP_54, DORMAND_PRINCE_54])
class TestButcherTableau:

    def test_row_sums_equal_nodes(self, tableau):
        for i in range(1, tableau.stages):
            assert sum(tableau.a[i]) == pytest.approx(tableau.c[i], abs=1e-14)

    def test_weights_sum_to_one(self, tableau):
        assert sum(tableau.b) == pytest.approx(1.0, abs=1e-14)

    def test_error_weights_sum_to_zero(self, tableau):
        assert sum(tableau.b_error) == pytest.approx(0.0, abs=1e-14)

    def test_shapes(self, tableau):
        assert len(tableau.a) == tableau.stages
        assert len(tableau.b) == tableau.stages
        assert len(tableau.b_error) == tableau.stages
        assert tableau.error_order == 4


class TestDormandPrinceFsal:

    def test_last_row_equals_weights(self):
        assert DORMAND_PRINCE_54.fsal
        assert DORMAND_PRINCE_54.a[-1] == DORMAND_PRINCE_54.b[:6]

    def test_cash_karp_is_not_fsal(self):
        assert not CASH_KARP_54.fsal


# ── Embedded step ─────────────────────────────────────────────────

class TestEmbeddedStep:

    @pytest.mark.parametrize("tableau", [CASH_KARP_54, DORMAND_PRINCE_54])
    def test_fifth_order_accuracy(self, tableau):
        step = embedded_rk_step(0.0, (1.0,), 0.1, _decay, tableau)
        assert isinstance(step, EmbeddedStep)
        assert step.t_new == pytest.approx(0.1)
        assert step.state_new[0] == pytest.approx(math.exp(-0.1), abs=1e-8)

    @pytest.mark.parametrize("tableau", [CASH_KARP_54, DORMAND_PRINCE_54])
    def test_error_estimate_small_but_nonzero(self, tableau):
        step = embedded_rk_step(0.0, (1.0,), 0.1, _decay, tableau)
        assert 0.0 < abs(step.error_estimate[0]) < 1e-5

    def test_error_estimate_shrinks_with_step(self):
        big = embedded_rk_step(0.0, (1.0,), 0.2, _decay, DORMAND_PRINCE_54)
        small = embedded_rk_step(0.0, (1.0,), 0.1, _decay, DORMAND_PRINCE_54)
        assert abs(small.error_estimate[0]) < abs(big.error_estimate[0])

    def test_fsal_last_stage_is_derivative_at_new_state(self):
        step = embedded_rk_step(0.0, (1.0,), 0.1, _decay, DORMAND_PRINCE_54)
        assert step.k_last[0] == pytest.approx(-step.state_new[0], rel=1e-12)

    def test_non_fsal_has_no_last_stage(self):
        step = embedded_rk_step(0.0, (1.0,), 0.1, _decay, CASH_KARP_54)
        assert step.k_last is None

    def test_reused_first_stage_skips_evaluation(self):
        calls = []

        def counting(t, y):
            calls.append(t)
            return _decay(t, y)

        embedded_rk_step(0.0, (1.0,), 0.1, counting, DORMAND_PRINCE_54)
        fresh = len(calls)
        calls.clear()
        embedded_rk_step(0.0, (1.0,), 0.1, counting, DORMAND_PRINCE_54, k1_in=(-1.0,))
        assert len(calls) == fresh - 1

    def test_backward(self):
        step = embedded_rk_step(0.0, (1.0,), -0.1, _decay, DORMAND_PRINCE_54)
        assert step.t_new == pytest.approx(-0.1)
        assert step.state_new[0] == pytest.approx(math.exp(0.1), abs=1e-8)


# ── Error control ─────────────────────────────────────────────────

class TestErrorNorm:

    def test_zero_error(self):
        assert error_norm((1.0, 2.0), (1.0, 2.0), (0.0, 0.0), 1e-6, 1e-6) == 0.0

    def test_weighted_rms(self):
        """sc = atol + rtol * max(|y|, |y_new|); err = rms(e / sc)."""
        err = error_norm((1.0, 10.0), (2.0, 10.0), (1e-6, 2e-5), 1e-6, 1e-6)
        sc = (1e-6 + 2e-6, 1e-6 + 1e-5)
        expected = math.sqrt(((1e-6 / sc[0]) ** 2 + (2e-5 / sc[1]) ** 2) / 2.0)
        assert err == pytest.approx(expected, rel=1e-12)


class TestNewStepSize:

    def test_zero_error_grows_by_five(self):
        assert new_step_size(10.0, 0.0, 0.9, 4, 600.0) == pytest.approx(50.0)

    def test_capped_at_max(self):
        assert new_step_size(300.0, 0.0, 0.9, 4, 600.0) == pytest.approx(600.0)

    def test_unit_error_applies_safety(self):
        assert new_step_size(10.0, 1.0, 0.9, 4, 600.0) == pytest.approx(9.0)

    def test_shrink_clamped(self):
        assert new_step_size(10.0, 1e12, 0.9, 4, 600.0) == pytest.approx(2.0)

    def test_uses_magnitude(self):
        assert new_step_size(-10.0, 1.0, 0.9, 4, 600.0) == pytest.approx(9.0)

    def test_not_floored(self):
        assert new_step_size(1e-7, 1e12, 0.9, 4, 600.0) == pytest.approx(2e-8)
