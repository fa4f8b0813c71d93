# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Runge-Kutta stepping kernels.

Classic fixed-step RK4 plus embedded pairs (Cash-Karp 5(4), Dormand-Prince
5(4)) with local error estimation and step-size control. Kernels are pure
functions of (t, y, h, deriv_fn); h may be negative for backward stepping.
"""

from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

StateVector = tuple[float, ...]
DerivativeFunction = Callable[[float, StateVector], StateVector]


# --- Fixed step ---

# Classic RK4: each stage is evaluated at y + node * h * k_previous
_RK4_NODES = (0.0, 0.5, 0.5, 1.0)
_RK4_WEIGHTS = np.array([1.0, 2.0, 2.0, 1.0]) / 6.0


def rk4_step(
    t_s: float,
    state: StateVector,
    h: float,
    deriv_fn: DerivativeFunction,
) -> tuple[float, StateVector]:
    """Single classic 4th-order Runge-Kutta step.

    Returns:
        (t_s + h, state after the step)
    """
    y = np.array(state, dtype=np.float64)
    slopes: list[np.ndarray] = []
    k = np.zeros_like(y)
    for node in _RK4_NODES:
        y_stage = tuple((y + node * h * k).tolist())
        k = np.array(deriv_fn(t_s + node * h, y_stage), dtype=np.float64)
        slopes.append(k)

    y_new = y + h * (_RK4_WEIGHTS @ np.array(slopes))
    return (t_s + h, tuple(float(v) for v in y_new))


# --- Embedded pairs ---

@dataclass(frozen=True)
class ButcherTableau:
    """Coefficients of an embedded explicit Runge-Kutta pair.

    b holds the weights of the propagated solution, b_error the
    difference between propagated and embedded weights. error_order is
    the order of the embedded (lower-order) solution.
    """
    name: str
    c: tuple[float, ...]
    a: tuple[tuple[float, ...], ...]
    b: tuple[float, ...]
    b_error: tuple[float, ...]
    error_order: int
    fsal: bool = False

    @property
    def stages(self) -> int:
        return len(self.c)


def _embedded(b_high: tuple[float, ...], b_low: tuple[float, ...]) -> tuple[float, ...]:
    return tuple(hi - lo for hi, lo in zip(b_high, b_low))


_CK_B5 = (37.0 / 378.0, 0.0, 250.0 / 621.0, 125.0 / 594.0, 0.0, 512.0 / 1771.0)
_CK_B4 = (2825.0 / 27648.0, 0.0, 18575.0 / 48384.0, 13525.0 / 55296.0,
          277.0 / 14336.0, 1.0 / 4.0)

CASH_KARP_54 = ButcherTableau(
    name="Runge-Kutta Cash-Karp 5(4)",
    c=(0.0, 1.0 / 5.0, 3.0 / 10.0, 3.0 / 5.0, 1.0, 7.0 / 8.0),
    a=(
        (),
        (1.0 / 5.0,),
        (3.0 / 40.0, 9.0 / 40.0),
        (3.0 / 10.0, -9.0 / 10.0, 6.0 / 5.0),
        (-11.0 / 54.0, 5.0 / 2.0, -70.0 / 27.0, 35.0 / 27.0),
        (1631.0 / 55296.0, 175.0 / 512.0, 575.0 / 13824.0,
         44275.0 / 110592.0, 253.0 / 4096.0),
    ),
    b=_CK_B5,
    b_error=_embedded(_CK_B5, _CK_B4),
    error_order=4,
)

_DP_B5 = (35.0 / 384.0, 0.0, 500.0 / 1113.0, 125.0 / 192.0,
          -2187.0 / 6784.0, 11.0 / 84.0, 0.0)
_DP_B4 = (5179.0 / 57600.0, 0.0, 7571.0 / 16695.0, 393.0 / 640.0,
          -92097.0 / 339200.0, 187.0 / 2100.0, 1.0 / 40.0)

# 7 stages, FSAL: the last row of a equals b, so stage 7 is f(t + h, y_new)
DORMAND_PRINCE_54 = ButcherTableau(
    name="Runge-Kutta Dormand-Prince 5(4)",
    c=(0.0, 1.0 / 5.0, 3.0 / 10.0, 4.0 / 5.0, 8.0 / 9.0, 1.0, 1.0),
    a=(
        (),
        (1.0 / 5.0,),
        (3.0 / 40.0, 9.0 / 40.0),
        (44.0 / 45.0, -56.0 / 15.0, 32.0 / 9.0),
        (19372.0 / 6561.0, -25360.0 / 2187.0, 64448.0 / 6561.0, -212.0 / 729.0),
        (9017.0 / 3168.0, -355.0 / 33.0, 46732.0 / 5247.0, 49.0 / 176.0, -5103.0 / 18656.0),
        _DP_B5[:6],
    ),
    b=_DP_B5,
    b_error=_embedded(_DP_B5, _DP_B4),
    error_order=4,
    fsal=True,
)


@dataclass(frozen=True)
class EmbeddedStep:
    """Outcome of one embedded Runge-Kutta step attempt."""
    t_new: float
    state_new: StateVector
    error_estimate: StateVector
    k_last: Optional[StateVector]


def embedded_rk_step(
    t: float,
    y: StateVector,
    h: float,
    deriv_fn: DerivativeFunction,
    tableau: ButcherTableau,
    k1_in: Optional[StateVector] = None,
) -> EmbeddedStep:
    """Single step of an embedded Runge-Kutta pair.

    Args:
        t: Current time (seconds).
        y: Current state vector.
        h: Step size (seconds), negative for backward stepping.
        deriv_fn: Derivative function f(t, y) -> dy/dt.
        tableau: Embedded pair coefficients.
        k1_in: First stage reused from the previous step (FSAL).

    Returns:
        EmbeddedStep. k_last is f(t + h, y_new) for FSAL tableaus,
        reusable as k1_in of the next step; None otherwise.
    """
    y_arr = np.array(y, dtype=np.float64)
    k_stages: list[np.ndarray] = []

    for i in range(tableau.stages):
        if i == 0:
            k = k1_in if k1_in is not None else deriv_fn(t, y)
        else:
            increment = np.zeros_like(y_arr)
            for a_ij, k_j in zip(tableau.a[i], k_stages):
                if a_ij != 0.0:
                    increment += a_ij * k_j
            y_stage = tuple((y_arr + h * increment).tolist())
            k = deriv_fn(t + tableau.c[i] * h, y_stage)
        k_stages.append(np.array(k, dtype=np.float64))

    k_arr = np.array(k_stages)  # shape (stages, n)
    y_new_arr = y_arr + h * (np.array(tableau.b) @ k_arr)
    e_vec = h * (np.array(tableau.b_error) @ k_arr)

    k_last = tuple(float(v) for v in k_stages[-1]) if tableau.fsal else None

    return EmbeddedStep(
        t_new=t + h,
        state_new=tuple(float(v) for v in y_new_arr),
        error_estimate=tuple(float(v) for v in e_vec),
        k_last=k_last,
    )


# --- Error estimation ---

def error_norm(
    y: StateVector,
    y_new: StateVector,
    error_estimate: StateVector,
    atol: float,
    rtol: float,
) -> float:
    """Weighted RMS error norm for step-size control.

    err = sqrt(1/n * sum_j ((e_j / sc_j)^2))
    where sc_j = atol + rtol * max(|y_j|, |y_new_j|).
    """
    y_arr = np.abs(np.array(y))
    y_new_arr = np.abs(np.array(y_new))
    sc_vec = atol + rtol * np.maximum(y_arr, y_new_arr)
    ratio = np.array(error_estimate) / sc_vec
    return float(np.sqrt(np.mean(ratio * ratio)))


# --- Step-size control ---

def new_step_size(
    h_try: float,
    err: float,
    safety: float,
    error_order: int,
    h_max: float,
) -> float:
    """Proposed step magnitude from the error estimate.

    Growth and shrink factors are clamped to [0.2, 5.0]; the result is
    capped at h_max but not floored, so the caller can detect collapse
    below its minimum step.
    """
    h_abs = abs(h_try)
    if err < 1e-30:
        return min(h_abs * 5.0, h_max)
    factor = min(5.0, max(0.2, safety * err ** (-1.0 / (error_order + 1))))
    return min(h_abs * factor, h_max)
