# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Numerical integration engine with event-condition termination.

Advances a State along a derivative function f(t, x) with a fixed-step
(RK4) or adaptive embedded (Cash-Karp, Dormand-Prince) scheme, forward or
backward in time. With event conditions, every accepted step is checked
against the previous one; the first condition to fire is localized by
bisection inside that step and the state at the event is returned.

Times handed to derivative functions and conditions are offsets in
seconds from the start state's epoch.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Iterable, Iterator, Optional, Sequence, Union

from satprop.domain.errors import (
    DimensionMismatchError,
    InvalidConfigurationError,
    NumericalDivergenceError,
)
from satprop.domain.event_condition import EventCondition
from satprop.domain.root_solver import RootSolverSolution, bisection
from satprop.domain.runge_kutta import (
    CASH_KARP_54,
    DORMAND_PRINCE_54,
    ButcherTableau,
    embedded_rk_step,
    error_norm,
    new_step_size,
    rk4_step,
)
from satprop.domain.state import State

logger = logging.getLogger(__name__)

StateVector = tuple[float, ...]
DerivativeFunction = Callable[[float, StateVector], StateVector]


# --- Types ---

class StepperType(Enum):
    RUNGE_KUTTA_4 = "Runge-Kutta 4"
    RUNGE_KUTTA_CASH_KARP_54 = "Runge-Kutta Cash-Karp 5(4)"
    RUNGE_KUTTA_DOPRI_5 = "Runge-Kutta Dormand-Prince 5(4)"

    @property
    def is_adaptive(self) -> bool:
        return self is not StepperType.RUNGE_KUTTA_4


class LogType(Enum):
    NO_LOG = "No Log"
    LOG_CONSTANT = "Log Constant"
    LOG_ADAPTIVE = "Log Adaptive"


# datetime arithmetic rounds offsets to whole microseconds
_EPOCH_RESOLUTION_S = 1e-6

_TABLEAUS: dict[StepperType, ButcherTableau] = {
    StepperType.RUNGE_KUTTA_CASH_KARP_54: CASH_KARP_54,
    StepperType.RUNGE_KUTTA_DOPRI_5: DORMAND_PRINCE_54,
}


@dataclass(frozen=True)
class NumericalSolverConfig:
    """Configuration of the integration engine.

    time_step is the fixed step for RK4 and the initial step for the
    adaptive schemes. min_step/max_step bound adaptive steps.
    root_tolerance is the event localization tolerance in seconds. It
    cannot be finer than one microsecond, the resolution of the epochs
    attached to returned states.
    """
    stepper_type: StepperType = StepperType.RUNGE_KUTTA_4
    log_type: LogType = LogType.NO_LOG
    time_step: float = 5.0
    relative_tolerance: float = 1e-12
    absolute_tolerance: float = 1e-12
    min_step: float = 1e-6
    max_step: float = 600.0
    safety_factor: float = 0.9
    root_tolerance: float = 1e-6
    max_root_iterations: int = 100
    max_steps: int = 1_000_000

    def __post_init__(self) -> None:
        if not isinstance(self.stepper_type, StepperType):
            raise InvalidConfigurationError(f"Unknown stepper type: {self.stepper_type!r}")
        if not isinstance(self.log_type, LogType):
            raise InvalidConfigurationError(f"Unknown log type: {self.log_type!r}")
        if not self.time_step > 0:
            raise InvalidConfigurationError(f"time_step must be positive, got {self.time_step}")
        if not (self.relative_tolerance > 0 and self.absolute_tolerance > 0):
            raise InvalidConfigurationError("Tolerances must be positive")
        if not 0 < self.min_step <= self.max_step:
            raise InvalidConfigurationError(
                f"Need 0 < min_step <= max_step, got {self.min_step}, {self.max_step}"
            )
        if not 0 < self.safety_factor <= 1:
            raise InvalidConfigurationError(
                f"safety_factor must be in (0, 1], got {self.safety_factor}"
            )
        if not self.root_tolerance >= _EPOCH_RESOLUTION_S:
            raise InvalidConfigurationError(
                f"root_tolerance must be at least {_EPOCH_RESOLUTION_S} s "
                f"(epoch resolution), got {self.root_tolerance}"
            )
        if self.max_root_iterations < 1 or self.max_steps < 1:
            raise InvalidConfigurationError("Iteration limits must be at least 1")


@dataclass(frozen=True)
class ConditionSolution:
    """Terminal outcome of a propagation with event conditions.

    condition_name is None (and condition_is_satisfied False) when the
    target epoch was reached without any condition firing.
    """
    state: State
    condition_name: Optional[str]
    condition_is_satisfied: bool
    iteration_count: int
    root_solver_has_converged: bool


@dataclass(frozen=True)
class _Step:
    t_prev: float
    y_prev: StateVector
    t: float
    y: StateVector


# --- Helpers ---

def _is_finite(vector: Sequence[float]) -> bool:
    return all(math.isfinite(v) for v in vector)


def _checked(deriv_fn: DerivativeFunction, dimension: int) -> DerivativeFunction:
    """Wrap deriv_fn with dimension and finiteness checks."""

    def checked_fn(t_s: float, x: StateVector) -> StateVector:
        dxdt = tuple(deriv_fn(t_s, x))
        if len(dxdt) != dimension:
            raise DimensionMismatchError(dimension, len(dxdt), "derivative function")
        if not _is_finite(dxdt):
            raise NumericalDivergenceError(
                f"Non-finite derivative at t={t_s} s: {dxdt}"
            )
        return dxdt

    return checked_fn


# --- Engine ---

class NumericalSolver:
    """Integration engine.

    Parameters
    ----------
    config : NumericalSolverConfig, optional
        Stepper, tolerances and logging. Defaults to fixed-step RK4.
    """

    def __init__(self, config: Optional[NumericalSolverConfig] = None) -> None:
        self._config = config if config is not None else NumericalSolverConfig()

    @property
    def config(self) -> NumericalSolverConfig:
        return self._config

    # --- Public API ---

    def integrate_time(
        self,
        start_state: State,
        target_epoch: datetime,
        deriv_fn: DerivativeFunction,
        conditions: Union[EventCondition, Iterable[EventCondition], None] = None,
    ) -> Union[State, ConditionSolution]:
        """Propagate start_state to target_epoch.

        Without conditions, returns the State at target_epoch. With
        conditions (one or an iterable), returns a ConditionSolution: the
        first condition in the given order that fires after an accepted
        step wins, and the state is returned at the localized event
        instant. If none fires, the solution holds the target state and
        condition_name is None.

        Raises:
            NumericalDivergenceError: non-finite values, step collapse
                below min_step, or max_steps exceeded.
            DimensionMismatchError: deriv_fn output length differs from
                the state dimension.
        """
        if conditions is None:
            return self._integrate(start_state, target_epoch, deriv_fn)
        if isinstance(conditions, EventCondition):
            conditions = (conditions,)
        return self._integrate_with_conditions(
            start_state, target_epoch, deriv_fn, tuple(conditions),
        )

    def integrate_times(
        self,
        start_state: State,
        target_epochs: Sequence[datetime],
        deriv_fn: DerivativeFunction,
    ) -> tuple[State, ...]:
        """States at each requested epoch, in the order requested.

        Epochs on each side of the start are visited outward from the
        start, each leg continuing from the previous result.
        """
        results: dict[datetime, State] = {}
        forward = sorted({e for e in target_epochs if e >= start_state.epoch})
        backward = sorted({e for e in target_epochs if e < start_state.epoch}, reverse=True)

        for leg in (forward, backward):
            state = start_state
            for epoch in leg:
                state = self._integrate(state, epoch, deriv_fn)
                results[epoch] = state

        return tuple(results[e] for e in target_epochs)

    # --- Internals ---

    def _integrate(
        self,
        start_state: State,
        target_epoch: datetime,
        deriv_fn: DerivativeFunction,
    ) -> State:
        duration_s = (target_epoch - start_state.epoch).total_seconds()
        if duration_s == 0.0:
            return start_state

        checked_fn = _checked(deriv_fn, start_state.dimension)
        y = start_state.vector
        for step in self._steps(start_state.vector, duration_s, checked_fn):
            y = step.y

        return State(vector=y, epoch=target_epoch, frame=start_state.frame)

    def _integrate_with_conditions(
        self,
        start_state: State,
        target_epoch: datetime,
        deriv_fn: DerivativeFunction,
        conditions: tuple[EventCondition, ...],
    ) -> ConditionSolution:
        y0 = start_state.vector

        # A strict criterion can already hold at the start
        for condition in conditions:
            if condition.is_satisfied(y0, 0.0, y0, 0.0):
                logger.info("Condition %r satisfied at start state", condition.name)
                return ConditionSolution(
                    state=start_state,
                    condition_name=condition.name,
                    condition_is_satisfied=True,
                    iteration_count=0,
                    root_solver_has_converged=True,
                )

        duration_s = (target_epoch - start_state.epoch).total_seconds()
        y = y0
        if duration_s != 0.0:
            checked_fn = _checked(deriv_fn, start_state.dimension)
            for step in self._steps(y0, duration_s, checked_fn):
                y = step.y
                for condition in conditions:
                    if condition.is_satisfied(step.y, step.t, step.y_prev, step.t_prev):
                        return self._localize(start_state, step, condition, checked_fn)

        return ConditionSolution(
            state=State(vector=y, epoch=target_epoch, frame=start_state.frame),
            condition_name=None,
            condition_is_satisfied=False,
            iteration_count=0,
            root_solver_has_converged=True,
        )

    def _localize(
        self,
        start_state: State,
        step: _Step,
        condition: EventCondition,
        deriv_fn: DerivativeFunction,
    ) -> ConditionSolution:
        """Bisect inside the accepted step for the event instant."""
        config = self._config

        def state_at(t: float) -> StateVector:
            if t == step.t:
                return step.y
            if t == step.t_prev:
                return step.y_prev
            return self._single_step(step.t_prev, step.y_prev, t - step.t_prev, deriv_fn)

        def fired(t: float) -> bool:
            return condition.is_satisfied(state_at(t), t, step.y_prev, step.t_prev)

        solution: RootSolverSolution = bisection(
            fired,
            step.t_prev,
            step.t,
            tolerance=config.root_tolerance,
            max_iterations=config.max_root_iterations,
        )
        if not solution.has_converged:
            logger.warning(
                "Root solver did not converge for condition %r after %d iterations",
                condition.name, solution.iteration_count,
            )

        logger.info(
            "Condition %r satisfied at t=%.9f s (%d root iterations)",
            condition.name, solution.root, solution.iteration_count,
        )

        return ConditionSolution(
            state=start_state.with_vector(state_at(solution.root), solution.root),
            condition_name=condition.name,
            condition_is_satisfied=True,
            iteration_count=solution.iteration_count,
            root_solver_has_converged=solution.has_converged,
        )

    def _single_step(
        self,
        t: float,
        y: StateVector,
        h: float,
        deriv_fn: DerivativeFunction,
    ) -> StateVector:
        """One un-controlled step of the configured scheme."""
        stepper_type = self._config.stepper_type
        if stepper_type is StepperType.RUNGE_KUTTA_4:
            _, y_new = rk4_step(t, y, h, deriv_fn)
        else:
            y_new = embedded_rk_step(t, y, h, deriv_fn, _TABLEAUS[stepper_type]).state_new
        return y_new

    def _steps(
        self,
        y0: StateVector,
        duration_s: float,
        deriv_fn: DerivativeFunction,
    ) -> Iterator[_Step]:
        if self._config.stepper_type.is_adaptive:
            return self._adaptive_steps(y0, duration_s, deriv_fn)
        return self._fixed_steps(y0, duration_s, deriv_fn)

    def _accept(self, step: _Step) -> _Step:
        if not _is_finite(step.y):
            raise NumericalDivergenceError(f"Non-finite state at t={step.t} s: {step.y}")
        if self._config.log_type is not LogType.NO_LOG:
            logger.debug("t=%.6f s h=%.6f s state=%s", step.t, step.t - step.t_prev, step.y)
        return step

    def _fixed_steps(
        self,
        y0: StateVector,
        duration_s: float,
        deriv_fn: DerivativeFunction,
    ) -> Iterator[_Step]:
        """Equal sub-steps; the last one lands exactly on duration_s."""
        num_steps = max(1, math.ceil(abs(duration_s) / self._config.time_step - 1e-12))
        if num_steps > self._config.max_steps:
            raise NumericalDivergenceError(
                f"{num_steps} steps needed, more than max_steps={self._config.max_steps}"
            )
        h = duration_s / num_steps

        t, y = 0.0, y0
        for i in range(num_steps):
            t_next = duration_s if i == num_steps - 1 else (i + 1) * h
            _, y_next = rk4_step(t, y, t_next - t, deriv_fn)
            yield self._accept(_Step(t_prev=t, y_prev=y, t=t_next, y=y_next))
            t, y = t_next, y_next

    def _adaptive_steps(
        self,
        y0: StateVector,
        duration_s: float,
        deriv_fn: DerivativeFunction,
    ) -> Iterator[_Step]:
        """Error-controlled steps of an embedded pair.

        A rejected step at min_step means the tolerance cannot be met:
        that is reported as divergence rather than accepting the step.
        """
        config = self._config
        tableau = _TABLEAUS[config.stepper_type]
        sign = 1.0 if duration_s > 0.0 else -1.0
        t_end = duration_s

        t, y = 0.0, y0
        h_abs = max(config.min_step, min(config.time_step, config.max_step))
        k1: Optional[StateVector] = None
        accepted = 0
        rejected = 0

        while sign * (t_end - t) > 0.0:
            if accepted + rejected >= config.max_steps:
                raise NumericalDivergenceError(
                    f"Exceeded max_steps={config.max_steps} at t={t} s"
                )

            remaining = abs(t_end - t)
            h_try = min(h_abs, remaining)
            last = h_try == remaining

            trial = embedded_rk_step(t, y, sign * h_try, deriv_fn, tableau, k1)
            err = error_norm(y, trial.state_new, trial.error_estimate,
                             config.absolute_tolerance, config.relative_tolerance)

            if err <= 1.0:
                t_new = t_end if last else trial.t_new
                step = self._accept(_Step(t_prev=t, y_prev=y, t=t_new, y=trial.state_new))
                accepted += 1
                t, y = t_new, trial.state_new
                k1 = trial.k_last
                h_abs = max(config.min_step,
                            new_step_size(h_try, err, config.safety_factor,
                                          tableau.error_order, config.max_step))
                yield step
                continue

            rejected += 1
            if h_try <= config.min_step:
                raise NumericalDivergenceError(
                    f"Step size collapsed below min_step={config.min_step} s at t={t} s "
                    f"(error norm {err:.3e})"
                )
            h_new = new_step_size(h_try, err, config.safety_factor,
                                  tableau.error_order, config.max_step)
            if config.log_type is LogType.LOG_ADAPTIVE:
                logger.debug("Rejected step at t=%.6f s: h %.6f -> %.6f s (err %.3e)",
                             t, h_try, h_new, err)
            h_abs = max(config.min_step, h_new)
