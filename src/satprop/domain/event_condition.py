# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Event conditions evaluated along a trajectory.

A condition compares a scalar function of the state at two adjacent
samples (previous, current). Conditions keep no memory between calls:
the caller must pass samples from consecutive accepted integration
steps, otherwise crossing checks give plausible but wrong answers.
"""

from enum import Enum
from typing import Callable, Optional, Protocol, Sequence, runtime_checkable

from satprop.domain.errors import InvalidConfigurationError

Evaluator = Callable[[Sequence[float], float], float]


class Criteria(Enum):
    """How the scalar value is compared with the target."""
    POSITIVE_CROSSING = "Positive Crossing"
    NEGATIVE_CROSSING = "Negative Crossing"
    ANY_CROSSING = "Any Crossing"
    STRICTLY_POSITIVE = "Strictly Positive"
    STRICTLY_NEGATIVE = "Strictly Negative"

    def __str__(self) -> str:
        return self.value


@runtime_checkable
class EventCondition(Protocol):
    """Structural typing port for anything that can stop a propagation."""

    @property
    def name(self) -> str: ...

    def is_satisfied(
        self,
        current_state_vector: Sequence[float],
        current_time: float,
        previous_state_vector: Sequence[float],
        previous_time: float,
    ) -> bool: ...


class RealEventCondition:
    """Condition on one real-valued function of (state vector, time).

    Args:
        name: Identifier reported when the condition fires.
        criteria: Comparison applied to (f_prev, f_curr).
        evaluator: f(state_vector, time) -> float.
        target: Threshold the value is compared against.
    """

    def __init__(
        self,
        name: str,
        criteria: Criteria,
        evaluator: Evaluator,
        target: float = 0.0,
    ) -> None:
        if not isinstance(criteria, Criteria):
            raise InvalidConfigurationError(f"Unknown criteria: {criteria!r}")
        self._name = name
        self._criteria = criteria
        self._evaluator = evaluator
        self._target = float(target)

    @property
    def name(self) -> str:
        return self._name

    @property
    def criteria(self) -> Criteria:
        return self._criteria

    @property
    def target(self) -> float:
        return self._target

    def evaluate(self, state_vector: Sequence[float], time: float) -> float:
        """Signed distance of the evaluated value from the target."""
        return float(self._evaluator(state_vector, time)) - self._target

    def is_satisfied(
        self,
        current_state_vector: Sequence[float],
        current_time: float,
        previous_state_vector: Sequence[float],
        previous_time: float,
    ) -> bool:
        target = self._target
        f_curr = float(self._evaluator(current_state_vector, current_time))

        if self._criteria is Criteria.STRICTLY_POSITIVE:
            return f_curr > target
        if self._criteria is Criteria.STRICTLY_NEGATIVE:
            return f_curr < target

        f_prev = float(self._evaluator(previous_state_vector, previous_time))
        upward = f_prev < target <= f_curr
        downward = f_prev > target >= f_curr

        if self._criteria is Criteria.POSITIVE_CROSSING:
            return upward
        if self._criteria is Criteria.NEGATIVE_CROSSING:
            return downward
        return upward or downward

    def __repr__(self) -> str:
        return (f"RealEventCondition(name={self._name!r}, criteria={self._criteria}, "
                f"target={self._target})")


class ConjunctiveCondition:
    """Logical AND over event conditions.

    Members receive the same (current, previous) samples. Members may
    themselves be conjunctions.
    """

    def __init__(
        self,
        conditions: Sequence[EventCondition],
        name: Optional[str] = None,
    ) -> None:
        conditions = tuple(conditions)
        if not conditions:
            raise InvalidConfigurationError(
                "ConjunctiveCondition requires at least one event condition"
            )
        self._conditions = conditions
        self._name = name if name is not None else " & ".join(c.name for c in conditions)

    @property
    def name(self) -> str:
        return self._name

    @property
    def conditions(self) -> tuple[EventCondition, ...]:
        return self._conditions

    def is_satisfied(
        self,
        current_state_vector: Sequence[float],
        current_time: float,
        previous_state_vector: Sequence[float],
        previous_time: float,
    ) -> bool:
        return all(
            condition.is_satisfied(
                current_state_vector, current_time,
                previous_state_vector, previous_time,
            )
            for condition in self._conditions
        )

    def __repr__(self) -> str:
        return f"ConjunctiveCondition(name={self._name!r}, conditions={list(self._conditions)!r})"
